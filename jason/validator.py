r"""
jason validator: structural JSON well-formedness checks.

Overview
- validate(*values, type="json", collection=None) -> bool
  • True only when every value is exactly one well-formed JSON value, optionally
    constrained to a sub-type, or to a container whose direct members all
    satisfy the sub-type.
- accepts(value, type="json", collection=None) -> bool
  • the single-value form used by the encoders.

Algorithm
- One left-to-right scan. A compiled regex recognises the next token (string,
  number, literal or punctuation, with leading insignificant whitespace) and a
  small state machine with an explicit container stack decides whether the
  token may appear here. No parse tree is built and nothing recurses, so the
  nesting depth is only bounded by memory for the stack of open brackets.

Sub-types
- "string", "number", "bool" (true|false), "true", "false", "null",
  "json" (any value).

Rejected input (examples)
- trailing garbage after a complete value ............ '{"a":1} x'
- unbalanced or mismatched brackets ................... '[1}', '{"a":[1}'
- unquoted object keys ................................ '{a:1}'
- invalid escapes / raw control characters ............ '"\q"', '"\x01"'
- several top-level values ............................ '1 2'
- trailing commas ..................................... '[1,]'
"""
import re
from collections.abc import Iterable

# Number grammar shared with the encoders; a fraction needs at least one digit.
NUMBER = r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?"

_TOKEN = re.compile(rf"""
    [ \t\r\n]*
    (?:
        (?P<string>"(?:[^"\\\x00-\x1f]|\\["\\/bfnrt]|\\u[0-9a-fA-F]{{4}})*")
      | (?P<number>{NUMBER})
      | (?P<true>true)
      | (?P<false>false)
      | (?P<null>null)
      | (?P<open>[\[{{])
      | (?P<close>[\]}}])
      | (?P<comma>,)
      | (?P<colon>:)
    )
""", re.VERBOSE)
_WHITESPACE = re.compile(r"[ \t\r\n]*")

# kinds accepted by each sub-type (None accepts anything)
SUBTYPES = {
    "string": frozenset({"string"}),
    "number": frozenset({"number"}),
    "bool": frozenset({"true", "false"}),
    "true": frozenset({"true"}),
    "false": frozenset({"false"}),
    "null": frozenset({"null"}),
    "json": None,
}
COLLECTIONS = ("array", "object")

# scanner states
_VALUE = 0            # a value must follow (start, after ':' or after ',' in an array)
_VALUE_OR_CLOSE = 1   # right after '['
_KEY_OR_CLOSE = 2     # right after '{'
_KEY = 3              # after ',' in an object
_COLON = 4            # after an object key
_NEXT = 5             # after a member: ',' or a closing bracket
_DONE = 6             # top-level value complete

_CLOSERS = {"[": "]", "{": "}"}


def _scan(text):
    """
    scan one JSON text.

    returns
    - (kind, members) when text holds exactly one value; kind is one of
      "string", "number", "true", "false", "null", "array", "object" and
      members lists the kinds of the direct members of a top-level container.
    - None when the text is not well-formed.
    """
    stack = []
    members = []
    kind = None
    state = _VALUE
    position = 0

    while match := _TOKEN.match(text, position):
        position = match.end()
        group = match.lastgroup

        if group in ("string", "number", "true", "false", "null", "open"):
            if group == "string" and state in (_KEY_OR_CLOSE, _KEY):
                state = _COLON
                continue
            if state not in (_VALUE, _VALUE_OR_CLOSE):
                return None

            found = group
            if group == "open":
                bracket = match["open"]
                found = "array" if bracket == "[" else "object"

            if len(stack) == 1:
                members.append(found)
            elif not stack:
                kind = found

            if group == "open":
                stack.append(bracket)
                state = _VALUE_OR_CLOSE if bracket == "[" else _KEY_OR_CLOSE
            else:
                state = _NEXT if stack else _DONE

        elif group == "close":
            bracket = match["close"]
            if not stack or _CLOSERS[stack[-1]] != bracket:
                return None
            if not (
                state == _NEXT or
                (state == _VALUE_OR_CLOSE and bracket == "]") or
                (state == _KEY_OR_CLOSE and bracket == "}")
            ):
                return None
            stack.pop()
            state = _NEXT if stack else _DONE

        elif group == "comma":
            if state != _NEXT:
                return None
            state = _VALUE if stack[-1] == "[" else _KEY

        else:  # colon
            if state != _COLON:
                return None
            state = _VALUE

    if state != _DONE or _WHITESPACE.match(text, position).end() != len(text):
        return None
    return kind, members


def _check(type, collection):
    if type not in SUBTYPES:
        raise ValueError(f"validator type must be one of {", ".join(SUBTYPES)}, not {type!r}")
    if collection is not None and collection not in COLLECTIONS:
        raise ValueError(f"validator collection must be 'array', 'object' or None, not {collection!r}")


def accepts(value, /, type="json", collection=None):
    """
    Return True when `value` (str or UTF-8 bytes) is one well-formed JSON value
    satisfying the sub-type/collection constraint.
    """
    _check(type, collection)
    if isinstance(value, bytes | bytearray):
        try:
            value = value.decode("utf-8")
        except UnicodeDecodeError:
            return False
    if not isinstance(value, str):
        raise TypeError(f"accepts() argument must be a string or bytes, not {value.__class__.__name__}")

    if (scanned := _scan(value)) is None:
        return False
    kind, members = scanned
    allowed = SUBTYPES[type]

    if collection is None:
        return allowed is None or kind in allowed
    if kind != collection:
        return False
    return allowed is None or all(member in allowed for member in members)


def _flatten(values):
    for value in values:
        if isinstance(value, str | bytes | bytearray):
            yield value
        elif isinstance(value, Iterable):
            yield from _flatten(value)
        else:
            raise TypeError(f"validate() values must be strings, bytes or collections of them, not {value.__class__.__name__}")


def validate(*values, type="json", collection=None):
    """
    Validate one or more JSON texts.

    Parameters
    - *values: str | bytes, or collections of them (flattened in order).
    - type: sub-type every value (or every container member) must satisfy.
    - collection: None, "array" or "object"; when given each value must be a
      container of that kind whose direct members satisfy `type`.

    Returns
    - True when every value is accepted, False otherwise (no partial results).
      Calling with no values at all returns False.

    Examples
    - validate('{"foo":1}') -> True
    - validate('{"foo":}') -> False
    - validate('[1,2]', type="number", collection="array") -> True
    """
    _check(type, collection)
    values = list(_flatten(values))
    return bool(values) and all(accepts(value, type, collection) for value in values)


__all__ = (
    "NUMBER",
    "SUBTYPES",
    "accepts",
    "validate",
)
