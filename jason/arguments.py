"""
jason arguments: the compact argument grammar.

Overview
- parse(token, type=..., collection=..., split=..., format=...) -> Argument
  • scans one token left to right (no backtracking across segments) and
    returns an immutable descriptor; ambient defaults fill what the token omits.
- Argument: read-only descriptor
  • token, splat, key, key_flags, type, collection, attributes, value,
    value_flags.

Grammar (segments in order, all optional)
    [...] [flags] [@] key [flags] [:type [collection] [/attrs/]] [flags] [=value | @ref]

- splat: exactly "..." (paths like "./x" and "../x" are not splats).
- flags: "+" strict, "~" empty-when-unbound, "?" omit when unbound, "??" also
  omit when empty. Repeats saturate.
- key: literal text, "@name" variable, "@/path" "@./path" "@../path" "@-" file.
  Doubled "::", "==" and "@@" are literal; a leading "=" escapes the first
  character.
- type: auto, bool, false, json, null, number, raw, string, true.
- collection: "[]" or "[c]" (array, split on c), "{}", "{c}", "{:fmt}",
  "{c:fmt}" (object; fmt is "json" or "attrs").
- attributes: "/key=value,key=value/" with ",," and "==" escapes; keys are
  type, collection, split and format.

Examples
- "size:number=42"      key 'size', number, literal '42'
- "@name"               key and value from the variable 'name'
- "...@extra:{}"        splat the members of the object variable 'extra'
- "tags:[,]=a,b"        array of strings split on ','
- "?opt@OPT"            omitted when OPT is unset
"""
from collections import namedtuple

from .faults import ArgumentSyntaxError, FaultCode
from .references import Reference, STDIN
from .utils import StorageGuard, Unset, coalesce, view

TYPES = ("auto", "bool", "false", "json", "null", "number", "raw", "string", "true")
COLLECTIONS = ("scalar", "array", "object")
FORMATS = ("json", "attrs")
ATTRIBUTES = ("type", "collection", "split", "format")

FLAGS = "+~?"
TERMINATORS = ":=@"
FILE_PREFIXES = ("/", "./", "../")

Flags = namedtuple("Flags", ("empty", "strict", "no"))
Collection = namedtuple("Collection", ("kind", "split", "format"))

NOFLAGS = Flags(False, False, 0)
SCALAR = Collection("scalar", None, None)


class Argument(StorageGuard):
    """
    immutable argument descriptor produced by parse().

    fields
    - token: the source token.
    - splat: True for "..." arguments.
    - key: Reference; kind "literal", "variable" or "file".
    - key_flags / value_flags: Flags(empty, strict, no).
    - type: one of TYPES.
    - collection: Collection(kind, split, format).
    - attributes: read-only mapping of the /k=v/ attributes as written.
    - value: Reference, or None when the token has no value segment.
    """
    __fields__ = (
        "token", "splat", "key", "key_flags", "type",
        "collection", "attributes", "value", "value_flags",
    )

    token = view("token")
    splat = view("splat")
    key = view("key")
    key_flags = view("key_flags")
    type = view("type")
    collection = view("collection")
    attributes = view("attributes")
    value = view("value")
    value_flags = view("value_flags")

    def __new__(cls, token, /, **fields):
        if missing := set(cls.__fields__[1:]) - fields.keys():
            raise TypeError(f"missing argument fields: {", ".join(sorted(missing))}")
        with super().__new__(cls) as self:
            setattr(self, "-token", token)
            for name in cls.__fields__[1:]:
                setattr(self, "-" + name, fields[name])
        return self

    def __eq__(self, other):
        if not isinstance(other, Argument):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name in self.__fields__)

    def __hash__(self):
        return hash(self.token)

    def __rich_repr__(self):
        for name in self.__fields__:
            yield name, getattr(self, name)

    def __repr__(self):
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.__fields__)
        return f"argument({fields})"


def _fault(token, code, message, fragment=Unset):
    if fragment is not Unset:
        message = f"{message} {fragment!r}"
    return ArgumentSyntaxError(f"{message} in argument {token!r}", code=code, token=token)


def _flags(token, index):
    """consume a run of flag characters starting at index."""
    end = index
    while end < len(token) and token[end] in FLAGS:
        end += 1
    return _combine(token[index:end]), end


def _combine(run):
    if not run:
        return NOFLAGS
    return Flags(empty="~" in run, strict="+" in run, no=min(run.count("?"), 2))


def _reference(kind, text):
    if kind == "variable" and (text.startswith(FILE_PREFIXES) or text in STDIN):
        return Reference("file", text)
    return Reference(kind, text)


def _key(token, index):
    """
    scan the key segment.

    returns (reference, trailing flag run, index of the terminator or len(token)).
    """
    chars = []
    floor = 0
    kind = "literal"

    if token.startswith("=", index) and index + 1 < len(token):
        chars.append(token[index + 1])
        index += 2
        floor = 1
    elif token.startswith("@", index) and not token.startswith("@@", index):
        kind = "variable"
        index += 1

    while index < len(token):
        char = token[index]
        if char in TERMINATORS:
            if token.startswith(char, index + 1):
                chars.append(char)
                index += 2
                continue
            break
        chars.append(char)
        index += 1

    # flags right before "=" or "@" belong to the value
    run = []
    if index < len(token) and token[index] in "=@":
        while len(chars) > floor and chars[-1] in FLAGS:
            run.append(chars.pop())

    return _reference(kind, "".join(chars)), "".join(reversed(run)), index


def _collection(token, index):
    """scan "[...]" or "{...}" at index; returns (kind, split, format, index)."""
    opener = token[index]
    closer = "]" if opener == "[" else "}"
    end = token.find(closer, index + 1)
    # "[]]" splits on "]"
    if opener == "[" and end == index + 1 and token.startswith("]", end + 1):
        end += 1
    if end < 0:
        raise _fault(token, FaultCode.MALFORMED_COLLECTION, "unterminated collection marker", token[index:])

    body = token[index + 1:end]
    if opener == "[":
        if len(body) > 1:
            raise _fault(token, FaultCode.MALFORMED_COLLECTION, "malformed array marker", token[index:end + 1])
        return "array", body or None, Unset, end + 1

    separator, colon, format = body.partition(":")
    if len(separator) > 1:
        raise _fault(token, FaultCode.MALFORMED_COLLECTION, "malformed object marker", token[index:end + 1])
    if colon and format and format not in FORMATS:
        raise _fault(token, FaultCode.UNKNOWN_FORMAT, "unrecognized object format", format)
    return "object", separator or None, (format or None) if colon else Unset, end + 1


def _attributes(token, body):
    """parse "k=v,k=v" with ",," and "==" escapes into a dict."""
    attributes = {}
    if not body:
        return attributes

    current = []
    name = None

    def finish():
        if name is None:
            raise _fault(token, FaultCode.MALFORMED_ATTRIBUTES, "attribute without a value", "".join(current))
        if name not in ATTRIBUTES:
            raise _fault(token, FaultCode.UNKNOWN_ATTRIBUTE, "unrecognized attribute", name)
        attributes[name] = "".join(current)

    index = 0
    while index < len(body):
        char = body[index]
        if char in ",=" and body.startswith(char, index + 1):
            current.append(char)
            index += 2
            continue
        if char == "=" and name is None:
            name, current = "".join(current), []
        elif char == ",":
            finish()
            name, current = None, []
        else:
            current.append(char)
        index += 1

    finish()
    return attributes


def _check_attributes(token, attributes):
    if (type := attributes.get("type")) is not None and type not in TYPES:
        raise _fault(token, FaultCode.UNKNOWN_TYPE, "unrecognized type name", type)
    if (kind := attributes.get("collection")) is not None and kind not in COLLECTIONS:
        raise _fault(token, FaultCode.MALFORMED_ATTRIBUTES, "unrecognized collection", kind)
    if (split := attributes.get("split")) is not None and len(split) > 1:
        raise _fault(token, FaultCode.MALFORMED_ATTRIBUTES, "split must be a single character, not", split)
    if (format := attributes.get("format")) and format not in FORMATS:
        raise _fault(token, FaultCode.UNKNOWN_FORMAT, "unrecognized object format", format)


def parse(token, /, *, type="string", collection="scalar", split=None, format=None):
    """
    Parse one argument token.

    Parameters
    - token: the argument text.
    - type, collection, split, format: ambient defaults for what the token does
      not specify (collection is a kind name or a Collection).

    Returns
    - Argument

    Raises
    - ArgumentSyntaxError naming the token and the offending substring.
    """
    if not isinstance(token, str):
        raise TypeError(f"argument token must be a string, not {token.__class__.__name__}")
    if isinstance(collection, Collection):
        collection, split, format = collection.kind, split or collection.split, format or collection.format

    index = 0

    # splat
    dots = len(token) - len(token.lstrip("."))
    splat = False
    if dots and not (dots <= 2 and token.startswith("/", dots)):
        if dots != 3:
            raise _fault(token, FaultCode.MALFORMED_SPLAT, "splat operator must be '...', not", token[:dots])
        splat = True
        index = 3

    key_flags, index = _flags(token, index)
    key, run, index = _key(token, index)

    kind, marker_split, marker_format = Unset, None, Unset
    parsed_type = Unset
    attributes = {}

    if token.startswith(":", index):
        index += 1
        start = index
        while index < len(token) and (token[index].isalnum() or token[index] == "_"):
            index += 1
        if name := token[start:index]:
            if name not in TYPES:
                raise _fault(token, FaultCode.UNKNOWN_TYPE, "unrecognized type name", name)
            parsed_type = name

        if token.startswith(("[", "{"), index):
            kind, marker_split, marker_format, index = _collection(token, index)

        if token.startswith("/", index):
            end = token.find("/", index + 1)
            if end < 0:
                raise _fault(token, FaultCode.MALFORMED_ATTRIBUTES, "unterminated attributes", token[index:])
            attributes = _attributes(token, token[index + 1:end])
            _check_attributes(token, attributes)
            index = end + 1

        value_flags, index = _flags(token, index)
    else:
        value_flags = _combine(run)

    value = None
    if index < len(token):
        match token[index]:
            case "=":
                value = Reference("literal", token[index + 1:])
            case "@":
                value = _reference("variable", token[index + 1:])
            case _:
                raise _fault(token, FaultCode.UNPARSED_TOKEN, "unexpected text", token[index:])
    elif value_flags != NOFLAGS:
        raise _fault(token, FaultCode.UNPARSED_TOKEN, "flags without a value", token[index - 1:])

    # attributes override the markers, markers override the ambient defaults
    type = attributes.get("type") or coalesce(parsed_type, type)
    kind = attributes.get("collection") or coalesce(kind, collection)
    split = attributes["split"] or None if "split" in attributes else marker_split or split
    format = attributes["format"] or None if "format" in attributes else coalesce(marker_format, format)

    return Argument(
        token,
        splat=splat,
        key=key,
        key_flags=key_flags,
        type=type,
        collection=Collection(kind, split, format),
        attributes=attributes,
        value=value,
        value_flags=value_flags,
    )


__all__ = (
    "TYPES",
    "COLLECTIONS",
    "FORMATS",
    "ATTRIBUTES",
    "Flags",
    "Collection",
    "NOFLAGS",
    "SCALAR",
    "Argument",
    "parse",
)
