"""
jason streams: assemble argument tokens into one JSON object or array.

Overview
- generate(tokens, **settings) -> Iterator[str]
  • parses every token up front (syntax errors surface before any output),
    then yields output chunks in declaration order.
- encode(tokens, **settings) -> str
  • buffered: the whole JSON text, or an exception and nothing at all.
- emit(tokens, file=sys.stdout, *, stream=False, callback=None, **settings)
  • writes the JSON text plus a newline to a text stream or a list sink.
  • stream=True writes chunks as soon as they are ready; when a failure
    interrupts a stream that already produced output, the Cancel control
    character (U+0018) is written so consumers cannot mistake the partial
    output for a complete document.

Settings
- shape: "object" (default) or "array".
- type, collection, split, format: ambient argument defaults.
- strict: default strictness for references (default False).
- env: variable mapping (default os.environ).
- defaults: name of a preset (or a Preset) whose settings apply first.
- join: entry separator, "," with optional surrounding whitespace.
- chunk_size: characters per read of streamed file values.
- batch_size: collection elements encoded per emitted chunk.
- stdin: stream for "-" file references (default sys.stdin).

Entries
- object shape: '"key":value'; array shape: 'value'.
- "..." splices array elements into an array, or merges object members into
  an object.
- "?" omits an entry whose reference is unbound, "??" also one whose value is
  empty.
"""
import copy
import itertools
import logging
import os
import re
import sys
from collections.abc import MutableSequence

from .arguments import parse
from .defaults import Preset, normalize, resolve as preset
from .encoders import encode as encode_values, encode_raws, encode_strings, escape
from .faults import (
    ArgumentSyntaxError,
    ConfigurationError,
    EncodingError,
    FaultCode,
    JasonException,
)
from .references import Reference, basename, describe, iterate, read_chunks, resolve
from .utils import Unset, coalesce, isatty, ordinal
from .validator import accepts

logger = logging.getLogger(__name__)

CANCEL = "\x18"
CANCEL_GLYPH = "␘"

# types whose values are kept byte-for-byte
UNTRIMMED = ("string", "raw")
# types that supply their own value when the token has none
LITERALS = ("true", "false", "null")
# types that constrain the members of JSON-format objects
CONSTRAINING = ("number", "bool", "true", "false", "null")

_JOIN = re.compile(r"[ \t\r\n]*,[ \t\r\n]*")
_WHITESPACE = " \t\r\n"

_DEFAULTS = {
    "shape": "object",
    "type": "string",
    "collection": "scalar",
    "split": None,
    "format": None,
    "strict": False,
}


def configure(*, shape=Unset, type=Unset, collection=Unset, split=Unset, format=Unset, strict=Unset,
              env=Unset, defaults=Unset, join=",", chunk_size=8192, batch_size=256, stdin=Unset):
    """
    merge built-in defaults, a preset and explicit settings into one context.

    raises ConfigurationError for unknown presets and invalid values.
    """
    context = dict(_DEFAULTS)
    if defaults is not Unset and defaults is not None:
        context |= (defaults if isinstance(defaults, Preset) else preset(defaults)).settings

    explicit = {
        "shape": shape,
        "type": type,
        "collection": collection,
        "split": split,
        "format": format,
        "strict": strict,
    }
    context |= normalize({key: value for key, value in explicit.items() if value is not Unset})

    if not isinstance(join, str) or not _JOIN.fullmatch(join):
        raise ConfigurationError(
            f"invalid entry separator {join!r}",
            code=FaultCode.INVALID_SETTING,
            hint="use ',' with optional whitespace around it",
        )
    for name, size in (("chunk_size", chunk_size), ("batch_size", batch_size)):
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise ConfigurationError(f"{name} must be a positive integer, not {size!r}", code=FaultCode.INVALID_SETTING)

    return context | {
        "env": coalesce(env, os.environ),
        "join": join,
        "chunk_size": chunk_size,
        "batch_size": batch_size,
        "stdin": stdin,
    }


def _strict(flags, context):
    return flags.strict or (context["strict"] and not flags.empty)


def _options(flags, context):
    return {
        "env": context["env"],
        "strict": _strict(flags, context),
        "optional": flags.no >= 1,
        "stdin": context["stdin"],
        "chunk_size": context["chunk_size"],
    }


def _source(argument):
    """(reference, flags) supplying the value of an argument."""
    if argument.value is not None:
        return argument.value, argument.value_flags
    if argument.type in LITERALS:
        return Reference("literal", argument.type), argument.value_flags
    return argument.key, argument.key_flags


def _peek(values):
    """None for an empty iterable, else an equivalent iterator."""
    values = iter(values)
    if (first := next(values, Unset)) is Unset:
        return None
    return itertools.chain((first,), values)


def _separated(chunks, join):
    for index, chunk in enumerate(chunks):
        yield chunk if index == 0 else join + chunk


def _enclosed(opening, chunks, closing, join):
    pending = opening
    for index, chunk in enumerate(chunks):
        if index:
            yield pending
            pending = join + chunk
        else:
            pending += chunk
    yield pending + closing


def _prefixed(head, chunks):
    for index, chunk in enumerate(chunks):
        yield head + chunk if index == 0 else chunk


def _name(argument, context):
    """the object key for an argument, or None when the entry is omitted."""
    key, flags = argument.key, argument.key_flags

    if key.kind == "literal":
        name = key.text
    elif argument.value is None and argument.type not in LITERALS:
        # the reference supplies the value; its name is the key
        name = basename(key.text) if key.kind == "file" else key.text
    else:
        try:
            values = resolve(key, **_options(flags, context))
        except EncodingError as error:
            if "count" not in error.options:
                raise
            raise EncodingError(
                f"key {describe(key)} resolves to {error.count} values; object keys must be single values",
                code=FaultCode.INVALID_KEY,
            ) from None
        if values is None:
            if flags.no:
                return None
            values = [""]
        name = values[0]

    if flags.no >= 2 and name == "":
        return None
    return name


def _scalar(argument, reference, flags, context):
    type = argument.type
    options = _options(flags, context)

    if type in UNTRIMMED:
        chunks = read_chunks(reference, **options)
        if chunks is None:
            if flags.no:
                return None
            chunks = iter(())
        first = next(chunks, "")
        if first == "" and flags.no >= 2:
            return None
        if type == "raw":
            encode_raws([first])
            return _verbatim(first, chunks)
        return _quoted(first, chunks)

    values = resolve(reference, trim=True, **options)
    if values is None:
        if flags.no:
            return None
        values = [""]
    if values[0] == "" and flags.no >= 2:
        return None
    return iter(encode_values(type, values))


def _verbatim(first, chunks):
    pending = first
    for chunk in chunks:
        yield pending
        pending = chunk
    yield pending


def _quoted(first, chunks):
    pending = '"' + escape(first)
    for chunk in chunks:
        yield pending
        pending = escape(chunk)
    yield pending + '"'


def _collect(argument, reference, flags, context, split):
    """resolved collection values, or None when the entry is omitted."""
    values = iterate(reference, split=split, trim=argument.type not in UNTRIMMED, **_options(flags, context))
    if values is None:
        return None if flags.no else iter(())
    if flags.no >= 2:
        if isinstance(values, dict):
            return values or None
        return _peek(values)
    return values


def _elements(argument, reference, flags, context):
    values = _collect(argument, reference, flags, context, argument.collection.split)
    if values is None:
        return None
    if isinstance(values, dict):
        raise EncodingError(
            f"{describe(reference)} holds a mapping; use {{}} to encode an object",
            code=FaultCode.INVALID_VALUE,
        )
    return _batches(values, argument.type, context)


def _batches(values, type, context):
    for batch in itertools.batched(values, context["batch_size"]):
        logger.debug("encoding a batch of %d %s values", len(batch), type)
        yield encode_values(type, batch, context["join"])


def _members(argument, reference, flags, context):
    split, format = argument.collection.split, argument.collection.format
    if format != "json" and split is None and reference.kind != "file":
        split = ","

    values = _collect(argument, reference, flags, context, split)
    if values is None:
        return None
    if isinstance(values, dict):
        return _pairs(values.items(), argument.type, context)
    if format == "json":
        return _fragments(values, argument.type, context)
    return _pairs(_attributes(values), argument.type, context)


def _attributes(values):
    for item in values:
        if item == "":
            continue
        key, separator, value = item.partition("=")
        if not separator:
            raise EncodingError(f"attribute {item!r} has no '='", code=FaultCode.INVALID_ATTRS, values=(item,))
        yield key, value


def _pairs(items, type, context):
    join = context["join"]
    for batch in itertools.batched(items, context["batch_size"]):
        keys = encode_strings([key for key, _ in batch])
        values = encode_values(type, [value for _, value in batch])
        yield join.join(f"{key}:{value}" for key, value in zip(keys, values))


def _fragments(values, type, context):
    """merge the members of JSON object texts."""
    # members are already JSON; only the literal types constrain them
    subtype = type if type in CONSTRAINING else "json"
    join = context["join"]
    for batch in itertools.batched(values, context["batch_size"]):
        if rejected := [value for value in batch if not accepts(value, subtype, "object")]:
            listing = " ".join(map(repr, rejected))
            described = "JSON objects" if subtype == "json" else f"JSON objects with {subtype} values"
            raise EncodingError(f"not all inputs are {described}: {listing}", code=FaultCode.INVALID_JSON, values=tuple(rejected))
        if members := [inner for value in batch if (inner := value.strip(_WHITESPACE)[1:-1].strip(_WHITESPACE))]:
            yield join.join(members)


def _entry(argument, context):
    """output chunks of one argument, without the separator before it."""
    shape, join = context["shape"], context["join"]
    kind = argument.collection.kind
    reference, flags = _source(argument)

    if argument.splat:
        if kind == "scalar":
            kind = shape
        if kind == "object":
            body = _members(argument, reference, flags, context)
        else:
            body = _elements(argument, reference, flags, context)
        if body is not None:
            yield from _separated(body, join)
        return

    head = ""
    if shape == "object":
        if (name := _name(argument, context)) is None:
            logger.debug("omitting %r", argument.token)
            return
        head = encode_strings([name])[0] + ":"

    match kind:
        case "array":
            if (body := _elements(argument, reference, flags, context)) is not None:
                body = _enclosed("[", body, "]", join)
        case "object":
            if (body := _members(argument, reference, flags, context)) is not None:
                body = _enclosed("{", body, "}", join)
        case _:
            body = _scalar(argument, reference, flags, context)

    if body is None:
        logger.debug("omitting %r", argument.token)
        return
    yield from _prefixed(head, body)


def _assemble(arguments, context):
    join = context["join"]
    opening, closing = ("{", "}") if context["shape"] == "object" else ("[", "]")

    yield opening
    count = 0
    for position, argument in enumerate(arguments, 1):
        try:
            for index, chunk in enumerate(_entry(argument, context)):
                if index == 0:
                    if count:
                        chunk = join + chunk
                    count += 1
                yield chunk
        except JasonException as error:
            if "token" in error.options:
                raise
            raise copy.replace(error, token=argument.token, position=ordinal(position)) from None
    logger.debug("assembled %d entries", count)
    yield closing


def generate(tokens, /, **settings):
    """
    Return an iterator over the output chunks for `tokens`.

    Every token is parsed, and every setting checked, before the iterator is
    returned; resolution and encoding happen lazily while iterating.
    """
    if isinstance(tokens, str | bytes):
        raise TypeError("tokens must be an iterable of argument strings, not a single string")
    context = configure(**settings)
    shape = context["shape"]

    arguments = []
    for position, token in enumerate(tokens, 1):
        try:
            argument = parse(
                token,
                type=context["type"],
                collection=context["collection"],
                split=context["split"],
                format=context["format"],
            )
        except ArgumentSyntaxError as error:
            raise copy.replace(error, position=ordinal(position)) from None
        if argument.splat and argument.collection.kind not in ("scalar", shape):
            raise ArgumentSyntaxError(
                f"cannot splat an {argument.collection.kind} into an {shape}",
                code=FaultCode.SPLAT_MISMATCH,
                token=token,
                position=ordinal(position),
            )
        arguments.append(argument)

    logger.debug("assembling %d arguments into an %s", len(arguments), shape)
    return _assemble(arguments, context)


def encode(tokens, /, **settings):
    """
    Encode `tokens` into one JSON text (without a trailing newline).

    Example
        encode(["msg=hi"]) -> '{"msg":"hi"}'
        encode(["...@sizes:number[]"], shape="array", env={"sizes": [42, 55]}) -> '[42,55]'
    """
    return "".join(generate(tokens, **settings))


def _write(file, chunk, flush):
    if isinstance(file, MutableSequence):
        file.append(chunk)
        return
    file.write(chunk)
    if flush and hasattr(file, "flush"):
        file.flush()


def emit(tokens, /, file=Unset, *, stream=False, callback=None, **settings):
    """
    Write the JSON text for `tokens` followed by a newline.

    Parameters
    - file: text stream or list sink (default sys.stdout).
    - stream: write chunks as soon as they are ready instead of all at once.
    - callback: called with every chunk written (once with the whole JSON text
      when buffered).
    - **settings: see generate().

    Failure
    - buffered: nothing is written and the error propagates.
    - streamed: if output was already written, CANCEL (plus a visible glyph on
      terminals) is written before the error propagates.
    """
    file = coalesce(file, sys.stdout)
    chunks = generate(tokens, **settings)
    if not stream:
        text = "".join(chunks)
        _write(file, text + "\n", False)
        if callback is not None:
            callback(text)
        return

    emitted = False
    try:
        for chunk in chunks:
            _write(file, chunk, stream)
            emitted = True
            if callback is not None:
                callback(chunk)
    except Exception:
        if emitted:
            logger.debug("poisoning interrupted output stream")
            _write(file, CANCEL + (CANCEL_GLYPH if isatty(file) else ""), True)
        raise
    _write(file, "\n", True)


__all__ = (
    "CANCEL",
    "configure",
    "generate",
    "encode",
    "emit",
)
