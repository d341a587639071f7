"""
jason references: resolve literal, variable and file references to raw values.

Overview
- Reference(kind, text): kind is "literal", "variable" or "file".
  • literal  → the text itself
  • variable → a lookup in the environment mapping; "name[i][j]" indexes into
    sequence and mapping values
  • file     → the content of the file at `text` ("-" is standard input)
- resolve(reference, ...) -> list[str] | dict[str, str] | None
  • buffered resolution; None means "unbound" (unset variable, or a missing
    file when the caller opted into omission).
- iterate(reference, ...) -> Iterator[str] | None
  • lazy form: file content is read in chunks and split as it arrives.
- read_chunks(reference, ...) -> Iterator[str] | None
  • unsplit scalar content in chunks, for streaming long strings.

Splitting
- split=Unset asks for a single scalar value; otherwise collection semantics
  apply:
  • literal and string variables are split on `split` (None: not split),
  • sequence variables yield their elements, mapping variables their items,
  • files are split on `split`, or on newlines when `split` is None.
- one trailing split character never creates an empty final element; empty
  input yields no elements at all.

Variables
- Environment values may be str, bool, None, int or float (stringified the JSON
  way: true/false/null/str()), or sequences/mappings of those.
- An unset variable NAME falls back to the file named by NAME_FILE when that
  variable is set.
"""
import logging
import os
import re
import sys
from collections import namedtuple
from collections.abc import Mapping, Sequence
from contextlib import nullcontext

from .faults import (
    EncodingError,
    FaultCode,
    MissingResourceError,
    UnboundReferenceError,
)
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)

KINDS = ("literal", "variable", "file")
STDIN = ("-", "/dev/stdin")

Reference = namedtuple("Reference", ("kind", "text"))

_INDEXED = re.compile(r"(?P<name>[^\[\]]+)(?P<indexes>(?:\[[^\[\]]*\])+)")
_INDEX = re.compile(r"\[([^\[\]]*)\]")


def describe(reference, /):
    """short human label used in messages: @name, @./path or 'text'."""
    if reference.kind == "literal":
        return repr(reference.text)
    return "@" + reference.text


def stringify(value, /, *, name):
    """render one environment value as raw text."""
    match value:
        case str():
            return value
        case bool():
            return "true" if value else "false"
        case None:
            return "null"
        case int() | float():
            return str(value)
    raise EncodingError(
        f"variable {name!r} holds an unsupported {value.__class__.__name__} value",
        code=FaultCode.INVALID_VALUE,
    )


def lookup(name, /, env):
    """
    return the raw environment value for `name` (with optional [index] chains),
    or Unset when it is not bound.

    indexes select a sequence element (integer index) or a mapping item (key);
    an index past the end, or a missing key, is unbound as well.
    """
    if name in env:
        return env[name]
    if not (match := _INDEXED.fullmatch(name)) or match["name"] not in env:
        return Unset

    value = env[match["name"]]
    for index in _INDEX.findall(match["indexes"]):
        if isinstance(value, Mapping):
            if index not in value:
                return Unset
            value = value[index]
        elif isinstance(value, Sequence) and not isinstance(value, str):
            try:
                position = int(index)
            except ValueError:
                raise UnboundReferenceError(
                    f"variable {name!r}: sequence index {index!r} is not an integer",
                    code=FaultCode.INVALID_INDEX,
                ) from None
            try:
                value = value[position]
            except IndexError:
                return Unset
        else:
            raise UnboundReferenceError(
                f"variable {name!r}: cannot index a scalar value",
                code=FaultCode.INVALID_INDEX,
            )
    return value


def _check(path):
    """raise MissingResourceError unless path names a readable file."""
    if path in STDIN:
        return
    if not os.path.exists(path):
        reason = "does not exist"
    elif os.path.isdir(path):
        reason = "is a directory"
    elif not os.access(path, os.R_OK):
        reason = "cannot be read"
    else:
        return
    raise MissingResourceError(f"file {path!r} {reason}", code=FaultCode.MISSING_FILE, path=path)


def _open(path, stdin):
    if path in STDIN:
        return nullcontext(coalesce(stdin, sys.stdin))
    try:
        return open(path, encoding="utf-8", newline="")
    except OSError as error:
        raise MissingResourceError(
            f"file {path!r} cannot be read: {error.strerror or error}",
            code=FaultCode.MISSING_FILE,
            path=path,
        ) from None


def _chunks(path, stdin, chunk_size):
    # opened on first iteration; a generator that never runs holds no handle
    with _open(path, stdin) as file:
        try:
            while chunk := file.read(chunk_size):
                yield chunk
        except UnicodeDecodeError:
            raise EncodingError(f"file {path!r} is not valid UTF-8", code=FaultCode.INVALID_VALUE) from None


def split(chunks, separator, /):
    """
    split an iterable of text chunks on `separator`, lazily.

    one trailing separator does not produce an empty final element. only the
    newest chunk is searched, so a long run without separators is linear.
    """
    pending = []
    for chunk in chunks:
        if separator not in chunk:
            pending.append(chunk)
            continue
        first, *values, rest = chunk.split(separator)
        pending.append(first)
        yield "".join(pending)
        yield from values
        pending = [rest]
    if tail := "".join(pending):
        yield tail


def _rstrip(values):
    for value in values:
        yield value.rstrip()


class _Source:
    """one reference bound to its resolution options."""

    def __init__(self, reference, env, strict, optional, stdin, chunk_size):
        self.reference = reference
        self.env = coalesce(env, os.environ)
        self.strict = strict
        self.optional = optional
        self.stdin = stdin
        self.chunk_size = chunk_size

    def unbound(self, what):
        if self.strict and not self.optional:
            raise UnboundReferenceError(
                f"{what} is not set",
                code=FaultCode.UNBOUND_REFERENCE,
                reference=self.reference,
            )
        logger.debug("%s is unbound", what)
        return None

    def chunks(self, path):
        try:
            _check(path)
        except MissingResourceError:
            if self.optional:
                logger.debug("omitting missing file %r", path)
                return None
            raise
        logger.debug("reading %r in chunks of %d", path, self.chunk_size)
        return _chunks(path, self.stdin, self.chunk_size)

    def open(self):
        """
        return ("text", chunks) | ("value", raw value) | None for this source.
        """
        kind, text = self.reference
        if kind == "literal":
            return "value", text
        if kind == "file":
            if (chunks := self.chunks(text)) is None:
                return None
            return "text", chunks

        value = lookup(text, self.env)
        if value is Unset:
            fallback = lookup(text + "_FILE", self.env)
            if isinstance(fallback, str):
                logger.debug("variable %r falls back to file %r", text, fallback)
                if (chunks := self.chunks(fallback)) is None:
                    return None
                return "text", chunks
            return self.unbound(f"variable {text!r}")
        return "value", value


def _values(opened, name, separator, trim):
    """lazy collection values for an opened source."""
    kind, value = opened
    if kind == "text":
        values = split(value, "\n" if separator is None else separator)
    elif isinstance(value, Mapping):
        return {
            str(key): stringify(item, name=name).rstrip() if trim else stringify(item, name=name)
            for key, item in value.items()
        }
    elif isinstance(value, Sequence) and not isinstance(value, str):
        values = (stringify(item, name=name) for item in value)
    else:
        value = stringify(value, name=name)
        values = iter([value] if value else []) if separator is None else split([value], separator)
    return _rstrip(values) if trim else values


def iterate(reference, /, *, env=Unset, split=None, strict=False, optional=False, trim=False, stdin=Unset, chunk_size=8192):
    """
    resolve a reference lazily as a collection.

    returns an iterator of raw values, a dict for mapping variables, or None
    when the reference is unbound.
    """
    source = _Source(reference, env, strict, optional, stdin, chunk_size)
    if (opened := source.open()) is None:
        return None
    return _values(opened, reference.text, split, trim)


def read_chunks(reference, /, *, env=Unset, strict=False, optional=False, stdin=Unset, chunk_size=8192):
    """
    resolve a scalar reference as a sequence of text chunks (None if unbound).

    the chunks concatenate to the value resolve() would return for it.
    """
    source = _Source(reference, env, strict, optional, stdin, chunk_size)
    if (opened := source.open()) is None:
        return None
    kind, value = opened
    if kind == "text":
        return value
    return iter([_scalar(value, reference)])


def _scalar(value, reference):
    if isinstance(value, Mapping) or (isinstance(value, Sequence) and not isinstance(value, str)):
        raise EncodingError(
            f"{describe(reference)} holds {len(value)} values; use [] or {{}} to encode a collection",
            code=FaultCode.INVALID_VALUE,
            count=len(value),
        )
    return stringify(value, name=reference.text)


def resolve(reference, /, *, env=Unset, split=Unset, strict=False, optional=False, trim=False, stdin=Unset, chunk_size=8192):
    """
    Resolve a reference to its raw values.

    Parameters
    - reference: Reference(kind, text).
    - env: variable mapping (defaults to os.environ).
    - split: Unset for a scalar, else the collection split character (or None).
    - strict: an unset variable raises UnboundReferenceError instead of
      resolving to None.
    - optional: missing files and unset variables resolve to None even when
      strict.
    - trim: strip trailing whitespace from every value.
    - stdin: stream used for the "-" file reference.

    Returns
    - scalar: [value]; collection: list of values, or a dict for mapping
      variables; None when unbound.
    """
    if split is Unset:
        chunks = read_chunks(reference, env=env, strict=strict, optional=optional, stdin=stdin, chunk_size=chunk_size)
        if chunks is None:
            return None
        value = "".join(chunks)
        return [value.rstrip() if trim else value]

    values = iterate(
        reference, env=env, split=split, strict=strict, optional=optional,
        trim=trim, stdin=stdin, chunk_size=chunk_size,
    )
    if values is None or isinstance(values, dict):
        return values
    return list(values)


def basename(path, /):
    """key used for a file reference without a value: the file's base name."""
    return "stdin" if path in STDIN else os.path.basename(path.rstrip("/")) or path


__all__ = (
    "KINDS",
    "Reference",
    "describe",
    "stringify",
    "lookup",
    "split",
    "iterate",
    "read_chunks",
    "resolve",
    "basename",
)
