r"""
jason encoders: convert batches of raw string values into JSON value text.

Overview
- encode_<type>(values, join=Unset) for every argument type:
  strings, numbers, bools, trues, falses, nulls, raws, jsons, autos.
  • values: any iterable of str (a whole batch is checked before anything is
    returned, so a failing batch never produces partial output).
  • join: when given, the encoded values are joined with it into one str;
    otherwise a list of encoded values is returned.
- ENCODERS: type name -> encoder table.
- encode(type, values, join=Unset): table dispatch.

Failure
- Every checking encoder raises EncodingError naming every rejected value of
  the batch (options: code, values, type).

String escaping
- '"' and '\' are backslash-escaped; \b \t \n \f \r use their short escapes;
  every other code point below U+0020 becomes \u00XX (lowercase hex).
  Non-ASCII text passes through verbatim.
"""
import re

from .faults import EncodingError, FaultCode
from .utils import Unset
from .validator import NUMBER, accepts

# control characters get \u00xx, a few of them have short escapes
_ESCAPES = str.maketrans(
    {code: "\\u%04x" % code for code in range(0x20)} | {
        "\b": "\\b",
        "\t": "\\t",
        "\n": "\\n",
        "\f": "\\f",
        "\r": "\\r",
        '"': '\\"',
        "\\": "\\\\",
    }
)

_NUMBER = re.compile(NUMBER)
_BOOL = re.compile(r"true|false")
_TRUE = re.compile("true")
_FALSE = re.compile("false")
_NULL = re.compile("null")
_AUTO = re.compile(rf"true|false|null|{NUMBER}")


def _join(encoded, join):
    return encoded if join is Unset else join.join(encoded)


def _reject(rejected, type, message, code=FaultCode.INVALID_VALUE):
    listing = " ".join(map(repr, rejected))
    raise EncodingError(f"{message}: {listing}", code=code, type=type, values=tuple(rejected))


def _matching(values, pattern, type, plural):
    values = list(values)
    if rejected := [value for value in values if not pattern.fullmatch(value)]:
        _reject(rejected, type, f"not all inputs are {plural}")
    return values


def encode_strings(values, /, join=Unset):
    """quote and escape each value as a JSON string; never fails."""
    return _join([f'"{value.translate(_ESCAPES)}"' for value in values], join)


def encode_numbers(values, /, join=Unset):
    """emit values verbatim after checking them against the JSON number grammar."""
    return _join(_matching(values, _NUMBER, "number", "numbers"), join)


def encode_bools(values, /, join=Unset):
    return _join(_matching(values, _BOOL, "bool", "true/false"), join)


def encode_trues(values, /, join=Unset):
    return _join(_matching(values, _TRUE, "true", "true"), join)


def encode_falses(values, /, join=Unset):
    return _join(_matching(values, _FALSE, "false", "false"), join)


def encode_nulls(values, /, join=Unset):
    return _join(_matching(values, _NULL, "null", "null"), join)


def encode_raws(values, /, join=Unset):
    """
    emit values verbatim without any syntax check.

    only emptiness is rejected: an empty raw value would leave a hole in the
    surrounding JSON.
    """
    values = list(values)
    if empties := [value for value in values if value == ""]:
        _reject(empties, "raw", "raw JSON values cannot be empty", FaultCode.EMPTY_RAW)
    return _join(values, join)


def encode_jsons(values, /, join=Unset):
    """emit values verbatim after a full structural validation of each."""
    values = list(values)
    if rejected := [value for value in values if not accepts(value)]:
        _reject(rejected, "json", "not all inputs are valid JSON", FaultCode.INVALID_JSON)
    return _join(values, join)


def encode_autos(values, /, join=Unset):
    """
    true, false, null and JSON numbers pass through, everything else is
    encoded as a string.
    """
    return _join([
        value if _AUTO.fullmatch(value) else f'"{value.translate(_ESCAPES)}"'
        for value in values
    ], join)


ENCODERS = {
    "string": encode_strings,
    "number": encode_numbers,
    "bool": encode_bools,
    "true": encode_trues,
    "false": encode_falses,
    "null": encode_nulls,
    "raw": encode_raws,
    "json": encode_jsons,
    "auto": encode_autos,
}


def encode(type, values, /, join=Unset):
    """encode a batch of values with the encoder registered for `type`."""
    try:
        encoder = ENCODERS[type]
    except KeyError:
        raise ValueError(f"no encoder for type {type!r}") from None
    return encoder(values, join)


def escape(text, /):
    """escape `text` for use inside a JSON string (without the quotes)."""
    return text.translate(_ESCAPES)


__all__ = (
    "ENCODERS",
    "encode",
    "escape",
    "encode_strings",
    "encode_numbers",
    "encode_bools",
    "encode_trues",
    "encode_falses",
    "encode_nulls",
    "encode_raws",
    "encode_jsons",
    "encode_autos",
)
