"""
jason defaults: named presets of ambient settings.

Overview
- define(name, **settings): register (or replace) a preset.
- resolve(name) -> Preset: look a preset up; unknown names raise
  ConfigurationError.
- undefine(name): remove a preset.
- presets() -> read-only mapping of every registered preset.
- normalize(settings, code=...) -> dict: validate a settings mapping.

Settings
- shape: "object" | "array"
- type: argument type name (see arguments.TYPES)
- collection: "scalar" | "array" | "object"
- split: single character or None
- format: "json" | "attrs" | None
- strict: bool

Notes
- Presets are explicit values passed around by name; the registry is
  process-wide and guarded by a lock so threads may define presets while
  others encode with them.
"""
import logging
import threading
from types import MappingProxyType

from .arguments import COLLECTIONS, FORMATS, TYPES
from .faults import ConfigurationError, FaultCode
from .utils import StorageGuard, view

logger = logging.getLogger(__name__)

SHAPES = ("object", "array")
SETTINGS = ("shape", "type", "collection", "split", "format", "strict")

_lock = threading.Lock()
_presets = {}


class Preset(StorageGuard):
    """a named, immutable set of settings."""
    name = view("name")
    settings = view("settings")

    def __new__(cls, name, settings, /):
        with super().__new__(cls) as self:
            setattr(self, "-name", name)
            setattr(self, "-settings", dict(settings))
        return self

    def __eq__(self, other):
        if not isinstance(other, Preset):
            return NotImplemented
        return self.name == other.name and dict(self.settings) == dict(other.settings)

    def __hash__(self):
        return hash(self.name)

    def __rich_repr__(self):
        yield self.name
        yield from self.settings.items()

    def __repr__(self):
        settings = ", ".join(f"{key}={value!r}" for key, value in self.settings.items())
        return f"preset({self.name!r}, {settings})"


def normalize(settings, /, code=FaultCode.INVALID_SETTING):
    """
    validate a settings mapping; returns a plain dict copy.

    unknown keys and out-of-range values raise ConfigurationError with `code`.
    """
    def fault(message):
        return ConfigurationError(message, code=code)

    if unknown := [key for key in settings if key not in SETTINGS]:
        raise fault(f"unrecognized settings: {", ".join(map(repr, unknown))}")

    checks = {
        "shape": lambda value: value in SHAPES,
        "type": lambda value: value in TYPES,
        "collection": lambda value: value in COLLECTIONS,
        "split": lambda value: value is None or (isinstance(value, str) and len(value) <= 1),
        "format": lambda value: value is None or value in FORMATS,
        "strict": lambda value: isinstance(value, bool),
    }
    for key, value in settings.items():
        try:
            accepted = checks[key](value)
        except TypeError:
            accepted = False
        if not accepted:
            raise fault(f"invalid value for setting {key!r}: {value!r}")

    normalized = dict(settings)
    if normalized.get("split") == "":
        normalized["split"] = None
    return normalized


def define(name, /, **settings):
    """
    register a preset under `name`, replacing any previous one.

    Example
        define("numbers", type="number", collection="array")
    """
    if not isinstance(name, str) or not name:
        raise ConfigurationError(f"preset name must be a non-empty string, not {name!r}", code=FaultCode.INVALID_PRESET)
    preset = Preset(name, normalize(settings, FaultCode.INVALID_PRESET))
    with _lock:
        _presets[name] = preset
    logger.debug("defined preset %r: %r", name, settings)
    return preset


def resolve(name, /):
    """return the preset registered under `name`."""
    with _lock:
        try:
            return _presets[name]
        except KeyError:
            pass
    raise ConfigurationError(
        f"unknown preset {name!r}",
        code=FaultCode.UNKNOWN_PRESET,
        hint="register it first with jason.defaults.define()",
    )


def undefine(name, /):
    """remove a preset; unknown names raise ConfigurationError."""
    with _lock:
        if _presets.pop(name, None) is not None:
            return
    raise ConfigurationError(f"unknown preset {name!r}", code=FaultCode.UNKNOWN_PRESET)


def presets():
    """snapshot of the registry as a read-only mapping."""
    with _lock:
        return MappingProxyType(dict(_presets))


__all__ = (
    "SHAPES",
    "SETTINGS",
    "Preset",
    "normalize",
    "define",
    "resolve",
    "undefine",
    "presets",
)
