"""
jason utilities (internal helpers)

Scope
- Small building blocks shared by the grammar, resolver and assembler layers.
- Names not listed in __all__ are internal and may change without notice.

Overview
- UnsetType / Unset
  • Singleton sentinel for "not provided" when None is a legitimate value
    (e.g. a split character of None means "do not split").
- coalesce(value, default=None)
  • Materialize Unset into a concrete default while preserving None/""/0.
- StorageGuard / view(name)
  • Read-only records: backing fields live under '-name' and are only writable
    inside the construction block; view() publishes them as immutable views.
- ordinal(number)
  • Human-friendly position labels for error messages ("third argument").
- isatty(file)
  • Best-effort terminal detection for output sinks.
"""
import functools
from collections.abc import Sequence, Mapping, Set
from contextlib import contextmanager
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    internal singleton sentinel representing an "unset" value.

    behavior
    - truthiness: bool(Unset) is False.
    - identity: Unset is a process-wide singleton.
    - display: repr(Unset) -> "Unset".
    - final: subclassing is forbidden.
    """

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    return `default` when `object` is Unset; otherwise return `object` unchanged.

    falsy values such as None, "", 0 or [] are preserved, only the sentinel is
    replaced.
    """
    return default if object is Unset else object


def rename(x, /, name=None):
    """
    set a stable __name__/__qualname__ on a callable, or return a curried renamer.

    used on generated accessors so tracebacks read 'key' instead of 'getter'.
    """
    if isinstance(x, str):
        return functools.partial(rename, name=x)
    if not isinstance(name, str):
        raise TypeError("callable name must be a string")
    x.__qualname__ = name
    x.__name__ = name
    return x


class StorageGuard:
    """
    internal mixin to protect backing storage of read-only records.

    rules
    - any attribute whose name starts with '-' is internal backing storage and:
      • cannot be read directly (AttributeError),
      • cannot be written once the construction block has been left.

    usage
        with super().__new__(cls) as self:
            setattr(self, "-field", value)
        # backing fields are now read-only
    """
    __slots__ = ("__building",)

    @contextmanager
    def __new__(cls):
        self = super().__new__(cls)
        self.__building = True
        try:
            yield self
        finally:
            self.__building = False

    def __getattribute__(self, name, /):
        if isinstance(name, str) and name.startswith("-"):
            raise AttributeError("internal storage is not accessible")
        return object.__getattribute__(self, name)

    def __setattr__(self, name, value, /):
        if isinstance(name, str) and name.startswith("-"):
            if not self.__building:
                raise AttributeError("internal storage is read-only")
        return object.__setattr__(self, name, value)


def view(name):
    """
    internal: build a read-only property over a '-name' backing field.

    containers are published as immutable views:
    - Sequence (non-str) → tuple
    - Mapping           → MappingProxyType
    - Set               → frozenset
    """

    @rename(name)
    def getter(self):
        value = object.__getattribute__(self, "-" + name)
        if isinstance(value, Sequence) and not isinstance(value, str | tuple):
            return tuple(value)
        if isinstance(value, Mapping):
            return MappingProxyType(value)
        if isinstance(value, Set):
            return frozenset(value)
        return value

    return property(getter)


@functools.cache
def ordinal(number):
    """
    Return a human-friendly ordinal label for a 1-based position.

    - 1..10 are rendered as words ("first"…"tenth").
    - Other numbers use numeric ordinals with correct English suffixes.
    """
    if 1 <= number <= 10:
        return (
            "first", "second", "third", "fourth", "fifth",
            "sixth", "seventh", "eighth", "ninth", "tenth",
        )[number - 1]
    if 10 < number % 100 < 20:
        return f"{number}th"
    return f'{number}%s' % {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th")


def isatty(file, /):
    """
    return True when `file` is an interactive terminal, False for anything else
    (lists, closed streams, objects without isatty()).
    """
    try:
        return bool(file.isatty())
    except (AttributeError, ValueError, OSError):
        return False


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "StorageGuard",
    "view",
    "ordinal",
    "isatty",
)
