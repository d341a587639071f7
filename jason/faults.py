"""
jason faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing failure.
  Codes are grouped by domain so logs and searches stay predictable.
- JasonException: base type carrying a message + read-only options; knows how to
  render itself (rich) and how to surface itself (raise or print-and-exit).
- One subclass per failure class, each with the process exit status a wrapper
  must use:
    • EncodingError          → 1  (value fails its type grammar)
    • ArgumentSyntaxError    → 2  (malformed argument token)
    • ConfigurationError     → 2  (bad preset/setting)
    • UnboundReferenceError  → 3  (strict reference to an unset variable)
    • MissingResourceError   → 4  (referenced file is missing/unreadable)
- trigger(): central entry point to surface any fault with runtime options.

Error channel
- One line per error: "<prog>: <component>: <message>", followed by an optional
  hint line. Rendering goes to a rich Console on stderr, never to the primary
  output.

Integration
- Library code raises these exceptions directly.
- The command line wrapper calls trigger(fault, shell=True, ...) which prints the
  fault and exits with fault.status.
"""
import copy
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping (by high-level domain)
    - grammar (2110x)
      • MALFORMED_SPLAT, UNKNOWN_TYPE, MALFORMED_COLLECTION, UNKNOWN_FORMAT,
        MALFORMED_ATTRIBUTES, UNKNOWN_ATTRIBUTE, UNPARSED_TOKEN, SPLAT_MISMATCH
    - configuration (2210x)
      • UNKNOWN_PRESET, INVALID_PRESET, INVALID_SETTING
    - references (2310x / 2410x)
      • UNBOUND_REFERENCE, INVALID_INDEX, MISSING_FILE
    - encoding (2510x)
      • INVALID_VALUE, EMPTY_RAW, INVALID_JSON, INVALID_KEY, INVALID_ATTRS
    """
    # --- grammar errors (21xxx) ---
    MALFORMED_SPLAT             = 21101
    UNKNOWN_TYPE                = 21102
    MALFORMED_COLLECTION        = 21103
    UNKNOWN_FORMAT              = 21104
    MALFORMED_ATTRIBUTES        = 21105
    UNKNOWN_ATTRIBUTE           = 21106
    UNPARSED_TOKEN              = 21107
    SPLAT_MISMATCH              = 21108

    # --- configuration errors (22xxx) ---
    UNKNOWN_PRESET              = 22101
    INVALID_PRESET              = 22102
    INVALID_SETTING             = 22103

    # --- reference errors (23xxx / 24xxx) ---
    UNBOUND_REFERENCE           = 23101
    INVALID_INDEX               = 23102
    MISSING_FILE                = 24101

    # --- encoding errors (25xxx) ---
    INVALID_VALUE               = 25101
    EMPTY_RAW                   = 25102
    INVALID_JSON                = 25103
    INVALID_KEY                 = 25104
    INVALID_ATTRS               = 25105


class JasonException(Exception):
    """
    base class of every jason failure.

    attributes
    - message: one-line, lowercased description naming the offending input.
    - options: read-only mapping with context; well-known keys:
      • component: "arguments" | "references" | "encoders" | "streams" | "defaults"
      • code: FaultCode
      • token: the originating argument token (when known)
      • position: ordinal label of that argument ("third")
      • hint: optional one-line suggestion
      • prog, shell, colorful: rendering/surfacing switches used by trigger()
    - status: process exit status for wrappers.
    """
    status = 2
    component = "jason"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __getattr__(self, name):
        # context keys are readable as attributes (error.token, error.values, ...)
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", False)

        styles = defaultdict(str, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "component": "bold #00E5FF",  # neon cyan component
            "error-message": "#FF4DA6",  # pinky message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def text(fragment, style):
            return Text(str(fragment), styles[style] if colorful else "")

        where = ""
        if (token := self.options.get("token")) is not None:
            where = f"argument {token!r}: "
            if position := self.options.get("position"):
                where = f"{position} {where}"

        line = Text.assemble(
            text(self.options.get("prog", "jason"), "prog-name"),
            ": ",
            text(self.options.get("component", self.component), "component"),
            ": ",
            text(where + str(self.message), "error-message"),
        )
        if not (hint := self.options.get("hint")):
            return line
        return Group(line, Text.assemble(text("  → ", "hint-arrow"), text(hint, "hint")))

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self from None
        console.print(self, highlight=False, soft_wrap=True)
        sys.exit(self.status)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ArgumentSyntaxError(JasonException):
    status = 2
    component = "arguments"


class ConfigurationError(JasonException):
    status = 2
    component = "defaults"


class UnboundReferenceError(JasonException):
    status = 3
    component = "references"


class MissingResourceError(JasonException):
    status = 4
    component = "references"


class EncodingError(JasonException):
    status = 1
    component = "encoders"


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see JasonException).
    - options are merged into the fault via copy.replace before triggering.
    - in shell mode the fault is printed on stderr and the process exits with
      fault.status; otherwise the fault is raised.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "JasonException",
    "ArgumentSyntaxError",
    "ConfigurationError",
    "UnboundReferenceError",
    "MissingResourceError",
    "EncodingError",
    "trigger",
)
