"""
jason command line wrapper.

Usage
    jason [-h | --version] [--] ARGUMENT...
    jason-array [--] ARGUMENT...
    python -m jason [--] ARGUMENT...

Every ARGUMENT is one jason argument token; the resulting JSON text is written
to stdout followed by a newline.

Environment
- JASON_SHAPE, JASON_TYPE, JASON_COLLECTION, JASON_STRICT: ambient settings.
- JASON_STREAM: stream output as it is produced (true/false).
- JASON_CHUNK_SIZE, JASON_BATCH_SIZE: positive integers.
- JASON_DEBUG: enable debug logging on stderr (rich handler).
- NO_COLOR: disable colours in error output.

Exit status
- 0 success, 1 encoding failure, 2 syntax or configuration failure,
  3 unbound reference, 4 missing file.
"""
import logging
import os
import sys
from collections import defaultdict

from rich.console import Console, Group
from rich.logging import RichHandler
from rich.panel import Panel
from rich.text import Text

from . import __version__
from .faults import ConfigurationError, FaultCode, JasonException, trigger
from .streams import emit
from .utils import Unset, coalesce, isatty

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off", "")

_EXAMPLES = (
    ("jason msg=hi", '{"msg":"hi"}'),
    ("jason data:number=42", '{"data":42}'),
    ("jason active:true enabled:false data:null", '{"active":true,"enabled":false,"data":null}'),
    ("jason tags:[,]=a,b", '{"tags":["a","b"]}'),
    ("jason-array 1:number hi", '[1,"hi"]'),
)


def _styles():
    return defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "description-section": "italic #A3A3A3",
        "group-label": "bold #FFFFFF",
        "example": "bold #FFD600",
        "output": "#9CA3AF",
        "panel-title": "bold #FFFFFF",
    } | getattr(__import__("__main__"), "__styles__", {}))


def _helper(prog, colorful):
    """render the help screen on stdout."""
    styles = _styles()

    def text(fragment, style):
        return Text(str(fragment), styles[style] if colorful else "")

    renders = [
        Text.assemble(
            text("usage", "usage-label"), ": ",
            text(prog, "program-name"), " [-h | --version] [--] ARGUMENT...\n",
        ),
        text("build a JSON object (or array) from typed argument tokens.", "description-section").append("\n"),
    ]

    grammar = Text()
    grammar.append(text("argument", "group-label")).append(":\n")
    grammar.append("  [...] [flags] [@]key [:type[collection][/attrs/]] [flags] [=value | @ref]\n")
    grammar.append("  types: auto bool false json null number raw string true\n")
    grammar.append("  flags: + strict, ~ empty when unset, ? omit when unset, ?? omit when empty\n")
    renders.append(grammar)

    examples = Text()
    examples.append(text("examples", "group-label")).append(":\n")
    for example, output in _EXAMPLES:
        examples.append("  ").append(text(example, "example")).append("\n")
        examples.append("    ").append(text(output, "output")).append("\n")
    renders.append(examples)
    renders[-1].rstrip()

    Console().print(Panel(
        Group(*renders),
        title=Text.assemble("[", " ", f"{prog} HELP".upper(), " ", "]", style=styles["panel-title"] if colorful else ""),
        title_align="left",
    ))


def _versioner(prog, colorful):
    styles = _styles()
    style = styles["program-name"] if colorful else ""
    Console().print(Text.assemble(Text(prog, style), " ", __version__))


def _flag(name, value):
    if value.lower() in _TRUTHY:
        return True
    if value.lower() in _FALSY:
        return False
    raise ConfigurationError(f"invalid boolean {value!r} for {name}", code=FaultCode.INVALID_SETTING)


def _size(name, value):
    try:
        size = int(value)
    except ValueError:
        size = 0
    if size < 1:
        raise ConfigurationError(f"{name} must be a positive integer, not {value!r}", code=FaultCode.INVALID_SETTING)
    return size


def configure(environ, /):
    """
    translate JASON_* environment variables into emit() settings.

    returns (settings, stream).
    """
    settings = {}
    for name, setting in (
        ("JASON_SHAPE", "shape"),
        ("JASON_TYPE", "type"),
        ("JASON_COLLECTION", "collection"),
    ):
        if value := environ.get(name):
            settings[setting] = value
    if (value := environ.get("JASON_STRICT")) is not None:
        settings["strict"] = _flag("JASON_STRICT", value)
    for name, setting in (("JASON_CHUNK_SIZE", "chunk_size"), ("JASON_BATCH_SIZE", "batch_size")):
        if (value := environ.get(name)) is not None:
            settings[setting] = _size(name, value)
    stream = _flag("JASON_STREAM", environ.get("JASON_STREAM", ""))
    return settings, stream


def main(argv=Unset, /, *, shape=Unset, prog=Unset):
    """
    run the command line wrapper; returns the exit status.

    faults are printed on stderr and end the process through SystemExit with
    the fault's status.
    """
    argv = list(coalesce(argv, sys.argv[1:]))
    prog = coalesce(prog, "jason-array" if shape == "array" else "jason")
    environ = os.environ
    colorful = "NO_COLOR" not in environ and isatty(sys.stderr)

    if environ.get("JASON_DEBUG"):
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )

    if argv and argv[0] in ("-h", "--help"):
        _helper(prog, colorful)
        return 0
    if argv and argv[0] == "--version":
        _versioner(prog, colorful)
        return 0
    if argv and argv[0] == "--":
        argv = argv[1:]

    try:
        settings, stream = configure(environ)
        if shape is not Unset:
            settings["shape"] = shape
        emit(argv, sys.stdout, stream=stream, env=environ, **settings)
    except JasonException as fault:
        trigger(fault, shell=True, prog=prog, colorful=colorful)
    return 0


def array():
    """entry point of the jason-array script."""
    return main(shape="array")


if __name__ == "__main__":
    sys.exit(main())
