"""
Terse faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for all user-facing issues
  (errors and warnings). Codes are grouped by domain to keep copy consistent
  and make logs/searches predictable.
- CommandException / CommandWarning: base types that carry message + options and
  know how to render themselves in a friendly, lowercased, and actionable way.
- DefinitionError family: malformed compact-syntax definitions, raised while a
  command, its flags or its positional list are declared (never while binding).
- MissingRequiredWarning: non-fatal validation result for required names that
  are still absent once binding is done.
- trigger(): central entry point to surface any fault (respecting shell/fancy/colorful).
- getdoc(): optional description lookup for a code from the host application.

Integration
- The schema compiler raises definition errors directly (plain exceptions carrying
  title/code/hint/definition options).
- Commands re-surface them through Command.trigger(...), which merges the runtime
  options: outside shell mode the exception is raised; in shell mode it is rendered
  via rich and the program stops.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping (by high-level domain)
    - definitions (1110x)
      • MALFORMED_DEFINITION, MISSING_NAME, UNKNOWN_TYPE, MISPLACED_VARIADIC,
        DUPLICATED_NAME
    - validation warnings (1211x)
      • MISSING_REQUIRED

    binding anomalies (unknown flags, unparseable numbers, missing values) and
    resolution misses have no code on purpose: they never become faults.
    """
    # --- definition errors (11xxx) ---
    MALFORMED_DEFINITION        = 11101
    MISSING_NAME                = 11102
    UNKNOWN_TYPE                = 11103
    MISPLACED_VARIADIC          = 11104
    DUPLICATED_NAME             = 11105

    # --- warnings (12xxx) ---
    MISSING_REQUIRED            = 12111

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, /):
    """
    build the rich renderable shared by exceptions and warnings.

    layout
    - header: "[ <prog> — <code> | <Title> ]"
    - body: the message, then "→ hint" when a hint exists.
    - fancy: the body is wrapped in a left-titled Panel.
    """
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    fancy = options.get("fancy", False)

    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    tool = options.get("tool")
    prog = getattr(main, "__prog__", getattr(getattr(tool, "root", None), "name", "terse"))
    code = options.get("code")

    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(code.normalize() if isinstance(code, FaultCode) else "?", "code"),
        " | ",
        text(str(options.get("title", "fault")).title(), "title"),
        " ]"
    )
    message = text(fault.message, "message")
    body = [message]
    if hint := options.get("hint"):
        body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

    if fancy:
        width = console.width - 4
        if "ratio" in options:
            width = int(width * options["ratio"])
        return Panel(Group(*body), title=header, title_align="left", width=width)
    return Group(header, *body)


class CommandException(Exception):
    """
    base class of every terse error.

    carries a message and a read-only mapping of options (title, code, hint,
    definition, ...) that renderers and fallbacks can inspect.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message else ""

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "title": "bold #FF4DA6",  # friendly pinky title
            "message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class DefinitionError(CommandException):
    """
    a compact-syntax definition cannot be compiled.

    raised synchronously while declaring commands, flags or positional lists, so a
    misconfigured program fails before any token is parsed.
    """


class MalformedDefinitionError(DefinitionError): ...
class MissingNameError(DefinitionError): ...
class UnknownTypeError(DefinitionError): ...
class MisplacedVariadicError(DefinitionError): ...
class DuplicatedNameError(DefinitionError): ...


class CommandWarning(ABC, Warning):
    """
    base class of every terse warning (non-fatal).
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return str(self.message) if self.message else ""

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "title": "bold #FFC2E0",  # softer pinky title for warnings
            "message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        })

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingRequiredWarning(CommandWarning): ...


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(...) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are
      raised and warnings go through warnings.warn.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, docs, and any other context
      the reporter may want to show (e.g., definition/names).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    lookup
    - the host application may expose a __docs__ mapping in __main__ where keys
      are FaultCode instances and values are short documentation strings.
    - when not found, returns None (renderers treat docs as optional).
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "DefinitionError",
    "MalformedDefinitionError",
    "MissingNameError",
    "UnknownTypeError",
    "MisplacedVariadicError",
    "DuplicatedNameError",
    "CommandWarning",
    "MissingRequiredWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
