"""
Terse rendering collaborator: help and version output.

A Renderer is passed to a command explicitly (Command(..., renderer=Renderer(...)))
and inherited by its children. Commands without one build a default renderer on
demand, so there is no module-level print function or global style state.

Palette keys
- usage-label, program-name, usage-section, description-section
- table-title, table-border, command-name, flag-name, argument-name, metavar,
  description, default
- program-version, panel-title

Customization
- styles=... on the renderer, then __styles__ in __main__, override any palette entry
  (the renderer's own mapping wins).
- when colorful is False, styling is suppressed; colour codes embedded in user labels
  are stripped as well.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .grammar import OptionType
from .utils import *


class Renderer:
    """
    Render help and version views of commands to a rich console.

    Parameters
    - console: rich Console (stdout console when Unset).
    - styles: mapping of palette overrides.
    - colorful: apply the palette (and user label colours) when True.
    - fancy: wrap views in a rounded panel when True.
    """

    def __init__(self, console=Unset, *, styles=None, colorful=False, fancy=False):
        if not isinstance(console, Console | Unset):
            raise TypeError("renderer 'console' must be a rich console")
        self.console = Console() if console is Unset else console
        self.colorful = bool(colorful)
        self.fancy = bool(fancy)
        self.styles = defaultdict(str, {
            # === Head sections ===
            "usage-label": "bold #00E6FF",  # CYAN → signature info color
            "program-name": "bold #FF4D94",  # MAGENTA-PINK → brand pop
            "usage-section": "bold #36C5F0",  # SKY-BLUE → softer than cyan
            "description-section": "italic #A3A3A3",  # Neutral gray

            # === Tables ===
            "table-title": "bold #FFFFFF",
            "table-border": "#4B5563",  # Slate border
            "command-name": "bold #36C5F0",
            "flag-name": "bold #22C55E",
            "argument-name": "bold #00E6FF",
            "metavar": "bold #FFD600",  # AMBER for hints and types
            "description": "#9CA3AF",
            "default": "italic #737373",

            # === Version / panel ===
            "program-version": "bold #00E6FF",
            "panel-title": "bold #FF4D94",
        } | getattr(__import__("__main__"), "__styles__", {}) | dict(styles or {}))

    def _styler(self, style):
        return self.styles[style] if self.colorful else ""

    def _text(self, fragment, style=""):
        """
        normalize a fragment to rich Text, keeping user colour codes when colorful.
        """
        if isinstance(fragment, Text):
            return fragment if self.colorful else Text(fragment.plain)
        fragment = str(fragment)
        if "\x1b" in fragment:
            return Text.from_ansi(fragment) if self.colorful else Text(unstyle(fragment))
        return Text(fragment, self._styler(style))

    def _panel(self, renderable, title):
        if not self.fancy:
            return renderable
        return Panel(
            renderable,
            title=Text.assemble("[", " ", title.upper(), " ", "]", style=self._styler("panel-title")),
            title_align="left",
            box=ROUNDED,
        )

    @staticmethod
    def _flag(name):
        return ("-" if len(name) == 1 else "--") + name

    @staticmethod
    def _shape(param):
        """
        usage shape of a positional parameter: <name>, [name], <name...>, [name...].
        """
        name = param.name + "..." * param.variadic
        return f"<{name}>" if param.required else f"[{name}]"

    def usage(self, command):
        """
        Build the usage line: route, [command], [flags], positional shapes.
        """
        usage = Text()
        usage.append("usage", self._styler("usage-label")).append(": ")
        usage.append(" ".join(step.name for step in command.path), self._styler("program-name"))
        inputs = []
        if command.children:
            inputs.append("[command]")
        inputs.append("[flags]")
        inputs.extend(map(self._shape, command.params))
        usage.append(" ")
        usage.append(" ".join(inputs), self._styler("usage-section"))
        return usage

    def _commands(self, command):
        table = Table(
            "name", "aliases", "description",
            title=self._text("subcommands" if command.parent else "commands", "table-title"),
            title_justify="left",
            box=ROUNDED,
            border_style=self._styler("table-border"),
            header_style=self._styler("table-title"),
        )
        for child in command.children:
            table.add_row(
                self._text(child.name, "command-name"),
                self._text(", ".join(child.aliases), "command-name"),
                self._text(child.descr, "description"),
            )
        return table

    def _arguments(self, command):
        table = Table(
            "name", "type", "description", "default",
            title=self._text("arguments", "table-title"),
            title_justify="left",
            box=ROUNDED,
            border_style=self._styler("table-border"),
            header_style=self._styler("table-title"),
        )
        for param in command.params:
            table.add_row(
                self._text(self._shape(param), "argument-name"),
                self._text(param.hint or param.type, "metavar"),
                self._text(param.descr, "description"),
                self._text("" if param.default is Unset else repr(param.default), "default"),
            )
        return table

    def _flags(self, command):
        table = Table(
            "names", "type", "description", "default",
            title=self._text("flags", "table-title"),
            title_justify="left",
            box=ROUNDED,
            border_style=self._styler("table-border"),
            header_style=self._styler("table-title"),
        )
        for option in command.schema:
            # short names first, then the long ones
            names = sorted(map(self._flag, option.names), key=lambda x: (x.startswith("--"), len(x)))
            table.add_row(
                self._text(", ".join(names) + "!" * option.required, "flag-name"),
                self._text(option.hint or ("" if option.type is OptionType.BOOLEAN else option.type), "metavar"),
                self._text(option.descr, "description"),
                self._text("" if option.default is Unset else repr(option.default), "default"),
            )
        if "help" not in command.schema:
            table.add_row(
                self._text("-h, --help", "flag-name"),
                "",
                self._text("show this help message", "description"),
                "",
            )
        if "version" not in command.schema and command.root.version:
            table.add_row(
                self._text("--version", "flag-name"),
                "",
                self._text("show the version and exit", "description"),
                "",
            )
        return table

    def render_help(self, command):
        """
        Build the help renderable of a command without printing it.
        """
        renders = [self.usage(command)]
        if command.descr:
            renders.append(self._text(command.descr, "description-section"))
        if command.children:
            renders.append(self._commands(command))
        if command.params:
            renders.append(self._arguments(command))
        renders.append(self._flags(command))
        return self._panel(Group(*renders), f"{command.name} help")

    def render_version(self, command):
        """
        Build the version renderable ("name — version") without printing it.
        """
        return self._panel(Text(" — ").join((
            self._text(command.name, "program-name"),
            self._text(command.version or "1.0.0", "program-version"),
        )), f"{command.name} version")

    def help(self, command):
        """
        Print the help of a command.
        """
        self.console.print(self.render_help(command))

    def version(self, command):
        """
        Print the version of a command.
        """
        self.console.print(self.render_version(command))


__all__ = (
    "Renderer",
)
