"""Command-line mode: a name -> handler map built once at startup.

A command line such as ``marker add reset 120`` is split on whitespace; the
first word selects the command (by name or alias) and the rest are passed to
its handler together with the controller. Handlers return the message to
show, or raise CommandError. Navigation failures from the controller surface
the same way, so execute() never raises for bad user input.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .waveform_controller import NavigationError, WaveformController

logger = logging.getLogger(__name__)

Handler = Callable[[Sequence[str], WaveformController], str]


class CommandError(Exception):
    """Raised by a handler to report a user-facing error message."""


@dataclass(frozen=True)
class CommandResult:
    success: bool
    message: str


@dataclass(frozen=True)
class Command:
    name: str
    description: str
    handler: Handler
    aliases: Tuple[str, ...] = ()


class CommandRegistry:
    """Lookup table of commands keyed by name and by every alias."""

    def __init__(self) -> None:
        self._commands: Dict[str, Command] = {}
        self._order: List[Command] = []

    def register(self, command: Command) -> None:
        for key in (command.name, *command.aliases):
            self._commands[key] = command
        self._order.append(command)

    def get(self, name: str) -> Optional[Command]:
        return self._commands.get(name)

    def list_commands(self) -> List[Tuple[str, str]]:
        """(name, description) for every primary command, in registration order."""
        return [(c.name, c.description) for c in self._order]

    def execute(self, line: str, controller: WaveformController) -> CommandResult:
        parts = line.split()
        if not parts:
            return CommandResult(False, "No command provided")

        name, args = parts[0], parts[1:]
        command = self.get(name)
        if command is None:
            return CommandResult(False, f"Unknown command: {name}")

        try:
            return CommandResult(True, command.handler(args, controller))
        except (CommandError, NavigationError) as e:
            logger.debug("Command %r rejected: %s", line, e)
            return CommandResult(False, str(e))


@dataclass
class CommandHistory:
    """Previously executed command lines, browsable with up/down."""
    entries: List[str] = field(default_factory=list)
    index: Optional[int] = None

    def add(self, line: str) -> None:
        if line:
            self.entries.append(line)
        self.index = None

    def previous(self) -> Optional[str]:
        if not self.entries:
            return None
        if self.index is None:
            self.index = len(self.entries) - 1
        elif self.index > 0:
            self.index -= 1
        return self.entries[self.index]

    def next(self) -> Optional[str]:
        if not self.entries:
            return None
        if self.index is None:
            self.index = 0
        elif self.index < len(self.entries) - 1:
            self.index += 1
        return self.entries[self.index]


def parse_unsigned(text: str) -> Optional[int]:
    """Parse a non-negative decimal integer, or return None."""
    if text.isascii() and text.isdigit():
        return int(text)
    return None


# ---- Handlers ----

def _goto(args: Sequence[str], controller: WaveformController) -> str:
    if not args:
        raise CommandError("Usage: goto <time>")
    time = parse_unsigned(args[0])
    if time is None:
        raise CommandError("Invalid time format")
    controller.goto(time)
    return f"Moved to time {time}"


def _zoom(args: Sequence[str], controller: WaveformController) -> str:
    if not args:
        raise CommandError("Usage: zoom <factor>")
    factor = parse_unsigned(args[0])
    if not factor:
        raise CommandError("Invalid zoom factor")
    controller.zoom_to_factor(factor)
    return f"Zoomed to 1/{factor}"


def _zoomfull(args: Sequence[str], controller: WaveformController) -> str:
    controller.zoom_full()
    return "Zoomed to full view"


def _marker_add(args: Sequence[str], controller: WaveformController) -> str:
    if not args:
        raise CommandError("Usage: marker add <name> [time]")
    name = args[0]
    time = None
    if len(args) >= 2:
        time = parse_unsigned(args[1])
        if time is None:
            raise CommandError("Invalid time format")
    marker = controller.add_marker(name, time)
    return f"Added marker '{marker.name}' at time {marker.time}"


def _marker_remove(args: Sequence[str], controller: WaveformController) -> str:
    if not args:
        raise CommandError("Usage: marker remove <name>")
    marker = controller.remove_marker(args[0])
    return f"Removed marker '{marker.name}' at time {marker.time}"


def _marker_color(args: Sequence[str], controller: WaveformController) -> str:
    if len(args) < 2:
        raise CommandError("Usage: marker color <name> <color>")
    name, color = args[0], args[1]
    controller.set_marker_color(name, color)
    return f"Set color of marker '{name}' to '{color}'"


_MARKER_SUBCOMMANDS: Dict[str, Handler] = {
    'add': _marker_add,
    'a': _marker_add,
    'remove': _marker_remove,
    'rm': _marker_remove,
    'color': _marker_color,
    'c': _marker_color,
}


def _marker(args: Sequence[str], controller: WaveformController) -> str:
    if not args:
        raise CommandError("Usage: marker add <name> [time] or marker remove <name>")
    handler = _MARKER_SUBCOMMANDS.get(args[0])
    if handler is None:
        raise CommandError("Unknown subcommand.")
    return handler(args[1:], controller)


def _findsignal(args: Sequence[str], controller: WaveformController) -> str:
    controller.open_signal_finder()
    return "Opening signal finder"


def _quit(args: Sequence[str], controller: WaveformController) -> str:
    controller.request_exit()
    return "Exiting wavescope..."


def build_default_registry() -> CommandRegistry:
    """Registry with every built-in command."""
    registry = CommandRegistry()
    registry.register(Command("zoom", "Zoom to a specific level", _zoom))
    registry.register(Command("zoomfull", "Zoom to show the full waveform", _zoomfull, ("zf",)))
    registry.register(Command("goto", "Move to a specific time", _goto))
    registry.register(Command("marker", "Add or remove saved markers with names", _marker, ("m",)))
    registry.register(Command("findsignal", "Open signal finder to select signals to display",
                              _findsignal, ("fs",)))

    def _help(args: Sequence[str], controller: WaveformController) -> str:
        controller.toggle_help()
        return "; ".join(f"{name}: {desc}" for name, desc in registry.list_commands())

    registry.register(Command("help", "Show help information", _help, ("h",)))
    registry.register(Command("quit", "Quit wavescope", _quit, ("q",)))
    return registry
