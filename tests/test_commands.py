"""Tests for command-line mode: parsing, aliases, handlers and messages."""

import pytest

from wavescope.commands import (
    Command, CommandHistory, CommandRegistry, build_default_registry, parse_unsigned,
)


@pytest.fixture
def registry():
    return build_default_registry()


def run(registry, controller, line):
    result = registry.execute(line, controller)
    return result.success, result.message


def test_empty_line(registry, nav_controller):
    assert run(registry, nav_controller, "   ") == (False, "No command provided")


def test_unknown_command(registry, nav_controller):
    assert run(registry, nav_controller, "frobnicate 3") == (False, "Unknown command: frobnicate")


def test_goto(registry, nav_controller):
    nav_controller.view.time_range = 250
    assert run(registry, nav_controller, "goto 600") == (True, "Moved to time 600")
    assert nav_controller.view.time_start == 475


@pytest.mark.parametrize("line, message", [
    ("goto", "Usage: goto <time>"),
    ("goto soon", "Invalid time format"),
    ("goto -5", "Invalid time format"),
    ("goto 5000", "Time out of range (0-1000)"),
])
def test_goto_errors(registry, nav_controller, line, message):
    assert run(registry, nav_controller, line) == (False, message)
    assert nav_controller.view.time_start == 0


def test_zoom(registry, nav_controller):
    assert run(registry, nav_controller, "zoom 4") == (True, "Zoomed to 1/4")
    assert (nav_controller.view.time_start, nav_controller.view.time_range) == (375, 250)


@pytest.mark.parametrize("line, message", [
    ("zoom", "Usage: zoom <factor>"),
    ("zoom 0", "Invalid zoom factor"),
    ("zoom two", "Invalid zoom factor"),
])
def test_zoom_errors(registry, nav_controller, line, message):
    assert run(registry, nav_controller, line) == (False, message)
    assert nav_controller.view.time_range == 1000


def test_zoomfull_and_alias(registry, nav_controller):
    nav_controller.zoom_in()
    assert run(registry, nav_controller, "zf") == (True, "Zoomed to full view")
    assert nav_controller.view.time_range == 1000


def test_marker_add_and_remove(registry, nav_controller):
    assert run(registry, nav_controller, "marker add mymarker 500") == \
        (True, "Added marker 'mymarker' at time 500")
    assert nav_controller.get_marker("mymarker").time == 500
    assert run(registry, nav_controller, "m rm mymarker") == \
        (True, "Removed marker 'mymarker' at time 500")
    assert nav_controller.saved_markers == []


def test_marker_add_uses_primary_marker(registry, nav_controller):
    nav_controller.set_primary_marker(30, 100)
    assert run(registry, nav_controller, "m a here") == (True, "Added marker 'here' at time 300")


def test_marker_color(registry, nav_controller):
    nav_controller.add_marker("mymarker", 500)
    assert run(registry, nav_controller, "marker color mymarker blue") == \
        (True, "Set color of marker 'mymarker' to 'blue'")
    assert run(registry, nav_controller, "marker c mymarker not_a_color") == \
        (False, "Unknown color: not_a_color. Only ANSI colors are supported.")


@pytest.mark.parametrize("line, message", [
    ("marker", "Usage: marker add <name> [time] or marker remove <name>"),
    ("marker invalid mymarker", "Unknown subcommand."),
    ("marker add", "Usage: marker add <name> [time]"),
    ("marker remove", "Usage: marker remove <name>"),
    ("marker color mymarker", "Usage: marker color <name> <color>"),
    ("marker add mymarker not_a_number", "Invalid time format"),
    ("marker add mymarker 2000", "Time out of range (0-1000)"),
    ("marker add mymarker", "No time specified and primary marker not set"),
    ("marker remove mymarker", "No marker found with name 'mymarker'"),
])
def test_marker_errors(registry, nav_controller, line, message):
    assert run(registry, nav_controller, line) == (False, message)
    assert nav_controller.saved_markers == []


def test_marker_add_duplicate(registry, nav_controller):
    run(registry, nav_controller, "marker add mymarker 500")
    assert run(registry, nav_controller, "marker add mymarker 500") == \
        (False, "Marker 'mymarker' already exists")


def test_findsignal_opens_finder(registry, nav_controller):
    success, message = run(registry, nav_controller, "fs")
    assert success
    assert message == "Opening signal finder"
    assert nav_controller.signal_finder is not None
    assert nav_controller.signal_finder.selected_signals() == nav_controller.displayed_signals


def test_help_toggles_and_lists_commands(registry, nav_controller):
    success, message = run(registry, nav_controller, "help")
    assert success
    assert nav_controller.show_help is True
    for name in ("goto", "zoom", "zoomfull", "marker", "findsignal", "quit"):
        assert name in message
    run(registry, nav_controller, "h")
    assert nav_controller.show_help is False


def test_quit(registry, nav_controller):
    assert run(registry, nav_controller, "q") == (True, "Exiting wavescope...")
    assert nav_controller.exit_requested is True


def test_list_commands_excludes_aliases(registry):
    names = [name for name, _ in registry.list_commands()]
    assert names == ["zoom", "zoomfull", "goto", "marker", "findsignal", "help", "quit"]


def test_custom_command_registration(nav_controller):
    registry = CommandRegistry()
    registry.register(Command("echo", "Echo arguments", lambda args, ctrl: " ".join(args), ("e",)))
    assert registry.get("e") is registry.get("echo")
    assert run(registry, nav_controller, "e hello  world") == (True, "hello world")


def test_parse_unsigned():
    assert parse_unsigned("42") == 42
    assert parse_unsigned("-1") is None
    assert parse_unsigned("4.2") is None
    assert parse_unsigned("") is None


def test_command_history():
    history = CommandHistory()
    assert history.previous() is None

    history.add("zoom 2")
    history.add("goto 10")
    history.add("")
    assert history.previous() == "goto 10"
    assert history.previous() == "zoom 2"
    assert history.previous() == "zoom 2"
    assert history.next() == "goto 10"
    assert history.next() == "goto 10"
