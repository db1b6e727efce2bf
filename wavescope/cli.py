"""Command-line entry point: load a dump, run commands, print values at a time."""

import argparse
import logging
import sys
from typing import List, Optional, TextIO

from .commands import build_default_registry
from .data_model import Time
from .persistence import save_session
from .settings_manager import SettingsError, load_settings
from .value_format import Radix, format_value
from .waveform_controller import WaveformController

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wavescope",
        description="Inspect signal values in a VCD waveform file",
    )
    parser.add_argument("file", help="VCD file to load")
    parser.add_argument("-c", "--config", help="Configuration file (default: XDG config location)")
    parser.add_argument("-t", "--time", type=int,
                        help="Time to report values at (default: primary marker, else view start)")
    parser.add_argument("-r", "--radix", default="hex", choices=["bin", "oct", "dec", "hex"],
                        help="Radix for bus values")
    parser.add_argument("-s", "--signal", action="append", dest="signals", metavar="SIGNAL",
                        help="Only show this signal (repeatable)")
    parser.add_argument("-x", "--execute", action="append", dest="commands", metavar="COMMAND",
                        help="Run a command before printing, e.g. 'zoom 4' (repeatable)")
    parser.add_argument("--uppercase", action="store_true", help="Uppercase hex digits")
    parser.add_argument("--prefix", action="store_true", help="Prefix bus values with 0b/0o/0d/0x")
    parser.add_argument("--save-session", metavar="PATH", help="Write the resulting session to PATH")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def report_time(controller: WaveformController, requested: Optional[Time]) -> Time:
    if requested is not None:
        return requested
    if controller.view.primary_marker is not None:
        return controller.view.primary_marker
    return controller.view.time_start


def print_report(controller: WaveformController, time: Time, radix: Radix,
                 uppercase: bool = False, prefix: bool = False, out: Optional[TextIO] = None) -> None:
    if out is None:
        out = sys.stdout
    data = controller.waveform
    view = controller.view
    print(f"File: {controller.file_path}", file=out)
    if data.timescale is not None:
        print(f"Timescale: {data.timescale}", file=out)
    print(f"View: [{view.time_start}, {view.time_end}) of {data.max_time}", file=out)
    for marker in controller.saved_markers:
        print(f"Marker {marker.name}: {marker.time}", file=out)
    print(f"Time: {time}", file=out)

    width = max((len(name) for name in controller.displayed_signals), default=0)
    for name in controller.displayed_signals:
        value = controller.value_at(name, time)
        text = "-" if value is None else format_value(value, radix, uppercase, prefix)
        line = f"{name.ljust(width)}  {text}"
        transition = controller.transition_at(name, time)
        if transition is not None:
            line += f"  ({transition})"
        print(line, file=out)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = load_settings(args.config)
    except SettingsError as e:
        print(f"wavescope: {e}", file=sys.stderr)
        return 1

    controller = WaveformController(settings=settings)
    try:
        controller.load_file(args.file)
    except OSError as e:
        print(f"wavescope: cannot read {args.file}: {e}", file=sys.stderr)
        return 1

    if args.signals:
        controller.set_displayed_signals(args.signals)

    status = 0
    registry = build_default_registry()
    for line in args.commands or []:
        result = registry.execute(line, controller)
        if result.success:
            logger.info("%s: %s", line, result.message)
        else:
            print(f"wavescope: {line}: {result.message}", file=sys.stderr)
            status = 1
        if controller.exit_requested:
            return status

    time = report_time(controller, args.time)
    if time < 0 or time > controller.max_time:
        print(f"wavescope: Time out of range (0-{controller.max_time})", file=sys.stderr)
        return 1

    print_report(controller, time, Radix.from_string(args.radix), args.uppercase, args.prefix)

    if args.save_session:
        try:
            save_session(controller, args.save_session)
        except OSError as e:
            print(f"wavescope: cannot write {args.save_session}: {e}", file=sys.stderr)
            return 1
    return status


if __name__ == "__main__":
    sys.exit(main())
