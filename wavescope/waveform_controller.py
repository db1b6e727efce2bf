"""WaveformController: the non-UI owner of loaded data, view window and markers.

The controller holds the current WaveformData and ViewState and exposes every
navigation and marker operation by name with primitive arguments. Front ends
(the terminal UI, the command line, tests) drive it directly and observe it
through the event bus or the simple callback registry.

Failed operations raise NavigationError and leave the state unchanged.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Literal, Optional, Tuple, Union

from .application.event_bus import EventBus
from .application.events import (
    CursorMarkerMovedEvent, DisplayedSignalsChangedEvent, MarkerAddedEvent,
    MarkerColorChangedEvent, MarkerRemovedEvent, ViewChangedEvent, WaveformLoadedEvent,
)
from .config import ANSI_COLORS, NavigationConfig
from .data_model import Marker, Time, ViewState, WaveValue, WaveformData
from .settings_manager import AppSettings
from .signal_finder import SignalFinder
from . import signal_query
from .vcd_parser import parse_vcd_file

logger = logging.getLogger(__name__)

Callback = Callable[[], None]

_HEX_COLOR_RE = re.compile(r"#[0-9a-fA-F]{6}")


class NavigationError(ValueError):
    """A navigation or marker operation was rejected; state is unchanged."""


def is_valid_color(color: str) -> bool:
    """Accept ANSI color names (case-insensitive), 0-255 palette indices and #RRGGBB."""
    if color.lower() in ANSI_COLORS:
        return True
    if color.isdigit():
        return int(color) <= 255
    return bool(_HEX_COLOR_RE.fullmatch(color))


@dataclass
class WaveformController:
    """Controller for one viewing session.

    Responsibilities:
    - Own the loaded WaveformData; replace it wholesale on load.
    - Own the ViewState and apply pan/zoom/goto/drag transforms to it.
    - Track the two click markers and the list of named markers.
    - Track which signals are displayed, in declaration order.
    """

    settings: AppSettings = field(default_factory=AppSettings)
    waveform: WaveformData = field(default_factory=WaveformData)
    view: Optional[ViewState] = None
    displayed_signals: List[str] = field(default_factory=list)
    saved_markers: List[Marker] = field(default_factory=list)
    file_path: Optional[str] = None
    exit_requested: bool = False
    show_help: bool = False
    signal_finder: Optional[SignalFinder] = None
    event_bus: EventBus = field(default_factory=EventBus)

    _callbacks: Dict[str, List[Callback]] = field(default_factory=lambda: {
        "waveform_changed": [],
        "view_changed": [],
        "markers_changed": [],
        "signals_changed": [],
    })

    def __post_init__(self) -> None:
        if self.view is None:
            self.view = ViewState(time_range=self.nav.DEFAULT_TIME_RANGE)

    @property
    def nav(self) -> NavigationConfig:
        return self.settings.navigation

    @property
    def max_time(self) -> Time:
        return self.waveform.max_time

    # ---- Subscription API ----
    def on(self, event_name: str, callback: Callback) -> None:
        self._callbacks.setdefault(event_name, []).append(callback)

    def off(self, event_name: str, callback: Callback) -> None:
        callbacks = self._callbacks.get(event_name, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def _emit(self, event_name: str) -> None:
        for cb in list(self._callbacks.get(event_name, [])):
            try:
                cb()
            except Exception:
                logger.exception("Callback for %s failed", event_name)

    # ---- Loading ----
    def load_file(self, path: Union[str, Path]) -> None:
        """Parse path and make it the current waveform.

        Raises OSError if the file cannot be read; the previously loaded data
        and view are left untouched in that case.
        """
        data = parse_vcd_file(path)
        self.set_waveform(data, str(path))

    def set_waveform(self, data: WaveformData, file_path: Optional[str] = None) -> None:
        """Replace the loaded data and reset the view to the whole trace."""
        old_start, old_range = self.view.time_start, self.view.time_range
        self.waveform = data
        self.file_path = file_path
        self.view = ViewState(time_start=0, time_range=data.max_time)
        self.saved_markers = []
        self.displayed_signals = list(data.signals)
        self.signal_finder = None
        logger.debug("Showing %s: %d signals over [0, %d]",
                     file_path or "<memory>", len(data.signals), data.max_time)

        self.event_bus.publish(WaveformLoadedEvent(
            file_path=file_path or "",
            signal_count=len(data.signals),
            max_time=data.max_time,
        ))
        self.event_bus.publish(ViewChangedEvent(
            old_start=old_start, old_range=old_range,
            new_start=0, new_range=data.max_time,
        ))
        self._emit("waveform_changed")
        self._emit("view_changed")

    # ---- View window ----
    def _set_window(self, start: Time, time_range: Time) -> None:
        old_start, old_range = self.view.time_start, self.view.time_range
        if (start, time_range) == (old_start, old_range):
            return
        self.view.time_start = start
        self.view.time_range = time_range
        self.event_bus.publish(ViewChangedEvent(
            old_start=old_start, old_range=old_range,
            new_start=start, new_range=time_range,
        ))
        self._emit("view_changed")

    def _center(self) -> Time:
        return self.view.time_start + self.view.time_range // 2

    def pan(self, direction: Union[int, Literal['left', 'right']]) -> None:
        """Shift the window by a quarter of its width.

        direction is 'left'/'right' or a signed integer (negative is left).
        The new start is clamped to [0, max_time - time_range].
        """
        if isinstance(direction, str):
            if direction not in ('left', 'right'):
                raise NavigationError(f"Invalid pan direction: {direction}")
            sign = -1 if direction == 'left' else 1
        else:
            sign = -1 if direction < 0 else 1

        step = self.view.time_range // self.nav.PAN_DIVISOR
        upper = max(self.max_time - self.view.time_range, 0)
        new_start = self.view.time_start + sign * step
        new_start = min(max(new_start, 0), upper)
        self._set_window(new_start, self.view.time_range)

    def pan_left(self) -> None:
        self.pan('left')

    def pan_right(self) -> None:
        self.pan('right')

    def zoom_in(self) -> None:
        """Halve the window around its center, down to the minimum range."""
        new_range = max(self.view.time_range // 2, self.nav.MIN_TIME_RANGE)
        new_start = max(self._center() - new_range // 2, 0)
        self._set_window(new_start, new_range)

    def zoom_out(self) -> None:
        """Double the window around its center, up to the whole trace."""
        new_range = max(min(self.view.time_range * 2, self.max_time), self.nav.MIN_TIME_RANGE)
        new_start = max(self._center() - new_range // 2, 0)
        if new_start + new_range > self.max_time:
            new_start = max(self.max_time - new_range, 0)
        self._set_window(new_start, new_range)

    def zoom_to_factor(self, factor: int) -> None:
        """Show 1/factor of the trace, keeping the current center."""
        if factor <= 0:
            raise NavigationError("Invalid zoom factor")
        new_range = max(self.max_time // factor, self.nav.MIN_TIME_RANGE)
        new_start = max(self._center() - new_range // 2, 0)
        new_start = min(new_start, max(self.max_time - new_range, 0))
        self._set_window(new_start, new_range)

    def zoom_full(self) -> None:
        self._set_window(0, self.max_time)

    def goto(self, time: Time) -> None:
        """Center the window on time."""
        if time < 0 or time > self.max_time:
            raise NavigationError(f"Time out of range (0-{self.max_time})")
        self._set_window(max(time - self.view.time_range // 2, 0), self.view.time_range)

    # ---- Screen mapping and drag-to-zoom ----
    def screen_pos_to_time(self, x: float, width: float) -> Time:
        """Map a horizontal offset inside a plot area of width to a time."""
        if width <= 0:
            return self.view.time_start
        exact = self.view.time_start + (x / width) * self.view.time_range
        # Round half away from zero
        return max(int(math.floor(exact + 0.5)), 0)

    def drag_select(self, p1: float, p2: float, width: float) -> bool:
        """Zoom to the span between two screen offsets.

        Returns False, without changing anything, if the offsets are too close
        to count as an intentional drag.
        """
        if abs(p1 - p2) <= self.nav.DRAG_STARTED_THRESHOLD_PIXELS:
            return False
        t1 = self.screen_pos_to_time(p1, width)
        t2 = self.screen_pos_to_time(p2, width)
        start = min(t1, t2)
        self._set_window(start, max(max(t1, t2) - start, 1))
        return True

    def begin_drag(self, x: float, width: float) -> None:
        t = self.screen_pos_to_time(x, width)
        self.view.drag_start = (int(x), t)
        self.view.drag_current = (int(x), t)
        self.view.is_dragging = False

    def update_drag(self, x: float, width: float) -> None:
        if self.view.drag_start is None:
            return
        self.view.drag_current = (int(x), self.screen_pos_to_time(x, width))
        if abs(x - self.view.drag_start[0]) > self.nav.DRAG_DETECTED_THRESHOLD_PIXELS:
            self.view.is_dragging = True

    def drag_span(self) -> Optional[Tuple[Time, Time]]:
        """Time span covered by the drag in progress, for highlighting."""
        if not self.view.is_dragging or self.view.drag_start is None or self.view.drag_current is None:
            return None
        t1, t2 = self.view.drag_start[1], self.view.drag_current[1]
        return min(t1, t2), max(t1, t2)

    def end_drag(self, x: float, width: float) -> bool:
        """Finish a press/move/release gesture.

        A release that never moved past the detection threshold is a click and
        sets the primary marker. Returns True if the window was zoomed.
        """
        start = self.view.drag_start
        if start is None:
            return False
        committed = False
        if self.view.is_dragging:
            committed = self.drag_select(start[0], x, width)
        else:
            self.set_primary_marker(x, width)
        self.view.drag_start = None
        self.view.drag_current = None
        self.view.is_dragging = False
        return committed

    # ---- Click markers ----
    def _move_cursor_marker(self, which: Literal['primary', 'secondary'], new_time: Optional[Time]) -> None:
        attr = f"{which}_marker"
        old_time = getattr(self.view, attr)
        if old_time == new_time:
            return
        setattr(self.view, attr, new_time)
        self.event_bus.publish(CursorMarkerMovedEvent(which=which, old_time=old_time, new_time=new_time))
        self._emit("markers_changed")

    def set_primary_marker(self, x: float, width: float) -> Time:
        t = self.screen_pos_to_time(x, width)
        self._move_cursor_marker('primary', t)
        return t

    def set_secondary_marker(self, x: float, width: float) -> Time:
        t = self.screen_pos_to_time(x, width)
        self._move_cursor_marker('secondary', t)
        return t

    def clear_primary_marker(self) -> None:
        self._move_cursor_marker('primary', None)

    def clear_secondary_marker(self) -> None:
        self._move_cursor_marker('secondary', None)

    def marker_delta(self) -> Optional[Time]:
        """Absolute distance between the primary and secondary markers."""
        if self.view.primary_marker is None or self.view.secondary_marker is None:
            return None
        return abs(self.view.secondary_marker - self.view.primary_marker)

    # ---- Named markers ----
    def get_marker(self, name: str) -> Optional[Marker]:
        for marker in self.saved_markers:
            if marker.name == name:
                return marker
        return None

    def add_marker(self, name: str, time: Optional[Time] = None) -> Marker:
        """Save a named marker at time, or at the primary marker if time is None."""
        if time is None:
            time = self.view.primary_marker
            if time is None:
                raise NavigationError("No time specified and primary marker not set")
        if time < 0 or time > self.max_time:
            raise NavigationError(f"Time out of range (0-{self.max_time})")
        if self.get_marker(name) is not None:
            raise NavigationError(f"Marker '{name}' already exists")

        marker = Marker(name=name, time=time, color=self.settings.ui.saved_marker_color)
        self.saved_markers.append(marker)
        self.event_bus.publish(MarkerAddedEvent(marker_name=name, time=time))
        self._emit("markers_changed")
        return marker

    def remove_marker(self, name: str) -> Marker:
        marker = self.get_marker(name)
        if marker is None:
            raise NavigationError(f"No marker found with name '{name}'")
        self.saved_markers.remove(marker)
        self.event_bus.publish(MarkerRemovedEvent(marker_name=name))
        self._emit("markers_changed")
        return marker

    def set_marker_color(self, name: str, color: str) -> Marker:
        marker = self.get_marker(name)
        if marker is None:
            raise NavigationError(f"No marker found with name '{name}'")
        if not is_valid_color(color):
            raise NavigationError(f"Unknown color: {color}. Only ANSI colors are supported.")
        marker.color = color
        self.event_bus.publish(MarkerColorChangedEvent(marker_name=name, color=color))
        self._emit("markers_changed")
        return marker

    # ---- Displayed signals ----
    def set_displayed_signals(self, names: Iterable[str]) -> None:
        """Display exactly the given signals, kept in declaration order."""
        wanted = set(names)
        unknown = wanted.difference(self.waveform.signals)
        if unknown:
            logger.warning("Ignoring unknown signals: %s", ", ".join(sorted(unknown)))
        new_list = [s for s in self.waveform.signals if s in wanted]
        if new_list == self.displayed_signals:
            return
        self.displayed_signals = new_list
        self.event_bus.publish(DisplayedSignalsChangedEvent(signals=list(new_list)))
        self._emit("signals_changed")

    def open_signal_finder(self) -> SignalFinder:
        self.signal_finder = SignalFinder(self.waveform.signals, self.displayed_signals)
        return self.signal_finder

    def apply_signal_finder(self) -> None:
        """Commit the finder's selection as the displayed signals and close it."""
        if self.signal_finder is None:
            return
        self.set_displayed_signals(self.signal_finder.selected_signals())
        self.signal_finder = None

    def close_signal_finder(self) -> None:
        self.signal_finder = None

    # ---- Queries ----
    def visible_values(self, signal: str) -> List[Tuple[Time, WaveValue]]:
        return signal_query.visible_values(self.waveform, signal, self.view, self.displayed_signals)

    def value_at(self, signal: str, time: Time) -> Optional[WaveValue]:
        return signal_query.value_at(self.waveform, signal, time)

    def transition_at(self, signal: str, time: Time) -> Optional[str]:
        return signal_query.transition_at(self.waveform, signal, time)

    def request_exit(self) -> None:
        self.exit_requested = True

    def toggle_help(self) -> bool:
        self.show_help = not self.show_help
        return self.show_help
