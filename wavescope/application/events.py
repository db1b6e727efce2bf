"""Event classes published by WaveformController."""

from dataclasses import dataclass, field
from typing import Literal, Optional
import time

from wavescope.data_model import Time


@dataclass(frozen=True, kw_only=True)
class Event:
    """Base class for all events."""
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True, kw_only=True)
class WaveformLoadedEvent(Event):
    """Emitted after a new file replaced the waveform data."""
    file_path: str
    signal_count: int
    max_time: Time


@dataclass(frozen=True, kw_only=True)
class ViewChangedEvent(Event):
    """Emitted when the visible time window changes."""
    old_start: Time
    old_range: Time
    new_start: Time
    new_range: Time


@dataclass(frozen=True, kw_only=True)
class CursorMarkerMovedEvent(Event):
    """Emitted when the primary or secondary click marker moves or is cleared."""
    which: Literal['primary', 'secondary']
    old_time: Optional[Time]
    new_time: Optional[Time]


@dataclass(frozen=True, kw_only=True)
class MarkerAddedEvent(Event):
    """Emitted when a named marker is saved."""
    marker_name: str
    time: Time


@dataclass(frozen=True, kw_only=True)
class MarkerRemovedEvent(Event):
    """Emitted when a named marker is removed."""
    marker_name: str


@dataclass(frozen=True, kw_only=True)
class MarkerColorChangedEvent(Event):
    """Emitted when a named marker changes color."""
    marker_name: str
    color: str


@dataclass(frozen=True, kw_only=True)
class DisplayedSignalsChangedEvent(Event):
    """Emitted when the set of displayed signals changes."""
    signals: list[str]
