"""Core data structures for wavescope.

This module defines both halves of the model: WaveformData, the immutable result
of parsing a dump file, and ViewState, the mutable window the user is looking at.
Don't confuse the two: WaveformData represents the whole trace, while ViewState
represents only the part visible to the user.

    WaveformData
    ├── signals: ["top.clk", "top.data", ...]   (declaration order)
    ├── values:  {"top.clk": [(0, Binary(V0)), (10, Binary(V1)), ...],
    │             "top.data": [(0, Bus("0F")), (10, Bus("1x1x0000")), ...]}
    └── max_time: 1000

    ViewState
    ├── time_start: 200                 (window is [200, 450))
    ├── time_range: 250
    ├── primary_marker: 310
    └── secondary_marker: None
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

Time = int  # In Timescale units


class Value(Enum):
    """Four-state logic value."""
    V0 = "0"
    V1 = "1"
    VX = "X"
    VZ = "Z"

    @classmethod
    def from_char(cls, c: str) -> Optional['Value']:
        """Convert a VCD scalar character (case-insensitive for x/z) to a Value."""
        return _CHAR_TO_VALUE.get(c)

    def __str__(self) -> str:
        return self.value


_CHAR_TO_VALUE: Dict[str, Value] = {
    '0': Value.V0,
    '1': Value.V1,
    'x': Value.VX,
    'X': Value.VX,
    'z': Value.VZ,
    'Z': Value.VZ,
}


@dataclass(frozen=True)
class Binary:
    """Value of a scalar (1-bit) signal."""
    value: Value

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Bus:
    """Value of a multi-bit signal.

    The string is one of:
    - uppercase hex digits, when every bit of the change was 0/1
    - the raw bit string, when any bit was x/z
    - "r<literal>" for real-valued changes (opaque label)
    """
    value: str

    @property
    def is_real(self) -> bool:
        return self.value.startswith('r')

    def __str__(self) -> str:
        return self.value


WaveValue = Union[Binary, Bus]

# Ordered (time, value) pairs for one signal
ChangeLog = List[Tuple[Time, WaveValue]]


class TimeUnit(Enum):
    FEMTOSECONDS = "fs"  # 10^-15 seconds
    PICOSECONDS = "ps"   # 10^-12 seconds
    NANOSECONDS = "ns"   # 10^-9 seconds
    MICROSECONDS = "us"  # 10^-6 seconds
    MILLISECONDS = "ms"  # 10^-3 seconds
    SECONDS = "s"        # 10^0 seconds

    @classmethod
    def from_string(cls, s: str) -> Optional['TimeUnit']:
        """Convert string representation to TimeUnit."""
        mapping = {
            'fs': cls.FEMTOSECONDS,
            'ps': cls.PICOSECONDS,
            'ns': cls.NANOSECONDS,
            'us': cls.MICROSECONDS,
            'μs': cls.MICROSECONDS,
            'ms': cls.MILLISECONDS,
            's': cls.SECONDS
        }
        return mapping.get(s.strip().lower()) if s else None

    def to_exponent(self) -> int:
        """Get the power of 10 exponent for this unit."""
        exponents: dict[TimeUnit, int] = {
            TimeUnit.FEMTOSECONDS: -15,
            TimeUnit.PICOSECONDS: -12,
            TimeUnit.NANOSECONDS: -9,
            TimeUnit.MICROSECONDS: -6,
            TimeUnit.MILLISECONDS: -3,
            TimeUnit.SECONDS: 0
        }
        return exponents[self]


@dataclass
class Timescale:
    """Represents the timescale of a waveform file."""
    factor: int  # The numeric factor (1, 10 or 100)
    unit: TimeUnit

    def __str__(self) -> str:
        return f"{self.factor}{self.unit.value}"


@dataclass
class WaveformData:
    """Everything parsed out of one dump file.

    Built once per load and never mutated afterwards; loading another file
    replaces the whole object.
    """
    signals: List[str] = field(default_factory=list)         # Declaration order
    values: Dict[str, ChangeLog] = field(default_factory=dict)
    max_time: Time = 0
    widths: Dict[str, int] = field(default_factory=dict)     # Declared bit width per signal
    timescale: Optional[Timescale] = None
    metadata: Dict[str, str] = field(default_factory=dict)   # $date, $version

    def change_log(self, signal: str) -> Optional[ChangeLog]:
        return self.values.get(signal)

    def is_bus(self, signal: str) -> bool:
        return self.widths.get(signal, 1) > 1


@dataclass
class ViewState:
    """Visible time window plus the two click markers.

    The window is the half-open interval [time_start, time_start + time_range).
    """
    time_start: Time = 0
    time_range: Time = 50
    primary_marker: Optional[Time] = None
    secondary_marker: Optional[Time] = None

    # Drag-to-zoom gesture in progress: (screen x, time at x)
    drag_start: Optional[Tuple[int, Time]] = None
    drag_current: Optional[Tuple[int, Time]] = None
    is_dragging: bool = False

    @property
    def time_end(self) -> Time:
        return self.time_start + self.time_range

    def contains(self, time: Time) -> bool:
        return self.time_start <= time < self.time_end


@dataclass
class Marker:
    """User-named marker saved at a fixed time."""
    name: str
    time: Time
    color: str = "green"
