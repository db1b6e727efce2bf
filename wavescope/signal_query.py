"""Time-series queries against per-signal change logs.

All functions are read-only. They rely on each change log being ordered by
nondecreasing time, which the parser guarantees, and use bisection on the
timestamps instead of scanning.
"""

from bisect import bisect_left, bisect_right
from typing import Container, List, Optional, Tuple

from .data_model import Binary, Bus, ChangeLog, Time, ViewState, WaveValue, WaveformData


def _times(changes: ChangeLog) -> List[Time]:
    return [t for t, _ in changes]


def visible_values(data: WaveformData, signal: str, view: ViewState,
                   displayed_signals: Container[str]) -> List[Tuple[Time, WaveValue]]:
    """Changes inside the view window, seeded with the value carried in from the left.

    Returns every change with time in [time_start, time_start + time_range).
    If a change exists strictly before time_start, the last such value is
    prepended as a synthetic entry at time_start, so the window always opens
    with a defined value. Signals that are not displayed yield nothing.
    """
    if signal not in displayed_signals:
        return []
    changes = data.values.get(signal)
    if not changes:
        return []

    times = _times(changes)
    lo = bisect_left(times, view.time_start)
    hi = bisect_left(times, view.time_start + view.time_range)

    result: List[Tuple[Time, WaveValue]] = []
    if lo > 0:
        result.append((view.time_start, changes[lo - 1][1]))
    result.extend(changes[lo:hi])
    return result


def value_at(data: WaveformData, signal: str, time: Time) -> Optional[WaveValue]:
    """Value of the last change at or before time, or None."""
    changes = data.values.get(signal)
    if not changes:
        return None
    idx = bisect_right(_times(changes), time)
    if idx == 0:
        return None
    return changes[idx - 1][1]


def values_equal(v1: WaveValue, v2: WaveValue) -> bool:
    """Exact variant-and-payload equality; Binary never equals Bus."""
    return type(v1) is type(v2) and v1 == v2


def format_transition(before: WaveValue, after: WaveValue) -> str:
    """Render a transition as "before->after".

    Scalars use the value names (V0, V1, VX, VZ); buses use their raw strings.
    Mixed variants cannot occur for one signal and render as "???".
    """
    if isinstance(before, Binary) and isinstance(after, Binary):
        return f"{before.value.name}->{after.value.name}"
    if isinstance(before, Bus) and isinstance(after, Bus):
        return f"{before.value}->{after.value}"
    return "???"


def transition_at(data: WaveformData, signal: str, time: Time) -> Optional[str]:
    """Describe a real value change occurring exactly at time.

    Only changes that have a predecessor and differ from it count. When
    several changes share the timestamp, the first differing one is reported.
    """
    changes = data.values.get(signal)
    if not changes:
        return None
    times = _times(changes)
    lo = bisect_left(times, time)
    hi = bisect_right(times, time)
    for i in range(max(lo, 1), hi):
        before = changes[i - 1][1]
        after = changes[i][1]
        if not values_equal(before, after):
            return format_transition(before, after)
    return None
