"""Persistence module for saving and loading a viewing session as YAML."""

import logging
import pathlib
from dataclasses import asdict
from typing import Any, Dict, Optional, Union

import yaml

from .data_model import Marker
from .settings_manager import AppSettings
from .waveform_controller import WaveformController

logger = logging.getLogger(__name__)

PathLike = Union[str, pathlib.Path]


class SessionError(Exception):
    """Raised when a session file is malformed."""


def session_to_dict(controller: WaveformController) -> Dict[str, Any]:
    view = controller.view
    waveform_path = None
    if controller.file_path:
        waveform_path = str(pathlib.Path(controller.file_path).resolve())
    return {
        'waveform': waveform_path,
        'displayed_signals': list(controller.displayed_signals),
        'view': {
            'time_start': view.time_start,
            'time_range': view.time_range,
        },
        'primary_marker': view.primary_marker,
        'secondary_marker': view.secondary_marker,
        'markers': [asdict(marker) for marker in controller.saved_markers],
    }


def save_session(controller: WaveformController, path: PathLike) -> None:
    """
    Serialize the session to YAML. The waveform data itself is not stored,
    only the path of the dump file so it can be parsed again on load.
    """
    data = session_to_dict(controller)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    logger.debug("Saved session to %s", path)


def load_session(path: PathLike, settings: Optional[AppSettings] = None) -> WaveformController:
    """
    Read a session file, re-parse its waveform and restore the saved state.

    A relative waveform path is resolved against the session file's directory.

    Raises:
        OSError: if the session file or the waveform cannot be read.
        SessionError: if the session file is not a valid session.
    """
    path = pathlib.Path(path)
    with open(path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise SessionError(f"Error parsing session file: {e}") from e

    if not isinstance(data, dict):
        raise SessionError("Session file must contain a mapping")

    controller = WaveformController(settings=settings or AppSettings())

    waveform = data.get('waveform')
    if waveform:
        waveform_path = pathlib.Path(waveform)
        if not waveform_path.is_absolute():
            waveform_path = path.parent / waveform_path
        controller.load_file(waveform_path)

    try:
        _restore_state(controller, data, loaded=bool(waveform))
    except (TypeError, ValueError) as e:
        raise SessionError(f"Invalid session data: {e}") from e
    return controller


def _require_time(value: Any, what: str, upper: Optional[int] = None) -> int:
    time = int(value)
    if time < 0 or (upper is not None and time > upper):
        limit = f"0-{upper}" if upper is not None else ">= 0"
        raise SessionError(f"{what} out of range ({limit}): {time}")
    return time


def _restore_state(controller: WaveformController, data: Dict[str, Any], loaded: bool) -> None:
    # Without a waveform there is no trace end to check against
    upper = controller.max_time if loaded else None

    if 'displayed_signals' in data:
        controller.set_displayed_signals(data['displayed_signals'] or [])

    view_data = data.get('view') or {}
    if not isinstance(view_data, dict):
        raise SessionError("'view' must be a mapping")
    view = controller.view
    time_start = _require_time(view_data.get('time_start', view.time_start), "View start", upper)
    time_range = int(view_data.get('time_range', view.time_range))
    if time_range <= 0:
        raise SessionError(f"View range must be positive: {time_range}")
    view.time_start, view.time_range = time_start, time_range

    for attr in ('primary_marker', 'secondary_marker'):
        value = data.get(attr)
        setattr(view, attr, None if value is None else _require_time(value, attr))

    markers = []
    for entry in data.get('markers') or []:
        if not isinstance(entry, dict):
            raise SessionError(f"Marker entry must be a mapping: {entry!r}")
        marker = Marker(**entry)
        marker.time = _require_time(marker.time, f"Marker '{marker.name}'", upper)
        markers.append(marker)
    controller.saved_markers = markers
