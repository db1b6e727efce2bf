"""wavescope - VCD waveform parser and terminal-oriented waveform query engine."""

__version__ = "0.1.0"

from .data_model import (
    Value, Binary, Bus, WaveValue, WaveformData, ViewState, Marker, Timescale, TimeUnit
)
from .vcd_parser import VCDParser, parse_vcd_file, parse_vcd_text, binary_to_hex
from .value_format import Radix, format_bus, format_value
from .waveform_controller import WaveformController, NavigationError
from .commands import CommandRegistry, CommandResult, build_default_registry
from .signal_finder import SignalFinder
from .settings_manager import AppSettings, SettingsError, load_settings
from .persistence import save_session, load_session

__all__ = [
    'Value', 'Binary', 'Bus', 'WaveValue', 'WaveformData', 'ViewState', 'Marker',
    'Timescale', 'TimeUnit',
    'VCDParser', 'parse_vcd_file', 'parse_vcd_text', 'binary_to_hex',
    'Radix', 'format_bus', 'format_value',
    'WaveformController', 'NavigationError',
    'CommandRegistry', 'CommandResult', 'build_default_registry',
    'SignalFinder', 'AppSettings', 'SettingsError', 'load_settings',
    'save_session', 'load_session',
]
