"""
User settings loaded from a YAML configuration file.

Settings are an explicit value: load them once with load_settings() and pass
the resulting AppSettings to the controller and command handlers.

Example config.yaml:

    ui:
      signal_list_width: 30
      marker_color_primary: red
    keybindings:
      zoom_in: "="
"""

import logging
import os
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .config import CONFIG_DIR_NAME, CONFIG_FILE_NAME, NavigationConfig, UI_DEFAULTS

logger = logging.getLogger(__name__)


class SettingsError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


@dataclass
class UISettings:
    signal_list_width: int = UI_DEFAULTS.SIGNAL_LIST_WIDTH
    marker_color_primary: str = UI_DEFAULTS.MARKER_COLOR_PRIMARY
    marker_color_secondary: str = UI_DEFAULTS.MARKER_COLOR_SECONDARY
    drag_color: str = UI_DEFAULTS.DRAG_COLOR
    saved_marker_color: str = UI_DEFAULTS.SAVED_MARKER_COLOR


@dataclass
class KeyBindings:
    """Action name -> key name. Key names are opaque strings to the core."""
    enter_command_mode: str = ":"
    up: str = "Up"
    down: str = "Down"
    left: str = "Left"
    right: str = "Right"
    zoom_in: str = "+"
    zoom_out: str = "-"
    zoom_full: str = "0"
    delete_primary_marker: str = "Delete"
    delete_secondary_marker: str = "Backspace"
    enter_normal_mode: str = "Esc"
    execute_command: str = "Enter"

    def action_for(self, key: str) -> Optional[str]:
        """Reverse lookup: which action is bound to key."""
        for f in fields(self):
            if getattr(self, f.name) == key:
                return f.name
        return None


@dataclass
class AppSettings:
    ui: UISettings = field(default_factory=UISettings)
    keybindings: KeyBindings = field(default_factory=KeyBindings)
    navigation: NavigationConfig = field(default_factory=NavigationConfig)
    config_path: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'ui': asdict(self.ui), 'keybindings': asdict(self.keybindings)}


def default_config_path() -> Path:
    """Platform config location, following the XDG base directory convention."""
    base = os.environ.get("XDG_CONFIG_HOME")
    config_home = Path(base) if base else Path.home() / ".config"
    return config_home / CONFIG_DIR_NAME / CONFIG_FILE_NAME


def _build_section(cls: type, data: Any, section: str) -> Any:
    """Instantiate a settings dataclass, keeping defaults for missing keys."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise SettingsError(f"Section '{section}' must be a mapping")
    known = {f.name: f for f in fields(cls)}
    kwargs: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown setting %s.%s", section, key)
            continue
        default = getattr(cls(), key)
        if isinstance(default, int) and not isinstance(value, int):
            raise SettingsError(f"Setting {section}.{key} must be an integer")
        kwargs[key] = value if isinstance(default, int) else str(value)
    return cls(**kwargs)


def _read_settings(path: Path) -> AppSettings:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise SettingsError(f"Error reading config file: {e}") from e
    except yaml.YAMLError as e:
        raise SettingsError(f"Error parsing config file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SettingsError("Error parsing config file: top level must be a mapping")

    settings = AppSettings(
        ui=_build_section(UISettings, data.get('ui'), 'ui'),
        keybindings=_build_section(KeyBindings, data.get('keybindings'), 'keybindings'),
        config_path=path,
    )
    logger.debug("Loaded settings from %s", path)
    return settings


def load_settings(path_override: Optional[Union[str, Path]] = None) -> AppSettings:
    """
    Load application settings.

    Priority:
    1. The override path, if given (must exist)
    2. The default config location, if a file exists there
    3. Built-in defaults

    Raises:
        SettingsError: if a config file exists but cannot be read or parsed,
                       or the override path does not exist.
    """
    if path_override is not None:
        path = Path(path_override)
        if not path.exists():
            raise SettingsError(f"Override config path does not exist: {path}")
        return _read_settings(path)

    path = default_config_path()
    if path.exists():
        return _read_settings(path)

    return AppSettings()


def save_settings(settings: AppSettings, path: Union[str, Path]) -> None:
    """Write settings as YAML, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(settings.to_dict(), f, default_flow_style=False, sort_keys=False)
