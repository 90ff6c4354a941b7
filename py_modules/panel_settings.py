"""
PowerPanel Settings Management
JSON-backed settings naming the host tools and sysfs paths the backend talks to
"""
import json
import os
import logging
from typing import Dict, Any, Optional
from pathlib import Path

from panel_enums import LogLevel
from panel_utils import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "POWERPANEL_CONFIG_DIR"
DEFAULT_CONFIG_DIR = "~/.config/powerpanel"


class PanelSettings:
    """Centralized settings management for PowerPanel"""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize settings manager"""
        if config_dir is None:
            config_dir = os.environ.get(CONFIG_DIR_ENV, DEFAULT_CONFIG_DIR)
        self.config_dir = Path(config_dir).expanduser()
        self.config_file = self.config_dir / "panel_settings.json"
        self.settings_cache = {}

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._load_settings()

    def _load_settings(self) -> None:
        """Load settings from file, filling in defaults for missing keys"""
        defaults = self._get_default_settings()
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r') as f:
                    stored = json.load(f)
                if not isinstance(stored, dict):
                    raise ValueError(f"expected a JSON object, got {type(stored).__name__}")
                self.settings_cache = defaults
                for key, value in stored.items():
                    if self.validate_setting(key, value):
                        self.settings_cache[key] = value
                    else:
                        logger.warning(f"Ignoring invalid setting in {self.config_file}: {key}={value!r}")
                logger.info(f"Loaded settings from {self.config_file}")
            else:
                self.settings_cache = defaults
                self._save_settings()
                logger.info("Initialized with default settings")
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load settings: {e}")
            self.settings_cache = defaults

    def _save_settings(self) -> bool:
        """Save settings to file"""
        try:
            with open(self.config_file, 'w') as f:
                json.dump(self.settings_cache, f, indent=2)
            return True
        except OSError as e:
            logger.error(f"Failed to save settings: {e}")
            return False

    def _get_default_settings(self) -> Dict[str, Any]:
        """Get default settings configuration"""
        return {
            # Read-only host sources
            "cpuinfo_path": "/proc/cpuinfo",
            "cpu_boost_path": "/sys/devices/system/cpu/cpufreq/boost",
            "power_supply_root": "/sys/class/power_supply",
            "battery_name": "BAT0",

            # Host tools
            "gpu_switch_tool": "supergfxctl",
            "power_profile_tool": "powerprofilesctl",

            # Privileged actions
            "elevation_command": "pkexec",
            "profile_helper_path": "/usr/local/bin/powerctl-helper",

            # Seconds before a read-only query is abandoned, None waits forever
            "command_timeout": None,

            "log_level": "info",
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting value"""
        return self.settings_cache.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        """Set a setting value"""
        if not self.validate_setting(key, value):
            raise ConfigurationError(f"Invalid value for {key}: {value!r}")
        self.settings_cache[key] = value
        return self._save_settings()

    def get_all(self) -> Dict[str, Any]:
        """Get all settings"""
        return self.settings_cache.copy()

    def update_multiple(self, settings: Dict[str, Any]) -> bool:
        """Update multiple settings at once"""
        for key, value in settings.items():
            if not self.validate_setting(key, value):
                raise ConfigurationError(f"Invalid value for {key}: {value!r}")
        self.settings_cache.update(settings)
        return self._save_settings()

    def reset_to_defaults(self) -> bool:
        """Reset all settings to defaults"""
        self.settings_cache = self._get_default_settings()
        return self._save_settings()

    def validate_setting(self, key: str, value: Any) -> bool:
        """Validate a setting value"""
        non_empty_text = lambda v: isinstance(v, str) and v.strip() != ""
        validators = {
            "cpuinfo_path": non_empty_text,
            "cpu_boost_path": non_empty_text,
            "power_supply_root": non_empty_text,
            "battery_name": lambda v: non_empty_text(v) and "/" not in v,
            "gpu_switch_tool": non_empty_text,
            "power_profile_tool": non_empty_text,
            "elevation_command": non_empty_text,
            "profile_helper_path": non_empty_text,
            "command_timeout": lambda v: v is None or (
                isinstance(v, (int, float)) and not isinstance(v, bool) and v > 0),
            "log_level": lambda v: v in [level.value for level in LogLevel],
        }

        if key in validators:
            return validators[key](value)

        return True  # No validation for unknown settings


# Global settings instance
_settings_instance = None


def get_settings() -> PanelSettings:
    """Get global settings instance"""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = PanelSettings()
    return _settings_instance


def reset_settings_instance():
    """Reset the global settings instance (for testing)"""
    global _settings_instance
    _settings_instance = None
