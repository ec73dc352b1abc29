from .loader import ConfigError, load_settings, load_yaml_config, settings_from_mapping
from .models import HarnessSettings, LoggingSettings

__all__ = [
    "ConfigError",
    "HarnessSettings",
    "LoggingSettings",
    "load_settings",
    "load_yaml_config",
    "settings_from_mapping",
]
