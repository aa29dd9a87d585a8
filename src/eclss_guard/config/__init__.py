"""Configuration loading."""
from .config_utils import ConfigLoader
from .settings import (
    DEFAULT_CONFIG_PATH,
    DetectionSettings,
    LoggingSettings,
    Settings,
    SpeechSettings,
    TelemetrySettings,
    load_settings,
)

__all__ = [
    "ConfigLoader",
    "DEFAULT_CONFIG_PATH",
    "DetectionSettings",
    "LoggingSettings",
    "Settings",
    "SpeechSettings",
    "TelemetrySettings",
    "load_settings",
]
