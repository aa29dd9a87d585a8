"""
Runtime settings for the telemetry loop, detection, speech and logging.

Settings come from a YAML file (``default.yaml`` next to this module unless
overridden) and are validated with pydantic.

Environment Variables:
    ECLSS_GUARD_CONFIG: Path of an alternative YAML settings file
    Any ``${VAR:default}`` placeholder used inside the YAML file
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..core.error_handling import ConfigurationError
from .config_utils import ConfigLoader

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "default.yaml"
CONFIG_ENV_VAR = "ECLSS_GUARD_CONFIG"


class TelemetrySettings(BaseModel):
    """Simulated telemetry cadence and history."""
    interval_ms: int = Field(default=1000, gt=0, description="Tick period in milliseconds")
    history_length: int = Field(default=240, gt=0, description="Rolling window capacity")
    seed: Optional[int] = Field(default=None, description="Noise seed for reproducible runs")


class DetectionSettings(BaseModel):
    """Anomaly episode detection thresholds."""
    score_threshold: float = Field(default=50.0, ge=0, le=100)
    cooldown_ms: int = Field(default=5000, ge=0)


class SpeechSettings(BaseModel):
    """Speech synthesis preferences."""
    enabled: bool = True
    rate_wpm: int = Field(default=180, gt=0)
    language: str = "en"
    preferred_voice: str = "female"


class LoggingSettings(BaseModel):
    """Logging output."""
    level: str = "INFO"
    json_output: bool = False
    service_name: str = "eclss-guard"

    @field_validator("level")
    @classmethod
    def validate_level(cls, v):
        """Ensure the level is a stdlib logging level name."""
        level = str(v).upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"level must be a logging level name, got {v}")
        return level


class Settings(BaseModel):
    """Top-level settings document."""
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)
    detection: DetectionSettings = Field(default_factory=DetectionSettings)
    speech: SpeechSettings = Field(default_factory=SpeechSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    """
    Load and validate settings.

    Resolution order: explicit ``path``, then ``$ECLSS_GUARD_CONFIG``, then
    the packaged defaults.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    if path is None:
        path = os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    path = Path(path)

    try:
        data = ConfigLoader.load_yaml(path)
        settings = Settings.model_validate(data)
    except (FileNotFoundError, ValueError, yaml.YAMLError, ValidationError) as e:
        # pydantic's ValidationError subclasses ValueError
        raise ConfigurationError(
            f"Invalid configuration {path}: {e}",
            component="config",
            context={"config_path": str(path)},
        ) from e

    logger.info("Settings loaded", extra={"config_path": str(path)})
    return settings
