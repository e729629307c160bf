"""
Centralized Configuration for the Adaptive Complexity Engine

This module exposes every tuning knob of the engine as a validated pydantic
model and loads it from defaults, an optional YAML or JSON file, a ``.env``
file and environment variables (highest priority).
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from adaptive_complexity.common.error_handling import ConfigurationError

# Configure logging
logger = logging.getLogger(__name__)

# Prefix for engine settings read from the environment
ENV_PREFIX = "ADAPTIVE_"


class AdaptiveComplexityConfig(BaseModel):
    """
    Tuning parameters of the adaptive complexity engine.

    ``adjustment_threshold``, ``performance_history_weight`` and
    ``recent_performance_weight`` are accepted and validated but do not
    currently influence scoring.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    enable_adaptive_content: bool = True
    min_performance_data_points: int = Field(default=3, ge=1)
    adjustment_threshold: float = Field(default=0.2, ge=0.0, le=1.0)
    learning_rate_weight: float = Field(default=0.2, ge=0.0, le=1.0)
    challenge_preference_weight: float = Field(default=0.1, ge=0.0, le=1.0)
    performance_history_weight: float = Field(default=0.4, ge=0.0, le=1.0)
    recent_performance_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    max_complexity_jump: int = Field(default=1, ge=1, le=4)

    # Score thresholds for moving up or down a level
    increase_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    decrease_threshold: float = Field(default=0.4, ge=0.0, le=1.0)

    # Confidence required before a stored recommendation is served
    skill_confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    subject_confidence_threshold: float = Field(default=0.6, ge=0.0, le=1.0)

    @model_validator(mode='after')
    def validate_thresholds(self) -> 'AdaptiveComplexityConfig':
        """Ensure the decrease threshold sits below the increase threshold"""
        if self.decrease_threshold >= self.increase_threshold:
            raise ValueError(
                f"decrease_threshold ({self.decrease_threshold}) must be lower than "
                f"increase_threshold ({self.increase_threshold})"
            )
        return self

    def merged(self, **overrides: Any) -> 'AdaptiveComplexityConfig':
        """
        Return a validated copy with the given fields replaced.

        Raises:
            ConfigurationError: If the resulting configuration is invalid
        """
        data = self.model_dump()
        data.update(overrides)
        return build_engine_config(data)


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    json_output: bool = False
    file_path: Optional[str] = None

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class EnvironmentConfig(BaseModel):
    """Environment configuration"""
    env: str = "development"

    @field_validator('env')
    @classmethod
    def validate_env(cls, v):
        """Validate environment"""
        valid_envs = ['development', 'testing', 'staging', 'production']
        if v.lower() not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v.lower()


class AppConfig(BaseModel):
    """Top-level configuration"""
    adaptive: AdaptiveComplexityConfig = Field(default_factory=AdaptiveComplexityConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)

    @property
    def is_production(self) -> bool:
        """Check if environment is production"""
        return self.environment.env == "production"

    @property
    def is_testing(self) -> bool:
        """Check if environment is testing"""
        return self.environment.env == "testing"


def build_engine_config(data: Dict[str, Any]) -> AdaptiveComplexityConfig:
    """
    Validate a mapping of engine settings.

    Raises:
        ConfigurationError: If any setting is missing a valid value
    """
    try:
        return AdaptiveComplexityConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid adaptive complexity configuration",
            details={"errors": e.errors(include_url=False, include_context=False)},
            cause=e
        ) from e


class ConfigLoader:
    """
    Configuration loader for the engine.

    Loads configuration from:
    1. Default values
    2. Config file (YAML or JSON)
    3. ``.env`` file and environment variables (highest priority)
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        env_file: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None
    ):
        """
        Initialize the config loader.

        Args:
            config_path: Path to config file (YAML or JSON)
            env_file: Path to a ``.env`` file loaded before reading the environment
            environ: Environment mapping to read instead of ``os.environ``
        """
        self._environ = environ
        self.env_file = env_file
        self.config_path = config_path or self.environ.get("CONFIG_PATH")
        self._config: Optional[AppConfig] = None

    @property
    def environ(self) -> Dict[str, str]:
        return self._environ if self._environ is not None else dict(os.environ)

    def load(self) -> AppConfig:
        """
        Load configuration from all sources.

        Returns:
            Loaded configuration

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        if self._config is not None:
            return self._config

        if self._environ is None:
            # Values already present in the process environment win
            load_dotenv(self.env_file, override=False)

        file_config: Dict[str, Any] = {}
        if self.config_path:
            file_config = self._load_from_file(self.config_path)

        merged = self._apply_environment(file_config)

        try:
            self._config = AppConfig(**merged)
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid configuration",
                details={"errors": e.errors(include_url=False, include_context=False)},
                cause=e
            ) from e

        logger.debug(f"Loaded configuration: {self._config.adaptive.model_dump()}")
        return self._config

    def _apply_environment(self, file_config: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay environment variables on top of file values."""
        environ = self.environ
        merged: Dict[str, Dict[str, Any]] = {}
        for key, value in file_config.items():
            if value is not None and not isinstance(value, dict):
                raise ConfigurationError(f"Config section '{key}' must be a mapping")
            merged[key] = dict(value or {})

        adaptive = merged.setdefault("adaptive", {})
        for field_name in AdaptiveComplexityConfig.model_fields:
            env_key = f"{ENV_PREFIX}{field_name.upper()}"
            if env_key in environ:
                adaptive[field_name] = environ[env_key]

        logging_section = merged.setdefault("logging", {})
        for env_key, field_name in (
            ("LOG_LEVEL", "level"),
            ("LOG_JSON", "json_output"),
            ("LOG_FILE", "file_path"),
        ):
            if env_key in environ:
                logging_section[field_name] = environ[env_key]

        if "ENV" in environ:
            merged.setdefault("environment", {})["env"] = environ["ENV"]

        return merged

    def _load_from_file(self, path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            path: Path to config file

        Returns:
            Loaded configuration dictionary
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return {}

        suffix = path.suffix.lower()
        try:
            with open(path, 'r') as f:
                if suffix in ['.yaml', '.yml']:
                    data = yaml.safe_load(f)
                elif suffix == '.json':
                    data = json.load(f)
                else:
                    logger.warning(f"Unsupported config file format: {path.suffix}")
                    return {}
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not read config file {path}", cause=e) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data


# Lazily loaded global configuration
_config_loader: Optional[ConfigLoader] = None


def get_config() -> AppConfig:
    """
    Get the loaded configuration, loading it on first use.

    Returns:
        Loaded configuration
    """
    global _config_loader
    if _config_loader is None:
        _config_loader = ConfigLoader()
    return _config_loader.load()


def reload_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Reload the configuration.

    Args:
        config_path: Path to config file

    Returns:
        Reloaded configuration
    """
    global _config_loader
    _config_loader = ConfigLoader(config_path)
    return _config_loader.load()
