"""
Runtime configuration for the xc220b3 demonstration.

Settings come from environment variables and may be overridden by
command-line flags. The library itself never reads configuration.
"""

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel, ValidationError, field_validator


ENV_PREFIX = "XC220B3_"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConfigurationError(RuntimeError):
    """Raised when configuration is invalid."""


class DemoConfig(BaseModel):
    """Demo settings model"""
    message: str = "Hello"
    tamper_count: int = 1
    log_level: str = "INFO"
    interactive: bool = False

    @field_validator("tamper_count")
    @classmethod
    def _check_tamper_count(cls, value: int) -> int:
        if value < 1:
            raise ValueError("tamper_count must be at least 1")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "DemoConfig":
        """
        Build a config from ``XC220B3_*`` environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Values that take precedence over the environment;
                ``None`` values are ignored

        Returns:
            Validated DemoConfig

        Raises:
            ConfigurationError: If any value fails validation
        """
        if environ is None:
            environ = os.environ

        values = {}
        for field in cls.model_fields:
            raw = environ.get(ENV_PREFIX + field.upper())
            if raw is not None:
                values[field] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def configure_logging(level: str = "INFO"):
    """Install a root handler for command-line use"""
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)
