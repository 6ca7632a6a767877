"""Environment configuration for rescuable."""

import os
from dataclasses import dataclass
from typing import Dict

from .exceptions import ConfigurationError
from .logging_config import get_logger

logger = get_logger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


class RescuableEnvVars:
    """Rescuable environment variable names."""

    WARN_UNRESOLVED = "RESCUABLE_WARN_UNRESOLVED"
    LOG_LEVEL = "RESCUABLE_LOG_LEVEL"


class RescuableDefaults:
    """Rescuable default values."""

    WARN_UNRESOLVED = "false"
    LOG_LEVEL = "ERROR"


RESCUABLE_ENV_CONFIG: Dict[str, Dict[str, str]] = {
    RescuableEnvVars.WARN_UNRESOLVED: {
        "default": RescuableDefaults.WARN_UNRESOLVED,
        "description": "Log a warning when a classifier name cannot be resolved (default: false)",
    },
    RescuableEnvVars.LOG_LEVEL: {
        "default": RescuableDefaults.LOG_LEVEL,
        "description": "Package log level, falls back to LOG_LEVEL (default: ERROR)",
    },
}


@dataclass(frozen=True)
class RescueConfig:
    """Runtime options for classifier resolution.

    Attributes:
        warn_unresolved: Log unresolvable classifier names at WARNING instead of
            DEBUG. They are skipped either way.
    """

    warn_unresolved: bool = False


def _parse_bool(name: str, value: str) -> bool:
    """Parse boolean from string."""
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigurationError(
        f"{name} must be one of {list(_TRUE_VALUES + _FALSE_VALUES)}, got '{value}'"
    )


def parse_environment_variables() -> RescueConfig:
    """Parse environment variables and return a RescueConfig instance."""
    try:
        return RescueConfig(
            warn_unresolved=_parse_bool(
                RescuableEnvVars.WARN_UNRESOLVED,
                os.getenv(
                    RescuableEnvVars.WARN_UNRESOLVED, RescuableDefaults.WARN_UNRESOLVED
                ),
            ),
        )
    except ConfigurationError as e:
        logger.error(f"Configuration validation failed: {e}")
        raise
