"""Application configuration helpers."""

from __future__ import annotations

from .control_plane import ControlPlaneConfig, get_control_plane_config
from .env import optional_float_env, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .timeouts import TimeoutConfig, get_timeout_config

__all__ = [
    "ConfigurationError",
    "ControlPlaneConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "TimeoutConfig",
    "configure_logging",
    "get_control_plane_config",
    "get_timeout_config",
    "optional_float_env",
    "require_env_var",
    "require_env_vars",
]
