"""Timeout and polling defaults for reconciliation runs."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_float_env

DEFAULT_CREATE_TIMEOUT_SECONDS = 60 * 60.0
DEFAULT_UPDATE_TIMEOUT_SECONDS = 40 * 60.0
DEFAULT_DELETE_TIMEOUT_SECONDS = 40 * 60.0
DEFAULT_POLL_INTERVAL_SECONDS = 30.0
DEFAULT_MUTATION_RETRY_SECONDS = 5 * 60.0
DEFAULT_GROUP_DELETE_RETRY_SECONDS = 10 * 60.0
DEFAULT_RETRY_INTERVAL_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class TimeoutConfig:
    create_seconds: float = DEFAULT_CREATE_TIMEOUT_SECONDS
    update_seconds: float = DEFAULT_UPDATE_TIMEOUT_SECONDS
    delete_seconds: float = DEFAULT_DELETE_TIMEOUT_SECONDS
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    mutation_retry_seconds: float = DEFAULT_MUTATION_RETRY_SECONDS
    group_delete_retry_seconds: float = DEFAULT_GROUP_DELETE_RETRY_SECONDS
    retry_interval_seconds: float = DEFAULT_RETRY_INTERVAL_SECONDS


def get_timeout_config() -> TimeoutConfig:
    return TimeoutConfig(
        update_seconds=optional_float_env(
            "CACHEPLANE_UPDATE_TIMEOUT_MINUTES", DEFAULT_UPDATE_TIMEOUT_SECONDS / 60
        )
        * 60,
        poll_interval_seconds=optional_float_env(
            "CACHEPLANE_POLL_INTERVAL_SECONDS", DEFAULT_POLL_INTERVAL_SECONDS
        ),
    )
