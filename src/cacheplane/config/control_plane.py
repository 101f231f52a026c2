"""Remote control-plane connection settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

CONTROL_PLANE_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ControlPlaneConfig:
    """Holds the control-plane API endpoint and credentials."""

    base_url: str
    api_token: str
    resilience: ResilienceConfig


def get_control_plane_config(*, resilience: ResilienceConfig | None = None) -> ControlPlaneConfig:
    values = require_env_vars(("CACHEPLANE_API_URL", "CACHEPLANE_API_TOKEN"))
    base_url = values["CACHEPLANE_API_URL"].rstrip("/") + "/"
    api_token = values["CACHEPLANE_API_TOKEN"]
    return ControlPlaneConfig(
        base_url=base_url,
        api_token=api_token,
        resilience=resilience
        or ResilienceConfig(
            name="control-plane",
            base_url=base_url,
            timeout_seconds=CONTROL_PLANE_TIMEOUT_SECONDS,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers={
                "Authorization": f"Bearer {api_token}",
                "Accept": "application/json",
            },
        ),
    )
