"""Map control-plane error responses onto the domain error taxonomy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cacheplane.domain.model import (
    NonRetryableError,
    NotFoundError,
    PrimaryConflictError,
    TopologyError,
    TransientConflictError,
)

from .schema import ErrorResponse

if TYPE_CHECKING:
    import httpx

INVALID_CACHE_CLUSTER_STATE = "InvalidCacheClusterState"
INVALID_REPLICATION_GROUP_STATE = "InvalidReplicationGroupState"
PRIMARY_CONFLICT_MARKER = "serving as primary"

_TRANSIENT_CODES = frozenset({INVALID_CACHE_CLUSTER_STATE, INVALID_REPLICATION_GROUP_STATE})


def classify_error(code: str, message: str, *, status_code: int | None = None) -> TopologyError:
    """Return the domain error for a remote error code and message."""

    bare_code = code.removesuffix("Fault")
    if status_code == 404 or bare_code.endswith("NotFound"):
        return NotFoundError(message, code=code)
    if bare_code == INVALID_CACHE_CLUSTER_STATE and PRIMARY_CONFLICT_MARKER in message:
        return PrimaryConflictError(message, code=code)
    if bare_code in _TRANSIENT_CODES:
        return TransientConflictError(message, code=code)
    return NonRetryableError(message, code=code)


def error_from_response(response: httpx.Response) -> TopologyError:
    try:
        detail = ErrorResponse.model_validate(response.json()).error
    except ValueError:
        return classify_error(
            f"HTTP{response.status_code}",
            response.text or response.reason_phrase,
            status_code=response.status_code,
        )
    return classify_error(detail.code, detail.message, status_code=response.status_code)
