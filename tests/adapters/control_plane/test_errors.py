from __future__ import annotations

import httpx
import pytest

from cacheplane.adapters.control_plane import classify_error, error_from_response
from cacheplane.domain.model import (
    NonRetryableError,
    NotFoundError,
    PrimaryConflictError,
    TopologyError,
    TransientConflictError,
)


@pytest.mark.parametrize(
    ("code", "message", "expected"),
    [
        ("CacheClusterNotFound", "CacheCluster x not found", NotFoundError),
        ("ReplicationGroupNotFoundFault", "ReplicationGroup x not found", NotFoundError),
        (
            "InvalidCacheClusterState",
            "Cannot delete the cache cluster because it is serving as primary",
            PrimaryConflictError,
        ),
        ("InvalidCacheClusterState", "Cache cluster is not available", TransientConflictError),
        ("InvalidReplicationGroupStateFault", "Group is modifying", TransientConflictError),
        ("InvalidParameterValue", "Bad snapshot name", NonRetryableError),
    ],
)
def test_classify_error(code: str, message: str, expected: type[TopologyError]) -> None:
    error = classify_error(code, message)

    assert type(error) is expected
    assert error.code == code
    assert error.message == message


def test_classify_404_without_code_is_not_found() -> None:
    assert isinstance(classify_error("HTTP404", "Not Found", status_code=404), NotFoundError)


def test_error_from_response_with_body() -> None:
    response = httpx.Response(
        400,
        json={"Error": {"Code": "InvalidReplicationGroupState", "Message": "snapshotting"}},
    )

    error = error_from_response(response)

    assert isinstance(error, TransientConflictError)
    assert error.message == "snapshotting"


def test_error_from_response_without_body() -> None:
    error = error_from_response(httpx.Response(500, text="upstream exploded"))

    assert isinstance(error, NonRetryableError)
    assert error.code == "HTTP500"
    assert error.message == "upstream exploded"
