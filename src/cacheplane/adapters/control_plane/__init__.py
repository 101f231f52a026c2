"""Control-plane adapter package."""

from __future__ import annotations

from .client import HttpControlPlane
from .errors import classify_error, error_from_response
from .schema import CacheClusterPayload, ErrorResponse, ReplicationGroupPayload
from .translator import build_create_request, build_modify_request, parse_member, parse_topology

__all__ = [
    "CacheClusterPayload",
    "ErrorResponse",
    "HttpControlPlane",
    "ReplicationGroupPayload",
    "build_create_request",
    "build_modify_request",
    "classify_error",
    "error_from_response",
    "parse_member",
    "parse_topology",
]
