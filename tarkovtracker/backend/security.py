"""Bearer token parsing and permission checks for the API."""

from __future__ import annotations

from typing import Any

from tarkovtracker.backend.models import ApiToken

GET_PROGRESS = "GP"
TEAM_PROGRESS = "TP"
WRITE_PROGRESS = "WP"

NO_BEARER_TOKEN = "No bearer token set"
UNKNOWN_HEADER_ERROR = "Unknown error with Authorization header"


class AuthorizationError(Exception):
    """Request rejected before reaching a route; body None means an empty response."""

    def __init__(self, status_code: int, body: dict[str, Any] | None = None) -> None:
        super().__init__(f"Authorization failed with status {status_code}")
        self.status_code = status_code
        self.body = body


def parse_bearer(header: str) -> str:
    """Return the credential part of an ``Authorization: <scheme> <token>`` header."""
    parts = header.split(" ")
    if len(parts) < 2 or not parts[1]:
        raise AuthorizationError(400, {"error": NO_BEARER_TOKEN})
    return parts[1]


def has_permission(token: ApiToken | None, permission: str) -> bool:
    return token is not None and permission in token.permissions
