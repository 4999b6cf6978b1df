"""Domain models for stored documents, API tokens and team responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

TOKEN_COLLECTION = "token"
PROGRESS_COLLECTION = "progress"
SYSTEM_COLLECTION = "system"
USER_COLLECTION = "user"
TEAM_COLLECTION = "team"
TARKOVDATA_COLLECTION = "tarkovdata"
HIDEOUT_DOCUMENT_ID = "hideout"


@dataclass(frozen=True)
class Document:
    collection: str
    document_id: str
    data: dict[str, Any]


@dataclass(frozen=True)
class ApiToken:
    token: str
    owner: str
    permissions: tuple[str, ...] = ()
    calls: int = 0

    @classmethod
    def from_document(cls, document: Document) -> "ApiToken":
        data = document.data
        permissions = data.get("permissions")
        if not isinstance(permissions, (list, tuple)):
            permissions = []
        calls = data.get("calls")
        return cls(
            token=str(data.get("token") or document.document_id),
            owner=str(data.get("owner", "")),
            permissions=tuple(str(permission) for permission in permissions),
            calls=calls if isinstance(calls, int) and not isinstance(calls, bool) else 0,
        )


@dataclass(frozen=True)
class TeamProgress:
    members: list[dict[str, Any]]
    hidden_teammates: list[str] = field(default_factory=list)
