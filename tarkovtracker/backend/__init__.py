"""Backend package for the TarkovTracker progress API."""

from .config import BackendSettings, load_settings
from .models import ApiToken, Document, TeamProgress
from .progress import format_objectives, format_progress, merge_hideout
from .security import AuthorizationError, has_permission, parse_bearer
from .store import (
    DocumentStore,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    MissingDocumentError,
    PostgresDocumentStore,
    StoreError,
    create_store,
)
from .team import aggregate_team_progress, fetch_progress

__all__ = [
    "aggregate_team_progress",
    "ApiToken",
    "AuthorizationError",
    "BackendSettings",
    "create_store",
    "Document",
    "DocumentStore",
    "fetch_progress",
    "FirestoreDocumentStore",
    "format_objectives",
    "format_progress",
    "has_permission",
    "InMemoryDocumentStore",
    "load_settings",
    "merge_hideout",
    "MissingDocumentError",
    "parse_bearer",
    "PostgresDocumentStore",
    "StoreError",
    "TeamProgress",
]
