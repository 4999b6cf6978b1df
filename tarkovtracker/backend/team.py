"""Progress lookups for a single user and for a user's team."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping

from tarkovtracker.backend.models import (
    HIDEOUT_DOCUMENT_ID,
    PROGRESS_COLLECTION,
    SYSTEM_COLLECTION,
    TARKOVDATA_COLLECTION,
    TEAM_COLLECTION,
    USER_COLLECTION,
    Document,
    TeamProgress,
)
from tarkovtracker.backend.progress import format_progress
from tarkovtracker.backend.store import DocumentStore, MissingDocumentError


def _data(document: Document | None) -> dict[str, Any] | None:
    return document.data if document is not None else None


async def fetch_progress(store: DocumentStore, owner_id: str) -> dict[str, Any]:
    """Read and format the progress of a single user."""
    progress_doc, hideout_doc = await asyncio.gather(
        store.get_document(PROGRESS_COLLECTION, owner_id),
        store.get_document(TARKOVDATA_COLLECTION, HIDEOUT_DOCUMENT_ID),
    )
    return format_progress(_data(progress_doc), owner_id, _data(hideout_doc))


async def fetch_member_progress(store: DocumentStore, member_ids: list[str]) -> dict[str, Document | None]:
    """Read progress documents concurrently, keyed by member id."""
    documents = await asyncio.gather(
        *(store.get_document(PROGRESS_COLLECTION, member_id) for member_id in member_ids)
    )
    return dict(zip(member_ids, documents))


def find_hidden_teammates(user_data: dict[str, Any] | None, members: list[str]) -> list[str]:
    team_hide = (user_data or {}).get("teamHide")
    if not isinstance(team_hide, Mapping):
        return []
    return [member_id for member_id, hidden in team_hide.items() if hidden and member_id in members]


async def aggregate_team_progress(store: DocumentStore, owner_id: str) -> TeamProgress:
    """Collect the formatted progress of every member of the owner's team.

    Without a team only the owner's own progress is returned. Members keep the
    order of the team document. Hidden teammates are reported alongside the
    members rather than filtered out, so clients decide what to display.

    Raises MissingDocumentError when the owner has no system document or the
    referenced team document does not exist.
    """
    system_doc, user_doc, hideout_doc = await asyncio.gather(
        store.get_document(SYSTEM_COLLECTION, owner_id),
        store.get_document(USER_COLLECTION, owner_id),
        store.get_document(TARKOVDATA_COLLECTION, HIDEOUT_DOCUMENT_ID),
    )
    if system_doc is None:
        raise MissingDocumentError(SYSTEM_COLLECTION, owner_id)

    hideout_data = _data(hideout_doc)
    team_id = system_doc.data.get("team")

    if team_id is None:
        members = [owner_id]
        hidden_teammates: list[str] = []
    else:
        team_doc = await store.get_document(TEAM_COLLECTION, str(team_id))
        if team_doc is None:
            raise MissingDocumentError(TEAM_COLLECTION, str(team_id))
        members = [str(member_id) for member_id in team_doc.data.get("members") or []]
        hidden_teammates = find_hidden_teammates(_data(user_doc), members)

    progress_docs = await fetch_member_progress(store, members)
    formatted = [
        format_progress(_data(progress_docs[member_id]), member_id, hideout_data)
        for member_id in members
    ]
    return TeamProgress(members=formatted, hidden_teammates=hidden_teammates)
