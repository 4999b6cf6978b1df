import asyncio

import pytest

from tarkovtracker.backend.progress import STASH_STATION_ID
from tarkovtracker.backend.store import InMemoryDocumentStore, MissingDocumentError
from tarkovtracker.backend.team import aggregate_team_progress, fetch_progress, find_hidden_teammates


HIDEOUT = {
    "hideoutStations": [
        {
            "id": STASH_STATION_ID,
            "levels": [{"id": "stash-1", "level": 1, "itemRequirements": [{"id": "roubles", "count": 500}]}],
        }
    ]
}


def _store_with_team() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    store.seed(
        {
            "system": {"owner-1": {"team": "team-1"}},
            "user": {"owner-1": {"teamHide": {"mate-2": True, "mate-3": False, "stranger": True}}},
            "team": {"team-1": {"members": ["mate-3", "owner-1", "mate-2"]}},
            "progress": {
                "owner-1": {"displayName": "Owner", "level": 20},
                "mate-2": {"displayName": "Second", "gameEdition": 1},
            },
            "tarkovdata": {"hideout": HIDEOUT},
        }
    )
    return store


def test_fetch_progress_merges_hideout_for_owner() -> None:
    store = InMemoryDocumentStore()
    store.put_document("progress", "owner-1", {"level": 9})
    store.put_document("tarkovdata", "hideout", HIDEOUT)

    result = asyncio.run(fetch_progress(store, "owner-1"))

    assert result["playerLevel"] == 9
    assert result["hideoutModulesProgress"] == [{"id": "stash-1", "complete": True}]
    assert result["hideoutPartsProgress"] == [{"id": "roubles", "complete": True, "count": 500}]


def test_aggregate_without_team_returns_only_owner() -> None:
    store = InMemoryDocumentStore()
    store.put_document("system", "owner-1", {"team": None})
    store.put_document("user", "owner-1", {"teamHide": {"someone": True}})
    store.put_document("progress", "owner-1", {"displayName": "Solo"})

    result = asyncio.run(aggregate_team_progress(store, "owner-1"))

    assert [member["userId"] for member in result.members] == ["owner-1"]
    assert result.members[0]["displayName"] == "Solo"
    assert result.hidden_teammates == []


def test_aggregate_keeps_team_order_and_reports_hidden_members() -> None:
    store = _store_with_team()

    result = asyncio.run(aggregate_team_progress(store, "owner-1"))

    assert [member["userId"] for member in result.members] == ["mate-3", "owner-1", "mate-2"]
    assert result.hidden_teammates == ["mate-2"]
    assert result.members[1]["playerLevel"] == 20


def test_aggregate_formats_members_without_progress_from_defaults() -> None:
    store = _store_with_team()

    result = asyncio.run(aggregate_team_progress(store, "owner-1"))

    missing = result.members[0]
    assert missing["userId"] == "mate-3"
    assert missing["displayName"] == "mate-3"
    assert missing["hideoutModulesProgress"] == [{"id": "stash-1", "complete": True}]


def test_aggregate_raises_when_system_document_missing() -> None:
    store = InMemoryDocumentStore()

    with pytest.raises(MissingDocumentError) as excinfo:
        asyncio.run(aggregate_team_progress(store, "ghost"))

    assert excinfo.value.collection == "system"


def test_aggregate_raises_when_team_document_missing() -> None:
    store = InMemoryDocumentStore()
    store.put_document("system", "owner-1", {"team": "gone"})

    with pytest.raises(MissingDocumentError) as excinfo:
        asyncio.run(aggregate_team_progress(store, "owner-1"))

    assert excinfo.value.collection == "team"
    assert excinfo.value.document_id == "gone"


def test_find_hidden_teammates_ignores_missing_user_document() -> None:
    assert find_hidden_teammates(None, ["a", "b"]) == []
    assert find_hidden_teammates({"teamHide": {"b": True, "c": True, "a": False}}, ["a", "b"]) == ["b"]


def test_aggregate_ignores_team_hide_that_is_not_a_mapping() -> None:
    store = _store_with_team()
    store.put_document("user", "owner-1", {"teamHide": ["mate-2"]})

    result = asyncio.run(aggregate_team_progress(store, "owner-1"))

    assert result.hidden_teammates == []
    assert [member["userId"] for member in result.members] == ["mate-3", "owner-1", "mate-2"]
