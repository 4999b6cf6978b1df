"""Formatting of raw progress documents into the public v2 progress shape."""

from __future__ import annotations

import logging
from typing import Any, Mapping

logger = logging.getLogger(__name__)

STASH_STATION_ID = "5d484fc0654e76006657e0ab"
DEFAULT_PLAYER_LEVEL = 1
DEFAULT_GAME_EDITION = 1
DISPLAY_NAME_LENGTH = 6


class HideoutDataError(ValueError):
    """Raised when hideout reference data cannot be used for the stash merge."""


def format_objectives(objectives: Any, include_count: bool = False) -> list[dict[str, Any]]:
    """Turn an id -> completion mapping into a list of completion records.

    ``complete`` falls back to False unless the stored value is a bool and
    ``count`` (only emitted with ``include_count``) falls back to 0 unless it
    is numeric. Malformed entries degrade to those defaults.
    """
    if not isinstance(objectives, Mapping):
        return []

    formatted: list[dict[str, Any]] = []
    for objective_id, objective in objectives.items():
        entry = objective if isinstance(objective, Mapping) else {}
        complete = entry.get("complete")
        record: dict[str, Any] = {
            "id": str(objective_id),
            "complete": complete if isinstance(complete, bool) else False,
        }
        if include_count:
            count = entry.get("count")
            record["count"] = count if _is_number(count) else 0
        formatted.append(record)
    return formatted


def merge_hideout(progress: dict[str, Any], hideout_data: Any, game_edition: Any) -> dict[str, Any]:
    """Mark stash levels unlocked by the game edition, with their item requirements, as complete.

    Returns a new progress dict. When the hideout data is missing or malformed
    the failure is logged and ``progress`` is returned untouched.
    """
    if hideout_data is None:
        return progress

    edition = _coerce_game_edition(game_edition)
    try:
        modules = [dict(entry) for entry in progress.get("hideoutModulesProgress", [])]
        parts = [dict(entry) for entry in progress.get("hideoutPartsProgress", [])]
        for level in _find_stash_station(hideout_data).get("levels", []):
            tier = level["level"]
            if not _is_number(tier):
                raise HideoutDataError(f"Stash level {level.get('id')!r} has non-numeric tier {tier!r}")
            if tier > edition:
                continue
            _mark_complete(modules, level["id"])
            for item in level.get("itemRequirements", []):
                _mark_complete(parts, item["id"], count=item.get("count", 0))
    except (HideoutDataError, KeyError, TypeError, AttributeError):
        logger.exception("Error processing hideout data")
        return progress

    merged = dict(progress)
    merged["hideoutModulesProgress"] = modules
    merged["hideoutPartsProgress"] = parts
    return merged


def format_progress(raw: Mapping[str, Any] | None, user_id: str, hideout_data: Any = None) -> dict[str, Any]:
    """Build the public progress document for one user."""
    data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    display_name = data.get("displayName")
    player_level = data.get("level")
    game_edition = data.get("gameEdition")

    progress = {
        "tasksProgress": format_objectives(data.get("taskCompletions")),
        "taskObjectivesProgress": format_objectives(data.get("taskObjectives"), include_count=True),
        "hideoutModulesProgress": format_objectives(data.get("hideoutModules")),
        "hideoutPartsProgress": format_objectives(data.get("hideoutParts"), include_count=True),
        "displayName": display_name if display_name is not None else user_id[:DISPLAY_NAME_LENGTH],
        "userId": user_id,
        "playerLevel": player_level if player_level is not None else DEFAULT_PLAYER_LEVEL,
        "gameEdition": game_edition if game_edition is not None else DEFAULT_GAME_EDITION,
    }
    return merge_hideout(progress, hideout_data, progress["gameEdition"])


def _find_stash_station(hideout_data: Any) -> Mapping[str, Any]:
    for station in hideout_data["hideoutStations"]:
        if station.get("id") == STASH_STATION_ID:
            return station
    raise HideoutDataError("Stash station missing from hideout data")


def _mark_complete(entries: list[dict[str, Any]], entry_id: Any, count: Any = None) -> None:
    for entry in entries:
        if entry["id"] == entry_id:
            entry["complete"] = True
            if count is not None:
                entry["count"] = count
            return

    entry = {"id": entry_id, "complete": True}
    if count is not None:
        entry["count"] = count
    entries.append(entry)


def _coerce_game_edition(value: Any) -> int | float:
    if not _is_number(value):
        return DEFAULT_GAME_EDITION
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
