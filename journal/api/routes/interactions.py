"""Journal endpoints: create interactions and read a user's history."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Query

from journal import app_state
from journal.api.envelope import ok
from journal.errors import InvalidRequest, Issue, NotFound
from journal.models.records import CreateInteractionRequest, InteractionRecord, User
from journal.storage.store import StorageScope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/interactions")

DEFAULT_RECENT_LIMIT = 10


def _require_user(user_key: str, app_id: Optional[str]) -> tuple[User, StorageScope]:
    scope = StorageScope.from_app_id(app_id)
    user = app_state.STORE.find_user(user_key, scope)
    if user is None:
        raise NotFound("User not found")
    return user, scope


def _parse_limit(raw: Optional[str]) -> int:
    try:
        limit = int(raw) if raw is not None else DEFAULT_RECENT_LIMIT
    except ValueError:
        return DEFAULT_RECENT_LIMIT
    return limit if limit > 0 else DEFAULT_RECENT_LIMIT


def parse_since(raw: str) -> datetime:
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        raise InvalidRequest("Invalid date format", [Issue("date", "Expected an ISO-8601 date", raw)]) from None


@router.post("/{user_key}")
async def create_interaction(user_key: str, payload: CreateInteractionRequest):
    user, scope = _require_user(user_key, payload.app_id)

    missing = [
        Issue(field, f"{field} is required")
        for field, value in (
            ("interactionType", payload.interaction_type),
            ("comfortLevel", payload.comfort_level),
        )
        if not value
    ]
    if missing:
        raise InvalidRequest("Missing required fields: interactionType and comfortLevel", missing)

    record = InteractionRecord(
        interaction_type=payload.interaction_type,
        comfort_level=payload.comfort_level,
        notes=payload.notes or None,
    )
    app_state.STORE.append(user_key, record, scope)
    logger.info("Interaction %s logged for %s", record.id, user_key)

    app_state.FEEDBACK_DISPATCHER.dispatch(
        app_state.FEEDBACK_GENERATOR.generate(user_key, user.name, record, scope, payload.app_id),
        name=f"feedback:{record.id}",
    )
    return ok(record.to_payload(), status_code=201)


@router.get("/{user_key}/all")
async def all_records(user_key: str, app_id: Optional[str] = Query(None, alias="appId")):
    _, scope = _require_user(user_key, app_id)
    records = app_state.STORE.read_all(user_key, scope)
    return ok([record.to_payload() for record in records])


@router.get("/{user_key}/recent")
async def recent_interactions(
    user_key: str,
    limit: Optional[str] = Query(None),
    app_id: Optional[str] = Query(None, alias="appId"),
):
    _, scope = _require_user(user_key, app_id)
    records = app_state.STORE.recent(user_key, _parse_limit(limit), scope)
    return ok([record.to_payload() for record in records])


@router.get("/{user_key}/since/{date}")
async def records_since(user_key: str, date: str, app_id: Optional[str] = Query(None, alias="appId")):
    _, scope = _require_user(user_key, app_id)
    threshold = parse_since(date)
    records = app_state.STORE.since(user_key, threshold, scope)
    return ok([record.to_payload() for record in records])
