"""User lookup endpoints.

``GET /users`` returns the whole user map without authentication; it is meant
for local administration only.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query

from journal import app_state
from journal.api.envelope import ok
from journal.errors import NotFound
from journal.storage.store import StorageScope

router = APIRouter(prefix="/users")


@router.get("/{user_key}")
async def get_user(user_key: str, app_id: Optional[str] = Query(None, alias="appId")):
    user = app_state.STORE.find_user(user_key, StorageScope.from_app_id(app_id))
    if user is None:
        raise NotFound("User not found")
    return ok({"userKey": user_key, **user.to_payload()})


@router.get("")
async def list_users(app_id: Optional[str] = Query(None, alias="appId")):
    users = app_state.STORE.get_users(StorageScope.from_app_id(app_id))
    return ok({key: user.to_payload() for key, user in users.items()})
