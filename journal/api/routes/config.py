"""Tenant configuration endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter

from journal import app_state
from journal.api.envelope import fail, ok, utc_timestamp
from journal.errors import ConfigNotFound, JournalError, ServiceUnavailable, ValidationFailed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/config")


@router.get("")
async def list_configs():
    return ok(app_state.CONFIG_SERVICE.list_configs())


@router.post("/cache/clear")
async def clear_config_cache():
    app_state.CONFIG_SERVICE.clear_cache()
    return ok(message="Configuration cache cleared")


@router.get("/health/check")
async def config_health():
    try:
        app_state.CONFIG_SERVICE.health()
    except JournalError as exc:
        logger.exception("Config health check failed")
        return fail(503, "Configuration service is unhealthy", message=str(exc))
    return ok(message="Configuration service is healthy", timestamp=utc_timestamp())


@router.get("/{app_id}")
async def get_config(app_id: str):
    try:
        config = app_state.CONFIG_SERVICE.resolve(app_id)
    except ValidationFailed as exc:
        logger.error("Invalid configuration for %s: %s", app_id, exc)
        return fail(400, str(exc), issues=exc.issues)
    except ConfigNotFound as exc:
        return fail(404, str(exc))
    except ServiceUnavailable:
        logger.exception("Config storage unavailable for %s", app_id)
        return fail(503, "Failed to load configuration")
    return ok(config.to_payload())
