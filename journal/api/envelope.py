"""Response envelope shared by every route: ``{success, data?, error?}``."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from fastapi.responses import JSONResponse

from journal.errors import Issue


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def ok(data: Any = None, *, status_code: int = 200, **extra: Any) -> JSONResponse:
    content: dict[str, Any] = {"success": True}
    if data is not None:
        content["data"] = data
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


def fail(status_code: int, error: str, *, issues: Iterable[Issue] = (), **extra: Any) -> JSONResponse:
    content: dict[str, Any] = {"success": False, "error": error}
    details = [issue.to_mapping() for issue in issues]
    if details:
        content["details"] = details
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)
