"""Append-only journal and user map persistence on the local filesystem."""
from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from pydantic import ValidationError

from journal.errors import InvalidRequest, Issue
from journal.models.records import (
    JOURNAL_RECORD_ADAPTER,
    FeedbackRecord,
    InteractionRecord,
    User,
    UserMap,
    ensure_utc,
)

JournalEntry = InteractionRecord | FeedbackRecord

DEFAULT_DATA_DIR = Path(os.getenv("JOURNAL_DATA_DIR", Path(".journal") / "data"))
_SAFE_SEGMENT = re.compile(r"^[A-Za-z0-9_.-]+$")

logger = logging.getLogger(__name__)


def _check_segment(value: str, field: str) -> str:
    if not _SAFE_SEGMENT.match(value) or value in {".", ".."}:
        raise InvalidRequest(f"Invalid {field}", [Issue(field, "Must be a plain identifier", value)])
    return value


@dataclass(frozen=True)
class StorageScope:
    """Where a user's data lives: the shared legacy tree or one tenant's tree."""

    app_id: Optional[str] = None

    @classmethod
    def tenant(cls, app_id: str) -> "StorageScope":
        return cls(app_id=_check_segment(app_id, "appId"))

    @classmethod
    def from_app_id(cls, app_id: Optional[str]) -> "StorageScope":
        return cls.tenant(app_id) if app_id else GLOBAL_SCOPE

    @property
    def is_global(self) -> bool:
        return self.app_id is None

    def root(self, data_dir: Path) -> Path:
        if self.app_id is None:
            return data_dir
        return data_dir / "apps" / self.app_id


GLOBAL_SCOPE = StorageScope()


class JournalStore:
    """Per-user JSONL journals plus per-scope ``users.json`` maps.

    Global scope::

        <data>/users.json
        <data>/interactions/<user>.jsonl

    Tenant scope::

        <data>/apps/<app_id>/users.json
        <data>/apps/<app_id>/interactions/<user>.jsonl
    """

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.data_dir = Path(data_dir or os.getenv("JOURNAL_DATA_DIR") or DEFAULT_DATA_DIR)

    def app_data_path(self, app_id: str) -> Path:
        return StorageScope.tenant(app_id).root(self.data_dir)

    def interactions_dir(self, scope: StorageScope = GLOBAL_SCOPE) -> Path:
        return scope.root(self.data_dir) / "interactions"

    def users_file(self, scope: StorageScope = GLOBAL_SCOPE) -> Path:
        return scope.root(self.data_dir) / "users.json"

    def journal_path(self, user_key: str, scope: StorageScope = GLOBAL_SCOPE) -> Path:
        return self.interactions_dir(scope) / f"{_check_segment(user_key, 'userKey')}.jsonl"

    # Users

    def get_users(self, scope: StorageScope = GLOBAL_SCOPE) -> UserMap:
        path = self.users_file(scope)
        if not path.exists():
            return {}
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            logger.exception("Error reading users file %s", path)
            return {}
        if not isinstance(raw, dict):
            logger.error("Users file %s must contain an object", path)
            return {}

        users: UserMap = {}
        for key, value in raw.items():
            try:
                users[str(key)] = User.model_validate(value)
            except ValidationError:
                logger.warning("Skipping malformed user entry %r in %s", key, path)
        return users

    def get_user(self, user_key: str, scope: StorageScope = GLOBAL_SCOPE) -> Optional[User]:
        return self.get_users(scope).get(user_key)

    def find_user(self, user_key: str, scope: StorageScope = GLOBAL_SCOPE) -> Optional[User]:
        """Look the user up globally first, then in the tenant's own map."""

        user = self.get_user(user_key, GLOBAL_SCOPE)
        if user is None and not scope.is_global:
            user = self.get_user(user_key, scope)
        return user

    # Journal

    def append(self, user_key: str, record: JournalEntry, scope: StorageScope = GLOBAL_SCOPE) -> Path:
        """Append one record as a JSON line and return the journal path."""

        path = self.journal_path(user_key, scope)
        path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(record.to_payload(), ensure_ascii=False)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")
        return path

    def read_all(self, user_key: str, scope: StorageScope = GLOBAL_SCOPE) -> List[JournalEntry]:
        path = self.journal_path(user_key, scope)
        try:
            content = path.read_bytes()
        except FileNotFoundError:
            return []
        except OSError:
            logger.exception("Error reading journal %s", path)
            return []

        records: List[JournalEntry] = []
        for number, raw_line in enumerate(content.splitlines(), start=1):
            if not raw_line.strip():
                continue
            try:
                line = raw_line.decode("utf-8")
            except UnicodeDecodeError:
                logger.error("Skipping undecodable journal line %d in %s", number, path)
                continue
            try:
                records.append(JOURNAL_RECORD_ADAPTER.validate_json(line))
            except ValidationError as exc:
                logger.error(
                    "Skipping unparsable journal line %d in %s (%d errors)",
                    number,
                    path,
                    exc.error_count(),
                )
        return records

    def recent(
        self, user_key: str, limit: int = 10, scope: StorageScope = GLOBAL_SCOPE
    ) -> List[InteractionRecord]:
        """Return the last ``limit`` interaction records, most recent first."""

        if limit <= 0:
            return []
        interactions = interactions_only(self.read_all(user_key, scope))
        return list(reversed(interactions[-limit:]))

    def since(
        self, user_key: str, threshold: datetime, scope: StorageScope = GLOBAL_SCOPE
    ) -> List[JournalEntry]:
        cutoff = ensure_utc(threshold)
        return [record for record in self.read_all(user_key, scope) if record.timestamp >= cutoff]


def interactions_only(records: Sequence[JournalEntry]) -> List[InteractionRecord]:
    return [record for record in records if isinstance(record, InteractionRecord)]


__all__ = [
    "DEFAULT_DATA_DIR",
    "GLOBAL_SCOPE",
    "JournalEntry",
    "JournalStore",
    "StorageScope",
    "interactions_only",
]
