"""Tenant configuration resolution, validation and caching."""
from __future__ import annotations

import json
import logging
import os
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping

from pydantic import ValidationError

from journal.errors import ConfigNotFound, ConfigValidationError, Issue, ServiceUnavailable
from journal.models.config import TenantConfig

DEFAULT_CONFIG_DIR = Path(__file__).resolve().parent.parent / "knowledgebase" / "apps"
DEFAULT_APP_ID = os.getenv("JOURNAL_DEFAULT_APP", "social")
CACHE_TTL_SECONDS = 5 * 60
SCHEMA_FILENAME = "schema.json"

UI_DEFAULTS: Mapping[str, str] = {
    "welcomeMessage": "Welcome back, {userName}",
    "interactionPrompt": "What did you do?",
    "comfortPrompt": "How did you feel?",
    "notesPrompt": "Add notes (optional)",
    "notesPlaceholder": "Any thoughts...",
    "submitButton": "Save Entry",
    "recentEntriesTitle": "Your Recent Entries",
}
AI_DEFAULTS: Mapping[str, Any] = {"promptTemplate": "general", "enabled": True}
THEME_DEFAULTS: Mapping[str, str] = {"background": "from-blue-50 to-purple-50"}
DEFAULT_VERSION = "1.0.0"

_SAFE_APP_ID = re.compile(r"^[A-Za-z0-9_-]+$")

logger = logging.getLogger(__name__)


class ConfigReadError(RuntimeError):
    """Raised when a tenant document cannot be read or parsed."""


@dataclass(frozen=True)
class CacheEntry:
    config: TenantConfig
    expires_at: float

    def is_fresh(self, now: float) -> bool:
        return now < self.expires_at


def extract_app_id(identifier: str) -> str:
    """Derive a tenant id from a hostname, path segment or raw id.

    ``addiction.example.com`` -> ``addiction``; ``/addiction`` -> ``addiction``.
    """

    if "." in identifier:
        return identifier.split(".", 1)[0]
    if identifier.startswith("/"):
        return identifier[1:]
    return identifier


def _present(value: Any) -> bool:
    return value is not None and value != "" and value is not False


def _validate_entries(
    entries: Any,
    field: str,
    required: tuple[str, ...],
    label: str,
) -> List[Issue]:
    issues: List[Issue] = []
    if not isinstance(entries, list):
        return issues

    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            issues.append(Issue(f"{field}[{index}]", f"{label} must be an object", entry))
            continue
        for key in required:
            if not _present(entry.get(key)):
                issues.append(Issue(f"{field}[{index}].{key}", f"{label} {key} is required"))
        entry_id = entry.get("id")
        if _present(entry_id) and not isinstance(entry_id, str):
            issues.append(Issue(f"{field}[{index}].id", f"{label} id must be a string", entry_id))

    seen: set[str] = set()
    for entry in entries:
        entry_id = entry.get("id") if isinstance(entry, Mapping) else None
        if not isinstance(entry_id, str) or not entry_id:
            continue
        if entry_id in seen:
            issues.append(Issue(field, f"Duplicate {label.lower()} ID: {entry_id}", entry_id))
        seen.add(entry_id)
    return issues


def validate_config(raw: Any) -> List[Issue]:
    """Return every structural problem found in a raw tenant document."""

    if not isinstance(raw, Mapping):
        return [Issue("root", "Configuration must be a JSON object")]

    issues: List[Issue] = []
    if not _present(raw.get("appId")):
        issues.append(Issue("appId", "App ID is required"))
    if not _present(raw.get("appName")):
        issues.append(Issue("appName", "App name is required"))

    interactions = raw.get("interactions")
    if not isinstance(interactions, list) or not interactions:
        issues.append(Issue("interactions", "Interactions array is required and must not be empty"))
    comfort_levels = raw.get("comfortLevels")
    if not isinstance(comfort_levels, list) or not comfort_levels:
        issues.append(Issue("comfortLevels", "Comfort levels array is required and must not be empty"))

    theme = raw.get("theme")
    if not isinstance(theme, Mapping):
        issues.append(Issue("theme", "Theme configuration is required"))
    else:
        if not _present(theme.get("primary")):
            issues.append(Issue("theme.primary", "Primary theme color is required"))
        if not _present(theme.get("secondary")):
            issues.append(Issue("theme.secondary", "Secondary theme color is required"))

    issues.extend(_validate_entries(interactions, "interactions", ("id", "label", "icon"), "Interaction"))
    issues.extend(
        _validate_entries(comfort_levels, "comfortLevels", ("id", "label", "color"), "Comfort level")
    )
    return issues


def apply_defaults(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill missing UI, AI, theme and version values without overwriting."""

    config = dict(raw)
    for key, defaults in (("ui", UI_DEFAULTS), ("ai", AI_DEFAULTS), ("theme", THEME_DEFAULTS)):
        current = config.get(key)
        merged = dict(defaults)
        if isinstance(current, Mapping):
            merged.update(current)
        config[key] = merged
    if not config.get("version"):
        config["version"] = DEFAULT_VERSION
    return config


class ConfigService:
    """Resolve tenant configs from JSON files with a fixed-window cache.

    The cache maps an app id to a single ``CacheEntry``. There is no eviction
    beyond expiry and ``clear_cache``.
    """

    def __init__(
        self,
        config_dir: Path | str | None = None,
        *,
        default_app_id: str = DEFAULT_APP_ID,
        ttl_seconds: float = CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config_dir = Path(config_dir or os.getenv("JOURNAL_CONFIG_DIR") or DEFAULT_CONFIG_DIR)
        self.default_app_id = default_app_id
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._cache: Dict[str, CacheEntry] = {}

    def resolve(self, identifier: str, *, allow_fallback: bool = True) -> TenantConfig:
        app_id = extract_app_id(identifier)
        now = self._clock()
        entry = self._cache.get(app_id)
        if entry is not None and entry.is_fresh(now):
            return entry.config

        try:
            raw = self._load_config_file(app_id)
        except ConfigReadError as exc:
            if allow_fallback and app_id != self.default_app_id:
                logger.warning(
                    "Config not found for '%s', falling back to '%s'",
                    app_id,
                    self.default_app_id,
                    extra={"reason": str(exc)},
                )
                config = self.resolve(self.default_app_id, allow_fallback=False)
                self._store(app_id, config)
                return config
            cause = exc.__cause__
            if isinstance(cause, OSError) and not isinstance(cause, FileNotFoundError):
                raise ServiceUnavailable(f"Configuration storage unavailable: {app_id}.json") from exc
            raise ConfigNotFound(f"Configuration file not found: {app_id}.json") from exc

        config = self._build(app_id, raw)
        self._store(app_id, config)
        return config

    def list_configs(self) -> List[str]:
        try:
            files = list(self.config_dir.glob("*.json"))
        except OSError:
            logger.exception("Error listing configs in %s", self.config_dir)
            return []
        return sorted(path.stem for path in files if path.name != SCHEMA_FILENAME)

    def clear_cache(self) -> None:
        self._cache = {}

    def health(self) -> TenantConfig:
        """Resolve the default tenant; raises when the service is unhealthy."""

        return self.resolve(self.default_app_id, allow_fallback=False)

    def _store(self, app_id: str, config: TenantConfig) -> None:
        self._cache[app_id] = CacheEntry(config=config, expires_at=self._clock() + self.ttl_seconds)

    def _build(self, app_id: str, raw: Any) -> TenantConfig:
        issues = validate_config(raw)
        if issues:
            raise ConfigValidationError(f"Configuration validation failed: {app_id}", issues)
        try:
            return TenantConfig.model_validate(apply_defaults(raw))
        except ValidationError as exc:
            raise ConfigValidationError(
                f"Configuration validation failed: {app_id}",
                [
                    Issue(".".join(str(part) for part in error["loc"]), error["msg"])
                    for error in exc.errors()
                ],
            ) from exc

    def _load_config_file(self, app_id: str) -> Any:
        if not _SAFE_APP_ID.match(app_id):
            raise ConfigReadError(f"Invalid app id: {app_id!r}")
        path = self.config_dir / f"{app_id}.json"
        try:
            with path.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ConfigReadError(f"Failed to load configuration: {app_id}.json") from exc


__all__ = [
    "CACHE_TTL_SECONDS",
    "CacheEntry",
    "ConfigReadError",
    "ConfigService",
    "DEFAULT_APP_ID",
    "apply_defaults",
    "extract_app_id",
    "validate_config",
]
