"""Tenant configuration resolution."""

from .service import CacheEntry, ConfigService, extract_app_id, validate_config

__all__ = ["CacheEntry", "ConfigService", "extract_app_id", "validate_config"]
