"""Pydantic contracts for tenant configs, users and journal records."""

from .config import AIConfig, ComfortLevel, InteractionType, TenantConfig, Theme, UIConfig
from .records import (
    INSIGHT_TYPES,
    CreateInteractionRequest,
    FeedbackRecord,
    InteractionRecord,
    JournalRecord,
    User,
    UserMap,
)

__all__ = [
    "AIConfig",
    "ComfortLevel",
    "CreateInteractionRequest",
    "FeedbackRecord",
    "INSIGHT_TYPES",
    "InteractionRecord",
    "InteractionType",
    "JournalRecord",
    "TenantConfig",
    "Theme",
    "UIConfig",
    "User",
    "UserMap",
]
