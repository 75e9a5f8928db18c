"""Typed contracts for users and journal records.

Journal records are stored one per line and carry a ``recordType`` tag that
selects the variant. The camelCase wire names match the files already on disk.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

InsightType = Literal["encouragement", "suggestion", "observation", "milestone"]
INSIGHT_TYPES: tuple[str, ...] = ("encouragement", "suggestion", "observation", "milestone")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class JournalBaseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class User(JournalBaseModel):
    """A journal owner; created out-of-band and read-only here."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, alias_generator=to_camel)

    name: str
    created: Optional[str] = None


UserMap = Dict[str, User]


class _RecordBase(JournalBaseModel):
    id: str
    timestamp: datetime = Field(default_factory=_utcnow)

    @field_validator("timestamp")
    @classmethod
    def _normalise_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class InteractionRecord(_RecordBase):
    id: str = Field(default_factory=lambda: f"int_{uuid4()}")
    record_type: Literal["interaction"] = "interaction"
    interaction_type: str
    comfort_level: str
    notes: Optional[str] = None


class FeedbackRecord(_RecordBase):
    id: str = Field(default_factory=lambda: f"ai_{uuid4()}")
    record_type: Literal["ai_feedback"] = "ai_feedback"
    related_to: List[str] = Field(default_factory=list)
    feedback: str
    insight_type: InsightType = "encouragement"


JournalRecord = Annotated[
    Union[InteractionRecord, FeedbackRecord], Field(discriminator="record_type")
]
JOURNAL_RECORD_ADAPTER: TypeAdapter[Union[InteractionRecord, FeedbackRecord]] = TypeAdapter(
    JournalRecord
)


class CreateInteractionRequest(JournalBaseModel):
    """Body of ``POST /interactions/{userKey}``.

    Required fields are checked by the handler once the user is known, so they
    are optional here.
    """

    interaction_type: Optional[str] = None
    comfort_level: Optional[str] = None
    notes: Optional[str] = None
    app_id: Optional[str] = None


__all__ = [
    "CreateInteractionRequest",
    "FeedbackRecord",
    "INSIGHT_TYPES",
    "InsightType",
    "InteractionRecord",
    "JOURNAL_RECORD_ADAPTER",
    "JournalRecord",
    "User",
    "UserMap",
    "ensure_utc",
]
