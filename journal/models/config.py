"""Tenant configuration models.

Field names are camelCase on the wire so existing tenant JSON documents load
unchanged; attributes are snake_case in Python.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ConfigBaseModel(BaseModel):
    """Base model keeping unknown keys so tenant documents can evolve."""

    model_config = ConfigDict(
        extra="allow",
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )


class InteractionType(ConfigBaseModel):
    id: str
    label: str
    icon: str
    description: Optional[str] = None


class ComfortLevel(ConfigBaseModel):
    id: str
    label: str
    color: str
    emoji: Optional[str] = None
    description: Optional[str] = None


class Theme(ConfigBaseModel):
    primary: str
    secondary: str
    background: Optional[str] = None


class UIConfig(ConfigBaseModel):
    welcome_message: Optional[str] = None
    interaction_prompt: Optional[str] = None
    comfort_prompt: Optional[str] = None
    notes_prompt: Optional[str] = None
    notes_placeholder: Optional[str] = None
    submit_button: Optional[str] = None
    recent_entries_title: Optional[str] = None


class AIConfig(ConfigBaseModel):
    prompt_template: Optional[str] = None
    enabled: Optional[bool] = None


class TenantConfig(ConfigBaseModel):
    """A fully resolved tenant configuration."""

    app_id: str
    app_name: str
    description: Optional[str] = None
    interactions: List[InteractionType]
    comfort_levels: List[ComfortLevel]
    theme: Theme
    ui: UIConfig = UIConfig()
    ai: AIConfig = AIConfig()
    version: str = "1.0.0"

    def to_payload(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = [
    "AIConfig",
    "ComfortLevel",
    "InteractionType",
    "TenantConfig",
    "Theme",
    "UIConfig",
]
