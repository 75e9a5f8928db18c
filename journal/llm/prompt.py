"""Prompt definitions and rendering for journal feedback."""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml
from jinja2 import StrictUndefined, Template, TemplateError

from journal.models.records import InteractionRecord

DEFAULT_PROMPTS_ROOT = Path(__file__).resolve().parent.parent / "knowledgebase" / "prompts"
DEFAULT_TEMPLATE = "general"
FALLBACK_MODEL = "openai/gpt-4o"
FALLBACK_TEMPERATURE = 0.7
FALLBACK_MAX_TOKENS = 150
FALLBACK_SYSTEM_PROMPT = (
    "You are a supportive therapeutic companion. Provide brief, encouraging feedback."
)
FALLBACK_USER_TEMPLATE = """User: {{ user_name }}

Recent interactions (last {{ recent | length }}):
{% for item in recent -%}
- {{ item.interaction_type }} ({{ item.comfort_level }}){% if item.notes %} - "{{ item.notes }}"{% endif %}
{% else -%}
No previous interactions
{% endfor %}
New interaction just entered:
- Type: {{ new.interaction_type }}
- Comfort Level: {{ new.comfort_level }}
- Notes: {{ new.notes or "None" }}

Please provide encouraging feedback following the guidelines. Return response as JSON."""

_SAFE_TEMPLATE_NAME = re.compile(r"^[A-Za-z0-9_-]+$")


class PromptEngineError(RuntimeError):
    """Raised when prompt loading or rendering fails."""


@dataclass(frozen=True)
class FeedbackPrompt:
    """A rendered prompt ready for the completion endpoint."""

    template: str
    model: str
    temperature: float
    max_tokens: int
    system_prompt: str
    user_message: str

    def messages(self) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": self.system_prompt},
            {"role": "user", "content": self.user_message},
        ]


class PromptEngine:
    """Load and render feedback prompt templates.

    Each template is a YAML file named ``<template>.yml`` under ``prompts_root``
    declaring ``model``, ``temperature``, ``max_tokens``, ``system_prompt`` and
    an optional jinja2 ``user_template``. Unknown template names use
    ``general``; a missing ``general`` uses built-in settings.
    """

    def __init__(self, prompts_root: Path | None = None) -> None:
        env_root = os.getenv("JOURNAL_PROMPTS_DIR")
        self.prompts_root = prompts_root or (Path(env_root) if env_root else DEFAULT_PROMPTS_ROOT)

    def _prompt_path(self, template: str) -> Path | None:
        if not _SAFE_TEMPLATE_NAME.match(template):
            return None
        path = self.prompts_root / f"{template}.yml"
        return path if path.is_file() else None

    def load_definition(self, template: str) -> tuple[str, Mapping[str, Any]]:
        path = self._prompt_path(template) or self._prompt_path(DEFAULT_TEMPLATE)
        if path is None:
            return DEFAULT_TEMPLATE, {}

        try:
            with path.open("r", encoding="utf-8") as file:
                data = yaml.safe_load(file) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise PromptEngineError(f"Failed to load prompt file: {path}") from exc

        if not isinstance(data, Mapping):
            raise PromptEngineError(f"Prompt file must contain a mapping: {path}")
        return path.stem, data

    def render_feedback_prompt(
        self,
        template: str,
        *,
        user_name: str,
        recent: Sequence[InteractionRecord],
        new: InteractionRecord,
    ) -> FeedbackPrompt:
        name, definition = self.load_definition(template)
        user_template = definition.get("user_template") or FALLBACK_USER_TEMPLATE
        system_prompt = definition.get("system_prompt") or FALLBACK_SYSTEM_PROMPT
        if not isinstance(user_template, str) or not isinstance(system_prompt, str):
            raise PromptEngineError(f"Prompt text must be a string in template '{name}'")

        try:
            user_message = Template(user_template, undefined=StrictUndefined).render(
                user_name=user_name, recent=list(recent), new=new
            )
            return FeedbackPrompt(
                template=name,
                model=str(definition.get("model") or FALLBACK_MODEL),
                temperature=float(definition.get("temperature", FALLBACK_TEMPERATURE)),
                max_tokens=int(definition.get("max_tokens", FALLBACK_MAX_TOKENS)),
                system_prompt=system_prompt.strip(),
                user_message=user_message.strip(),
            )
        except (TemplateError, TypeError, ValueError) as exc:
            raise PromptEngineError(f"Failed to render prompt: {name}") from exc
