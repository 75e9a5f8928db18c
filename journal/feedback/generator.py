"""Generate supportive feedback for newly logged interactions."""
from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

from journal.config.service import ConfigService
from journal.errors import JournalError
from journal.interfaces.openrouter_client import LLMClientError, call_chat_completion, get_api_key
from journal.llm.prompt import DEFAULT_TEMPLATE, PromptEngine, PromptEngineError
from journal.models.records import INSIGHT_TYPES, FeedbackRecord, InteractionRecord
from journal.storage.store import JournalStore, StorageScope, interactions_only

CONTEXT_WINDOW = 20
DEFAULT_FEEDBACK = "Keep going - every interaction is progress!"
DEFAULT_INSIGHT = "encouragement"

logger = logging.getLogger(__name__)


def parse_feedback_response(content: str) -> tuple[str, str]:
    """Extract ``(feedback, insightType)`` from a completion body.

    Raises ``ValueError`` when the body is not a JSON object; missing or unknown
    fields fall back to the default message and category.
    """

    parsed = json.loads(content)
    if not isinstance(parsed, Mapping):
        raise ValueError("Feedback response must be a JSON object")

    feedback = parsed.get("feedback")
    if not isinstance(feedback, str) or not feedback.strip():
        logger.error("Feedback response missing 'feedback'; using default message")
        return DEFAULT_FEEDBACK, DEFAULT_INSIGHT

    insight = parsed.get("insightType")
    if insight not in INSIGHT_TYPES:
        insight = DEFAULT_INSIGHT
    return feedback.strip(), insight


class FeedbackGenerator:
    """Compose a prompt from recent history, call the LLM, append the result."""

    def __init__(
        self,
        store: JournalStore,
        config_service: ConfigService,
        prompt_engine: PromptEngine | None = None,
    ) -> None:
        self.store = store
        self.config_service = config_service
        self.prompt_engine = prompt_engine or PromptEngine()

    def _prompt_template(self, app_id: Optional[str]) -> Optional[str]:
        """Return the tenant's template, or ``None`` when AI is disabled."""

        if not app_id:
            return DEFAULT_TEMPLATE
        try:
            config = self.config_service.resolve(app_id)
        except JournalError:
            logger.warning("Could not load config for appId %s, using general prompt", app_id)
            return DEFAULT_TEMPLATE
        if config.ai.enabled is False:
            return None
        return config.ai.prompt_template or DEFAULT_TEMPLATE

    async def generate(
        self,
        user_key: str,
        user_name: str,
        interaction: InteractionRecord,
        scope: StorageScope,
        app_id: Optional[str] = None,
    ) -> Optional[FeedbackRecord]:
        """Generate and persist feedback; never raises."""

        extra: dict[str, Any] = {"user_key": user_key, "interaction_id": interaction.id}
        try:
            if not get_api_key():
                logger.info("AI feedback skipped: missing API key", extra=extra)
                return None
            template = self._prompt_template(app_id)
            if template is None:
                logger.info("AI feedback disabled for app %s", app_id, extra=extra)
                return None

            history = interactions_only(self.store.read_all(user_key, scope))
            recent = [record for record in history if record.id != interaction.id][-CONTEXT_WINDOW:]
            prompt = self.prompt_engine.render_feedback_prompt(
                template, user_name=user_name, recent=recent, new=interaction
            )
            content = await call_chat_completion(
                prompt.messages(),
                model=prompt.model,
                temperature=prompt.temperature,
                max_tokens=prompt.max_tokens,
            )
            feedback, insight = parse_feedback_response(content)

            record = FeedbackRecord(related_to=[interaction.id], feedback=feedback, insight_type=insight)
            self.store.append(user_key, record, scope)
        except (LLMClientError, PromptEngineError, ValueError, OSError, JournalError):
            logger.exception("ai_feedback_failed", extra=extra)
            return None

        logger.info(
            "AI feedback generated for %s (%s): %s", user_key, prompt.template, record.feedback, extra=extra
        )
        return record
