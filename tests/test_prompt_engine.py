from __future__ import annotations

from pathlib import Path

import pytest

from journal.llm.prompt import DEFAULT_PROMPTS_ROOT, FALLBACK_SYSTEM_PROMPT, PromptEngine, PromptEngineError
from journal.models.records import InteractionRecord


def _interaction(notes: str | None = None) -> InteractionRecord:
    return InteractionRecord(interaction_type="Listened Intently", comfort_level="Comfortable", notes=notes)


def test_unknown_template_falls_back_to_general(tmp_path: Path):
    (tmp_path / "general.yml").write_text(
        "model: general/model\ntemperature: 0.2\nmax_tokens: 99\n"
        "system_prompt: General prompt\nuser_template: 'Hi {{ user_name }}'\n",
        encoding="utf-8",
    )
    engine = PromptEngine(prompts_root=tmp_path)

    prompt = engine.render_feedback_prompt("does-not-exist", user_name="Jo", recent=[], new=_interaction())

    assert prompt.template == "general"
    assert prompt.model == "general/model"
    assert prompt.temperature == 0.2
    assert prompt.max_tokens == 99
    assert prompt.messages() == [
        {"role": "system", "content": "General prompt"},
        {"role": "user", "content": "Hi Jo"},
    ]


def test_builtin_settings_when_no_prompt_files(tmp_path: Path):
    engine = PromptEngine(prompts_root=tmp_path)

    prompt = engine.render_feedback_prompt(
        "general", user_name="Jo", recent=[_interaction("a quiet chat")], new=_interaction()
    )

    assert prompt.system_prompt == FALLBACK_SYSTEM_PROMPT
    assert '- Listened Intently (Comfortable) - "a quiet chat"' in prompt.user_message
    assert "- Notes: None" in prompt.user_message


def test_empty_history_is_reported(tmp_path: Path):
    engine = PromptEngine(prompts_root=tmp_path)

    prompt = engine.render_feedback_prompt("general", user_name="Jo", recent=[], new=_interaction())

    assert "No previous interactions" in prompt.user_message


def test_undefined_template_variable_fails_explicitly(tmp_path: Path):
    (tmp_path / "general.yml").write_text("user_template: '{{ missing }}'\n", encoding="utf-8")
    engine = PromptEngine(prompts_root=tmp_path)

    with pytest.raises(PromptEngineError, match="Failed to render prompt"):
        engine.render_feedback_prompt("general", user_name="Jo", recent=[], new=_interaction())


def test_prompt_file_must_be_mapping(tmp_path: Path):
    (tmp_path / "general.yml").write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(PromptEngineError, match="must contain a mapping"):
        PromptEngine(prompts_root=tmp_path).load_definition("general")


def test_bundled_prompts_render():
    engine = PromptEngine(prompts_root=DEFAULT_PROMPTS_ROOT)

    for template in ("general", "recovery"):
        prompt = engine.render_feedback_prompt(template, user_name="Jo", recent=[], new=_interaction())
        assert prompt.template == template
        assert "insightType" in prompt.system_prompt
