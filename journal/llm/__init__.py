"""Prompt helpers for the feedback generator."""

from .prompt import FeedbackPrompt, PromptEngine, PromptEngineError

__all__ = ["FeedbackPrompt", "PromptEngine", "PromptEngineError"]
