"""Asynchronous AI feedback for journal interactions."""

from .dispatcher import FeedbackDispatcher
from .generator import DEFAULT_FEEDBACK, FeedbackGenerator, parse_feedback_response

__all__ = ["DEFAULT_FEEDBACK", "FeedbackDispatcher", "FeedbackGenerator", "parse_feedback_response"]
