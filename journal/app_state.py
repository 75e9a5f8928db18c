"""Shared service instances for journal routes."""
from __future__ import annotations

import os

from journal.config.service import ConfigService
from journal.feedback.dispatcher import FeedbackDispatcher
from journal.feedback.generator import FeedbackGenerator
from journal.storage.store import JournalStore

CONFIG_SERVICE = ConfigService(os.getenv("JOURNAL_CONFIG_DIR"))
STORE = JournalStore(os.getenv("JOURNAL_DATA_DIR"))
FEEDBACK_GENERATOR = FeedbackGenerator(STORE, CONFIG_SERVICE)
FEEDBACK_DISPATCHER = FeedbackDispatcher()
