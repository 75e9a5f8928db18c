"""Journal and user persistence."""

from .store import GLOBAL_SCOPE, JournalEntry, JournalStore, StorageScope, interactions_only

__all__ = ["GLOBAL_SCOPE", "JournalEntry", "JournalStore", "StorageScope", "interactions_only"]
