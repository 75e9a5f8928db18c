"""Contact Journal: multi-tenant interaction journaling with AI feedback."""

__version__ = "1.0.0"
