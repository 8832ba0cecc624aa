"""API routes package."""

from cadence.api.routes import chat, history, profile, upcoming

__all__ = ["chat", "history", "profile", "upcoming"]
