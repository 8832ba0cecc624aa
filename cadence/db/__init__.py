"""Database models, engine and session management."""
