"""Cadence: conversational student-productivity assistant."""

__version__ = "0.1.0"
