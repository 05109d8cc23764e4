"""Gamification engine for expense tracking: points, levels, streaks and achievements."""

__version__ = "1.0.0"
