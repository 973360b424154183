"""Skillforce - goal-driven skill orchestration agent."""

__version__ = "0.1.0"
