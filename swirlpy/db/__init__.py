"""Lesson progress persistence."""

from .progress import Progress, ProgressStore

__all__ = ["Progress", "ProgressStore"]
