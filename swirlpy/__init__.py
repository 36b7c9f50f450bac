"""
swirlpy - Interactive Python Lessons

A resumable, interactive tutorial runner for the terminal.
Pick a course, work through its lessons one question at a time, and pick up
exactly where you left off next time.
"""

__version__ = "0.1.0"
