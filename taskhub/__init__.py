"""Taskhub: multi-user task management API and client."""

__version__ = "1.0.0"
