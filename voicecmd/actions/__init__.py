"""Local action execution."""

from .executor import ActionExecutor

__all__ = ["ActionExecutor"]
