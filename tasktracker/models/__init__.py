"""SQLAlchemy models for tasktracker."""

from .base import Base
from .task_row import TaskRow

__all__ = ["Base", "TaskRow"]
