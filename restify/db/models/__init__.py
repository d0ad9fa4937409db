"""
SQLAlchemy declarative base plus the models shipped with the package.

Application models backing repositories should subclass `Base` so the
test and dev helpers can create their tables alongside `action_logs`.
"""

from .base import Base, now_utc  # re-export
from .action_log import ActionLog

__all__ = [
    "Base",
    "now_utc",
    "ActionLog",
]
