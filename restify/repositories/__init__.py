"""
Repository descriptors exposed through the generated API.

`Repository` is the base class application repositories subclass;
`ActionLogRepository` exposes the `action_logs` table read-only.
"""

from .base import Repository
from .action_logs import ActionLogRepository

__all__ = ["Repository", "ActionLogRepository"]
