"""
Action log helpers.

Writes one `ActionLog` row per store/update/destroy or action run when the
repository configured by RESTIFY_LOGS_REPOSITORY is registered.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional

from fastapi.encoders import jsonable_encoder

logger = logging.getLogger(__name__)


class ActionLogEvent(str, Enum):
    STORED = "Stored"
    UPDATED = "Updated"
    DELETED = "Deleted"


def _actor_email(request) -> Optional[str]:
    user = getattr(getattr(request, "state", None), "user", None)
    return (user or {}).get("email")


def record_action(
    db,
    registry,
    request,
    *,
    name: ActionLogEvent | str,
    repository,
    record=None,
    original: Optional[Dict[str, Any]] = None,
    changes: Optional[Dict[str, Any]] = None,
):
    """Persist an action log entry; returns None when action logging is disabled."""
    if not registry.logs_actions():
        return None
    entry = registry.action_log()
    entry.name = name.value if isinstance(name, ActionLogEvent) else str(name)
    entry.actor_email = _actor_email(request)
    entry.actionable_type = repository.uri_key()
    if record is not None:
        entry.actionable_id = str(getattr(record, repository.primary_key()))
    entry.status = "finished"
    entry.original = jsonable_encoder(original) if original is not None else None
    entry.changes = jsonable_encoder(changes) if changes is not None else None
    db.add(entry)
    logger.debug("action_logged: name=%s type=%s id=%s", entry.name, entry.actionable_type, entry.actionable_id)
    return entry
