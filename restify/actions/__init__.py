"""
Repository actions.

An action runs against a set of records selected by primary key, e.g.
`POST /restify-api/posts/action?action=publish-posts` with
`{"repositories": [1, 2]}`.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from restify.utils.strings import humanize, kebab


class Action(ABC):
    uri: Optional[str] = None
    name_label: Optional[str] = None

    @classmethod
    def uri_key(cls) -> str:
        if cls.uri:
            return cls.uri
        name = cls.__name__
        if name.endswith("Action") and name != "Action":
            name = name[: -len("Action")]
        return kebab(name)

    @classmethod
    def name(cls) -> str:
        return cls.name_label or humanize(cls.uri_key())

    def authorized_to_run(self, request, repository) -> bool:
        return True

    @abstractmethod
    def handle(self, request, repository, records: List[Any], db) -> Optional[Dict[str, Any]]:
        """Run the action on the selected records; the result is returned as `data`."""

    def serialize(self) -> Dict[str, Any]:
        return {"uri_key": self.uri_key(), "name": self.name()}


class DeleteAction(Action):
    """Delete every selected record the actor is authorized to delete."""

    def handle(self, request, repository, records, db):
        deleted = 0
        for record in records:
            if repository.authorized_to_delete(request, record):
                repository.destroy(db, record)
                deleted += 1
        return {"deleted": deleted}


__all__ = ["Action", "DeleteAction"]
