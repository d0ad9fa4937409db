"""Read-only repository over the action log written by store/update/destroy and actions."""
from restify.db.models import ActionLog

from .base import Repository


class ActionLogRepository(Repository):
    model = ActionLog
    globally_searchable = False
    search_fields = ("name", "actionable_type")
    title_field = "name"

    def authorized_to_store(self, request) -> bool:
        return False

    def authorized_to_update(self, request, resource) -> bool:
        return False

    def authorized_to_delete(self, request, resource) -> bool:
        return False
