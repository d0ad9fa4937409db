"""
Exceptions raised by the registry and the generated endpoints.

Each exception carries the HTTP status it is rendered with; the FastAPI
handler lives in `restify.api.main`.
"""
from typing import Any, Optional


class RestifyException(Exception):
    status_code = 500

    def __init__(self, detail: Any = None):
        self.detail = detail if detail is not None else self.default_detail()
        super().__init__(self.detail)

    def default_detail(self) -> Any:
        return "Restify error."


class RepositoryNotFound(RestifyException):
    status_code = 404

    def __init__(self, key: str, detail: Optional[str] = None):
        self.key = key
        super().__init__(detail or f"Repository {key} not found.")


class ModelNotFound(RestifyException):
    status_code = 404

    def __init__(self, repository_key: str, record_id: Any):
        self.repository_key = repository_key
        self.record_id = record_id
        super().__init__(f"{repository_key} record {record_id} not found.")


class ActionNotFound(RestifyException):
    status_code = 404

    def __init__(self, action_key: str):
        self.action_key = action_key
        super().__init__(f"Action {action_key} not found.")


class UnauthorizedRepository(RestifyException):
    status_code = 403

    def default_detail(self) -> Any:
        return "This action is unauthorized."


class ValidationFailed(RestifyException):
    status_code = 422

    def default_detail(self) -> Any:
        return []
