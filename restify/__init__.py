"""
Repository registry and auto-generated JSON API endpoints.

Public API re-exported for application boot code.
"""

from restify.exceptions import RepositoryNotFound, RestifyException
from restify.registry import RepositoryRegistry
from restify.repositories import ActionLogRepository, Repository
from restify.utils.paths import is_restify, path

__all__ = [
    "RepositoryRegistry",
    "Repository",
    "ActionLogRepository",
    "RepositoryNotFound",
    "RestifyException",
    "path",
    "is_restify",
]
