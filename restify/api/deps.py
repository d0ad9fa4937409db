"""
API dependency helpers.

Provides the application registry and the resolved repository for the
generated routes.
"""
from fastapi import Depends, Request

from restify.api.auth import resolve_actor
from restify.exceptions import UnauthorizedRepository
from restify.registry import RepositoryRegistry
from restify.repositories.base import Repository


def get_registry(request: Request) -> RepositoryRegistry:
    return request.app.state.restify


# Contract:
# Fires before_each listeners, then returns the repository bound to a fresh model.
# Raises RepositoryNotFound (404) for unknown keys, UnauthorizedRepository (403)
# when the actor may not use the repository.
def get_repository(
    repository: str,
    request: Request,
    registry: RepositoryRegistry = Depends(get_registry),
) -> Repository:
    resolve_actor(request)
    registry.events.dispatch_before_each(request)
    instance = registry.resolve_repository(repository)
    if not instance.authorized_to_use_repository(request):
        raise UnauthorizedRepository()
    return instance
