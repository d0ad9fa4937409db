"""
Generated repository endpoints.

CRUD, global search and actions for every registered repository, mounted
under the configured base path (`/restify-api` by default).
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, Response, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from restify.actions.log import ActionLogEvent, record_action
from restify.api.auth import resolve_actor
from restify.api.deps import get_registry, get_repository
from restify.config import get_settings
from restify.db.database import get_db
from restify.exceptions import ActionNotFound, UnauthorizedRepository
from restify.registry import RepositoryRegistry
from restify.repositories.base import Repository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["restify"])


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


@router.get("/search")
def global_search_endpoint(
    request: Request,
    search: str = "",
    db: Session = Depends(get_db),
    registry: RepositoryRegistry = Depends(get_registry),
):
    resolve_actor(request)
    registry.events.dispatch_before_each(request)
    term = search.strip()
    results: List[Dict[str, Any]] = []
    if not term:
        return {"data": results}
    for repository in registry.globally_searchable_repositories(request):
        instance = repository.resolve()
        results.extend(instance.global_search(db, term))
    return {"data": results}


@router.get("/{repository}")
def index_endpoint(
    page: int = Query(1, ge=1),
    per_page: Optional[int] = Query(None, ge=1, le=100),
    search: Optional[str] = None,
    repo: Repository = Depends(get_repository),
    db: Session = Depends(get_db),
):
    return repo.index(db, page=page, per_page=per_page or get_settings().per_page, search=search)


@router.post("/{repository}", status_code=status.HTTP_201_CREATED)
def store_endpoint(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    repo: Repository = Depends(get_repository),
    db: Session = Depends(get_db),
    registry: RepositoryRegistry = Depends(get_registry),
):
    if not repo.authorized_to_store(request):
        raise UnauthorizedRepository()
    record = repo.store(db, payload)
    record_action(
        db, registry, request,
        name=ActionLogEvent.STORED,
        repository=repo,
        record=record,
        changes=repo.serialize(record),
    )
    _commit(db)
    db.refresh(record)
    return {"data": repo.serialize(record)}


@router.get("/{repository}/actions")
def list_actions_endpoint(
    request: Request,
    repo: Repository = Depends(get_repository),
):
    return {"data": [action.serialize() for action in repo.actions(request)]}


@router.post("/{repository}/action")
def run_action_endpoint(
    request: Request,
    action: str = Query(...),
    payload: Optional[Dict[str, Any]] = Body(None),
    repo: Repository = Depends(get_repository),
    db: Session = Depends(get_db),
    registry: RepositoryRegistry = Depends(get_registry),
):
    selected = next((a for a in repo.actions(request) if a.uri_key() == action), None)
    if selected is None:
        raise ActionNotFound(action)
    if not selected.authorized_to_run(request, repo):
        raise UnauthorizedRepository()

    selection = (payload or {}).get("repositories")
    records = repo.find_many(db, [] if selection is None else selection)
    for record in records:
        record_action(db, registry, request, name=selected.name(), repository=repo, record=record)
    result = selected.handle(request, repo, records, db)
    _commit(db)
    logger.info("action_ran: repository=%s action=%s records=%d", repo.uri_key(), action, len(records))
    return {"data": result or {}}


@router.get("/{repository}/{record_id}")
def show_endpoint(
    record_id: str,
    request: Request,
    repo: Repository = Depends(get_repository),
    db: Session = Depends(get_db),
):
    record = repo.find(db, record_id)
    if not repo.authorized_to_show(request, record):
        raise UnauthorizedRepository()
    return {"data": repo.serialize(record)}


@router.api_route("/{repository}/{record_id}", methods=["PUT", "PATCH"])
def update_endpoint(
    record_id: str,
    request: Request,
    payload: Dict[str, Any] = Body(...),
    repo: Repository = Depends(get_repository),
    db: Session = Depends(get_db),
    registry: RepositoryRegistry = Depends(get_registry),
):
    record = repo.find(db, record_id)
    if not repo.authorized_to_update(request, record):
        raise UnauthorizedRepository()
    original = repo.serialize(record)
    repo.update(db, record, payload)
    current = repo.serialize(record)
    changes = {key: value for key, value in current.items() if original.get(key) != value}
    record_action(
        db, registry, request,
        name=ActionLogEvent.UPDATED,
        repository=repo,
        record=record,
        original={key: original[key] for key in changes},
        changes=changes,
    )
    _commit(db)
    db.refresh(record)
    return {"data": repo.serialize(record)}


@router.delete("/{repository}/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def destroy_endpoint(
    record_id: str,
    request: Request,
    repo: Repository = Depends(get_repository),
    db: Session = Depends(get_db),
    registry: RepositoryRegistry = Depends(get_registry),
):
    record = repo.find(db, record_id)
    if not repo.authorized_to_delete(request, record):
        raise UnauthorizedRepository()
    record_action(
        db, registry, request,
        name=ActionLogEvent.DELETED,
        repository=repo,
        record=record,
        original=repo.serialize(record),
    )
    repo.destroy(db, record)
    _commit(db)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
