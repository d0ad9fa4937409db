"""
Repository registry and resolver.

One `RepositoryRegistry` is built per application and handed to the routing
layer (stored on `app.state.restify`). Repositories are registered explicitly
with `register()` or discovered with `load_from_directory()`; lookups are
linear scans returning the first match, so registration order decides ties.
"""
from __future__ import annotations

import hashlib
import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Iterable, Iterator, List, Optional, Tuple

from restify.bootstrap import boot_repository
from restify.config import get_settings
from restify.events import RestifyEvents
from restify.exceptions import RepositoryNotFound
from restify.repositories.base import Repository
from restify.utils import paths

logger = logging.getLogger(__name__)


def is_instantiable_repository(candidate: Any) -> bool:
    """Return True for concrete Repository subclasses (not flagged `__abstract__`)."""
    return (
        inspect.isclass(candidate)
        and issubclass(candidate, Repository)
        and candidate is not Repository
        and not candidate.__dict__.get("__abstract__", False)
        and not inspect.isabstract(candidate)
    )


def _import_file(file: Path, root: Path):
    """Import a Python file by path, reusing the module if it was already loaded.

    The module name mirrors the file's location under `root`, so
    `root/admin/audits.py` becomes `_restify_repositories_<hash>.admin.audits`.
    """
    digest = hashlib.sha1(str(root.resolve()).encode("utf-8")).hexdigest()[:10]
    dotted = ".".join(file.relative_to(root).with_suffix("").parts)
    module_name = f"_restify_repositories_{digest}.{dotted}"
    existing = sys.modules.get(module_name)
    if existing is not None:
        return existing
    spec = importlib.util.spec_from_file_location(module_name, file)
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    return module


def _qualified_name(repository) -> str:
    return f"{repository.__module__}.{repository.__qualname__}"


def _repository_files(directory: Path) -> List[Path]:
    # Files or folders starting with "_" (private modules, __pycache__) are skipped.
    return [
        file
        for file in sorted(directory.rglob("*.py"))
        if not any(part.startswith("_") for part in file.relative_to(directory).parts)
    ]


class RepositoryRegistry:
    # Keys taken by fixed routes mounted next to `/{repository}`.
    RESERVED_KEYS = frozenset({"search"})

    def __init__(self, repositories: Iterable[type[Repository]] = ()):
        self._repositories: List[type[Repository]] = []
        self.events = RestifyEvents()
        if repositories:
            self.register(repositories)

    @property
    def repositories(self) -> Tuple[type[Repository], ...]:
        return tuple(self._repositories)

    def __iter__(self) -> Iterator[type[Repository]]:
        return iter(list(self._repositories))

    def __len__(self) -> int:
        return len(self._repositories)

    def __contains__(self, repository) -> bool:
        return repository in self._repositories

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, repositories: Iterable[type[Repository]]) -> "RepositoryRegistry":
        """Add repositories not yet registered, booting each one exactly once."""
        for repository in repositories:
            if repository in self._repositories:
                continue
            if repository.uri_key() in self.RESERVED_KEYS:
                raise ValueError(f"{repository.__name__} uses the reserved uri key '{repository.uri_key()}'")
            boot_repository(repository, self)
            self._repositories.append(repository)
            logger.debug("repository_registered: key=%s", repository.uri_key())
        return self

    def load_from_directory(self, directory) -> List[type[Repository]]:
        """Register every concrete repository class defined in the directory's modules.

        Subdirectories are scanned too. A missing directory is not an error:
        nothing is registered.
        """
        directory = Path(directory)
        if not directory.is_dir():
            logger.debug("repositories_directory_missing: path=%s", directory)
            return []

        found: List[type[Repository]] = []
        for file in _repository_files(directory):
            module = _import_file(file, directory)
            for _, candidate in inspect.getmembers(module, inspect.isclass):
                if candidate.__module__ == module.__name__ and is_instantiable_repository(candidate):
                    found.append(candidate)

        found.sort(key=_qualified_name)
        self.register(found)
        logger.info("repositories_loaded: path=%s count=%d", directory, len(found))
        return found

    def ensure_loaded(self) -> None:
        if not self._repositories:
            self.load_from_directory(get_settings().repositories_path)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def _first(self, predicate: Callable[[type[Repository]], bool]) -> Optional[type[Repository]]:
        for repository in self._repositories:
            if predicate(repository):
                return repository
        return None

    def repository_for_key(self, key: str) -> Optional[type[Repository]]:
        return self._first(lambda repository: repository.uri_key() == key)

    def repository_for_prefix(self, prefix: str) -> Optional[type[Repository]]:
        candidate = prefix.lstrip("/")
        return self._first(lambda repository: repository.route().lstrip("/") in candidate)

    def repository_for_model(self, model) -> Optional[type[Repository]]:
        """Find the repository backed by a model instance, model class or model type name.

        Classes and instances match on the model class itself; a string matches
        either the fully qualified `module.QualName` or the bare class name.
        """
        if isinstance(model, str):
            return self._first(
                lambda repository: model in (repository.model_type(), repository.model_name())
            )
        model_class = model if inspect.isclass(model) else type(model)
        return self._first(lambda repository: repository.model is model_class)

    def repository_for_table(self, table: str) -> Optional[type[Repository]]:
        def _matches(repository) -> bool:
            if repository.model is None:
                return False
            return repository.new_model().__table__.name == table

        return self._first(_matches)

    def resolve_repository(self, key: str) -> Repository:
        """Return a repository instance for `key` bound to a fresh model, or its mock."""
        repository = self.repository_for_key(key)
        if repository is None:
            raise RepositoryNotFound(key)
        return repository.resolve()

    # ------------------------------------------------------------------
    # Authorization filter
    # ------------------------------------------------------------------
    @staticmethod
    def sort_repositories_with() -> Callable[[type[Repository]], str]:
        return lambda repository: repository.label()

    def globally_searchable_repositories(self, request) -> List[type[Repository]]:
        allowed = [
            repository
            for repository in self._repositories
            if repository.authorized_to_use_repository(request) and repository.globally_searchable
        ]
        return sorted(allowed, key=self.sort_repositories_with())

    # ------------------------------------------------------------------
    # Paths and action log
    # ------------------------------------------------------------------
    def path(self, suffix: Optional[str] = None, query=None) -> str:
        return paths.path(suffix, query)

    def is_restify(self, request) -> bool:
        return paths.is_restify(request, self._repositories)

    def action_repository(self) -> Repository:
        return self.resolve_repository(get_settings().logs_repository)

    def action_log(self):
        return self.action_repository().new_model()

    def logs_actions(self) -> bool:
        return self.repository_for_key(get_settings().logs_repository) is not None
