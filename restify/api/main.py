"""
FastAPI app assembly: registry wiring, exception rendering and routes.

`create_app()` builds an application around one `RepositoryRegistry`; the
module-level `app` uses repositories discovered in RESTIFY_REPOSITORIES_PATH.
"""
import logging
from contextlib import asynccontextmanager
from typing import Iterable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from restify.api.repositories import router as repositories_router
from restify.config import get_settings
from restify.exceptions import RestifyException
from restify.registry import RepositoryRegistry
from restify.utils.paths import path as restify_path

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level_name = get_settings().log_level
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level)
    logging.getLogger("restify").setLevel(level)


def _rewrite_prefixed_path(request: Request, registry: RepositoryRegistry) -> None:
    """Map `/<prefix>/<key>/...` onto `<base>/<key>/...` for repositories with a custom prefix.

    Only the repository declaring the prefix is reachable under it.
    """
    raw = request.scope.get("path", "")
    trimmed = raw.strip("/")
    base = restify_path().strip("/")
    if trimmed == base or trimmed.startswith(f"{base}/"):
        return
    for repository in registry:
        prefix = repository.prefix()
        if not prefix or not trimmed.startswith(f"{prefix}/"):
            continue
        rest = trimmed[len(prefix) + 1:]
        if rest.split("/", 1)[0] == repository.uri_key():
            request.scope["path"] = f"/{base}/{rest}"
            return


def _handle_exception(registry: RepositoryRegistry, request: Request, exc: Exception, status_code: int, detail) -> Response:
    registry.events.report(exc)
    rendered = registry.events.render(request, exc)
    if isinstance(rendered, Response):
        return rendered
    return JSONResponse({"detail": detail}, status_code=status_code)


def create_app(
    registry: Optional[RepositoryRegistry] = None,
    *,
    repositories: Iterable = (),
    cors_origins: Iterable[str] = ("http://localhost", "http://localhost:3000"),
) -> FastAPI:
    configure_logging()
    registry = registry if registry is not None else RepositoryRegistry()
    if repositories:
        registry.register(repositories)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        registry.ensure_loaded()
        registry.events.dispatch_starting(registry)
        logger.info("restify_startup: base=%s repositories=%d", restify_path(), len(registry))
        yield

    app = FastAPI(
        title="Restify API",
        description="Auto-generated JSON API for registered repositories.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.restify = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def route_custom_prefixes(request: Request, call_next):
        if not registry.is_restify(request):
            return await call_next(request)
        _rewrite_prefixed_path(request, registry)
        # Errors not handled below still go through the report/render callbacks.
        try:
            return await call_next(request)
        except Exception as exc:
            logger.exception("restify_unhandled_exception: path=%s type=%s", request.url.path, type(exc).__name__)
            return _handle_exception(registry, request, exc, 500, "Internal Server Error")

    @app.exception_handler(RestifyException)
    async def render_restify_exception(request: Request, exc: RestifyException):
        logger.warning(
            "restify_exception: path=%s status=%s type=%s",
            request.url.path, exc.status_code, type(exc).__name__,
        )
        return _handle_exception(registry, request, exc, exc.status_code, exc.detail)

    app.include_router(repositories_router, prefix=restify_path())
    return app


app = create_app()
