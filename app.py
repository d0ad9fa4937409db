"""
App assembly entry point.

Re-exports the FastAPI `app` from `restify.api.main` (`uvicorn app:app`).
"""

from restify.api.main import app  # noqa: F401
