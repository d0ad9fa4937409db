"""FastAPI application, dependencies and the generated repository routes."""
