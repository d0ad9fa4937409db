"""Database engine, session dependency and built-in models."""
