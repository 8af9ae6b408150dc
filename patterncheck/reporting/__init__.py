"""Step reporter backends and factory."""

from __future__ import annotations

import os
from typing import Optional

from ..config import PatternCheckConfig, load_config
from .base import BaseStepReporter, StepChannel
from .http import HttpStepReporter
from .inmemory import InMemoryStepReporter
from .models import StepRecord
from .sqlite import SQLiteStepReporter

try:  # pragma: no cover - optional dependency
    from .postgres import PostgresStepReporter
except ImportError:  # pragma: no cover - optional dependency
    PostgresStepReporter = None  # type: ignore


def get_reporter(
    backend: Optional[str] = None, config: Optional[PatternCheckConfig] = None
) -> BaseStepReporter:
    """Factory function to obtain the configured step reporter.

    The backend comes from ``backend``, the ``PATTERNCHECK_REPORTER`` env
    variable or the loaded configuration. Database backends read their URL
    from ``reporter.database_url``; when the backend is not given explicitly
    a configured database URL selects SQLite or PostgreSQL by scheme.
    """

    config = config or load_config()
    database_url = config.reporter.database_url
    backend = backend or os.getenv("PATTERNCHECK_REPORTER")
    if not backend:
        backend = config.reporter.backend
        if backend == "inmemory" and database_url:
            backend = "postgres" if database_url.startswith("postgres") else "sqlite"
    backend = backend.lower()

    if backend == "inmemory":
        return InMemoryStepReporter()
    if backend == "http":
        http_conf = config.reporter.http
        return HttpStepReporter(
            url=http_conf.url, api_key=http_conf.api_key, timeout=http_conf.timeout
        )
    if backend == "sqlite":
        if not database_url:
            raise ValueError("SQLite reporter requires reporter.database_url")
        return SQLiteStepReporter(database_url.replace("sqlite://", "", 1))
    if backend == "postgres":
        if not database_url:
            raise ValueError("Postgres reporter requires reporter.database_url")
        if PostgresStepReporter is None:
            raise RuntimeError("Postgres support not available")
        return PostgresStepReporter(database_url)
    raise ValueError(f"Unsupported reporter backend: {backend}")


__all__ = [
    "BaseStepReporter",
    "StepChannel",
    "StepRecord",
    "InMemoryStepReporter",
    "SQLiteStepReporter",
    "PostgresStepReporter",
    "HttpStepReporter",
    "get_reporter",
]
