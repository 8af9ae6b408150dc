from __future__ import annotations

import os
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field


class HttpReporterConfig(BaseModel):
    """Configuration for the runner backend API."""

    url: str = "http://localhost:8080"
    api_key: Optional[str] = None
    timeout: float = 10.0


class ReporterConfig(BaseModel):
    """Step reporter configuration settings."""

    backend: Literal["inmemory", "sqlite", "postgres", "http"] = "inmemory"
    database_url: Optional[str] = None
    http: HttpReporterConfig = Field(default_factory=HttpReporterConfig)


class PatternCheckConfig(BaseModel):
    """Top-level configuration model."""

    supported_platforms: List[str] = Field(default_factory=lambda: ["alertflow"])
    missing_as_empty: bool = True
    reporter: ReporterConfig = Field(default_factory=ReporterConfig)


def load_config(path: Optional[str] = None) -> PatternCheckConfig:
    """Load configuration from YAML file.

    Args:
        path: Optional path to config file. Falls back to PATTERNCHECK_CONFIG
            env variable or 'config.yaml' in the current directory.
    """

    config_path = path or os.getenv("PATTERNCHECK_CONFIG", "config.yaml")
    if os.path.exists(config_path):
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        config = PatternCheckConfig(**data)
    else:
        config = PatternCheckConfig()

    env_backend = os.getenv("PATTERNCHECK_REPORTER")
    if env_backend:
        config.reporter.backend = env_backend.lower()

    env_db_url = os.getenv("PATTERNCHECK_DATABASE_URL") or os.getenv("DATABASE_URL")
    if env_db_url:
        config.reporter.database_url = env_db_url

    env_backend_url = os.getenv("PATTERNCHECK_BACKEND_URL")
    if env_backend_url:
        config.reporter.http.url = env_backend_url

    env_api_key = os.getenv("PATTERNCHECK_API_KEY")
    if env_api_key:
        config.reporter.http.api_key = env_api_key
    return config
