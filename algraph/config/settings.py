"""
Centralized application settings.

Environment variables drive configuration so that deployments can override
defaults without code changes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Neo4jSettings:
    """Connection parameters for Neo4j."""

    uri: str
    username: str
    password: str
    database: str = "neo4j"


def load_settings() -> Neo4jSettings:
    """
    Load Neo4j configuration from environment variables.

    Required vars:
        ALGRAPH_NEO4J_URI
        ALGRAPH_NEO4J_USER
        ALGRAPH_NEO4J_PASSWORD

    Optional:
        ALGRAPH_NEO4J_DATABASE (defaults to \"neo4j\")
    """

    uri = os.environ.get("ALGRAPH_NEO4J_URI")
    username = os.environ.get("ALGRAPH_NEO4J_USER")
    password = os.environ.get("ALGRAPH_NEO4J_PASSWORD")
    database = os.environ.get("ALGRAPH_NEO4J_DATABASE", "neo4j")

    if not uri or not username or not password:
        raise RuntimeError("Neo4j configuration missing required environment variables")

    return Neo4jSettings(uri=uri, username=username, password=password, database=database)


@dataclass(frozen=True)
class AnalyzerSettings:
    """Knobs for discovering and analysing AL files."""

    code_glob: str = "**/*.al"
    ignore_dirs: Tuple[str, ...] = ("node_modules", "dist", "tests")
    max_workers: int = 8
    include_references: bool = False
    debug: bool = False


def load_analyzer_settings() -> AnalyzerSettings:
    code_glob = os.environ.get("ALGRAPH_CODE_GLOB", "**/*.al")
    ignore_raw = os.environ.get("ALGRAPH_IGNORE_DIRS", "node_modules,dist,tests")
    ignore_dirs = tuple(part.strip() for part in ignore_raw.split(",") if part.strip())

    max_workers_raw = os.environ.get("ALGRAPH_MAX_WORKERS", "8")
    try:
        max_workers = int(max_workers_raw)
    except ValueError as exc:
        raise ValueError(f"ALGRAPH_MAX_WORKERS must be an integer, got {max_workers_raw!r}") from exc
    if max_workers < 1:
        raise ValueError("ALGRAPH_MAX_WORKERS must be at least 1")

    return AnalyzerSettings(
        code_glob=code_glob,
        ignore_dirs=ignore_dirs,
        max_workers=max_workers,
        include_references=_env_flag("ALGRAPH_INCLUDE_REFERENCES"),
        debug=_env_flag("ALGRAPH_DEBUG"),
    )


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY
