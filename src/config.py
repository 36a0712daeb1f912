"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (e.g.
INGESTION_STRATEGY, GITHUB_TIMEOUT, MAX_FILE_SIZE, cache and clone limits).
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Iterable


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_choice(name: str, default: str, choices: Iterable[str]) -> str:
    raw = (os.environ.get(name) or "").strip().lower()
    return raw if raw in set(choices) else default


# Which ingestion strategy the server uses: "api" (remote tree) or "clone"
INGESTION_STRATEGY = _env_choice("INGESTION_STRATEGY", "clone", ("api", "clone"))

# GitHub
GITHUB_HOST = os.environ.get("GITHUB_HOST", "github.com").strip().lower()
GITHUB_API_URL = os.environ.get("GITHUB_API_URL", "https://api.github.com").strip()
GITHUB_TIMEOUT = _env_float("GITHUB_TIMEOUT", 20.0)

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)

# Eligibility / caching
MAX_FILE_SIZE = _env_int("MAX_FILE_SIZE", 1024 * 1024)
CACHE_TTL_SECONDS = _env_float("CACHE_TTL_SECONDS", 5 * 60.0)

# Local clone
CLONE_TIMEOUT = _env_float("CLONE_TIMEOUT", 120.0)
GIT_EXECUTABLE = os.environ.get("GIT_EXECUTABLE", "git").strip() or "git"
SCRATCH_ROOT = Path(os.environ.get("SCRATCH_ROOT") or tempfile.gettempdir())

# Export boundary
PROJECT_ROOT = Path(os.environ.get("PROJECT_ROOT", ".")).resolve()
EXPORT_OUT_DIR = os.environ.get("EXPORT_OUT_DIR", "exports").strip()

# Tokens / logging
TOKEN_ENCODING = os.environ.get("TOKEN_ENCODING", "cl100k_base").strip() or "cl100k_base"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
