"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SOURCE_DIRECTORY = "source data"

logger = logging.getLogger(__name__)


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_optional_date_env(name: str) -> date | None:
    """
    Read an optional ``YYYY-MM-DD`` date; malformed values are ignored with a warning.
    """

    raw_value = _get_optional_str_env(name)
    if raw_value is None:
        return None
    try:
        return date.fromisoformat(raw_value)
    except ValueError:
        logger.warning("Ignoring %s=%r: expected YYYY-MM-DD", name, raw_value)
        return None


@dataclass(frozen=True)
class QuoteReportSettings:
    """
    Runtime settings for quote report generation.
    """

    source_directory: Path = PROJECT_ROOT / DEFAULT_SOURCE_DIRECTORY
    output_directory: Path | None = None
    start_date: date | None = None
    end_date: date | None = None
    top_requested_limit: int = 20
    top_rejected_make_model_limit: int = 20
    top_rejected_model_limit: int = 10
    write_cleaned_data: bool = True
    log_level: str = "INFO"


def _resolve_directory(raw_value: str) -> Path:
    path = Path(raw_value).expanduser()
    return path if path.is_absolute() else PROJECT_ROOT / path


@lru_cache(maxsize=1)
def get_quote_report_settings() -> QuoteReportSettings:
    """
    Return cached quote report settings from environment variables.
    """

    output_directory = _get_optional_str_env("QUOTE_OUTPUT_DIR")
    return QuoteReportSettings(
        source_directory=_resolve_directory(
            _get_str_env("QUOTE_SOURCE_DIR", DEFAULT_SOURCE_DIRECTORY)
        ),
        output_directory=_resolve_directory(output_directory) if output_directory else None,
        start_date=_get_optional_date_env("REPORT_START_DATE"),
        end_date=_get_optional_date_env("REPORT_END_DATE"),
        top_requested_limit=max(0, _get_int_env("QUOTE_TOP_REQUESTED_LIMIT", 20)),
        top_rejected_make_model_limit=max(
            0, _get_int_env("QUOTE_TOP_REJECTED_MAKE_MODEL_LIMIT", 20)
        ),
        top_rejected_model_limit=max(0, _get_int_env("QUOTE_TOP_REJECTED_MODEL_LIMIT", 10)),
        write_cleaned_data=_get_bool_env("QUOTE_WRITE_CLEANED_DATA", True),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )
