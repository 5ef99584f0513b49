"""
app/normalizers/identifier_normalizer.py

Canonicalization helpers for identifiers, categorical values and headers.

Chassis and EID values are used as deduplication keys, so every variant of
the same identifier (case, spacing, punctuation) must collapse to one key.
"""

from __future__ import annotations

from typing import Final

NULL_LITERAL: Final[str] = "null"

_HEADER_NOISE: Final[frozenset[str]] = frozenset({"_", "-", "#"})


def is_null_literal(value: str | None) -> bool:
    """
    Return True for ``None``, blank text, or the literal ``"null"`` (any case).
    """

    if value is None:
        return True
    trimmed = str(value).strip()
    return not trimmed or trimmed.lower() == NULL_LITERAL


def clean_categorical(value: str | None) -> str | None:
    """Trimmed text, or None when the value is a null literal."""

    if is_null_literal(value):
        return None
    return str(value).strip()


def canonicalize_chassis(value: str | None) -> str | None:
    """
    Canonical chassis key: all whitespace removed, uppercased.

    Returns None when nothing remains after cleaning.
    """

    if is_null_literal(value):
        return None
    cleaned = "".join(ch for ch in str(value) if not ch.isspace())
    return cleaned.upper() or None


def canonicalize_eid(value: str | None) -> str | None:
    """
    Canonical EID key: letters and digits only, uppercased.

    Returns None when nothing remains after cleaning.
    """

    if is_null_literal(value):
        return None
    cleaned = "".join(ch for ch in str(value) if ch.isalnum())
    return cleaned.upper() or None


def normalize_header_key(header: str | None) -> str:
    """
    Lowercase *header* and drop whitespace, ``_``, ``-`` and ``#``.
    """

    if header is None:
        return ""
    return "".join(
        ch.lower()
        for ch in header
        if not ch.isspace() and ch not in _HEADER_NOISE
    )


def is_likely_eid_header(normalized_header: str) -> bool:
    """
    Heuristic match for EID / national-ID columns on a normalized header key.
    """

    if not normalized_header:
        return False
    key = normalized_header.lower()
    return (
        key.endswith(("eid", "eidnumber", "eidno"))
        or "emiratesid" in key
        or key.endswith(("nationalid", "nationalidnumber", "nationalidno"))
    )
