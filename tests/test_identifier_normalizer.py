"""
tests/test_identifier_normalizer.py

Pytest unit tests for identifier, categorical and header canonicalization.
"""

from __future__ import annotations

import pytest

from app.normalizers.identifier_normalizer import (
    canonicalize_chassis,
    canonicalize_eid,
    clean_categorical,
    is_likely_eid_header,
    is_null_literal,
    normalize_header_key,
)


class TestNullLiteral:
    @pytest.mark.parametrize("value", [None, "", "  ", "null", "NULL", " Null "])
    def test_null_like_values(self, value: str | None) -> None:
        assert is_null_literal(value) is True

    @pytest.mark.parametrize("value", ["0", "nullable", "N/A"])
    def test_regular_values(self, value: str) -> None:
        assert is_null_literal(value) is False

    def test_clean_categorical(self) -> None:
        assert clean_categorical("  Sedan ") == "Sedan"
        assert clean_categorical("null") is None
        assert clean_categorical(None) is None


class TestChassis:
    def test_removes_whitespace_and_uppercases(self) -> None:
        assert canonicalize_chassis(" ab 12\tcd ") == "AB12CD"

    def test_case_variants_collapse(self) -> None:
        assert canonicalize_chassis("chs123") == canonicalize_chassis("CHS123")

    def test_keeps_punctuation(self) -> None:
        assert canonicalize_chassis("ab-12") == "AB-12"

    @pytest.mark.parametrize("value", [None, "", "   ", "null"])
    def test_empty_values(self, value: str | None) -> None:
        assert canonicalize_chassis(value) is None

    def test_idempotent(self) -> None:
        once = canonicalize_chassis("wdb 123 xyz")
        assert canonicalize_chassis(once) == once


class TestEid:
    def test_keeps_letters_and_digits_only(self) -> None:
        assert canonicalize_eid("784-1990-1234567-1") == "784199012345671"

    def test_uppercases(self) -> None:
        assert canonicalize_eid("ab-12") == "AB12"

    def test_only_punctuation_is_absent(self) -> None:
        assert canonicalize_eid("--- ") is None

    def test_idempotent(self) -> None:
        once = canonicalize_eid("784 1990 x")
        assert canonicalize_eid(once) == once


class TestHeaders:
    @pytest.mark.parametrize(
        "header, expected",
        [
            ("Quote Requested On", "quoterequestedon"),
            ("Quote_Number", "quotenumber"),
            ("Quote #", "quote"),
            ("Emirates-ID", "emiratesid"),
            (None, ""),
        ],
    )
    def test_normalize_header_key(self, header: str | None, expected: str) -> None:
        assert normalize_header_key(header) == expected

    @pytest.mark.parametrize(
        "header, expected",
        [
            ("customereid", True),
            ("ownereidno", True),
            ("holderemiratesidnumber", True),
            ("drivernationalid", True),
            ("nationalidno", True),
            ("eidissuedate", False),
            ("chassisnumber", False),
            ("", False),
        ],
    )
    def test_is_likely_eid_header(self, header: str, expected: bool) -> None:
        assert is_likely_eid_header(header) is expected
