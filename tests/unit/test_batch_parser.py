"""
Unit tests for batch input parser functionality.

This module tests parsing of CSV and JSONL request files, including
collection of rejected rows and validation error formatting.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from secondlook.core.batch_parser import (
    BatchParseError,
    RejectedRow,
    _clean_row_data,
    _detect_format,
    _format_validation_error,
    parse_batch_input,
)
from secondlook.models import DescriptionRequest

CHAIR_URL = "https://cdn.example.com/image/upload/v1/listings/chair.jpg"


class TestRejectedRow:
    """Test RejectedRow data structure."""

    def test_rejected_row_default_error_type(self):
        row = RejectedRow(row_number=1, raw_data={}, error_message="Error")

        assert row.error_type == "validation_error"


class TestFormatDetection:
    """Test format detection functionality."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("requests.csv", "csv"),
            ("REQUESTS.CSV", "csv"),
            ("requests.jsonl", "jsonl"),
            ("requests.ndjson", "jsonl"),
            ("requests.json", "jsonl"),
        ],
    )
    def test_detect_format_by_extension(self, name, expected):
        assert _detect_format(Path(name)) == expected

    def test_detect_format_unknown(self):
        with pytest.raises(BatchParseError, match="Unsupported batch file format"):
            _detect_format(Path("requests.xlsx"))


class TestRowDataCleaning:
    """Test row data cleaning and field mapping."""

    def test_clean_row_data_empty_values(self):
        cleaned = _clean_row_data(
            {
                "image_url": f"  {CHAIR_URL}  ",
                "title": "",
                "style": None,
                "condition": "   ",
                None: ["extra", "cells"],
            }
        )

        assert cleaned == {"image_url": CHAIR_URL}

    def test_clean_row_data_aliases(self):
        cleaned = _clean_row_data(
            {
                "Request_ID": "row-7",
                "photo_url": CHAIR_URL,
                "listing_title": "Oak desk",
                "Category": "HOME_GARDEN",
            }
        )

        assert cleaned == {
            "id": "row-7",
            "image_url": CHAIR_URL,
            "title": "Oak desk",
            "category": "HOME_GARDEN",
        }


class TestValidationErrorFormatting:
    """Test Pydantic validation error formatting."""

    def test_format_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            DescriptionRequest(title="x" * 201, price="R100")

        formatted = _format_validation_error(exc_info.value)

        assert "title:" in formatted
        assert "price:" in formatted
        assert "; " in formatted


class TestParseBatchInput:
    """Test parse_batch_input with real files."""

    @pytest.mark.asyncio
    async def test_parse_csv(self, tmp_path):
        batch_file = tmp_path / "requests.csv"
        batch_file.write_text(
            "id,image_url,category,condition,title\n"
            f"a,{CHAIR_URL},HOME_GARDEN,GOOD,Oak chair\n"
            f"b,{CHAIR_URL},ELECTRONICS,LIKE_NEW,\n",
            encoding="utf-8",
        )

        requests, rejected = await parse_batch_input(batch_file)

        assert rejected == []
        assert [r.id for r in requests] == ["a", "b"]
        assert [r.row_number for r in requests] == [2, 3]
        assert requests[0].title == "Oak chair"
        assert requests[1].title is None

    @pytest.mark.asyncio
    async def test_parse_jsonl_with_bad_rows(self, tmp_path):
        batch_file = tmp_path / "requests.jsonl"
        batch_file.write_text(
            f'{{"id": "a", "image_url": "{CHAIR_URL}", "category": "TOYS", '
            '"condition": "NEW"}\n'
            "\n"
            "{not json}\n"
            '["a", "list"]\n'
            '{"id": "d", "price": 100}\n'
            '{"id": "e", "category": "CARS"}\n',
            encoding="utf-8",
        )

        requests, rejected = await parse_batch_input(batch_file)

        # Unknown codes are left for the orchestrator to reject.
        assert [(r.id, r.row_number) for r in requests] == [("a", 1), ("e", 6)]

        assert [row.row_number for row in rejected] == [3, 4, 5]
        assert rejected[0].error_type == "parse_error"
        assert rejected[0].error_message.startswith("Invalid JSON")
        assert rejected[1].error_message == "Row must be an object"
        assert rejected[2].error_type == "validation_error"
        assert "price" in rejected[2].error_message

    @pytest.mark.asyncio
    async def test_missing_file(self, tmp_path):
        with pytest.raises(BatchParseError, match="Could not read batch file"):
            await parse_batch_input(tmp_path / "missing.jsonl")

    @pytest.mark.asyncio
    async def test_unsupported_extension(self, tmp_path):
        batch_file = tmp_path / "requests.txt"
        batch_file.write_text("anything", encoding="utf-8")

        with pytest.raises(BatchParseError):
            await parse_batch_input(batch_file)

    @pytest.mark.asyncio
    async def test_empty_file(self, tmp_path):
        batch_file = tmp_path / "requests.csv"
        batch_file.write_text("", encoding="utf-8")

        assert await parse_batch_input(batch_file) == ([], [])
