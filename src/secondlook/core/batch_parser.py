"""
Batch input parsing for secondlook.

Reads description requests from JSONL or CSV files. Rows that cannot be
turned into a :class:`DescriptionRequest` are collected as rejected rows
instead of aborting the whole batch.
"""

import csv
import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

import aiofiles
from pydantic import ValidationError

from ..models import DescriptionRequest

logger = logging.getLogger(__name__)


class BatchParseError(Exception):
    """Raised when a batch file cannot be read at all."""

    pass


@dataclass
class RejectedRow:
    """A batch row that could not be turned into a request."""

    row_number: int
    raw_data: Any
    error_message: str
    error_type: str = "validation_error"


def _detect_format(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix == ".csv":
        return "csv"
    if suffix in (".jsonl", ".ndjson", ".json"):
        return "jsonl"
    raise BatchParseError(f"Unsupported batch file format: {file_path.suffix}")


FIELD_ALIASES = {
    "request_id": "id",
    "image": "image_url",
    "url": "image_url",
    "photo_url": "image_url",
    "listing_title": "title",
}


def _clean_row_data(row: Dict[str, Any]) -> Dict[str, Any]:
    """Strip keys, map column aliases and drop empty values so defaults apply."""
    cleaned = {}
    for key, value in row.items():
        if key is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        if value is None:
            continue
        key = key.strip().lower()
        cleaned[FIELD_ALIASES.get(key, key)] = value
    return cleaned


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item.get("loc", ())) or "row"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


def _iter_rows(text: str, format_type: str) -> List[Tuple[int, Any]]:
    if format_type == "csv":
        reader = csv.DictReader(io.StringIO(text))
        return [(index, row) for index, row in enumerate(reader, start=2)]

    rows: List[Tuple[int, Any]] = []
    for index, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        try:
            rows.append((index, json.loads(line)))
        except json.JSONDecodeError as e:
            rejected = RejectedRow(index, line, f"Invalid JSON: {e}", "parse_error")
            rows.append((index, rejected))
    return rows


async def parse_batch_input(
    file_path: Path,
) -> Tuple[List[DescriptionRequest], List[RejectedRow]]:
    """
    Parse a batch file into description requests.

    Args:
        file_path: Path to a ``.jsonl`` or ``.csv`` file

    Returns:
        Tuple of accepted requests (in file order) and rejected rows

    Raises:
        BatchParseError: If the file is missing, unreadable or of unknown type
    """
    file_path = Path(file_path)
    format_type = _detect_format(file_path)

    try:
        async with aiofiles.open(file_path, "r", encoding="utf-8") as f:
            text = await f.read()
    except OSError as e:
        raise BatchParseError(f"Could not read batch file {file_path}: {e}") from e

    requests: List[DescriptionRequest] = []
    rejected: List[RejectedRow] = []

    for row_number, row in _iter_rows(text, format_type):
        if isinstance(row, RejectedRow):
            rejected.append(row)
            continue
        if not isinstance(row, dict):
            rejected.append(
                RejectedRow(row_number, row, "Row must be an object", "parse_error")
            )
            continue

        try:
            requests.append(
                DescriptionRequest(**_clean_row_data(row), row_number=row_number)
            )
        except ValidationError as e:
            rejected.append(
                RejectedRow(row_number, row, _format_validation_error(e))
            )
        except TypeError as e:
            rejected.append(RejectedRow(row_number, row, str(e)))

    logger.info(
        f"Parsed {file_path}: {len(requests)} requests, {len(rejected)} rejected"
    )
    return requests, rejected
