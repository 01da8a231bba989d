"""CSV ingestion for bookstore listings."""

from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from .models import ParseResult, ValidationError
from .schema import SchemaError, validate_row

logger = logging.getLogger(__name__)


class CsvReadError(OSError):
    """Raised when the CSV file as a whole can not be read."""


def parse_bookstores(path: str | Path, *, encoding: str = "utf-8-sig") -> ParseResult:
    """Parse a bookstore CSV file into validated records and per-row errors.

    Only whole-file failures raise (``CsvReadError``); a bad row is recorded in
    ``ParseResult.errors`` and parsing continues with the next one.
    """

    path = Path(path)
    try:
        content = path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise CsvReadError(f"Failed to parse CSV file {path}: {exc}") from exc

    result = parse_bookstore_stream(io.StringIO(content, newline=""))
    logger.info(
        "Parsed %d bookstores from %s (%d rows rejected)", len(result.records), path, len(result.errors)
    )
    return result


def parse_bookstore_stream(handle: TextIO) -> ParseResult:
    """Parse CSV text from an open handle. The first row must be the header."""

    reader = csv.reader(handle)
    try:
        header = next(reader, None)
    except csv.Error as exc:
        raise CsvReadError(f"Failed to read CSV header: {exc}") from exc
    if header is None:
        raise CsvReadError("CSV input has no header row")
    columns = [name.strip() for name in header]

    result = ParseResult()
    row_number = 0
    while True:
        try:
            values = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            row_number += 1
            _record_error(result, row_number, None, f"Malformed CSV line {reader.line_num}: {exc}")
            continue

        if not values:
            continue
        row_number += 1

        row = _row_mapping(columns, values)
        if row is None:
            _record_error(
                result,
                row_number,
                None,
                f"Expected {len(columns)} fields but found {len(values)}",
            )
            continue

        try:
            record = validate_row(row)
        except SchemaError as exc:
            _record_error(result, row_number, row, str(exc))
            continue
        result.records.append(record)

    return result


def _row_mapping(columns: List[str], values: List[str]) -> Optional[Dict[str, str]]:
    if len(values) != len(columns):
        return None
    return dict(zip(columns, values))


def _record_error(result: ParseResult, row: int, data: Optional[Dict[str, str]], message: str) -> None:
    logger.warning("Row %d: %s", row, message)
    result.errors.append(ValidationError(row=row, data=data, error=message))
