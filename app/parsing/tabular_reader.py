"""
app/parsing/tabular_reader.py

Turns an uploaded CSV or Excel file into header-keyed rows.
"""

from __future__ import annotations

import csv
import io
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Sequence

import pandas as pd

from app.decoding.byte_decoder import decode
from app.domain.price_batch import DecodedText, RawBatch, TabularRow
from app.errors import UnsupportedFileType

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS: tuple[str, ...] = ("csv", "xlsx", "xls")

_EXCEL_ENGINES = {
    "xlsx": "openpyxl",
    "xls": "xlrd",
}

_SEPARATOR_SAMPLE_LINES = 10


@dataclass(frozen=True)
class ParsedSheet:
    """
    Header row, data rows and (for text input) the decoding used.
    """

    headers: tuple[str, ...]
    rows: list[TabularRow]
    decoded: DecodedText | None = None


def detect_separator(lines: Sequence[str]) -> str:
    """
    Choose ';' or ',' by counting both outside quoted fields in the first lines.

    Ties go to semicolon.
    """

    counts = {",": 0, ";": 0}
    for line in lines[:_SEPARATOR_SAMPLE_LINES]:
        in_quotes = False
        index = 0
        while index < len(line):
            char = line[index]
            if char == '"':
                if in_quotes and index + 1 < len(line) and line[index + 1] == '"':
                    index += 1
                else:
                    in_quotes = not in_quotes
            elif not in_quotes and char in counts:
                counts[char] += 1
            index += 1
    return ";" if counts[";"] >= counts[","] else ","


def read_batch(batch: RawBatch) -> ParsedSheet:
    """
    Parse one uploaded file into rows according to its extension.
    """

    extension = batch.extension
    if extension == "csv":
        return read_csv_bytes(batch.content)
    if extension in _EXCEL_ENGINES:
        return read_excel_bytes(batch.content, engine=_EXCEL_ENGINES[extension])
    raise UnsupportedFileType(
        f"Unsupported file type '{extension or batch.file_name}'. Allowed: {list(SUPPORTED_EXTENSIONS)}.",
        context={"file_name": batch.file_name},
    )


def read_csv_bytes(content: bytes) -> ParsedSheet:
    decoded = decode(content)
    logger.debug("Decoded %d bytes as %s (%s)", len(content), decoded.encoding, decoded.confidence)
    text = decoded.content.replace("\x00", "")
    sample = [line for line in text.splitlines() if line.strip()]
    separator = detect_separator(sample)
    logger.debug("CSV separator detected: %r", separator)

    reader = csv.reader(io.StringIO(text, newline=""), delimiter=separator)
    headers, rows = _rows_from_records(reader)
    return ParsedSheet(headers=headers, rows=rows, decoded=decoded)


def read_excel_bytes(content: bytes, *, engine: str) -> ParsedSheet:
    try:
        frame = pd.read_excel(io.BytesIO(content), header=None, engine=engine)
    except Exception as exc:  # noqa: BLE001
        raise UnsupportedFileType(
            "Workbook could not be read as a spreadsheet.",
            context={"engine": engine, "error": str(exc)},
        ) from exc

    records = (
        [_cell_to_text(value) for value in record]
        for record in frame.itertuples(index=False, name=None)
    )
    headers, rows = _rows_from_records(records, trim_trailing=True)
    return ParsedSheet(headers=headers, rows=rows, decoded=None)


def _rows_from_records(
    records: Iterable[Sequence[str]],
    *,
    trim_trailing: bool = False,
) -> tuple[tuple[str, ...], list[TabularRow]]:
    headers: list[str] = []
    rows: list[TabularRow] = []
    line_number = 0

    for record in records:
        line_number += 1
        cells = [str(cell).strip() for cell in record]
        if trim_trailing:
            while cells and not cells[-1]:
                cells.pop()
        if not headers:
            if not any(cells):
                line_number -= 1
                continue
            headers = cells
            continue
        if not cells or (len(cells) == 1 and not cells[0]):
            continue

        mapped: dict[str, str] = {}
        for position, header in enumerate(headers):
            if not header or position >= len(cells):
                continue
            mapped.setdefault(header, cells[position])
        rows.append(TabularRow(row_index=line_number, cells=mapped, column_count=len(cells)))

    return tuple(headers), rows


def _cell_to_text(value: Any) -> str:
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(float(value))
    if isinstance(value, datetime):
        if (value.hour, value.minute, value.second) == (0, 0, 0):
            return value.date().isoformat()
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
