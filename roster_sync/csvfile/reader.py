from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

import pandas as pd

"""CSV reader for roster imports.

Line 1 is the header row, every later non-blank line is a data row. Row
numbers are 1-based and include the header, so the first data row is row 2.

Quoting follows RFC 4180 for single-line fields: double quotes delimit a
field, commas inside quotes are literal and a doubled quote inside quotes is
a literal quote character.
"""

__all__ = [
    "CsvReadError",
    "EmptyCsvError",
    "CsvHeaderError",
    "CsvRecord",
    "CsvTable",
    "split_lines",
    "split_csv_line",
    "read_csv_records",
    "decode_csv_bytes",
    "read_csv_file",
    "records_to_frame",
]

UTF8_BOM = "\ufeff"


class CsvReadError(Exception):
    """Base class for file-level CSV failures."""


class EmptyCsvError(CsvReadError):
    """Raised when the file holds no lines at all."""

    def __init__(self) -> None:
        super().__init__("CSV file is empty.")


class CsvHeaderError(CsvReadError):
    """Raised when the header row yields no columns."""

    def __init__(self) -> None:
        super().__init__("CSV header row is empty.")


@dataclass(frozen=True)
class CsvRecord:
    row_number: int
    values: dict[str, str]  # header token -> trimmed cell ("" when missing)


@dataclass(frozen=True)
class CsvTable:
    header: list[str]
    records: list[CsvRecord]


def split_lines(text: str) -> list[str]:
    """Split text on CRLF, CR or LF and drop one trailing blank line."""
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    if lines and not lines[-1].strip():
        lines.pop()
    return lines


def split_csv_line(line: str) -> list[str]:
    """Tokenize a single CSV line.

    >>> split_csv_line('a,"b,c",d')
    ['a', 'b,c', 'd']
    >>> split_csv_line('a,"b""c",d')
    ['a', 'b"c', 'd']
    >>> split_csv_line('a,b,')
    ['a', 'b', '']
    """
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == '"':
            if in_quotes and i + 1 < length and line[i + 1] == '"':
                current.append('"')
                i += 2
                continue
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            tokens.append("".join(current))
            current = []
        else:
            current.append(char)
        i += 1

    # A trailing comma still closes an (empty) last field
    if current or line.endswith(","):
        tokens.append("".join(current))
    return tokens


def read_csv_records(text: str) -> CsvTable:
    """Parse CSV text into a header and positional records.

    Raises:
        EmptyCsvError: the text contains no lines
        CsvHeaderError: the header line has no tokens
    """
    if text.startswith(UTF8_BOM):
        text = text[len(UTF8_BOM):]
    lines = split_lines(text)
    if not lines:
        raise EmptyCsvError()

    header = [token.strip() for token in split_csv_line(lines[0])]
    if not header:
        raise CsvHeaderError()

    records: list[CsvRecord] = []
    for index, line in enumerate(lines[1:], start=2):
        if not line.strip():
            continue
        tokens = split_csv_line(line)
        values: dict[str, str] = {}
        for position, name in enumerate(header):
            values[name] = tokens[position].strip() if position < len(tokens) else ""
        records.append(CsvRecord(row_number=index, values=values))
    return CsvTable(header=header, records=records)


def decode_csv_bytes(data: bytes, encodings: Sequence[str]) -> tuple[str, str]:
    """Decode raw bytes trying each encoding strictly, in order.

    Returns (text, encoding). Falls back to UTF-8 with replacement characters
    when no candidate decodes cleanly.
    """
    for encoding in encodings:
        try:
            text = data.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            continue
        return text.removeprefix(UTF8_BOM), encoding
    return data.decode("utf-8", errors="replace").removeprefix(UTF8_BOM), "utf-8"


def read_csv_file(path: Path, encodings: Iterable[str]) -> tuple[str, str]:
    """Read a CSV file from disk and decode it. Returns (text, encoding)."""
    return decode_csv_bytes(path.read_bytes(), tuple(encodings))


def records_to_frame(table: CsvTable) -> pd.DataFrame:
    """Build a string-typed DataFrame from parsed records, keyed by row number."""
    frame = pd.DataFrame(
        [record.values for record in table.records],
        columns=list(dict.fromkeys(table.header)),
        dtype="string",
    )
    frame.index = pd.Index([record.row_number for record in table.records], name="row")
    return frame
