from __future__ import annotations

import csv
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any

import openpyxl
import pandas as pd

from ..models.row_data import RowData
from .cell_format import format_cell

"""Tabular row source.

Decodes one spreadsheet export (xlsx/xlsm/xls workbook or delimited text) into
an ordered list of RowData:

- first row is the header row, header names are trimmed
- xlsx/xlsm cells are rendered with their number format (format_cell), so a
  fraction-formatted or date-converted "6/17" comes back as "6/17"; legacy
  .xls and delimited text are read as stored text (dtype=str)
- blank cells are left out of the row mapping (absent field -> None on lookup)
- fully blank rows are skipped
- duplicate headers get a numeric suffix ("Name", "Name_1", ...)

Every decode problem surfaces as SheetDecodeError.
"""

__all__ = [
    "EXCEL_SUFFIXES",
    "OPENXML_SUFFIXES",
    "TEXT_SUFFIXES",
    "SheetData",
    "SheetDecodeError",
    "normalize_frame",
    "read_sheet",
    "read_sheet_bytes",
]

EXCEL_SUFFIXES = frozenset({".xlsx", ".xlsm", ".xls"})
OPENXML_SUFFIXES = frozenset({".xlsx", ".xlsm"})
TEXT_SUFFIXES = frozenset({".csv", ".txt"})
_TEXT_ENCODINGS = ("utf-8-sig", "utf-8", "cp1252")
_DELIMITERS = (",", ";", "\t", "|")


class SheetDecodeError(Exception):
    """Raised when a source file cannot be decoded into rows."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[RowData]


def read_sheet(path: Path, sheet: str | None = None) -> SheetData:
    """Read a spreadsheet file from disk (first worksheet unless ``sheet`` given)."""
    try:
        data = path.read_bytes()
    except OSError as e:
        raise SheetDecodeError(f"cannot read {path}: {e}") from e
    return read_sheet_bytes(data, path.name, sheet=sheet)


def read_sheet_bytes(data: bytes, filename: str, sheet: str | None = None) -> SheetData:
    """Decode raw upload bytes; the container format is picked by file extension."""
    suffix = Path(filename).suffix.lower()
    if suffix in OPENXML_SUFFIXES:
        sheet_name, df = _read_openxml_frame(data, filename, sheet)
    elif suffix in EXCEL_SUFFIXES:
        sheet_name, df = _read_workbook_frame(data, filename, sheet)
    elif suffix in TEXT_SUFFIXES:
        sheet_name, df = "CSV", _read_delimited_frame(data, filename)
    else:
        raise SheetDecodeError(f"unsupported file type: {filename}")
    return normalize_frame(df, sheet_name)


def _pick_sheet(names: list[str], sheet: str | None, filename: str) -> str:
    if not names:
        raise SheetDecodeError(f"workbook {filename} has no sheets")
    if sheet is None:
        return names[0]
    if sheet in names:
        return sheet
    raise SheetDecodeError(f"sheet '{sheet}' not found in {filename} (sheets={names})")


def _read_openxml_frame(data: bytes, filename: str, sheet: str | None) -> tuple[str, pd.DataFrame]:
    """xlsx/xlsm through openpyxl so each cell is rendered with its number format."""
    try:
        wb = openpyxl.load_workbook(BytesIO(data), data_only=True)
    except Exception as e:
        raise SheetDecodeError(f"invalid workbook {filename}: {e}") from e
    try:
        target = _pick_sheet([str(n) for n in wb.sheetnames], sheet, filename)
        try:
            raw = [
                [format_cell(cell.value, getattr(cell, "number_format", None)) for cell in row]
                for row in wb[target].iter_rows()
            ]
        except Exception as e:
            raise SheetDecodeError(f"failed reading sheet '{target}' of {filename}: {e}") from e
    finally:
        wb.close()
    return target, pd.DataFrame(raw)


def _read_workbook_frame(data: bytes, filename: str, sheet: str | None) -> tuple[str, pd.DataFrame]:
    """Legacy .xls via pandas (xlrd); cells come back as their stored text."""
    try:
        xls = pd.ExcelFile(BytesIO(data))
    except Exception as e:
        raise SheetDecodeError(f"invalid workbook {filename}: {e}") from e
    target = _pick_sheet([str(n) for n in xls.sheet_names], sheet, filename)
    try:
        # ヘッダなしで生読み (1行目をヘッダとして後で適用)
        df = xls.parse(target, header=None, dtype=str, keep_default_na=False)
    except Exception as e:
        raise SheetDecodeError(f"failed reading sheet '{target}' of {filename}: {e}") from e
    return target, df


def _guess_delimiter(sample: str) -> str:
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters="".join(_DELIMITERS))
        return dialect.delimiter
    except csv.Error:
        pass
    lines = [ln for ln in sample.splitlines() if ln.strip()][:20]
    if not lines:
        return ","
    scores = {d: sum(ln.count(d) for ln in lines) for d in _DELIMITERS}
    best = max(scores, key=lambda d: scores[d])
    return best if scores[best] > 0 else ","


def _read_delimited_frame(data: bytes, filename: str) -> pd.DataFrame:
    last_err: Exception | None = None
    for enc in _TEXT_ENCODINGS:
        try:
            sample = data[:65536].decode(enc)
        except UnicodeDecodeError as e:
            last_err = e
            continue
        delim = _guess_delimiter(sample)
        try:
            return pd.read_csv(
                BytesIO(data),
                header=None,
                sep=delim,
                dtype=str,
                keep_default_na=False,
                encoding=enc,
                engine="python",
                skip_blank_lines=True,
            )
        except pd.errors.EmptyDataError as e:
            raise SheetDecodeError(f"{filename} is empty") from e
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            last_err = e
    raise SheetDecodeError(f"failed decoding {filename}: {last_err}")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def _header_names(raw: list[Any]) -> list[str | None]:
    seen: dict[str, int] = {}
    headers: list[str | None] = []
    for cell in raw:
        if _is_blank(cell):
            headers.append(None)  # 見出しなし列は読み飛ばす
            continue
        name = str(cell).strip()
        if name in seen:
            seen[name] += 1
            name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0
        headers.append(name)
    return headers


def normalize_frame(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Apply the first row as header and convert the rest into RowData.

    Steps:
    1. Validate the header row exists
    2. Trim / de-duplicate header names
    3. Drop blank cells and fully blank rows
    """
    if df.shape[0] < 1:
        raise SheetDecodeError(f"sheet '{sheet_name}' has no header row")
    headers = _header_names(df.iloc[0].tolist())
    columns = [h for h in headers if h is not None]
    if not columns:
        raise SheetDecodeError(f"sheet '{sheet_name}' has an empty header row")

    rows: list[RowData] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        values: dict[str, Any] = {}
        for header, val in zip(headers, raw, strict=False):
            if header is None or _is_blank(val):
                continue
            values[header] = val
        if not values:
            continue
        rows.append(RowData(row_number=len(rows) + 1, values=values))

    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)
