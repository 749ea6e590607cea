"""
Record parsing for donation spreadsheets.
Turns a decoded grid (row 0 = headers) into validated InputRecords,
and loads such grids from Excel/CSV files for the outer surfaces.
"""
from pathlib import Path
from typing import Any, List, NamedTuple, Optional, Sequence

import pandas as pd

from core.cells import CellKind, cell_kind, parse_amount, parse_date
from core.columns import ColumnLayout, locate_columns
from core.exceptions import DataNotFoundError, ParsingError
from core.logger import setup_logger
from core.schema import InputRecord

logger = setup_logger(__name__)

Grid = Sequence[Sequence[Any]]

SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".csv")


class ParsedRecords(NamedTuple):
    records: List[InputRecord]
    skipped_rows: int


def _cell_at(row: Sequence[Any], index: Optional[int]) -> Any:
    if index is None or index >= len(row):
        return None
    return row[index]


def _is_blank(value: Any) -> bool:
    kind = cell_kind(value)
    return kind is CellKind.ABSENT or (kind is CellKind.TEXT and not str(value).strip())


def optional_text(value: Any) -> Optional[str]:
    """
    Normalize a free-text cell: absent or blank cells become None.

    Args:
        value: Raw cell value

    Returns:
        Trimmed text or None
    """
    if _is_blank(value):
        return None
    # Spreadsheet decoders hand back whole numbers as floats (123 -> 123.0)
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_row(row: Sequence[Any], layout: ColumnLayout) -> Optional[InputRecord]:
    """
    Build an InputRecord from one data row.

    Returns:
        InputRecord, or None when the row is empty or its date/amount is unparseable
    """
    if not row or all(_is_blank(cell) for cell in row):
        return None

    record_date = parse_date(_cell_at(row, layout.date))
    amount = parse_amount(_cell_at(row, layout.amount))
    if record_date is None or amount is None:
        return None

    return InputRecord(
        date=record_date,
        amount=amount,
        donor_name=optional_text(_cell_at(row, layout.donor)),
        description=optional_text(_cell_at(row, layout.description)),
    )


def parse_records(grid: Grid) -> ParsedRecords:
    """
    Parse every data row of a grid, skipping malformed rows.

    Args:
        grid: Rows of raw cell values; row 0 holds the headers

    Returns:
        ParsedRecords with records in original row order and the skipped count

    Raises:
        MissingColumnsError: If the header lacks a date or amount column
    """
    if not grid:
        return ParsedRecords(records=[], skipped_rows=0)

    layout = locate_columns(grid[0] or [])
    logger.debug(f"Resolved columns: {layout.model_dump()}")

    records: List[InputRecord] = []
    skipped = 0
    for index, row in enumerate(grid[1:], start=1):
        record = parse_row(row or [], layout)
        if record is None:
            skipped += 1
            # Sheet row numbers are 1-based
            logger.debug(f"Skipping row {index + 1}: empty or unparseable date/amount")
            continue
        records.append(record)

    logger.info(f"Parsed {len(records)} records ({skipped} rows skipped)")
    return ParsedRecords(records=records, skipped_rows=skipped)


def detect_csv_separator(path: Path) -> str:
    """Brazilian exports use ";" since "," is the decimal separator."""
    with open(path, encoding="utf-8-sig", errors="replace") as f:
        header = f.readline()
    return ";" if header.count(";") > header.count(",") else ","


def read_grid(file_path: str) -> List[List[Any]]:
    """
    Decode the first sheet of an Excel file (or a CSV file) into a raw grid.

    Excel cells keep their decoded types (numbers, timestamps, text);
    CSV cells are all read as text. Empty cells become None.

    Args:
        file_path: Path to .xlsx, .xls or .csv file

    Returns:
        List of rows, row 0 being the header row

    Raises:
        DataNotFoundError: If file doesn't exist
        ParsingError: If file format is invalid
    """
    path = Path(file_path)
    if not path.exists():
        raise DataNotFoundError(
            f"File not found: {file_path}",
            details={"file_path": file_path}
        )

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise ParsingError(
            f"Unsupported file type: {path.suffix}",
            details={"file_path": file_path, "supported": list(SUPPORTED_EXTENSIONS)}
        )

    logger.info(f"Reading grid from {path.name}")

    try:
        if suffix == ".csv":
            df = pd.read_csv(
                file_path,
                header=None,
                dtype=str,
                keep_default_na=False,
                sep=detect_csv_separator(path),
                encoding="utf-8-sig",
            )
        else:
            engine = "xlrd" if suffix == ".xls" else "openpyxl"
            df = pd.read_excel(file_path, header=None, sheet_name=0, engine=engine)
    except Exception as e:
        logger.error(f"Failed to read {file_path}: {str(e)}")
        raise ParsingError(
            f"Invalid spreadsheet format: {path.name}",
            details={"file_path": file_path, "error": str(e)}
        )

    df = df.astype(object).where(pd.notna(df), None)
    grid = df.values.tolist()
    logger.info(f"Read {len(grid)} rows from {path.name}")
    return grid
