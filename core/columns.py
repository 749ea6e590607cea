"""
Header matching for donation spreadsheets.
Headers are matched case-insensitively by substring, in candidate priority order.
"""
from typing import Any, List, Optional, Sequence

from pydantic import BaseModel

from core.cells import CellKind, cell_kind
from core.exceptions import MissingColumnsError

DATE_CANDIDATES: List[str] = ["data", "date", "dt"]
AMOUNT_CANDIDATES: List[str] = ["valor", "amount", "value", "vlr"]
DONOR_CANDIDATES: List[str] = ["doador", "donor", "nome", "name"]
DESCRIPTION_CANDIDATES: List[str] = ["descricao", "description", "desc", "observacao"]


class ColumnLayout(BaseModel):
    """Resolved column indices for one header row."""
    date: int
    amount: int
    donor: Optional[int] = None
    description: Optional[int] = None


def normalize_header(value: Any) -> str:
    """Lowercase a header cell; absent cells become an empty string."""
    if cell_kind(value) is CellKind.ABSENT:
        return ""
    return str(value).lower()


def locate_column(header_row: Sequence[Any], candidates: Sequence[str]) -> Optional[int]:
    """
    Find the column whose header contains one of the candidate names.

    Candidates are tried in order; for the first candidate with any match,
    the leftmost matching header wins.

    Args:
        header_row: Raw header cells
        candidates: Lowercase candidate names in priority order

    Returns:
        Column index or None if nothing matches
    """
    headers = [normalize_header(cell) for cell in header_row]
    for name in candidates:
        for index, header in enumerate(headers):
            if name in header:
                return index
    return None


def locate_columns(header_row: Sequence[Any]) -> ColumnLayout:
    """
    Resolve all known columns from a header row.

    Raises:
        MissingColumnsError: If the date or amount column cannot be found
    """
    date_index = locate_column(header_row, DATE_CANDIDATES)
    amount_index = locate_column(header_row, AMOUNT_CANDIDATES)

    missing = []
    if date_index is None:
        missing.append("date")
    if amount_index is None:
        missing.append("amount")
    if missing:
        raise MissingColumnsError(
            missing,
            details={"headers": [normalize_header(cell) for cell in header_row]}
        )

    return ColumnLayout(
        date=date_index,
        amount=amount_index,
        donor=locate_column(header_row, DONOR_CANDIDATES),
        description=locate_column(header_row, DESCRIPTION_CANDIDATES),
    )
