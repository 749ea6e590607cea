"""
CSV and Excel exporters for pipeline results.
Formats values the Brazilian way (R$ 1.234,56, DD/MM/YYYY, Sim/Não).
"""
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import List, Optional, Sequence

import pandas as pd

from core.config import get_settings
from core.exceptions import ExportError
from core.logger import setup_logger
from core.schema import CENT, BucketSummary, ClassifiedRecord, PipelineResult

logger = setup_logger(__name__)

DETAILED_COLUMNS: List[str] = [
    "date", "donor", "amount", "cent_key", "bucket_name", "description", "is_duplicate", "is_negative"
]
SUMMARY_COLUMNS: List[str] = ["bucket_name", "cent_key", "total_amount", "record_count", "average"]
UNMAPPED_COLUMNS: List[str] = ["date", "donor", "amount", "cent_key", "description"]

SHEET_NAMES = {
    "summary": "Resumo por Igreja",
    "detailed": "Doações Detalhadas",
    "unmapped": "Não Mapeadas",
}


def format_brl(value: Decimal) -> str:
    """
    Format an amount as Brazilian currency.

    Examples:
        Decimal("1234.5") -> "R$ 1.234,50"
        Decimal("-1.01") -> "-R$ 1,01"
    """
    rounded = value.quantize(CENT, rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    grouped = f"{abs(rounded):,.2f}"
    # swap US separators for Brazilian ones
    grouped = grouped.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {grouped}"


def format_date_br(value: date) -> str:
    return value.strftime("%d/%m/%Y")


def format_flag(value: bool) -> str:
    return "Sim" if value else "Não"


def records_to_dataframe(records: Sequence[ClassifiedRecord]) -> pd.DataFrame:
    """Detailed report: one row per classified record."""
    unmapped_label = get_settings().unmapped_label
    rows = [
        {
            "date": format_date_br(record.date),
            "donor": record.donor_name or "",
            "amount": format_brl(record.amount),
            "cent_key": f"{record.cent_key:02d}",
            "bucket_name": record.bucket_name or unmapped_label,
            "description": record.description or "",
            "is_duplicate": format_flag(record.is_duplicate),
            "is_negative": format_flag(record.is_negative),
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=DETAILED_COLUMNS)


def unmapped_to_dataframe(records: Sequence[ClassifiedRecord]) -> pd.DataFrame:
    """Unmapped report: records whose cent key has no bucket."""
    return records_to_dataframe(records)[UNMAPPED_COLUMNS]


def summaries_to_dataframe(summaries: Sequence[BucketSummary]) -> pd.DataFrame:
    """Summary report: one row per bucket, in summary order."""
    rows = [
        {
            "bucket_name": summary.bucket_name,
            "cent_key": f"{summary.cent_key:02d}",
            "total_amount": format_brl(summary.total_amount),
            "record_count": summary.record_count,
            "average": format_brl(summary.average_amount),
        }
        for summary in summaries
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def export_to_csv(df: pd.DataFrame, output_path: str) -> str:
    """
    Write a report DataFrame to CSV (UTF-8 with BOM so spreadsheet apps keep accents).

    Raises:
        ExportError: If the file cannot be written
    """
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        df.to_csv(output_path, index=False, encoding="utf-8-sig")
    except Exception as e:
        logger.error(f"Failed to export CSV: {e}")
        raise ExportError(
            "Failed to export to CSV",
            details={"output_path": output_path, "error": str(e)}
        )

    logger.info(f"Exported {len(df)} rows to {output_path}")
    return output_path


def export_to_excel(result: PipelineResult, output_path: str) -> str:
    """
    Export summary, detailed and unmapped reports as sheets of one workbook.

    Args:
        result: Pipeline result to export
        output_path: Output file path

    Returns:
        Path to created file

    Raises:
        ExportError: If export fails
    """
    frames = {
        "summary": summaries_to_dataframe(result.summaries),
        "detailed": records_to_dataframe(result.mapped_records),
        "unmapped": unmapped_to_dataframe(result.unmapped_records),
    }

    logger.info(f"Exporting {result.stats.total_records} records to {output_path}")

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
            for report, df in frames.items():
                sheet_name = SHEET_NAMES[report]
                df.to_excel(writer, sheet_name=sheet_name, index=False)

                # Auto-fit columns (approximate)
                worksheet = writer.sheets[sheet_name]
                for idx, col in enumerate(df.columns):
                    max_len = max(
                        df[col].astype(str).map(len).max() if len(df) else 0,
                        len(str(col))
                    )
                    worksheet.set_column(idx, idx, min(max_len + 2, 50))

        logger.info(f"Successfully exported to {output_path}")
        return output_path

    except Exception as e:
        logger.error(f"Failed to export Excel: {e}")
        raise ExportError(
            "Failed to export to Excel",
            details={"output_path": output_path, "error": str(e)}
        )


def create_output_filename(report: str, base_path: Optional[str] = None, extension: str = "csv") -> str:
    """
    Create timestamped output filename.

    Args:
        report: Report name ("detailed", "summary", "unmapped" or "results")
        base_path: Base directory path (defaults to configured temp storage)
        extension: File extension without dot

    Returns:
        Full output file path
    """
    if base_path is None:
        base_path = get_settings().temp_storage_path

    Path(base_path).mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
    filename = f"{report}_donations_{timestamp}.{extension}"

    return str(Path(base_path) / filename)
