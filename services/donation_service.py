"""
Donation processing service.
Composes parsing, classification and aggregation into one pipeline run.
"""
from typing import Any, Dict, Optional

from core.aggregate import compute_stats, partition_records, summarize_buckets
from core.classify import classify_records
from core.config import get_settings
from core.exceptions import DonationSplitError, FileProcessingError
from core.exporters import (
    create_output_filename,
    export_to_csv,
    export_to_excel,
    records_to_dataframe,
    summaries_to_dataframe,
    unmapped_to_dataframe,
)
from core.logger import setup_logger
from core.parsing import Grid, parse_records, read_grid
from core.schema import BucketMapping, PipelineResult

logger = setup_logger(__name__)


def run_pipeline(grid: Grid, mapping: BucketMapping) -> PipelineResult:
    """
    Run the full pipeline over a decoded grid.

    Holds no state between calls: the same (grid, mapping) always yields
    an identical result.

    Args:
        grid: Rows of raw cell values; row 0 holds the headers
        mapping: Cent key -> bucket lookup table (never mutated)

    Returns:
        PipelineResult with mapped records, summaries, unmapped records and stats

    Raises:
        MissingColumnsError: If the header lacks a date or amount column
    """
    parsed = parse_records(grid)
    classified = classify_records(parsed.records, mapping)
    mapped, unmapped = partition_records(classified)
    summaries = summarize_buckets(mapped)
    stats = compute_stats(classified, unmapped, skipped_rows=parsed.skipped_rows)

    logger.info(
        f"Pipeline finished: {stats.total_records} records, {len(summaries)} buckets, "
        f"{stats.unmapped_count} unmapped, {stats.duplicate_count} duplicates, "
        f"{stats.negative_count} negative, {stats.skipped_rows} skipped rows"
    )

    return PipelineResult(
        mapped_records=mapped,
        summaries=summaries,
        unmapped_records=unmapped,
        stats=stats,
    )


class DonationService:
    """Service wrapping the pipeline with file loading and report export."""

    def __init__(self):
        """Initialize donation service."""
        self.settings = get_settings()

    def process_file(self, file_path: str, mapping: BucketMapping) -> PipelineResult:
        """
        Decode a spreadsheet file and run the pipeline over it.

        Args:
            file_path: Path to .xlsx, .xls or .csv file
            mapping: Bucket mapping for this run

        Returns:
            PipelineResult

        Raises:
            DonationSplitError: Parsing and column errors propagate unchanged
            FileProcessingError: On any unexpected failure
        """
        logger.info(f"Processing donations file: {file_path} ({len(mapping)} mappings)")
        try:
            grid = read_grid(file_path)
            return run_pipeline(grid, mapping)
        except DonationSplitError:
            raise
        except Exception as e:
            logger.error(f"File processing failed for {file_path}: {e}", exc_info=True)
            raise FileProcessingError(
                "Failed to process donations file",
                details={"file_path": file_path, "error": str(e)}
            )

    def export_results(self, result: PipelineResult, base_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Write the detailed, summary and unmapped CSV reports plus a combined workbook.

        Args:
            result: Pipeline result to export
            base_path: Output directory (defaults to configured storage path)

        Returns:
            Mapping of report name -> written file path
        """
        base_path = base_path or self.settings.temp_storage_path

        outputs = {
            "detailed": export_to_csv(
                records_to_dataframe(result.mapped_records),
                create_output_filename("detailed", base_path)
            ),
            "summary": export_to_csv(
                summaries_to_dataframe(result.summaries),
                create_output_filename("summary", base_path)
            ),
            "unmapped": export_to_csv(
                unmapped_to_dataframe(result.unmapped_records),
                create_output_filename("unmapped", base_path)
            ),
            "workbook": export_to_excel(
                result,
                create_output_filename("results", base_path, extension="xlsx")
            ),
        }

        logger.info(f"Exported {len(outputs)} reports to {base_path}")
        return outputs
