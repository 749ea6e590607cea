"""
Aggregation of classified records into bucket summaries and run statistics.
"""
from decimal import Decimal
from typing import Dict, List, Sequence, Tuple

from core.schema import BucketSummary, ClassifiedRecord, PipelineStats


def partition_records(
    records: Sequence[ClassifiedRecord]
) -> Tuple[List[ClassifiedRecord], List[ClassifiedRecord]]:
    """
    Split records into (mapped, unmapped), keeping relative order in each.
    """
    mapped = [record for record in records if record.is_mapped]
    unmapped = [record for record in records if not record.is_mapped]
    return mapped, unmapped


def summarize_buckets(records: Sequence[ClassifiedRecord]) -> List[BucketSummary]:
    """
    Build one summary row per resolved bucket.

    Totals accumulate absolute amounts, so refunds still add their magnitude.
    The cent key shown is the one of the first record seen for the bucket.

    Args:
        records: Classified records; unmapped ones are ignored

    Returns:
        Summaries sorted by total descending, ties in first-appearance order
    """
    # bucket name -> [cent_key, total, count], insertion order = first appearance
    totals: Dict[str, list] = {}
    for record in records:
        if not record.is_mapped:
            continue
        entry = totals.setdefault(record.bucket_name, [record.cent_key, Decimal(0), 0])
        entry[1] += abs(record.amount)
        entry[2] += 1

    summaries = [
        BucketSummary(bucket_name=name, cent_key=cent_key, total_amount=total, record_count=count)
        for name, (cent_key, total, count) in totals.items()
    ]
    # sorted() is stable, also with reverse=True
    return sorted(summaries, key=lambda summary: summary.total_amount, reverse=True)


def compute_stats(
    records: Sequence[ClassifiedRecord],
    unmapped: Sequence[ClassifiedRecord],
    skipped_rows: int = 0
) -> PipelineStats:
    """Run-level counters over the full classified sequence."""
    return PipelineStats(
        total_records=len(records),
        duplicate_count=sum(1 for record in records if record.is_duplicate),
        negative_count=sum(1 for record in records if record.is_negative),
        unmapped_count=len(unmapped),
        skipped_rows=skipped_rows,
    )
