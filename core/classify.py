"""
Cent-key classification and duplicate detection.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Set

from core.logger import setup_logger
from core.schema import BucketMapping, ClassificationOutcome, ClassifiedRecord, InputRecord

logger = setup_logger(__name__)

HUNDRED = Decimal(100)


def compute_cent_key(amount: Decimal) -> int:
    """
    Derive the 0-99 classification key from the fractional cents of |amount|.
    Rounds to the nearest whole cent, ties away from zero.
    """
    cents = (abs(amount) * HUNDRED).to_integral_value(rounding=ROUND_HALF_UP)
    return int(cents) % 100


def canonical_amount(amount: Decimal) -> str:
    """
    Canonical text form of a signed amount.
    Equal amounts always render the same: 5.010 -> "5.01", 100 -> "100".
    """
    if amount == 0:
        return "0"
    return format(amount.normalize(), "f")


def build_fingerprint(record: InputRecord) -> str:
    """Duplicate-detection key: date, signed amount, donor and description."""
    return "_".join([
        record.date.isoformat(),
        canonical_amount(record.amount),
        record.donor_name or "",
        record.description or "",
    ])


def classify_records(records: Iterable[InputRecord], mapping: BucketMapping) -> List[ClassifiedRecord]:
    """
    Annotate each record with its cent key, bucket and anomaly flags.

    The first record carrying a fingerprint is never a duplicate;
    every later record with the same fingerprint is.

    Args:
        records: InputRecords in original row order
        mapping: Cent key -> bucket lookup table

    Returns:
        ClassifiedRecords, same order and count as the input
    """
    buckets = mapping.as_dict()
    seen: Set[str] = set()
    classified: List[ClassifiedRecord] = []

    for record in records:
        cent_key = compute_cent_key(record.amount)

        fingerprint = build_fingerprint(record)
        is_duplicate = fingerprint in seen
        seen.add(fingerprint)

        bucket_name = buckets.get(cent_key)
        outcome = ClassificationOutcome.MAPPED if bucket_name is not None else ClassificationOutcome.UNMAPPED

        classified.append(ClassifiedRecord(
            **record.model_dump(),
            cent_key=cent_key,
            bucket_name=bucket_name,
            outcome=outcome,
            is_duplicate=is_duplicate,
            is_negative=record.amount < 0,
        ))

    logger.debug(f"Classified {len(classified)} records against {len(buckets)} mappings")
    return classified
