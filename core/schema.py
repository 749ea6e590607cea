"""
Pydantic models for the donation split pipeline.
Every entity is immutable once created.
"""
import datetime as dt
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

CENT = Decimal("0.01")


class BucketEntry(BaseModel):
    """One cent key -> bucket name association."""
    model_config = ConfigDict(frozen=True)

    cent_key: int = Field(..., ge=0, le=99, description="Fractional-cent key (00-99)")
    bucket_name: str = Field(..., min_length=1, description="Destination bucket (church) name")

    @field_validator("bucket_name")
    @classmethod
    def strip_bucket_name(cls, v: str) -> str:
        """Trim the name and reject blank ones."""
        v = v.strip()
        if not v:
            raise ValueError("Bucket name must not be blank")
        return v


class BucketMapping(BaseModel):
    """
    Caller-owned lookup table from cent key to bucket name.
    Keys are unique across the set; entry order is irrelevant.
    """
    model_config = ConfigDict(frozen=True)

    entries: Tuple[BucketEntry, ...] = ()

    @field_validator("entries")
    @classmethod
    def validate_unique_keys(cls, v):
        """Reject two entries sharing a cent key."""
        seen = set()
        for entry in v:
            if entry.cent_key in seen:
                raise ValueError(f"Duplicate mapping for cent key {entry.cent_key:02d}")
            seen.add(entry.cent_key)
        return v

    @classmethod
    def from_dict(cls, mapping: Mapping[int, str]) -> "BucketMapping":
        """Build a mapping from ``{cent_key: bucket_name}``."""
        return cls(entries=tuple(
            BucketEntry(cent_key=key, bucket_name=name) for key, name in mapping.items()
        ))

    def as_dict(self) -> Dict[int, str]:
        return {entry.cent_key: entry.bucket_name for entry in self.entries}

    def lookup(self, cent_key: int) -> Optional[str]:
        """Return the bucket name for a cent key, or None when unmapped."""
        for entry in self.entries:
            if entry.cent_key == cent_key:
                return entry.bucket_name
        return None

    def __len__(self) -> int:
        return len(self.entries)


class InputRecord(BaseModel):
    """One parsed transaction row."""
    model_config = ConfigDict(frozen=True)

    date: dt.date
    amount: Decimal
    donor_name: Optional[str] = None
    description: Optional[str] = None


class ClassificationOutcome(str, Enum):
    MAPPED = "mapped"
    UNMAPPED = "unmapped"


class ClassifiedRecord(InputRecord):
    """InputRecord annotated with its cent key, bucket and anomaly flags."""

    cent_key: int = Field(..., ge=0, le=99)
    bucket_name: Optional[str] = None
    outcome: ClassificationOutcome
    is_duplicate: bool = False
    is_negative: bool = False

    @property
    def is_mapped(self) -> bool:
        return self.outcome is ClassificationOutcome.MAPPED


class BucketSummary(BaseModel):
    """Aggregated totals for one resolved bucket."""
    model_config = ConfigDict(frozen=True)

    bucket_name: str
    cent_key: int = Field(..., ge=0, le=99, description="Cent key of the first record seen for the bucket")
    total_amount: Decimal = Field(..., description="Sum of absolute amounts")
    record_count: int = Field(..., ge=0)

    @computed_field
    @property
    def average_amount(self) -> Decimal:
        """Mean absolute amount per record, rounded to the cent."""
        if self.record_count == 0:
            return Decimal("0.00")
        return (self.total_amount / self.record_count).quantize(CENT, rounding=ROUND_HALF_UP)


class PipelineStats(BaseModel):
    """Run-level counters."""
    model_config = ConfigDict(frozen=True)

    total_records: int = 0
    duplicate_count: int = 0
    negative_count: int = 0
    unmapped_count: int = 0
    skipped_rows: int = Field(default=0, description="Data rows dropped as unparseable or empty")


class PipelineResult(BaseModel):
    """The four result structures handed back to callers."""
    model_config = ConfigDict(frozen=True)

    mapped_records: List[ClassifiedRecord] = Field(default_factory=list)
    summaries: List[BucketSummary] = Field(default_factory=list)
    unmapped_records: List[ClassifiedRecord] = Field(default_factory=list)
    stats: PipelineStats = Field(default_factory=PipelineStats)
