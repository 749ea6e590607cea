"""
Import/export helpers for bucket mappings.
Configuration collaborators use these to move mappings in and out of
CSV and JSON text; persistence itself is left to the caller.
"""
import json
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from core.exceptions import ValidationError
from core.logger import setup_logger
from core.schema import BucketEntry, BucketMapping

logger = setup_logger(__name__)

CSV_HEADER = "cents,bucket_name"


def is_header_line(line: str) -> bool:
    """A mapping CSV header is a first line whose key field is not all digits."""
    key_text = line.partition(",")[0].strip().lstrip("\ufeff")
    return not key_text.isdigit()


def parse_mapping_csv(text: str) -> BucketMapping:
    """
    Parse ``cents,name`` lines into a mapping.

    A first line whose key field is not a number is treated as a header.
    Lines with a non-integer or out-of-range key, or a blank name, are
    skipped. When a key repeats, the first entry wins.

    Args:
        text: CSV content

    Returns:
        BucketMapping sorted by cent key
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if lines and is_header_line(lines[0]):
        lines = lines[1:]

    entries: Dict[int, BucketEntry] = {}
    for line_number, line in enumerate(lines, start=1):
        key_text, _, name = line.partition(",")
        try:
            entry = BucketEntry(cent_key=int(key_text.strip()), bucket_name=name)
        except (ValueError, PydanticValidationError):
            logger.debug(f"Skipping invalid mapping line {line_number}: {line!r}")
            continue
        if entry.cent_key in entries:
            logger.warning(f"Duplicate mapping for cent key {entry.cent_key:02d} ignored: {entry.bucket_name}")
            continue
        entries[entry.cent_key] = entry

    logger.info(f"Imported {len(entries)} bucket mappings")
    return BucketMapping(entries=tuple(entries[key] for key in sorted(entries)))


def mapping_to_csv(mapping: BucketMapping) -> str:
    """Render a mapping as CSV with zero-padded keys, sorted by key."""
    rows = [CSV_HEADER]
    for entry in sorted(mapping.entries, key=lambda e: e.cent_key):
        rows.append(f"{entry.cent_key:02d},{entry.bucket_name}")
    return "\n".join(rows)


def parse_mapping_json(text: str) -> BucketMapping:
    """
    Parse a JSON mapping.

    Accepts either an object ``{"05": "Alpha"}`` or a list of
    ``{"cent_key": 5, "bucket_name": "Alpha"}`` objects.

    Raises:
        ValidationError: If the JSON is malformed or an entry is invalid
    """
    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError("Mapping is not valid JSON", details={"error": str(e)})

    try:
        if isinstance(payload, dict):
            entries: List[BucketEntry] = [
                BucketEntry(cent_key=int(key), bucket_name=name) for key, name in payload.items()
            ]
            return BucketMapping(entries=tuple(entries))
        if isinstance(payload, list):
            return BucketMapping(entries=tuple(payload))
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid bucket mapping",
            details={"errors": e.errors(include_url=False, include_context=False)}
        )
    except ValueError as e:
        raise ValidationError("Mapping keys must be integers", details={"error": str(e)})

    raise ValidationError(
        "Mapping must be a JSON object or list",
        details={"type": type(payload).__name__}
    )
