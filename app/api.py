"""
FastAPI routes for donation file upload and processing.
Endpoints are sync functions so the pipeline runs in FastAPI's threadpool.
"""
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse

from core.config import get_settings
from core.exceptions import (
    ConfigurationError,
    DataNotFoundError,
    DonationSplitError,
    ParsingError,
    ValidationError,
)
from core.logger import setup_logger
from core.mapping import parse_mapping_csv, parse_mapping_json
from core.parsing import SUPPORTED_EXTENSIONS
from core.schema import BucketMapping
from services.donation_service import DonationService

logger = setup_logger(__name__)

app = FastAPI(
    title="Donation Split",
    description="Split donation spreadsheets into per-church totals by fractional cents",
    version="1.0.0"
)

donation_service = DonationService()

MEDIA_TYPES = {
    ".csv": "text/csv",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def error_status(exc: DonationSplitError) -> int:
    """Map a pipeline error to an HTTP status code."""
    if isinstance(exc, (ConfigurationError, ValidationError)):
        return 422
    if isinstance(exc, (ParsingError, DataNotFoundError)):
        return 400
    return 500


def to_http_exception(exc: DonationSplitError) -> HTTPException:
    return HTTPException(
        status_code=error_status(exc),
        detail={"message": exc.message, "details": exc.details}
    )


def validate_file_extension(filename: Optional[str]) -> None:
    """
    Validate file has a supported spreadsheet extension.

    Raises:
        HTTPException: If file extension is invalid
    """
    if not filename or not filename.lower().endswith(SUPPORTED_EXTENSIONS):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type: {filename}. Only .xlsx, .xls and .csv are supported."
        )


def resolve_mapping(mapping: Optional[str], mapping_file: Optional[UploadFile]) -> BucketMapping:
    """Build the run's bucket mapping from a CSV upload or a JSON form field."""
    if mapping_file is not None and mapping_file.filename:
        raw = mapping_file.file.read()
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ValidationError(
                "Mapping file must be UTF-8 text",
                details={"filename": mapping_file.filename, "position": e.start}
            )
        return parse_mapping_csv(text)
    if mapping:
        return parse_mapping_json(mapping)
    raise HTTPException(
        status_code=422,
        detail="A bucket mapping is required (mapping JSON field or mapping_file CSV)"
    )


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "donation_split",
        "version": "1.0.0"
    }


@app.post("/process")
def process_donations(
    file: UploadFile = File(...),
    mapping: Optional[str] = Form(None),
    mapping_file: Optional[UploadFile] = File(None),
    export: bool = Form(False),
) -> Dict[str, Any]:
    """
    Process an uploaded donations spreadsheet.

    Args:
        file: Donations spreadsheet (.xlsx, .xls or .csv)
        mapping: JSON bucket mapping, e.g. {"01": "Igreja Central"}
        mapping_file: CSV bucket mapping (cents,bucket_name)
        export: Also write CSV/Excel reports for download

    Returns:
        Serialized pipeline result, plus report file names when exported
    """
    logger.info(f"Received donations file: {file.filename}")
    validate_file_extension(file.filename)

    try:
        bucket_mapping = resolve_mapping(mapping, mapping_file)
    except DonationSplitError as e:
        raise to_http_exception(e)

    settings = get_settings()
    content = file.file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds {settings.max_upload_mb} MB limit"
        )

    upload_path = Path(settings.temp_storage_path) / f"{uuid.uuid4()}_{Path(file.filename).name}"
    upload_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        upload_path.write_bytes(content)
        result = donation_service.process_file(str(upload_path), bucket_mapping)

        response: Dict[str, Any] = {"result": result.model_dump(mode="json")}
        if export:
            outputs = donation_service.export_results(result, settings.temp_storage_path)
            response["files"] = {report: Path(path).name for report, path in outputs.items()}
        return response

    except DonationSplitError as e:
        logger.error(f"Processing failed for {file.filename}: {e.message}")
        raise to_http_exception(e)

    finally:
        try:
            if upload_path.exists():
                upload_path.unlink()
                logger.debug(f"Cleaned up: {upload_path}")
        except OSError as cleanup_error:
            logger.warning(f"Failed to cleanup {upload_path}: {cleanup_error}")


@app.get("/download/{filename}")
def download_file(filename: str):
    """
    Download an exported report.

    Args:
        filename: Name of the file to download

    Returns:
        File response
    """
    # Security: Validate filename to prevent path traversal
    if ".." in filename or "/" in filename or "\\" in filename:
        raise HTTPException(status_code=400, detail="Invalid filename")

    suffix = Path(filename).suffix.lower()
    if suffix not in MEDIA_TYPES:
        raise HTTPException(status_code=400, detail="Invalid file type")

    storage = Path(get_settings().temp_storage_path).resolve()
    file_path = (storage / filename).resolve()
    if file_path.parent != storage:
        raise HTTPException(status_code=400, detail="Invalid file path")

    if not file_path.exists():
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(
        path=str(file_path),
        filename=filename,
        media_type=MEDIA_TYPES[suffix]
    )


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
