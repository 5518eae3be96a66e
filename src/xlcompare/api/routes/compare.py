"""
Compare endpoint.
POST /api/v1/compare - Compare two uploaded workbooks.
"""
import logging
import shutil
import uuid
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from xlcompare.api.models import JobAcceptedResponse
from xlcompare.core.config import Settings, get_settings
from xlcompare.core.job_queue import JobQueue, get_job_queue
from xlcompare.core.options import ComparisonOptions

logger = logging.getLogger(__name__)

router = APIRouter()

_defaults = ComparisonOptions()


def _safe_name(upload: UploadFile, fallback: str) -> str:
    name = Path(upload.filename or "").name
    return name or fallback


@router.post("/compare", response_model=JobAcceptedResponse, status_code=202)
async def compare_workbooks(
    file_a: Optional[UploadFile] = File(None, description="\"Before\" workbook"),
    file_b: Optional[UploadFile] = File(None, description="\"After\" workbook"),
    compare_values: bool = Form(_defaults.compare_values),
    compare_formulas: bool = Form(_defaults.compare_formulas),
    include_hidden_sheets: bool = Form(_defaults.include_hidden_sheets),
    compare_sheet_order: bool = Form(_defaults.compare_sheet_order),
    compare_used_range: bool = Form(_defaults.compare_used_range),
    compare_validations: bool = Form(_defaults.compare_validations),
    compare_conditional_formats: bool = Form(_defaults.compare_conditional_formats),
    compare_hidden_rows_cols: bool = Form(_defaults.compare_hidden_rows_cols),
    compare_cell_format: bool = Form(_defaults.compare_cell_format),
    queue: JobQueue = Depends(get_job_queue),
    settings: Settings = Depends(get_settings),
):
    """
    Compare two workbooks.

    Upload both files as multipart form data; every comparison flag may be
    sent as a form field.

    Returns:
        - job_id: Unique identifier to poll for results
        - status: "accepted"

    Poll GET /api/v1/jobs/{job_id} for completion. Result will include:
        - diffs: Ordered difference records
        - summary: Counts per sheet
        - total: Number of differences
    """
    if file_a is None or file_b is None:
        raise HTTPException(status_code=400, detail="Both file_a and file_b are required")

    file_a_content = await file_a.read()
    file_b_content = await file_b.read()

    for label, content in (("file_a", file_a_content), ("file_b", file_b_content)):
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise HTTPException(
                status_code=413,
                detail=f"{label} too large. Maximum size: {settings.MAX_UPLOAD_BYTES} bytes"
            )

    options = ComparisonOptions(
        compare_values=compare_values,
        compare_formulas=compare_formulas,
        include_hidden_sheets=include_hidden_sheets,
        compare_sheet_order=compare_sheet_order,
        compare_used_range=compare_used_range,
        compare_validations=compare_validations,
        compare_conditional_formats=compare_conditional_formats,
        compare_hidden_rows_cols=compare_hidden_rows_cols,
        compare_cell_format=compare_cell_format,
    )

    # Step 1: Store uploads in a per-job directory (removed when the job ends)
    upload_dir = Path(settings.TEMP_STORAGE_PATH) / f"upload-{uuid.uuid4().hex}"
    upload_dir.mkdir(parents=True, exist_ok=True)

    path_a = upload_dir / f"a_{_safe_name(file_a, 'a.xlsx')}"
    path_b = upload_dir / f"b_{_safe_name(file_b, 'b.xlsx')}"
    try:
        path_a.write_bytes(file_a_content)
        path_b.write_bytes(file_b_content)
    except OSError as e:
        logger.error(f"Failed to store uploads in {upload_dir}: {e}")
        shutil.rmtree(upload_dir, ignore_errors=True)
        raise

    # Step 2: Forget expired jobs, then submit
    queue.cleanup_old_jobs(settings.RESULT_TTL_SECONDS)
    job_id = queue.submit_compare(path_a, path_b, options, cleanup_dir=upload_dir)

    logger.info(f"Compare job submitted: {job_id}")

    return JobAcceptedResponse(job_id=job_id)
