"""
Job endpoints.
GET    /api/v1/jobs/{job_id} - Poll for job status and results.
DELETE /api/v1/jobs/{job_id} - Cancel a queued or running job.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query

from xlcompare.api.models import CancelResponse, JobStatusResponse
from xlcompare.core.job_queue import JobQueue, get_job_queue

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
async def get_job_status(
    job_id: str = Path(..., description="Job ID to query"),
    filter_query: Optional[str] = Query(None, alias="filter", description="Only return differences containing this text"),
    queue: JobQueue = Depends(get_job_queue),
):
    """
    Get the status and results of a job.

    Returns:
        - status: queued, running, success, failed or cancelled
        - progress / message: Latest progress notification
        - result: Differences and per-sheet summary (when status is success)
        - error: Error message (when status is failed)
    """
    job = queue.get_job(job_id)

    if job is None:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")

    return JobStatusResponse(**job.to_dict(filter_query=filter_query))


@router.delete("/jobs/{job_id}", response_model=CancelResponse, status_code=202)
async def cancel_job(
    job_id: str = Path(..., description="Job ID to cancel"),
    queue: JobQueue = Depends(get_job_queue),
):
    """
    Request cancellation of a job.

    The comparison stops at its next check point; poll the job until its
    status becomes "cancelled".
    """
    job = queue.get_job(job_id)

    if job is None:
        raise HTTPException(status_code=404, detail=f"Job not found: {job_id}")

    if not queue.cancel_job(job_id):
        raise HTTPException(status_code=409, detail=f"Job already finished: {job.status.value}")

    return CancelResponse(job_id=job_id)
