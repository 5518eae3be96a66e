"""
Pydantic models for API request/response validation.
"""
from typing import List, Optional

from pydantic import BaseModel, Field

from xlcompare.core.job_queue import JobStatus


# Response Models

class JobAcceptedResponse(BaseModel):
    """Response for accepted job."""
    status: str = "accepted"
    job_id: str = Field(..., description="Unique job identifier")


class DiffRecordModel(BaseModel):
    """One difference between the two workbooks."""
    sheet: str = Field(..., description="Sheet name (empty for workbook-level records)")
    address: str = Field(..., description="Cell address (empty unless the record is about one cell)")
    kind: str = Field(..., description="Added, Removed or Modified")
    category: str = Field(..., description="Comparison dimension that produced the record")
    before: Optional[str] = None
    after: Optional[str] = None


class SheetSummaryModel(BaseModel):
    """Per-sheet difference counts."""
    sheet: str
    added: int
    removed: int
    modified: int


class CompareResult(BaseModel):
    """Result for compare job."""
    total: int = Field(..., description="Number of differences (after filtering)")
    diffs: List[DiffRecordModel] = Field(..., description="Differences in emission order")
    summary: List[SheetSummaryModel] = Field(..., description="Counts per sheet")


class JobStatusResponse(BaseModel):
    """Response for job status query."""
    job_id: str
    status: JobStatus
    created_at: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    progress: int = Field(0, ge=0, le=100, description="Progress percentage")
    message: str = Field("", description="Latest progress message")
    result: Optional[CompareResult] = Field(None, description="Job result (when success)")
    error: Optional[str] = Field(None, description="Error message (when failed)")


class CancelResponse(BaseModel):
    """Response for a cancellation request."""
    job_id: str
    status: str = "cancelling"


class HealthResponse(BaseModel):
    """Response for health check."""
    status: str = "ok"
    version: str


class VersionResponse(BaseModel):
    """Response for version endpoint."""
    app_name: str
    app_version: str
    openpyxl_version: str
