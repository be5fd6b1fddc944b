"""
Schemas for talk CSV import submission, status and error endpoints.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.domain.talk_import import ImportRun, RowValidationError


class ImportAcceptedResponse(BaseModel):
    import_id: str
    message: str = "Import started"
    started_at: datetime


class ValidationErrorResponse(BaseModel):
    row_number: int
    field: str
    value: str | None = None
    message: str
    kind: str

    @classmethod
    def from_error(cls, error: RowValidationError) -> "ValidationErrorResponse":
        return cls(**error.to_dict())


class ImportStatisticsResponse(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    validation_error_count: int = 0
    success_rate: float = 0.0


class ImportRunResponse(BaseModel):
    import_id: str
    status: str
    started_at: datetime
    completed_at: datetime | None = None
    duration_seconds: float | None = None
    statistics: ImportStatisticsResponse
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def from_run(cls, run: ImportRun) -> "ImportRunResponse":
        return cls(
            import_id=run.run_id,
            status=run.status.value,
            started_at=run.started_at,
            completed_at=run.completed_at,
            duration_seconds=run.duration_seconds,
            statistics=ImportStatisticsResponse(**run.statistics.to_dict()),
            errors=list(run.errors),
        )


class ImportRunListResponse(BaseModel):
    runs: list[ImportRunResponse] = Field(default_factory=list)


class ValidationErrorReportResponse(BaseModel):
    import_id: str
    total_errors: int
    failed_row_count: int
    errors: list[ValidationErrorResponse] = Field(default_factory=list)
