"""
Talk CSV import endpoints: submit, poll status, fetch validation errors.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, UploadFile, status

from app.api.dependencies import get_csv_upload
from app.schemas.talk_import import (
    ImportAcceptedResponse,
    ImportRunListResponse,
    ImportRunResponse,
    ValidationErrorReportResponse,
    ValidationErrorResponse,
)
from app.services.import_orchestrator_service import (
    ImportOrchestratorService,
    get_import_orchestrator_service,
)

router = APIRouter(prefix="/import", tags=["import"])


def _import_not_found(import_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Import not found: {import_id}",
    )


@router.post(
    "",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=ImportAcceptedResponse,
)
def submit_import(
    file: UploadFile = Depends(get_csv_upload),
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator_service),
) -> ImportAcceptedResponse:
    """
    Accept a CSV upload and start importing it in the background.
    """
    try:
        run = orchestrator.submit_import(file.file, file_name=file.filename)
    finally:
        file.file.close()

    return ImportAcceptedResponse(import_id=run.run_id, started_at=run.started_at)


@router.get("", response_model=ImportRunListResponse)
def list_imports(
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator_service),
) -> ImportRunListResponse:
    return ImportRunListResponse(
        runs=[ImportRunResponse.from_run(run) for run in orchestrator.list_runs()]
    )


@router.get("/{import_id}/status", response_model=ImportRunResponse)
def get_import_status(
    import_id: str,
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator_service),
) -> ImportRunResponse:
    run = orchestrator.get_run_status(import_id)
    if run is None:
        raise _import_not_found(import_id)
    return ImportRunResponse.from_run(run)


@router.get("/{import_id}/errors", response_model=ValidationErrorReportResponse)
def get_import_errors(
    import_id: str,
    orchestrator: ImportOrchestratorService = Depends(get_import_orchestrator_service),
) -> ValidationErrorReportResponse:
    report = orchestrator.get_validation_errors(import_id)
    if report is None:
        raise _import_not_found(import_id)
    return ValidationErrorReportResponse(
        import_id=report.import_id,
        total_errors=report.total_errors,
        failed_row_count=report.failed_row_count,
        errors=[ValidationErrorResponse.from_error(error) for error in report.errors],
    )
