"""
Cognitive offboarding routes.

Thin HTTP layer over the workflow orchestrator and gap scanner. Domain
errors map to status codes here; permission failures always return the
generic message.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from keeper.features.cognitive_offboarding.domain.errors import (
    ArchiveError,
    InterviewError,
    OffboardingError,
    PermissionDeniedError,
    PhaseOrderError,
    ScanError,
    SessionNotFoundError,
    ValidationError,
)
from keeper.features.cognitive_offboarding.domain.session_models import InterviewResponse
from keeper.features.cognitive_offboarding.pipeline.scanner.service import GapScanner
from keeper.features.cognitive_offboarding.workflow.orchestrator import WorkflowOrchestrator
from keeper.infrastructure.observability.logging import get_logger
from keeper.models.api.offboarding_request import (
    ArchiveRequest,
    CompleteWorkflowRequest,
    InterviewResponseItem,
    TriggerOffboardingRequest,
)
from keeper.models.api.offboarding_response import (
    ArchiveResultResponse,
    IntensityReportResponse,
    InterviewResultResponse,
    OrganizationScanResponse,
    SessionListResponse,
    WorkflowSessionResponse,
    WorkflowValidationResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/offboarding", tags=["cognitive-offboarding"])

ERROR_STATUS: dict[type[OffboardingError], int] = {
    ValidationError: 422,
    SessionNotFoundError: 404,
    PhaseOrderError: 409,
    PermissionDeniedError: 403,
    ScanError: 502,
    InterviewError: 502,
    ArchiveError: 502,
}


def get_orchestrator(request: Request) -> WorkflowOrchestrator:
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cognitive offboarding is not configured",
        )
    return orchestrator


def get_gap_scanner(request: Request) -> GapScanner:
    scanner = getattr(request.app.state, "gap_scanner", None)
    if scanner is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Organization scanning is not configured",
        )
    return scanner


def _to_http_error(error: OffboardingError) -> HTTPException:
    status_code = ERROR_STATUS.get(type(error), status.HTTP_500_INTERNAL_SERVER_ERROR)
    logger.warning(
        "Cognitive offboarding request failed",
        session_id=error.session_id,
        error_code=error.code,
        status_code=status_code,
    )
    return HTTPException(
        status_code=status_code,
        detail={"code": error.code, "message": error.message, "session_id": error.session_id},
    )


def _responses(items: list[InterviewResponseItem]) -> list[InterviewResponse]:
    return [
        InterviewResponse(question=item.question, answer=item.answer, artifact_id=item.artifact_id)
        for item in items
    ]


@router.post(
    "/sessions", response_model=WorkflowSessionResponse, status_code=status.HTTP_201_CREATED
)
async def trigger_offboarding(
    body: TriggerOffboardingRequest,
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    """Start a cognitive offboarding session for a departing employee."""
    try:
        session = await orchestrator.trigger(
            body.employee_id,
            triggered_by=body.triggered_by,
            department=body.department,
            role=body.role,
            offboarding_date=body.offboarding_date,
        )
    except OffboardingError as e:
        raise _to_http_error(e) from e
    return WorkflowSessionResponse.from_domain(session)


@router.get("/sessions", response_model=SessionListResponse)
async def list_sessions(orchestrator: WorkflowOrchestrator = Depends(get_orchestrator)):
    sessions = orchestrator.get_all_active_sessions()
    return SessionListResponse(
        sessions=[WorkflowSessionResponse.from_domain(s) for s in sessions],
        total_count=len(sessions),
    )


@router.get("/sessions/{session_id}", response_model=WorkflowSessionResponse)
async def get_session(
    session_id: str, orchestrator: WorkflowOrchestrator = Depends(get_orchestrator)
):
    session = orchestrator.get_workflow_session(session_id)
    if session is None:
        raise _to_http_error(
            SessionNotFoundError(f"Workflow session not found: {session_id}", session_id=session_id)
        )
    return WorkflowSessionResponse.from_domain(session)


@router.post("/sessions/{session_id}/scan", response_model=IntensityReportResponse)
async def run_scan_phase(
    session_id: str, orchestrator: WorkflowOrchestrator = Depends(get_orchestrator)
):
    try:
        report = await orchestrator.execute_scan_phase(session_id)
    except OffboardingError as e:
        raise _to_http_error(e) from e
    return IntensityReportResponse.from_domain(report)


@router.post("/sessions/{session_id}/interview", response_model=InterviewResultResponse)
async def run_interview_phase(
    session_id: str, orchestrator: WorkflowOrchestrator = Depends(get_orchestrator)
):
    try:
        result = await orchestrator.execute_interview_phase(session_id)
    except OffboardingError as e:
        raise _to_http_error(e) from e
    return InterviewResultResponse.from_domain(result)


@router.post("/sessions/{session_id}/archive", response_model=ArchiveResultResponse)
async def run_archive_phase(
    session_id: str,
    body: ArchiveRequest | None = None,
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    responses = _responses(body.responses) if body else []
    try:
        result = await orchestrator.execute_archive_phase(session_id, responses)
    except OffboardingError as e:
        raise _to_http_error(e) from e
    return ArchiveResultResponse.from_domain(result)


@router.get("/sessions/{session_id}/validation", response_model=WorkflowValidationResponse)
async def validate_session(
    session_id: str, orchestrator: WorkflowOrchestrator = Depends(get_orchestrator)
):
    """Report every problem that keeps a session from counting as complete."""
    return WorkflowValidationResponse.from_domain(
        orchestrator.validate_workflow_completion(session_id)
    )


@router.post("/workflows", response_model=WorkflowSessionResponse)
async def run_complete_workflow(
    body: CompleteWorkflowRequest,
    orchestrator: WorkflowOrchestrator = Depends(get_orchestrator),
):
    """Trigger, scan, interview and archive in one call."""
    try:
        session = await orchestrator.execute_complete_workflow(
            body.employee_id,
            triggered_by=body.triggered_by,
            department=body.department,
            role=body.role,
            offboarding_date=body.offboarding_date,
            responses=_responses(body.responses),
        )
    except OffboardingError as e:
        raise _to_http_error(e) from e
    return WorkflowSessionResponse.from_domain(session)


@router.post("/scan", response_model=OrganizationScanResponse)
async def scan_organization(scanner: GapScanner = Depends(get_gap_scanner)):
    """Score every active user now instead of waiting for the scheduled job."""
    scan = await scanner.scan_organization()
    return OrganizationScanResponse.from_domain(scan)
