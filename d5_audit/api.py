"""
Audit API Endpoints

POST /audit runs one audit synchronously and returns the full result.
Errors propagate to the handlers registered in main.py, which answer with
{error, details?, troubleshooting?} and the typed exception's status code.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from core.config import settings

from .coordinator import AuditCoordinator
from .schemas import AuditRequest, AuditResult, ErrorResponse, HealthCheckResponse

router = APIRouter(tags=["audit"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid URL, or page unreachable"},
    401: {"model": ErrorResponse, "description": "Language model rejected the API key"},
    404: {"model": ErrorResponse, "description": "No configured model is available"},
    500: {"model": ErrorResponse, "description": "Configuration, browser or unexpected failure"},
}

_coordinator: Optional[AuditCoordinator] = None


def get_coordinator() -> AuditCoordinator:
    """Dependency to get the coordinator instance"""
    global _coordinator
    if _coordinator is None:
        _coordinator = AuditCoordinator()
    return _coordinator


@router.post(
    "/audit",
    response_model=AuditResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
)
@router.post(
    "/api/audit",
    response_model=AuditResult,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    include_in_schema=False,
)
async def run_audit(
    request: Optional[AuditRequest] = None,
    coordinator: AuditCoordinator = Depends(get_coordinator),
):
    """Audit a single page"""
    url = request.url if request is not None else None
    return await coordinator.run_audit(url)


@router.get("/health", response_model=HealthCheckResponse)
async def health_check():
    """Liveness check"""
    return HealthCheckResponse(
        status="ok",
        version=settings.app_version,
        environment=settings.environment,
        use_stubs=settings.use_stubs,
    )
