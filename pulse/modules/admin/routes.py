from fastapi import APIRouter, Depends
from pulse.core.dependencies import require_admin
from pulse.database.supabase_client import get_supabase
from pulse.modules.admin.schemas import PlatformMetricsResponse, SystemErrorsRequest, SystemErrorsResponse
from pulse.modules.admin.service import AdminService
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(supabase: Client = Depends(get_supabase)) -> AdminService:
    return AdminService(supabase)


@router.get("/metrics", response_model=PlatformMetricsResponse)
async def platform_metrics(
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Platform-wide usage counters (admin only)"""
    return service.platform_metrics()


@router.post("/system-errors", response_model=SystemErrorsResponse)
async def system_errors(
    body: Optional[SystemErrorsRequest] = None,
    user_data: Dict = Depends(require_admin),
    service: AdminService = Depends(get_admin_service)
):
    """Logged backend errors, newest first, optionally filtered by severity and resolved flag (admin only)"""
    body = body or SystemErrorsRequest()
    return SystemErrorsResponse(errors=service.system_errors(body.severity, body.resolved))
