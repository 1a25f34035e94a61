from fastapi import APIRouter, Depends, Request
from pulse.core.dependencies import get_current_user_id, is_admin, get_access_cache
from pulse.database.supabase_client import get_supabase
from pulse.modules.imports.schemas import ImportRequest, ImportResponse
from pulse.modules.imports.service import ImportService
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/imports", tags=["imports"])


def get_import_service(supabase: Client = Depends(get_supabase)) -> ImportService:
    return ImportService(supabase)


@router.post("", response_model=ImportResponse)
async def bulk_import(
    body: ImportRequest,
    request: Request,
    user_data: Dict = Depends(get_current_user_id),
    service: ImportService = Depends(get_import_service),
    supabase: Client = Depends(get_supabase)
):
    """Insert CSV rows into a table in fixed-size batches. Failed batches are reported, not fatal."""
    admin = is_admin(user_data["id"], supabase, get_access_cache(request))
    return service.import_csv(body.entity_type, body.csv_data, body.column_mapping, user_data["id"], admin=admin)
