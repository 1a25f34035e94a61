from fastapi import APIRouter, Depends, Request
from pulse.core.dependencies import get_current_user_id, is_admin, get_access_cache
from pulse.database.supabase_client import get_supabase
from pulse.modules.entities.schemas import EntityRequest
from pulse.modules.entities.service import EntityService
from supabase import Client
from typing import Any, Dict

router = APIRouter(prefix="/entities", tags=["entities"])


def get_entity_service(
    request: Request,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase)
) -> EntityService:
    return EntityService(supabase, user_data["id"], admin=is_admin(user_data["id"], supabase, get_access_cache(request)))


@router.post("", response_model=Dict[str, Any])
async def entity_operation(
    body: EntityRequest,
    service: EntityService = Depends(get_entity_service)
):
    """list | filter | get | create | update | delete on an allowed table, scoped to the caller"""
    return service.execute(body.table, body.operation, body.filters, body.data, body.id)
