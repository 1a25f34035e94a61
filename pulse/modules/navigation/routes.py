from fastapi import APIRouter, Depends
from pulse.core.dependencies import get_optional_user
from pulse.modules.navigation.routing import route_table, resolve_route
from pulse.modules.navigation.schemas import RouteTableResponse, RouteResolution
from typing import Dict, Optional

router = APIRouter(prefix="/navigation", tags=["navigation"])


@router.get("/routes", response_model=RouteTableResponse)
async def list_routes():
    return RouteTableResponse(routes=route_table())


@router.get("/resolve", response_model=RouteResolution)
async def resolve(
    path: str = "/",
    user_data: Optional[Dict] = Depends(get_optional_user)
):
    """Resolve a client path against the session; unknown paths go to the dashboard"""
    return resolve_route(path, has_session=user_data is not None)
