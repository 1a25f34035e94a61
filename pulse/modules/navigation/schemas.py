from pydantic import BaseModel
from typing import Optional, List


class RouteInfo(BaseModel):
    path: str
    requires_session: bool


class RouteTableResponse(BaseModel):
    routes: List[RouteInfo]


class RouteResolution(BaseModel):
    path: str
    redirect: Optional[str] = None
