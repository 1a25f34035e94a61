from pydantic import BaseModel
from typing import Optional, Dict, Any


class EntityRequest(BaseModel):
    table: Optional[str] = None
    operation: Optional[str] = None
    filters: Dict[str, Any] = {}
    data: Optional[Dict[str, Any]] = None
    id: Optional[str] = None
