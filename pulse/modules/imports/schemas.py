from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict


class ImportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entity_type: Optional[str] = Field(default=None, alias="entityType")
    csv_data: Optional[str] = Field(default=None, alias="csvData")
    column_mapping: Optional[Dict[str, str]] = Field(default=None, alias="columnMapping")


class ImportBatchError(BaseModel):
    batch: int
    error: str
    rows: str


class ImportResponse(BaseModel):
    success: bool
    imported: int
    total: int
    errors: List[ImportBatchError] = []
