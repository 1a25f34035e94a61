from supabase import Client
from fastapi import HTTPException
from pulse.config.settings import settings
from pulse.core import errors
from pulse.modules.entities.service import parse_table
from pulse.modules.imports.coercion import parse_csv, map_row, batches
from pulse.modules.imports.schemas import ImportResponse, ImportBatchError
from typing import Dict, List, Optional
from datetime import datetime
import csv
import logging

logger = logging.getLogger(__name__)


class ImportService:
    def __init__(self, supabase: Client, batch_size: Optional[int] = None):
        self.supabase = supabase
        self.batch_size = batch_size or settings.import_batch_size

    def import_csv(self, entity_type: Optional[str], csv_data: Optional[str],
                   column_mapping: Optional[Dict[str, str]], user_id: str, admin: bool = False) -> ImportResponse:
        if not entity_type or not csv_data or not column_mapping:
            raise errors.missing_field("Missing required parameters")
        table = parse_table(entity_type)
        if table.is_catalogue and not admin:
            raise errors.forbidden(f"Only admins can import into '{table.value}'")

        try:
            records = parse_csv(csv_data)
        except csv.Error as e:
            raise HTTPException(status_code=400, detail=f"Could not parse CSV: {e}")

        now = datetime.utcnow().isoformat()
        rows = [
            map_row(record, column_mapping, table.value, user_id, table.owner_column, now=now)
            for record in records
        ]

        imported = 0
        failures: List[ImportBatchError] = []
        succeeded_batches = 0
        for number, first, last, chunk in batches(rows, self.batch_size):
            try:
                result = self.supabase.table(table.value).insert(chunk).execute()
                imported += len(result.data or [])
                succeeded_batches += 1
            except Exception as e:
                logger.error(f"Import batch {number} into {table.value} failed: {e}")
                failures.append(ImportBatchError(batch=number, error=str(e), rows=f"{first} to {last}"))

        logger.info(f"Imported {imported}/{len(rows)} rows into {table.value} for {user_id}")
        return ImportResponse(
            success=succeeded_batches > 0 or not rows,
            imported=imported,
            total=len(rows),
            errors=failures,
        )
