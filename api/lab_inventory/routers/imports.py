# lab_inventory/routers/imports.py
"""
Imports Router - spreadsheet upload -> preview -> apply.

The preview step returns every row with its defects so a person can review
the batch; only rows that come back with is_valid=true are applied.
"""
from __future__ import annotations
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from lab_inventory.database import get_session
from lab_inventory.errors import ImportFailedError, ImportParseError
from lab_inventory.models import ImportApplyIn, ImportApplyOut, ImportPreviewOut, TemplateFormat
from lab_inventory.services import spreadsheet
from lab_inventory.services.reconciler import ImportReconciler
from lab_inventory.services.validator import revalidate
from lab_inventory.settings import settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/imports", tags=["Imports"])


@router.post("/preview", response_model=ImportPreviewOut)
async def preview_import(file: UploadFile = File(...)):
    """Parse and validate an uploaded CSV/XLSX/XLS without touching the catalog."""
    filename = file.filename or ""
    content = await file.read()
    try:
        rows = spreadsheet.parse_import_file(filename, content, max_bytes=settings.IMPORT_MAX_BYTES)
    except ImportParseError as e:
        raise HTTPException(400, detail=str(e))

    counts = spreadsheet.summarize(rows)
    logger.info("Preview %s: %s", filename, counts)
    return ImportPreviewOut(filename=filename, rows=rows, **counts)


@router.post("/apply", response_model=ImportApplyOut)
async def apply_import(payload: ImportApplyIn, db: AsyncSession = Depends(get_session)):
    """Upsert the reviewed rows by SKU; invalid rows are skipped."""
    # Rows come back from the client; check them again rather than trust the flag
    checked = [revalidate(r) for r in payload.rows if r.is_valid]
    valid = [r for r in checked if r.is_valid]
    try:
        imported = await ImportReconciler(db).apply(valid)
    except ImportFailedError as e:
        raise HTTPException(500, detail=str(e))
    return ImportApplyOut(imported=imported, skipped_invalid=len(payload.rows) - len(valid))


@router.get("/template")
def download_template(format: TemplateFormat = Query("xlsx")):
    content, media_type, filename = spreadsheet.build_template(format)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
