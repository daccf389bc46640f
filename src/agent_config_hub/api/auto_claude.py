"""Import and sync endpoints."""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..models.results import ImportRequest, ImportResult, SyncRequest, SyncResult
from ..services.import_service import ImportService
from ..services.sync_service import SyncService
from .deps import get_import_service, get_sync_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auto-claude", tags=["auto-claude"])


@router.post("/import", response_model=ImportResult)
async def import_configs(
    request: ImportRequest, service: ImportService = Depends(get_import_service)
):
    """
    Import agent configs, prompts, model profiles and project config.

    Validation failures return 422 with every error and nothing is written.
    """
    return await service.import_configs(request.source_path, dry_run=request.dry_run)


@router.post(
    "/sync",
    response_model=SyncResult,
    responses={207: {"model": SyncResult, "description": "Some files failed to write"}},
)
async def sync_configs(
    request: SyncRequest, service: SyncService = Depends(get_sync_service)
):
    """
    Write stored configuration into an Auto-Claude installation.

    Returns 207 when some files were written and others failed.
    """
    result = await service.sync(
        request.target_path, dry_run=request.dry_run, project_id=request.project_id
    )
    if result.errors:
        logger.warning(f"Sync finished with {len(result.errors)} failed file(s)")
        return JSONResponse(status_code=207, content=result.model_dump(by_alias=True))
    return result
