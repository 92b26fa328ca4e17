from fastapi import APIRouter, Depends

from budgetsheet.core.config import Settings
from budgetsheet.routers.deps import get_settings_dep

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness check")
async def health(settings: Settings = Depends(get_settings_dep)):
    return {
        "status": "ok",
        "version": settings.version,
        "storage_backend": settings.storage_backend,
    }
