from fastapi import APIRouter

from myday.core import settings

router = APIRouter()


@router.get("", tags=["health"])
def health():
    """Health check endpoint."""
    return {"status": "ok", "version": settings.api_version, "storageMode": settings.storage_mode}
