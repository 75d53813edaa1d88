"""Health check, settings and selection endpoints."""

from fastapi import APIRouter, HTTPException

from lumia import storage

from .models import DominantBody

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings():
    """Get the active selections and dominant pointers."""
    return storage.get_settings()


@router.patch("/settings")
async def update_settings(body: dict):
    """Update selections (partial merge)."""
    return storage.update_settings(body)


@router.post("/selections/{kind}/clear")
async def clear_selection(kind: str):
    """Clear one selection kind (and its dominant pointer)."""
    if kind not in storage.SELECTION_KINDS:
        raise HTTPException(404, "Unknown selection kind")
    return storage.clear_selection(kind)


@router.put("/selections/{kind}/dominant")
async def set_dominant(kind: str, body: DominantBody):
    """Mark a selected behavior/personality as dominant, or clear it."""
    pointer = body.selection.model_dump() if body.selection else None
    try:
        return storage.set_dominant(kind, pointer)
    except ValueError as e:
        raise HTTPException(400, str(e))
