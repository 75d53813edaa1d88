"""FastAPI API endpoints under /api.

Endpoint groups: packs (list, import, fetch, remove), settings and
selections (clear, dominant), macros (expand, random reset).
"""

from fastapi import APIRouter

from .macros import router as macros_router
from .packs import router as packs_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(packs_router)
router.include_router(macros_router)
