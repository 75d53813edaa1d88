"""Macro expansion endpoints."""

from fastapi import APIRouter

from lumia import host

from .models import ExpandBody

router = APIRouter()


@router.get("/macros")
async def list_macros():
    """List registered macro names."""
    return host.registry.names()


@router.post("/macros/expand")
async def expand_macros(body: ExpandBody):
    """Expand {{lumiaDef}}, {{loomStyle}}, {{randomLumia.name}}, ... in text."""
    return {"text": host.expand_macros(body.text)}


@router.post("/macros/random/reset")
async def reset_random():
    """Forget the cached random pick; the next randomLumia macro picks again."""
    host.reset_random_pick()
    return {"ok": True}
