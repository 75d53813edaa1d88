"""Pack listing, import, fetch and removal endpoints."""

from typing import Literal

from fastapi import APIRouter, HTTPException

from lumia import ingest, storage

from .models import FetchBody, ImportBody, PackSummary

router = APIRouter()


@router.get("/packs")
async def list_packs() -> list[PackSummary]:
    """List packs with item counts."""
    return [
        PackSummary(
            name=pack.name,
            source_url=pack.source_url,
            is_custom=pack.is_custom,
            lumia_count=len(pack.characters()),
            loom_count=len(pack.fragments()),
        )
        for pack in storage.get_packs().values()
    ]


@router.post("/packs/import", status_code=201)
async def import_pack(body: ImportBody):
    """Import a world book or native pack document."""
    try:
        return ingest.import_pack(body.data, body.source_name, overwrite=body.overwrite)
    except ingest.PackExistsError as e:
        raise HTTPException(409, str(e))
    except ingest.EmptyLibraryError as e:
        raise HTTPException(400, str(e))


@router.post("/packs/fetch", status_code=201)
async def fetch_pack(body: FetchBody):
    """Fetch a world book from a URL and import it."""
    try:
        return await ingest.fetch_world_book(body.url, overwrite=body.overwrite)
    except ingest.PackExistsError as e:
        raise HTTPException(409, str(e))
    except ingest.EmptyLibraryError as e:
        raise HTTPException(400, str(e))
    except ingest.FetchError as e:
        raise HTTPException(502, str(e))


@router.get("/packs/{name}")
async def get_pack(name: str):
    """Get a single pack with all its items."""
    pack = storage.get_pack(name)
    if not pack:
        raise HTTPException(404, "Pack not found")
    return pack


@router.delete("/packs/{name}")
async def delete_pack(name: str):
    """Remove a pack and clear selections pointing into it."""
    if not ingest.remove_pack(name):
        raise HTTPException(404, "Pack not found")
    return {"ok": True}


@router.delete("/packs/{name}/items/{item}")
async def delete_item(name: str, item: str, kind: Literal["lumia", "loom"] | None = None):
    """Remove one item from a pack and clear selections pointing at it."""
    if not ingest.remove_item(name, item, kind=kind):
        raise HTTPException(404, "Item not found")
    return {"ok": True}
