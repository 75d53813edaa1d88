"""Pack ingestion: world books, native Lumiverse packs and remote fetch.

Two document shapes are accepted:
  World book    — [entry, ...] or {"name"?, "entries": {uid: entry}}; run
                  through build_library().
  Native pack   — {"packName"?, "lumiaItems": [...], "loomItems": [...]};
                  items are converted field-by-field.

A name collision raises PackExistsError unless overwrite=True, so callers
can ask the user before replacing a pack. Nothing is written on failure.
"""

import logging
from collections.abc import Mapping
from typing import Any

import httpx

from lumia import storage
from lumia.library import build_library
from lumia.library.classifier import LOOM_CATEGORIES
from lumia.models import CharacterRecord, Library, LoomCategory, NarrativeFragment, Pack

logger = logging.getLogger(__name__)


class IngestError(ValueError):
    """Base class for ingestion failures."""


class EmptyLibraryError(IngestError):
    """Raised when a document yields no valid entries."""


class PackExistsError(IngestError):
    """Raised when a pack name is taken and overwrite was not requested."""

    def __init__(self, name: str) -> None:
        super().__init__(f'Pack "{name}" already exists')
        self.name = name


class FetchError(IngestError):
    """Raised when a remote document cannot be fetched or decoded."""


# ── Native format conversion ─────────────────────────────────


def _first(item: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value:
            return value
    return None


def _native_character(item: Mapping[str, Any]) -> CharacterRecord | None:
    name = _first(item, "lumiaName", "lumiaDefName")
    if not isinstance(name, str):
        return None
    return CharacterRecord(
        name=name,
        image=_first(item, "avatarUrl", "lumia_img"),
        author=_first(item, "authorName", "defAuthor"),
        physical_definition=_first(item, "lumiaDefinition", "lumiaDef"),
        personality=_first(item, "lumiaPersonality", "lumia_personality"),
        behavior=_first(item, "lumiaBehavior", "lumia_behavior"),
    )


def _loom_category(value: Any) -> LoomCategory | None:
    if isinstance(value, str) and value in LOOM_CATEGORIES:
        return LOOM_CATEGORIES[value]
    try:
        return LoomCategory(value)
    except ValueError:
        return None


def _native_fragment(item: Mapping[str, Any]) -> NarrativeFragment | None:
    name = _first(item, "loomName", "name")
    category = _loom_category(item.get("loomCategory"))
    content = item.get("loomContent")
    if not isinstance(name, str) or category is None or not isinstance(content, str):
        return None
    return NarrativeFragment(name=name, category=category, content=content)


def _native_library(data: Mapping[str, Any]) -> Library:
    items: Library = []
    for raw in data.get("lumiaItems") or []:
        record = _native_character(raw) if isinstance(raw, Mapping) else None
        if record is None:
            logger.warning("skipping malformed lumia item: %r", raw)
            continue
        items.append(record)
    for raw in data.get("loomItems") or []:
        fragment = _native_fragment(raw) if isinstance(raw, Mapping) else None
        if fragment is None:
            logger.warning("skipping malformed loom item: %r", raw)
            continue
        items.append(fragment)
    return items


def _pack_name(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return fallback


def is_native_pack(data: Any) -> bool:
    return isinstance(data, Mapping) and ("lumiaItems" in data or "loomItems" in data)


# ── Import / removal ─────────────────────────────────────────


def import_pack(
    data: Any,
    source_name: str,
    is_url: bool = False,
    overwrite: bool = False,
    url: str = "",
) -> Pack:
    """Convert a document into a Pack and store it.

    Raises EmptyLibraryError when nothing could be classified and
    PackExistsError on a name collision without overwrite.
    """
    if is_native_pack(data):
        name = _pack_name(data.get("packName"), source_name)
        items = _native_library(data)
        author = data.get("packAuthor")
        cover_url = data.get("coverUrl")
    else:
        items = build_library(data)
        if not items:
            raise EmptyLibraryError("No valid entries found in this World Book")
        name = _pack_name(data.get("name") if isinstance(data, Mapping) else None, source_name)
        author = None
        cover_url = None

    if not overwrite and storage.get_pack(name) is not None:
        raise PackExistsError(name)

    pack = Pack(
        name=name,
        items=items,
        source_url=(url or source_name) if is_url else "",
        is_custom=not is_url,
        author=author,
        cover_url=cover_url,
    )
    storage.save_pack(pack)
    logger.info(
        'pack "%s" loaded: %d entries (%d Lumia, %d Loom)',
        name, len(items), len(pack.characters()), len(pack.fragments()),
    )
    return pack


def remove_pack(name: str) -> bool:
    """Delete a pack and every selection pointing into it."""
    if not storage.delete_pack(name):
        return False
    settings = storage.get_settings()
    storage.save_settings(storage.prune_pack_selections(settings, name))
    logger.info('pack "%s" removed', name)
    return True


def remove_item(pack_name: str, item_name: str, kind: str | None = None) -> bool:
    """Remove records named item_name from a pack.

    kind ("lumia" or "loom") limits removal to that record type, so a
    character and a fragment sharing a name can be removed independently.
    Selections are pruned only once no record of that name is left.
    """
    pack = storage.get_pack(pack_name)
    if pack is None:
        return False
    remaining = [
        i for i in pack.items
        if i.name != item_name or (kind is not None and i.kind != kind)
    ]
    if len(remaining) == len(pack.items):
        return False
    pack.items = remaining
    storage.save_pack(pack)
    if pack.find(item_name) is None:
        settings = storage.get_settings()
        storage.save_settings(storage.prune_item_selections(settings, pack_name, item_name))
    logger.info('removed "%s" from pack "%s"', item_name, pack_name)
    return True


# ── Remote fetch ─────────────────────────────────────────────


async def fetch_world_book(url: str, overwrite: bool = False, timeout: float = 30.0) -> Pack:
    """Download a document and import it as a non-custom pack named after the URL."""
    logger.debug("fetching world book url=%s", url)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
    except httpx.ConnectError as e:
        raise FetchError(f"Cannot connect to {url}") from e
    except httpx.HTTPStatusError as e:
        raise FetchError(f"{url} returned HTTP {e.response.status_code}") from e
    except httpx.TimeoutException as e:
        raise FetchError(f"{url} timed out after {timeout}s") from e
    except httpx.InvalidURL as e:
        raise FetchError(f"Invalid URL: {url}") from e
    except httpx.HTTPError as e:
        raise FetchError(f"Request to {url} failed: {e}") from e

    try:
        data = resp.json()
    except ValueError as e:
        raise FetchError(f"{url} did not return JSON") from e

    name = url.rstrip("/").split("/")[-1] or url
    return import_pack(data, name, is_url=True, overwrite=overwrite, url=url)
