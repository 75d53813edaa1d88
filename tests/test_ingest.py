"""Tests for pack import, removal and remote fetch."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from lumia import ingest, storage
from lumia.models import CharacterRecord, LoomCategory, NarrativeFragment

WORLD_BOOK = {
    "name": "Core Book",
    "entries": {
        "0": {"comment": "Lumia (Aria)", "content": "[lumia_img=http://x/a.png]Tall."},
        "1": {"comment": "Behavior (Aria)", "content": "Calm."},
        "2": {"comment": "Narrative Style (Noir)", "content": "Rain."},
    },
}


# ── import_pack ──────────────────────────────────────────────


def test_import_world_book_uses_book_name():
    pack = ingest.import_pack(WORLD_BOOK, "upload.json")
    assert pack.name == "Core Book"
    assert pack.is_custom is True
    assert pack.source_url == ""
    assert [i.name for i in pack.items] == ["Aria", "Noir"]
    assert storage.get_pack("Core Book") == pack


def test_import_entry_list_uses_source_name():
    pack = ingest.import_pack([{"comment": "Lumia (Aria)", "content": "x"}], "my-book")
    assert pack.name == "my-book"


def test_import_empty_library_fails_without_mutation():
    with pytest.raises(ingest.EmptyLibraryError):
        ingest.import_pack([{"comment": "no name", "content": "x"}], "junk")
    assert storage.get_packs() == {}


def test_import_collision_requires_overwrite():
    ingest.import_pack(WORLD_BOOK, "a")
    replacement = {"name": "Core Book", "entries": {"0": {"comment": "Lumia (Zed)", "content": "z"}}}

    with pytest.raises(ingest.PackExistsError) as exc:
        ingest.import_pack(replacement, "b")
    assert exc.value.name == "Core Book"
    assert [i.name for i in storage.get_pack("Core Book").items] == ["Aria", "Noir"]

    ingest.import_pack(replacement, "b", overwrite=True)
    assert [i.name for i in storage.get_pack("Core Book").items] == ["Zed"]


def test_import_non_string_name_falls_back_to_source_name():
    book = {"name": 7, "entries": {"0": {"comment": "Lumia (Aria)", "content": "x"}}}
    assert ingest.import_pack(book, "book.json").name == "book.json"

    native = {"packName": ["x"], "lumiaItems": [{"lumiaName": "Aria"}]}
    assert ingest.import_pack(native, "native.json").name == "native.json"


def test_import_native_pack():
    data = {
        "packName": "Native",
        "packAuthor": "Me",
        "lumiaItems": [
            {"lumiaName": "Aria", "lumiaDefinition": "Tall.", "avatarUrl": "a.png"},
            {"lumiaDefName": "Old", "lumiaDef": "Legacy.", "lumia_behavior": "Shuffles."},
            {"noName": True},
        ],
        "loomItems": [
            {"loomName": "Noir", "loomCategory": "Narrative Style", "loomContent": "Rain."},
            {"loomName": "Pace", "loomCategory": "Utility", "loomContent": "Brisk."},
            {"loomName": "Bad", "loomCategory": "Weird", "loomContent": "?"},
        ],
    }
    pack = ingest.import_pack(data, "file.json")
    assert pack.name == "Native"
    assert pack.author == "Me"
    assert pack.characters() == [
        CharacterRecord(name="Aria", physical_definition="Tall.", image="a.png"),
        CharacterRecord(name="Old", physical_definition="Legacy.", behavior="Shuffles."),
    ]
    assert pack.fragments() == [
        NarrativeFragment(name="Noir", category=LoomCategory.NARRATIVE_STYLE, content="Rain."),
        NarrativeFragment(name="Pace", category=LoomCategory.UTILITY, content="Brisk."),
    ]


# ── removal ──────────────────────────────────────────────────


def test_remove_pack_prunes_selections():
    ingest.import_pack(WORLD_BOOK, "a")
    storage.update_settings({
        "selected_definition": {"pack_name": "Core Book", "item_name": "Aria"},
        "selected_loom_style": [{"pack_name": "Core Book", "item_name": "Noir"}],
    })
    assert ingest.remove_pack("Core Book") is True
    settings = storage.get_settings()
    assert settings["selected_definition"] is None
    assert settings["selected_loom_style"] == []
    assert ingest.remove_pack("Core Book") is False


def test_remove_item_prunes_only_that_item():
    ingest.import_pack(WORLD_BOOK, "a")
    storage.update_settings({
        "selected_behaviors": [{"pack_name": "Core Book", "item_name": "Aria"}],
        "selected_loom_style": [{"pack_name": "Core Book", "item_name": "Noir"}],
    })
    assert ingest.remove_item("Core Book", "Aria") is True
    assert [i.name for i in storage.get_pack("Core Book").items] == ["Noir"]
    settings = storage.get_settings()
    assert settings["selected_behaviors"] == []
    assert len(settings["selected_loom_style"]) == 1
    assert ingest.remove_item("Core Book", "Aria") is False
    assert ingest.remove_item("Missing", "Aria") is False


def test_remove_item_by_kind_keeps_same_named_record():
    book = [
        {"comment": "Lumia (Echo)", "content": "Tall."},
        {"comment": "Retrofits (Echo)", "content": "Patched."},
    ]
    ingest.import_pack(book, "dup")
    storage.update_settings({"selected_loom_retrofits": [{"pack_name": "dup", "item_name": "Echo"}]})

    assert ingest.remove_item("dup", "Echo", kind="lumia") is True
    assert [i.kind for i in storage.get_pack("dup").items] == ["loom"]
    assert len(storage.get_settings()["selected_loom_retrofits"]) == 1
    assert ingest.remove_item("dup", "Echo", kind="lumia") is False

    assert ingest.remove_item("dup", "Echo", kind="loom") is True
    assert storage.get_pack("dup").items == []
    assert storage.get_settings()["selected_loom_retrofits"] == []


# ── fetch_world_book ─────────────────────────────────────────


def _mock_response(body, status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = body
    resp.raise_for_status = MagicMock(
        side_effect=None if status < 400 else httpx.HTTPStatusError(
            "", request=MagicMock(), response=resp
        )
    )
    return resp


async def test_fetch_imports_as_remote_pack():
    entries = [{"comment": "Lumia (Aria)", "content": "Tall."}]
    mock_get = AsyncMock(return_value=_mock_response(entries))
    with patch("httpx.AsyncClient.get", mock_get):
        pack = await ingest.fetch_world_book("https://example.com/books/core.json")
    assert mock_get.call_args[0][0] == "https://example.com/books/core.json"
    assert pack.name == "core.json"
    assert pack.is_custom is False
    assert pack.source_url == "https://example.com/books/core.json"


async def test_fetch_http_error():
    mock_get = AsyncMock(return_value=_mock_response({}, status=404))
    with patch("httpx.AsyncClient.get", mock_get):
        with pytest.raises(ingest.FetchError, match="404"):
            await ingest.fetch_world_book("https://example.com/missing.json")


async def test_fetch_connect_error():
    mock_get = AsyncMock(side_effect=httpx.ConnectError("refused"))
    with patch("httpx.AsyncClient.get", mock_get):
        with pytest.raises(ingest.FetchError, match="Cannot connect"):
            await ingest.fetch_world_book("https://example.com/a.json")


async def test_fetch_non_json():
    resp = _mock_response(None)
    resp.json.side_effect = ValueError("not json")
    with patch("httpx.AsyncClient.get", AsyncMock(return_value=resp)):
        with pytest.raises(ingest.FetchError, match="JSON"):
            await ingest.fetch_world_book("https://example.com/a.json")


async def test_fetch_malformed_url():
    with pytest.raises(ingest.FetchError):
        await ingest.fetch_world_book("not-a-url")
    assert storage.get_packs() == {}


async def test_fetch_read_error():
    mock_get = AsyncMock(side_effect=httpx.ReadError("reset"))
    with patch("httpx.AsyncClient.get", mock_get):
        with pytest.raises(ingest.FetchError, match="reset"):
            await ingest.fetch_world_book("https://example.com/a.json")
