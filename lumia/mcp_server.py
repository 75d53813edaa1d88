"""FastMCP server exposing the Lumia library as MCP tools.

Tools:
  - list_packs()                     — pack names with Lumia/Loom counts
  - lookup_item(pack_name, item_name) — one library record, or None
  - expand_macros(text)              — expand {{lumiaDef}}, {{randomLumia}}, ...

Usage:
    uv run python -m lumia.mcp_server
"""

import os
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from lumia import host, storage
from lumia.content import Resolver, session_cache
from lumia.models import Selection

mcp = FastMCP("lumia-library")


@mcp.tool()
def list_packs() -> list[dict]:
    """List stored packs with their Lumia and Loom counts."""
    return [
        {"name": p.name, "lumia": len(p.characters()), "loom": len(p.fragments())}
        for p in storage.get_packs().values()
    ]


@mcp.tool()
def lookup_item(pack_name: str, item_name: str) -> dict | None:
    """Return one Lumia or Loom item by pack and item name."""
    resolver = Resolver(storage.get_packs(), session_cache)
    item = resolver.lookup(Selection(pack_name=pack_name, item_name=item_name))
    return item.model_dump(mode="json") if item else None


@mcp.tool()
def expand_macros(text: str) -> str:
    """Expand Lumia/Loom macros in text using the active selections."""
    return host.expand_macros(text)


if __name__ == "__main__":
    storage.init_storage(Path(os.getenv("DATA_DIR", str(Path(__file__).parent.parent / "data"))))
    mcp.run()
