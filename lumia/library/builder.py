"""Build a Library from a world-book document."""

import logging
from collections.abc import Mapping
from typing import Any

from lumia.models import CharacterRecord, Library, NarrativeFragment

from .classifier import apply_update, classify_entry

logger = logging.getLogger(__name__)


def normalize_entries(data: Any) -> list[Any]:
    """Return the entry sequence of a document.

    Accepts a raw entry list or a World Info object {"entries": {uid: entry}}.
    Anything else yields [].
    """
    if isinstance(data, list):
        return data
    if isinstance(data, Mapping):
        entries = data.get("entries")
        if isinstance(entries, Mapping):
            return list(entries.values())
        if isinstance(entries, list):
            return entries
    return []


def build_library(data: Any) -> Library:
    """Classify every entry and merge character updates by name.

    Characters come first in first-seen order, then Loom fragments in
    entry order.
    """
    characters: dict[str, CharacterRecord] = {}
    fragments: list[NarrativeFragment] = []

    for entry in normalize_entries(data):
        result = classify_entry(entry)
        if result is None:
            continue
        if isinstance(result, NarrativeFragment):
            fragments.append(result)
            continue
        record = characters.get(result.name)
        if record is None:
            record = CharacterRecord(name=result.name)
            characters[result.name] = record
        apply_update(record, result)

    logger.debug("built library: %d characters, %d fragments", len(characters), len(fragments))
    return [*characters.values(), *fragments]
