"""Classify one world-book entry as a Loom fragment or a Lumia field update.

Comment conventions:
  "Loom Utilities (<Name>)" / "Retrofits (<Name>)" / "Narrative Style (<Name>)"
      → NarrativeFragment; the name may contain its own parentheses.
  "<anything> (<Name>)"
      → update for the character <Name> (first parenthetical, non-greedy).

The content type of a character update is decided by the first matching rule
in _CONTENT_TYPE_RULES: outlet sentinel, then a "definition" / "behavior" /
"personality" substring in the comment, then a bare "Lumia" category phrase.
"""

import logging
import re
from collections.abc import Callable, Mapping
from typing import Any, NamedTuple

from lumia.models import CharacterRecord, LoomCategory, NarrativeFragment

from .metadata import extract_metadata, split_legacy_personality

logger = logging.getLogger(__name__)

LOOM_CATEGORIES: dict[str, LoomCategory] = {
    "Loom Utilities": LoomCategory.UTILITY,
    "Retrofits": LoomCategory.RETROFIT,
    "Narrative Style": LoomCategory.NARRATIVE_STYLE,
}

OUTLET_TYPES: dict[str, str] = {
    "Lumia_Description": "definition",
    "Lumia_Behavior": "behavior",
    "Lumia_Personality": "personality",
}

_CATEGORY_PHRASE = re.compile(r"^(.+?)\s*\(")
_LOOM_NAME = re.compile(r"^(?:Loom Utilities|Retrofits|Narrative Style)\s*\((.+)\)\s*$")
_LUMIA_NAME = re.compile(r"\((.+?)\)")


class CharacterUpdate(NamedTuple):
    """A field update for the character record keyed by name.

    content_type is None when no rule matched: the record is still created
    but no field is written.
    """

    name: str
    content_type: str | None
    content: str


class _EntryView(NamedTuple):
    outlet: Any
    comment_lower: str
    category_phrase: str | None


# ── Content type rules (evaluated top to bottom) ─────────────


def _outlet_rule(view: _EntryView) -> str | None:
    if isinstance(view.outlet, str):
        return OUTLET_TYPES.get(view.outlet)
    return None


def _comment_keyword_rule(view: _EntryView) -> str | None:
    for keyword in ("definition", "behavior", "personality"):
        if keyword in view.comment_lower:
            return keyword
    return None


def _lumia_category_rule(view: _EntryView) -> str | None:
    if view.category_phrase is not None and view.category_phrase.strip().lower() == "lumia":
        return "definition"
    return None


_CONTENT_TYPE_RULES: list[Callable[[_EntryView], str | None]] = [
    _outlet_rule,
    _comment_keyword_rule,
    _lumia_category_rule,
]


def _content_type_for(view: _EntryView) -> str | None:
    for rule in _CONTENT_TYPE_RULES:
        content_type = rule(view)
        if content_type is not None:
            return content_type
    return None


# ── Classification ───────────────────────────────────────────


def classify_entry(entry: Any) -> NarrativeFragment | CharacterUpdate | None:
    """Classify a raw entry. Returns None when the entry should be skipped."""
    if not isinstance(entry, Mapping):
        return None
    content = entry.get("content")
    if not content or not isinstance(content, str):
        return None

    comment = entry.get("comment") or ""
    if not isinstance(comment, str):
        comment = ""
    comment = comment.strip()

    phrase_match = _CATEGORY_PHRASE.match(comment)
    category_phrase = phrase_match.group(1).strip() if phrase_match else None

    if category_phrase in LOOM_CATEGORIES:
        loom_match = _LOOM_NAME.match(comment)
        if not loom_match:
            logger.debug("skip loom entry with malformed name: %r", comment)
            return None
        return NarrativeFragment(
            name=loom_match.group(1).strip(),
            category=LOOM_CATEGORIES[category_phrase],
            content=content.strip(),
        )

    name_match = _LUMIA_NAME.search(comment)
    if not name_match:
        logger.debug("skip entry without parenthetical name: %r", comment)
        return None

    view = _EntryView(
        outlet=entry.get("outletName"),
        comment_lower=comment.lower(),
        category_phrase=category_phrase,
    )
    return CharacterUpdate(
        name=name_match.group(1).strip(),
        content_type=_content_type_for(view),
        content=content,
    )


# ── Field application ────────────────────────────────────────


def _apply_definition(record: CharacterRecord, content: str) -> None:
    meta = extract_metadata(content)
    record.physical_definition = meta.content
    if meta.image:
        record.image = meta.image
    if meta.author:
        record.author = meta.author


def _apply_behavior(record: CharacterRecord, content: str) -> None:
    record.behavior = content


def _apply_personality(record: CharacterRecord, content: str) -> None:
    split = split_legacy_personality(content)
    if split.behavior and not record.behavior:
        record.behavior = split.behavior
    record.personality = split.personality


_FIELD_HANDLERS: dict[str, Callable[[CharacterRecord, str], None]] = {
    "definition": _apply_definition,
    "behavior": _apply_behavior,
    "personality": _apply_personality,
}


def apply_update(record: CharacterRecord, update: CharacterUpdate) -> None:
    """Write the update's field into record; other fields are left alone."""
    handler = _FIELD_HANDLERS.get(update.content_type or "")
    if handler is None:
        return
    handler(record, update.content)
    logger.debug("%s: applied %s", record.name, update.content_type)
