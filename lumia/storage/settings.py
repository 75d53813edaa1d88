"""Active selections: definition, behaviors, personalities, dominants and Loom picks.

Chimera mode fuses selected_definitions into one form; Council mode resolves
council_members as independent Lumiae, each carrying its own role, extra
behaviors and personalities and per-member dominants.

Pointers are stored as {"pack_name": ..., "item_name": ...}. Settings written
by older builds used camelCase keys (selectedDefinition, packName, ...);
they are migrated on read.
"""

import copy
from pathlib import Path
from typing import Any

from .core import data_dir, read_json, write_json

_SETTINGS_DEFAULTS: dict[str, Any] = {
    "selected_definition": None,
    "selected_behaviors": [],
    "selected_personalities": [],
    "dominant_behavior": None,
    "dominant_personality": None,
    "selected_loom_style": [],
    "selected_loom_utils": [],
    "selected_loom_retrofits": [],
    "chimera_mode": False,
    "selected_definitions": [],
    "council_mode": False,
    "council_members": [],
}

_LEGACY_KEYS = {
    "selectedDefinition": "selected_definition",
    "selectedBehaviors": "selected_behaviors",
    "selectedPersonalities": "selected_personalities",
    "dominantBehavior": "dominant_behavior",
    "dominantPersonality": "dominant_personality",
    "selectedLoomStyle": "selected_loom_style",
    "selectedLoomUtils": "selected_loom_utils",
    "selectedLoomRetrofits": "selected_loom_retrofits",
    "chimeraMode": "chimera_mode",
    "selectedDefinitions": "selected_definitions",
    "councilMode": "council_mode",
    "councilMembers": "council_members",
}

SINGLE_KEYS = ("selected_definition", "dominant_behavior", "dominant_personality")
LIST_KEYS = (
    "selected_behaviors",
    "selected_personalities",
    "selected_loom_style",
    "selected_loom_utils",
    "selected_loom_retrofits",
    "selected_definitions",
)
FLAG_KEYS = ("chimera_mode", "council_mode")
MEMBERS_KEY = "council_members"

# kind → (selection key, dominant key)
SELECTION_KINDS: dict[str, tuple[str, str | None]] = {
    "definition": ("selected_definition", None),
    "behavior": ("selected_behaviors", "dominant_behavior"),
    "personality": ("selected_personalities", "dominant_personality"),
    "loom_style": ("selected_loom_style", None),
    "loom_utils": ("selected_loom_utils", None),
    "loom_retrofits": ("selected_loom_retrofits", None),
    "definitions": ("selected_definitions", None),
    "council": (MEMBERS_KEY, None),
}


def _settings_path() -> Path:
    return data_dir() / "settings.json"


def _pointer(value: Any) -> dict[str, str] | None:
    """Normalize a stored pointer; drops anything that is not one."""
    if not isinstance(value, dict):
        return None
    pack = value.get("pack_name", value.get("packName"))
    item = value.get("item_name", value.get("itemName"))
    if not isinstance(pack, str) or not isinstance(item, str):
        return None
    return {"pack_name": pack, "item_name": item}


def _pointer_list(value: Any) -> list[dict[str, str]]:
    if isinstance(value, dict):
        value = [value]
    if not isinstance(value, list):
        return []
    return [p for p in (_pointer(v) for v in value) if p is not None]


def _member(value: Any) -> dict[str, Any] | None:
    """Normalize a stored Council member: its pointer plus role and own traits."""
    member = _pointer(value)
    if member is None:
        return None
    role = value.get("role")
    member["role"] = role if isinstance(role, str) else ""
    member["behaviors"] = _pointer_list(value.get("behaviors"))
    member["personalities"] = _pointer_list(value.get("personalities"))
    member["dominant_behavior"] = _pointer(value.get("dominant_behavior", value.get("dominantBehavior")))
    member["dominant_personality"] = _pointer(
        value.get("dominant_personality", value.get("dominantPersonality"))
    )
    return member


def _normalize(fields: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in fields.items():
        key = _LEGACY_KEYS.get(key, key)
        if key in SINGLE_KEYS:
            result[key] = _pointer(value)
        elif key in LIST_KEYS:
            result[key] = _pointer_list(value)
        elif key in FLAG_KEYS:
            result[key] = bool(value)
        elif key == MEMBERS_KEY:
            members = value if isinstance(value, list) else []
            result[key] = [m for m in (_member(v) for v in members) if m is not None]
    return result


def get_settings() -> dict[str, Any]:
    """Read settings, returning defaults merged with stored values."""
    settings = copy.deepcopy(_SETTINGS_DEFAULTS)
    stored = read_json(_settings_path(), {})
    settings.update(_normalize(stored))
    return settings


def save_settings(settings: dict[str, Any]) -> None:
    write_json(_settings_path(), settings)


def update_settings(fields: dict[str, Any]) -> dict[str, Any]:
    """Merge fields into settings and persist. Unknown keys are ignored."""
    settings = get_settings()
    settings.update(_normalize(fields))
    save_settings(settings)
    return settings


# ── Selection hygiene ────────────────────────────────────────


def _prune(settings: dict[str, Any], matches) -> dict[str, Any]:
    for key in SINGLE_KEYS:
        if settings.get(key) and matches(settings[key]):
            settings[key] = None
    for key in LIST_KEYS:
        settings[key] = [p for p in settings.get(key, []) if not matches(p)]
    members = [m for m in settings.get(MEMBERS_KEY, []) if not matches(m)]
    for member in members:
        for key in ("behaviors", "personalities"):
            member[key] = [p for p in member.get(key, []) if not matches(p)]
        for key in ("dominant_behavior", "dominant_personality"):
            if member.get(key) and matches(member[key]):
                member[key] = None
    settings[MEMBERS_KEY] = members
    return settings


def prune_pack_selections(settings: dict[str, Any], pack_name: str) -> dict[str, Any]:
    """Drop every selection and dominant pointer into pack_name."""
    return _prune(settings, lambda p: p["pack_name"] == pack_name)


def prune_item_selections(settings: dict[str, Any], pack_name: str, item_name: str) -> dict[str, Any]:
    """Drop every selection and dominant pointer to one item."""
    return _prune(
        settings, lambda p: p["pack_name"] == pack_name and p["item_name"] == item_name
    )


def clear_selection(kind: str) -> dict[str, Any]:
    """Clear one selection kind; behavior/personality also clear their dominant."""
    if kind not in SELECTION_KINDS:
        raise ValueError(f"Unknown selection kind: {kind}")
    key, dominant_key = SELECTION_KINDS[kind]
    settings = get_settings()
    settings[key] = None if key in SINGLE_KEYS else []
    if dominant_key:
        settings[dominant_key] = None
    save_settings(settings)
    return settings


def set_dominant(kind: str, pointer: dict[str, str] | None) -> dict[str, Any]:
    """Mark one selected behavior/personality as dominant, or clear it with None.

    The pointer must already be in the matching selection list.
    """
    key, dominant_key = SELECTION_KINDS.get(kind, (None, None))
    if dominant_key is None:
        raise ValueError(f"Selection kind '{kind}' has no dominant")
    settings = get_settings()
    normalized = _pointer(pointer)
    if pointer is not None and normalized not in settings[key]:
        raise ValueError(f"Dominant {kind} must be one of the selected items")
    settings[dominant_key] = normalized
    save_settings(settings)
    return settings
