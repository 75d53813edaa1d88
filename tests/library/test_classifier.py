"""Tests for entry classification and field application."""

from lumia.library import CharacterUpdate, apply_update, classify_entry
from lumia.models import CharacterRecord, LoomCategory, NarrativeFragment


# ── Skips ────────────────────────────────────────────────────


def test_skip_missing_content():
    assert classify_entry({"comment": "Lumia (Aria)"}) is None


def test_skip_empty_content():
    assert classify_entry({"comment": "Lumia (Aria)", "content": ""}) is None


def test_skip_non_string_content():
    assert classify_entry({"comment": "Lumia (Aria)", "content": 42}) is None


def test_skip_non_mapping_entry():
    assert classify_entry("Lumia (Aria)") is None


def test_skip_without_parenthetical_name():
    assert classify_entry({"comment": "Lumia Aria", "content": "x"}) is None
    assert classify_entry({"content": "x"}) is None


# ── Loom fragments ───────────────────────────────────────────


def test_loom_nested_parentheses():
    result = classify_entry({
        "comment": "Narrative Style (Kafka (Whatever Kafka Does))",
        "content": "X",
    })
    assert result == NarrativeFragment(
        name="Kafka (Whatever Kafka Does)",
        category=LoomCategory.NARRATIVE_STYLE,
        content="X",
    )


def test_loom_categories():
    utils = classify_entry({"comment": "Loom Utilities (Pacing)", "content": " a "})
    retro = classify_entry({"comment": "  Retrofits(Old Tool)  ", "content": "b"})
    assert utils.category is LoomCategory.UTILITY
    assert utils.content == "a"
    assert retro.category is LoomCategory.RETROFIT
    assert retro.name == "Old Tool"


def test_loom_malformed_name_is_skipped():
    assert classify_entry({"comment": "Narrative Style (Broken", "content": "x"}) is None
    assert classify_entry({"comment": "Retrofits (A) trailing", "content": "x"}) is None


def test_loom_does_not_fall_through_to_character():
    result = classify_entry({"comment": "Retrofits (Definition)", "content": "x"})
    assert isinstance(result, NarrativeFragment)


# ── Character updates ────────────────────────────────────────


def test_lumia_category_is_definition():
    result = classify_entry({"comment": "Lumia (Aria)", "content": "Tall."})
    assert result == CharacterUpdate(name="Aria", content_type="definition", content="Tall.")


def test_keyword_types():
    assert classify_entry({"comment": "Behavior (Aria)", "content": "x"}).content_type == "behavior"
    assert classify_entry({"comment": "Aria PERSONALITY (Aria)", "content": "x"}).content_type == "personality"
    assert classify_entry({"comment": "Lumia Definition (Aria)", "content": "x"}).content_type == "definition"


def test_keyword_priority_definition_first():
    result = classify_entry({"comment": "Definition and personality (Aria)", "content": "x"})
    assert result.content_type == "definition"


def test_outlet_wins_over_comment():
    result = classify_entry({
        "comment": "Lumia Definition (Aria)",
        "content": "x",
        "outletName": "Lumia_Behavior",
    })
    assert result.content_type == "behavior"


def test_unknown_outlet_falls_back_to_comment():
    result = classify_entry({"comment": "Personality (Aria)", "content": "x", "outletName": "Other"})
    assert result.content_type == "personality"


def test_untyped_entry_still_names_a_character():
    result = classify_entry({"comment": "Misc (Aria)", "content": "x"})
    assert result == CharacterUpdate(name="Aria", content_type=None, content="x")


def test_character_name_uses_first_parenthetical():
    result = classify_entry({"comment": "Lumia (Aria (Prime))", "content": "x"})
    assert result.name == "Aria (Prime"


def test_character_content_is_not_trimmed():
    result = classify_entry({"comment": "Behavior (Aria)", "content": " Calm. \n"})
    assert result.content == " Calm. \n"


# ── apply_update ─────────────────────────────────────────────


def test_apply_definition_keeps_existing_image():
    record = CharacterRecord(name="Aria", image="old.png", author="Old")
    apply_update(record, CharacterUpdate("Aria", "definition", "No tags here."))
    assert record.physical_definition == "No tags here."
    assert record.image == "old.png"
    assert record.author == "Old"


def test_apply_definition_sets_metadata():
    record = CharacterRecord(name="Aria")
    apply_update(record, CharacterUpdate("Aria", "definition", "[lumia_author=Me]Body"))
    assert record.author == "Me"
    assert record.physical_definition == "Body"


def test_apply_behavior_overwrites():
    record = CharacterRecord(name="Aria", behavior="old")
    apply_update(record, CharacterUpdate("Aria", "behavior", "new"))
    assert record.behavior == "new"


def test_apply_legacy_personality_behavior_only_if_unset():
    body = "{{setvar::lumia_behavior_a::legacy}}{{setglobalvar::lumia_personality_a::p}}"

    fresh = CharacterRecord(name="Aria")
    apply_update(fresh, CharacterUpdate("Aria", "personality", body))
    assert fresh.behavior == "legacy"
    assert fresh.personality == "p"

    existing = CharacterRecord(name="Aria", behavior="explicit")
    apply_update(existing, CharacterUpdate("Aria", "personality", body))
    assert existing.behavior == "explicit"


def test_apply_untyped_is_noop():
    record = CharacterRecord(name="Aria", behavior="b")
    apply_update(record, CharacterUpdate("Aria", None, "ignored"))
    assert record == CharacterRecord(name="Aria", behavior="b")
