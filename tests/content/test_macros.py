"""Tests for nested {{randomLumia}} expansion and the random-pick cache."""

import random

from lumia.content import MACRO_RULES, MAX_ITERATIONS, RandomPickCache, expand_random_macros
from lumia.models import CharacterRecord, LoomCategory, NarrativeFragment, Pack


def _cache_with(record: CharacterRecord) -> RandomPickCache:
    cache = RandomPickCache()
    cache.set(record)
    return cache


ZED = CharacterRecord(
    name="Zed",
    physical_definition="A spark.",
    personality="Restless.",
    behavior="Hums.",
)


# ── Expansion ────────────────────────────────────────────────


def test_name_and_bare_forms():
    cache = _cache_with(CharacterRecord(name="Zed", physical_definition="A spark."))
    result = expand_random_macros("Hello {{randomLumia.name}}, {{randomLumia}}", cache, [])
    assert result == "Hello Zed, A spark."


def test_all_suffixed_forms():
    text = "{{randomLumia.pers}}|{{randomLumia.behav}}|{{randomLumia.phys}}"
    assert expand_random_macros(text, _cache_with(ZED), []) == "Restless.|Hums.|A spark."


def test_null_fields_expand_to_empty():
    cache = _cache_with(CharacterRecord(name="Nil"))
    assert expand_random_macros("[{{randomLumia.pers}}]", cache, []) == "[]"


def test_no_macro_is_unchanged_and_does_not_pick():
    cache = RandomPickCache()
    packs = [Pack(name="P", items=[ZED])]
    assert expand_random_macros("plain {{char}} text", cache, packs) == "plain {{char}} text"
    assert cache.record is None


def test_no_records_leaves_macros_unexpanded():
    cache = RandomPickCache()
    loom_only = Pack(
        name="P",
        items=[NarrativeFragment(name="N", category=LoomCategory.UTILITY, content="c")],
    )
    text = "Hi {{randomLumia.name}}"
    assert expand_random_macros(text, cache, [loom_only]) == text
    assert cache.record is None


def test_expansion_is_idempotent():
    cache = _cache_with(ZED)
    once = expand_random_macros("{{randomLumia}} / {{randomLumia.name}}", cache, [])
    assert expand_random_macros(once, cache, []) == once


def test_self_reproducing_content_terminates():
    cache = _cache_with(CharacterRecord(name="{{randomLumia.name}}"))
    assert expand_random_macros("{{randomLumia.name}}", cache, []) == "{{randomLumia.name}}"


def test_growing_content_is_capped():
    cache = _cache_with(CharacterRecord(name="x{{randomLumia.name}}"))
    result = expand_random_macros("{{randomLumia.name}}", cache, [])
    assert result == "x" * MAX_ITERATIONS + "{{randomLumia.name}}"


def test_nested_macro_in_picked_content():
    cache = _cache_with(CharacterRecord(name="Zed", physical_definition="I am {{randomLumia.name}}."))
    assert expand_random_macros("{{randomLumia}}", cache, []) == "I am Zed."


def test_rules_are_specific_before_generic():
    names = [name for name, _, _ in MACRO_RULES]
    assert names[-1] == "randomLumia"
    for name in names[:-1]:
        assert name.startswith("randomLumia.")


def test_spaced_suffix_forms():
    text = "{{randomLumia .name}}|{{randomLumia  .pers}}|{{randomLumia behav}}|{{randomLumia .phys}}"
    assert expand_random_macros(text, _cache_with(ZED), []) == "Zed|Restless.|Hums.|A spark."


def test_replacement_text_is_literal():
    cache = _cache_with(CharacterRecord(name=r"Z\1", physical_definition=r"a\\b"))
    assert expand_random_macros("{{randomLumia.name}} {{randomLumia}}", cache, []) == r"Z\1 a\\b"


# ── RandomPickCache ──────────────────────────────────────────


def test_cache_picks_once_until_reset():
    a = CharacterRecord(name="A")
    b = CharacterRecord(name="B")
    cache = RandomPickCache(rng=random.Random(7))
    packs = [Pack(name="P1", items=[a]), Pack(name="P2", items=[b])]

    first = cache.ensure(packs)
    assert first in (a, b)
    for _ in range(5):
        assert cache.ensure(packs) is first

    cache.reset()
    assert cache.record is None


def test_cache_pool_skips_fragments():
    only = CharacterRecord(name="Only")
    pack = Pack(
        name="P",
        items=[NarrativeFragment(name="N", category=LoomCategory.RETROFIT, content="c"), only],
    )
    assert RandomPickCache().ensure([pack]) == only
