"""Host macro facility: named {{macro}} tokens backed by callables.

register_lumia_macros() wires the Lumia/Loom macros to the current
settings and pack collection. Both are read through getters at call time,
so a registry built once keeps tracking later imports and selections.
"""

import logging
import random
import re
from collections.abc import Callable, Mapping
from typing import Any

from lumia.models import CouncilMember, Pack, Selection

from .dominant import BEHAVIOR_MARKER, PERSONALITY_MARKER
from .macros import MACRO_RULES, RandomPickCache
from .resolver import Resolver

logger = logging.getLogger(__name__)

MacroFn = Callable[[], str]


class MacroRegistry:
    """Named macros expanded in text as {{name}}. Unknown tokens are left as-is."""

    def __init__(self) -> None:
        self._macros: dict[str, MacroFn] = {}
        self._pattern: re.Pattern[str] | None = None

    def register(self, name: str, fn: MacroFn) -> None:
        self._macros[name] = fn
        self._pattern = None

    def names(self) -> list[str]:
        return sorted(self._macros)

    def call(self, name: str) -> str:
        return self._macros[name]()

    def _compiled(self) -> re.Pattern[str] | None:
        if self._pattern is None and self._macros:
            # Longest first so "lumiaDef.len" wins over "lumiaDef"
            alternatives = sorted(self._macros, key=len, reverse=True)
            self._pattern = re.compile(
                r"\{\{(" + "|".join(re.escape(n) for n in alternatives) + r")\}\}"
            )
        return self._pattern

    def expand(self, text: str) -> str:
        pattern = self._compiled()
        if not text or pattern is None:
            return text
        return pattern.sub(lambda m: self._macros[m.group(1)](), text)


def _selection(value: Any) -> Selection | None:
    if value is None:
        return None
    if isinstance(value, Selection):
        return value
    return Selection.model_validate(value)


def _selections(value: Any) -> list[Selection]:
    if not value:
        return []
    if not isinstance(value, list):
        value = [value]
    return [_selection(v) for v in value if v is not None]


def _council(settings: Mapping[str, Any]) -> list[CouncilMember]:
    """Council members, or [] when Council mode is off."""
    if not settings.get("council_mode"):
        return []
    return [
        m if isinstance(m, CouncilMember) else CouncilMember.model_validate(m)
        for m in settings.get("council_members") or []
    ]


def _chimera(settings: Mapping[str, Any]) -> list[Selection]:
    """Fused definitions, or [] when Chimera mode is off."""
    if not settings.get("chimera_mode"):
        return []
    return _selections(settings.get("selected_definitions"))


def register_lumia_macros(
    registry: MacroRegistry,
    get_settings: Callable[[], Mapping[str, Any]],
    get_packs: Callable[[], Mapping[str, Pack]],
    cache: RandomPickCache,
    rng: random.Random | None = None,
) -> MacroRegistry:
    """Register lumiaDef/lumiaBehavior/lumiaPersonality, loom*, randomLumia* and .len variants.

    Council mode takes priority over Chimera mode, which takes priority over
    the single selected definition. rng drives the Council member shuffle.
    """

    def resolver() -> Resolver:
        return Resolver(get_packs(), cache, rng)

    def lumia_def() -> str:
        settings = get_settings()
        members = _council(settings)
        if members:
            return resolver().resolve_council(members)
        fused = _chimera(settings)
        if fused:
            return resolver().resolve_chimera(fused)
        selected = _selection(settings.get("selected_definition"))
        if selected is None:
            return ""
        return resolver().resolve("definition", selected)

    def lumia_def_len() -> str:
        settings = get_settings()
        members = _council(settings)
        if members:
            return str(len(members))
        fused = _chimera(settings)
        if fused:
            return str(len(fused))
        return "1" if settings.get("selected_definition") else "0"

    def lumia_behavior() -> str:
        settings = get_settings()
        members = _council(settings)
        if members:
            return resolver().resolve_council_traits("behavior", members)
        return resolver().resolve(
            "behavior",
            _selections(settings.get("selected_behaviors")),
            dominant=_selection(settings.get("dominant_behavior")),
            marker=BEHAVIOR_MARKER,
        )

    def lumia_personality() -> str:
        settings = get_settings()
        members = _council(settings)
        if members:
            return resolver().resolve_council_traits("personality", members)
        return resolver().resolve(
            "personality",
            _selections(settings.get("selected_personalities")),
            dominant=_selection(settings.get("dominant_personality")),
            marker=PERSONALITY_MARKER,
        )

    def loom(key: str) -> MacroFn:
        return lambda: resolver().resolve_loom(_selections(get_settings().get(key)))

    def count(key: str) -> MacroFn:
        return lambda: str(len(_selections(get_settings().get(key))))

    def flag(key: str) -> MacroFn:
        return lambda: "1" if _selections(get_settings().get(key)) else "0"

    def trait_count(key: str, member_key: str) -> MacroFn:
        def count_traits() -> str:
            settings = get_settings()
            members = _council(settings)
            if members:
                return str(sum(len(getattr(m, member_key)) for m in members))
            return str(len(_selections(settings.get(key))))

        return count_traits

    registry.register("lumiaDef", lumia_def)
    registry.register("lumiaDef.len", lumia_def_len)
    registry.register("lumiaBehavior", lumia_behavior)
    registry.register("lumiaBehavior.len", trait_count("selected_behaviors", "behaviors"))
    registry.register("lumiaPersonality", lumia_personality)
    registry.register("lumiaPersonality.len", trait_count("selected_personalities", "personalities"))
    registry.register("loomStyle", loom("selected_loom_style"))
    registry.register("loomStyle.len", flag("selected_loom_style"))
    registry.register("loomUtils", loom("selected_loom_utils"))
    registry.register("loomUtils.len", count("selected_loom_utils"))
    registry.register("loomRetrofits", loom("selected_loom_retrofits"))
    registry.register("loomRetrofits.len", count("selected_loom_retrofits"))

    for name, _, field in MACRO_RULES:

        def random_macro(field=field) -> str:
            record = cache.ensure(get_packs().values())
            return (field(record) or "") if record else ""

        registry.register(name, random_macro)

    return registry
