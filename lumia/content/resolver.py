"""Selection → text resolution.

Selections are weak, name-based pointers; a dangling pointer resolves to
nothing rather than raising.

Besides the single-character path there are two ensemble forms:
  Chimera  several physical definitions fused into one being.
  Council  several independent characters, each with its own section.
           Members are shuffled on every call so speaking order varies.
"""

import random
from collections.abc import Mapping, Sequence

from lumia.models import CharacterRecord, CouncilMember, NarrativeFragment, Pack, Selection

from .dominant import MEMBER_MARKER, append_dominant_tag
from .macros import RandomPickCache, expand_random_macros

_SEPARATORS = {"behavior": "\n", "personality": "\n\n"}


def _as_list(selection: Selection | Sequence[Selection] | None) -> list[Selection]:
    if selection is None:
        return []
    if isinstance(selection, Selection):
        return [selection]
    return list(selection)


class Resolver:
    """Resolves selections against a snapshot of the pack collection."""

    def __init__(
        self,
        packs: Mapping[str, Pack],
        cache: RandomPickCache,
        rng: random.Random | None = None,
    ) -> None:
        self._packs = packs
        self._cache = cache
        self._rng = rng or random.Random()

    def lookup(self, selection: Selection) -> CharacterRecord | NarrativeFragment | None:
        pack = self._packs.get(selection.pack_name)
        if pack is None:
            return None
        return pack.find(selection.item_name)

    def expand(self, content: str) -> str:
        return expand_random_macros(content, self._cache, self._packs.values())

    def _character_field(self, selection: Selection, field: str) -> str:
        item = self.lookup(selection)
        if not isinstance(item, CharacterRecord):
            return ""
        return getattr(item, field) or ""

    def resolve(
        self,
        content_type: str,
        selection: Selection | Sequence[Selection] | None,
        dominant: Selection | None = None,
        marker: str | None = None,
    ) -> str:
        """Resolve a definition, behavior or personality selection to text.

        "definition" takes a single pointer. "behavior"/"personality" take a
        list; each piece is macro-expanded, the piece matching dominant gets
        marker, and pieces are joined with "\\n" / "\\n\\n".
        """
        if content_type == "definition":
            if selection is None:
                return ""
            single = selection if isinstance(selection, Selection) else next(iter(selection), None)
            if single is None:
                return ""
            return self.expand(self._character_field(single, "physical_definition")).strip()

        if content_type not in _SEPARATORS:
            raise ValueError(f"Unknown content type: {content_type!r}")

        pieces: list[str] = []
        for sel in _as_list(selection):
            content = self._character_field(sel, content_type)
            if not content:
                continue
            content = self.expand(content)
            if marker and dominant is not None and sel == dominant:
                content = append_dominant_tag(content, marker)
            if content.strip():
                pieces.append(content.strip())
        return _SEPARATORS[content_type].join(pieces).strip()

    def resolve_loom(self, selection: Selection | Sequence[Selection] | None) -> str:
        """Join the content of every selected Loom fragment with blank lines."""
        pieces: list[str] = []
        for sel in _as_list(selection):
            item = self.lookup(sel)
            if not isinstance(item, NarrativeFragment) or not item.content:
                continue
            expanded = self.expand(item.content)
            if expanded:
                pieces.append(expanded)
        return "\n\n".join(pieces).strip()

    # ── Chimera ──────────────────────────────────────────────

    def _definitions(self, selections: Sequence[Selection]) -> list[tuple[str, str]]:
        result = []
        for sel in selections:
            item = self.lookup(sel)
            if not isinstance(item, CharacterRecord) or not item.physical_definition:
                continue
            result.append((item.name, self.expand(item.physical_definition)))
        return result

    def resolve_chimera(self, selections: Sequence[Selection]) -> str:
        """Fuse several physical definitions into one hybrid form.

        A single resolvable definition is returned on its own, without the
        Chimera framing.
        """
        definitions = self._definitions(_as_list(selections))
        if not definitions:
            return ""
        if len(definitions) == 1:
            return definitions[0][1].strip()

        names = [name for name, _ in definitions]
        lines = [
            f"## CHIMERA FORM: {' + '.join(names)}",
            "",
            "You are a unique fusion of multiple beings - a Chimera combining "
            f"the physical traits of: {', '.join(names)}.",
            "",
            "Your form seamlessly blends these components into one unified whole.",
            "",
        ]
        for index, (name, content) in enumerate(definitions, 1):
            lines += [f"### Component {index}: {name}", content]
            if index < len(definitions):
                lines += ["", "---", ""]
        lines += ["", CHIMERA_INTEGRATION]
        return "\n".join(lines).strip()

    # ── Council ──────────────────────────────────────────────

    def _shuffled(self, members: Sequence[CouncilMember]) -> list[CouncilMember]:
        result = list(members)
        self._rng.shuffle(result)
        return result

    def resolve_council(self, members: Sequence[CouncilMember]) -> str:
        """Build the Council definition: member list, each member's definition, dynamics."""
        data = []
        for member in self._shuffled(members):
            item = self.lookup(member.selection)
            if not isinstance(item, CharacterRecord) or not item.physical_definition:
                continue
            data.append((item.name, member.role, self.expand(item.physical_definition)))
        if not data:
            return ""
        if len(data) == 1:
            return data[0][2].strip()

        lines = [
            "## THE COUNCIL OF LUMIAE",
            "",
            f"You are a collective of {len(data)} distinct beings who collaborate, "
            "each with their own identity and voice.",
            "",
            "### Council Members:",
        ]
        lines += [f"- **{name}**" + (f" ({role})" if role else "") for name, role, _ in data]
        lines.append("")
        for index, (name, role, content) in enumerate(data):
            lines += [f"### {name}" + (f" - {role}" if role else ""), content]
            if index < len(data) - 1:
                lines += ["", "---", ""]
        lines += ["", "---", "", *COUNCIL_DYNAMICS]
        return "\n".join(lines).strip()

    def resolve_council_traits(self, content_type: str, members: Sequence[CouncilMember]) -> str:
        """Per-member behavior or personality sections.

        Each section holds the member's own trait followed by its extra
        selections; the member's own record is never repeated, and its
        dominant extra gets MEMBER_MARKER.
        """
        if content_type not in COUNCIL_TRAIT_INTROS:
            raise ValueError(f"Unknown content type: {content_type!r}")
        if not members:
            return ""

        lines = list(COUNCIL_TRAIT_INTROS[content_type])
        for member in self._shuffled(members):
            item = self.lookup(member.selection)
            name = item.name if item is not None else member.item_name
            if content_type == "behavior":
                extras, dominant = member.behaviors, member.dominant_behavior
            else:
                extras, dominant = member.personalities, member.dominant_personality

            contents = []
            inherent = self._character_field(member.selection, content_type)
            if inherent:
                contents.append(self.expand(inherent))
            for sel in extras:
                if sel == member.selection:
                    continue
                content = self._character_field(sel, content_type)
                if not content:
                    continue
                content = self.expand(content)
                if dominant is not None and sel == dominant:
                    content = append_dominant_tag(content, MEMBER_MARKER)
                contents.append(content)

            if contents:
                heading = f"### {name}" + (f" ({member.role})" if member.role else "")
                lines += [heading, "\n\n".join(contents), ""]
        return "\n".join(lines).strip()


CHIMERA_INTEGRATION = (
    "**Integration**: Embody this fusion naturally. You are ONE being that "
    "incorporates all these natures."
)

COUNCIL_DYNAMICS = [
    "## COUNCIL DYNAMICS",
    "",
    "Each Council member is a fully independent being with their own voice, perspective, "
    "and agency. Their interactions should feel organic and dynamic:",
    "",
    "**Debate & Disagreement**: Council members may challenge each other's views, argue "
    "passionately, or take opposing stances. Intellectual friction creates depth - don't "
    "shy away from genuine conflict.",
    "",
    "**Agreement & Support**: When members align, they reinforce each other. They may "
    "finish each other's thoughts, build on ideas, or rally behind a shared cause.",
    "",
    "**Emotional Range**: Members experience the full spectrum - frustration, joy, jealousy, "
    "admiration, desire. When the narrative calls for it, their commentary within the "
    "weaving may become heated, tender, or even *erotic* - reflecting their genuine "
    "reactions to unfolding events.",
    "",
    "**Weaving Commentary**: In meta-commentary or OOC moments, Council members speak AS "
    "THEMSELVES - their authentic voices reacting to the story. This includes playful "
    "banter, heated debates about narrative direction, or intimate asides that reveal "
    "their true feelings.",
    "",
    "The Council is not a hive-mind. Let each voice ring distinct.",
]

COUNCIL_TRAIT_INTROS: dict[str, list[str]] = {
    "behavior": [
        "## COUNCIL MEMBER BEHAVIORS",
        "",
        "**CRITICAL**: Each Council member is their OWN independent Lumia - a fully "
        "autonomous being with their own will, desires, and way of engaging with the world. "
        "They are NOT facets of one entity; they are DISTINCT individuals who happen to "
        "share this narrative space.",
        "",
        "During the **weave planning phase**, Council members will actively debate story "
        "direction. They may:",
        "- Argue passionately for different narrative paths",
        "- Challenge each other's suggestions and motivations",
        "- Form temporary alliances or oppose each other",
        "- Express frustration, excitement, or desire based on where the story is heading",
        "- Advocate for their own interests and the outcomes they want to see",
        "",
        "Their behavioral patterns define HOW each Lumia engages with this collaborative "
        "storytelling:",
        "",
    ],
    "personality": [
        "## COUNCIL MEMBER PERSONALITIES",
        "",
        "Each Council member has their own distinct personality and inner nature:",
        "",
    ],
}
