"""Core domain models.

All library, storage and resolver functions operate on these types.
Pydantic is used for validation and serialisation at every data boundary.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class LoomCategory(str, Enum):
    """Narrative fragment categories."""

    UTILITY = "Utility"
    RETROFIT = "Retrofit"
    NARRATIVE_STYLE = "NarrativeStyle"


class CharacterRecord(BaseModel):
    """A Lumia: one character definition merged from every entry sharing its name."""

    kind: Literal["lumia"] = "lumia"
    name: str
    image: str | None = None
    author: str | None = None
    physical_definition: str | None = None
    personality: str | None = None
    behavior: str | None = None


class NarrativeFragment(BaseModel):
    """A Loom item. Never merged, even when name and category repeat."""

    kind: Literal["loom"] = "loom"
    name: str
    category: LoomCategory
    content: str


LibraryItem = Annotated[
    Union[CharacterRecord, NarrativeFragment], Field(discriminator="kind")
]
Library = list[LibraryItem]


class Selection(BaseModel):
    """Name-based pointer into a pack's library. May dangle."""

    model_config = ConfigDict(frozen=True)

    pack_name: str
    item_name: str


class Pack(BaseModel):
    """A named library plus provenance."""

    name: str
    items: Library = Field(default_factory=list)
    source_url: str = ""
    is_custom: bool = True  # local uploads are editable, URL imports are not
    author: str | None = None
    cover_url: str | None = None

    def characters(self) -> list[CharacterRecord]:
        return [i for i in self.items if isinstance(i, CharacterRecord)]

    def fragments(self) -> list[NarrativeFragment]:
        return [i for i in self.items if isinstance(i, NarrativeFragment)]

    def find(self, item_name: str) -> CharacterRecord | NarrativeFragment | None:
        """Return the first item named item_name, or None."""
        for item in self.items:
            if item.name == item_name:
                return item
        return None


class CouncilMember(BaseModel):
    """One independent Lumia in Council mode, with its own extra traits."""

    pack_name: str
    item_name: str
    role: str = ""
    behaviors: list[Selection] = Field(default_factory=list)
    personalities: list[Selection] = Field(default_factory=list)
    dominant_behavior: Selection | None = None
    dominant_personality: Selection | None = None

    @property
    def selection(self) -> Selection:
        return Selection(pack_name=self.pack_name, item_name=self.item_name)
