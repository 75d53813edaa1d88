"""World-book → Lumia/Loom library conversion.

  classify_entry    — one raw entry → NarrativeFragment | CharacterUpdate | None
  build_library     — whole document → ordered Library (characters merged by name)
  extract_metadata  — [lumia_img=...] / [lumia_author=...] tag stripping
  split_legacy_personality — {{setvar::...}} / {{setglobalvar::...}} recovery
"""

from .builder import build_library, normalize_entries  # noqa: F401
from .classifier import (  # noqa: F401
    CharacterUpdate,
    apply_update,
    classify_entry,
)
from .metadata import (  # noqa: F401
    LegacySplit,
    Metadata,
    extract_metadata,
    split_legacy_personality,
)
