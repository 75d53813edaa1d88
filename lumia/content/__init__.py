"""Selection resolution and macro expansion.

  Resolver              — selections → definition / behavior / personality / Loom text,
                          plus Chimera (fused) and Council (multi-member) forms
  expand_random_macros  — nested {{randomLumia*}} expansion against a RandomPickCache
  append_dominant_tag   — marker insertion into the first header-like line
  MacroRegistry         — {{name}} host macros (lumiaDef, loomStyle, randomLumia.name, ...)
"""

from .dominant import (  # noqa: F401
    BEHAVIOR_MARKER,
    MEMBER_MARKER,
    PERSONALITY_MARKER,
    append_dominant_tag,
)
from .macros import (  # noqa: F401
    MACRO_RULES,
    MAX_ITERATIONS,
    RandomPickCache,
    expand_random_macros,
    session_cache,
)
from .registry import MacroRegistry, register_lumia_macros  # noqa: F401
from .resolver import Resolver  # noqa: F401
