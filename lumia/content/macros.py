"""Nested {{randomLumia}} macro expansion.

All five forms resolve against the same cached random character:
  {{randomLumia.name}}   name
  {{randomLumia.pers}}   personality
  {{randomLumia.behav}}  behavior
  {{randomLumia.phys}}   physical definition
  {{randomLumia}}        physical definition

The suffixed forms may also be written with a space, {{randomLumia .name}}.

Rules run specific-first: the bare form must be replaced last or it would
eat the prefix of every suffixed occurrence. Expansion repeats until the
text stops changing, capped at MAX_ITERATIONS passes.
"""

import logging
import random
import re
import threading
from collections.abc import Callable, Iterable

from lumia.models import CharacterRecord, Pack

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 10
MACRO_PREFIX = "{{randomLumia"

_Field = Callable[[CharacterRecord], str | None]


def _rule(suffix: str | None, field: _Field) -> tuple[str, re.Pattern[str], _Field]:
    if suffix is None:
        return "randomLumia", re.compile(r"\{\{randomLumia\}\}"), field
    # "{{randomLumia.name}}" and the newer "{{randomLumia .name}}" are both accepted
    return f"randomLumia.{suffix}", re.compile(r"\{\{randomLumia[.\s]+" + suffix + r"\}\}"), field


# (registered name, pattern, field)
MACRO_RULES: list[tuple[str, re.Pattern[str], _Field]] = [
    _rule("name", lambda r: r.name),
    _rule("pers", lambda r: r.personality),
    _rule("behav", lambda r: r.behavior),
    _rule("phys", lambda r: r.physical_definition),
    _rule(None, lambda r: r.physical_definition),
]


class RandomPickCache:
    """Holds the character picked for random macros until reset()."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._record: CharacterRecord | None = None
        self._lock = threading.Lock()

    @property
    def record(self) -> CharacterRecord | None:
        return self._record

    def set(self, record: CharacterRecord | None) -> None:
        with self._lock:
            self._record = record

    def reset(self) -> None:
        self.set(None)

    def ensure(self, packs: Iterable[Pack]) -> CharacterRecord | None:
        """Return the cached pick, choosing one uniformly from packs if empty."""
        with self._lock:
            if self._record is None:
                pool = [c for pack in packs for c in pack.characters()]
                if pool:
                    self._record = self._rng.choice(pool)
                    logger.debug("random pick: %s (pool=%d)", self._record.name, len(pool))
            return self._record


# Shared by the HTTP and MCP surfaces; cleared via POST /api/macros/random/reset.
session_cache = RandomPickCache()


def has_random_macro(content: str) -> bool:
    return any(pattern.search(content) for _, pattern, _ in MACRO_RULES)


def expand_random_macros(content: str, cache: RandomPickCache, packs: Iterable[Pack]) -> str:
    """Expand every randomLumia form in content.

    Leaves content unchanged when it holds no macro or no character exists
    to pick from.
    """
    if not content or not has_random_macro(content):
        return content

    record = cache.ensure(packs)
    if record is None:
        return content

    processed = content
    iterations = 0
    while MACRO_PREFIX in processed and iterations < MAX_ITERATIONS:
        previous = processed
        for _, pattern, field in MACRO_RULES:
            value = field(record) or ""
            processed = pattern.sub(lambda m: value, processed)
        if processed == previous:
            break
        iterations += 1

    logger.debug("expanded random macros in %d pass(es)", iterations)
    return processed
