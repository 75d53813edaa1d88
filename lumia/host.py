"""Default macro host: the registry bound to file storage and the session cache."""

from lumia import storage
from lumia.content import MacroRegistry, expand_random_macros, register_lumia_macros, session_cache

registry = register_lumia_macros(
    MacroRegistry(), storage.get_settings, storage.get_packs, session_cache
)


def expand_macros(text: str) -> str:
    """Expand every registered {{macro}} in text using the stored selections.

    A final random-pick pass catches the spaced {{randomLumia .name}} forms
    the registry does not match by name.
    """
    text = registry.expand(text)
    return expand_random_macros(text, session_cache, storage.get_packs().values())


def reset_random_pick() -> None:
    session_cache.reset()
