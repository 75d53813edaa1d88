"""File-based JSON storage for packs and selection settings.

Data layout:
  data/
    packs.json      {pack name: Pack} — every imported library
    settings.json   Active selections and dominant pointers

Settings: get_settings() returns defaults merged with stored values;
update_settings() applies partial updates. Pointers are plain
{"pack_name", "item_name"} dicts and may dangle after a pack is removed;
use prune_pack_selections()/prune_item_selections() when removing.
"""

# Re-export all public symbols so `from lumia import storage` keeps working.

from .core import (  # noqa: F401
    data_dir,
    init_storage,
)

from .packs import (  # noqa: F401
    delete_pack,
    get_pack,
    get_packs,
    save_pack,
)

from .settings import (  # noqa: F401
    SELECTION_KINDS,
    clear_selection,
    get_settings,
    prune_item_selections,
    prune_pack_selections,
    save_settings,
    set_dominant,
    update_settings,
)
