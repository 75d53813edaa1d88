"""Pack collection storage, keyed by pack name."""

from pathlib import Path

from lumia.models import Pack

from .core import data_dir, read_json, write_json


def _packs_path() -> Path:
    return data_dir() / "packs.json"


def get_packs() -> dict[str, Pack]:
    """Load every pack. Returns {} if none stored yet."""
    raw = read_json(_packs_path(), {})
    return {name: Pack.model_validate(data) for name, data in raw.items()}


def get_pack(name: str) -> Pack | None:
    return get_packs().get(name)


def _write_packs(packs: dict[str, Pack]) -> None:
    write_json(_packs_path(), {name: p.model_dump(mode="json") for name, p in packs.items()})


def save_pack(pack: Pack) -> None:
    """Upsert a pack by name."""
    packs = get_packs()
    packs[pack.name] = pack
    _write_packs(packs)


def delete_pack(name: str) -> bool:
    """Remove a pack. Returns False if it did not exist."""
    packs = get_packs()
    if name not in packs:
        return False
    del packs[name]
    _write_packs(packs)
    return True
