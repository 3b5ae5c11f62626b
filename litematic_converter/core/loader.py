from __future__ import annotations

import gzip
import zlib
from pathlib import Path
from typing import TYPE_CHECKING

from amulet_nbt import CompoundTag, NamedTag, NBTLoadError, load

from .diagnostics import Diagnostics
from .nbt import SchematicFormatError, schematic_from_nbt, schematic_to_nbt
from .placement import PlacementConfig, RegionPlacer

if TYPE_CHECKING:
    from .palette import BlockRegistry, EntityRegistry
    from .placement import Placement
    from .schema import Schematic

EXTENSIONS = ("litematic", "ltc")
PRIMARY_EXTENSION = EXTENSIONS[0]

_GZIP_MAGIC = b"\x1f\x8b"


def is_schematic_path(path: Path) -> bool:
    return path.suffix.lstrip(".").lower() in EXTENSIONS


def read_schematic(data: bytes, diagnostics: Diagnostics | None = None) -> Schematic:
    diagnostics = diagnostics or Diagnostics()

    if data[:2] == _GZIP_MAGIC:
        try:
            data = gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as e:
            raise SchematicFormatError(f"Failed to decompress schematic: {e}")

    try:
        named_tag = load(data, compressed=False, little_endian=False)
    except (NBTLoadError, EOFError, IndexError, ValueError) as e:
        raise SchematicFormatError(f"Failed to read schematic NBT: {e}")

    root = named_tag.tag
    if not isinstance(root, CompoundTag):
        raise SchematicFormatError(
            f"Root tag is {type(root).__name__}, expected CompoundTag"
        )
    return schematic_from_nbt(root, diagnostics)


def write_schematic(
    schematic: Schematic,
    diagnostics: Diagnostics | None = None,
    *,
    compressed=True,
) -> bytes:
    diagnostics = diagnostics or Diagnostics()
    root = schematic_to_nbt(schematic, diagnostics)
    return NamedTag(root, "").to_nbt(compressed=compressed, little_endian=False)


def load_file(path: Path, diagnostics: Diagnostics | None = None) -> Schematic:
    try:
        data = Path(path).read_bytes()
    except FileNotFoundError:
        raise SchematicFormatError(f"Schematic '{path}' does not exist.")
    return read_schematic(data, diagnostics)


def save_file(
    schematic: Schematic, path: Path, diagnostics: Diagnostics | None = None
) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(write_schematic(schematic, diagnostics))


def decode(
    data: bytes,
    *,
    blocks: BlockRegistry,
    entities: EntityRegistry,
    diagnostics: Diagnostics | None = None,
    config: PlacementConfig = PlacementConfig(),
) -> Placement:
    diagnostics = diagnostics or Diagnostics()
    schematic = read_schematic(data, diagnostics)
    placer = RegionPlacer(
        blocks=blocks, entities=entities, diagnostics=diagnostics, config=config
    )
    return placer.place(schematic)
