"""In-memory model of a Litematica schematic.

Layout of the stored document::

    MinecraftDataVersion: int
    Version: int
    Metadata: {Name, Author, Description, TimeCreated, TimeModified}
    Regions:
        <name>:
            Position: {x, y, z}
            Size: {x, y, z}          # any component may be negative
            BlockStatePalette: [{Name, Properties}]
            BlockStates: long[]      # bit-packed palette indices
            TileEntities: [{x, y, z, ...}]
            Entities: [{Pos, id, ...}]

Voxels are ordered X fastest, then Z, then Y.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from msgspec import Struct, field

from . import packing
from .coordinates import Vec3i, normalize
from .tags import Compound, Int

if TYPE_CHECKING:
    from collections.abc import Iterator

    from amulet.api.block import Block

AIR = "minecraft:air"


class SchematicError(Exception):
    pass


class BlockStateDescriptor(Struct, frozen=True):
    name: str
    properties: dict[str, str] = {}

    @classmethod
    def from_string(cls, block_state: str) -> BlockStateDescriptor:
        """Parse ``namespace:name[key=value,...]``."""
        if "[" not in block_state:
            return cls(block_state.strip())

        name, props_str = block_state.split("[", 1)
        if not props_str.endswith("]"):
            raise ValueError(f"Invalid block state: {block_state}")
        properties = {}
        for prop in props_str[:-1].split(","):
            if not prop.strip():
                continue
            if "=" not in prop:
                raise ValueError(f"Invalid block property '{prop}' in {block_state}")
            key, value = prop.split("=", 1)
            properties[key.strip()] = value.strip()
        return cls(name.strip(), properties)

    @classmethod
    def from_block(cls, block: Block) -> BlockStateDescriptor:
        return cls(
            block.namespaced_name,
            {key: str(tag.py_data) for key, tag in block.properties.items()},
        )

    @property
    def key(self) -> str:
        return str(self)

    def __str__(self):
        if not self.properties:
            return self.name
        props = ",".join(f"{k}={v}" for k, v in sorted(self.properties.items()))
        return f"{self.name}[{props}]"


class Metadata(Struct):
    name: str = ""
    author: str = ""
    description: str = ""
    created_at: int = 0
    modified_at: int = 0


class Region(Struct):
    position: Vec3i = Vec3i()
    size: Vec3i = Vec3i()
    palette: list[BlockStateDescriptor] = []
    packed_indices: list[int] = []
    tile_entities: list[Compound] = []
    entities: list[Compound] = []

    @classmethod
    def filled(
        cls,
        position: Vec3i,
        size: Vec3i,
        descriptor: BlockStateDescriptor = BlockStateDescriptor(AIR),
    ) -> Region:
        region = cls(position=Vec3i(*position), size=Vec3i(*size), palette=[descriptor])
        region.packed_indices = [0] * region.packed_length
        return region

    @property
    def abs_size(self) -> Vec3i:
        return abs(self.size)

    @property
    def num_voxels(self) -> int:
        return self.size.volume

    @property
    def bits_per_entry(self) -> int:
        return packing.bits_per_entry(len(self.palette))

    @property
    def packed_length(self) -> int:
        return packing.packed_length(self.num_voxels, self.bits_per_entry)

    @property
    def anchor(self) -> Vec3i:
        return normalize(self.position, self.size)

    def decode_indices(self) -> list[int]:
        return packing.decode(self.packed_indices, self.bits_per_entry, self.num_voxels)

    def voxels(self) -> Iterator[tuple[Vec3i, int]]:
        size_x, _, size_z = self.abs_size
        for i, palette_index in enumerate(self.decode_indices()):
            x = i % size_x
            z = (i // size_x) % size_z
            y = i // (size_x * size_z)
            yield Vec3i(x, y, z), palette_index

    # Editing, in region-local coordinates [0, |size|)

    def contains(self, x: int, y: int, z: int) -> bool:
        size_x, size_y, size_z = self.abs_size
        return 0 <= x < size_x and 0 <= y < size_y and 0 <= z < size_z

    def _linear_index(self, x: int, y: int, z: int) -> int:
        size_x, _, size_z = self.abs_size
        return (y * size_z + z) * size_x + x

    def get_block_index(self, x: int, y: int, z: int) -> int:
        if not self.contains(x, y, z):
            return -1
        return packing.read_entry(
            self.packed_indices, self._linear_index(x, y, z), self.bits_per_entry
        )

    def set_block_index(self, x: int, y: int, z: int, index: int):
        if not self.contains(x, y, z):
            raise ValueError(f"Coordinates {(x, y, z)} outside region of size {self.size}")
        if not 0 <= index < len(self.palette):
            raise ValueError(f"Palette index {index} out of range {len(self.palette)}")
        packing.write_entry(
            self.packed_indices, self._linear_index(x, y, z), self.bits_per_entry, index
        )

    def add_palette_entry(self, descriptor: BlockStateDescriptor) -> int:
        try:
            return self.palette.index(descriptor)
        except ValueError:
            pass

        old_bits = self.bits_per_entry
        self.palette.append(descriptor)
        new_bits = self.bits_per_entry
        if new_bits != old_bits:
            self.packed_indices = packing.repack(
                self.packed_indices, old_bits, new_bits, self.num_voxels
            )
        return len(self.palette) - 1

    def set_block(self, x: int, y: int, z: int, descriptor: BlockStateDescriptor):
        self.set_block_index(x, y, z, self.add_palette_entry(descriptor))

    def find_tile_entity(self, x: int, y: int, z: int) -> Compound | None:
        for tile_entity in self.tile_entities:
            if _tile_entity_position(tile_entity) == (x, y, z):
                return tile_entity
        return None

    def set_tile_entity(self, tile_entity: Compound):
        position = _tile_entity_position(tile_entity)
        for i, existing in enumerate(self.tile_entities):
            if _tile_entity_position(existing) == position:
                self.tile_entities[i] = tile_entity
                return
        self.tile_entities.append(tile_entity)

    def remove_tile_entity(self, x: int, y: int, z: int) -> bool:
        kept = [t for t in self.tile_entities if _tile_entity_position(t) != (x, y, z)]
        removed = len(kept) != len(self.tile_entities)
        self.tile_entities = kept
        return removed


class Schematic(Struct):
    data_version: int = 0
    format_version: int = 0
    metadata: Metadata = field(default_factory=Metadata)
    regions: dict[str, Region] = {}


def tile_entity_at(x: int, y: int, z: int, **fields) -> Compound:
    return Compound({"x": Int(x), "y": Int(y), "z": Int(z), **fields})


def _tile_entity_position(tile_entity: Compound) -> tuple[int | None, ...]:
    return (
        tile_entity.get_int("x", None),
        tile_entity.get_int("y", None),
        tile_entity.get_int("z", None),
    )
