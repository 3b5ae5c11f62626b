"""Merge every region of a schematic into one combined volume.

Each region is normalized to its minimum corner (``anchor``) and absolute size.
The combined bounds are the union of all regions; a region's voxels, tile
entities and entities are shifted by ``anchor - bounds.min_corner``.

Voxel coordinates and entity positions in the output are relative to
``bounds.min_corner``. With the "world" origin policy ``min_corner`` keeps the
absolute position recorded in the schematic; with "local" it is reset to zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, NamedTuple

from . import tags
from .convert import compound_to_native
from .coordinates import XYZ, Bounds, Vec3i, union
from .palette import PaletteResolver
from .schema import SchematicError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from amulet.api.block import Block
    from amulet_nbt import CompoundTag

    from .diagnostics import Diagnostics
    from .palette import BlockRegistry, EntityRegistry, EntityType
    from .schema import Region, Schematic

    OriginPolicy = Literal["world", "local"]

Point = tuple[float, float, float]


class EmptySchematicError(SchematicError):
    pass


class PlacementFault(SchematicError):
    pass


@dataclass(frozen=True)
class PlacementConfig:
    origin: OriginPolicy = "world"
    check_entity_bounds: bool = True


class Voxel(NamedTuple):
    block: Block
    payload: CompoundTag | None = None


class PlacedEntity(NamedTuple):
    entity_type: EntityType
    position: Point
    yaw: float
    pitch: float
    payload: CompoundTag


@dataclass
class PlacementReport:
    blocks_set: int = 0
    tile_entities_set: int = 0
    entities_placed: int = 0
    voxels_skipped: int = 0
    entities_skipped: int = 0

    def __iadd__(self, other: PlacementReport) -> PlacementReport:
        self.blocks_set += other.blocks_set
        self.tile_entities_set += other.tile_entities_set
        self.entities_placed += other.entities_placed
        self.voxels_skipped += other.voxels_skipped
        self.entities_skipped += other.entities_skipped
        return self


class CombinedOutput:
    def __init__(self, bounds: Bounds):
        self.bounds = bounds
        self.voxels: list[Voxel | None] = [None] * bounds.volume
        self.entities: list[PlacedEntity] = []

    def __getitem__(self, coords: XYZ) -> Voxel | None:
        if not self.bounds.contains(coords):
            raise IndexError(f"{coords} outside combined bounds {self.bounds.size}")
        return self.voxels[self.bounds.linear_index(coords)]

    def __iter__(self) -> Iterator[tuple[Vec3i, Voxel]]:
        for i, voxel in enumerate(self.voxels):
            if voxel is not None:
                yield self.bounds.local_coords(i), voxel

    def __len__(self):
        return sum(voxel is not None for voxel in self.voxels)

    def set_voxel(self, coords: Vec3i, voxel: Voxel):
        if not self.bounds.contains(coords):
            raise PlacementFault(
                f"Write at {tuple(coords)} outside combined bounds {tuple(self.bounds.size)}"
            )
        self.voxels[self.bounds.linear_index(coords)] = voxel

    def world_position(self, point: Point) -> Point:
        x, y, z = point
        ox, oy, oz = self.bounds.min_corner
        return (x + ox, y + oy, z + oz)


class Placement(NamedTuple):
    output: CombinedOutput
    report: PlacementReport


class RegionPlacer:
    def __init__(
        self,
        *,
        blocks: BlockRegistry,
        entities: EntityRegistry,
        diagnostics: Diagnostics,
        config: PlacementConfig = PlacementConfig(),
    ):
        self._resolver = PaletteResolver(blocks, diagnostics)
        self._entities = entities
        self._diagnostics = diagnostics
        self.config = config

    def place(self, schematic: Schematic) -> Placement:
        regions = schematic.regions
        if not regions:
            raise EmptySchematicError("No regions found in schematic")

        region_bounds = {
            name: Bounds(region.anchor, region.abs_size)
            for name, region in regions.items()
        }
        combined = union(region_bounds.values())

        origin = combined.min_corner if self.config.origin == "world" else Vec3i()
        output = CombinedOutput(Bounds(origin, combined.size))
        report = PlacementReport()

        for name, region in regions.items():
            offset = region_bounds[name].min_corner - combined.min_corner
            self._diagnostics.debug("Placing region '%s' at offset %s", name, offset)
            report += self._place_region(region, offset, output)

        size_x, size_y, size_z = combined.size
        self._diagnostics.info(
            "Converted %d region(s) sized %dx%dx%d, set %d blocks with %d tile entities and %d entities",
            len(regions),
            size_x,
            size_y,
            size_z,
            report.blocks_set,
            report.tile_entities_set,
            report.entities_placed,
        )
        return Placement(output, report)

    def _place_region(
        self, region: Region, offset: Vec3i, output: CombinedOutput
    ) -> PlacementReport:
        report = PlacementReport()
        palette = self._resolver.resolve_palette(region.palette)
        tile_entities = self._index_tile_entities(region)

        for local, palette_index in region.voxels():
            if not 0 <= palette_index < len(palette):
                self._diagnostics.warn(
                    "palette-index",
                    "Invalid palette index %d at %s (palette size %d)",
                    palette_index,
                    tuple(local),
                    len(palette),
                )
                report.voxels_skipped += 1
                continue

            block = palette[palette_index]
            if block is None:
                # already reported once when the palette entry failed to resolve
                report.voxels_skipped += 1
                continue

            payload = None
            if (tile_entity := tile_entities.get(local)) is not None:
                payload = compound_to_native(tile_entity, self._diagnostics)

            output.set_voxel(local + offset, Voxel(block, payload))
            report.blocks_set += 1
            if payload is not None:
                report.tile_entities_set += 1

        for entity in region.entities:
            if (placed := self._place_entity(entity, offset, output)) is None:
                report.entities_skipped += 1
                continue
            output.entities.append(placed)
            report.entities_placed += 1

        return report

    def _index_tile_entities(self, region: Region) -> dict[Vec3i, tags.Compound]:
        index: dict[Vec3i, tags.Compound] = {}
        for tile_entity in region.tile_entities:
            x = tile_entity.get_int("x", None)
            y = tile_entity.get_int("y", None)
            z = tile_entity.get_int("z", None)
            if x is None or y is None or z is None:
                self._diagnostics.warn(
                    "tile-entity",
                    "Tile entity %s without integer coordinates; skipping",
                    tile_entity.get_str("id") or "<no id>",
                )
                continue
            index[Vec3i(x, y, z)] = tile_entity
        return index

    def _place_entity(
        self, entity: tags.Compound, offset: Vec3i, output: CombinedOutput
    ) -> PlacedEntity | None:
        identifier = entity.get_str("id")
        if not identifier:
            self._diagnostics.warn("unknown-entity", "Entity missing 'id'; skipping")
            return None

        entity_type = self._entities.get_entity_type(identifier)
        if entity_type is None:
            self._diagnostics.warn(
                "unknown-entity", "Unknown entity type: %s; skipping", identifier
            )
            return None

        x, y, z = self._read_position(entity, identifier)
        position = (x + offset.x, y + offset.y, z + offset.z)
        yaw, pitch = _read_rotation(entity)

        if self.config.check_entity_bounds and not output.bounds.contains_point(position):
            self._diagnostics.warn(
                "entity-bounds",
                "Entity %s at %s lies outside the combined bounds",
                identifier,
                position,
            )

        return PlacedEntity(
            entity_type=entity_type,
            position=position,
            yaw=yaw,
            pitch=pitch,
            payload=compound_to_native(entity, self._diagnostics),
        )

    def _read_position(self, entity: tags.Compound, identifier: str) -> Point:
        match entity.get("Pos"):
            case tags.List(items=(a, b, c)) if all(
                isinstance(v, tags.NUMERIC) for v in (a, b, c)
            ):
                return (float(a.value), float(b.value), float(c.value))
            case None:
                self._diagnostics.warn(
                    "entity-position", "Entity %s has no position; using origin", identifier
                )
            case _:
                self._diagnostics.warn(
                    "entity-position",
                    "Entity %s has a malformed position; using origin",
                    identifier,
                )
        return (0.0, 0.0, 0.0)


def _read_rotation(entity: tags.Compound) -> tuple[float, float]:
    yaw = entity.get_float("Yaw", None)
    pitch = entity.get_float("Pitch", None)
    if yaw is None and pitch is None:
        # vanilla entity data keeps both angles in one list
        match entity.get("Rotation"):
            case tags.List(items=(tags.Float(value=y), tags.Float(value=p))):
                return y, p
    return yaw or 0.0, pitch or 0.0
