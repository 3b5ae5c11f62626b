from __future__ import annotations

import time
from typing import TYPE_CHECKING

from msgspec.structs import replace

from . import packing, tags
from .convert import compound_to_document
from .schema import AIR, BlockStateDescriptor, Metadata, Region, Schematic

if TYPE_CHECKING:
    from .diagnostics import Diagnostics
    from .placement import CombinedOutput, PlacedEntity

DEFAULT_REGION_NAME = "Unnamed"

# Litematica's own schematic format version
FORMAT_VERSION = 6


def to_region(output: CombinedOutput, diagnostics: Diagnostics) -> Region:
    """Flatten a combined output into one region anchored at its minimum corner."""
    palette = [BlockStateDescriptor(AIR)]
    palette_lookup = {palette[0].key: 0}

    indices = [0] * output.bounds.volume
    tile_entities = []
    for i, voxel in enumerate(output.voxels):
        if voxel is None:
            continue
        descriptor = BlockStateDescriptor.from_block(voxel.block)
        if (index := palette_lookup.get(descriptor.key)) is None:
            index = palette_lookup[descriptor.key] = len(palette)
            palette.append(descriptor)
        indices[i] = index

        if voxel.payload is not None:
            x, y, z = output.bounds.local_coords(i)
            payload = compound_to_document(voxel.payload, diagnostics)
            tile_entities.append(payload.replace(x=tags.Int(x), y=tags.Int(y), z=tags.Int(z)))

    bits = packing.bits_per_entry(len(palette))
    return Region(
        position=output.bounds.min_corner,
        size=output.bounds.size,
        palette=palette,
        packed_indices=packing.encode(indices, bits),
        tile_entities=tile_entities,
        entities=[_entity_to_document(e, diagnostics) for e in output.entities],
    )


def to_schematic(
    output: CombinedOutput,
    diagnostics: Diagnostics,
    *,
    metadata: Metadata | None = None,
    data_version: int = 0,
    region_name: str = DEFAULT_REGION_NAME,
) -> Schematic:
    now = int(time.time() * 1000)
    metadata = replace(metadata or Metadata(created_at=now), modified_at=now)
    return Schematic(
        data_version=data_version,
        format_version=FORMAT_VERSION,
        metadata=metadata,
        regions={region_name: to_region(output, diagnostics)},
    )


def _entity_to_document(entity: PlacedEntity, diagnostics: Diagnostics) -> tags.Compound:
    payload = compound_to_document(entity.payload, diagnostics)
    return payload.replace(
        id=tags.String(entity.entity_type.name),
        Pos=tags.List(tags.TagKind.DOUBLE, tuple(tags.Double(c) for c in entity.position)),
        Yaw=tags.Float(entity.yaw),
        Pitch=tags.Float(entity.pitch),
    )
