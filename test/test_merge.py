from __future__ import annotations

import pytest

from litematic_converter.core.coordinates import Vec3i
from litematic_converter.core.loader import read_schematic, write_schematic
from litematic_converter.core.merge import FORMAT_VERSION, to_region, to_schematic
from litematic_converter.core.placement import RegionPlacer
from litematic_converter.core.schema import (
    AIR,
    BlockStateDescriptor,
    Metadata,
    Region,
    Schematic,
    tile_entity_at,
)
from litematic_converter.core.tags import (
    Compound,
    Double,
    Float,
    Int,
    List,
    String,
    TagKind,
)

STONE = BlockStateDescriptor("minecraft:stone")
CHEST = BlockStateDescriptor("minecraft:chest", {"facing": "east"})


@pytest.fixture
def placement(registry, diagnostics):
    first = Region.filled(Vec3i(0, 0, 0), Vec3i(2, 2, 2), STONE)
    second = Region.filled(Vec3i(5, 0, 0), Vec3i(2, 1, 1))
    second.set_block(1, 0, 0, CHEST)
    second.set_tile_entity(tile_entity_at(1, 0, 0, id=String("minecraft:chest")))
    second.entities.append(
        Compound({
            "id": String("minecraft:pig"),
            "Pos": List(TagKind.DOUBLE, (Double(0.5), Double(0.0), Double(0.5))),
            "Yaw": Float(180.0),
        })
    )
    schematic = Schematic(
        data_version=3700,
        metadata=Metadata(name="Two parts", created_at=1),
        regions={"first": first, "second": second},
    )
    placer = RegionPlacer(blocks=registry, entities=registry, diagnostics=diagnostics)
    return schematic, placer.place(schematic)


def test_to_region(placement, diagnostics):
    _, (output, _) = placement

    region = to_region(output, diagnostics)

    assert region.position == (0, 0, 0)
    assert region.size == (7, 2, 2)
    assert region.palette == [BlockStateDescriptor(AIR), STONE, CHEST]
    assert region.get_block_index(0, 1, 1) == 1
    assert region.get_block_index(6, 0, 0) == 2
    assert region.get_block_index(5, 0, 0) == 0
    # cells no region covered become air
    assert region.get_block_index(3, 1, 0) == 0


def test_to_region_tile_entity_positions(placement, diagnostics):
    _, (output, _) = placement

    region = to_region(output, diagnostics)

    (chest,) = region.tile_entities
    assert chest.get_str("id") == "minecraft:chest"
    assert (chest["x"], chest["y"], chest["z"]) == (Int(6), Int(0), Int(0))
    assert region.find_tile_entity(6, 0, 0) == chest


def test_to_region_entities(placement, diagnostics):
    _, (output, _) = placement

    (pig,) = to_region(output, diagnostics).entities

    assert pig.get_str("id") == "minecraft:pig"
    assert pig["Pos"] == List(TagKind.DOUBLE, (Double(5.5), Double(0.0), Double(0.5)))
    assert pig.get_float("Yaw") == 180.0
    assert pig.get_float("Pitch") == 0.0


def test_to_schematic(placement, diagnostics):
    schematic, (output, _) = placement

    merged = to_schematic(
        output,
        diagnostics,
        metadata=schematic.metadata,
        data_version=schematic.data_version,
        region_name="Merged",
    )

    assert list(merged.regions) == ["Merged"]
    assert merged.data_version == 3700
    assert merged.format_version == FORMAT_VERSION
    assert merged.metadata.name == "Two parts"
    assert merged.metadata.created_at == 1
    assert merged.metadata.modified_at > 1
    # caller's metadata is left untouched
    assert schematic.metadata.modified_at == 0


def test_merged_schematic_places_the_same(placement, registry, diagnostics):
    _, (output, report) = placement

    merged = read_schematic(write_schematic(to_schematic(output, diagnostics)))
    placer = RegionPlacer(blocks=registry, entities=registry, diagnostics=diagnostics)
    merged_output, merged_report = placer.place(merged)

    assert merged_output.bounds == output.bounds
    assert merged_report.tile_entities_set == report.tile_entities_set
    assert merged_report.entities_placed == report.entities_placed
    for coords, voxel in output:
        assert merged_output[coords].block == voxel.block
