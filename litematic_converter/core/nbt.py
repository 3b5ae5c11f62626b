from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from amulet_nbt import (
    CompoundTag,
    IntTag,
    ListTag,
    LongArrayTag,
    LongTag,
    StringTag,
)

from . import packing
from .convert import compound_to_document, compound_to_native
from .coordinates import Vec3i
from .schema import (
    BlockStateDescriptor,
    Metadata,
    Region,
    Schematic,
    SchematicError,
)
from .tags import TagKind

if TYPE_CHECKING:
    from amulet_nbt import AbstractBaseTag

    from . import tags
    from .diagnostics import Diagnostics


class SchematicFormatError(SchematicError):
    pass


T = TypeVar("T", bound="AbstractBaseTag")

_SIGN_BIT = 1 << 63


def schematic_from_nbt(root: CompoundTag, diagnostics: Diagnostics) -> Schematic:
    regions_tag = _get(root, "Regions", CompoundTag)
    regions = {}
    if regions_tag is not None:
        for name, region_tag in regions_tag.items():
            if not isinstance(region_tag, CompoundTag):
                raise SchematicFormatError(
                    f"Regions.{name}: expected CompoundTag, got {type(region_tag).__name__}"
                )
            regions[name] = _region_from_nbt(region_tag, name, diagnostics)

    return Schematic(
        data_version=_get_int(root, "MinecraftDataVersion"),
        format_version=_get_int(root, "Version"),
        metadata=_metadata_from_nbt(_get(root, "Metadata", CompoundTag) or CompoundTag()),
        regions=regions,
    )


def schematic_to_nbt(schematic: Schematic, diagnostics: Diagnostics) -> CompoundTag:
    return CompoundTag({
        "MinecraftDataVersion": IntTag(schematic.data_version),
        "Version": IntTag(schematic.format_version),
        "Metadata": _metadata_to_nbt(schematic.metadata),
        "Regions": CompoundTag({
            name: _region_to_nbt(region, diagnostics)
            for name, region in schematic.regions.items()
        }),
    })


def _metadata_from_nbt(tag: CompoundTag) -> Metadata:
    return Metadata(
        name=_get_str(tag, "Name"),
        author=_get_str(tag, "Author"),
        description=_get_str(tag, "Description"),
        created_at=_get_int(tag, "TimeCreated"),
        modified_at=_get_int(tag, "TimeModified"),
    )


def _metadata_to_nbt(metadata: Metadata) -> CompoundTag:
    return CompoundTag({
        "Name": StringTag(metadata.name),
        "Author": StringTag(metadata.author),
        "Description": StringTag(metadata.description),
        "TimeCreated": LongTag(metadata.created_at),
        "TimeModified": LongTag(metadata.modified_at),
    })


def _region_from_nbt(tag: CompoundTag, name: str, diagnostics: Diagnostics) -> Region:
    path = f"Regions.{name}"

    palette = [
        _descriptor_from_nbt(entry, diagnostics)
        for entry in _get_compound_list(tag, "BlockStatePalette", path)
    ]

    block_states = _get(tag, "BlockStates", LongArrayTag, path=path)
    words = (
        [int(v) & packing.WORD_MASK for v in block_states.np_array]
        if block_states is not None
        else []
    )

    return Region(
        position=_vec_from_nbt(_get(tag, "Position", CompoundTag, path=path)),
        size=_vec_from_nbt(_get(tag, "Size", CompoundTag, path=path)),
        palette=palette,
        packed_indices=words,
        tile_entities=[
            compound_to_document(entry, diagnostics)
            for entry in _get_compound_list(tag, "TileEntities", path)
        ],
        entities=[
            compound_to_document(entry, diagnostics)
            for entry in _get_compound_list(tag, "Entities", path)
        ],
    )


def _region_to_nbt(region: Region, diagnostics: Diagnostics) -> CompoundTag:
    return CompoundTag({
        "Position": _vec_to_nbt(region.position),
        "Size": _vec_to_nbt(region.size),
        "BlockStatePalette": ListTag(
            [_descriptor_to_nbt(entry) for entry in region.palette],
            list_data_type=TagKind.COMPOUND,
        ),
        "BlockStates": LongArrayTag([_to_signed(w) for w in region.packed_indices]),
        "TileEntities": _compound_list_to_nbt(region.tile_entities, diagnostics),
        "Entities": _compound_list_to_nbt(region.entities, diagnostics),
    })


def _descriptor_from_nbt(tag: CompoundTag, diagnostics: Diagnostics) -> BlockStateDescriptor:
    properties = {}
    if (props := _get(tag, "Properties", CompoundTag)) is not None:
        for key, value in props.items():
            if isinstance(value, StringTag):
                properties[key] = value.py_str
            else:
                diagnostics.debug(
                    "Non-string block property %s=%s", key, value.to_snbt()
                )
                properties[key] = str(value.py_data)
    return BlockStateDescriptor(_get_str(tag, "Name"), properties)


def _descriptor_to_nbt(descriptor: BlockStateDescriptor) -> CompoundTag:
    tag = CompoundTag({"Name": StringTag(descriptor.name)})
    if descriptor.properties:
        tag["Properties"] = CompoundTag({
            k: StringTag(v) for k, v in descriptor.properties.items()
        })
    return tag


def _vec_from_nbt(tag: CompoundTag | None) -> Vec3i:
    if tag is None:
        return Vec3i()
    return Vec3i(_get_int(tag, "x"), _get_int(tag, "y"), _get_int(tag, "z"))


def _vec_to_nbt(vec: Vec3i) -> CompoundTag:
    return CompoundTag({"x": IntTag(vec.x), "y": IntTag(vec.y), "z": IntTag(vec.z)})


def _compound_list_to_nbt(compounds: list[tags.Compound], diagnostics: Diagnostics):
    return ListTag(
        [compound_to_native(c, diagnostics) for c in compounds],
        list_data_type=TagKind.COMPOUND,
    )


def _get_compound_list(tag: CompoundTag, key: str, path: str) -> list[CompoundTag]:
    list_tag = _get(tag, key, ListTag, path=path)
    if list_tag is None or not len(list_tag):
        return []
    if list_tag.list_data_type != TagKind.COMPOUND:
        raise SchematicFormatError(f"{path}.{key}: expected a list of compounds")
    return list(list_tag)


def _get(tag: CompoundTag, key: str, cls: type[T], *, path: str = "") -> T | None:
    value = tag.get(key)
    if value is None:
        return None
    if not isinstance(value, cls):
        where = f"{path}.{key}" if path else key
        raise SchematicFormatError(
            f"{where}: expected {cls.__name__}, got {type(value).__name__}"
        )
    return value


def _get_int(tag: CompoundTag, key: str) -> int:
    value = tag.get(key)
    if value is None:
        return 0
    try:
        return value.py_int
    except AttributeError:
        raise SchematicFormatError(f"{key}: expected an integer, got {type(value).__name__}")


def _get_str(tag: CompoundTag, key: str) -> str:
    value = tag.get(key)
    if value is None:
        return ""
    if not isinstance(value, StringTag):
        raise SchematicFormatError(f"{key}: expected a string, got {type(value).__name__}")
    return value.py_str


def _to_signed(word: int) -> int:
    word &= packing.WORD_MASK
    return word - (1 << 64) if word & _SIGN_BIT else word
