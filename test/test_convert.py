from amulet_nbt import (
    ByteArrayTag,
    ByteTag,
    CompoundTag,
    DoubleTag,
    IntTag,
    ListTag,
    LongArrayTag,
    LongTag,
    StringTag,
)

from litematic_converter.core.convert import (
    compound_to_document,
    compound_to_native,
    to_native,
)
from litematic_converter.core.tags import (
    Byte,
    ByteArray,
    Compound,
    Double,
    Float,
    Int,
    IntArray,
    List,
    Long,
    LongArray,
    Short,
    String,
    TagKind,
)

EVERY_KIND = Compound({
    "byte": Byte(-1),
    "short": Short(300),
    "int": Int(-70000),
    "long": Long(2**40),
    "float": Float(0.5),
    "double": Double(1.25),
    "string": String("minecraft:chest"),
    "bytes": ByteArray((1, -1, 127)),
    "ints": IntArray((1, 2, -3)),
    "longs": LongArray((-1, 2**62)),
    "items": List(
        TagKind.COMPOUND,
        (
            Compound({"Slot": Byte(0), "id": String("minecraft:stone")}),
            Compound({"Slot": Byte(1), "Count": Byte(64)}),
        ),
    ),
    "nested": Compound({"Pos": List(TagKind.DOUBLE, (Double(1.5), Double(-2.0)))}),
    "empty": Compound(),
})


def test_round_trip(diagnostics):
    native = compound_to_native(EVERY_KIND, diagnostics)
    assert compound_to_document(native, diagnostics) == EVERY_KIND
    assert diagnostics.total_warnings == 0


def test_native_types(diagnostics):
    native = compound_to_native(EVERY_KIND, diagnostics)

    assert isinstance(native["byte"], ByteTag)
    assert isinstance(native["long"], LongTag)
    assert native["long"].py_int == 2**40
    assert isinstance(native["double"], DoubleTag)
    assert isinstance(native["string"], StringTag)
    assert isinstance(native["bytes"], ByteArrayTag)
    assert isinstance(native["longs"], LongArrayTag)
    assert isinstance(native["items"], ListTag)
    assert native["items"].list_data_type == TagKind.COMPOUND
    assert isinstance(native["items"][0], CompoundTag)
    assert native["nested"]["Pos"].list_data_type == TagKind.DOUBLE


def test_empty_list_of_unknown_kind(diagnostics):
    native = to_native(List(), diagnostics)

    assert isinstance(native, ListTag)
    assert len(native) == 0
    assert native.list_data_type == TagKind.COMPOUND


def test_list_kind_from_first_item(diagnostics):
    native = to_native(List(None, (Int(1), Int(2))), diagnostics)

    assert native.list_data_type == TagKind.INT
    assert [tag.py_int for tag in native] == [1, 2]


def test_mismatched_list_items_are_dropped(diagnostics):
    native = to_native(List(TagKind.INT, (Int(1), String("a"), Int(3))), diagnostics)

    assert [tag.py_int for tag in native] == [1, 3]
    assert diagnostics.counts["unsupported-tag"] == 1


def test_native_list_to_document(diagnostics):
    native = CompoundTag({
        "Rotation": ListTag([IntTag(1), IntTag(2)], list_data_type=TagKind.INT)
    })

    document = compound_to_document(native, diagnostics)

    assert document["Rotation"] == List(TagKind.INT, (Int(1), Int(2)))
