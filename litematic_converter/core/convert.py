from __future__ import annotations

from typing import TYPE_CHECKING

from amulet_nbt import (
    ByteArrayTag,
    ByteTag,
    CompoundTag,
    DoubleTag,
    FloatTag,
    IntArrayTag,
    IntTag,
    ListTag,
    LongArrayTag,
    LongTag,
    ShortTag,
    StringTag,
)

from . import tags
from .tags import TagKind

if TYPE_CHECKING:
    from amulet_nbt import AbstractBaseTag

    from .diagnostics import Diagnostics

DEFAULT_LIST_KIND = TagKind.COMPOUND


def to_native(tag: tags.Tag, diagnostics: Diagnostics) -> AbstractBaseTag | None:
    match tag:
        case tags.Byte(value=v):
            return ByteTag(v)
        case tags.Short(value=v):
            return ShortTag(v)
        case tags.Int(value=v):
            return IntTag(v)
        case tags.Long(value=v):
            return LongTag(v)
        case tags.Float(value=v):
            return FloatTag(v)
        case tags.Double(value=v):
            return DoubleTag(v)
        case tags.String(value=v):
            return StringTag(v)
        case tags.ByteArray(value=v):
            return ByteArrayTag(list(v))
        case tags.IntArray(value=v):
            return IntArrayTag(list(v))
        case tags.LongArray(value=v):
            return LongArrayTag(list(v))
        case tags.List():
            return _list_to_native(tag, diagnostics)
        case tags.Compound():
            return compound_to_native(tag, diagnostics)
        case _:
            diagnostics.warn(
                "unsupported-tag", "Unsupported tag %r; dropped", type(tag).__name__
            )
            return None


def compound_to_native(compound: tags.Compound, diagnostics: Diagnostics) -> CompoundTag:
    native = CompoundTag()
    for key, value in compound.items():
        if (converted := to_native(value, diagnostics)) is not None:
            native[key] = converted
        else:
            diagnostics.debug("Dropped key '%s' during conversion", key)
    return native


def _list_to_native(list_: tags.List, diagnostics: Diagnostics) -> ListTag:
    element = list_.element
    if element is None:
        if not list_.items:
            return ListTag([], list_data_type=DEFAULT_LIST_KIND)
        element = list_.items[0].kind

    items = []
    for item in list_.items:
        if item.kind != element:
            diagnostics.warn(
                "unsupported-tag",
                "List element of kind %s in list of %s; dropped",
                item.kind.name,
                element.name,
            )
            continue
        if (converted := to_native(item, diagnostics)) is not None:
            items.append(converted)
    return ListTag(items, list_data_type=int(element))


def to_document(tag: AbstractBaseTag, diagnostics: Diagnostics) -> tags.Tag | None:
    match tag:
        case ByteTag():
            return tags.Byte(tag.py_int)
        case ShortTag():
            return tags.Short(tag.py_int)
        case IntTag():
            return tags.Int(tag.py_int)
        case LongTag():
            return tags.Long(tag.py_int)
        case FloatTag():
            return tags.Float(tag.py_float)
        case DoubleTag():
            return tags.Double(tag.py_float)
        case StringTag():
            return tags.String(tag.py_str)
        case ByteArrayTag():
            return tags.ByteArray(tuple(int(v) for v in tag.np_array))
        case IntArrayTag():
            return tags.IntArray(tuple(int(v) for v in tag.np_array))
        case LongArrayTag():
            return tags.LongArray(tuple(int(v) for v in tag.np_array))
        case ListTag():
            return _list_to_document(tag, diagnostics)
        case CompoundTag():
            return compound_to_document(tag, diagnostics)
        case _:
            diagnostics.warn(
                "unsupported-tag", "Unsupported tag %r; dropped", type(tag).__name__
            )
            return None


def compound_to_document(compound: CompoundTag, diagnostics: Diagnostics) -> tags.Compound:
    value: dict[str, tags.Tag] = {}
    for key, native in compound.items():
        if (converted := to_document(native, diagnostics)) is not None:
            value[key] = converted
        else:
            diagnostics.debug("Dropped key '%s' during conversion", key)
    return tags.Compound(value)


def _list_to_document(list_: ListTag, diagnostics: Diagnostics) -> tags.List:
    items = tuple(
        converted
        for native in list_
        if (converted := to_document(native, diagnostics)) is not None
    )
    try:
        element = TagKind(list_.list_data_type)
    except ValueError:
        # TAG_End: declared but unused element kind of an empty list
        element = items[0].kind if items else None
    return tags.List(element, items)
