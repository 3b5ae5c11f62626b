from __future__ import annotations

from enum import IntEnum
from typing import ClassVar

from msgspec import Struct


class TagKind(IntEnum):
    # binary tag ids
    BYTE = 1
    SHORT = 2
    INT = 3
    LONG = 4
    FLOAT = 5
    DOUBLE = 6
    BYTE_ARRAY = 7
    STRING = 8
    LIST = 9
    COMPOUND = 10
    INT_ARRAY = 11
    LONG_ARRAY = 12


class Byte(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.BYTE
    value: int


class Short(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.SHORT
    value: int


class Int(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.INT
    value: int


class Long(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.LONG
    value: int


class Float(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.FLOAT
    value: float


class Double(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.DOUBLE
    value: float


class String(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.STRING
    value: str


class ByteArray(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.BYTE_ARRAY
    value: tuple[int, ...] = ()


class IntArray(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.INT_ARRAY
    value: tuple[int, ...] = ()


class LongArray(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.LONG_ARRAY
    value: tuple[int, ...] = ()


class List(Struct, frozen=True, tag=True):
    """Homogeneous list. ``element`` is None only for an empty list of unknown kind."""

    kind: ClassVar[TagKind] = TagKind.LIST
    element: TagKind | None = None
    items: tuple[Tag, ...] = ()

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __getitem__(self, index: int) -> Tag:
        return self.items[index]


class Compound(Struct, frozen=True, tag=True):
    kind: ClassVar[TagKind] = TagKind.COMPOUND
    value: dict[str, Tag] = {}

    def __len__(self):
        return len(self.value)

    def __iter__(self):
        return iter(self.value)

    def __contains__(self, key: object):
        return key in self.value

    def __getitem__(self, key: str) -> Tag:
        return self.value[key]

    def get(self, key: str) -> Tag | None:
        return self.value.get(key)

    def items(self):
        return self.value.items()

    def get_int(self, key: str, default: int | None = 0) -> int | None:
        match self.value.get(key):
            case Byte(value=v) | Short(value=v) | Int(value=v) | Long(value=v):
                return v
        return default

    def get_float(self, key: str, default: float | None = 0.0) -> float | None:
        match self.value.get(key):
            case Float(value=v) | Double(value=v):
                return v
            case Byte(value=v) | Short(value=v) | Int(value=v) | Long(value=v):
                return float(v)
        return default

    def get_str(self, key: str, default: str | None = "") -> str | None:
        match self.value.get(key):
            case String(value=v):
                return v
        return default

    def replace(self, **fields: Tag) -> Compound:
        return Compound({**self.value, **fields})


Tag = (
    Byte
    | Short
    | Int
    | Long
    | Float
    | Double
    | String
    | ByteArray
    | IntArray
    | LongArray
    | List
    | Compound
)

NUMERIC = (Byte, Short, Int, Long, Float, Double)
