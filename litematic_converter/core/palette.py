from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from amulet.api.block import Block
from amulet_nbt import StringTag
from msgspec import Struct

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .diagnostics import Diagnostics
    from .schema import BlockStateDescriptor

DEFAULT_NAMESPACE = "minecraft"


def split_name(name: str) -> tuple[str, str]:
    if ":" not in name:
        return DEFAULT_NAMESPACE, name
    namespace, base_name = name.split(":", 1)
    return namespace, base_name


def namespaced(name: str) -> str:
    return ":".join(split_name(name.strip().lower()))


class BlockType(Struct, frozen=True):
    name: str
    properties: dict[str, list[str]] = {}
    defaults: dict[str, str] = {}

    def default_state(self) -> Block:
        namespace, base_name = split_name(self.name)
        return Block(
            namespace,
            base_name,
            {key: StringTag(value) for key, value in self.defaults.items()},
        )


class EntityType(Struct, frozen=True):
    name: str


class BlockRegistry(Protocol):
    def get_block_type(self, name: str) -> BlockType | None: ...


class EntityRegistry(Protocol):
    def get_entity_type(self, identifier: str) -> EntityType | None: ...


class PaletteResolver:
    def __init__(self, registry: BlockRegistry, diagnostics: Diagnostics):
        self._registry = registry
        self._diagnostics = diagnostics

    def resolve(self, descriptor: BlockStateDescriptor) -> Block | None:
        block_type = self._registry.get_block_type(namespaced(descriptor.name))
        if block_type is None:
            self._diagnostics.warn(
                "unknown-block", "Unknown block type: %s", descriptor.name
            )
            return None

        state = block_type.default_state()
        if not descriptor.properties:
            return state

        properties = dict(state.properties)
        for prop_name, prop_value in descriptor.properties.items():
            match = _find_property(block_type, prop_name, prop_value)
            if match is None:
                self._diagnostics.debug(
                    "Dropped property %s=%s of %s",
                    prop_name,
                    prop_value,
                    descriptor.name,
                )
                continue
            name, value = match
            properties[name] = StringTag(value)

        return Block(state.namespace, state.base_name, properties)

    def resolve_palette(
        self, palette: Iterable[BlockStateDescriptor]
    ) -> list[Block | None]:
        # one lookup per palette entry, reused by every voxel that references it
        return [self.resolve(descriptor) for descriptor in palette]


def _find_property(
    block_type: BlockType, prop_name: str, prop_value: str
) -> tuple[str, str] | None:
    for name, values in block_type.properties.items():
        if name.lower() != prop_name.lower():
            continue
        for value in values:
            if value.lower() == prop_value.lower():
                return name, value
        return None
    return None
