from __future__ import annotations

import re
from functools import cache, cached_property
from typing import TYPE_CHECKING, Any

from amulet_nbt import from_snbt
from msgspec import DecodeError, Struct, ValidationError, json

from .palette import BlockType, EntityType, namespaced

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

GameVersion = tuple[int, ...]

DEFAULT_PLATFORM = "java"
DEFAULT_VERSION: GameVersion = (1, 20, 4)

_IDENTIFIER = re.compile(r"^[a-z0-9_.-]+:[a-z0-9_./-]+$")


class RegistryError(Exception):
    pass


class RegistryFile(Struct):
    blocks: list[BlockType] = []
    entities: list[str] = []


class StaticRegistry:
    def __init__(
        self,
        blocks: Iterable[BlockType] = (),
        entities: Iterable[str] = (),
    ):
        self._blocks = {namespaced(b.name): b for b in blocks}
        self._entities = {namespaced(e): EntityType(namespaced(e)) for e in entities}

    @classmethod
    def from_file(cls, path: Path) -> StaticRegistry:
        try:
            data = json.decode(path.read_bytes(), type=RegistryFile)
        except FileNotFoundError:
            raise RegistryError(f"Registry file '{path}' does not exist.")
        except (DecodeError, ValidationError) as e:
            raise RegistryError(f"Invalid registry file '{path}': {e}")
        return cls(data.blocks, data.entities)

    def get_block_type(self, name: str) -> BlockType | None:
        return self._blocks.get(namespaced(name))

    def get_entity_type(self, identifier: str) -> EntityType | None:
        return self._entities.get(namespaced(identifier))


class TranslationRegistry:
    """Block types from the game data bundled with PyMCTranslate.

    Entities are not covered by that data, so any well-formed namespaced
    identifier is accepted.
    """

    def __init__(
        self,
        platform: str = DEFAULT_PLATFORM,
        version: GameVersion = DEFAULT_VERSION,
    ):
        self.platform = platform
        self.version = version

    @cached_property
    def _blocks(self):
        # importing PyMCTranslate is slow, delay it until needed
        import PyMCTranslate

        manager = PyMCTranslate.new_translation_manager()
        return manager.get_version(self.platform, self.version).block

    @cache
    def get_block_type(self, name: str) -> BlockType | None:
        name = namespaced(name)
        namespace, base_name = name.split(":", 1)
        try:
            specification = self._blocks.get_specification(namespace, base_name)
        except KeyError:
            return None

        return BlockType(
            name=name,
            properties={
                key: [_snbt_text(v) for v in values]
                for key, values in specification.get("properties", {}).items()
            },
            defaults={
                key: _snbt_text(value)
                for key, value in specification.get("defaults", {}).items()
            },
        )

    def get_entity_type(self, identifier: str) -> EntityType | None:
        identifier = namespaced(identifier)
        if not _IDENTIFIER.match(identifier):
            return None
        return EntityType(identifier)

    def __hash__(self):
        return hash((self.platform, self.version))


def parse_game_version(text: str) -> GameVersion:
    try:
        version = tuple(int(part) for part in text.strip().split("."))
    except ValueError:
        raise RegistryError(f"Invalid game version '{text}'; expected e.g. 1.20.4")
    if not 1 <= len(version) <= 4:
        raise RegistryError(f"Invalid game version '{text}'; expected e.g. 1.20.4")
    return version


def _snbt_text(value: Any) -> str:
    # specification values are SNBT strings like '"north"'
    if isinstance(value, str):
        value = from_snbt(value)
    return str(value.py_data)
