import pytest

from litematic_converter.core.diagnostics import Diagnostics
from litematic_converter.core.palette import BlockType
from litematic_converter.core.registry import StaticRegistry


@pytest.fixture(autouse=True)
def mock_console(monkeypatch):
    from litematic_converter.cli.console import Console

    for attr in dir(Console):
        if not attr.startswith("_") and callable(getattr(Console, attr)):
            monkeypatch.setattr(Console, attr, lambda *a, **k: None)


@pytest.fixture
def diagnostics():
    return Diagnostics()


@pytest.fixture
def registry():
    return StaticRegistry(
        blocks=[
            BlockType("minecraft:air"),
            BlockType("minecraft:stone"),
            BlockType(
                "minecraft:chest",
                properties={"facing": ["north", "south", "east", "west"]},
                defaults={"facing": "north"},
            ),
            BlockType(
                "minecraft:oak_stairs",
                properties={
                    "facing": ["north", "south", "east", "west"],
                    "half": ["top", "bottom"],
                },
                defaults={"facing": "north", "half": "bottom"},
            ),
        ],
        entities=["minecraft:pig", "minecraft:armor_stand"],
    )
