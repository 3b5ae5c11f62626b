from __future__ import annotations

from pathlib import Path

import pytest
from msgspec import json
from typer.testing import CliRunner

from litematic_converter.cli.commands import _override_metadata
from litematic_converter.core.coordinates import Vec3i
from litematic_converter.core.loader import load_file, save_file
from litematic_converter.core.schema import (
    BlockStateDescriptor,
    Metadata,
    Region,
    Schematic,
)
from litematic_converter.main import create_app

runner = CliRunner()
app = create_app()


@pytest.fixture
def schematic_path(tmp_path: Path) -> Path:
    first = Region.filled(
        Vec3i(100, 64, 100), Vec3i(2, 2, 2), BlockStateDescriptor("minecraft:stone")
    )
    second = Region.filled(Vec3i(104, 64, 100), Vec3i(-2, 1, 1))
    path = tmp_path / "build.litematic"
    save_file(
        Schematic(
            data_version=3700,
            format_version=6,
            metadata=Metadata(name="Build", author="someone"),
            regions={"first": first, "second": second},
        ),
        path,
    )
    return path


@pytest.fixture
def registry_path(tmp_path: Path) -> Path:
    path = tmp_path / "registry.json"
    path.write_bytes(
        json.encode({
            "blocks": [{"name": "minecraft:air"}, {"name": "minecraft:stone"}],
            "entities": [],
        })
    )
    return path


def test_info(schematic_path: Path):
    result = runner.invoke(app, ["info", str(schematic_path)])
    assert result.exit_code == 0, result.output


def test_info_json(schematic_path: Path):
    result = runner.invoke(app, ["info", str(schematic_path), "--json"])

    assert result.exit_code == 0, result.output
    document = json.decode(result.stdout)
    assert document["data_version"] == 3700
    assert document["metadata"]["name"] == "Build"
    assert sorted(document["regions"]) == ["first", "second"]
    assert document["regions"]["second"]["size"] == [-2, 1, 1]


def test_info_invalid_file(tmp_path: Path):
    path = tmp_path / "broken.litematic"
    path.write_bytes(b"\x1f\x8bnot really gzip")

    result = runner.invoke(app, ["info", str(path)])

    assert result.exit_code == 2
    assert "Traceback" not in result.output


@pytest.mark.parametrize(
    "origin, position", [("world", (100, 64, 100)), ("local", (0, 0, 0))]
)
def test_merge(
    schematic_path: Path, registry_path: Path, tmp_path: Path, origin, position
):
    output_path = tmp_path / "merged"

    result = runner.invoke(
        app,
        [
            "merge",
            str(schematic_path),
            str(output_path),
            "--registry",
            str(registry_path),
            "--origin",
            origin,
            "--author",
            "me",
        ],
    )

    assert result.exit_code == 0, result.output
    merged = load_file(output_path.with_suffix(".litematic"))
    assert list(merged.regions) == ["Build"]
    assert merged.metadata.author == "me"
    (region,) = merged.regions.values()
    assert region.position == position
    assert region.size == (5, 2, 2)


def test_merge_missing_registry(schematic_path: Path, tmp_path: Path):
    result = runner.invoke(
        app,
        [
            "merge",
            str(schematic_path),
            str(tmp_path / "merged.litematic"),
            "--registry",
            str(tmp_path / "missing.json"),
        ],
    )
    assert result.exit_code == 2


def test_merge_invalid_game_version(schematic_path: Path, tmp_path: Path):
    result = runner.invoke(
        app,
        [
            "merge",
            str(schematic_path),
            str(tmp_path / "merged.litematic"),
            "--game-version",
            "latest",
        ],
    )
    assert result.exit_code == 2
    assert "Traceback" not in result.output


def test_metadata_overrides_leave_source_untouched():
    source = Metadata(name="Build", author="someone", created_at=5)

    metadata = _override_metadata(source, name=None, author="me")

    assert metadata == Metadata(name="Build", author="me", created_at=5)
    assert source.author == "someone"
