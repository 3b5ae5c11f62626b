from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Annotated, NoReturn

import typer
from msgspec import json
from msgspec.structs import replace
from typer import Argument, Context, Option

from .. import __version__
from ..core.coordinates import XYZ
from ..core.diagnostics import LOGGER_NAME, Diagnostics
from ..core.loader import (
    PRIMARY_EXTENSION,
    is_schematic_path,
    load_file,
    save_file,
)
from ..core.merge import to_schematic
from ..core.placement import PlacementConfig, RegionPlacer
from ..core.registry import (
    RegistryError,
    StaticRegistry,
    TranslationRegistry,
    parse_game_version,
)
from ..core.schema import SchematicError
from .console import Console

if TYPE_CHECKING:
    from ..core.placement import PlacementReport
    from ..core.schema import Metadata, Schematic


class Origin(Enum):
    world = "world"
    local = "local"


def _show_version(ctx: Context, value: bool):
    if value:
        print(__version__)
        ctx.exit()


def _configure_logging(verbose: bool):
    logging.basicConfig(format="%(levelname)s: %(message)s")
    logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG if verbose else logging.WARNING)


SchematicPath = Annotated[
    Path,
    Argument(
        help="Litematica schematic (.litematic)",
        show_default=False,
        metavar="file",
        exists=True,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
    ),
]

Verbose = Annotated[
    bool,
    Option("--verbose", "-v", help="Log every skipped block, entity and property"),
]

Version = Annotated[
    bool,
    Option("--version", is_eager=True, hidden=True, callback=_show_version),
]


def info(
    path: SchematicPath,
    as_json: Annotated[
        bool,
        Option("--json", help="Dump the whole decoded model as JSON"),
    ] = False,
    verbose: Verbose = False,
    _version: Version = False,
):
    """Show metadata and regions of a schematic."""
    _configure_logging(verbose)
    schematic = _load(path)

    if as_json:
        typer.echo(json.format(json.encode(schematic), indent=2))
        return

    metadata = schematic.metadata
    Console.fields({
        "Name": metadata.name or path.stem,
        "Author": metadata.author,
        "Description": metadata.description,
        "Created": _format_time(metadata.created_at),
        "Modified": _format_time(metadata.modified_at),
        "Data version": schematic.data_version,
        "Format version": schematic.format_version,
    })
    Console.table(
        title=f"{len(schematic.regions)} region(s)",
        columns=[
            "Name",
            "Position",
            "Size",
            "Anchor",
            "Palette",
            "Bits",
            "Tile entities",
            "Entities",
        ],
        rows=[
            [
                name,
                _format_vec(region.position),
                _format_vec(region.size),
                _format_vec(region.anchor),
                str(len(region.palette)),
                str(region.bits_per_entry),
                str(len(region.tile_entities)),
                str(len(region.entities)),
            ]
            for name, region in schematic.regions.items()
        ],
    )


def merge(
    input_path: SchematicPath,
    output_path: Annotated[
        Path,
        Argument(
            help=f"Output schematic (.{PRIMARY_EXTENSION})",
            show_default=False,
            metavar="output",
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    registry_path: Annotated[
        Path | None,
        Option(
            "--registry",
            "-r",
            help="JSON file listing known block and entity types",
            show_default="game data of --game-version",
            metavar="file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            rich_help_panel="Registry",
        ),
    ] = None,
    game_version: Annotated[
        str,
        Option(
            "--game-version",
            help="Java Edition version whose block data is used",
            metavar="X.Y.Z",
            rich_help_panel="Registry",
        ),
    ] = "1.20.4",
    origin: Annotated[
        Origin,
        Option(
            "--origin",
            help="Keep the schematic's world position, or move it to 0 0 0",
            rich_help_panel="Output",
        ),
    ] = Origin.world,
    name: Annotated[
        str | None,
        Option("--name", help="Schematic name", rich_help_panel="Output"),
    ] = None,
    author: Annotated[
        str | None,
        Option("--author", help="Schematic author", rich_help_panel="Output"),
    ] = None,
    verbose: Verbose = False,
    _version: Version = False,
):
    """Merge every region of a schematic into a single region."""
    _configure_logging(verbose)
    try:
        if registry_path:
            registry = StaticRegistry.from_file(registry_path)
        else:
            registry = TranslationRegistry(version=parse_game_version(game_version))
    except RegistryError as e:
        _fail(str(e))

    diagnostics = Diagnostics()
    schematic = _load(path=input_path, diagnostics=diagnostics)
    placer = RegionPlacer(
        blocks=registry,
        entities=registry,
        diagnostics=diagnostics,
        config=PlacementConfig(origin=origin.value),
    )
    try:
        output, report = placer.place(schematic)
    except SchematicError as e:
        _fail(str(e))

    metadata = _override_metadata(schematic.metadata, name=name, author=author)

    merged = to_schematic(
        output,
        diagnostics,
        metadata=metadata,
        data_version=schematic.data_version,
        region_name=metadata.name or input_path.stem,
    )
    if not is_schematic_path(output_path):
        output_path = output_path.with_suffix(f".{PRIMARY_EXTENSION}")
    save_file(merged, output_path, diagnostics)

    _print_report(report, diagnostics)
    Console.success(
        "Merged {regions} into {path}",
        regions=f"{len(schematic.regions)} region(s)",
        path=output_path,
        important=True,
    )


def _override_metadata(metadata: Metadata, **overrides: str | None) -> Metadata:
    return replace(metadata, **{k: v for k, v in overrides.items() if v is not None})


def _fail(message: str) -> NoReturn:
    Console.warn(message, important=True)
    raise typer.Exit(code=2)


def _load(path: Path, diagnostics: Diagnostics | None = None) -> Schematic:
    try:
        return load_file(path, diagnostics)
    except SchematicError as e:
        _fail(str(e))


def _print_report(report: PlacementReport, diagnostics: Diagnostics):
    Console.info(
        "Placed {blocks} with {tile_entities}, and {entities}.",
        blocks=f"{report.blocks_set} blocks",
        tile_entities=f"{report.tile_entities_set} tile entities",
        entities=f"{report.entities_placed} entities",
    )
    if report.voxels_skipped or report.entities_skipped:
        Console.warn(
            "Skipped {voxels} and {entities}.",
            voxels=f"{report.voxels_skipped} blocks",
            entities=f"{report.entities_skipped} entities",
        )
    for category, count in sorted(diagnostics.counts.items()):
        Console.warn("{category}: {count}", category=category, count=count)


def _format_vec(vec: XYZ) -> str:
    return " ".join(map(str, vec))


def _format_time(timestamp_ms: int) -> str:
    if timestamp_ms <= 0:
        return ""
    moment = datetime.fromtimestamp(timestamp_ms / 1000)
    return moment.isoformat(sep=" ", timespec="seconds")
