"""Command line tool that loads point clouds, builds scene graphs from them and writes them out."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from .bricks import Bricks
from .create import create_scene_graph
from .readers import UnsupportedBitsError, read_points
from .scenegraph import LOD, Group, Node, PagedLOD, VertexDraw, read_node, write_node
from .settings import CreateType, Settings


def format_number(value: int) -> str:
    """Format an integer with commas between groups of three digits."""
    return f"{int(value):,}"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pointbricks",
        description="Build point cloud scene graphs from .bin, .3dc and .asc point files.",
    )
    parser.add_argument("files", nargs="*", help="point files or scene graph files to load")
    parser.add_argument("-b", dest="num_points_per_block", type=int, help="points read per block")
    parser.add_argument("-p", dest="precision", type=float, help="precision of quantised points")
    parser.add_argument("-t", dest="transition", type=float, help="LOD transition screen ratio")
    parser.add_argument("--ps", dest="point_size", type=float, help="point size")
    parser.add_argument("--bits", dest="bits", type=int, help="bits per coordinate: 8, 10 or 16")
    parser.add_argument("--maxPagedLOD", dest="max_paged_lod", type=int, default=0,
                        help="target number of paged LODs with high resolution subgraphs")
    parser.add_argument("--no-model", dest="add_model", action="store_false",
                        help="do not add scene graph files to the output")
    parser.add_argument("--plod", action="store_true", help="create a paged LOD scene graph")
    parser.add_argument("--lod", action="store_true", help="create a LOD scene graph")
    parser.add_argument("--flat", action="store_true", help="create a flat scene graph")
    parser.add_argument("-o", dest="output", default="", help="output filename")
    parser.add_argument("-v", "--viewer", action="store_true",
                        help="report on the scene after writing it")
    return parser


def _settings_from(args: argparse.Namespace) -> Settings:
    settings = Settings()
    for name in ("num_points_per_block", "precision", "transition", "point_size", "bits"):
        value = getattr(args, name)
        if value is not None:
            setattr(settings, name, value)

    if args.plod:
        settings.create_type = CreateType.PAGEDLOD
    elif args.lod:
        settings.create_type = CreateType.LOD
    elif args.flat:
        settings.create_type = CreateType.FLAT
    return settings


def _read(path: str, settings: Settings) -> Bricks | Node | None:
    bricks = read_points(path, settings)
    if bricks is not None:
        return bricks
    return read_node(path)


def _point_draws(node: Node | None):
    if node is None:
        return
    if isinstance(node, VertexDraw):
        yield node
    elif isinstance(node, (LOD, PagedLOD)):
        for child in node.children:
            yield from _point_draws(child.node)
    elif isinstance(node, Group):
        for child in node.children:
            yield from _point_draws(child)


def main(argv=None) -> int:
    """Run the tool; returns the process exit status."""
    args = _build_parser().parse_args(argv)
    settings = _settings_from(args)

    write_only = False
    if args.output:
        output = Path(args.output)
        settings.path = output.parent / output.stem
        settings.extension = output.suffix
        write_only = not args.viewer
    elif settings.create_type is CreateType.PAGEDLOD:
        print("PagedLOD generation not possible without output filename. "
              "Please specify output filename using: -o filename.vsgb")
        return 1

    group = Group()

    for filename in args.files:
        before_read = time.perf_counter()
        try:
            loaded = _read(filename, settings)
        except UnsupportedBitsError as error:
            print(f"Error: {error}")
            loaded = None
        except (OSError, ValueError, KeyError, TypeError) as error:
            print(f"Warning: unable to read {filename}: {error}")
            loaded = None
        print(f"Time to read points = {time.perf_counter() - before_read} seconds")

        if isinstance(loaded, Bricks):
            print(f"Read {format_number(loaded.count())} points.")
            before_create = time.perf_counter()
            scene = create_scene_graph(loaded, settings)
            if scene is not None:
                group.add_child(scene)
            print(f"Time to create scene graph = {time.perf_counter() - before_create} seconds")
        elif isinstance(loaded, Node):
            if args.add_model:
                group.add_child(loaded)

    if not group.children:
        print("Error: no data loaded.")
        return 1

    scene_root: Node = group.children[0] if len(group.children) == 1 else group

    if args.output:
        write_node(scene_root, args.output)
        print(f"Written scene graph to {args.output}")
        if write_only:
            return 0

    draws = list(_point_draws(scene_root))
    num_points = sum(draw.vertex_count for draw in draws)
    print(f"Scene graph contains {format_number(len(draws))} point draws "
          f"with {format_number(num_points)} points.")
    return 0


if __name__ == "__main__":
    sys.exit(main())