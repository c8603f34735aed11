"""Build point cloud scene graphs (flat, LOD or paged LOD) from bricks."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from .bricks import Brick, Bricks, Key, PackedPoint
from .readers import UnsupportedBitsError
from .scenegraph import (
    LOD,
    CullGroup,
    Group,
    LODChild,
    MatrixTransform,
    Node,
    PagedLOD,
    Sphere,
    StateGroup,
    write_node,
)
from .settings import Box, CreateType, Settings
from .shaderset import ShaderSet, create_particle_image, create_points_flat_shaded_shader_set

logger = logging.getLogger(__name__)

_PARTICLE_IMAGE_SIZE = 64

# Order in which the eight finer bricks under a brick are visited.
_OCTANTS = (
    (0, 0, 0, 0),
    (1, 0, 0, 0),
    (0, 1, 0, 0),
    (1, 1, 0, 0),
    (0, 0, 1, 0),
    (1, 0, 1, 0),
    (0, 1, 1, 0),
    (1, 1, 1, 0),
)

# Vertex formats and strides (in bytes) of the packed positions for each supported bit depth.
_VERTEX_LAYOUTS = {
    8: ("R8G8B8_UNORM", 3),
    10: ("A2R10G10B10_UNORM_PACK32", 4),
    16: ("R16G16B16_UNORM", 6),
}

_UP_TO_TILE_ROOT = "../../../../"


def _translate(offset) -> tuple[tuple[float, ...], ...]:
    x, y, z = (float(c) for c in offset)
    return (
        (1.0, 0.0, 0.0, x),
        (0.0, 1.0, 0.0, y),
        (0.0, 0.0, 1.0, z),
        (0.0, 0.0, 0.0, 1.0),
    )


def _trunc_div2(value: int) -> int:
    """Integer halving that rounds toward zero."""
    quotient = abs(value) // 2
    return quotient if value >= 0 else -quotient


def create_scene_graph(bricks: Bricks, settings: Settings) -> Node | None:
    """Create a scene graph from ``bricks`` of the kind ``settings.create_type`` asks for.

    Returns None when there are no bricks.
    """
    if not bricks:
        logger.warning("bricks is empty, cannot create scene graph")
        return None

    if settings.create_type is CreateType.FLAT:
        bound = settings.bound
        cull_group = CullGroup(bound=Sphere(center=bound.center(), radius=bound.diagonal() * 0.5))

        if bound.valid():
            settings.offset = bound.center()

        transform = MatrixTransform(matrix=_translate(settings.offset))
        cull_group.add_child(transform)

        group = create_state_group(settings)
        transform.add_child(group)

        drawn_bound = Box()
        for key, brick in bricks.items():
            node = brick.create_rendering(bricks.settings, key, drawn_bound)
            if node is not None:
                group.add_child(node)

        return cull_group

    keys = list(bricks)
    origin_x = min(key.x for key in keys)
    origin_y = min(key.y for key in keys)
    origin_z = min(key.z for key in keys)

    translated = Bricks(settings)
    for key, brick in bricks.items():
        translated[Key(key.x - origin_x, key.y - origin_y, key.z - origin_z, key.w)] = brick

    brick_size = settings.precision * 2.0 ** settings.bits
    offset = (origin_x * brick_size, origin_y * brick_size, origin_z * brick_size)
    settings.offset = (0.0, 0.0, 0.0)

    transform = MatrixTransform(matrix=_translate(offset))

    levels: list[Bricks] = [translated]
    while len(levels[-1]) > 1:
        destination = Bricks(settings)
        levels.append(destination)
        if not generate_level(levels[-2], destination, settings):
            break

    logger.debug("levels = %d", len(levels))

    model = create_paged_lod(levels, settings)
    if model is not None:
        transform.add_child(model)

    return transform


def generate_level(source: Bricks, destination: Bricks, settings: Settings) -> bool:
    """Fill ``destination`` with a half resolution copy of ``source`` keeping every fourth point.

    Returns True if ``destination`` ends up with any bricks.
    """
    bits = settings.bits
    for source_key, source_brick in source.items():
        destination_key = Key(
            _trunc_div2(source_key.x),
            _trunc_div2(source_key.y),
            _trunc_div2(source_key.z),
            source_key.w * 2,
        )
        ox = (source_key.x & 1) << bits
        oy = (source_key.y & 1) << bits
        oz = (source_key.z & 1) << bits

        destination_points = destination.get_or_create(destination_key).points
        for (vx, vy, vz), colour in source_brick.points[::4]:
            destination_points.append(
                PackedPoint(
                    v=(
                        ((vx + ox) // 2) & 0xFFFF,
                        ((vy + oy) // 2) & 0xFFFF,
                        ((vz + oz) // 2) & 0xFFFF,
                    ),
                    c=colour,
                )
            )
    return bool(destination)


def _attribute_define(shader_set: ShaderSet, name: str) -> str:
    for binding in shader_set.attribute_bindings:
        if binding.name == name:
            return binding.define
    return ""


def _descriptor_define(shader_set: ShaderSet, name: str) -> str:
    for binding in shader_set.descriptor_bindings:
        if binding.name == name:
            return binding.define
    return ""


def create_state_group(settings: Settings) -> StateGroup:
    """Create the state group holding the point sprite pipeline, texture and material.

    Raises UnsupportedBitsError when ``settings.bits`` is not 8, 10 or 16.
    """
    layout = _VERTEX_LAYOUTS.get(settings.bits)
    if layout is None:
        raise UnsupportedBitsError(settings.bits)
    vertex_format, vertex_stride = layout

    texture = create_particle_image(_PARTICLE_IMAGE_SIZE)
    shader_set = create_points_flat_shaded_shader_set(settings.options)

    defines = {"VSG_POINT_SPRITE"}

    arrays = [
        ("vsg_Vertex", "VERTEX", vertex_stride, vertex_format),
        ("vsg_Normal", "INSTANCE", 12, "R32G32B32_SFLOAT"),
        ("vsg_Color", "VERTEX", 4, "R8G8B8A8_UNORM"),
        ("vsg_PositionScale", "INSTANCE", 16, "R32G32B32A32_SFLOAT"),
        ("vsg_PointSize", "INSTANCE", 8, "R32G32_SFLOAT"),
    ]
    vertex_inputs = []
    for name, input_rate, stride, fmt in arrays:
        define = _attribute_define(shader_set, name)
        if define:
            defines.add(define)
        vertex_inputs.append({"name": name, "input_rate": input_rate, "stride": stride, "format": fmt})

    diffuse_define = _descriptor_define(shader_set, "diffuseMap")
    if diffuse_define:
        defines.add(diffuse_define)

    state: dict[str, Any] = {
        "shader_stages": list(shader_set.stages),
        "defines": sorted(defines),
        "vertex_inputs": vertex_inputs,
        "textures": {
            "diffuseMap": {
                "format": "R8G8B8A8_UNORM",
                "image": [[list(pixel) for pixel in row] for row in texture],
                "sampler": {"address_mode_u": "CLAMP_TO_EDGE", "address_mode_v": "CLAMP_TO_EDGE"},
            }
        },
        "descriptors": {
            "material": {"type": "PhongMaterial", "alpha_mask": 1.0, "alpha_mask_cutoff": 0.0025}
        },
        "topology": "POINT_LIST",
        "blending": False,
    }
    return StateGroup(state=state)


def _group_of(children: list[Node]) -> Node:
    if len(children) == 1:
        return children[0]
    return Group(children=list(children))


def subtile(
    settings: Settings,
    levels: Sequence[Bricks],
    key,
    bound: Box,
    root: bool = False,
) -> Node | None:
    """Build the subgraph for the brick at ``key`` in ``levels[0]``, refining into ``levels[1:]``.

    ``levels`` runs from the current (coarse) level down to the finest. ``bound`` grows to
    cover the geometry placed below. Returns None when there is no brick at ``key``.
    """
    if not levels:
        return None

    key = Key(*key)
    brick: Brick | None = levels[0].get(key)
    if brick is None:
        return None

    finer = levels[1:]
    if not finer:
        return brick.create_rendering(settings, key, bound)

    subkey = Key(key.x * 2, key.y * 2, key.z * 2, key.w // 2)
    subtiles_bound = Box()
    children: list[Node] = []
    for octant in _OCTANTS:
        child = subtile(settings, finer, subkey + octant, subtiles_bound)
        if child is not None:
            children.append(child)

    local_bound = Box()
    brick_node = brick.create_rendering(settings, key, local_bound)

    if not children:
        return brick_node

    transition = settings.transition
    if subtiles_bound.valid():
        bound.expand(subtiles_bound)
        sphere = Sphere(center=subtiles_bound.center(), radius=subtiles_bound.diagonal() * 0.5)

        brick_precision = settings.precision * float(key.w)
        brick_size = brick_precision * 2.0 ** settings.bits
        extents = [hi - lo for lo, hi in zip(subtiles_bound.min, subtiles_bound.max)]
        max_size = max(brick_precision, *extents)
        transition *= max_size / brick_size
    else:
        logger.warning("unable to set PagedLOD bounds, num_children = %d", len(children))
        sphere = Sphere(center=local_bound.center(), radius=0.0)

    if settings.create_type is CreateType.PAGEDLOD:
        directory = Path(settings.path) / str(key.w) / str(key.z) / str(key.y)
        full_path = directory / f"{key.x}{settings.extension}"

        write_node(_group_of(children), full_path)

        if root:
            filename = full_path.as_posix()
        else:
            filename = _UP_TO_TILE_ROOT + full_path.as_posix()

        return PagedLOD(
            bound=sphere,
            children=[LODChild(transition, None), LODChild(0.0, brick_node)],
            filename=filename,
        )

    return LOD(
        bound=sphere,
        children=[LODChild(transition, _group_of(children)), LODChild(0.0, brick_node)],
    )


def create_paged_lod(levels: Sequence[Bricks], settings: Settings) -> StateGroup | None:
    """Create the LOD hierarchy for ``levels``, ordered from finest to coarsest.

    Returns None when there are no levels.
    """
    if not levels:
        return None

    state_group = create_state_group(settings)

    brick_size = settings.precision * 2.0 ** settings.bits
    logger.debug("rootBrickSize = %s", brick_size * 2.0 ** (len(levels) - 1))

    if len(levels) == 1:
        bound = Box()
        for key, brick in levels[-1].items():
            tile = brick.create_rendering(settings, key, bound)
            if tile is not None:
                state_group.add_child(tile)
        return state_group

    coarse_to_fine = list(reversed(levels))
    root_level = coarse_to_fine[0]
    logger.debug("root level %d", len(root_level))

    for key in root_level:
        bound = Box()
        child = subtile(settings, coarse_to_fine, key, bound, True)
        if child is not None:
            state_group.add_child(child)

    return state_group