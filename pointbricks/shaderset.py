"""Shader set descriptions and the particle sprite image used to render point bricks."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

VIEW_DESCRIPTOR_SET = 0
MATERIAL_DESCRIPTOR_SET = 1

VERTEX_SHADER = "shaders/brick.vert"
FLAT_SHADED_FRAGMENT_SHADER = "shaders/brick_flat_shaded.frag"
PHONG_FRAGMENT_SHADER = "shaders/brick_phong.frag"

_VERTEX_STAGE = "VERTEX"
_FRAGMENT_STAGE = "FRAGMENT"


@dataclass
class AttributeBinding:
    """A vertex attribute the shaders read, with the define that enables it and its default data."""

    name: str
    define: str
    location: int
    format: str
    data: Any


@dataclass
class DescriptorBinding:
    """A descriptor (texture or buffer) bound to a set and binding slot."""

    name: str
    define: str
    set: int
    binding: int
    descriptor_type: str
    count: int
    stage_flags: frozenset[str]
    data: Any


@dataclass
class PushConstantRange:
    """A range of push constants visible to the given shader stages."""

    name: str
    define: str
    stage_flags: frozenset[str]
    offset: int
    size: int


@dataclass
class ShaderSet:
    """The shaders, attributes, descriptors and defines that make up a point rendering pipeline."""

    stages: tuple[str, ...]
    attribute_bindings: list[AttributeBinding] = field(default_factory=list)
    descriptor_bindings: list[DescriptorBinding] = field(default_factory=list)
    push_constant_ranges: list[PushConstantRange] = field(default_factory=list)
    optional_defines: list[str] = field(default_factory=list)
    custom_descriptor_set_bindings: list[int] = field(default_factory=list)


def create_particle_image(dim: int) -> list[list[tuple[int, int, int, int]]]:
    """Return a ``dim`` x ``dim`` RGBA image (rows of pixels) of a white disc fading out at its edge."""
    if dim < 2:
        raise ValueError(f"particle image dimension must be at least 2, got {dim}")

    div = 2.0 / float(dim - 1)
    distance_at_one = 0.5
    distance_at_zero = 1.0

    image = []
    for r in range(dim):
        y = r * div - 1.0
        row = []
        for c in range(dim):
            x = c * div - 1.0
            distance_from_center = math.hypot(x, y)
            intensity = 1.0 - (distance_from_center - distance_at_one) / (distance_at_zero - distance_at_one)
            intensity = min(1.0, max(0.0, intensity))
            row.append((255, 255, 255, int(intensity * 255)))
        image.append(row)
    return image


def _assigned_shader_set(options: Any, name: str) -> ShaderSet | None:
    if options is None:
        return None
    if isinstance(options, Mapping):
        shader_sets = options.get("shader_sets")
    else:
        shader_sets = getattr(options, "shader_sets", None)
    if not shader_sets:
        return None
    return shader_sets.get(name)


def _build_shader_set(fragment_shader: str, viewport_descriptor_type: str, optional_defines: list[str]) -> ShaderSet:
    both_stages = frozenset({_VERTEX_STAGE, _FRAGMENT_STAGE})
    fragment_only = frozenset({_FRAGMENT_STAGE})

    attributes = [
        AttributeBinding("vsg_Vertex", "", 0, "R32G32B32_SFLOAT", [(0.0, 0.0, 0.0)]),
        AttributeBinding("vsg_Normal", "", 1, "R32G32B32_SFLOAT", [(0.0, 0.0, 0.0)]),
        AttributeBinding("vsg_Color", "", 2, "R8G8B8A8_UNORM", [(0, 0, 0, 0)]),
        AttributeBinding(
            "vsg_PositionScale", "VSG_POSITION_SCALE", 3, "R32G32B32A32_SFLOAT", (0.0, 0.0, 0.0, 1.0)
        ),
        AttributeBinding("vsg_PointSize", "", 4, "R32G32_SFLOAT", (0.0035, 0.001)),
    ]

    descriptors = [
        DescriptorBinding(
            "diffuseMap", "VSG_DIFFUSE_MAP", MATERIAL_DESCRIPTOR_SET, 0,
            "COMBINED_IMAGE_SAMPLER", 1, fragment_only, [[(0, 0, 0, 0)]],
        ),
        DescriptorBinding(
            "material", "", MATERIAL_DESCRIPTOR_SET, 10,
            "UNIFORM_BUFFER", 1, fragment_only, {"type": "PhongMaterial"},
        ),
        DescriptorBinding(
            "lightData", "", VIEW_DESCRIPTOR_SET, 0,
            "UNIFORM_BUFFER", 1, both_stages, [(0.0, 0.0, 0.0, 0.0)] * 64,
        ),
        DescriptorBinding(
            "viewportData", "", VIEW_DESCRIPTOR_SET, 1,
            viewport_descriptor_type, 1, both_stages, (0.0, 0.0, 1280.0, 1024.0),
        ),
        DescriptorBinding(
            "shadowMaps", "", VIEW_DESCRIPTOR_SET, 2,
            "COMBINED_IMAGE_SAMPLER", 1, fragment_only, [[[0.0]]],
        ),
    ]

    return ShaderSet(
        stages=(VERTEX_SHADER, fragment_shader),
        attribute_bindings=attributes,
        descriptor_bindings=descriptors,
        push_constant_ranges=[PushConstantRange("pc", "", frozenset({_VERTEX_STAGE}), 0, 128)],
        optional_defines=list(optional_defines),
        custom_descriptor_set_bindings=[VIEW_DESCRIPTOR_SET],
    )


def create_points_flat_shaded_shader_set(options: Any) -> ShaderSet:
    """Return the flat shaded point shader set, or the one already assigned as ``points_flat`` in ``options``."""
    assigned = _assigned_shader_set(options, "points_flat")
    if assigned is not None:
        return assigned
    return _build_shader_set(
        FLAT_SHADED_FRAGMENT_SHADER,
        "STORAGE_BUFFER",
        ["VSG_POINT_SPRITE", "VSG_GREYSCALE_DIFFUSE_MAP"],
    )


def create_points_phong_shader_set(options: Any) -> ShaderSet:
    """Return the phong lit point shader set, or the one already assigned as ``points_phong`` in ``options``."""
    assigned = _assigned_shader_set(options, "points_phong")
    if assigned is not None:
        return assigned
    return _build_shader_set(
        PHONG_FRAGMENT_SHADER,
        "UNIFORM_BUFFER",
        ["VSG_GREYSCALE_DIFFUSE_MAP", "VSG_TWO_SIDED_LIGHTING", "VSG_POINT_SPRITE"],
    )