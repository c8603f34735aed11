"""Spatial bucketing of points into fixed-size bricks of quantised coordinates."""

from __future__ import annotations

import math
from collections.abc import Iterator, MutableMapping
from dataclasses import dataclass, field
from typing import NamedTuple

from .scenegraph import VertexDraw
from .settings import Box, Settings


class Key(NamedTuple):
    """Brick coordinates (x, y, z) and level scale ``w`` (1 for the finest level)."""

    x: int
    y: int
    z: int
    w: int

    def __add__(self, other) -> Key:  # type: ignore[override]
        return Key(self.x + other[0], self.y + other[1], self.z + other[2], self.w + other[3])


class PackedPoint(NamedTuple):
    """Point position relative to its brick's origin, in units of the brick precision, and RGBA colour."""

    v: tuple[int, int, int]
    c: tuple[int, int, int, int]


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _divide_round(value: int, divisor: int) -> int:
    if value < 0:
        return -1 - (-value // divisor)
    return value // divisor


@dataclass
class Brick:
    """The points that fall in one brick."""

    points: list[PackedPoint] = field(default_factory=list)

    def create_vertex_draw(self, settings: Settings, position_scale, point_size) -> VertexDraw | None:
        """Build the draw node for this brick's points, or None if ``settings.bits`` is unsupported."""
        if settings.bits == 8:
            vertices = [(x & 0xFF, y & 0xFF, z & 0xFF) for (x, y, z), _ in self.points]
            vertex_format = "R8G8B8_UNORM"
        elif settings.bits == 10:
            vertices = [
                ((3 << 30) | (x << 20) | (y << 10) | z) & 0xFFFFFFFF for (x, y, z), _ in self.points
            ]
            vertex_format = "A2R10G10B10_UNORM_PACK32"
        elif settings.bits == 16:
            vertices = [(x & 0xFFFF, y & 0xFFFF, z & 0xFFFF) for (x, y, z), _ in self.points]
            vertex_format = "R16G16B16_UNORM"
        else:
            return None

        return VertexDraw(
            vertices=vertices,
            vertex_format=vertex_format,
            normal=(0.0, 0.0, 1.0),
            colors=[point.c for point in self.points],
            position_scale=tuple(position_scale),
            point_size=tuple(point_size),
            vertex_count=len(self.points),
            instance_count=1,
        )

    def create_rendering(self, settings: Settings, key: Key, bound: Box) -> VertexDraw | None:
        """Build the draw node for this brick at ``key``, growing ``bound`` by the points' positions."""
        brick_precision = settings.precision * float(key.w)
        brick_size = brick_precision * 2.0 ** settings.bits

        ox, oy, oz = settings.offset
        px = key.x * brick_size - ox
        py = key.y * brick_size - oy
        pz = key.z * brick_size - oz

        for (vx, vy, vz), _ in self.points:
            bound.add_point((px + brick_precision * vx, py + brick_precision * vy, pz + brick_precision * vz))

        point_size = (brick_precision * settings.point_size, brick_precision)
        position_scale = (px, py, pz, brick_size)
        return self.create_vertex_draw(settings, position_scale, point_size)


class Bricks(MutableMapping):
    """Mapping from Key to Brick, iterated in key order."""

    def __init__(self, settings: Settings | None = None):
        self.settings = settings if settings is not None else Settings()
        self.bricks: dict[Key, Brick] = {}

    def __getitem__(self, key: Key) -> Brick:
        return self.bricks[key]

    def __setitem__(self, key: Key, brick: Brick) -> None:
        self.bricks[Key(*key)] = brick

    def __delitem__(self, key: Key) -> None:
        del self.bricks[key]

    def __iter__(self) -> Iterator[Key]:
        return iter(sorted(self.bricks))

    def __len__(self) -> int:
        return len(self.bricks)

    def __repr__(self) -> str:
        return f"Bricks({len(self)} bricks, {self.count()} points)"

    def get_or_create(self, key: Key) -> Brick:
        """Return the brick at ``key``, creating an empty one if there is none."""
        key = Key(*key)
        brick = self.bricks.get(key)
        if brick is None:
            brick = self.bricks[key] = Brick()
        return brick

    def add(self, v, c) -> None:
        """Quantise point ``v`` with colour ``c`` into the brick that contains it."""
        settings = self.settings
        settings.bound.add_point(v)

        multiplier = 1.0 / settings.precision
        divisor = 1 << settings.bits

        quantised = [_round_half_away(float(component) * multiplier) for component in v]
        kx, ky, kz = (_divide_round(q, divisor) for q in quantised)
        key = Key(kx, ky, kz, 1)

        packed = PackedPoint(
            v=(
                (quantised[0] - kx * divisor) & 0xFFFF,
                (quantised[1] - ky * divisor) & 0xFFFF,
                (quantised[2] - kz * divisor) & 0xFFFF,
            ),
            c=tuple(int(component) for component in c),
        )
        self.get_or_create(key).points.append(packed)

    def count(self) -> int:
        """Total number of points across all bricks."""
        return sum(len(brick.points) for brick in self.bricks.values())