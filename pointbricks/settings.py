"""Settings that guide how point clouds are bucketed into bricks and turned into scene graphs."""

from __future__ import annotations

import enum
import math
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

Vec3 = tuple[float, float, float]

_BIG = sys.float_info.max


class CreateType(enum.Enum):
    """Kind of scene graph to build from a set of bricks."""

    FLAT = "flat"
    """A flat scene graph with no level of detail, only suitable for small datasets."""
    LOD = "lod"
    """A hierarchical LOD scene graph for datasets that fit entirely in GPU memory."""
    PAGEDLOD = "pagedlod"
    """A paged LOD scene graph written to disk, for datasets too large for GPU memory."""


@dataclass
class Box:
    """Axis aligned bounding box; starts out empty (invalid) and grows as points are added."""

    min: Vec3 = (_BIG, _BIG, _BIG)
    max: Vec3 = (-_BIG, -_BIG, -_BIG)

    def add_point(self, point) -> None:
        """Grow the box so that it contains ``point``."""
        x, y, z = (float(c) for c in point)
        self.min = (min(self.min[0], x), min(self.min[1], y), min(self.min[2], z))
        self.max = (max(self.max[0], x), max(self.max[1], y), max(self.max[2], z))

    def expand(self, other: Box) -> None:
        """Grow the box so that it contains ``other``, if ``other`` is valid."""
        if other.valid():
            self.add_point(other.min)
            self.add_point(other.max)

    def valid(self) -> bool:
        """True once at least one point has been added."""
        return self.min[0] <= self.max[0]

    def center(self) -> Vec3:
        """Midpoint of the box."""
        return tuple((lo + hi) * 0.5 for lo, hi in zip(self.min, self.max))  # type: ignore[return-value]

    def diagonal(self) -> float:
        """Length of the diagonal from ``min`` to ``max``."""
        return math.sqrt(sum((hi - lo) ** 2 for lo, hi in zip(self.min, self.max)))


@dataclass
class Settings:
    """Parameters controlling point quantisation, level generation and output."""

    num_points_per_block: int = 10000
    precision: float = 0.001
    bits: int = 10
    point_size: float = 4.0
    transition: float = 0.125
    create_type: CreateType = CreateType.LOD
    path: Path = field(default_factory=Path)
    extension: str = ".vsgb"
    options: Any = None
    offset: Vec3 = (0.0, 0.0, 0.0)
    bound: Box = field(default_factory=Box)