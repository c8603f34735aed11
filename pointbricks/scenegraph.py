"""A small scene graph of point cloud nodes that can be saved to and loaded from JSON files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_IDENTITY = (
    (1.0, 0.0, 0.0, 0.0),
    (0.0, 1.0, 0.0, 0.0),
    (0.0, 0.0, 1.0, 0.0),
    (0.0, 0.0, 0.0, 1.0),
)


@dataclass
class Sphere:
    """Bounding sphere used for culling and level-of-detail selection."""

    center: tuple[float, float, float] = (0.0, 0.0, 0.0)
    radius: float = 0.0


def _sphere_to_dict(sphere: Sphere) -> dict[str, Any]:
    return {"center": list(sphere.center), "radius": sphere.radius}


def _sphere_from_dict(data: dict[str, Any]) -> Sphere:
    return Sphere(center=tuple(data["center"]), radius=data["radius"])


@dataclass
class Node:
    """Base of all scene graph nodes."""

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible description of this node and its subgraph."""
        data: dict[str, Any] = {"type": type(self).__name__}
        data.update(self._encode())
        return data

    def _encode(self) -> dict[str, Any]:
        return {}

    @classmethod
    def _decode_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {}

    @classmethod
    def _decode(cls, data: dict[str, Any]) -> Node:
        return cls(**cls._decode_kwargs(data))


@dataclass
class Group(Node):
    """Node with an ordered list of children."""

    children: list[Node] = field(default_factory=list)

    def add_child(self, child: Node) -> None:
        """Append ``child`` to this group."""
        self.children.append(child)

    def _encode(self) -> dict[str, Any]:
        return {"children": [child.to_dict() for child in self.children]}

    @classmethod
    def _decode_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {"children": [node_from_dict(child) for child in data.get("children", [])]}


@dataclass
class VertexDraw(Node):
    """Leaf that draws a set of points from per-vertex and per-instance arrays."""

    vertices: list = field(default_factory=list)
    vertex_format: str = ""
    normal: tuple[float, float, float] = (0.0, 0.0, 1.0)
    colors: list = field(default_factory=list)
    position_scale: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)
    point_size: tuple[float, float] = (0.0, 0.0)
    vertex_count: int = 0
    instance_count: int = 1

    def _encode(self) -> dict[str, Any]:
        return {
            "vertices": [list(v) if isinstance(v, tuple) else v for v in self.vertices],
            "vertex_format": self.vertex_format,
            "normal": list(self.normal),
            "colors": [list(c) for c in self.colors],
            "position_scale": list(self.position_scale),
            "point_size": list(self.point_size),
            "vertex_count": self.vertex_count,
            "instance_count": self.instance_count,
        }

    @classmethod
    def _decode_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "vertices": [tuple(v) if isinstance(v, list) else v for v in data["vertices"]],
            "vertex_format": data["vertex_format"],
            "normal": tuple(data["normal"]),
            "colors": [tuple(c) for c in data["colors"]],
            "position_scale": tuple(data["position_scale"]),
            "point_size": tuple(data["point_size"]),
            "vertex_count": data["vertex_count"],
            "instance_count": data["instance_count"],
        }


@dataclass
class StateGroup(Group):
    """Group that binds rendering state (pipeline and descriptors) for its subgraph."""

    state: dict[str, Any] = field(default_factory=dict)

    def _encode(self) -> dict[str, Any]:
        return {**super()._encode(), "state": self.state}

    @classmethod
    def _decode_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {**super()._decode_kwargs(data), "state": data.get("state", {})}


@dataclass
class MatrixTransform(Group):
    """Group whose children are placed by a 4x4 row-major matrix (translation in the last column)."""

    matrix: tuple[tuple[float, ...], ...] = _IDENTITY

    def _encode(self) -> dict[str, Any]:
        return {**super()._encode(), "matrix": [list(row) for row in self.matrix]}

    @classmethod
    def _decode_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            **super()._decode_kwargs(data),
            "matrix": tuple(tuple(row) for row in data["matrix"]),
        }


@dataclass
class CullGroup(Group):
    """Group culled as a whole against its bounding sphere."""

    bound: Sphere = field(default_factory=Sphere)

    def _encode(self) -> dict[str, Any]:
        return {**super()._encode(), "bound": _sphere_to_dict(self.bound)}

    @classmethod
    def _decode_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {**super()._decode_kwargs(data), "bound": _sphere_from_dict(data["bound"])}


@dataclass
class LODChild:
    """A level-of-detail child shown once its bound fills the given ratio of the screen height."""

    minimum_screen_height_ratio: float = 0.0
    node: Node | None = None


def _lod_child_to_dict(child: LODChild) -> dict[str, Any]:
    return {
        "minimum_screen_height_ratio": child.minimum_screen_height_ratio,
        "node": child.node.to_dict() if child.node is not None else None,
    }


def _lod_child_from_dict(data: dict[str, Any]) -> LODChild:
    node = data.get("node")
    return LODChild(
        minimum_screen_height_ratio=data["minimum_screen_height_ratio"],
        node=node_from_dict(node) if node is not None else None,
    )


@dataclass
class LOD(Node):
    """Level-of-detail node; children are ordered from highest to lowest resolution."""

    bound: Sphere = field(default_factory=Sphere)
    children: list[LODChild] = field(default_factory=list)

    def _encode(self) -> dict[str, Any]:
        return {
            "bound": _sphere_to_dict(self.bound),
            "children": [_lod_child_to_dict(c) for c in self.children],
        }

    @classmethod
    def _decode_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "bound": _sphere_from_dict(data["bound"]),
            "children": [_lod_child_from_dict(c) for c in data["children"]],
        }


def _two_lod_children() -> list[LODChild]:
    return [LODChild(), LODChild()]


@dataclass
class PagedLOD(Node):
    """Two-level LOD whose high resolution child is loaded from ``filename`` on demand."""

    bound: Sphere = field(default_factory=Sphere)
    children: list[LODChild] = field(default_factory=_two_lod_children)
    filename: str = ""

    def _encode(self) -> dict[str, Any]:
        return {
            "bound": _sphere_to_dict(self.bound),
            "children": [_lod_child_to_dict(c) for c in self.children],
            "filename": self.filename,
        }

    @classmethod
    def _decode_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "bound": _sphere_from_dict(data["bound"]),
            "children": [_lod_child_from_dict(c) for c in data["children"]],
            "filename": data["filename"],
        }


_NODE_TYPES: dict[str, type[Node]] = {
    cls.__name__: cls
    for cls in (Node, Group, VertexDraw, StateGroup, MatrixTransform, CullGroup, LOD, PagedLOD)
}


def node_from_dict(data: dict[str, Any]) -> Node:
    """Rebuild a node and its subgraph from the output of ``Node.to_dict``."""
    try:
        cls = _NODE_TYPES[data["type"]]
    except KeyError:
        raise ValueError(f"unknown node type: {data.get('type')!r}") from None
    return cls._decode(data)


def write_node(node: Node, path) -> None:
    """Write ``node`` and its subgraph to ``path`` as JSON, creating parent directories."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as stream:
        json.dump(node.to_dict(), stream)


def read_node(path) -> Node:
    """Read a node written by ``write_node``."""
    with Path(path).open("r", encoding="utf-8") as stream:
        return node_from_dict(json.load(stream))