"""Point cloud bricking, level-of-detail scene graph generation and JSON scene storage."""

__version__ = "0.6.0"
__all__ = ["settings", "scenegraph", "bricks", "shaderset", "readers", "create", "cli"]