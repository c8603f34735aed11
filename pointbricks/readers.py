"""Readers that load point clouds from ASCII and binary files into bricks."""

from __future__ import annotations

import logging
import re
import struct
from pathlib import Path

from .bricks import Bricks
from .settings import Settings

logger = logging.getLogger(__name__)

ASCII_EXTENSIONS = frozenset({".3dc", ".asc"})
BIN_EXTENSIONS = frozenset({".bin"})
SUPPORTED_BITS = (8, 10, 16)

# Each binary record: three doubles for the position then three bytes of RGB colour.
_BIN_RECORD = struct.Struct("<3d3B")
_ALPHA = 255
_MAX_VALUES_PER_LINE = 10
_SEPARATORS = re.compile(r"[\s,;]+")


class UnsupportedBitsError(ValueError):
    """Raised when the settings ask for a number of bits per coordinate that bricks cannot hold."""

    def __init__(self, bits: int):
        super().__init__(f"{bits} bits not supported, valid values are 8, 10 and 16.")
        self.bits = bits


def _prepare(path, settings: Settings | None, extensions: frozenset[str]) -> tuple[Path, Settings] | None:
    file_path = Path(path)
    if file_path.suffix.lower() not in extensions:
        return None
    if not file_path.is_file():
        raise FileNotFoundError(f"no such point file: {file_path}")
    if settings is None:
        settings = Settings()
    if settings.bits not in SUPPORTED_BITS:
        raise UnsupportedBitsError(settings.bits)
    return file_path, settings


def _parse_values(line: str) -> list[float]:
    values = []
    for token in _SEPARATORS.split(line.strip()):
        if not token:
            continue
        try:
            values.append(float(token))
        except ValueError:
            break
        if len(values) == _MAX_VALUES_PER_LINE:
            break
    return values


def read_ascii_points(path, settings: Settings | None = None) -> Bricks | None:
    """Read ``x y z r g b`` lines from a .3dc or .asc file.

    Returns None when the extension is not handled or no points were read.
    """
    prepared = _prepare(path, settings, ASCII_EXTENSIONS)
    if prepared is None:
        return None
    file_path, settings = prepared

    bricks = Bricks(settings)
    with file_path.open("r", encoding="utf-8", errors="replace") as stream:
        for line in stream:
            values = _parse_values(line)
            if len(values) >= 6:
                x, y, z, r, g, b = values[:6]
                bricks.add((x, y, z), (int(r), int(g), int(b), _ALPHA))

    return bricks if bricks else None


def read_bin(path, settings: Settings | None = None) -> Bricks | None:
    """Read packed position/colour records from a .bin file.

    Returns None when the extension is not handled or no points were read.
    """
    prepared = _prepare(path, settings, BIN_EXTENSIONS)
    if prepared is None:
        return None
    file_path, settings = prepared

    bricks = Bricks(settings)
    block_size = max(1, settings.num_points_per_block) * _BIN_RECORD.size
    with file_path.open("rb") as stream:
        while block := stream.read(block_size):
            whole = len(block) - len(block) % _BIN_RECORD.size
            if whole == 0:
                break
            for x, y, z, r, g, b in _BIN_RECORD.iter_unpack(block[:whole]):
                bricks.add((x, y, z), (r, g, b, _ALPHA))
            if len(block) < block_size:
                break

    if not bricks:
        logger.warning("unable to read points from %s", file_path)
        return None
    return bricks


def read_points(path, settings: Settings | None = None) -> Bricks | None:
    """Read a point file with whichever reader handles its extension; None if none does."""
    for reader in (read_bin, read_ascii_points):
        bricks = reader(path, settings)
        if bricks is not None:
            return bricks
    return None