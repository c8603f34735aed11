import struct

import pytest

from pointbricks.readers import UnsupportedBitsError, read_ascii_points, read_bin, read_points
from pointbricks.settings import Settings

POINTS = [
    ((0.5, 1.25, -2.0), (10, 20, 30)),
    ((3.0, -0.75, 4.5), (200, 100, 50)),
    ((-1.5, 2.0, 0.25), (0, 255, 128)),
]


def _write_ascii(path, points):
    lines = [f"{x} {y} {z} {r} {g} {b}" for (x, y, z), (r, g, b) in points]
    path.write_text("\n".join(lines) + "\n")


def _write_bin(path, points, trailing=b""):
    data = b"".join(struct.pack("<3d3B", *v, *c) for v, c in points)
    path.write_bytes(data + trailing)


def _decoded(bricks):
    settings = bricks.settings
    divisor = 1 << settings.bits
    result = []
    for key in bricks:
        for point in bricks[key].points:
            position = tuple(
                (k * divisor + p) * settings.precision for k, p in zip(key[:3], point.v)
            )
            result.append((position, point.c))
    return result


def _assert_matches(bricks, points):
    decoded = sorted(_decoded(bricks), key=lambda item: item[0])
    expected = sorted(points, key=lambda item: item[0])
    assert len(decoded) == len(expected)
    for (position, colour), (v, c) in zip(decoded, expected):
        assert position == pytest.approx(v, abs=1e-9)
        assert colour == (*c, 255)


def test_ascii_round_trip(tmp_path):
    path = tmp_path / "cloud.asc"
    _write_ascii(path, POINTS)
    bricks = read_ascii_points(path)
    assert bricks.count() == len(POINTS)
    _assert_matches(bricks, POINTS)


def test_ascii_skips_short_lines(tmp_path):
    path = tmp_path / "cloud.3dc"
    path.write_text("1 2 3\n0.5 1.25 -2.0 10 20 30\n\n# header\n")
    bricks = read_ascii_points(path)
    assert bricks.count() == 1
    _assert_matches(bricks, POINTS[:1])


def test_ascii_updates_settings_bound(tmp_path):
    path = tmp_path / "cloud.asc"
    _write_ascii(path, POINTS)
    settings = Settings()
    read_ascii_points(path, settings)
    for v, _ in POINTS:
        for lo, value, hi in zip(settings.bound.min, v, settings.bound.max):
            assert lo <= value <= hi


def test_ascii_empty_file_gives_none(tmp_path):
    path = tmp_path / "empty.asc"
    path.write_text("")
    assert read_ascii_points(path) is None


def test_ascii_wrong_extension_gives_none(tmp_path):
    path = tmp_path / "cloud.txt"
    _write_ascii(path, POINTS)
    assert read_ascii_points(path) is None


def test_bin_round_trip(tmp_path):
    path = tmp_path / "cloud.bin"
    _write_bin(path, POINTS)
    bricks = read_bin(path)
    assert bricks.count() == len(POINTS)
    _assert_matches(bricks, POINTS)


def test_bin_small_blocks_and_partial_record(tmp_path):
    path = tmp_path / "cloud.bin"
    _write_bin(path, POINTS, trailing=b"\x01\x02\x03")
    bricks = read_bin(path, Settings(num_points_per_block=2))
    assert bricks.count() == len(POINTS)
    _assert_matches(bricks, POINTS)


def test_bin_empty_gives_none(tmp_path):
    path = tmp_path / "empty.bin"
    path.write_bytes(b"")
    assert read_bin(path) is None


@pytest.mark.parametrize("bits", [8, 16])
def test_supported_bits(tmp_path, bits):
    path = tmp_path / "cloud.bin"
    _write_bin(path, POINTS)
    bricks = read_bin(path, Settings(bits=bits))
    _assert_matches(bricks, POINTS)


@pytest.mark.parametrize("reader,name", [(read_bin, "cloud.bin"), (read_ascii_points, "cloud.asc")])
def test_unsupported_bits(tmp_path, reader, name):
    path = tmp_path / name
    path.write_text("")
    with pytest.raises(UnsupportedBitsError) as info:
        reader(path, Settings(bits=12))
    assert info.value.bits == 12


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_bin(tmp_path / "missing.bin")


def test_read_points_dispatches_by_extension(tmp_path):
    bin_path = tmp_path / "cloud.bin"
    asc_path = tmp_path / "cloud.asc"
    _write_bin(bin_path, POINTS)
    _write_ascii(asc_path, POINTS[:2])
    assert read_points(bin_path).count() == 3
    assert read_points(asc_path).count() == 2
    assert read_points(tmp_path / "cloud.xyz") is None