from pathlib import Path

import pytest

from pointbricks.cli import format_number, main
from pointbricks.scenegraph import (
    LOD,
    CullGroup,
    Group,
    MatrixTransform,
    PagedLOD,
    StateGroup,
    VertexDraw,
    read_node,
    write_node,
)


def _draws(node):
    if node is None:
        return []
    if isinstance(node, VertexDraw):
        return [node]
    if isinstance(node, (LOD, PagedLOD)):
        return [d for child in node.children for d in _draws(child.node)]
    if isinstance(node, Group):
        return [d for child in node.children for d in _draws(child)]
    return []


def _ascii_file(tmp_path: Path, lines) -> Path:
    path = tmp_path / "cloud.asc"
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (999, "999"), (1000, "1,000"), (1234567, "1,234,567")],
)
def test_format_number(value, expected):
    assert format_number(value) == expected


def test_format_number_groups_have_three_digits():
    text = format_number(10**9 + 5)
    groups = text.split(",")
    assert all(len(group) == 3 for group in groups[1:])
    assert int("".join(groups)) == 10**9 + 5


def test_no_files_is_an_error(capsys):
    assert main([]) == 1
    assert "Error: no data loaded." in capsys.readouterr().out


def test_paged_lod_needs_output(tmp_path, capsys):
    source = _ascii_file(tmp_path, ["0 0 0 255 0 0"])
    assert main([str(source), "--plod"]) == 1
    assert "PagedLOD generation not possible" in capsys.readouterr().out


def test_flat_output_written(tmp_path, capsys):
    source = _ascii_file(tmp_path, ["0 0 0 255 0 0", "0.5 0.5 0.5 0 255 0", "3 3 3 0 0 255"])
    output = tmp_path / "scene.json"
    assert main([str(source), "--flat", "-o", str(output)]) == 0

    out = capsys.readouterr().out
    assert "Read 3 points." in out
    assert f"Written scene graph to {output}" in out

    scene = read_node(output)
    assert isinstance(scene, CullGroup)
    assert sum(d.vertex_count for d in _draws(scene)) == 3


def test_lod_output_is_translated_hierarchy(tmp_path):
    source = _ascii_file(tmp_path, ["0 0 0 255 0 0", "5 5 5 0 255 0"])
    output = tmp_path / "scene.json"
    assert main([str(source), "--lod", "-o", str(output)]) == 0

    scene = read_node(output)
    assert isinstance(scene, MatrixTransform)
    assert isinstance(scene.children[0], StateGroup)
    assert any(isinstance(child, LOD) for child in scene.children[0].children)


def test_paged_lod_writes_tiles(tmp_path):
    source = _ascii_file(tmp_path, ["0 0 0 255 0 0", "5 5 5 0 255 0"])
    output = tmp_path / "out.vsgb"
    assert main([str(source), "--plod", "-o", str(output)]) == 0

    scene = read_node(output)
    state_group = scene.children[0]
    plods = [child for child in state_group.children if isinstance(child, PagedLOD)]
    assert plods
    for plod in plods:
        assert Path(plod.filename).is_file()
        assert plod.filename.endswith(".vsgb")
    assert (tmp_path / "out").is_dir()


def test_unsupported_bits_loads_nothing(tmp_path, capsys):
    source = _ascii_file(tmp_path, ["0 0 0 255 0 0"])
    assert main([str(source), "--bits", "12", "--flat"]) == 1
    out = capsys.readouterr().out
    assert "12 bits not supported" in out
    assert "Error: no data loaded." in out


def test_scene_file_added_as_model(tmp_path):
    model = Group(children=[VertexDraw(vertices=[1, 2], colors=[(1, 2, 3, 4)] * 2, vertex_count=2)])
    model_path = tmp_path / "model.json"
    write_node(model, model_path)

    output = tmp_path / "copy.json"
    assert main([str(model_path), "-o", str(output)]) == 0
    assert read_node(output) == model


def test_no_model_skips_scene_files(tmp_path):
    model_path = tmp_path / "model.json"
    write_node(Group(), model_path)
    assert main([str(model_path), "--no-model"]) == 1


def test_viewer_flag_reports_points(tmp_path, capsys):
    source = _ascii_file(tmp_path, ["0 0 0 255 0 0", "0.1 0.1 0.1 0 255 0"])
    output = tmp_path / "scene.json"
    assert main([str(source), "--flat", "-o", str(output), "-v"]) == 0
    assert "with 2 points." in capsys.readouterr().out
    assert output.is_file()


def test_without_output_reports_scene(tmp_path, capsys):
    source = _ascii_file(tmp_path, ["0 0 0 255 0 0", "0.1 0.1 0.1 0 255 0", "0.2 0 0 1 1 1"])
    assert main([str(source), "--flat"]) == 0
    assert "with 3 points." in capsys.readouterr().out