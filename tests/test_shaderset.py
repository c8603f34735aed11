from types import SimpleNamespace

import pytest

from pointbricks.shaderset import (
    ShaderSet,
    create_particle_image,
    create_points_flat_shaded_shader_set,
    create_points_phong_shader_set,
)


def test_particle_image_dimensions():
    image = create_particle_image(64)
    assert len(image) == 64
    assert all(len(row) == 64 for row in image)


def test_particle_image_is_white_and_fades_out():
    image = create_particle_image(64)
    assert all(pixel[:3] == (255, 255, 255) for row in image for pixel in row)
    assert image[0][0][3] == 0
    assert image[63][63][3] == 0


def test_particle_image_centre_is_opaque():
    image = create_particle_image(3)
    assert image[1][1] == (255, 255, 255, 255)
    assert image[0][0][3] == 0


def test_particle_image_is_symmetric():
    image = create_particle_image(17)
    for r, row in enumerate(image):
        for c, pixel in enumerate(row):
            assert pixel == image[c][r]
            assert pixel == image[16 - r][16 - c]


def test_particle_image_rejects_tiny_dimension():
    with pytest.raises(ValueError):
        create_particle_image(1)


@pytest.mark.parametrize("factory", [create_points_flat_shaded_shader_set, create_points_phong_shader_set])
def test_attribute_bindings(factory):
    shader_set = factory(None)
    names = [binding.name for binding in shader_set.attribute_bindings]
    assert names == ["vsg_Vertex", "vsg_Normal", "vsg_Color", "vsg_PositionScale", "vsg_PointSize"]
    assert [binding.location for binding in shader_set.attribute_bindings] == list(range(5))
    position_scale = shader_set.attribute_bindings[3]
    assert position_scale.define == "VSG_POSITION_SCALE"


@pytest.mark.parametrize("factory", [create_points_flat_shaded_shader_set, create_points_phong_shader_set])
def test_push_constants_and_descriptors(factory):
    shader_set = factory(None)
    assert len(shader_set.push_constant_ranges) == 1
    assert shader_set.push_constant_ranges[0].size == 128
    material = [d for d in shader_set.descriptor_bindings if d.name == "material"][0]
    assert material.binding == 10
    assert shader_set.stages[0] == "shaders/brick.vert"


def test_flat_and_phong_differ():
    flat = create_points_flat_shaded_shader_set(None)
    phong = create_points_phong_shader_set(None)
    assert flat.optional_defines == ["VSG_POINT_SPRITE", "VSG_GREYSCALE_DIFFUSE_MAP"]
    assert phong.optional_defines == ["VSG_GREYSCALE_DIFFUSE_MAP", "VSG_TWO_SIDED_LIGHTING", "VSG_POINT_SPRITE"]
    flat_viewport = [d for d in flat.descriptor_bindings if d.name == "viewportData"][0]
    phong_viewport = [d for d in phong.descriptor_bindings if d.name == "viewportData"][0]
    assert flat_viewport.descriptor_type == "STORAGE_BUFFER"
    assert phong_viewport.descriptor_type == "UNIFORM_BUFFER"
    assert flat.stages[1] == "shaders/brick_flat_shaded.frag"
    assert phong.stages[1] == "shaders/brick_phong.frag"


def test_assigned_shader_sets_are_reused():
    custom = ShaderSet(stages=("a.vert", "b.frag"))
    options = SimpleNamespace(shader_sets={"points_flat": custom, "points_phong": custom})
    assert create_points_flat_shaded_shader_set(options) is custom
    assert create_points_phong_shader_set(options) is custom


def test_assigned_shader_set_from_mapping_options():
    custom = ShaderSet(stages=("a.vert", "b.frag"))
    options = {"shader_sets": {"points_phong": custom}}
    assert create_points_phong_shader_set(options) is custom
    assert create_points_flat_shaded_shader_set(options) is not custom