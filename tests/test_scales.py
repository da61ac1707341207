import math
from types import SimpleNamespace

import pytest

from d3_svg_chart import create_scale, default_x, default_y, get_scales, scale_linear


def test_scale_maps_domain_endpoints_onto_range():
    scale = create_scale((10, 20), (50, 100))
    assert math.isclose(scale(10), 50)
    assert math.isclose(scale(20), 100)
    assert math.isclose(scale(15), 75)
    assert math.isclose(scale.apply(5), 25)


def test_invert_round_trips_values():
    scale = create_scale((-3.5, 12.25), (100, 0))
    inverse = scale.invert()
    for value in (-3.5, 0.0, 1.1, 7.77, 12.25, 40.0):
        assert math.isclose(inverse(scale(value)), value, abs_tol=1e-12)
    assert inverse.domain == scale.range
    assert inverse.range == scale.domain


def test_scale_linear_alias_and_inverse_name():
    scale = scale_linear((10, 20), (50, 100))
    inverse = scale.inverse()
    assert math.isclose(inverse(75), 15)
    assert math.isclose(inverse(25), 5)


def test_zero_length_domain_gives_non_finite_values():
    scale = create_scale((3, 3), (0, 1))
    assert not math.isfinite(scale(4))
    assert math.isnan(scale(3))


def test_scale_rejects_wrong_arity():
    with pytest.raises(ValueError):
        create_scale((0, 1, 2), (0, 1))


def test_default_accessors_read_mappings_attributes_and_sequences():
    assert default_x({"x": 1, "y": 2}) == 1
    assert default_y({"x": 1, "y": 2}) == 2
    assert default_x(SimpleNamespace(x=3, y=4), 0) == 3
    assert default_y((5, 6), 0) == 6


def test_chart_scales_flip_y_axis():
    s = get_scales(0, 0, 10, 50)
    assert math.isclose(s.x_scale(0), 0)
    assert math.isclose(s.x_scale(10), 100)
    assert math.isclose(s.y_scale(0), 100)
    assert math.isclose(s.y_scale(50), 0)
    assert math.isclose(s.y_scale_inverse(25), 37.5)


def test_pointer_converts_pixels_to_domain_coordinates():
    s = get_scales(0, 0, 10, 10)
    pointer = s.pointer(200, 75, 400, 300)
    assert math.isclose(pointer.x, 5)
    assert math.isclose(pointer.y, 7.5)
    assert (pointer.left, pointer.top) == (200, 75)
