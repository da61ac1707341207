import math
from decimal import Decimal

import pytest

from d3_svg_chart import SpatialIndex, create_scale, default_x, default_y

DATA = [
    {"x": 20, "y": 25},
    {"x": 40, "y": 10},
    {"x": 60, "y": 50},
    {"x": 80, "y": 75},
    {"x": 100, "y": 100},
]


def _identity_scale():
    return create_scale((0, 100), (0, 100))


def _index(data):
    index = SpatialIndex(data)
    index.update(default_x, default_y, _identity_scale(), _identity_scale())
    return index


def test_update_stores_inputs():
    x_scale = _identity_scale()
    y_scale = _identity_scale()
    index = SpatialIndex(DATA)
    index.update(default_x, default_y, x_scale, y_scale)
    assert index.data is DATA
    assert index.x is default_x
    assert index.y is default_y
    assert index.x_scale is x_scale
    assert index.y_scale is y_scale


def test_find_nearest_point():
    index = _index(DATA)
    assert index.find(0, 0, 100, 100, math.inf) == {"x": 20, "y": 25}
    assert index.find(100, 100, 100, 100, math.inf) == {"x": 100, "y": 100}
    assert index.find(50, 50, 100, 100, math.inf) == {"x": 60, "y": 50}


def test_find_uses_viewport_pixel_size():
    index = _index(DATA)
    # 400x200 viewport: (60, 50) sits at pixel (240, 100)
    assert index.find(238, 101, 400, 200, radius=5) == {"x": 60, "y": 50}


def test_radius_smaller_than_nearest_distance_returns_none():
    index = _index(DATA)
    assert index.find(50, 50, 100, 100, radius=5) is None
    assert index.find(50, 50, 100, 100, radius=10) is None
    assert index.find(50, 50, 100, 100, radius=10.5) == {"x": 60, "y": 50}


def test_coincident_points_keep_first_inserted():
    data = [
        {"x": 1, "y": 1, "id": "a"},
        {"x": 1, "y": 1, "id": "b"},
        {"x": 5, "y": 5, "id": "c"},
    ]
    index = _index(data)
    assert index.size == 2
    assert index.find(1, 1, 100, 100)["id"] == "a"
    assert [p.datum["id"] for p in index.root.leaves()] == ["a", "c"]


def test_unsplittable_points_are_treated_as_coincident():
    data = [(0.0, 0.0), (5e-324, 0.0)]
    index = SpatialIndex(data)
    assert index.size == 1
    assert index.find(0, 0, 100, 100) == (0.0, 0.0)


def test_equidistant_tie_goes_to_south_east_first():
    index = _index([{"x": 0, "y": 0}, {"x": 10, "y": 10}])
    assert index.find(5, 5, 100, 100) == {"x": 10, "y": 10}


def test_update_discards_cached_tree():
    index = _index(DATA)
    assert index.find(0, 100, 100, 100) == {"x": 20, "y": 25}

    mirrored = create_scale((0, 100), (100, 0))
    index.update(default_x, default_y, mirrored, _identity_scale())
    assert index.find(0, 100, 100, 100) == {"x": 100, "y": 100}

    index.update(default_y, default_x, _identity_scale(), _identity_scale())
    # accessors swapped: items now project to (y, x)
    assert index.find(10, 40, 100, 100, radius=1) == {"x": 40, "y": 10}


def test_tree_is_built_lazily_and_reused():
    calls = []

    def x(d, i):
        calls.append(i)
        return d["x"]

    index = SpatialIndex(DATA)
    index.update(x, default_y, _identity_scale(), _identity_scale())
    assert calls == []

    index.find(0, 0, 100, 100)
    assert calls == [0, 1, 2, 3, 4]
    index.find(50, 50, 100, 100)
    index.find(90, 90, 100, 100, radius=30)
    assert len(calls) == len(DATA)

    index.invalidate()
    index.find(0, 0, 100, 100)
    assert len(calls) == 2 * len(DATA)


def test_empty_and_nan_data_return_none():
    assert _index([]).find(0, 0, 100, 100) is None

    nan_only = _index([{"x": math.nan, "y": 1}, {"x": 2, "y": math.nan}])
    assert nan_only.find(0, 0, 100, 100) is None
    assert nan_only.size == 0


def test_nan_projections_are_skipped():
    data = [{"x": math.nan, "y": 0}, {"x": 30, "y": 30}]
    index = _index(data)
    assert index.size == 1
    assert index.find(0, 0, 100, 100) == {"x": 30, "y": 30}


def test_pruning_visits_a_fraction_of_the_tree():
    data = [{"x": i, "y": j} for i in range(0, 100, 4) for j in range(0, 100, 4)]
    index = _index(data)
    assert index.find(48, 52, 100, 100, radius=1) == {"x": 48, "y": 52}
    assert index.visited < len(data) // 4


def test_accessor_errors_propagate():
    index = SpatialIndex([{"y": 1}])
    with pytest.raises(KeyError):
        index.find(0, 0, 100, 100)


def test_non_float_nan_first_is_skipped():
    data = [(Decimal("NaN"), Decimal(5)), (10.0, 5.0), (90.0, 5.0)]
    index = SpatialIndex(data)
    assert index.size == 2
    assert index.find(90, 5, 100, 100) == (90.0, 5.0)
    assert index.find(10, 5, 100, 100) == (10.0, 5.0)
