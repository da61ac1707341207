import math

import pytest

from d3_svg_chart import generate_ticks, tick_increment


def test_ticks_for_round_interval():
    assert generate_ticks(0, 1000, 5) == [0, 200, 400, 600, 800, 1000]
    assert generate_ticks(0, 1000) == [0, 200, 400, 600, 800, 1000]


def test_equal_bounds_return_single_tick():
    assert generate_ticks(7, 7, 3) == [7]
    assert generate_ticks(-0.5, -0.5, 1) == [-0.5]


def test_non_positive_count_gives_no_ticks():
    assert generate_ticks(0, 10, 0) == []
    assert generate_ticks(0, 10, -3) == []
    assert generate_ticks(5, 5, 0) == []


def test_non_finite_bounds_give_no_ticks():
    assert generate_ticks(0, math.inf, 5) == []
    assert generate_ticks(math.nan, 1, 5) == []


def test_reversed_interval_keeps_caller_direction():
    assert generate_ticks(1000, 0, 5) == [1000, 800, 600, 400, 200, 0]


def test_sub_unit_step():
    assert generate_ticks(0, 1, 5) == pytest.approx([0, 0.2, 0.4, 0.6, 0.8, 1.0])
    assert generate_ticks(0.11, 0.19, 4) == pytest.approx([0.12, 0.14, 0.16, 0.18])


def test_ticks_stay_inside_interval_with_uniform_spacing():
    ticks = generate_ticks(-3.7, 12.2, 7)
    assert ticks == [-2, 0, 2, 4, 6, 8, 10, 12]
    assert ticks[0] >= -3.7
    assert ticks[-1] <= 12.2
    gaps = {b - a for a, b in zip(ticks, ticks[1:])}
    assert gaps == {2}


def test_tick_increment():
    assert tick_increment(1, 10, 5) == 2
    assert tick_increment(1, 10, 2) == 5
    assert tick_increment(1, 100, 5) == 20
    assert tick_increment(0, 1, 5) == -5
    assert math.isinf(tick_increment(0, 10, 0))
    assert math.isnan(tick_increment(10, 0, 5))
