"""Tests for 2D points and bounds."""

import math

import pytest

from nclctl.domain.geometry import Bounds, Point, mean


class TestPoint:
    def test_of_pads_and_truncates(self) -> None:
        assert Point.of([1]) == Point(1.0, 0.0)
        assert Point.of([1, 2, 3]) == Point(1.0, 2.0)
        assert Point.of(None) == Point()

    def test_arithmetic(self) -> None:
        p = Point(1, 2) + Point(3, 4)
        assert p == Point(4, 6)
        assert p - Point(4, 6) == Point()
        assert Point(1, 2) * 2 == Point(2, 4)
        assert 2 * Point(1, 2) == Point(2, 4)
        assert Point(2, 4) / 2 == Point(1, 2)
        assert -Point(1, -1) == Point(-1, 1)

    def test_norm_and_normalized(self) -> None:
        assert Point(3, 4).norm() == 5
        unit = Point(3, 4).normalized()
        assert math.isclose(unit.norm(), 1.0)

    def test_zero_vector_normalizes_to_zero(self) -> None:
        assert Point().normalized() == Point()

    def test_unpacks(self) -> None:
        x, y = Point(1, 2)
        assert (x, y) == (1, 2)


class TestBounds:
    def test_around_points(self) -> None:
        b = Bounds.around([Point(0, 1), Point(4, -1), Point(2, 3)])
        assert b.min == Point(0, -1)
        assert b.max == Point(4, 3)
        assert b.size == Point(4, 4)
        assert b.extents == Point(2, 2)
        assert b.center == Point(2, 1)

    def test_empty_is_zero_box(self) -> None:
        b = Bounds.around([])
        assert b.min == b.max == Point()
        assert b.size == Point()


class TestMean:
    def test_mean(self) -> None:
        assert mean([Point(0, 0), Point(2, 4)]) == Point(1, 2)

    def test_empty_raises(self) -> None:
        with pytest.raises(ZeroDivisionError):
            mean([])
