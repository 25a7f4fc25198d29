"""Tests for polygon primitives."""

import math

import numpy as np
import pytest

from leaf_fracture.core.polygon import (
    as_polygon,
    distance,
    inverse_transform_point,
    point_in_polygon,
    polygon_area,
    polygon_bounds,
    polygon_centroid,
    signed_area,
    transform_point,
)

SQUARE = np.array([[0, 0], [10, 0], [10, 10], [0, 10]], dtype=float)
L_SHAPE = np.array([[0, 0], [20, 0], [20, 10], [10, 10], [10, 20], [0, 20]], dtype=float)


class TestArea:
    """Test shoelace area."""

    def test_ccw_square_is_positive(self):
        assert signed_area(SQUARE) == pytest.approx(100.0)

    def test_cw_square_is_negative(self):
        assert signed_area(SQUARE[::-1]) == pytest.approx(-100.0)
        assert polygon_area(SQUARE[::-1]) == pytest.approx(100.0)

    def test_concave_polygon(self):
        assert signed_area(L_SHAPE) == pytest.approx(300.0)

    def test_too_few_vertices(self):
        assert signed_area(np.array([[0, 0], [1, 1]], dtype=float)) == 0.0


class TestCentroid:
    """Test polygon centroid."""

    def test_square_centroid(self):
        np.testing.assert_allclose(polygon_centroid(SQUARE), [5, 5])

    def test_winding_does_not_matter(self):
        np.testing.assert_allclose(polygon_centroid(L_SHAPE), polygon_centroid(L_SHAPE[::-1]))

    def test_l_shape_centroid(self):
        # Two 10x10 squares at (15, 5) and (5, 15) plus one at (5, 5)
        np.testing.assert_allclose(polygon_centroid(L_SHAPE), [25 / 3, 25 / 3])

    def test_degenerate_falls_back_to_vertex_mean(self):
        collinear = np.array([[0, 0], [5, 0], [10, 0]], dtype=float)
        np.testing.assert_allclose(polygon_centroid(collinear), [5, 0])


class TestPointInPolygon:
    """Test ray-casting containment."""

    def test_inside_and_outside(self):
        assert point_in_polygon((5, 5), SQUARE)
        assert not point_in_polygon((15, 5), SQUARE)
        assert not point_in_polygon((-1, -1), SQUARE)

    def test_concave_notch(self):
        assert point_in_polygon((5, 15), L_SHAPE)
        assert point_in_polygon((15, 5), L_SHAPE)
        assert not point_in_polygon((15, 15), L_SHAPE)


class TestBoundsAndTransforms:
    """Test bounding boxes and point transforms."""

    def test_bounds(self):
        bounds = polygon_bounds(L_SHAPE)
        assert bounds == (0, 0, 20, 20)
        assert bounds.width == 20
        np.testing.assert_allclose(bounds.center, [10, 10])

    def test_transform_rotates_then_translates(self):
        p = transform_point((1, 0), math.pi / 2, (10, 20))
        np.testing.assert_allclose(p, [10, 21], atol=1e-12)

    def test_inverse_transform(self):
        p = transform_point((3, -4), 1.1, (7, 8))
        np.testing.assert_allclose(inverse_transform_point(p, 1.1, (7, 8)), [3, -4], atol=1e-12)

    def test_distance(self):
        assert distance((0, 0), (3, 4)) == pytest.approx(5.0)


class TestAsPolygon:
    """Test input coercion."""

    def test_list_of_pairs(self):
        polygon = as_polygon([[0, 0], [1, 0], [0, 1]])
        assert polygon.shape == (3, 2)
        assert polygon.dtype == np.float64

    def test_empty(self):
        assert as_polygon([]).shape == (0, 2)

    def test_wrong_shape_raises(self):
        with pytest.raises(ValueError):
            as_polygon([[0, 0, 0], [1, 1, 1]])
