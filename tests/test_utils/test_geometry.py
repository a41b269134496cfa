"""Tests for geometry helpers."""

import numpy as np
import pytest

from winglets.utils.geometry import (
    apply_transform,
    arc_lengths,
    centroid,
    orient_ccw,
    perimeter,
    scale_about,
    segment_lengths,
    signed_area,
    winding_direction,
)

SQUARE = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])


def test_signed_area_ccw_positive():
    assert signed_area(SQUARE) == pytest.approx(1.0)
    assert signed_area(SQUARE[::-1]) == pytest.approx(-1.0)


def test_winding_direction():
    assert winding_direction(SQUARE) == 1
    assert winding_direction(SQUARE[::-1]) == -1
    assert winding_direction(np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 2.0]])) == 0


def test_orient_ccw_flips_clockwise_ring():
    ring = orient_ccw(SQUARE[::-1])
    assert signed_area(ring) > 0
    assert orient_ccw(SQUARE) is SQUARE


def test_centroid():
    assert centroid(SQUARE) == (0.5, 0.5)
    assert centroid(np.empty((0, 2))) == (0.0, 0.0)


def test_segment_lengths_open_and_closed():
    assert segment_lengths(SQUARE).tolist() == [1.0, 1.0, 1.0]
    assert segment_lengths(SQUARE, closed=True).tolist() == [1.0, 1.0, 1.0, 1.0]
    assert arc_lengths(SQUARE).tolist() == [0.0, 1.0, 2.0, 3.0]
    assert perimeter(SQUARE) == pytest.approx(4.0)


def test_scale_about_center():
    out = scale_about(SQUARE, (0.5, 0.5), 2.0)
    np.testing.assert_allclose(out, [[-0.5, -0.5], [1.5, -0.5], [1.5, 1.5], [-0.5, 1.5]])


def test_apply_transform():
    m = np.array([[2.0, 0.0, 1.0], [0.0, 3.0, -1.0], [0.0, 0.0, 1.0]])
    out = apply_transform(SQUARE, m)
    np.testing.assert_allclose(out[2], [3.0, 2.0])


def test_apply_transform_rejects_bad_shape():
    with pytest.raises(ValueError):
        apply_transform(SQUARE, np.eye(4))
