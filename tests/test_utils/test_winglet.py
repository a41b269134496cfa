"""Tests for winglet synthesis."""

import numpy as np
import pytest

from winglets.utils.contour import Contour
from winglets.utils.geometry import segment_lengths
from winglets.utils.winglet import (
    Winglet,
    arc_length,
    concatenate_winglets,
    connector_widths,
    synthesize_winglet,
)


def test_arc_length_formula():
    assert arc_length(0.0, 0.05, 0.05, 2.0) == pytest.approx(0.05)
    assert arc_length(1.0, 0.05, 0.05, 2.0) == pytest.approx(0.10)
    assert arc_length(0.5, 0.02, 0.1, 2.0) == pytest.approx(0.045)


def test_degenerate_glyph_is_the_anchor_three_times(unit_square):
    w = synthesize_winglet(unit_square, 2, (5.0, 6.0), 0.0)
    np.testing.assert_array_equal(w.vertices, [[5.0, 6.0]] * 3)
    assert len(w.flat()) == 6
    assert w.left_count == 0 and w.right_count == 0
    assert w.widths(2.0).tolist() == [0.0, 2.0, 0.0]


def test_below_minimum_length_skips_traversal(unit_square):
    w = synthesize_winglet(unit_square, 0, (0.0, 0.0), 0.0015)
    assert len(w) == 3


def test_partial_edges_are_cut_exactly(unit_square):
    w = synthesize_winglet(unit_square, 0, (10.0, 10.0), 1.0)
    expected = [
        [10.0, 10.5],
        [10.0, 10.5],
        [10.0, 10.0],
        [10.5, 10.0],
        [10.5, 10.0],
    ]
    np.testing.assert_allclose(w.vertices, expected)
    assert w.left_count == 1 and w.right_count == 1
    assert w.anchor_index == 0


def test_walk_passes_whole_edges(unit_square):
    w = synthesize_winglet(unit_square, 0, (0.0, 0.0), 2.5)
    np.testing.assert_allclose(
        w.core,
        [[0.25, 1.0], [0.0, 1.0], [0.0, 0.0], [1.0, 0.0], [1.0, 0.25]],
    )
    assert w.left_count == 2 and w.right_count == 2


@pytest.mark.parametrize("length", [0.01, 0.3, 1.7, 3.9, 9.0])
def test_core_arc_length_equals_requested(circle_contour, length):
    w = synthesize_winglet(circle_contour, 5, (0.2, 0.1), length)
    assert segment_lengths(w.core).sum() == pytest.approx(length)


def test_glyph_is_translated_onto_the_point(circle_contour):
    point = (3.0, -2.0)
    w = synthesize_winglet(circle_contour, 7, point, 0.4)
    np.testing.assert_allclose(w.core[w.left_count], point)
    offset = np.asarray(point) - circle_contour.vertices[7]
    np.testing.assert_allclose(w.core[w.left_count + 1], circle_contour.vertices[8] + offset)


def test_contour_is_not_mutated(circle_contour):
    before = circle_contour.vertices.copy()
    synthesize_winglet(circle_contour, 0, (1.0, 1.0), 2.0)
    np.testing.assert_array_equal(circle_contour.vertices, before)


def test_flat_buffer_is_even_and_at_least_six(circle_contour):
    for length in (0.0, 0.001, 0.05, 0.5):
        flat = synthesize_winglet(circle_contour, 3, (0.0, 0.0), length).flat()
        assert len(flat) % 2 == 0
        assert len(flat) >= 6


def test_zero_perimeter_contour():
    collapsed = Contour(np.zeros((3, 2)))
    w = synthesize_winglet(collapsed, 0, (1.0, 1.0), 1.0)
    assert len(w) == 3


def test_concatenation_and_connector_widths(unit_square):
    a = synthesize_winglet(unit_square, 0, (0.0, 0.0), 1.0)
    b = synthesize_winglet(unit_square, 2, (1.0, 1.0), 0.0)
    poly = concatenate_winglets([a, b])
    widths = connector_widths([a, b], 3.0)
    assert poly.shape == (len(a) + len(b), 2)
    assert widths.tolist() == [0.0, 3.0, 3.0, 3.0, 0.0, 0.0, 3.0, 0.0]


def test_empty_category():
    assert concatenate_winglets([]).shape == (0, 2)
    assert len(connector_widths([], 1.0)) == 0


def test_winglet_core_excludes_connectors():
    w = Winglet(vertices=np.arange(10.0).reshape(5, 2), anchor_index=0, left_count=1, right_count=1)
    assert w.core.tolist() == [[2.0, 3.0], [4.0, 5.0], [6.0, 7.0]]


def test_each_side_walks_half_the_length(circle_contour):
    w = synthesize_winglet(circle_contour, 20, (0.0, 0.0), 0.8)
    left = w.core[: w.left_count + 1]
    right = w.core[w.left_count:]
    assert segment_lengths(left).sum() == pytest.approx(0.4, abs=1e-6)
    assert segment_lengths(right).sum() == pytest.approx(0.4, abs=1e-6)


def test_head_and_tail_pairs_are_duplicates(circle_contour):
    w = synthesize_winglet(circle_contour, 0, (0.3, 0.3), 0.5)
    np.testing.assert_array_equal(w.vertices[0], w.vertices[1])
    np.testing.assert_array_equal(w.vertices[-1], w.vertices[-2])
    flat = w.flat()
    assert flat[:2].tolist() == flat[2:4].tolist()


def test_budget_much_longer_than_perimeter_terminates(unit_square):
    w = synthesize_winglet(unit_square, 0, (0.0, 0.0), 10 * unit_square.perimeter)
    assert segment_lengths(w.core).sum() == pytest.approx(40.0)
    assert w.left_count == w.right_count == 20
