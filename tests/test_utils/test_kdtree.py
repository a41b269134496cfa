"""Tests for the k-d tree nearest-neighbour search."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
from scipy.spatial import cKDTree
from scipy.spatial.distance import cdist

from winglets.utils.contour import Contour
from winglets.utils.kdtree import KDTree


@pytest.fixture
def random_points():
    return np.random.default_rng(5).uniform(-1, 1, size=(500, 2))


@pytest.mark.parametrize("node_size", [1, 8, 64, 1000])
def test_nearest_matches_scipy(random_points, node_size):
    tree = KDTree(random_points, node_size=node_size)
    reference = cKDTree(random_points)
    queries = np.random.default_rng(6).uniform(-1.5, 1.5, size=(200, 2))
    for q in queries:
        hit = tree.nearest(q)
        dist, _ = reference.query(q)
        assert hit.distance == pytest.approx(dist)
        np.testing.assert_allclose(hit.position, random_points[hit.index])


def test_index_is_original_position(random_points):
    tree = KDTree(random_points, node_size=4)
    for k in (0, 17, 499):
        hit = tree.nearest(random_points[k])
        assert hit.index == k
        assert hit.distance == 0.0


def test_from_contours_tags_vertices(unit_square, circle_contour):
    tree = KDTree.from_contours([unit_square, circle_contour], node_size=4)
    assert len(tree) == 4 + 64
    hit = tree.nearest((1.01, 1.02))
    assert (hit.contour_id, hit.index) == (0, 2)
    target = circle_contour.vertices[10]
    hit = tree.nearest(target + 1e-4)
    assert (hit.contour_id, hit.index) == (1, 10)
    assert tree.contours[1] is circle_contour


def test_single_point():
    tree = KDTree(np.array([[0.3, -0.2]]))
    hit = tree.nearest((5.0, 5.0))
    assert hit.index == 0
    assert hit.position == (0.3, -0.2)


def test_duplicate_points_resolve_to_zero_distance():
    pts = np.array([[0.0, 0.0], [1.0, 1.0], [1.0, 1.0], [2.0, 2.0]])
    hit = KDTree(pts, node_size=1).nearest((1.0, 1.0))
    assert hit.distance == 0.0
    assert hit.index in (1, 2)


def test_empty_input():
    with pytest.raises(ValueError):
        KDTree(np.empty((0, 2)))
    with pytest.raises(ValueError):
        KDTree.from_contours([])


def test_mismatched_tags():
    with pytest.raises(ValueError):
        KDTree(np.zeros((3, 2)), contour_ids=np.zeros(2))


def test_tree_arrays_are_read_only(random_points):
    tree = KDTree(random_points)
    with pytest.raises(ValueError):
        tree.coords[0, 0] = 99.0
    with pytest.raises(ValueError):
        tree.ids[0] = 3


def test_concurrent_queries_agree(random_points):
    tree = KDTree(random_points, node_size=16)
    queries = np.random.default_rng(9).uniform(-1, 1, size=(300, 2))
    sequential = tree.nearest_many(queries)
    with ThreadPoolExecutor(max_workers=4) as pool:
        threaded = list(pool.map(tree.nearest, queries))
    assert threaded == sequential


def test_contour_vertex_count_is_preserved(circle_contour):
    tree = KDTree.from_contours([Contour(circle_contour.vertices)])
    assert len(tree) == len(circle_contour)


def test_nothing_is_strictly_closer_than_the_result():
    rng = np.random.default_rng(12)
    pts = rng.normal(size=(200, 2))
    tree = KDTree(pts, node_size=2)
    queries = rng.normal(size=(50, 2)) * 2
    brute = cdist(queries, pts).min(axis=1)
    for q, best in zip(queries, brute):
        assert tree.nearest(q).distance <= best + 1e-12
