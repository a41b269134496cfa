"""Shared test fixtures."""

from __future__ import annotations

import numpy as np
import pytest

from winglets.utils.contour import Contour
from winglets.utils.datagen import generate_cluster, sunflower_cluster


class RecordingLine:
    """Line consumer that records what the engine hands it."""

    def __init__(self, width: float = 1.0, is_2d: bool = True) -> None:
        self.width = width
        self.is_2d = is_2d
        self.vertices: np.ndarray | None = None
        self.widths: np.ndarray | None = None
        self.color = None
        self.draw_calls: list[np.ndarray] = []
        self.destroyed = False

    def set_points(self, vertices, widths=None) -> None:
        self.vertices = np.asarray(vertices, dtype=np.float64)
        self.widths = None if widths is None else np.asarray(widths, dtype=np.float64)

    def set_style(self, *, color) -> None:
        self.color = tuple(color)

    def draw(self, transform) -> None:
        self.draw_calls.append(np.asarray(transform))

    def destroy(self) -> None:
        self.destroyed = True


class RecordingFactory:
    def __init__(self) -> None:
        self.lines: list[RecordingLine] = []

    def __call__(self, width: float = 1.0, is_2d: bool = True) -> RecordingLine:
        line = RecordingLine(width=width, is_2d=is_2d)
        self.lines.append(line)
        return line

    @property
    def live(self) -> list[RecordingLine]:
        return [line for line in self.lines if not line.destroyed]


@pytest.fixture
def line_factory() -> RecordingFactory:
    return RecordingFactory()


@pytest.fixture
def blob_points() -> list[tuple]:
    """Single smooth Gaussian blob at the origin."""
    return sunflower_cluster(200, "blob", x=0.0, y=0.0, sigma=0.2)


@pytest.fixture
def bimodal_points() -> list[tuple]:
    """Two categories, 100 points each."""
    return (
        sunflower_cluster(100, "a", x=-0.4, y=-0.3, sigma=0.1)
        + sunflower_cluster(100, "b", x=0.4, y=0.3, sigma=0.1)
    )


@pytest.fixture
def separated_clusters() -> list[tuple]:
    """Two random Gaussian clusters, sigma 0.05, 50 points each."""
    rng = np.random.default_rng(7)
    return (
        generate_cluster(50, 0, x=-0.5, y=-0.5, sigma=0.05, rng=rng)
        + generate_cluster(50, 1, x=0.5, y=0.5, sigma=0.05, rng=rng)
    )


@pytest.fixture
def unit_square() -> Contour:
    return Contour(np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]]))


@pytest.fixture
def circle_contour() -> Contour:
    theta = np.linspace(0, 2 * np.pi, 64, endpoint=False)
    return Contour(np.column_stack([0.5 * np.cos(theta), 0.5 * np.sin(theta)]))
