"""
Voronoi cell construction by half-plane intersection.

Each seed's cell starts as an oversized box around the bounding polygon and is
cut down by the perpendicular bisector towards every other seed. This costs
O(n^2) clips per cell and O(n^3) overall, which is fine for the handful of
seeds a puzzle uses.
"""

from typing import List

import numpy as np
import structlog

from .clipping import clip_to_convex, clip_to_half_plane
from .polygon import empty_polygon, polygon_bounds

logger = structlog.get_logger()


def get_bounding_region(bounding_polygon: np.ndarray) -> np.ndarray:
    """
    Build the counter-clockwise box every cell starts from.

    The box pads the polygon's bounds by half of their larger dimension on
    each side.
    """
    bounds = polygon_bounds(bounding_polygon)
    pad = max(bounds.width, bounds.height) * 0.5
    return np.array([
        [bounds.min_x - pad, bounds.min_y - pad],
        [bounds.max_x + pad, bounds.min_y - pad],
        [bounds.max_x + pad, bounds.max_y + pad],
        [bounds.min_x - pad, bounds.max_y + pad],
    ])


def bisector_half_plane(seed: np.ndarray, other: np.ndarray):
    """
    Directed line along the perpendicular bisector of (seed, other).

    The line is oriented so that `seed` lies on its left, which is the side
    kept by clip_to_half_plane.

    Returns:
        Tuple of (line_a, line_b)
    """
    mid = (seed + other) / 2
    dx = other[0] - seed[0]
    dy = other[1] - seed[1]
    line_a = np.array([mid[0] + dy, mid[1] - dx])
    line_b = np.array([mid[0] - dy, mid[1] + dx])
    return line_a, line_b


def compute_cell(index: int, seeds: np.ndarray, region: np.ndarray,
                 bounding_polygon: np.ndarray) -> np.ndarray:
    """Compute the clipped Voronoi cell of seeds[index]."""
    cell = region
    seed = seeds[index]

    for j in range(len(seeds)):
        if j == index:
            continue
        if len(cell) < 3:
            break
        line_a, line_b = bisector_half_plane(seed, seeds[j])
        cell = clip_to_half_plane(cell, line_a, line_b)

    if len(cell) < 3:
        return empty_polygon()

    # The cell is convex and the outline may not be, so the outline is the
    # subject and the cell the clip region.
    clipped = clip_to_convex(bounding_polygon, cell)
    return clipped if len(clipped) >= 3 else empty_polygon()


def compute_cells(seeds: np.ndarray, bounding_polygon: np.ndarray) -> List[np.ndarray]:
    """
    Compute Voronoi cells for seeds clipped to a bounding polygon.

    Args:
        seeds: (n, 2) seed points
        bounding_polygon: Simple polygon the cells are clipped to

    Returns:
        One polygon per seed in seed order; empty (0, 2) arrays for seeds
        whose cell vanished
    """
    seeds = np.asarray(seeds, dtype=np.float64)
    region = get_bounding_region(bounding_polygon)

    cells = [compute_cell(i, seeds, region, bounding_polygon) for i in range(len(seeds))]

    logger.debug("Voronoi cells computed",
                 seeds=len(seeds),
                 empty_cells=sum(1 for cell in cells if len(cell) == 0))
    return cells
