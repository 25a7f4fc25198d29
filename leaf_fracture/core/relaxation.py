"""Lloyd's relaxation of Voronoi seeds inside a polygon."""

import numpy as np
import structlog

from .polygon import point_in_polygon, polygon_centroid
from .voronoi_cells import compute_cells

logger = structlog.get_logger()


def relax(seeds: np.ndarray, bounding_polygon: np.ndarray, iterations: int = 2) -> np.ndarray:
    """Apply Lloyd's relaxation to even out cell sizes.

    Moves each seed to the centroid of its Voronoi cell. A seed stays where it
    is for an iteration when its cell is empty or when the centroid falls
    outside the bounding polygon, which happens on thin or concave outlines.

    Two iterations are enough to even out the pieces; many more converge
    towards a regular lattice that no longer looks torn.

    Args:
        seeds: (n, 2) seed points (not modified)
        bounding_polygon: Polygon the cells are clipped to
        iterations: Number of relaxation iterations

    Returns:
        Relaxed seed coordinates
    """
    seeds = np.array(seeds, dtype=np.float64)  # Don't modify original

    for iteration in range(iterations):
        cells = compute_cells(seeds, bounding_polygon)
        moved = 0

        for i, cell in enumerate(cells):
            if len(cell) < 3:
                continue
            centroid = polygon_centroid(cell)
            if point_in_polygon(centroid, bounding_polygon):
                seeds[i] = centroid
                moved += 1

        logger.debug("Relaxation iteration complete",
                     iteration=iteration + 1, moved=moved, seeds=len(seeds))

    return seeds
