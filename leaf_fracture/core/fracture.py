"""
Fracture engine: slice a leaf outline into irregular fragments.

The pipeline is: rejection-sample seed points inside the outline, spread them
with Lloyd relaxation, cut the outline into Voronoi cells, drop slivers, and
roughen every surviving cell so the cuts look torn rather than sliced.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np
import structlog

from .polygon import (
    AREA_EPSILON,
    as_polygon,
    polygon_area,
    polygon_bounds,
    polygon_centroid,
    point_in_polygon,
)
from .prng import Mulberry32, make_prng
from .relaxation import relax
from .voronoi_cells import compute_cells

logger = structlog.get_logger()

# Piece counts for each difficulty level.
PIECE_COUNTS: Dict[str, int] = {
    "easy": 5,
    "medium": 8,
    "hard": 13,
}
DEFAULT_DIFFICULTY = "medium"

# Rejection sampling gives up after this many draws per requested point.
SAMPLING_ATTEMPTS_PER_POINT = 200

# Offset of the fallback seeds from the outline's bounding-box centre.
FALLBACK_SEED_OFFSET = 20.0


@dataclass
class FractureConfig:
    """Tuning knobs for fragment generation."""

    relax_iterations: int = 2
    noise_amount: float = 2.0
    noise_subdivisions: int = 1
    min_area_fraction: float = 0.01
    max_piece_count: int = 20

    @classmethod
    def from_settings(cls, settings) -> "FractureConfig":
        return cls(
            relax_iterations=settings.relax_iterations,
            noise_amount=settings.noise_amount,
            noise_subdivisions=settings.noise_subdivisions,
            min_area_fraction=settings.min_area_fraction,
            max_piece_count=settings.max_piece_count,
        )


@dataclass
class Fragment:
    """One puzzle piece.

    `polygon` and `centroid` live in the outline's local coordinates and never
    change once built. The remaining fields track the piece on the play
    surface and should be changed through a FragmentStore.
    """
    id: int
    polygon: np.ndarray
    centroid: np.ndarray
    current_position: np.ndarray = field(default_factory=lambda: np.zeros(2))
    rotation: float = 0.0
    is_placed: bool = False
    z_index: int = 0

    @property
    def area(self) -> float:
        return polygon_area(self.polygon)

    @property
    def local_polygon(self) -> np.ndarray:
        """Polygon relative to its own centroid, as drawn and hit-tested."""
        return self.polygon - self.centroid


def resolve_piece_count(piece_count: Optional[int] = None,
                        difficulty: Optional[str] = None) -> int:
    """
    Work out how many pieces to cut.

    An explicit count wins; otherwise the difficulty tier is looked up, with
    unknown tiers falling back to medium.
    """
    if piece_count is not None:
        return int(piece_count)
    return PIECE_COUNTS.get(difficulty or DEFAULT_DIFFICULTY, PIECE_COUNTS[DEFAULT_DIFFICULTY])


def random_points_in_polygon(polygon: np.ndarray, n: int, rng: Mulberry32) -> np.ndarray:
    """
    Generate up to n random points inside a polygon using rejection sampling.

    Returns:
        (k, 2) array with k <= n; fewer points come back when the attempt
        budget runs out on very thin shapes
    """
    bounds = polygon_bounds(polygon)
    points = []
    attempts = 0
    max_attempts = n * SAMPLING_ATTEMPTS_PER_POINT

    while len(points) < n and attempts < max_attempts:
        attempts += 1
        x = bounds.min_x + rng.random() * bounds.width
        y = bounds.min_y + rng.random() * bounds.height
        if point_in_polygon((x, y), polygon):
            points.append([x, y])

    if not points:
        return np.empty((0, 2), dtype=np.float64)
    return np.array(points, dtype=np.float64)


def fallback_seeds(polygon: np.ndarray) -> np.ndarray:
    """Three hand-placed seeds around the bounding-box centre."""
    cx, cy = polygon_bounds(polygon).center
    offset = FALLBACK_SEED_OFFSET
    return np.array([
        [cx, cy],
        [cx - offset, cy - offset],
        [cx + offset, cy + offset],
    ])


def add_torn_edge_noise(polygon: np.ndarray, rng: Mulberry32,
                        amount: float = 2.0, subdivisions: int = 1) -> np.ndarray:
    """
    Roughen a polygon so straight cuts look like torn edges.

    Each edge is subdivided and the inserted points are pushed along the
    edge normal by a uniform offset in [-amount, amount].

    Args:
        polygon: (n, 2) polygon
        rng: Pseudo-random source
        amount: Maximum displacement
        subdivisions: Points inserted per edge

    Returns:
        New polygon with n * (subdivisions + 1) vertices
    """
    n = len(polygon)
    if n < 3:
        return polygon

    result = []
    for i in range(n):
        a = polygon[i]
        b = polygon[(i + 1) % n]
        result.append(a)

        dx = b[0] - a[0]
        dy = b[1] - a[1]
        length = np.hypot(dx, dy)
        for s in range(1, subdivisions + 1):
            t = s / (subdivisions + 1)
            mx = a[0] + dx * t
            my = a[1] + dy * t
            if length > 0:
                nx = -dy / length
                ny = dx / length
                displacement = (rng.random() - 0.5) * 2 * amount
                result.append([mx + nx * displacement, my + ny * displacement])
            else:
                result.append([mx, my])

    return np.array(result, dtype=np.float64)


def generate_fragments(outline,
                       piece_count: Optional[int] = None,
                       *,
                       difficulty: Optional[str] = None,
                       seed: Optional[int] = None,
                       rng: Optional[Mulberry32] = None,
                       config: Optional[FractureConfig] = None) -> List[Fragment]:
    """
    Generate puzzle fragments from a leaf outline.

    Args:
        outline: Simple polygon as (n, 2) array-like
        piece_count: Number of seeds; defaults to the difficulty's count
        difficulty: 'easy', 'medium' or 'hard'
        seed: Integer seed for reproducible output
        rng: Pseudo-random source; takes precedence over `seed`
        config: Fracture tuning, defaults to FractureConfig()

    Returns:
        Fragments in cell order. Cells that vanish or fall under the sliver
        threshold produce no fragment, so fewer than `piece_count` may come
        back and ids may have gaps.

    Raises:
        ValueError: for a malformed outline or an out-of-range piece count
    """
    config = config or FractureConfig()
    outline = as_polygon(outline)
    if len(outline) < 3:
        raise ValueError("Outline needs at least 3 vertices")

    n = resolve_piece_count(piece_count, difficulty)
    if n < 1 or n > config.max_piece_count:
        raise ValueError(f"piece_count must be between 1 and {config.max_piece_count}, got {n}")

    if rng is None:
        rng = make_prng(seed)

    logger.info("Generating fragments", requested=n, difficulty=difficulty, seed=rng.seed)

    seeds = random_points_in_polygon(outline, n, rng)
    if len(seeds) < 3:
        logger.warning("Too few seed points sampled, using fallback seeds", sampled=len(seeds))
        seeds = fallback_seeds(outline)

    seeds = relax(seeds, outline, config.relax_iterations)
    cells = compute_cells(seeds, outline)

    total_area = polygon_area(outline)
    min_area = total_area * config.min_area_fraction
    fragments = []

    for i, cell in enumerate(cells):
        if len(cell) < 3:
            continue
        area = polygon_area(cell)
        if area < AREA_EPSILON or area < min_area:
            continue

        cell = add_torn_edge_noise(cell, rng, config.noise_amount, config.noise_subdivisions)
        fragments.append(Fragment(
            id=i,
            polygon=cell,
            centroid=polygon_centroid(cell),
            z_index=i,
        ))

    logger.info("Fragments generated", requested=n, seeds=len(seeds), produced=len(fragments))
    return fragments
