"""
Placement and hit-testing of fragments on the play surface.

A fragment is drawn with its centroid at `current_position` and rotated by
`rotation` about that point. Its home is `anchor + centroid * scale`, where the
anchor is the surface position of the outline's local origin and `scale` maps
outline units to surface units.
"""

import math
from typing import Iterable, List, Optional

import numpy as np
import structlog

from .fracture import Fragment
from .polygon import PointLike, as_point, distance, inverse_transform_point, point_in_polygon
from .prng import Mulberry32, make_prng

logger = structlog.get_logger()

TWO_PI = 2 * math.pi

# Scattered pieces start in 90 degree increments, like real puzzle pieces.
SCATTER_ROTATIONS = (0.0, math.pi / 2, math.pi, 3 * math.pi / 2)


def normalize_angle(angle: float) -> float:
    """Normalize an angle in radians into [0, 2pi)."""
    angle = math.fmod(angle, TWO_PI)
    if angle < 0:
        angle += TWO_PI
    # fmod of a tiny negative number can round back up to exactly 2pi
    return 0.0 if angle >= TWO_PI else angle


def scatter(fragments: List[Fragment],
            surface_width: float,
            surface_height: float,
            avoid_center: PointLike,
            avoid_radius: float,
            rng: Optional[Mulberry32] = None,
            margin: float = 40.0,
            max_attempts: int = 50) -> None:
    """
    Scatter fragments around the play surface, away from the assembly area.

    Positions are sampled uniformly in [margin, dimension - margin] and
    resampled while they land within `avoid_radius` of `avoid_center`. After
    `max_attempts` samples the last one is kept. Each piece gets a random
    quarter-turn rotation and a z_index equal to its list position. Placed
    fragments are left untouched.
    """
    rng = rng or make_prng()
    avoid_center = as_point(avoid_center)
    crowded = 0

    for i, fragment in enumerate(fragments):
        if fragment.is_placed:
            continue

        attempts = 0
        while True:
            x = margin + rng.random() * (surface_width - margin * 2)
            y = margin + rng.random() * (surface_height - margin * 2)
            attempts += 1
            if distance((x, y), avoid_center) >= avoid_radius or attempts >= max_attempts:
                break

        if distance((x, y), avoid_center) < avoid_radius:
            crowded += 1

        fragment.current_position = np.array([x, y])
        fragment.rotation = rng.choice(SCATTER_ROTATIONS)
        fragment.z_index = i

    logger.debug("Fragments scattered", count=len(fragments), inside_avoid_radius=crowded)


def hit_test(point: PointLike, fragment: Fragment, scale: float = 1.0) -> bool:
    """
    Check if a surface-space point hits a fragment.

    The point is mapped into the fragment's frame (undoing its translation and
    rotation) and tested against the centroid-relative polygon. Placed
    fragments never report a hit.
    """
    if fragment.is_placed:
        return False
    local = inverse_transform_point(point, fragment.rotation, fragment.current_position)
    return point_in_polygon(local, fragment.local_polygon * scale)


def find_topmost(point: PointLike, fragments: Iterable[Fragment],
                 scale: float = 1.0) -> Optional[Fragment]:
    """Find the topmost unplaced fragment under a point."""
    candidates = sorted((f for f in fragments if not f.is_placed),
                        key=lambda f: f.z_index, reverse=True)
    for fragment in candidates:
        if hit_test(point, fragment, scale):
            return fragment
    return None


def target_position(fragment: Fragment, anchor: PointLike, scale: float = 1.0) -> np.ndarray:
    """Surface position of a fragment's centroid when correctly placed."""
    return as_point(anchor) + fragment.centroid * scale


def check_snap(fragment: Fragment,
               anchor: PointLike,
               snap_distance: float = 35.0,
               snap_angle_tolerance: float = 0.4,
               scale: float = 1.0) -> bool:
    """
    Check if a fragment is close enough to snap into place.

    Args:
        fragment: Fragment being released
        anchor: Surface position of the outline's local origin
        snap_distance: Maximum distance for snap (exclusive)
        snap_angle_tolerance: Maximum angle error for snap in radians
        scale: Outline-to-surface scale factor

    Returns:
        True when both the position and the rotation are within tolerance
    """
    offset = distance(fragment.current_position, target_position(fragment, anchor, scale))

    rotation = normalize_angle(fragment.rotation)
    angle_ok = rotation < snap_angle_tolerance or rotation > TWO_PI - snap_angle_tolerance

    return offset < snap_distance and angle_ok


def snap(fragment: Fragment, anchor: PointLike, scale: float = 1.0) -> None:
    """Lock a fragment into its correct position. Irreversible."""
    fragment.current_position = target_position(fragment, anchor, scale)
    fragment.rotation = 0.0
    fragment.is_placed = True
