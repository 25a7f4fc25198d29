"""
Sutherland-Hodgman polygon clipping.

Polygons are clipped against directed lines, keeping the part on or to the
left of each line. A convex clip polygon wound counter-clockwise is handled as
the intersection of the half-planes left of its edges.
"""

from typing import List, Optional

import numpy as np

from .polygon import empty_polygon

# Line pairs whose intersection denominator falls below this are parallel.
PARALLEL_EPSILON = 1e-10


def is_inside(point: np.ndarray, a: np.ndarray, b: np.ndarray) -> bool:
    """Check if point is on or left of the directed edge a -> b."""
    return (b[0] - a[0]) * (point[1] - a[1]) - (b[1] - a[1]) * (point[0] - a[0]) >= 0


def line_intersection(p1: np.ndarray, p2: np.ndarray,
                      p3: np.ndarray, p4: np.ndarray) -> Optional[np.ndarray]:
    """
    Intersection of the infinite lines (p1, p2) and (p3, p4).

    Returns:
        [x, y] of the intersection, or None for parallel lines
    """
    x1, y1 = p1[0], p1[1]
    x2, y2 = p2[0], p2[1]
    x3, y3 = p3[0], p3[1]
    x4, y4 = p4[0], p4[1]

    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < PARALLEL_EPSILON:
        return None

    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    return np.array([x1 + t * (x2 - x1), y1 + t * (y2 - y1)])


def _clip_edge(polygon: np.ndarray, edge_start: np.ndarray, edge_end: np.ndarray) -> List[np.ndarray]:
    """One Sutherland-Hodgman pass against a single directed edge."""
    output = []
    n = len(polygon)
    for j in range(n):
        current = polygon[j]
        prev = polygon[(j + n - 1) % n]

        curr_inside = is_inside(current, edge_start, edge_end)
        prev_inside = is_inside(prev, edge_start, edge_end)

        if curr_inside:
            if not prev_inside:
                inter = line_intersection(prev, current, edge_start, edge_end)
                if inter is not None:
                    output.append(inter)
            output.append(current)
        elif prev_inside:
            inter = line_intersection(prev, current, edge_start, edge_end)
            if inter is not None:
                output.append(inter)
    return output


def _to_array(points: List[np.ndarray]) -> np.ndarray:
    if not points:
        return empty_polygon()
    return np.array(points, dtype=np.float64)


def clip_to_half_plane(polygon: np.ndarray, line_a: np.ndarray, line_b: np.ndarray) -> np.ndarray:
    """
    Clip a polygon to the half-plane left of the directed line line_a -> line_b.

    Args:
        polygon: (n, 2) subject polygon
        line_a: First point on the clip line
        line_b: Second point on the clip line

    Returns:
        Clipped polygon, empty when the subject has fewer than 3 vertices
    """
    if len(polygon) < 3:
        return empty_polygon()
    return _to_array(_clip_edge(polygon, line_a, line_b))


def clip_to_convex(subject: np.ndarray, convex_clip: np.ndarray) -> np.ndarray:
    """
    Clip `subject` against a convex, counter-clockwise `convex_clip` polygon.

    Clipping stops with an empty result as soon as an intermediate polygon
    drops below 3 vertices.

    Args:
        subject: (n, 2) polygon to clip
        convex_clip: (m, 2) convex clip region

    Returns:
        Clipped polygon (possibly empty)
    """
    if len(subject) < 3 or len(convex_clip) < 3:
        return empty_polygon()

    output = subject
    m = len(convex_clip)
    for i in range(m):
        output = _to_array(_clip_edge(output, convex_clip[i], convex_clip[(i + 1) % m]))
        if len(output) < 3:
            return empty_polygon()

    return output
