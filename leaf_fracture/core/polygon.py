"""Polygon primitives used by the fracture engine and hit-testing."""

import math
from typing import NamedTuple, Sequence, Union

import numpy as np

PointLike = Union[np.ndarray, Sequence[float]]

# Below this absolute area a polygon is treated as collinear.
AREA_EPSILON = 1e-10


class Bounds(NamedTuple):
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> np.ndarray:
        return np.array([(self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2])


def as_polygon(points) -> np.ndarray:
    """
    Coerce a sequence of [x, y] pairs into an (n, 2) float array.

    Raises:
        ValueError: if the input is not a list of 2-D points
    """
    polygon = np.asarray(points, dtype=np.float64)
    if polygon.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    if polygon.ndim != 2 or polygon.shape[1] != 2:
        raise ValueError(f"Expected an array of [x, y] points, got shape {polygon.shape}")
    return polygon


def as_point(point: PointLike) -> np.ndarray:
    return np.asarray(point, dtype=np.float64).reshape(2)


def empty_polygon() -> np.ndarray:
    return np.empty((0, 2), dtype=np.float64)


def distance(a: PointLike, b: PointLike) -> float:
    """Euclidean distance between two points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def signed_area(polygon: np.ndarray) -> float:
    """Signed area of a polygon using the shoelace formula (positive = CCW)."""
    n = len(polygon)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i][0] * polygon[j][1]
        area -= polygon[j][0] * polygon[i][1]
    return area / 2


def polygon_area(polygon: np.ndarray) -> float:
    """Absolute area of a polygon."""
    return abs(signed_area(polygon))


def polygon_centroid(polygon: np.ndarray) -> np.ndarray:
    """Compute the centroid of a polygon.

    Falls back to the mean of the vertices for degenerate (collinear)
    polygons instead of dividing by a zero area.

    Args:
        polygon: Array of [x, y] vertex coordinates

    Returns:
        [x, y] centroid coordinates
    """
    area = signed_area(polygon)
    if abs(area) < AREA_EPSILON:
        return np.mean(polygon, axis=0)

    n = len(polygon)
    cx = 0.0
    cy = 0.0
    for i in range(n):
        j = (i + 1) % n
        cross = polygon[i][0] * polygon[j][1] - polygon[j][0] * polygon[i][1]
        cx += (polygon[i][0] + polygon[j][0]) * cross
        cy += (polygon[i][1] + polygon[j][1]) * cross

    return np.array([cx / (6.0 * area), cy / (6.0 * area)])


def point_in_polygon(point: PointLike, polygon: np.ndarray) -> bool:
    """
    Point-in-polygon test by ray casting.

    Points exactly on an edge may land on either side.
    """
    x, y = point[0], point[1]
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i][0], polygon[i][1]
        xj, yj = polygon[j][0], polygon[j][1]
        if (yi > y) != (yj > y) and x < (xj - xi) * (y - yi) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside


def polygon_bounds(polygon: np.ndarray) -> Bounds:
    """Axis-aligned bounding box of a polygon."""
    mins = polygon.min(axis=0)
    maxs = polygon.max(axis=0)
    return Bounds(float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))


def transform_point(point: PointLike, rotation: float, translation: PointLike) -> np.ndarray:
    """Rotate a point about the origin, then translate it."""
    cos = math.cos(rotation)
    sin = math.sin(rotation)
    return np.array([
        point[0] * cos - point[1] * sin + translation[0],
        point[0] * sin + point[1] * cos + translation[1],
    ])


def inverse_transform_point(point: PointLike, rotation: float, translation: PointLike) -> np.ndarray:
    """Undo transform_point: subtract the translation, then rotate back."""
    dx = point[0] - translation[0]
    dy = point[1] - translation[1]
    return transform_point((dx, dy), -rotation, (0.0, 0.0))
