"""
Fragment store and puzzle session.

All changes to a fragment's play state go through FragmentStore, which is the
single place that refuses to move or turn a piece once it has been placed.
PuzzleSession layers the pick / drag / rotate / release workflow on top of a
store for one puzzle instance.
"""

import math
from typing import Dict, Iterator, List, NamedTuple, Optional

import numpy as np
import structlog

from ..config import Settings, settings as default_settings
from .fracture import Fragment, FractureConfig, generate_fragments
from .placement import check_snap, find_topmost, scatter, snap
from .polygon import PointLike, as_point, as_polygon, polygon_bounds
from .prng import make_prng

logger = structlog.get_logger()

ROTATE_STEP = math.pi / 2

# Share of the smaller surface dimension the assembled leaf occupies.
FIT_FRACTION = 0.45


class FragmentPlacedError(ValueError):
    """Raised when a placed fragment is asked to move or turn."""


class FragmentStore:
    """Fragments of one puzzle keyed by id."""

    def __init__(self, fragments: List[Fragment]):
        self._fragments: Dict[int, Fragment] = {f.id: f for f in fragments}

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self._fragments.values())

    def __len__(self) -> int:
        return len(self._fragments)

    def __contains__(self, fragment_id: int) -> bool:
        return fragment_id in self._fragments

    def get(self, fragment_id: int) -> Fragment:
        """Look up a fragment, raising KeyError for unknown ids."""
        try:
            return self._fragments[fragment_id]
        except KeyError:
            raise KeyError(f"Unknown fragment {fragment_id}") from None

    def unplaced(self) -> List[Fragment]:
        return [f for f in self if not f.is_placed]

    @property
    def placed_count(self) -> int:
        return sum(1 for f in self if f.is_placed)

    @property
    def is_complete(self) -> bool:
        return len(self) > 0 and self.placed_count == len(self)

    def draw_order(self) -> List[Fragment]:
        """Fragments bottom to top: placed pieces first, then by z_index."""
        return sorted(self, key=lambda f: (not f.is_placed, f.z_index))

    def _movable(self, fragment_id: int) -> Fragment:
        fragment = self.get(fragment_id)
        if fragment.is_placed:
            raise FragmentPlacedError(f"Fragment {fragment_id} is already placed")
        return fragment

    def set_position(self, fragment_id: int, position: PointLike) -> None:
        self._movable(fragment_id).current_position = as_point(position)

    def set_rotation(self, fragment_id: int, rotation: float) -> None:
        self._movable(fragment_id).rotation = float(rotation)

    def rotate(self, fragment_id: int, delta: float) -> None:
        fragment = self._movable(fragment_id)
        fragment.rotation = fragment.rotation + delta

    def bring_to_front(self, fragment_id: int) -> None:
        fragment = self._movable(fragment_id)
        fragment.z_index = max(f.z_index for f in self) + 1

    def mark_placed(self, fragment_id: int, anchor: PointLike, scale: float = 1.0) -> None:
        """Snap a fragment home and lock it."""
        snap(self._movable(fragment_id), anchor, scale)
        logger.info("Fragment placed", fragment_id=fragment_id,
                    placed=self.placed_count, total=len(self))


class HeldFragment(NamedTuple):
    """The fragment being dragged and the grab offset from its position."""
    fragment_id: int
    offset: np.ndarray


def fit_scale(outline: np.ndarray, surface_width: float, surface_height: float) -> float:
    """Scale that makes the outline span FIT_FRACTION of the smaller surface side."""
    bounds = polygon_bounds(outline)
    extent = max(bounds.width, bounds.height)
    if extent <= 0:
        return 1.0
    return min(surface_width, surface_height) * FIT_FRACTION / extent


class PuzzleSession:
    """
    One puzzle instance: a fragment set, its layout and the current drag.

    At most one fragment is held at a time.
    """

    def __init__(self,
                 outline,
                 *,
                 piece_count: Optional[int] = None,
                 difficulty: Optional[str] = None,
                 seed: Optional[int] = None,
                 surface_width: Optional[float] = None,
                 surface_height: Optional[float] = None,
                 scale: Optional[float] = None,
                 settings: Optional[Settings] = None):
        self.settings = settings or default_settings
        self.outline = as_polygon(outline)
        self.piece_count = piece_count
        self.difficulty = difficulty or self.settings.default_difficulty
        self.surface_width = surface_width or self.settings.surface_width
        self.surface_height = surface_height or self.settings.surface_height
        self.scale = scale or fit_scale(self.outline, self.surface_width, self.surface_height)

        surface_center = np.array([self.surface_width / 2, self.surface_height / 2])
        self.anchor = surface_center - polygon_bounds(self.outline).center * self.scale

        self.seed: int = 0
        self.store = FragmentStore([])
        self.held: Optional[HeldFragment] = None
        self.restart(seed)

    def restart(self, seed: Optional[int] = None) -> None:
        """Throw away the current fragments and fracture the outline afresh."""
        rng = make_prng(seed)
        self.seed = rng.seed
        cfg = self.settings

        fragments = generate_fragments(
            self.outline,
            self.piece_count,
            difficulty=self.difficulty,
            rng=rng,
            config=FractureConfig.from_settings(cfg),
        )
        scatter(
            fragments,
            self.surface_width,
            self.surface_height,
            avoid_center=(self.surface_width / 2, self.surface_height / 2),
            avoid_radius=cfg.avoid_radius,
            rng=rng,
            margin=cfg.scatter_margin,
            max_attempts=cfg.scatter_attempts,
        )
        self.store = FragmentStore(fragments)
        self.held = None
        logger.info("Puzzle started", seed=self.seed, fragments=len(fragments), scale=self.scale)

    @property
    def is_complete(self) -> bool:
        return self.store.is_complete

    def held_fragment(self) -> Optional[Fragment]:
        if self.held is None:
            return None
        return self.store.get(self.held.fragment_id)

    def pick(self, point: PointLike) -> Optional[Fragment]:
        """Grab the topmost unplaced fragment under the point, if any."""
        point = as_point(point)
        fragment = find_topmost(point, self.store, self.scale)
        if fragment is None:
            self.held = None
            return None

        self.store.bring_to_front(fragment.id)
        self.held = HeldFragment(fragment.id, point - fragment.current_position)
        return fragment

    def drag(self, point: PointLike) -> Optional[Fragment]:
        """Move the held fragment so the grab point follows the pointer."""
        if self.held is None:
            return None
        self.store.set_position(self.held.fragment_id, as_point(point) - self.held.offset)
        return self.held_fragment()

    def rotate(self, steps: int = 1) -> Optional[Fragment]:
        """
        Turn a fragment by quarter turns.

        The held fragment turns if there is one, otherwise the topmost
        unplaced fragment does.
        """
        if self.held is not None:
            fragment_id = self.held.fragment_id
        else:
            unplaced = self.store.unplaced()
            if not unplaced:
                return None
            fragment_id = max(unplaced, key=lambda f: f.z_index).id

        self.store.rotate(fragment_id, steps * ROTATE_STEP)
        return self.store.get(fragment_id)

    def release(self) -> bool:
        """
        Drop the held fragment, snapping it home when close enough.

        Returns:
            True if the fragment snapped into place
        """
        fragment = self.held_fragment()
        self.held = None
        if fragment is None:
            return False

        if not check_snap(fragment, self.anchor,
                          self.settings.snap_distance,
                          self.settings.snap_angle_tolerance,
                          self.scale):
            return False

        self.store.mark_placed(fragment.id, self.anchor, self.scale)
        if self.is_complete:
            logger.info("Puzzle complete", seed=self.seed, fragments=len(self.store))
        return True
