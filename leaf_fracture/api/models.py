"""Request/response models for the HTTP API."""

from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..core.fracture import Fragment
from ..core.fragment_store import PuzzleSession

Point = Tuple[float, float]


def _point(value) -> Point:
    return (float(value[0]), float(value[1]))


def _polygon(values) -> List[Point]:
    return [_point(v) for v in values]


class SpeciesSummary(BaseModel):
    """A leaf species that can be fractured."""

    id: str
    name: str
    scientific_name: str
    difficulty: int
    fun_fact: str


class SpeciesOutline(BaseModel):
    """Outline and veins of a species in its local frame."""

    id: str
    outline: List[Point]
    veins: List[List[Point]]


class OutlineSource(BaseModel):
    """Either a species id or an explicit outline polygon."""

    model_config = ConfigDict(allow_inf_nan=False)

    species_id: Optional[str] = Field(None, description="Species whose outline is fractured")
    outline: Optional[List[Point]] = Field(None, min_length=3, description="Explicit outline polygon")
    difficulty: Optional[str] = Field(None, description="Difficulty tier: easy, medium or hard")
    piece_count: Optional[int] = Field(None, ge=1, description="Explicit number of seeds")
    seed: Optional[int] = Field(None, ge=0, description="Random seed for reproducible puzzles")


class FragmentGenerationRequest(OutlineSource):
    """Request to fracture an outline."""


class FragmentModel(BaseModel):
    """Geometry of one fragment."""

    id: int
    polygon: List[Point]
    centroid: Point
    area: float

    @classmethod
    def from_fragment(cls, fragment: Fragment) -> "FragmentModel":
        return cls(
            id=fragment.id,
            polygon=_polygon(fragment.polygon),
            centroid=_point(fragment.centroid),
            area=fragment.area,
        )


class FragmentGenerationResponse(BaseModel):
    """Fragments cut from an outline."""

    seed: int
    requested: int
    fragments: List[FragmentModel]


class FragmentState(FragmentModel):
    """Fragment geometry plus its play state."""

    current_position: Point
    rotation: float
    is_placed: bool
    z_index: int

    @classmethod
    def from_fragment(cls, fragment: Fragment) -> "FragmentState":
        return cls(
            id=fragment.id,
            polygon=_polygon(fragment.polygon),
            centroid=_point(fragment.centroid),
            area=fragment.area,
            current_position=_point(fragment.current_position),
            rotation=float(fragment.rotation),
            is_placed=fragment.is_placed,
            z_index=fragment.z_index,
        )


class PuzzleCreateRequest(OutlineSource):
    """Request to start a puzzle session."""

    surface_width: Optional[float] = Field(None, gt=0, description="Play surface width")
    surface_height: Optional[float] = Field(None, gt=0, description="Play surface height")


class PuzzleState(BaseModel):
    """Snapshot of a puzzle session."""

    puzzle_id: str
    seed: int
    scale: float
    anchor: Point
    surface_width: float
    surface_height: float
    placed_count: int
    total: int
    is_complete: bool
    held_fragment_id: Optional[int] = None
    fragments: List[FragmentState] = Field(description="Fragments in draw order, bottom first")

    @classmethod
    def from_session(cls, puzzle_id: str, session: PuzzleSession) -> "PuzzleState":
        held = session.held_fragment()
        return cls(
            puzzle_id=puzzle_id,
            seed=session.seed,
            scale=session.scale,
            anchor=_point(session.anchor),
            surface_width=session.surface_width,
            surface_height=session.surface_height,
            placed_count=session.store.placed_count,
            total=len(session.store),
            is_complete=session.is_complete,
            held_fragment_id=held.id if held is not None else None,
            fragments=[FragmentState.from_fragment(f) for f in session.store.draw_order()],
        )


class PointerRequest(BaseModel):
    """Pointer position on the play surface."""

    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float


class RotateRequest(BaseModel):
    """Quarter turns to apply (negative turns the other way)."""

    steps: int = Field(1, description="Number of 90 degree steps")


class RestartRequest(BaseModel):
    seed: Optional[int] = Field(None, ge=0, description="New random seed")


class FragmentUpdate(BaseModel):
    """Direct update of an unplaced fragment."""

    model_config = ConfigDict(allow_inf_nan=False)

    x: Optional[float] = None
    y: Optional[float] = None
    rotation: Optional[float] = None


class ReleaseResponse(BaseModel):
    """Result of dropping the held fragment."""

    snapped: bool
    state: PuzzleState
