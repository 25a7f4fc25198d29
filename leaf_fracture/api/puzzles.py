"""
Puzzle session API endpoints.

Sessions live in process memory for as long as the server runs. Each one is
driven with the same pick / drag / rotate / release calls a pointer would
make.
"""

import uuid
from typing import Dict

import numpy as np
import structlog
from fastapi import APIRouter, HTTPException

from ..core.fragment_store import FragmentPlacedError, PuzzleSession
from ..core.outlines import get_provider
from ..core.polygon import as_polygon
from .models import (
    FragmentUpdate,
    OutlineSource,
    PointerRequest,
    PuzzleCreateRequest,
    PuzzleState,
    ReleaseResponse,
    RestartRequest,
    RotateRequest,
)

logger = structlog.get_logger()

# Create router
router = APIRouter(prefix="/puzzles", tags=["puzzles"])

# Active sessions keyed by puzzle id
sessions: Dict[str, PuzzleSession] = {}


def resolve_outline(source: OutlineSource) -> np.ndarray:
    """Outline polygon for a request, from a species id or given explicitly."""
    if source.outline is not None:
        return as_polygon(source.outline)
    if source.species_id is None:
        raise HTTPException(status_code=400, detail="Either species_id or outline is required")
    try:
        return get_provider(source.species_id).generate_outline()
    except KeyError:
        raise HTTPException(status_code=404, detail="Species not found")


def get_session_or_404(puzzle_id: str) -> PuzzleSession:
    """Get a session or raise 404 if not found."""
    session = sessions.get(puzzle_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Puzzle not found")
    return session


@router.post("", response_model=PuzzleState)
async def create_puzzle(request: PuzzleCreateRequest):
    """Fracture an outline and scatter the pieces for a new puzzle."""
    outline = resolve_outline(request)
    try:
        session = PuzzleSession(
            outline,
            piece_count=request.piece_count,
            difficulty=request.difficulty,
            seed=request.seed,
            surface_width=request.surface_width,
            surface_height=request.surface_height,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    puzzle_id = str(uuid.uuid4())
    sessions[puzzle_id] = session
    logger.info("Puzzle created", puzzle_id=puzzle_id, seed=session.seed,
                fragments=len(session.store))
    return PuzzleState.from_session(puzzle_id, session)


@router.get("/{puzzle_id}", response_model=PuzzleState)
async def get_puzzle(puzzle_id: str):
    """Current state of a puzzle."""
    return PuzzleState.from_session(puzzle_id, get_session_or_404(puzzle_id))


@router.delete("/{puzzle_id}")
async def delete_puzzle(puzzle_id: str):
    """Discard a puzzle."""
    get_session_or_404(puzzle_id)
    del sessions[puzzle_id]
    return {"deleted": puzzle_id}


@router.post("/{puzzle_id}/pick", response_model=PuzzleState)
async def pick_fragment(puzzle_id: str, request: PointerRequest):
    """Grab the topmost unplaced fragment under the pointer."""
    session = get_session_or_404(puzzle_id)
    session.pick((request.x, request.y))
    return PuzzleState.from_session(puzzle_id, session)


@router.post("/{puzzle_id}/drag", response_model=PuzzleState)
async def drag_fragment(puzzle_id: str, request: PointerRequest):
    """Move the held fragment with the pointer."""
    session = get_session_or_404(puzzle_id)
    session.drag((request.x, request.y))
    return PuzzleState.from_session(puzzle_id, session)


@router.post("/{puzzle_id}/rotate", response_model=PuzzleState)
async def rotate_fragment(puzzle_id: str, request: RotateRequest):
    """Turn the held fragment, or the topmost one if nothing is held."""
    session = get_session_or_404(puzzle_id)
    session.rotate(request.steps)
    return PuzzleState.from_session(puzzle_id, session)


@router.post("/{puzzle_id}/release", response_model=ReleaseResponse)
async def release_fragment(puzzle_id: str):
    """Drop the held fragment, snapping it home when close enough."""
    session = get_session_or_404(puzzle_id)
    snapped = session.release()
    return ReleaseResponse(snapped=snapped, state=PuzzleState.from_session(puzzle_id, session))


@router.post("/{puzzle_id}/restart", response_model=PuzzleState)
async def restart_puzzle(puzzle_id: str, request: RestartRequest):
    """Fracture the same outline again with a new seed."""
    session = get_session_or_404(puzzle_id)
    session.restart(request.seed)
    return PuzzleState.from_session(puzzle_id, session)


@router.put("/{puzzle_id}/fragments/{fragment_id}", response_model=PuzzleState)
async def update_fragment(puzzle_id: str, fragment_id: int, request: FragmentUpdate):
    """Set the position and/or rotation of an unplaced fragment."""
    session = get_session_or_404(puzzle_id)
    if (request.x is None) != (request.y is None):
        raise HTTPException(status_code=400, detail="x and y must be given together")

    try:
        if request.x is not None:
            session.store.set_position(fragment_id, (request.x, request.y))
        if request.rotation is not None:
            session.store.set_rotation(fragment_id, request.rotation)
    except FragmentPlacedError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except KeyError:
        raise HTTPException(status_code=404, detail="Fragment not found")

    return PuzzleState.from_session(puzzle_id, session)
