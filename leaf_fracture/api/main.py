"""FastAPI main application."""

import logging
from typing import List

import structlog
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..core.fracture import FractureConfig, generate_fragments, resolve_piece_count
from ..core.outlines import get_provider, list_species
from ..core.prng import make_prng
from .models import (
    FragmentGenerationRequest,
    FragmentGenerationResponse,
    FragmentModel,
    SpeciesOutline,
    SpeciesSummary,
)
from .puzzles import resolve_outline, router as puzzles_router

# Configure logging
logging.basicConfig(level=settings.log_level.upper(), format="%(message)s")
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Initialize FastAPI app
app = FastAPI(
    title="Leaf Fracture API",
    description="Cut leaf outlines into torn puzzle fragments",
    version=__version__
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(puzzles_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Leaf Fracture API",
        "version": __version__,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "species": len(list_species())}


@app.get("/species", response_model=List[SpeciesSummary])
async def get_species():
    """List the available leaf species."""
    return [
        SpeciesSummary(
            id=provider.species_id,
            name=provider.name,
            scientific_name=provider.scientific_name,
            difficulty=provider.difficulty,
            fun_fact=provider.fun_fact,
        )
        for provider in list_species()
    ]


@app.get("/species/{species_id}/outline", response_model=SpeciesOutline)
async def get_species_outline(species_id: str):
    """Outline polygon and vein polylines of a species."""
    try:
        provider = get_provider(species_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Species not found")

    return SpeciesOutline(
        id=provider.species_id,
        outline=[tuple(p) for p in provider.generate_outline().tolist()],
        veins=[[tuple(p) for p in vein.tolist()] for vein in provider.generate_veins()],
    )


@app.post("/fragments", response_model=FragmentGenerationResponse)
async def create_fragments(request: FragmentGenerationRequest):
    """
    Fracture an outline into fragments.

    The same outline, piece count and seed always return the same fragments.
    """
    outline = resolve_outline(request)
    difficulty = request.difficulty or settings.default_difficulty
    rng = make_prng(request.seed)

    try:
        fragments = generate_fragments(
            outline,
            request.piece_count,
            difficulty=difficulty,
            rng=rng,
            config=FractureConfig.from_settings(settings),
        )
    except ValueError as e:
        logger.warning("Fragment generation rejected", error=str(e))
        raise HTTPException(status_code=400, detail=str(e))

    return FragmentGenerationResponse(
        seed=rng.seed,
        requested=resolve_piece_count(request.piece_count, difficulty),
        fragments=[FragmentModel.from_fragment(f) for f in fragments],
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
