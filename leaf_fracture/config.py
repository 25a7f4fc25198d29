"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings pulled from LEAF_FRACTURE_* environment variables."""

    # Fracture
    default_difficulty: str = Field(default="medium", description="Difficulty tier used when none is given")
    max_piece_count: int = Field(default=20, ge=1, description="Largest accepted piece count")
    relax_iterations: int = Field(default=2, ge=0, description="Lloyd relaxation iterations")
    noise_amount: float = Field(default=2.0, ge=0, description="Torn-edge displacement bound")
    noise_subdivisions: int = Field(default=1, ge=0, description="Noisy points inserted per edge")
    min_area_fraction: float = Field(default=0.01, ge=0, lt=1, description="Sliver cut-off as a fraction of outline area")

    # Placement
    snap_distance: float = Field(default=35.0, gt=0, description="Maximum snap distance")
    snap_angle_tolerance: float = Field(default=0.4, gt=0, description="Maximum snap angle error in radians")
    scatter_margin: float = Field(default=40.0, ge=0, description="Scatter margin from the surface edge")
    avoid_radius: float = Field(default=120.0, ge=0, description="Keep-out radius around the assembly target")
    scatter_attempts: int = Field(default=50, ge=1, description="Scatter retries per fragment")

    # Play surface
    surface_width: float = Field(default=800.0, gt=0, description="Default play surface width")
    surface_height: float = Field(default=600.0, gt=0, description="Default play surface height")

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")

    class Config:
        env_prefix = "LEAF_FRACTURE_"
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
