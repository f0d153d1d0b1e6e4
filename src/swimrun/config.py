"""Centralized settings for the swimrun route engine."""
from __future__ import annotations

from pathlib import Path
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "SWIMRUN_"}

    # "automatic" infers swim/run from land/water data, "manual" uses the selected mode
    classification: Literal["manual", "automatic"] = "automatic"

    # What undo does to the "last added" distance: zero it, or re-read the new tail segment
    undo_last_segment: Literal["reset", "recompute"] = "reset"

    # Polygon files (GeoJSON or .shp); none configured means every segment is unknown
    land_path: Optional[Path] = None
    water_paths: List[Path] = []

    # Natural Earth 1:10m land/ocean/lakes, downloaded on first use
    use_natural_earth: bool = False
    data_dir: Path = Path.home() / ".swimrun" / "data"

    # HTTP sessions idle longer than this are dropped
    session_ttl_s: int = 3600  # 1 h

    log_level: str = "INFO"


settings = Settings()
