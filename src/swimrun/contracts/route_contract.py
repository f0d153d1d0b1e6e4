from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class WaypointView:
    i: int
    lat: float
    lon: float
    type: str          # start / swim / run / stop / unknown
    segment_km: float  # incoming segment, 0 for start and stop


@dataclass(frozen=True)
class Aggregates:
    swim_km: float = 0.0
    run_km: float = 0.0
    current_route_km: float = 0.0
    last_segment_km: float = 0.0


@dataclass(frozen=True)
class RouteSnapshot:
    """Everything the map UI needs to redraw after an event."""
    state: str
    waypoints: List[WaypointView]
    aggregates: Aggregates
    classification: str
    mode: Optional[str] = None
    editing_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
