"""In-memory route-building sessions driven by map events."""
from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from swimrun.config import settings
from swimrun.contracts.route_contract import RouteSnapshot
from swimrun.core.classifier import SpatialClassifier, build_classifier
from swimrun.core.session import RouteSession
from swimrun.errors import IndexOutOfRange, InvalidCoordinate

log = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

@dataclass
class _Entry:
    session: RouteSession
    lock: threading.Lock = field(default_factory=threading.Lock)
    last_used: float = field(default_factory=time.monotonic)


_sessions: Dict[str, _Entry] = {}
_classifier: Optional[SpatialClassifier] = None
_classifier_lock = threading.Lock()


def get_classifier() -> SpatialClassifier:
    """Polygon data is loaded once and shared by every session."""
    global _classifier
    with _classifier_lock:
        if _classifier is None:
            _classifier = build_classifier()
        return _classifier


def evict_idle(now: Optional[float] = None) -> int:
    """Drop sessions untouched for longer than ``session_ttl_s``; return how many."""
    now = time.monotonic() if now is None else now
    stale = [sid for sid, e in list(_sessions.items()) if now - e.last_used > settings.session_ttl_s]
    for sid in stale:
        _sessions.pop(sid, None)
    if stale:
        log.info("Evicted %d idle sessions", len(stale))
    return len(stale)


def set_classifier(classifier: Optional[SpatialClassifier]) -> None:
    global _classifier
    with _classifier_lock:
        _classifier = classifier


def _entry(session_id: str) -> _Entry:
    entry = _sessions.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"session {session_id} not found")
    return entry


def _apply(session_id: str, fn) -> "SnapshotOut":
    entry = _entry(session_id)
    with entry.lock:
        entry.last_used = time.monotonic()
        try:
            snap = fn(entry.session)
        except InvalidCoordinate as e:
            raise HTTPException(status_code=422, detail=str(e))
        except IndexOutOfRange as e:
            raise HTTPException(status_code=409, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
    return SnapshotOut.from_snapshot(session_id, snap)


# ---------------------------------------------------------------------------
# Request / Response models
# ---------------------------------------------------------------------------

class SessionCreate(BaseModel):
    classification: Optional[Literal["manual", "automatic"]] = None
    undo_last_segment: Optional[Literal["reset", "recompute"]] = None
    mode: Optional[Literal["swim", "run", "stop"]] = None


class ClickIn(BaseModel):
    lat: float
    lon: float
    edit_index: Optional[int] = None


class MarkerIn(BaseModel):
    index: int


class DragIn(BaseModel):
    index: int
    lat: float
    lon: float


class ModeIn(BaseModel):
    mode: Optional[Literal["swim", "run", "stop"]] = None


class WaypointOut(BaseModel):
    i: int
    lat: float
    lon: float
    type: str
    segment_km: float


class AggregatesOut(BaseModel):
    swim_km: float = 0.0
    run_km: float = 0.0
    current_route_km: float = 0.0
    last_segment_km: float = 0.0


class SnapshotOut(BaseModel):
    session_id: str
    state: str
    classification: str
    mode: Optional[str] = None
    editing_index: Optional[int] = None
    waypoints: List[WaypointOut] = Field(default_factory=list)
    aggregates: AggregatesOut

    @classmethod
    def from_snapshot(cls, session_id: str, snap: RouteSnapshot) -> "SnapshotOut":
        return cls(session_id=session_id, **snap.to_dict())


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=SnapshotOut, status_code=201)
def create_session(req: Optional[SessionCreate] = None):
    evict_idle()
    req = req or SessionCreate()
    session = RouteSession(
        classifier=get_classifier(),
        classification=req.classification or settings.classification,
        undo_last_segment=req.undo_last_segment or settings.undo_last_segment,
        mode=req.mode,
    )
    session_id = str(uuid.uuid4())
    _sessions[session_id] = _Entry(session)
    log.info("Session %s created (%s)", session_id, session.classification)
    return SnapshotOut.from_snapshot(session_id, session.state())


@router.get("/{session_id}", response_model=SnapshotOut)
def get_session(session_id: str):
    return _apply(session_id, lambda s: s.state())


@router.delete("/{session_id}", status_code=204)
def delete_session(session_id: str):
    if _sessions.pop(session_id, None) is None:
        raise HTTPException(status_code=404, detail=f"session {session_id} not found")
    log.info("Session %s closed", session_id)


@router.post("/{session_id}/click", response_model=SnapshotOut)
def click(session_id: str, body: ClickIn):
    return _apply(session_id, lambda s: s.point_clicked(body.lat, body.lon, body.edit_index))


@router.post("/{session_id}/marker-click", response_model=SnapshotOut)
def marker_click(session_id: str, body: MarkerIn):
    return _apply(session_id, lambda s: s.marker_clicked(body.index))


@router.post("/{session_id}/drag", response_model=SnapshotOut)
def drag(session_id: str, body: DragIn):
    return _apply(session_id, lambda s: s.marker_dragged(body.index, body.lat, body.lon))


@router.post("/{session_id}/undo", response_model=SnapshotOut)
def undo(session_id: str):
    return _apply(session_id, lambda s: s.undo_requested())


@router.post("/{session_id}/clear", response_model=SnapshotOut)
def clear(session_id: str):
    return _apply(session_id, lambda s: s.clear_requested())


@router.post("/{session_id}/mode", response_model=SnapshotOut)
def change_mode(session_id: str, body: ModeIn):
    return _apply(session_id, lambda s: s.mode_changed(body.mode))
