"""Route-building session: turns map/button events into route edits."""
from __future__ import annotations

import logging
from typing import Optional, Union

from swimrun.contracts.route_contract import RouteSnapshot
from swimrun.core.classifier import SpatialClassifier, build_classifier
from swimrun.core.models import USER_MODES, Coordinate, SegmentType
from swimrun.core.route import Classification, RouteModel, UndoPolicy

log = logging.getLogger(__name__)

ModeLike = Union[SegmentType, str, None]


def parse_mode(mode: ModeLike) -> Optional[SegmentType]:
    """Accept ``"swim"`` / ``"run"`` / ``"stop"`` (or the enum, or None)."""
    if mode is None:
        return None
    try:
        m = SegmentType(mode)
    except ValueError:
        raise ValueError(f"unknown mode {mode!r}; expected one of swim, run, stop") from None
    if m not in USER_MODES:
        raise ValueError(f"unknown mode {mode!r}; expected one of swim, run, stop")
    return m


class RouteSession:
    """
    The one active route-building context: route, selected mode and the
    waypoint armed for editing. Every handler returns the fresh snapshot.

    Events are expected one at a time; the session does no locking.
    """

    def __init__(
        self,
        classifier: Optional[SpatialClassifier] = None,
        classification: Classification = "automatic",
        undo_last_segment: UndoPolicy = "reset",
        mode: ModeLike = None,
    ):
        self.route = RouteModel(
            classifier=classifier,
            classification=classification,
            undo_last_segment=undo_last_segment,
        )
        self.mode: Optional[SegmentType] = parse_mode(mode)
        self.editing_index: Optional[int] = None

    @classmethod
    def from_settings(cls, classifier: Optional[SpatialClassifier] = None, cfg=None) -> RouteSession:
        from swimrun.config import settings

        cfg = cfg or settings
        return cls(
            classifier=classifier or build_classifier(cfg),
            classification=cfg.classification,
            undo_last_segment=cfg.undo_last_segment,
        )

    @property
    def classification(self) -> str:
        return self.route.classification

    def state(self) -> RouteSnapshot:
        return self.route.snapshot(
            mode=self.mode.value if self.mode else None,
            editing_index=self.editing_index,
        )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def point_clicked(self, lat: float, lon: float, edit_index: Optional[int] = None) -> RouteSnapshot:
        coord = Coordinate(lat, lon)

        if edit_index is None:
            edit_index = self.editing_index
        if edit_index is not None:
            try:
                self.route.replace_at(edit_index, coord, self.mode)
            finally:
                self.editing_index = None
            return self.state()

        if self.classification == "manual":
            if self.mode is None:
                log.debug("Click ignored: no mode selected")
                return self.state()
            self.route.append_point(coord, self.mode)
        elif self.mode is SegmentType.STOP:
            self.route.append_point(coord, SegmentType.STOP)
        else:
            self.route.append_point(coord)
        return self.state()

    def marker_clicked(self, index: int) -> RouteSnapshot:
        """Arm waypoint *index* so the next map click relocates it."""
        self.route.check_index(index)
        self.editing_index = index
        return self.state()

    def marker_dragged(self, index: int, lat: float, lon: float) -> RouteSnapshot:
        self.route.move_waypoint(index, Coordinate(lat, lon))
        return self.state()

    def undo_requested(self) -> RouteSnapshot:
        if self.route.waypoints:
            self.route.undo_last()
        self.editing_index = None
        return self.state()

    def clear_requested(self) -> RouteSnapshot:
        self.route.clear()
        self.editing_index = None
        return self.state()

    def mode_changed(self, mode: ModeLike) -> RouteSnapshot:
        self.mode = parse_mode(mode)
        return self.state()

