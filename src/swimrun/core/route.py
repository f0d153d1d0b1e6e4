"""Route model: ordered waypoints plus swim/run distance bookkeeping."""
from __future__ import annotations

import logging
from typing import List, Literal, Optional

from swimrun.contracts.route_contract import Aggregates, RouteSnapshot, WaypointView
from swimrun.core.classifier import SpatialClassifier
from swimrun.core.geomath import distance_km
from swimrun.core.models import Coordinate, RouteState, SegmentType, Waypoint
from swimrun.errors import IndexOutOfRange

log = logging.getLogger(__name__)

Classification = Literal["manual", "automatic"]
UndoPolicy = Literal["reset", "recompute"]


class RouteModel:
    """
    Owns the waypoint sequence and every derived total.

    Single-segment edits (append, undo) update the totals incrementally;
    positional edits (replace, move) rescan the whole route. Either way the
    totals always equal what ``recompute()`` would produce for the current
    sequence.

    Totals:
      - swim_km / run_km: every swim / run segment since the last clear
      - current_route_km: every accumulated segment since the last stop
      - last_segment_km: the segment most recently added or touched
    """

    def __init__(
        self,
        classifier: Optional[SpatialClassifier] = None,
        classification: Classification = "automatic",
        undo_last_segment: UndoPolicy = "reset",
    ):
        self.classifier = classifier or SpatialClassifier()
        self.classification = classification
        self.undo_last_segment = undo_last_segment
        self.waypoints: List[Waypoint] = []
        self._reset_totals()

    def __len__(self) -> int:
        return len(self.waypoints)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def state(self) -> RouteState:
        if not self.waypoints:
            return RouteState.EMPTY
        if self.waypoints[-1].type is SegmentType.STOP:
            return RouteState.STOPPED
        return RouteState.BUILDING

    @property
    def aggregates(self) -> Aggregates:
        return Aggregates(
            swim_km=self.swim_km,
            run_km=self.run_km,
            current_route_km=self.current_route_km,
            last_segment_km=self.last_segment_km,
        )

    def snapshot(self, mode: Optional[str] = None, editing_index: Optional[int] = None) -> RouteSnapshot:
        return RouteSnapshot(
            state=self.state.value,
            waypoints=[
                WaypointView(
                    i=i,
                    lat=wp.coordinate.lat,
                    lon=wp.coordinate.lon,
                    type=wp.type.value,
                    segment_km=wp.segment_km,
                )
                for i, wp in enumerate(self.waypoints)
            ],
            aggregates=self.aggregates,
            classification=self.classification,
            mode=mode,
            editing_index=editing_index,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append_point(self, coord: Coordinate, segment_type: Optional[SegmentType] = None) -> Waypoint:
        """
        Append a waypoint at *coord*.

        The first point of a route becomes the ``start`` waypoint and adds no
        distance. Later points are tagged with *segment_type* when given,
        otherwise classified from land/water data (automatic mode) or left
        ``unknown`` (manual mode without a type).
        """
        if segment_type is SegmentType.START:
            raise ValueError("start is reserved for the first waypoint")

        if not self.waypoints:
            wp = Waypoint(coord, SegmentType.START, 0.0)
            self.waypoints.append(wp)
            log.debug("Route started at (%.6f, %.6f)", coord.lat, coord.lon)
            return wp

        prev = self.waypoints[-1]
        if segment_type is None:
            segment_type = self._classify(prev.coordinate, coord)

        wp = Waypoint(coord, segment_type, 0.0)
        if segment_type is SegmentType.STOP:
            # A stop closes the current polyline without extending it
            self.current_route_km = 0.0
            self.last_segment_km = 0.0
        else:
            wp.segment_km = distance_km(prev.coordinate, coord)
            self._accumulate(wp)
            self.last_segment_km = wp.segment_km

        self.waypoints.append(wp)
        log.debug("Appended %s segment of %.3f km (#%d)", wp.type.value, wp.segment_km, len(self.waypoints) - 1)
        return wp

    def replace_at(self, index: int, coord: Coordinate, segment_type: Optional[SegmentType] = None) -> Waypoint:
        """
        Put a new waypoint at *index*, keeping its place in the sequence.

        Manual mode tags it with *segment_type* (or keeps the old tag when
        none is given). Automatic mode re-classifies the relocated point, so
        the only type it honours is ``stop``; any other type is ignored.
        Index 0 is always the ``start`` waypoint.
        """
        self.check_index(index)
        old = self.waypoints[index]
        if index == 0:
            new_type = SegmentType.START
        elif self.classification == "automatic":
            new_type = SegmentType.STOP if segment_type is SegmentType.STOP else SegmentType.UNKNOWN
        elif segment_type is None or segment_type is SegmentType.START:
            new_type = old.type
        else:
            new_type = segment_type

        self.waypoints[index] = Waypoint(coord, new_type, 0.0)
        log.debug("Replaced waypoint #%d", index)
        self.recompute()
        return self.waypoints[index]

    def move_waypoint(self, index: int, coord: Coordinate) -> Waypoint:
        """Drag end: move waypoint *index*, keep its tag, rescan the route."""
        self.check_index(index)
        wp = self.waypoints[index]
        wp.coordinate = coord
        log.debug("Moved waypoint #%d to (%.6f, %.6f)", index, coord.lat, coord.lon)
        self.recompute()
        return wp

    def recompute(self) -> Aggregates:
        """
        Rebuild every segment distance and total from the waypoint sequence.

        In automatic mode every segment is re-classified as well, except the
        ``start`` origin and explicit ``stop`` markers.
        """
        self._rescan(reclassify=self.classification == "automatic")
        return self.aggregates

    def undo_last(self) -> Aggregates:
        if len(self.waypoints) <= 1:
            self.clear()
            return self.aggregates

        removed = self.waypoints.pop()
        if len(self.waypoints) == 1:
            self._reset_totals()
        elif removed.type is SegmentType.STOP:
            # The previous polyline window is open again; rebuild it
            self._rescan(reclassify=False)
        else:
            self.current_route_km -= removed.segment_km
            if removed.type is SegmentType.SWIM:
                self.swim_km -= removed.segment_km
            elif removed.type is SegmentType.RUN:
                self.run_km -= removed.segment_km

        if self.undo_last_segment == "recompute" and len(self.waypoints) > 1:
            self.last_segment_km = self.waypoints[-1].segment_km
        else:
            self.last_segment_km = 0.0

        log.debug("Undid %s waypoint, %d left", removed.type.value, len(self.waypoints))
        return self.aggregates

    def clear(self) -> None:
        self.waypoints = []
        self._reset_totals()
        log.debug("Route cleared")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _reset_totals(self) -> None:
        self.swim_km = 0.0
        self.run_km = 0.0
        self.current_route_km = 0.0
        self.last_segment_km = 0.0

    def _classify(self, a: Coordinate, b: Coordinate) -> SegmentType:
        if self.classification == "automatic":
            return self.classifier.classify_segment(a, b)
        return SegmentType.UNKNOWN

    def _accumulate(self, wp: Waypoint) -> None:
        self.current_route_km += wp.segment_km
        if wp.type is SegmentType.SWIM:
            self.swim_km += wp.segment_km
        elif wp.type is SegmentType.RUN:
            self.run_km += wp.segment_km

    def _rescan(self, reclassify: bool) -> None:
        self._reset_totals()
        if not self.waypoints:
            return

        first = self.waypoints[0]
        first.type = SegmentType.START
        first.segment_km = 0.0

        for prev, wp in zip(self.waypoints, self.waypoints[1:]):
            if wp.type is SegmentType.STOP:
                wp.segment_km = 0.0
                self.current_route_km = 0.0
                self.last_segment_km = 0.0
                continue
            if reclassify or wp.type is SegmentType.START:
                wp.type = self._classify(prev.coordinate, wp.coordinate)
            wp.segment_km = distance_km(prev.coordinate, wp.coordinate)
            self._accumulate(wp)
            self.last_segment_km = wp.segment_km

    def check_index(self, index: int) -> None:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self.waypoints):
            raise IndexOutOfRange(index, len(self.waypoints))
