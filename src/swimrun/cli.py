from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from swimrun.config import settings
from swimrun.contracts.route_contract import RouteSnapshot
from swimrun.core.classifier import SpatialClassifier
from swimrun.core.session import RouteSession
from swimrun.geo.datasets import NaturalEarthData
from swimrun.geo.polygons import ContainmentTest, PolygonSet, UnionSet

log = logging.getLogger(__name__)


def _read_events(path: Path) -> Dict[str, Any]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, list):
        data = {"events": data}
    return data


def _save_json(path: Path, obj) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(obj, indent=2), encoding="utf-8")


def _build_classifier(args: argparse.Namespace, doc: Dict[str, Any]) -> SpatialClassifier:
    land: Optional[ContainmentTest] = None
    water: Optional[ContainmentTest] = None

    if args.natural_earth:
        ne = NaturalEarthData(settings.data_dir)
        land, water = ne.land, ne.water

    # Inline rings ([[lat, lon], ...]) in the events file
    if doc.get("land"):
        land = PolygonSet.from_rings(doc["land"], name="land")
    if doc.get("water"):
        water = PolygonSet.from_rings(doc["water"], name="water")

    if args.land:
        land = PolygonSet.from_path(args.land)
    if args.water:
        water = UnionSet(PolygonSet.from_path(p) for p in args.water)

    return SpatialClassifier(land=land, water=water)


def replay(session: RouteSession, events: List[Dict[str, Any]]) -> RouteSnapshot:
    """Feed UI events through *session* in order; return the final snapshot."""
    snap = session.state()
    for n, ev in enumerate(events):
        kind = ev.get("type")
        if kind == "click":
            snap = session.point_clicked(ev["lat"], ev["lon"], ev.get("edit_index"))
        elif kind == "marker_click":
            snap = session.marker_clicked(ev["index"])
        elif kind == "drag":
            snap = session.marker_dragged(ev["index"], ev["lat"], ev["lon"])
        elif kind == "undo":
            snap = session.undo_requested()
        elif kind == "clear":
            snap = session.clear_requested()
        elif kind == "mode":
            snap = session.mode_changed(ev.get("mode"))
        else:
            raise ValueError(f"event #{n}: unknown type {kind!r}")
        log.debug("event #%d %s -> %s, %d waypoints", n, kind, snap.state, len(snap.waypoints))
    return snap


def _render(console: Console, snap: RouteSnapshot, title: str) -> None:
    table = Table(title=title)
    table.add_column("#")
    table.add_column("Lat")
    table.add_column("Lon")
    table.add_column("Type")
    table.add_column("Segment km")

    for wp in snap.waypoints:
        table.add_row(
            str(wp.i),
            f"{wp.lat:.5f}",
            f"{wp.lon:.5f}",
            wp.type,
            f"{wp.segment_km:.2f}",
        )
    console.print(table)

    agg = snap.aggregates
    console.print(f"Swim: {agg.swim_km:.2f} km")
    console.print(f"Run: {agg.run_km:.2f} km")
    console.print(f"Total: {agg.current_route_km:.2f} km")
    console.print(f"Last added: {agg.last_segment_km:.2f} km")


def main() -> None:
    ap = argparse.ArgumentParser(description="Replay map events and report swim/run distances")
    ap.add_argument("--events", default="routes/sample_events.json", help="Path to an events JSON file")
    ap.add_argument("--land", type=Path, help="Land polygons (GeoJSON or .shp)")
    ap.add_argument("--water", type=Path, action="append", help="Water polygons (GeoJSON or .shp), repeatable")
    ap.add_argument("--natural-earth", action="store_true", help="Use Natural Earth land/ocean/lakes")
    ap.add_argument("--classification", choices=["automatic", "manual"], default=None)
    ap.add_argument("--out", type=Path, help="Write the final snapshot as JSON")
    ap.add_argument("--debug", action="store_true")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else settings.log_level,
        format="%(asctime)s [swimrun] %(levelname)s %(message)s",
    )

    events_path = Path(args.events)
    doc = _read_events(events_path)

    session = RouteSession(
        classifier=_build_classifier(args, doc),
        classification=args.classification or doc.get("classification") or settings.classification,
        undo_last_segment=settings.undo_last_segment,
    )
    snap = replay(session, doc.get("events", []))

    console = Console()
    _render(console, snap, f"Swimrun route: {events_path.name} ({session.classification})")

    if args.out:
        _save_json(args.out, snap.to_dict())
        console.print(f"Saved: {args.out.resolve()}")


if __name__ == "__main__":
    main()
