"""Download and cache Natural Earth 1:10m land/water polygons."""
from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import Dict, Optional

import requests

from swimrun.config import settings
from swimrun.errors import DatasetError
from swimrun.geo.polygons import ContainmentTest, PolygonSet, UnionSet

log = logging.getLogger(__name__)

_NE_BASE = "https://naciscdn.org/naturalearth/10m/physical/"

LAYERS = {
    "land": "ne_10m_land",
    "ocean": "ne_10m_ocean",
    "lakes": "ne_10m_lakes",
}


class NaturalEarthData:
    """Lazy-loading, in-memory cached land and water polygon sets."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir or settings.data_dir)
        self._layers: Dict[str, PolygonSet] = {}

    @property
    def land(self) -> PolygonSet:
        return self._layer("land")

    @property
    def water(self) -> ContainmentTest:
        return UnionSet([self._layer("ocean"), self._layer("lakes")])

    # ------------------------------------------------------------------

    def _layer(self, key: str) -> PolygonSet:
        if key not in self._layers:
            self._layers[key] = PolygonSet.from_shapefile(self._ensure_downloaded(LAYERS[key]))
        return self._layers[key]

    def _ensure_downloaded(self, stem: str) -> Path:
        """Return the layer's .shp, fetching and unpacking the archive when missing."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        shp_path = self.data_dir / f"{stem}.shp"
        if shp_path.exists():
            return shp_path

        archive = self.data_dir / f"{stem}.zip"
        if not archive.exists():
            self._download(stem, archive)

        try:
            with zipfile.ZipFile(archive) as zf:
                zf.extractall(self.data_dir)
        except zipfile.BadZipFile as exc:
            # Drop the broken archive so the next attempt downloads afresh
            archive.unlink(missing_ok=True)
            raise DatasetError(f"{archive} is not a valid zip archive: {exc}") from exc

        if not shp_path.exists():
            raise DatasetError(f"{archive.name} does not contain {shp_path.name}")
        return shp_path

    def _download(self, stem: str, archive: Path) -> None:
        # Stream into a .part file; only a complete download takes the final name
        partial = archive.with_suffix(".part")
        url = f"{_NE_BASE}{stem}.zip"
        log.info("Downloading %s", url)
        try:
            with requests.get(url, timeout=120, stream=True) as r:
                r.raise_for_status()
                with open(partial, "wb") as f:
                    for chunk in r.iter_content(chunk_size=1 << 16):
                        f.write(chunk)
        except (requests.RequestException, OSError) as exc:
            partial.unlink(missing_ok=True)
            raise DatasetError(f"download of {stem} failed: {exc}") from exc
        partial.replace(archive)
