# -*- coding: utf-8 -*-
"""
Orthorectified Geocoding - Terrain correction of a pointing-aware geocoding.

A sensor looking off-nadir sees an elevated terrain point ``T`` along a
line of sight that reaches the ellipsoid at ``E``, displaced from ``T``
away from the sensor by ``h * tan(vza)``. The wrapped geocoding maps pixels
to ``E``; ``OrthorectifiedGeocoding`` maps pixels to ``T`` instead.

The forward mapping moves ``E`` towards the sensor, that is along the view
azimuth. With an elevation model the terrain height depends on the
corrected position and is found by fixed-point iteration. The inverse
mapping iterates on the pixel position, since the viewing geometry
depends on it.

Dependencies
------------
pyproj

Author
------
Duane Smalley, PhD
duane.d.smalley@gmail.com

License
-------
MIT License
Copyright (c) 2024 geoint.org
See LICENSE file for full text.

Created
-------
2026-10-09

Modified
--------
2026-10-14
"""

# Standard library
import logging
from typing import Optional, Tuple, Union

# Third-party
import numpy as np
import pyproj

# georeproj internal
from georeproj.exceptions import GeolocationError
from georeproj.geocoding.base import Geocoding
from georeproj.geocoding.elevation.base import ElevationModel
from georeproj.geocoding.pointing import Pointing

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 25

# Convergence thresholds: degrees for positions, pixels for image coordinates
_GEO_TOLERANCE = 1e-7
_PIXEL_TOLERANCE = 1e-3

_GEOD = pyproj.Geod(ellps='WGS84')


def _move(
    lats: np.ndarray,
    lons: np.ndarray,
    azimuths: np.ndarray,
    distances: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """Move points *distances* metres along *azimuths* on the WGS84 ellipsoid."""
    out_lats = np.full(lats.shape, np.nan)
    out_lons = np.full(lons.shape, np.nan)
    ok = (
        np.isfinite(lats) & np.isfinite(lons)
        & np.isfinite(azimuths) & np.isfinite(distances)
    )
    if np.any(ok):
        new_lons, new_lats, _ = _GEOD.fwd(
            lons[ok], lats[ok], azimuths[ok], distances[ok]
        )
        out_lats[ok] = new_lats
        out_lons[ok] = new_lons
    return out_lats, out_lons


def _displacement(heights: np.ndarray, zenith: np.ndarray) -> np.ndarray:
    """Ground distance between terrain point and line-of-sight footprint."""
    return np.nan_to_num(heights) * np.tan(np.radians(zenith))


class OrthorectifiedGeocoding(Geocoding):
    """Terrain-corrected view of an orthorectifiable geocoding.

    Parameters
    ----------
    geocoding : Geocoding
        Ellipsoid geocoding carrying a ``Pointing``.
    elevation_model : ElevationModel, optional
        Terrain heights. When omitted, the pointing's tie-point elevation
        grid is used.

    Raises
    ------
    GeolocationError
        If *geocoding* cannot be orthorectified, or no elevation source
        is available.
    """

    def __init__(
        self,
        geocoding: Geocoding,
        elevation_model: Optional[ElevationModel] = None,
    ) -> None:
        if not geocoding.can_orthorectify:
            raise GeolocationError(
                f"{type(geocoding).__name__} carries no pointing and "
                f"cannot be orthorectified"
            )
        if elevation_model is None and not geocoding.pointing.has_elevation:
            raise GeolocationError(
                "Orthorectification needs an elevation model or a "
                "tie-point elevation grid"
            )
        super().__init__(geocoding.shape)
        self.base = geocoding
        self.elevation_model = elevation_model

    @property
    def pointing(self) -> Pointing:
        return self.base.pointing

    def _heights_at(
        self,
        lats: np.ndarray,
        lons: np.ndarray,
        rows: np.ndarray,
        cols: np.ndarray,
    ) -> np.ndarray:
        if self.elevation_model is not None:
            return self.elevation_model.get_elevation(lats, lons)
        return self.pointing.get_elevation(rows, cols)

    def _image_to_latlon_array(
        self,
        rows: np.ndarray,
        cols: np.ndarray,
        height: float = 0.0
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        e_lats, e_lons, _ = self.base._image_to_latlon_array(rows, cols)
        zenith, azimuth = self.pointing.get_view_angles(rows, cols)

        lats, lons = e_lats, e_lons
        heights = self._heights_at(lats, lons, rows, cols)
        for _ in range(MAX_ITERATIONS):
            new_lats, new_lons = _move(
                e_lats, e_lons, azimuth, _displacement(heights, zenith)
            )
            delta = np.nanmax(
                np.abs(np.concatenate([new_lats - lats, new_lons - lons])),
                initial=0.0,
            )
            lats, lons = new_lats, new_lons
            # Tie-point heights do not depend on the corrected position
            if self.elevation_model is None or delta < _GEO_TOLERANCE:
                break
            heights = self._heights_at(lats, lons, rows, cols)
        else:
            logger.debug(
                "Forward terrain correction stopped after %d iterations",
                MAX_ITERATIONS,
            )
        return lats, lons, np.nan_to_num(heights)

    def _latlon_to_image_array(
        self,
        lats: np.ndarray,
        lons: np.ndarray,
        height: Union[float, np.ndarray] = 0.0
    ) -> Tuple[np.ndarray, np.ndarray]:
        rows, cols = self.base._latlon_to_image_array(lats, lons)
        for _ in range(MAX_ITERATIONS):
            zenith, azimuth = self.pointing.get_view_angles(rows, cols)
            heights = self._heights_at(lats, lons, rows, cols)
            # Line-of-sight footprint lies away from the sensor
            e_lats, e_lons = _move(
                lats, lons, azimuth + 180.0, _displacement(heights, zenith)
            )
            new_rows, new_cols = self.base._latlon_to_image_array(e_lats, e_lons)
            delta = np.nanmax(
                np.abs(np.concatenate([new_rows - rows, new_cols - cols])),
                initial=0.0,
            )
            rows, cols = new_rows, new_cols
            if delta < _PIXEL_TOLERANCE:
                break
        else:
            logger.debug(
                "Inverse terrain correction stopped after %d iterations",
                MAX_ITERATIONS,
            )
        return rows, cols
