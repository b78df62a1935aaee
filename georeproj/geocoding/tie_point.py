# -*- coding: utf-8 -*-
"""
Tie-Point Geocoding - Geolocation from latitude/longitude tie-point grids.

Implements geolocation for swath imagery whose position is given by coarse
latitude and longitude grids. The forward transform interpolates the grids
bilinearly; the inverse transform uses scipy's ``LinearNDInterpolator``
over the tie points.

Dependencies
------------
scipy

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
2026-10-08

Modified
--------
2026-10-11
"""

from typing import Optional, Tuple, Union, TYPE_CHECKING

import numpy as np
from scipy.interpolate import LinearNDInterpolator

from georeproj.exceptions import GeolocationError
from georeproj.geocoding.base import Geocoding

if TYPE_CHECKING:
    from georeproj.geocoding.pointing import Pointing
    from georeproj.raster.product import TiePointGrid


class TiePointGeocoding(Geocoding):
    """
    Geocoding interpolated from latitude/longitude tie-point grids.

    The inverse transform triangulates the tie points (Delaunay) and
    returns NaN for geographic positions outside their convex hull.
    Longitude grids that cross the antimeridian are not unwrapped.

    Parameters
    ----------
    lat_grid : TiePointGrid
        Latitudes in degrees North.
    lon_grid : TiePointGrid
        Longitudes in degrees East. Must share the layout of *lat_grid*.
    pointing : Pointing, optional
        Viewing geometry. Makes the geocoding orthorectifiable.

    Raises
    ------
    GeolocationError
        If the grids differ in layout or hold fewer than 2 x 2 tie points.
    """

    def __init__(
        self,
        lat_grid: 'TiePointGrid',
        lon_grid: 'TiePointGrid',
        pointing: Optional['Pointing'] = None,
    ):
        if lat_grid.grid.shape != lon_grid.grid.shape or (
            (lat_grid.offset_x, lat_grid.offset_y,
             lat_grid.sub_sampling_x, lat_grid.sub_sampling_y)
            != (lon_grid.offset_x, lon_grid.offset_y,
                lon_grid.sub_sampling_x, lon_grid.sub_sampling_y)
        ):
            raise GeolocationError(
                "Latitude and longitude tie-point grids must share one layout"
            )
        if min(lat_grid.grid.shape) < 2:
            raise GeolocationError(
                f"At least 2 x 2 tie points required, got "
                f"{lat_grid.grid.shape[0]} x {lat_grid.grid.shape[1]}"
            )
        super().__init__((lat_grid.height, lat_grid.width))
        self.lat_grid = lat_grid
        self.lon_grid = lon_grid
        self._pointing = pointing
        self._build_interpolator()

    def _build_interpolator(self) -> None:
        """Build the (lat, lon) -> (row, col) interpolators."""
        rows, cols = self.lat_grid.grid_positions
        geo_points = np.column_stack([
            self.lat_grid.grid.ravel(), self.lon_grid.grid.ravel()
        ])
        self._row_interp = LinearNDInterpolator(
            geo_points, rows.ravel(), fill_value=np.nan
        )
        self._col_interp = LinearNDInterpolator(
            geo_points, cols.ravel(), fill_value=np.nan
        )

    @property
    def pointing(self) -> Optional['Pointing']:
        return self._pointing

    def _image_to_latlon_array(
        self,
        rows: np.ndarray,
        cols: np.ndarray,
        height: float = 0.0
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        lats = self.lat_grid.get_pixel_values(rows, cols)
        lons = self.lon_grid.get_pixel_values(rows, cols)
        return lats, lons, np.full_like(lats, height)

    def _latlon_to_image_array(
        self,
        lats: np.ndarray,
        lons: np.ndarray,
        height: Union[float, np.ndarray] = 0.0
    ) -> Tuple[np.ndarray, np.ndarray]:
        geo_points = np.column_stack([lats, lons])
        return self._row_interp(geo_points), self._col_interp(geo_points)
