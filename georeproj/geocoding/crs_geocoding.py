# -*- coding: utf-8 -*-
"""
CRS Geocoding - Coordinate transforms for map-projected rasters.

Provides ``CrsGeocoding``, a concrete ``Geocoding`` for any raster whose
pixel-to-map relationship is described by a six-parameter affine transform
and a coordinate reference system. This is the geocoding of every product
written by ``ReprojectionOp`` and of any georeferenced input raster.

Coordinate flow:

    pixel (row, col)  --affine-->  model CRS (x, y)  --pyproj-->  WGS84 (lat, lon)

When the model CRS is already geographic, the pyproj step is skipped.

Dependencies
------------
rasterio
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
2026-10-07

Modified
--------
2026-10-10
"""

# Standard library
from typing import Tuple, Union

# Third-party
import numpy as np
import pyproj
from rasterio.transform import Affine

# georeproj internal
from georeproj.geocoding.base import Geocoding


class CrsGeocoding(Geocoding):
    """Geocoding for a raster with an affine transform and a map CRS.

    The affine transform maps continuous pixel ``(col, row)`` to model
    ``(x, y)`` as::

        x = c + col * a + row * b
        y = f + col * d + row * e

    Axis order is always easting/longitude first (``always_xy``).

    Parameters
    ----------
    transform : rasterio.transform.Affine
        Six-parameter affine transform mapping pixel to model coordinates.
    shape : Tuple[int, int]
        Image shape ``(rows, cols)``.
    crs : str or pyproj.CRS
        Model coordinate reference system.

    Raises
    ------
    TypeError
        If *transform* is not a ``rasterio.transform.Affine`` instance.

    Examples
    --------
    >>> from rasterio.transform import Affine
    >>> transform = Affine(10.0, 0.0, 500000.0, 0.0, -10.0, 6000000.0)
    >>> geo = CrsGeocoding(transform, (1024, 2048), 'EPSG:32756')
    >>> lat, lon, h = geo.image_to_latlon(512, 1024)
    """

    def __init__(
        self,
        transform: Affine,
        shape: Tuple[int, int],
        crs: Union[str, pyproj.CRS],
    ) -> None:
        if not isinstance(transform, Affine):
            raise TypeError(
                f"transform must be a rasterio.transform.Affine instance, "
                f"got {type(transform).__name__}"
            )
        super().__init__(shape)

        self._transform = transform
        self._inverse = ~transform
        self._crs = pyproj.CRS.from_user_input(crs)
        self._is_geographic = self._crs.is_geographic

        # Transformers are only needed for projected CRS
        self._to_wgs84 = None
        self._from_wgs84 = None
        if not self._is_geographic:
            wgs84 = pyproj.CRS('EPSG:4326')
            self._to_wgs84 = pyproj.Transformer.from_crs(
                self._crs, wgs84, always_xy=True
            )
            self._from_wgs84 = pyproj.Transformer.from_crs(
                wgs84, self._crs, always_xy=True
            )

    @property
    def model_crs(self) -> pyproj.CRS:
        return self._crs

    @property
    def image_to_model(self) -> Affine:
        return self._transform

    def _image_to_latlon_array(
        self,
        rows: np.ndarray,
        cols: np.ndarray,
        height: float = 0.0,
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        t = self._transform
        xs = t.c + cols * t.a + rows * t.b
        ys = t.f + cols * t.d + rows * t.e

        if self._is_geographic:
            lons, lats = xs, ys
        else:
            lons, lats = self._to_wgs84.transform(xs, ys)
            lons = np.asarray(lons, dtype=np.float64)
            lats = np.asarray(lats, dtype=np.float64)

        heights = np.full_like(lats, height)
        return lats, lons, heights

    def _latlon_to_image_array(
        self,
        lats: np.ndarray,
        lons: np.ndarray,
        height: Union[float, np.ndarray] = 0.0,
    ) -> Tuple[np.ndarray, np.ndarray]:
        if self._is_geographic:
            xs, ys = lons, lats
        else:
            xs, ys = self._from_wgs84.transform(lons, lats)
            xs = np.asarray(xs, dtype=np.float64)
            ys = np.asarray(ys, dtype=np.float64)

        inv = self._inverse
        cols = inv.c + xs * inv.a + ys * inv.b
        rows = inv.f + xs * inv.d + ys * inv.e
        return rows, cols
