# -*- coding: utf-8 -*-
"""
GeoTIFF DEM Elevation Model - Terrain elevation lookup from a single GeoTIFF.

Reads a single GeoTIFF DEM file using rasterio. Supports both geographic
(EPSG:4326) and projected coordinate reference systems. When the DEM uses
a projected CRS, lat/lon queries are reprojected using pyproj before
sampling.

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
2026-10-08

Modified
--------
2026-10-20
"""

# Standard library
import logging
from pathlib import Path
from typing import Optional, Union

# Third-party
import numpy as np
import pyproj
import rasterio

# georeproj internal
from georeproj.geocoding.elevation.base import ElevationModel

logger = logging.getLogger(__name__)


class GeoTIFFDEM(ElevationModel):
    """Elevation model that reads a single GeoTIFF DEM file.

    The dataset is held open for the lifetime of the object. Call
    ``close()`` (or ``dispose()``) or use as a context manager to release
    the file handle. Samples are taken from the pixel containing each
    query point; the DEM nodata value maps to NaN.

    Parameters
    ----------
    dem_path : str or Path
        Path to the GeoTIFF DEM file. Must exist.
    name : str, optional
        Registry name. Defaults to the file stem.

    Raises
    ------
    FileNotFoundError
        If ``dem_path`` does not exist.

    Examples
    --------
    >>> with GeoTIFFDEM('/data/srtm_34_04.tif') as elev:
    ...     height = elev.get_elevation(34.05, -118.25)
    """

    def __init__(
        self,
        dem_path: Union[str, Path],
        name: Optional[str] = None,
    ) -> None:
        dem_path = Path(dem_path)
        if not dem_path.exists():
            raise FileNotFoundError(
                f"GeoTIFF DEM file does not exist: {dem_path}"
            )
        super().__init__(name=name or dem_path.stem)
        self.dem_path = str(dem_path)

        self._dataset = rasterio.open(self.dem_path)
        self._inv_transform = ~self._dataset.transform
        self._nrows = self._dataset.height
        self._ncols = self._dataset.width
        self._nodata = self._dataset.nodata
        self._data: Optional[np.ndarray] = self._dataset.read(1)

        # Build CRS transformer if the DEM is not in geographic coordinates
        self._transformer = None
        crs = self._dataset.crs
        if crs is not None and not crs.is_geographic:
            self._transformer = pyproj.Transformer.from_crs(
                'EPSG:4326', crs.to_wkt(), always_xy=True
            )
        logger.debug(
            "Opened DEM %s (%d x %d)", self.dem_path, self._ncols, self._nrows
        )

    def close(self) -> None:
        """Close the underlying rasterio dataset and release file handles."""
        ds = getattr(self, '_dataset', None)
        if ds is not None and not ds.closed:
            ds.close()
        self._data = None

    def dispose(self) -> None:
        self.close()
        super().dispose()

    def __enter__(self) -> 'GeoTIFFDEM':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()

    def _get_elevation_array(
        self, lats: np.ndarray, lons: np.ndarray
    ) -> np.ndarray:
        heights = np.full(lats.shape[0], np.nan, dtype=np.float64)

        if self._transformer is not None:
            x_coords, y_coords = self._transformer.transform(lons, lats)
        else:
            x_coords, y_coords = lons, lats

        px_cols, px_rows = self._inv_transform * (
            np.asarray(x_coords, dtype=np.float64),
            np.asarray(y_coords, dtype=np.float64),
        )
        finite = np.isfinite(px_cols) & np.isfinite(px_rows)
        col_idx = np.full(heights.shape, -1, dtype=np.intp)
        row_idx = np.full(heights.shape, -1, dtype=np.intp)
        col_idx[finite] = np.floor(px_cols[finite]).astype(np.intp)
        row_idx[finite] = np.floor(px_rows[finite]).astype(np.intp)

        valid = (
            (row_idx >= 0) & (row_idx < self._nrows)
            & (col_idx >= 0) & (col_idx < self._ncols)
        )
        if not np.any(valid):
            return heights

        sampled = self._data[row_idx[valid], col_idx[valid]].astype(np.float64)

        if self._nodata is not None:
            sampled[sampled == float(self._nodata)] = np.nan

        heights[valid] = sampled
        return heights
