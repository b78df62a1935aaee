# -*- coding: utf-8 -*-
"""
Elevation Model Base Class - Abstract interface for terrain elevation lookup.

Defines the abstract base class for all elevation models (GeoTIFF DEM,
constant). The public ``get_elevation`` method supports the same
scalar/array dispatch pattern used throughout the geocoding module.
Elevation models may hold external resources and are released through
``dispose()``.

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
2026-10-13
"""

# Standard library
from abc import ABC, abstractmethod
from typing import Optional, Union

# Third-party
import numpy as np

# georeproj internal
from georeproj.geocoding.base import _is_scalar, _to_array


class ElevationModel(ABC):
    """Abstract base class for terrain elevation lookup.

    Concrete subclasses implement ``_get_elevation_array`` for vectorized
    height lookup. The public ``get_elevation`` method handles
    scalar/array dispatch.

    Parameters
    ----------
    name : str, optional
        Name under which the model is known (e.g. in an
        ``ElevationModelRegistry``).

    Coordinate Conventions
    ----------------------
    - **Heights:** metres, as stored in the elevation source.
    - **Latitude:** Degrees North, range [-90, 90].
    - **Longitude:** Degrees East, range [-180, 180].
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name
        self.disposed = False

    @abstractmethod
    def _get_elevation_array(
        self, lats: np.ndarray, lons: np.ndarray
    ) -> np.ndarray:
        """Look up terrain elevation for arrays of coordinates.

        Parameters
        ----------
        lats : np.ndarray
            Latitudes in degrees North. Shape ``(N,)``, dtype float64.
        lons : np.ndarray
            Longitudes in degrees East. Shape ``(N,)``, dtype float64.

        Returns
        -------
        np.ndarray
            Elevation values in meters. Shape ``(N,)``. NaN for points
            outside coverage area.
        """
        ...

    def get_elevation(
        self,
        lat_or_points: Union[float, list, np.ndarray],
        lon: Optional[Union[float, list, np.ndarray]] = None,
    ) -> Union[float, np.ndarray]:
        """Query terrain elevation for one or more geographic locations.

        Accepts three input forms:

        - **Scalar:** ``get_elevation(lat, lon)`` returns a single float.
        - **Stacked (2, N) array:** ``get_elevation(points_2xN)`` returns
          an ``(N,)`` ndarray.
        - **Separate arrays:** ``get_elevation(lats_arr, lons_arr)`` returns
          an ndarray.

        Parameters
        ----------
        lat_or_points : float, list, or np.ndarray
            Latitude(s) when ``lon`` is provided, or a ``(2, N)`` ndarray
            of stacked ``[lats; lons]`` when ``lon`` is None.
        lon : float, list, or np.ndarray, optional
            Longitude(s).

        Returns
        -------
        float
            When scalar inputs are given.
        np.ndarray
            When array inputs are given. Shape ``(N,)``.

        Raises
        ------
        ValueError
            If a ``(2, N)`` array is expected but the shape is wrong.

        Examples
        --------
        >>> height = elev.get_elevation(34.05, -118.25)
        >>> heights = elev.get_elevation(
        ...     np.array([34.0, 35.0]), np.array([-118.0, -117.0])
        ... )
        """
        if lon is None:
            pts = np.asarray(lat_or_points, dtype=np.float64)
            if pts.ndim != 2 or pts.shape[0] != 2:
                raise ValueError(
                    f"Expected (2, N) array, got shape {pts.shape}"
                )
            return self._get_elevation_array(pts[0], pts[1])
        elif _is_scalar(lat_or_points) and _is_scalar(lon):
            heights = self._get_elevation_array(
                _to_array(lat_or_points), _to_array(lon)
            )
            return float(heights[0])
        else:
            return self._get_elevation_array(
                _to_array(lat_or_points), _to_array(lon)
            )

    def dispose(self) -> None:
        """Release resources held by this model. Safe to call repeatedly."""
        self.disposed = True
