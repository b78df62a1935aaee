# -*- coding: utf-8 -*-
"""
Constant Elevation Model - Returns a fixed height for all locations.

Provides a trivial ElevationModel implementation that returns the same
height value for every query point. Useful for flat-terrain scenarios
and for testing terrain correction.

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
2026-10-08
"""

# Standard library
from typing import Optional

# Third-party
import numpy as np

# georeproj internal
from georeproj.geocoding.elevation.base import ElevationModel


class ConstantElevation(ElevationModel):
    """Elevation model that returns a fixed height for all locations.

    Parameters
    ----------
    height : float, optional
        Constant height in meters to return for all queries. Default is 0.0.
    name : str, optional
        Registry name.

    Examples
    --------
    >>> elev = ConstantElevation(height=100.0)
    >>> elev.get_elevation(34.0, -118.0)
    100.0
    """

    def __init__(self, height: float = 0.0, name: Optional[str] = None) -> None:
        super().__init__(name=name)
        self._height = float(height)

    @property
    def height(self) -> float:
        return self._height

    def _get_elevation_array(
        self, lats: np.ndarray, lons: np.ndarray
    ) -> np.ndarray:
        return np.full(lats.shape, self._height, dtype=np.float64)
