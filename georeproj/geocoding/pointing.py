# -*- coding: utf-8 -*-
"""
Pointing - Sensor viewing geometry of a scene.

``Pointing`` holds the view-zenith and view-azimuth angles of every pixel
as tie-point grids, plus an optional tie-point grid of terrain elevation.
A geocoding that carries a ``Pointing`` can be terrain-corrected by
``OrthorectifiedGeocoding``.

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
from typing import Optional, Tuple, TYPE_CHECKING

# Third-party
import numpy as np

if TYPE_CHECKING:
    from georeproj.raster.product import TiePointGrid


class Pointing:
    """Viewing geometry sampled on tie-point grids.

    Parameters
    ----------
    view_zenith : TiePointGrid
        View zenith angle in degrees (0 = nadir).
    view_azimuth : TiePointGrid
        Azimuth of the sensor as seen from the ground, in degrees
        clockwise from north.
    elevation : TiePointGrid, optional
        Terrain height above the ellipsoid in metres.
    """

    def __init__(
        self,
        view_zenith: 'TiePointGrid',
        view_azimuth: 'TiePointGrid',
        elevation: Optional['TiePointGrid'] = None,
    ) -> None:
        self.view_zenith = view_zenith
        self.view_azimuth = view_azimuth
        self.elevation = elevation

    @property
    def has_elevation(self) -> bool:
        return self.elevation is not None

    def get_view_angles(
        self, rows: np.ndarray, cols: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """``(zenith, azimuth)`` in degrees at continuous image positions."""
        return (
            self.view_zenith.get_pixel_values(rows, cols),
            self.view_azimuth.get_pixel_values(rows, cols),
        )

    def get_elevation(self, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
        """Tie-point elevation in metres at continuous image positions.

        Raises
        ------
        ValueError
            If this pointing carries no elevation grid.
        """
        if self.elevation is None:
            raise ValueError("Pointing has no elevation tie-point grid")
        return self.elevation.get_pixel_values(rows, cols)
