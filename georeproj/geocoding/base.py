# -*- coding: utf-8 -*-
"""
Geocoding Base Classes - Abstract interfaces for pixel <-> geographic mappings.

Defines the ``Geocoding`` abstract base class for transforming between image
pixel coordinates and geographic coordinates (latitude/longitude), and the
``ImageCRS`` token used as the model coordinate reference system of
geocodings that have no map projection of their own (tie-point and
orthorectified geocodings).

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
2026-10-14
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Tuple, Union, Any, TYPE_CHECKING

import numpy as np
from rasterio.transform import Affine

if TYPE_CHECKING:
    from georeproj.geocoding.pointing import Pointing


def _is_scalar(val: Any) -> bool:
    """Check if a value is a scalar (not array-like)."""
    if isinstance(val, np.ndarray):
        return val.ndim == 0
    return isinstance(val, (int, float, np.integer, np.floating))


def _to_array(val: Any) -> np.ndarray:
    """Convert scalar, list, or array to 1D numpy array of float64."""
    arr = np.asarray(val, dtype=np.float64)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    return arr


class ImageCRS:
    """
    Model CRS of a geocoding without a map projection.

    Model coordinates in an ``ImageCRS`` are the level-0 image coordinates
    of the owning geocoding, ``x = col`` and ``y = row``. Conversions to
    and from any other CRS go through geographic coordinates via the
    geocoding. Two tokens are equal only when they wrap the same geocoding
    object.

    Parameters
    ----------
    geocoding : Geocoding
        The geocoding whose image space this CRS describes.
    """

    def __init__(self, geocoding: 'Geocoding') -> None:
        self.geocoding = geocoding

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ImageCRS) and other.geocoding is self.geocoding

    def __hash__(self) -> int:
        return id(self.geocoding)

    def __repr__(self) -> str:
        return f"ImageCRS({type(self.geocoding).__name__})"


class Geocoding(ABC):
    """
    Abstract base class for raster geocodings.

    A geocoding maps continuous image coordinates to geographic
    coordinates and back. Pixel ``(r, c)`` covers ``[r, r+1) x [c, c+1)``
    and its centre is ``(r + 0.5, c + 0.5)``.

    ``image_to_latlon`` and ``latlon_to_image`` accept three input forms:

    - **Scalar:** ``geo.image_to_latlon(500, 1000)``
    - **Separate arrays:** ``geo.image_to_latlon(rows_array, cols_array)``
    - **Stacked (2, N) array:** ``geo.image_to_latlon(points_2xN)``

    Every geocoding also exposes a model CRS and an image-to-model affine
    transform. Geocodings with a map projection return their ``pyproj.CRS``;
    all others return an ``ImageCRS`` token and an identity affine.

    Notes
    -----
    Subclasses implement ``_image_to_latlon_array`` and ``_latlon_to_image_array``
    which operate on 1D numpy arrays. The public methods handle scalar/list/array
    dispatch automatically. Points outside the geocoding's domain map to NaN.
    """

    def __init__(self, shape: Tuple[int, int]):
        """
        Initialize geocoding.

        Parameters
        ----------
        shape : Tuple[int, int]
            Image shape (rows, cols).
        """
        self.shape = (int(shape[0]), int(shape[1]))
        self._image_crs = ImageCRS(self)

    @abstractmethod
    def _image_to_latlon_array(
        self,
        rows: np.ndarray,
        cols: np.ndarray,
        height: float = 0.0
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Transform pixel coordinate arrays to geographic coordinate arrays.

        Parameters
        ----------
        rows : np.ndarray
            Row coordinates (1D array, float64).
        cols : np.ndarray
            Column coordinates (1D array, float64).
        height : float, default=0.0
            Height above WGS84 ellipsoid (meters).

        Returns
        -------
        Tuple[np.ndarray, np.ndarray, np.ndarray]
            (lats, lons, heights) arrays in WGS84 coordinates.
        """
        pass

    @abstractmethod
    def _latlon_to_image_array(
        self,
        lats: np.ndarray,
        lons: np.ndarray,
        height: Union[float, np.ndarray] = 0.0
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Transform geographic coordinate arrays to pixel coordinate arrays.

        Parameters
        ----------
        lats : np.ndarray
            Latitudes in degrees North (1D array, float64).
        lons : np.ndarray
            Longitudes in degrees East (1D array, float64).
        height : float or np.ndarray, default=0.0
            Height above WGS84 ellipsoid (meters).

        Returns
        -------
        Tuple[np.ndarray, np.ndarray]
            (rows, cols) pixel coordinate arrays.
        """
        pass

    # -----------------------------------------------------------------
    # Model space
    # -----------------------------------------------------------------
    @property
    def model_crs(self) -> Any:
        """Model coordinate reference system (``pyproj.CRS`` or ``ImageCRS``)."""
        return self._image_crs

    @property
    def image_to_model(self) -> Affine:
        """Affine transform from level-0 image ``(x=col, y=row)`` to model."""
        return Affine.identity()

    # -----------------------------------------------------------------
    # Orthorectification capability
    # -----------------------------------------------------------------
    @property
    def pointing(self) -> Optional['Pointing']:
        """Viewing geometry of the sensor, or ``None`` if not known."""
        return None

    @property
    def can_orthorectify(self) -> bool:
        """Whether this geocoding can be terrain-corrected."""
        return self.pointing is not None

    # -----------------------------------------------------------------
    # Public dispatch
    # -----------------------------------------------------------------
    def image_to_latlon(
        self,
        row_or_points: Union[float, list, np.ndarray],
        col: Optional[Union[float, list, np.ndarray]] = None,
        height: float = 0.0
    ) -> Union[Tuple[float, float, float],
               Tuple[np.ndarray, np.ndarray, np.ndarray],
               np.ndarray]:
        """
        Transform image coordinates to geographic coordinates.

        Parameters
        ----------
        row_or_points : float, list, np.ndarray
            Row coordinate(s) when ``col`` is provided, or a ``(2, N)`` ndarray
            of stacked ``[rows; cols]`` when ``col`` is None.
        col : float, list, or np.ndarray, optional
            Column coordinate(s).
        height : float, default=0.0
            Height above WGS84 ellipsoid (meters).

        Returns
        -------
        Tuple[float, float, float]
            ``(lat, lon, height)`` when scalar inputs are given.
        Tuple[np.ndarray, np.ndarray, np.ndarray]
            ``(lats, lons, heights)`` when separate array/list inputs are given.
        np.ndarray
            Shape ``(3, N)`` when a ``(2, N)`` stacked array is given.

        Raises
        ------
        ValueError
            If a stacked input does not have shape ``(2, N)``.
        """
        if col is None:
            pts = np.asarray(row_or_points, dtype=np.float64)
            if pts.ndim != 2 or pts.shape[0] != 2:
                raise ValueError(
                    f"Expected (2, N) array, got shape {pts.shape}"
                )
            lats, lons, heights = self._image_to_latlon_array(
                pts[0], pts[1], height
            )
            return np.vstack([lats, lons, heights])
        elif _is_scalar(row_or_points) and _is_scalar(col):
            lats, lons, heights = self._image_to_latlon_array(
                _to_array(row_or_points), _to_array(col), height
            )
            return (float(lats[0]), float(lons[0]), float(heights[0]))
        else:
            return self._image_to_latlon_array(
                _to_array(row_or_points), _to_array(col), height
            )

    def latlon_to_image(
        self,
        lat_or_points: Union[float, list, np.ndarray],
        lon: Optional[Union[float, list, np.ndarray]] = None,
        height: Union[float, np.ndarray] = 0.0
    ) -> Union[Tuple[float, float], Tuple[np.ndarray, np.ndarray], np.ndarray]:
        """
        Transform geographic coordinates to image coordinates.

        Parameters
        ----------
        lat_or_points : float, list, np.ndarray
            Latitude(s) when ``lon`` is provided, or a ``(2, N)`` ndarray
            of stacked ``[lats; lons]`` when ``lon`` is None.
        lon : float, list, or np.ndarray, optional
            Longitude(s).
        height : float or np.ndarray, default=0.0
            Height above WGS84 ellipsoid (meters).

        Returns
        -------
        Tuple[float, float]
            ``(row, col)`` when scalar inputs are given.
        Tuple[np.ndarray, np.ndarray]
            ``(rows, cols)`` when separate array/list inputs are given.
        np.ndarray
            Shape ``(2, N)`` when a ``(2, N)`` stacked array is given.

        Raises
        ------
        ValueError
            If a stacked input does not have shape ``(2, N)``.
        """
        if lon is None:
            pts = np.asarray(lat_or_points, dtype=np.float64)
            if pts.ndim != 2 or pts.shape[0] != 2:
                raise ValueError(
                    f"Expected (2, N) array, got shape {pts.shape}"
                )
            rows, cols = self._latlon_to_image_array(pts[0], pts[1], height)
            return np.vstack([rows, cols])
        elif _is_scalar(lat_or_points) and _is_scalar(lon):
            rows, cols = self._latlon_to_image_array(
                _to_array(lat_or_points), _to_array(lon), height
            )
            return (float(rows[0]), float(cols[0]))
        else:
            return self._latlon_to_image_array(
                _to_array(lat_or_points), _to_array(lon), height
            )

    # -----------------------------------------------------------------
    # Footprint
    # -----------------------------------------------------------------
    def get_footprint(self) -> Dict[str, Any]:
        """
        Calculate image footprint as geographic polygon and bounding box.

        Returns
        -------
        Dict[str, Any]
            Dictionary with keys:
            - 'type': 'Polygon' or 'None'
            - 'coordinates': List of (lon, lat) tuples forming perimeter polygon
            - 'bounds': (min_lon, min_lat, max_lon, max_lat) bounding box
        """
        from georeproj.geocoding.utils import sample_image_perimeter

        sample_rows, sample_cols = sample_image_perimeter(
            self.shape, samples_per_edge=10
        )
        lats, lons, _ = self.image_to_latlon(sample_rows, sample_cols)

        # Drop samples outside the geocoding's domain
        valid = ~(np.isnan(lats) | np.isnan(lons))
        if not np.any(valid):
            return {
                'type': 'None',
                'coordinates': None,
                'bounds': None
            }

        valid_lats = lats[valid]
        valid_lons = lons[valid]
        perimeter_coords = list(zip(
            valid_lons.tolist(), valid_lats.tolist()
        ))
        min_lon, max_lon = float(np.min(valid_lons)), float(np.max(valid_lons))
        min_lat, max_lat = float(np.min(valid_lats)), float(np.max(valid_lats))

        return {
            'type': 'Polygon',
            'coordinates': perimeter_coords,
            'bounds': (min_lon, min_lat, max_lon, max_lat)
        }

    def get_bounds(self) -> Tuple[float, float, float, float]:
        """
        Get bounding box of image footprint.

        Returns
        -------
        Tuple[float, float, float, float]
            (min_lon, min_lat, max_lon, max_lat) in degrees

        Raises
        ------
        GeolocationError
            If no perimeter sample maps to a valid geographic position.
        """
        from georeproj.exceptions import GeolocationError

        bounds = self.get_footprint().get('bounds')
        if bounds is None:
            raise GeolocationError(
                "Geocoding yields no valid positions along the image perimeter"
            )
        return bounds
