# -*- coding: utf-8 -*-
"""
Model Transforms - Coordinate conversion between two model CRSs.

``find_model_transform`` returns the math transform that takes model
coordinates of one CRS to model coordinates of another. Map CRSs are
converted by pyproj with easting/longitude first. An ``ImageCRS`` has no
projection of its own, so conversions into or out of it pass through
geographic longitude/latitude and the owning geocoding.

Points that cannot be converted come out as NaN; they are never raised.

Dependencies
------------
pyproj

Author
------
Steven Siebert

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
from abc import ABC, abstractmethod
from typing import Any, Callable, Tuple

# Third-party
import numpy as np
import pyproj
from pyproj.exceptions import CRSError, ProjError

# georeproj internal
from georeproj.exceptions import ResolutionError
from georeproj.geocoding.base import ImageCRS

_LONLAT = pyproj.CRS('EPSG:4326')

XY = Tuple[np.ndarray, np.ndarray]


class ModelTransform(ABC):
    """Vectorized conversion of ``(x, y)`` model coordinates."""

    @abstractmethod
    def transform(self, xs: np.ndarray, ys: np.ndarray) -> XY:
        """Convert coordinate arrays; unconvertible points become NaN."""
        ...

    def __call__(self, xs: np.ndarray, ys: np.ndarray) -> XY:
        return self.transform(xs, ys)


class IdentityTransform(ModelTransform):
    """Source and target CRS are the same."""

    def transform(self, xs: np.ndarray, ys: np.ndarray) -> XY:
        return np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)


class ProjTransform(ModelTransform):
    """pyproj conversion between two map CRSs.

    Raises
    ------
    ResolutionError
        If pyproj finds no operation between the two CRSs.
    """

    def __init__(self, from_crs: pyproj.CRS, to_crs: pyproj.CRS) -> None:
        try:
            self._transformer = pyproj.Transformer.from_crs(
                from_crs, to_crs, always_xy=True
            )
        except (CRSError, ProjError) as exc:
            raise ResolutionError(
                f"No coordinate transform from '{from_crs.name}' "
                f"to '{to_crs.name}': {exc}"
            ) from exc

    def transform(self, xs: np.ndarray, ys: np.ndarray) -> XY:
        out_x, out_y = self._transformer.transform(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64),
            errcheck=False,
        )
        out_x = np.asarray(out_x, dtype=np.float64)
        out_y = np.asarray(out_y, dtype=np.float64)
        # PROJ signals failed points with infinities
        bad = ~(np.isfinite(out_x) & np.isfinite(out_y))
        if np.any(bad):
            out_x = np.where(bad, np.nan, out_x)
            out_y = np.where(bad, np.nan, out_y)
        return out_x, out_y


class GeographicChainTransform(ModelTransform):
    """Conversion routed through geographic longitude/latitude.

    Parameters
    ----------
    to_lonlat : Callable
        ``(xs, ys) -> (lons, lats)`` for the source CRS.
    from_lonlat : Callable
        ``(lons, lats) -> (xs, ys)`` for the target CRS.
    """

    def __init__(
        self,
        to_lonlat: Callable[[np.ndarray, np.ndarray], XY],
        from_lonlat: Callable[[np.ndarray, np.ndarray], XY],
    ) -> None:
        self._to_lonlat = to_lonlat
        self._from_lonlat = from_lonlat

    def transform(self, xs: np.ndarray, ys: np.ndarray) -> XY:
        lons, lats = self._to_lonlat(
            np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)
        )
        return self._from_lonlat(lons, lats)


def _to_lonlat(crs: Any) -> Callable[[np.ndarray, np.ndarray], XY]:
    if isinstance(crs, ImageCRS):
        geocoding = crs.geocoding

        def image_to_lonlat(xs: np.ndarray, ys: np.ndarray) -> XY:
            lats, lons, _ = geocoding.image_to_latlon(ys, xs)
            return np.asarray(lons), np.asarray(lats)
        return image_to_lonlat
    return ProjTransform(crs, _LONLAT).transform


def _from_lonlat(crs: Any) -> Callable[[np.ndarray, np.ndarray], XY]:
    if isinstance(crs, ImageCRS):
        geocoding = crs.geocoding

        def lonlat_to_image(lons: np.ndarray, lats: np.ndarray) -> XY:
            rows, cols = geocoding.latlon_to_image(lats, lons)
            return np.asarray(cols, dtype=np.float64), np.asarray(rows, dtype=np.float64)
        return lonlat_to_image
    return ProjTransform(_LONLAT, crs).transform


def find_model_transform(from_crs: Any, to_crs: Any) -> ModelTransform:
    """Find the model transform from *from_crs* to *to_crs*.

    Parameters
    ----------
    from_crs, to_crs : pyproj.CRS or ImageCRS
        Model CRSs.

    Returns
    -------
    ModelTransform

    Raises
    ------
    ResolutionError
        If no transform exists between the two CRSs.
    """
    if isinstance(from_crs, ImageCRS) or isinstance(to_crs, ImageCRS):
        if isinstance(from_crs, ImageCRS) and from_crs == to_crs:
            return IdentityTransform()
        return GeographicChainTransform(_to_lonlat(from_crs), _from_lonlat(to_crs))
    if from_crs == to_crs:
        return IdentityTransform()
    return ProjTransform(from_crs, to_crs)
