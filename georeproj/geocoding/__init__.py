# -*- coding: utf-8 -*-
"""
Geocoding Module - Pixel <-> geographic coordinate mappings.

Provides interfaces and implementations for transforming between image
pixel coordinates and geographic coordinates (latitude/longitude), and
the model CRS / image-to-model transform each mapping implies.

Key Classes
-----------
- Geocoding: Abstract base class for coordinate transformations
- ImageCRS: Model CRS token of geocodings without a map projection
- CrsGeocoding: Affine transform + map CRS
- TiePointGeocoding: Latitude/longitude tie-point grids
- Pointing: Viewing geometry for terrain correction
- OrthorectifiedGeocoding: Terrain-corrected geocoding

Usage
-----
    >>> from rasterio.transform import Affine
    >>> from georeproj.geocoding import CrsGeocoding
    >>> geo = CrsGeocoding(Affine(0.01, 0, 10.0, 0, -0.01, 50.0),
    ...                    (100, 200), 'EPSG:4326')
    >>> lat, lon, h = geo.image_to_latlon(50.0, 100.0)

Dependencies
------------
scipy
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
2026-10-09
"""

from georeproj.geocoding.base import Geocoding, ImageCRS
from georeproj.geocoding.crs_geocoding import CrsGeocoding
from georeproj.geocoding.tie_point import TiePointGeocoding
from georeproj.geocoding.pointing import Pointing
from georeproj.geocoding.orthorectified import OrthorectifiedGeocoding
from georeproj.geocoding.elevation.base import ElevationModel
from georeproj.geocoding.elevation.constant import ConstantElevation

__all__ = [
    'Geocoding',
    'ImageCRS',
    'CrsGeocoding',
    'TiePointGeocoding',
    'Pointing',
    'OrthorectifiedGeocoding',
    'ElevationModel',
    'ConstantElevation',
]
