# -*- coding: utf-8 -*-
"""
Elevation Module - Terrain elevation lookup for orthorectification.

Key Classes
-----------
- ElevationModel: Abstract base class for all elevation models
- ConstantElevation: Returns a fixed height
- GeoTIFFDEM: Reads a single GeoTIFF DEM file via rasterio
- ElevationModelRegistry: Named elevation datasets

Usage
-----
    >>> from georeproj.geocoding.elevation import ConstantElevation
    >>> elev = ConstantElevation(height=100.0)
    >>> elev.get_elevation(34.05, -118.25)
    100.0

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
2026-10-09
"""

from georeproj.geocoding.elevation.base import ElevationModel
from georeproj.geocoding.elevation.constant import ConstantElevation
from georeproj.geocoding.elevation.geotiff_dem import GeoTIFFDEM
from georeproj.geocoding.elevation.registry import (
    DEM_DIR_ENV,
    ElevationModelDescriptor,
    ElevationModelRegistry,
    GeoTIFFDEMDescriptor,
    get_default_registry,
    register,
)

__all__ = [
    'ElevationModel',
    'ConstantElevation',
    'GeoTIFFDEM',
    'DEM_DIR_ENV',
    'ElevationModelDescriptor',
    'ElevationModelRegistry',
    'GeoTIFFDEMDescriptor',
    'get_default_registry',
    'register',
]
