# -*- coding: utf-8 -*-
"""
georeproj - Raster reprojection for remote-sensing products.

Reprojects geocoded raster products onto a target coordinate reference
system and pixel grid, level by level over a resolution pyramid, with
no-data handling, valid-mask evaluation and optional terrain
orthorectification.

Dependencies
------------
numpy
scipy
pyproj
rasterio

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
2026-10-06

Modified
--------
2026-10-18
"""

__version__ = "0.1.0"
__author__ = "Duane Smalley"

from georeproj.exceptions import (
    GeoreprojError,
    ValidationError,
    AmbiguousCrsSpecError,
    ResolutionError,
    GeolocationError,
)
from georeproj.vocabulary import ResamplingMethod
from georeproj.reproject.operator import ReprojectionOp

__all__ = [
    'GeoreprojError',
    'ValidationError',
    'AmbiguousCrsSpecError',
    'ResolutionError',
    'GeolocationError',
    'ResamplingMethod',
    'ReprojectionOp',
]
