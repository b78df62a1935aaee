# -*- coding: utf-8 -*-
"""
georeproj Exception Hierarchy - Domain-specific exceptions for reprojection.

Provides a small exception hierarchy that lets callers distinguish
configuration mistakes (bad parameter groups, unknown resampling names)
from resolution failures (undecodable CRS, missing coordinate transform,
uninstalled elevation model). All georeproj exceptions subclass both
``GeoreprojError`` and the appropriate built-in exception for backward
compatibility.

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
2026-10-06

Modified
--------
2026-10-14
"""


class GeoreprojError(Exception):
    """Base exception for all georeproj errors."""


class ValidationError(GeoreprojError, ValueError):
    """Invalid parameters or configuration.

    Raised before any geometry is computed for incomplete parameter
    groups, out-of-range values, and unknown method names. The message
    names the offending parameter group.
    """


class AmbiguousCrsSpecError(ValidationError):
    """Target CRS is specified zero times or more than once.

    Exactly one of ``crs_code``, ``wkt_file``, ``wkt`` or a collocation
    product must define the target coordinate reference system.
    """


class ResolutionError(GeoreprojError, RuntimeError):
    """An external resource could not be resolved.

    Raised for CRS decoding and WKT parsing failures, missing coordinate
    transforms between two CRSs, and elevation models that are not
    installed. The underlying exception is chained as ``__cause__``.
    """


class GeolocationError(GeoreprojError, RuntimeError):
    """Coordinate transformation or geolocation failure.

    Raised for malformed tie-point grids and unsupported geocoding
    combinations.
    """
