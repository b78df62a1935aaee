# -*- coding: utf-8 -*-
"""
Reprojection Sub-module - Resample products onto a new CRS and pixel grid.

``ReprojectionOp`` is the recommended entry point. It resolves the target
CRS, derives the target image geometry and builds a target product whose
bands are reprojected lazily, one pyramid level at a time.

Key Classes
-----------
ReprojectionOp
    Operator turning a source product into a reprojected target product.
ImageGeometry
    Target pixel grid: image rectangle, model CRS and image-to-model
    affine transform.
Reprojector
    Per-level back-projection and resampling via
    ``scipy.ndimage.map_coordinates``.
ReprojectedSource
    ``MultiLevelSource`` realizing target levels through a ``Reprojector``.
ReplaceNaN, ValidMaskSource
    No-data handling before and after resampling.

Dependencies
------------
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
2026-10-13

Modified
--------
2026-10-18
"""

from georeproj.reproject.crs import (
    check_crs_spec,
    decode_crs,
    is_display_down,
    normalize_crs_code,
    parse_wkt,
    read_wkt_file,
    resolve_crs,
)
from georeproj.reproject.transform import (
    GeographicChainTransform,
    IdentityTransform,
    ModelTransform,
    ProjTransform,
    find_model_transform,
)
from georeproj.reproject.geometry import (
    ImageGeometry,
    check_pixel_size_group,
    check_reference_group,
    compute_map_boundary,
    create_collocation_geometry,
    create_target_geometry,
)
from georeproj.reproject.resampling import parse_resampling, select_resampling
from georeproj.reproject.nodata import (
    ReplaceNaN,
    TransformedLevelSource,
    ValidMaskSource,
    fill_value_for,
    must_replace_nan,
    resolve_no_data,
)
from georeproj.reproject.reprojector import ReprojectedSource, Reprojector
from georeproj.reproject.operator import ReprojectionOp

__all__ = [
    'check_crs_spec',
    'decode_crs',
    'is_display_down',
    'normalize_crs_code',
    'parse_wkt',
    'read_wkt_file',
    'resolve_crs',
    'GeographicChainTransform',
    'IdentityTransform',
    'ModelTransform',
    'ProjTransform',
    'find_model_transform',
    'ImageGeometry',
    'check_pixel_size_group',
    'check_reference_group',
    'compute_map_boundary',
    'create_collocation_geometry',
    'create_target_geometry',
    'parse_resampling',
    'select_resampling',
    'ReplaceNaN',
    'TransformedLevelSource',
    'ValidMaskSource',
    'fill_value_for',
    'must_replace_nan',
    'resolve_no_data',
    'ReprojectedSource',
    'Reprojector',
    'ReprojectionOp',
]
