# -*- coding: utf-8 -*-
"""
Model Transform Tests - Conversions between source and target model CRSs.

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
2026-10-11

Modified
--------
2026-10-20
"""

import numpy as np
import pyproj
import pytest

from georeproj.geocoding import TiePointGeocoding
from georeproj.raster.product import TiePointGrid
from georeproj.reproject.transform import (
    GeographicChainTransform,
    IdentityTransform,
    ProjTransform,
    find_model_transform,
)


@pytest.fixture
def tie_point_geocoding():
    """9 x 9 scene with lat = 50 - 0.1 * y and lon = 10 + 0.1 * x."""
    ys = 0.5 + np.arange(5) * 2.0
    yy, xx = np.meshgrid(ys, ys, indexing='ij')
    lat = TiePointGrid('latitude', 50.0 - 0.1 * yy, 9, 9, sub_sampling_x=2.0, sub_sampling_y=2.0)
    lon = TiePointGrid('longitude', 10.0 + 0.1 * xx, 9, 9, sub_sampling_x=2.0, sub_sampling_y=2.0)
    return TiePointGeocoding(lat, lon)


class TestFindModelTransform:
    """Test transform selection."""

    def test_same_crs_is_identity(self):
        transform = find_model_transform(pyproj.CRS('EPSG:4326'), pyproj.CRS('EPSG:4326'))
        assert isinstance(transform, IdentityTransform)
        xs, ys = transform(np.array([1.0]), np.array([2.0]))
        assert xs.dtype == np.float64
        assert (xs[0], ys[0]) == (1.0, 2.0)

    def test_map_crs_pair(self):
        transform = find_model_transform(pyproj.CRS('EPSG:4326'), pyproj.CRS('EPSG:3857'))
        assert isinstance(transform, ProjTransform)

    def test_same_image_crs_is_identity(self, tie_point_geocoding):
        crs = tie_point_geocoding.model_crs
        assert isinstance(find_model_transform(crs, crs), IdentityTransform)

    def test_image_crs_routes_through_lonlat(self, tie_point_geocoding):
        transform = find_model_transform(
            pyproj.CRS('EPSG:4326'), tie_point_geocoding.model_crs
        )
        assert isinstance(transform, GeographicChainTransform)


class TestProjTransform:
    """Test pyproj conversions."""

    def test_round_trip(self):
        forward = ProjTransform(pyproj.CRS('EPSG:4326'), pyproj.CRS('EPSG:3857'))
        inverse = ProjTransform(pyproj.CRS('EPSG:3857'), pyproj.CRS('EPSG:4326'))
        xs, ys = forward(np.array([10.0, -45.0]), np.array([50.0, 20.0]))
        lons, lats = inverse(xs, ys)
        np.testing.assert_allclose(lons, [10.0, -45.0], atol=1e-9)
        np.testing.assert_allclose(lats, [50.0, 20.0], atol=1e-9)

    def test_longitude_first(self):
        transform = ProjTransform(pyproj.CRS('EPSG:4326'), pyproj.CRS('EPSG:3857'))
        xs, ys = transform(np.array([180.0]), np.array([0.0]))
        assert xs[0] == pytest.approx(20037508.342789244)
        assert ys[0] == pytest.approx(0.0, abs=1e-6)

    def test_failed_points_are_nan(self):
        transform = ProjTransform(pyproj.CRS('EPSG:4326'), pyproj.CRS('EPSG:3857'))
        xs, ys = transform(np.array([0.0, np.inf]), np.array([0.0, np.nan]))
        assert np.isfinite(xs[0]) and np.isfinite(ys[0])
        assert np.isnan(ys[1])


class TestGeographicChainTransform:
    """Test conversions into and out of image-space CRSs."""

    def test_lonlat_to_image(self, tie_point_geocoding):
        transform = find_model_transform(
            pyproj.CRS('EPSG:4326'), tie_point_geocoding.model_crs
        )
        cols, rows = transform(np.array([10.47]), np.array([49.68]))
        assert cols[0] == pytest.approx(4.7, abs=1e-6)
        assert rows[0] == pytest.approx(3.2, abs=1e-6)

    def test_image_to_projected(self, tie_point_geocoding):
        transform = find_model_transform(
            tie_point_geocoding.model_crs, pyproj.CRS('EPSG:4326')
        )
        lons, lats = transform(np.array([4.7]), np.array([3.2]))
        assert lons[0] == pytest.approx(10.47)
        assert lats[0] == pytest.approx(49.68)

    def test_outside_image_domain_is_nan(self, tie_point_geocoding):
        transform = find_model_transform(
            pyproj.CRS('EPSG:4326'), tie_point_geocoding.model_crs
        )
        cols, rows = transform(np.array([0.0]), np.array([0.0]))
        assert np.isnan(cols[0]) and np.isnan(rows[0])
