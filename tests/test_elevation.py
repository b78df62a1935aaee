# -*- coding: utf-8 -*-
"""
Elevation Model Tests - Constant heights, GeoTIFF DEMs and the registry.

Tests ConstantElevation scalar/array/(2,N) dispatch, GeoTIFFDEM lookups
against a small DEM written to a temporary directory, disposal, and
ElevationModelRegistry resolution by name including directory scans and
the environment-configured default registry.

Dependencies
------------
pytest
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
2026-10-10

Modified
--------
2026-10-20
"""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
import rasterio
from rasterio.transform import from_origin

from georeproj.exceptions import ResolutionError
from georeproj.geocoding.elevation import (
    DEM_DIR_ENV,
    ConstantElevation,
    ElevationModelDescriptor,
    ElevationModelRegistry,
    GeoTIFFDEM,
    GeoTIFFDEMDescriptor,
)
from georeproj.geocoding.elevation import registry as registry_module


@pytest.fixture
def dem_path(tmp_path):
    """4 x 4 DEM from (10 E, 50 N), 0.1 degree pixels, -9999 nodata at (0, 0)."""
    data = np.arange(16, dtype=np.float32).reshape(4, 4) * 10.0
    data[0, 0] = -9999.0
    path = tmp_path / 'alps.tif'
    with rasterio.open(
        path, 'w', driver='GTiff', height=4, width=4, count=1,
        dtype='float32', crs='EPSG:4326',
        transform=from_origin(10.0, 50.0, 0.1, 0.1), nodata=-9999.0,
    ) as dst:
        dst.write(data, 1)
    return path


# ---------------------------------------------------------------------------
# ConstantElevation
# ---------------------------------------------------------------------------

class TestConstantElevation:
    """Test the fixed-height model."""

    def test_scalar(self):
        elev = ConstantElevation(height=120.0)
        assert elev.get_elevation(45.0, 7.0) == 120.0

    def test_arrays(self):
        elev = ConstantElevation(height=5.0)
        heights = elev.get_elevation(np.array([1.0, 2.0]), np.array([3.0, 4.0]))
        np.testing.assert_array_equal(heights, [5.0, 5.0])

    def test_stacked(self):
        elev = ConstantElevation()
        heights = elev.get_elevation(np.zeros((2, 3)))
        assert heights.shape == (3,)

    def test_stacked_bad_shape(self):
        with pytest.raises(ValueError, match=r"\(2, N\)"):
            ConstantElevation().get_elevation(np.zeros((3, 3)))

    def test_dispose(self):
        elev = ConstantElevation(name='flat')
        assert not elev.disposed
        elev.dispose()
        elev.dispose()
        assert elev.disposed
        assert elev.name == 'flat'


# ---------------------------------------------------------------------------
# GeoTIFFDEM
# ---------------------------------------------------------------------------

class TestGeoTIFFDEM:
    """Test GeoTIFF DEM lookups."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            GeoTIFFDEM(tmp_path / 'missing.tif')

    def test_name_defaults_to_stem(self, dem_path):
        with GeoTIFFDEM(dem_path) as dem:
            assert dem.name == 'alps'

    def test_lookup_by_containing_pixel(self, dem_path):
        with GeoTIFFDEM(dem_path) as dem:
            # Pixel (1, 2) covers lon 10.2..10.3, lat 49.8..49.9
            assert dem.get_elevation(49.85, 10.25) == pytest.approx(60.0)

    def test_nodata_is_nan(self, dem_path):
        with GeoTIFFDEM(dem_path) as dem:
            assert np.isnan(dem.get_elevation(49.95, 10.05))

    def test_outside_coverage_is_nan(self, dem_path):
        with GeoTIFFDEM(dem_path) as dem:
            heights = dem.get_elevation(np.array([49.65, 40.0]), np.array([10.35, 10.0]))
        assert heights[0] == pytest.approx(150.0)
        assert np.isnan(heights[1])

    def test_band_read_when_opened(self, dem_path):
        dem = GeoTIFFDEM(dem_path)
        try:
            dem._dataset.close()
            assert dem.get_elevation(49.85, 10.25) == pytest.approx(60.0)
        finally:
            dem.dispose()

    def test_concurrent_lookups(self, dem_path):
        lats = np.full(64, 49.65)
        lons = np.full(64, 10.35)
        with GeoTIFFDEM(dem_path) as dem:
            with ThreadPoolExecutor(max_workers=4) as pool:
                results = list(pool.map(
                    lambda _: dem.get_elevation(lats, lons), range(8)
                ))
        for heights in results:
            np.testing.assert_allclose(heights, 150.0)

    def test_dispose_closes(self, dem_path):
        dem = GeoTIFFDEM(dem_path)
        dem.dispose()
        assert dem.disposed
        assert dem._dataset.closed


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestElevationModelRegistry:
    """Test name resolution of elevation datasets."""

    def test_create_registered(self):
        registry = ElevationModelRegistry()
        registry.register(ElevationModelDescriptor(
            'Flat', lambda: ConstantElevation(10.0, name='Flat')
        ))
        model = registry.create('flat')
        assert isinstance(model, ConstantElevation)
        assert model.height == 10.0
        assert registry.names == ['Flat']

    def test_unknown_name(self):
        with pytest.raises(ResolutionError, match="Unknown elevation model"):
            ElevationModelRegistry().create('SRTM 3Sec')

    def test_not_installed(self, tmp_path):
        registry = ElevationModelRegistry()
        registry.register(GeoTIFFDEMDescriptor('gone', tmp_path / 'gone.tif'))
        with pytest.raises(ResolutionError, match="not installed"):
            registry.create('gone')

    def test_unregister(self):
        registry = ElevationModelRegistry()
        registry.register(ElevationModelDescriptor('flat', ConstantElevation))
        registry.unregister('FLAT')
        assert registry.get_descriptor('flat') is None

    def test_scan_directory(self, dem_path):
        registry = ElevationModelRegistry()
        assert registry.scan_directory(dem_path.parent) == 1
        model = registry.create('alps')
        try:
            assert isinstance(model, GeoTIFFDEM)
        finally:
            model.dispose()

    def test_scan_missing_directory(self, tmp_path):
        assert ElevationModelRegistry().scan_directory(tmp_path / 'nope') == 0

    def test_default_registry_reads_environment(self, dem_path, monkeypatch):
        monkeypatch.setattr(registry_module, '_default_registry', None)
        monkeypatch.setenv(DEM_DIR_ENV, str(dem_path.parent))
        registry = registry_module.get_default_registry()
        assert registry.names == ['alps']
        assert registry_module.get_default_registry() is registry

    def test_module_register(self, monkeypatch):
        monkeypatch.setattr(registry_module, '_default_registry', None)
        monkeypatch.delenv(DEM_DIR_ENV, raising=False)
        registry_module.register(ElevationModelDescriptor('flat', ConstantElevation))
        assert registry_module.get_default_registry().names == ['flat']
