# -*- coding: utf-8 -*-
"""
Product Model Tests - Bands, tie-point grids, codings and placemarks.

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
2026-10-08

Modified
--------
2026-10-16
"""

import numpy as np
import pytest
from rasterio.transform import Affine

from georeproj.geocoding import CrsGeocoding
from georeproj.raster import (
    ArrayMultiLevelSource,
    Band,
    FlagCoding,
    IndexCoding,
    MultiLevelImage,
    Product,
    TiePointGrid,
)


@pytest.fixture
def product():
    p = Product('scene', 8, 6, description='test scene', preferred_tile_size=4)
    p.geocoding = CrsGeocoding(Affine(0.1, 0.0, 5.0, 0.0, -0.1, 45.0), (6, 8), 'EPSG:4326')
    return p


class TestSampleCoding:
    """Test flag and index codings."""

    def test_add_and_lookup(self):
        coding = FlagCoding('quality')
        coding.add('cloud', 1, 'cloudy pixel')
        coding.add('land', 2)
        assert len(coding) == 2
        assert coding.get_value('land') == 2

    def test_copy_is_independent(self):
        coding = IndexCoding('classes')
        coding.add('water', 0)
        duplicate = coding.copy()
        duplicate.add('forest', 1)
        assert isinstance(duplicate, IndexCoding)
        assert len(coding) == 1
        assert len(duplicate) == 2


class TestBand:
    """Test band attributes and source images."""

    def test_geocoding_falls_back_to_product(self, product):
        band = product.add_band(Band('b1', np.float32, 8, 6))
        assert band.geocoding is product.geocoding

    def test_sample_coding_kind(self):
        flags = Band('flags', np.uint8, 2, 2, sample_coding=FlagCoding('f'))
        classes = Band('classes', np.uint8, 2, 2, sample_coding=IndexCoding('c'))
        assert flags.is_flag_band and not flags.is_index_band
        assert classes.is_index_band and not classes.is_flag_band

    def test_floating_point(self):
        assert Band('a', np.float64, 1, 1).is_floating_point
        assert not Band('b', np.int16, 1, 1).is_floating_point

    def test_source_image_from_array(self, product):
        band = product.add_band(Band('b1', np.float32, 8, 6))
        band.source_image = np.ones((6, 8), dtype=np.float32)
        assert isinstance(band.source_image, MultiLevelImage)
        assert band.source_image.level_count == 2
        assert band.source_image.get_image(1).shape == (3, 4)

    def test_source_image_from_source(self):
        band = Band('b1', np.int16, 4, 4)
        band.source_image = ArrayMultiLevelSource(np.zeros((4, 4), dtype=np.int16))
        assert band.source_image.get_image(0).dtype == np.int16

    def test_source_image_size_mismatch(self):
        band = Band('b1', np.float32, 4, 4)
        with pytest.raises(ValueError, match="does not match"):
            band.source_image = np.zeros((3, 4))


class TestTiePointGrid:
    """Test tie-point interpolation."""

    @pytest.fixture
    def grid(self):
        # Linear in column: value = 10 * x, tie points every 2 pixels
        values = np.array([[5.0, 25.0, 45.0], [5.0, 25.0, 45.0]])
        return TiePointGrid('sza', values, 5, 3, offset_x=0.5, offset_y=0.5,
                            sub_sampling_x=2.0, sub_sampling_y=2.0)

    def test_values_at_tie_points(self, grid):
        values = grid.get_pixel_values(np.array([0.5, 2.5]), np.array([2.5, 4.5]))
        np.testing.assert_allclose(values, [25.0, 45.0])

    def test_interpolation_between_tie_points(self, grid):
        assert grid.get_pixel_values(np.array(1.5), np.array(1.5)) == pytest.approx(15.0)

    def test_extrapolation(self, grid):
        assert grid.get_pixel_values(np.array(0.0), np.array(0.0)) == pytest.approx(0.0)

    def test_nan_positions(self, grid):
        values = grid.get_pixel_values(np.array([np.nan, 0.5]), np.array([1.0, 0.5]))
        assert np.isnan(values[0])
        assert values[1] == pytest.approx(5.0)

    def test_source_image_at_pixel_centres(self, grid):
        level0 = grid.source_image.get_image(0)
        assert level0.dtype == np.float32
        assert level0.shape == (3, 5)
        np.testing.assert_allclose(level0[0], [5.0, 15.0, 25.0, 35.0, 45.0])

    def test_non_2d_raises(self):
        with pytest.raises(ValueError, match="2D"):
            TiePointGrid('x', np.zeros(4), 4, 4)


class TestProduct:
    """Test product containers."""

    def test_add_band_attaches(self, product):
        band = product.add_band(Band('b1', np.float32, 8, 6))
        assert band.product is product
        assert product.get_band('b1') is band
        assert product.get_raster('b1') is band
        assert product.get_band('missing') is None

    def test_size_mismatch_raises(self, product):
        with pytest.raises(ValueError, match="does not match"):
            product.add_band(Band('b1', np.float32, 4, 4))

    def test_duplicate_name_raises(self, product):
        product.add_band(Band('b1', np.float32, 8, 6))
        with pytest.raises(ValueError, match="Duplicate"):
            product.add_tie_point_grid(TiePointGrid('b1', np.zeros((2, 2)), 8, 6))

    def test_rasters_lists_bands_then_grids(self, product):
        product.add_tie_point_grid(TiePointGrid('lat', np.zeros((2, 2)), 8, 6))
        product.add_band(Band('b1', np.float32, 8, 6))
        assert [r.name for r in product.rasters] == ['b1', 'lat']

    def test_coding_groups(self, product):
        product.add_flag_coding(FlagCoding('quality'))
        product.add_index_coding(IndexCoding('classes'))
        assert set(product.flag_coding_group) == {'quality'}
        assert set(product.index_coding_group) == {'classes'}

    def test_copy_metadata_is_deep(self, product):
        product.metadata = {'processing': {'level': 'L1b'}}
        target = Product('t', 2, 2)
        product.copy_metadata_to(target)
        target.metadata['processing']['level'] = 'L2'
        assert product.metadata['processing']['level'] == 'L1b'

    def test_multi_level_model(self, product):
        model = product.multi_level_model
        assert model.level_count == 2
        assert model.image_to_model(0) == product.geocoding.image_to_model
