# -*- coding: utf-8 -*-
"""
No-Data Handling Tests - Sentinel resolution, NaN replacement, valid masks.

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
2026-10-13

Modified
--------
2026-10-20
"""

import math

import numpy as np
import pytest

from georeproj.exceptions import ValidationError
from georeproj.raster import ArrayMultiLevelSource, Band, MultiLevelImage, Product
from georeproj.reproject.nodata import (
    ReplaceNaN,
    TransformedLevelSource,
    ValidMaskSource,
    fill_value_for,
    must_replace_nan,
    resolve_no_data,
)


@pytest.fixture
def product():
    """4 x 4 product with a float band 'B1' and a flag band 'flags'."""
    p = Product('scene', 4, 4, preferred_tile_size=2)
    b1 = p.add_band(Band('B1', np.float32, 4, 4))
    values = np.arange(16, dtype=np.float32).reshape(4, 4)
    values[0, 0] = np.nan
    b1.source_image = values
    flags = p.add_band(Band('flags', np.uint8, 4, 4))
    mask = np.zeros((4, 4), dtype=np.uint8)
    mask[3, :] = 1
    flags.source_image = mask
    return p


# ---------------------------------------------------------------------------
# Sentinel resolution
# ---------------------------------------------------------------------------

class TestResolveNoData:
    """Test which no-data value a target raster gets."""

    def test_override_wins(self):
        band = Band('b', np.float32, 1, 1, no_data_value=-1.0, no_data_value_used=True)
        assert resolve_no_data(band, 5.0) == 5.0

    def test_raster_value_when_used(self):
        band = Band('b', np.float32, 1, 1, no_data_value=-1.0, no_data_value_used=True)
        assert resolve_no_data(band) == -1.0

    def test_nan_when_unused(self):
        band = Band('b', np.float32, 1, 1, no_data_value=-1.0)
        assert math.isnan(resolve_no_data(band))


class TestMustReplaceNaN:
    """Test when reprojected NaNs become the no-data value."""

    @pytest.mark.parametrize('dtype,used,override,no_data,expected', [
        (np.float32, True, None, -9999.0, True),
        (np.float32, False, 0.0, 0.0, True),
        (np.float32, False, None, float('nan'), False),
        (np.float32, True, None, float('nan'), False),
        (np.float64, False, float('nan'), float('nan'), False),
        (np.int16, True, None, -1.0, False),
    ])
    def test_decision(self, dtype, used, override, no_data, expected):
        band = Band('b', dtype, 1, 1, no_data_value_used=used)
        assert must_replace_nan(band, override, no_data) is expected


class TestFillValueFor:
    """Test representable fill values."""

    def test_float_keeps_nan(self):
        assert math.isnan(fill_value_for(float('nan'), np.float32))

    def test_integer_nan_is_zero(self):
        assert fill_value_for(float('nan'), np.int16) == 0

    def test_integer_clipped(self):
        assert fill_value_for(300.0, np.uint8) == 255
        assert fill_value_for(-9999.0, np.uint8) == 0
        assert fill_value_for(-9999.0, np.int16) == -9999

    def test_bool(self):
        assert fill_value_for(float('nan'), np.bool_) is False
        assert fill_value_for(1.0, np.bool_) is True


# ---------------------------------------------------------------------------
# NaN replacement
# ---------------------------------------------------------------------------

class TestReplaceNaN:
    """Test the NaN replacement transform."""

    def test_replaces(self):
        out = ReplaceNaN(value=-9999.0).apply(np.array([[np.nan, 1.0]], dtype=np.float32))
        assert out.dtype == np.float32
        np.testing.assert_array_equal(out, [[-9999.0, 1.0]])

    def test_integer_passthrough(self):
        data = np.array([[1, 2]], dtype=np.int16)
        assert ReplaceNaN(value=0.0).apply(data) is data

    def test_transformed_level_source(self):
        data = np.array([[np.nan, 2.0], [3.0, np.nan]])
        image = MultiLevelImage(ArrayMultiLevelSource(data, level_count=2))
        replaced = MultiLevelImage(TransformedLevelSource(image, ReplaceNaN(value=0.0)))
        np.testing.assert_array_equal(replaced.get_image(0), [[0.0, 2.0], [3.0, 0.0]])
        assert replaced.model is image.model
        assert replaced.get_image(1).shape == (1, 1)


# ---------------------------------------------------------------------------
# Valid-mask expressions
# ---------------------------------------------------------------------------

class TestValidMaskSource:
    """Test masking with per-level expressions."""

    def test_mask_by_other_band(self, product):
        b1 = product.get_band('B1')
        masked = ValidMaskSource(b1, 'flags == 0', -1.0).realize(0)
        assert masked.dtype == np.float32
        np.testing.assert_array_equal(masked[3], [-1.0] * 4)
        np.testing.assert_array_equal(masked[1], [4.0, 5.0, 6.0, 7.0])

    def test_numpy_functions(self, product):
        b1 = product.get_band('B1')
        masked = ValidMaskSource(b1, '~np.isnan(B1) & (B1 < 10)', -5.0).realize(0)
        assert masked[0, 0] == -5.0
        assert masked[0, 1] == 1.0
        assert (masked[2:] == -5.0).sum() == 6

    def test_integer_band_nan_fill(self, product):
        flags = product.get_band('flags')
        masked = ValidMaskSource(flags, 'B1 > 4', float('nan')).realize(0)
        assert masked.dtype == np.uint8
        assert masked[3, 3] == 1
        assert masked[3, 0] == 1
        assert masked[0, 0] == 0

    def test_coarser_level(self, product):
        b1 = product.get_band('B1')
        source = ValidMaskSource(b1, 'flags == 0', -1.0)
        assert source.model is b1.source_image.model
        assert source.realize(1).shape == (2, 2)

    def test_unknown_raster(self, product):
        with pytest.raises(ValidationError, match="unknown raster 'B7'"):
            ValidMaskSource(product.get_band('B1'), 'B7 > 0', 0.0)

    def test_syntax_error(self, product):
        with pytest.raises(ValidationError, match="Invalid valid-mask expression"):
            ValidMaskSource(product.get_band('B1'), 'B1 >', 0.0)

    def test_evaluation_error(self, product):
        source = ValidMaskSource(product.get_band('B1'), 'B1[100] > 0', 0.0)
        with pytest.raises(ValidationError, match="Cannot evaluate"):
            source.realize(0)

    def test_builtins_unavailable(self, product):
        with pytest.raises(ValidationError, match="non-numpy function"):
            ValidMaskSource(product.get_band('B1'), 'len(B1) > 0', 0.0)

    @pytest.mark.parametrize('expression', [
        "np.__builtins__['open']('out.txt', 'w').write('x') > 0",
        "().__class__.__base__.__subclasses__()",
        "B1.__class__ == 0",
        "np.ndarray.__init__ is None",
        "[B1 for _ in B1]",
        "(lambda: 0)()",
        "B1.tofile('out.bin')",
    ])
    def test_unsafe_expression_rejected(self, product, tmp_path, monkeypatch, expression):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ValidationError, match="Unsupported"):
            ValidMaskSource(product.get_band('B1'), expression, 0.0)
        assert list(tmp_path.iterdir()) == []

    def test_numpy_keyword_arguments(self, product):
        b1 = product.get_band('B1')
        masked = ValidMaskSource(
            b1, 'np.isclose(B1, 5.0, atol=0.5) | (flags[:, :] == 1)', -1.0
        ).realize(0)
        assert masked[1, 1] == 5.0
        assert masked[3, 0] == 12.0
        assert masked[1, 2] == -1.0

    def test_requires_product(self):
        band = Band('loose', np.float32, 2, 2)
        band.source_image = np.zeros((2, 2), dtype=np.float32)
        with pytest.raises(ValidationError, match="must belong to a product"):
            ValidMaskSource(band, 'loose > 0', 0.0)
