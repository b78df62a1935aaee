# -*- coding: utf-8 -*-
"""
Target CRS Resolution Tests - Mutual exclusion, code normalization, WKT.

Tests that exactly one of crs_code, wkt_file, wkt and collocation product
is accepted, numeric and AUTO code normalization against the source scene
centre, automatic projection decoding, and WKT parsing from text and file.

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
2026-10-12

Modified
--------
2026-10-20
"""

import pyproj
import pytest
from rasterio.transform import Affine

from georeproj.exceptions import (
    AmbiguousCrsSpecError,
    ResolutionError,
    ValidationError,
)
from georeproj.geocoding import CrsGeocoding
from georeproj.raster import Product
from georeproj.reproject.crs import (
    check_crs_spec,
    decode_crs,
    normalize_crs_code,
    parse_wkt,
    read_wkt_file,
    resolve_crs,
)


@pytest.fixture
def geocoding():
    """EPSG:4326 scene of 100 rows x 200 cols from (116 E, 31 S)."""
    return CrsGeocoding(Affine(0.01, 0.0, 116.0, 0.0, -0.01, -31.0), (100, 200), 'EPSG:4326')


# ---------------------------------------------------------------------------
# Mutual exclusion
# ---------------------------------------------------------------------------

_SPECS = {
    'crs_code': 'EPSG:4326',
    'wkt_file': 'target.wkt',
    'wkt': 'GEOGCS[...]',
    'collocation_product': object(),
}


class TestCheckCrsSpec:
    """Test that exactly one CRS specification is given."""

    def test_none_given(self):
        with pytest.raises(AmbiguousCrsSpecError, match="at least one"):
            check_crs_spec()

    @pytest.mark.parametrize('name', sorted(_SPECS))
    def test_single_spec_accepted(self, name):
        check_crs_spec(**{name: _SPECS[name]})

    @pytest.mark.parametrize('first,second', [
        ('crs_code', 'wkt_file'),
        ('crs_code', 'wkt'),
        ('crs_code', 'collocation_product'),
        ('wkt_file', 'wkt'),
        ('wkt_file', 'collocation_product'),
        ('wkt', 'collocation_product'),
    ])
    def test_two_specs_rejected(self, first, second):
        with pytest.raises(AmbiguousCrsSpecError, match="only one"):
            check_crs_spec(**{first: _SPECS[first], second: _SPECS[second]})

    def test_is_validation_error(self):
        with pytest.raises(ValidationError):
            check_crs_spec(**_SPECS)


# ---------------------------------------------------------------------------
# Code normalization and decoding
# ---------------------------------------------------------------------------

class TestNormalizeCrsCode:
    """Test code normalization."""

    def test_numeric_is_epsg(self):
        assert normalize_crs_code('32633') == 'EPSG:32633'

    def test_prefixed_unchanged(self):
        assert normalize_crs_code(' EPSG:3857 ') == 'EPSG:3857'

    def test_auto_uses_scene_centre(self, geocoding):
        code = normalize_crs_code('AUTO:42001', geocoding)
        prefix, lon, lat = code.split(',')
        assert prefix == 'AUTO:42001'
        # Pixel (50, 100) of the scene
        assert float(lon) == pytest.approx(117.0)
        assert float(lat) == pytest.approx(-31.5)

    def test_auto_uses_given_shape(self, geocoding):
        code = normalize_crs_code('AUTO:42001', geocoding, shape=(10, 20))
        _, lon, lat = code.split(',')
        assert float(lon) == pytest.approx(116.1)
        assert float(lat) == pytest.approx(-31.05)

    def test_auto_centre_without_position(self, geocoding, monkeypatch):
        monkeypatch.setattr(
            geocoding, 'image_to_latlon', lambda row, col: (float('nan'), 117.0, 0.0)
        )
        with pytest.raises(ResolutionError, match="no geographic position"):
            normalize_crs_code('AUTO:42001', geocoding)

    def test_auto_without_geocoding(self):
        with pytest.raises(ResolutionError, match="geocoded source"):
            normalize_crs_code('AUTO:42001')


class TestDecodeCrs:
    """Test decoding of normalized codes."""

    def test_epsg(self):
        assert decode_crs('EPSG:3857') == pyproj.CRS('EPSG:3857')

    def test_auto_utm_southern_zone(self):
        params = decode_crs('AUTO:42001,117.0,-31.5').to_dict()
        assert params['proj'] == 'utm'
        assert params['zone'] == 50
        assert 'south' in params

    def test_auto_utm_northern_zone(self):
        params = decode_crs('AUTO:42001,9.0,48.0').to_dict()
        assert params['zone'] == 32
        assert 'south' not in params

    def test_auto_with_units_code(self):
        params = decode_crs('AUTO:42001,9001,9.0,48.0').to_dict()
        assert params['zone'] == 32

    def test_auto_orthographic(self):
        params = decode_crs('AUTO:42003,10.0,45.0').to_dict()
        assert params['proj'] == 'ortho'
        assert params['lat_0'] == pytest.approx(45.0)

    def test_unsupported_auto_id(self):
        with pytest.raises(ResolutionError, match="Unsupported"):
            decode_crs('AUTO:42099,10.0,45.0')

    def test_malformed_auto(self):
        with pytest.raises(ResolutionError, match="Malformed"):
            decode_crs('AUTO:42001')

    def test_unknown_code(self):
        with pytest.raises(ResolutionError, match="Cannot decode"):
            decode_crs('EPSG:99999999')


# ---------------------------------------------------------------------------
# WKT
# ---------------------------------------------------------------------------

class TestWkt:
    """Test WKT parsing."""

    def test_parse(self):
        wkt = pyproj.CRS('EPSG:32633').to_wkt()
        assert parse_wkt(wkt) == pyproj.CRS('EPSG:32633')

    def test_parse_invalid(self):
        with pytest.raises(ResolutionError, match="Cannot parse"):
            parse_wkt('PROJCS["broken"')

    def test_read_file(self, tmp_path):
        path = tmp_path / 'target.wkt'
        path.write_text(pyproj.CRS('EPSG:3857').to_wkt())
        assert read_wkt_file(path) == pyproj.CRS('EPSG:3857')

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(ResolutionError, match="Cannot read WKT file"):
            read_wkt_file(tmp_path / 'missing.wkt')


# ---------------------------------------------------------------------------
# resolve_crs
# ---------------------------------------------------------------------------

class TestResolveCrs:
    """Test end-to-end resolution."""

    def test_numeric_code(self):
        assert resolve_crs(crs_code='3857') == pyproj.CRS('EPSG:3857')

    def test_auto_code(self, geocoding):
        crs = resolve_crs(crs_code='AUTO:42001', source_geocoding=geocoding)
        assert crs.to_dict()['zone'] == 50

    def test_collocation_takes_model_crs(self, geocoding):
        collocate = Product('grid', 200, 100)
        collocate.geocoding = geocoding
        assert resolve_crs(collocation_product=collocate) is geocoding.model_crs

    def test_collocation_not_geocoded(self):
        with pytest.raises(ResolutionError, match="not geocoded"):
            resolve_crs(collocation_product=Product('grid', 4, 4))

    def test_ambiguous(self):
        with pytest.raises(AmbiguousCrsSpecError):
            resolve_crs(crs_code='4326', wkt=pyproj.CRS('EPSG:4326').to_wkt())

