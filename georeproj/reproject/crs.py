# -*- coding: utf-8 -*-
"""
CRS Resolution - Turn a target CRS specification into a concrete CRS.

A target CRS is specified in exactly one of four ways: a CRS code
(``"EPSG:32633"``, ``"32633"``, ``"AUTO:42001"``), a WKT file, inline WKT
text, or a collocation product whose geocoding already defines one.
Codes and WKT are decoded by pyproj. ``AUTO`` codes are parameterized
with the geographic position of the source scene centre before decoding.

Dependencies
------------
pyproj

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
2026-10-09

Modified
--------
2026-10-20
"""

# Standard library
import logging
import math
import re
from pathlib import Path
from typing import Any, Optional, Sequence, Union

# Third-party
import pyproj
from pyproj.exceptions import CRSError

# georeproj internal
from georeproj.exceptions import AmbiguousCrsSpecError, ResolutionError
from georeproj.geocoding.base import Geocoding

logger = logging.getLogger(__name__)

_NUMERIC_CODE = re.compile(r'^\d+$')
_AUTO_CODE = re.compile(r'^AUTO\d*:\d+$', re.IGNORECASE)

_CRS_SPEC_NAMES = "'crs_code', 'wkt_file', 'wkt' or a collocation product"


def check_crs_spec(
    crs_code: Optional[str] = None,
    wkt_file: Optional[Union[str, Path]] = None,
    wkt: Optional[str] = None,
    collocation_product: Optional[Any] = None,
) -> None:
    """Verify that exactly one target CRS specification is present.

    Raises
    ------
    AmbiguousCrsSpecError
        If none or more than one of the four is given.
    """
    given = sum(
        spec is not None
        for spec in (crs_code, wkt_file, wkt, collocation_product)
    )
    if given == 0:
        raise AmbiguousCrsSpecError(
            f"Specify at least one of {_CRS_SPEC_NAMES}"
        )
    if given > 1:
        raise AmbiguousCrsSpecError(
            f"Specify only one of {_CRS_SPEC_NAMES}"
        )


def normalize_crs_code(
    crs_code: str,
    geocoding: Optional[Geocoding] = None,
    shape: Optional[Sequence[int]] = None,
) -> str:
    """Bring a user-supplied CRS code into decodable form.

    A purely numeric code is prefixed with ``EPSG:``. An ``AUTO`` code
    (``AUTO:42001``) is completed with the longitude and latitude of the
    source scene centre, the position of pixel ``(height // 2, width // 2)``
    under *geocoding*.

    Parameters
    ----------
    crs_code : str
        Code as given by the user.
    geocoding : Geocoding, optional
        Source geocoding. Required for ``AUTO`` codes.
    shape : Sequence[int], optional
        Source ``(rows, cols)``. Defaults to ``geocoding.shape``.

    Returns
    -------
    str
        Normalized code.

    Raises
    ------
    ResolutionError
        If an ``AUTO`` code is given without a geocoding, or the scene
        centre has no geographic position.
    """
    code = crs_code.strip()
    if _NUMERIC_CODE.match(code):
        return f"EPSG:{code}"
    if _AUTO_CODE.match(code):
        if geocoding is None:
            raise ResolutionError(
                f"CRS code '{code}' needs a geocoded source to resolve"
            )
        rows, cols = shape if shape is not None else geocoding.shape
        lat, lon, _ = geocoding.image_to_latlon(float(rows // 2), float(cols // 2))
        if math.isnan(float(lat)) or math.isnan(float(lon)):
            raise ResolutionError(
                f"Scene centre of the source has no geographic position; "
                f"cannot resolve '{code}'"
            )
        return f"{code},{lon!r},{lat!r}"
    return code


def decode_crs(code: str) -> pyproj.CRS:
    """Decode a normalized CRS code.

    ``AUTO`` codes (``AUTO:<id>,<lon>,<lat>``, optionally with a units
    code before the position) are expanded to the automatic projections
    42001 (UTM), 42002 (transverse Mercator), 42003 (orthographic),
    42004 (equirectangular) and 42005 (Mollweide).

    Raises
    ------
    ResolutionError
        If pyproj cannot decode *code*.
    """
    try:
        if code.upper().startswith('AUTO'):
            return _decode_auto_code(code)
        return pyproj.CRS.from_user_input(code)
    except CRSError as exc:
        raise ResolutionError(f"Cannot decode CRS code '{code}': {exc}") from exc


_AUTO_PROJECTIONS = {
    42002: "+proj=tmerc +lat_0=0 +lon_0={lon} +k=0.9996 +x_0=500000 +y_0={y_0}",
    42003: "+proj=ortho +lat_0={lat} +lon_0={lon}",
    42004: "+proj=eqc +lat_ts={lat} +lat_0=0 +lon_0={lon}",
    42005: "+proj=moll +lon_0={lon}",
}


def _decode_auto_code(code: str) -> pyproj.CRS:
    try:
        prefix, params = code.split(':', 1)
        values = [v.strip() for v in params.split(',')]
        auto_id = int(values[0])
        lon, lat = float(values[-2]), float(values[-1])
    except (ValueError, IndexError) as exc:
        raise ResolutionError(
            f"Malformed AUTO code '{code}'; expected AUTO:<id>,<lon>,<lat>"
        ) from exc
    if len(values) not in (3, 4):
        raise ResolutionError(
            f"Malformed AUTO code '{code}'; expected AUTO:<id>,<lon>,<lat>"
        )

    if auto_id == 42001:
        zone = min(max(int((lon + 180.0) // 6.0) + 1, 1), 60)
        south = ' +south' if lat < 0 else ''
        definition = f"+proj=utm +zone={zone}{south}"
    elif auto_id in _AUTO_PROJECTIONS:
        y_0 = 10000000 if lat < 0 else 0
        definition = _AUTO_PROJECTIONS[auto_id].format(lon=lon, lat=lat, y_0=y_0)
    else:
        raise ResolutionError(f"Unsupported automatic projection '{prefix}:{auto_id}'")
    return pyproj.CRS.from_proj4(f"{definition} +datum=WGS84 +units=m +no_defs")


def parse_wkt(wkt: str) -> pyproj.CRS:
    """Parse a CRS from well-known text.

    Raises
    ------
    ResolutionError
        If *wkt* is not a valid CRS definition.
    """
    try:
        return pyproj.CRS.from_wkt(wkt)
    except CRSError as exc:
        raise ResolutionError(f"Cannot parse CRS WKT: {exc}") from exc


def read_wkt_file(path: Union[str, Path]) -> pyproj.CRS:
    """Read and parse a WKT file.

    Raises
    ------
    ResolutionError
        If the file cannot be read or does not hold a valid CRS.
    """
    path = Path(path)
    try:
        text = path.read_text()
    except OSError as exc:
        raise ResolutionError(f"Cannot read WKT file '{path}': {exc}") from exc
    return parse_wkt(text)


def resolve_crs(
    crs_code: Optional[str] = None,
    wkt_file: Optional[Union[str, Path]] = None,
    wkt: Optional[str] = None,
    collocation_product: Optional[Any] = None,
    source_geocoding: Optional[Geocoding] = None,
    source_shape: Optional[Sequence[int]] = None,
) -> Any:
    """Resolve the target CRS from exactly one specification.

    Parameters
    ----------
    crs_code : str, optional
        CRS code, ``(prefix:)?digits``; numeric codes are EPSG codes.
    wkt_file : str or Path, optional
        File holding a WKT CRS definition.
    wkt : str, optional
        Inline WKT CRS definition.
    collocation_product : Product, optional
        Product whose geocoding's model CRS is taken as-is.
    source_geocoding : Geocoding, optional
        Source geocoding, used to parameterize ``AUTO`` codes.
    source_shape : Sequence[int], optional
        Source ``(rows, cols)``.

    Returns
    -------
    pyproj.CRS or ImageCRS
        The resolved CRS. Only collocation can yield a non-pyproj CRS.

    Raises
    ------
    AmbiguousCrsSpecError
        If none or more than one specification is given.
    ResolutionError
        If decoding or parsing fails.
    """
    check_crs_spec(crs_code, wkt_file, wkt, collocation_product)

    if collocation_product is not None:
        geocoding = collocation_product.geocoding
        if geocoding is None:
            raise ResolutionError(
                f"Collocation product '{collocation_product.name}' is not geocoded"
            )
        crs = geocoding.model_crs
    elif wkt_file is not None:
        crs = read_wkt_file(wkt_file)
    elif wkt is not None:
        crs = parse_wkt(wkt)
    else:
        code = normalize_crs_code(crs_code, source_geocoding, source_shape)
        crs = decode_crs(code)

    logger.info("Resolved target CRS: %s", getattr(crs, 'name', crs))
    return crs


def is_display_down(crs: Any) -> bool:
    """Whether the second (y) axis of *crs* points down on display.

    The axis is read in easting/longitude-first order: when the CRS
    defines its axes northing/latitude first, the first axis is the y
    axis. CRSs without axis information are treated as display-up.
    """
    axes = getattr(crs, 'axis_info', None)
    if not axes or len(axes) < 2:
        return False
    first, second = axes[0], axes[1]
    y_axis = first if _is_northing_first(first) else second
    return str(y_axis.direction).lower() == 'displaydown'


def _is_northing_first(axis: Any) -> bool:
    return str(axis.direction).lower() in ('north', 'south')
