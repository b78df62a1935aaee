# -*- coding: utf-8 -*-
"""
Image Geometry - Target pixel grid of a reprojection.

An ``ImageGeometry`` is the triple of an integer image rectangle, a model
CRS and an invertible image-to-model affine transform. It is built once
per reprojection, either explicitly from a reference pixel, its model
position, pixel size and orientation (any of which default to values
derived from the source footprint), or by copying the grid of a
collocation product.

The explicit transform is::

    image_to_model = T(easting, northing) * S(pixel_size_x, pixel_size_y)
                     * R(-orientation) * T(-reference_pixel_x, -reference_pixel_y)

Rows increase downward on display. Unless the second axis of the target
CRS already points down on display, the y pixel size is negated.

Dependencies
------------
rasterio
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
2026-10-10

Modified
--------
2026-10-16
"""

# Standard library
import logging
import math
from typing import Any, Optional

# Third-party
import numpy as np
from rasterio.transform import Affine

# georeproj internal
from georeproj.exceptions import GeolocationError, ValidationError
from georeproj.geocoding.utils import sample_image_perimeter
from georeproj.raster.multilevel import MultiLevelModel, Rectangle
from georeproj.reproject.crs import is_display_down
from georeproj.reproject.transform import find_model_transform

logger = logging.getLogger(__name__)

# Perimeter samples per image edge for footprint bounds
FOOTPRINT_SAMPLES_PER_EDGE = 64

# Decimal places kept before rounding grid sizes up
_SIZE_PRECISION = 9


def check_reference_group(
    reference_pixel_x: Optional[float],
    reference_pixel_y: Optional[float],
    easting: Optional[float],
    northing: Optional[float],
) -> None:
    """Reference pixel and its model position are all given or all omitted.

    Raises
    ------
    ValidationError
        If the group is incomplete.
    """
    given = [
        v is not None
        for v in (reference_pixel_x, reference_pixel_y, easting, northing)
    ]
    if any(given) and not all(given):
        raise ValidationError(
            "Invalid referencing parameters: 'reference_pixel_x', "
            "'reference_pixel_y', 'easting' and 'northing' have to be "
            "specified either all or not at all."
        )


def check_pixel_size_group(
    pixel_size_x: Optional[float],
    pixel_size_y: Optional[float],
) -> None:
    """Both pixel sizes are given or both omitted, and positive when given.

    Raises
    ------
    ValidationError
        If only one is given or a given size is not positive.
    """
    if (pixel_size_x is None) != (pixel_size_y is None):
        raise ValidationError(
            "Invalid pixel size parameters: 'pixel_size_x' and "
            "'pixel_size_y' have to be specified both or not at all."
        )
    if pixel_size_x is not None and (pixel_size_x <= 0 or pixel_size_y <= 0):
        raise ValidationError(
            f"Pixel sizes must be positive, got "
            f"{pixel_size_x!r} x {pixel_size_y!r}"
        )


class ImageGeometry:
    """Pixel grid and its mapping to model coordinates.

    Parameters
    ----------
    image_rect : Rectangle
        Integer image bounds. Width and height must be positive.
    model_crs : pyproj.CRS or ImageCRS
        Model coordinate reference system.
    image_to_model : Affine
        Invertible image ``(x=col, y=row)`` to model transform.

    Raises
    ------
    ValidationError
        If the rectangle is empty or the transform is degenerate.
    """

    def __init__(
        self,
        image_rect: Rectangle,
        model_crs: Any,
        image_to_model: Affine,
    ) -> None:
        if image_rect.width < 1 or image_rect.height < 1:
            raise ValidationError(
                f"Image geometry must have positive size, got "
                f"{image_rect.width} x {image_rect.height}"
            )
        if image_to_model.is_degenerate:
            raise ValidationError(
                f"Image-to-model transform is not invertible: {image_to_model!r}"
            )
        self.image_rect = image_rect
        self.model_crs = model_crs
        self.image_to_model = image_to_model
        # Explicit grid parameters, unset for collocated geometries
        self.reference_pixel_x: Optional[float] = None
        self.reference_pixel_y: Optional[float] = None
        self.easting: Optional[float] = None
        self.northing: Optional[float] = None
        self.pixel_size_x: Optional[float] = None
        self.pixel_size_y: Optional[float] = None
        self.orientation: float = 0.0

    @classmethod
    def from_parameters(
        cls,
        model_crs: Any,
        width: int,
        height: int,
        reference_pixel_x: float,
        reference_pixel_y: float,
        easting: float,
        northing: float,
        pixel_size_x: float,
        pixel_size_y: float,
        orientation: float = 0.0,
    ) -> 'ImageGeometry':
        """Build a geometry from explicit grid parameters."""
        image_to_model = (
            Affine.translation(easting, northing)
            * Affine.scale(pixel_size_x, pixel_size_y)
            * Affine.rotation(-orientation)
            * Affine.translation(-reference_pixel_x, -reference_pixel_y)
        )
        geometry = cls(Rectangle(0, 0, int(width), int(height)), model_crs, image_to_model)
        geometry.reference_pixel_x = reference_pixel_x
        geometry.reference_pixel_y = reference_pixel_y
        geometry.easting = easting
        geometry.northing = northing
        geometry.pixel_size_x = pixel_size_x
        geometry.pixel_size_y = pixel_size_y
        geometry.orientation = orientation
        return geometry

    @property
    def width(self) -> int:
        return self.image_rect.width

    @property
    def height(self) -> int:
        return self.image_rect.height

    @property
    def model_to_image(self) -> Affine:
        return ~self.image_to_model

    @property
    def is_explicit(self) -> bool:
        return self.pixel_size_y is not None

    def with_flipped_y_axis(self) -> 'ImageGeometry':
        """Same grid with the y pixel size negated.

        Raises
        ------
        ValidationError
            If this geometry was not built from explicit parameters.
        """
        if not self.is_explicit:
            raise ValidationError(
                "Only explicitly parameterized geometries can flip their y axis"
            )
        return type(self).from_parameters(
            self.model_crs, self.width, self.height,
            self.reference_pixel_x, self.reference_pixel_y,
            self.easting, self.northing,
            self.pixel_size_x, -self.pixel_size_y,
            self.orientation,
        )

    def multi_level_model(self, level_count: int) -> MultiLevelModel:
        return MultiLevelModel(level_count, self.image_to_model, self.width, self.height)

    def __repr__(self) -> str:
        return (
            f"ImageGeometry({self.image_rect}, crs={getattr(self.model_crs, 'name', self.model_crs)!r}, "
            f"image_to_model={tuple(self.image_to_model)[:6]!r})"
        )


# =====================================================================
# Construction
# =====================================================================

def create_collocation_geometry(collocation_product: Any) -> ImageGeometry:
    """Copy the pixel grid of a collocation product unchanged."""
    geocoding = collocation_product.geocoding
    if geocoding is None:
        raise GeolocationError(
            f"Collocation product '{collocation_product.name}' is not geocoded"
        )
    return ImageGeometry(
        Rectangle(0, 0, collocation_product.width, collocation_product.height),
        geocoding.model_crs,
        geocoding.image_to_model,
    )


def compute_map_boundary(source_product: Any, target_crs: Any):
    """Bounds of the source footprint in *target_crs*.

    The outer edges of the source image are sampled and converted from
    the source model CRS into the target CRS.

    Returns
    -------
    Tuple[float, float, float, float]
        ``(min_x, min_y, max_x, max_y)``.

    Raises
    ------
    GeolocationError
        If the source is not geocoded or no boundary point has a position
        in the target CRS.
    ResolutionError
        If no transform exists between the source and target CRS.
    """
    geocoding = source_product.geocoding
    if geocoding is None:
        raise GeolocationError(
            f"Source product '{source_product.name}' is not geocoded"
        )
    rows, cols = sample_image_perimeter(
        (source_product.height, source_product.width),
        samples_per_edge=FOOTPRINT_SAMPLES_PER_EDGE,
    )
    model_x, model_y = geocoding.image_to_model * (cols, rows)
    transform = find_model_transform(geocoding.model_crs, target_crs)
    xs, ys = transform(np.asarray(model_x), np.asarray(model_y))
    valid = np.isfinite(xs) & np.isfinite(ys)
    if not np.any(valid):
        raise GeolocationError(
            "Source footprint has no position in the target CRS"
        )
    return (
        float(np.min(xs[valid])), float(np.min(ys[valid])),
        float(np.max(xs[valid])), float(np.max(ys[valid])),
    )


def _grid_size(extent: float, pixel_size: float) -> int:
    return max(1, math.ceil(round(extent / pixel_size, _SIZE_PRECISION)))


def create_target_geometry(
    source_product: Any,
    target_crs: Any,
    pixel_size_x: Optional[float] = None,
    pixel_size_y: Optional[float] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
    orientation: float = 0.0,
    easting: Optional[float] = None,
    northing: Optional[float] = None,
    reference_pixel_x: Optional[float] = None,
    reference_pixel_y: Optional[float] = None,
) -> ImageGeometry:
    """Build the explicit target geometry covering the source footprint.

    Parameters
    ----------
    source_product : Product
        Geocoded source.
    target_crs : pyproj.CRS
        Target model CRS.
    pixel_size_x, pixel_size_y : float, optional
        Target pixel size in target CRS units. Defaults to the finer of
        the footprint extent divided by the source width and height.
    width, height : int, optional
        Target size. Defaults to covering the footprint.
    orientation : float, default=0.0
        Grid rotation in degrees.
    easting, northing : float, optional
        Model position of the reference pixel.
    reference_pixel_x, reference_pixel_y : float, optional
        Reference pixel. Defaults to the grid centre, positioned so that
        the grid's upper-left corner is the footprint's upper-left corner.

    Returns
    -------
    ImageGeometry

    Raises
    ------
    ValidationError
        If the referencing or pixel-size group is incomplete.
    GeolocationError
        If the source footprint cannot be computed.
    """
    check_reference_group(reference_pixel_x, reference_pixel_y, easting, northing)
    check_pixel_size_group(pixel_size_x, pixel_size_y)

    min_x, min_y, max_x, max_y = compute_map_boundary(source_product, target_crs)
    map_w = max_x - min_x
    map_h = max_y - min_y

    if pixel_size_x is None:
        pixel_size = min(map_w / source_product.width, map_h / source_product.height)
        if math.isclose(pixel_size, 0.0, abs_tol=1e-12):
            pixel_size = 1.0
        pixel_size_x = pixel_size_y = pixel_size

    if width is None:
        width = _grid_size(map_w, pixel_size_x)
    if height is None:
        height = _grid_size(map_h, pixel_size_y)

    flip_y = not is_display_down(target_crs)
    if easting is None:
        reference_pixel_x = 0.5 * width
        reference_pixel_y = 0.5 * height
        easting = min_x + reference_pixel_x * pixel_size_x
        if flip_y:
            northing = max_y - reference_pixel_y * pixel_size_y
        else:
            northing = min_y + reference_pixel_y * pixel_size_y

    geometry = ImageGeometry.from_parameters(
        target_crs, width, height,
        reference_pixel_x, reference_pixel_y,
        easting, northing,
        pixel_size_x, pixel_size_y,
        orientation,
    )
    if flip_y:
        geometry = geometry.with_flipped_y_axis()

    logger.info(
        "Target geometry %d x %d, pixel size %g x %g, orientation %g",
        geometry.width, geometry.height,
        geometry.pixel_size_x, geometry.pixel_size_y, orientation,
    )
    return geometry
