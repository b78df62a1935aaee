# -*- coding: utf-8 -*-
"""
Reprojection Operator - Reproject a product onto a new CRS and pixel grid.

``ReprojectionOp`` glues the reprojection core together. ``initialize()``
validates the parameters, resolves the target CRS, derives the target
image geometry and builds the target product: one lazily reprojected band
per source band (and per tie-point grid), with codings, metadata and
placemarks carried over. Pixels are only computed when a band level is
requested from its ``source_image``.

Dependencies
------------
pyproj
rasterio
scipy

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
2026-10-18
"""

# Standard library
import logging
import math
import warnings
from typing import Annotated, Any, Dict, List, Optional

# Third-party
import numpy as np

# georeproj internal
from georeproj.exceptions import GeolocationError, ValidationError
from georeproj.geocoding.base import Geocoding, ImageCRS
from georeproj.geocoding.crs_geocoding import CrsGeocoding
from georeproj.geocoding.elevation.base import ElevationModel
from georeproj.geocoding.elevation.registry import (
    ElevationModelRegistry,
    get_default_registry,
)
from georeproj.geocoding.orthorectified import OrthorectifiedGeocoding
from georeproj.processing.base import ImageProcessor
from georeproj.processing.params import Desc, Options, Range
from georeproj.processing.versioning import processor_version
from georeproj.raster.multilevel import MultiLevelImage, MultiLevelModel
from georeproj.raster.product import (
    Band,
    Placemark,
    Product,
    RasterDataNode,
)
from georeproj.reproject.crs import check_crs_spec, resolve_crs
from georeproj.reproject.geometry import (
    ImageGeometry,
    check_pixel_size_group,
    check_reference_group,
    create_collocation_geometry,
    create_target_geometry,
)
from georeproj.reproject.nodata import (
    ReplaceNaN,
    TransformedLevelSource,
    ValidMaskSource,
    must_replace_nan,
    resolve_no_data,
)
from georeproj.reproject.reprojector import ReprojectedSource, Reprojector
from georeproj.reproject.resampling import parse_resampling
from georeproj.vocabulary import ResamplingMethod

logger = logging.getLogger(__name__)


@processor_version('1.0.0')
class ReprojectionOp(ImageProcessor):
    """Reprojection of a source product to a target coordinate reference system.

    Exactly one of ``crs_code``, ``wkt_file``, ``wkt`` or
    ``collocation_product`` defines the target CRS. With a collocation
    product the target uses its pixel grid unchanged and all grid
    parameters are ignored. Otherwise the grid is derived from the source
    footprint, overridden by whichever grid parameters are given.

    Parameters
    ----------
    source_product : Product
        Product to reproject. Must be geocoded.
    collocation_product : Product, optional
        Product whose CRS and pixel grid the target adopts.
    crs_code : str, optional
        ``EPSG:<n>``, ``<n>`` or ``AUTO:<n>`` code. ``AUTO`` codes use
        the source scene centre as their reference point.
    wkt_file : str, optional
        Path of a file holding a WKT CRS definition.
    wkt : str, optional
        WKT CRS definition.
    resampling : str, default='Nearest'
        ``Nearest``, ``Bilinear`` or ``Bicubic``, ignoring case. Applies
        to floating-point rasters only.
    include_tie_point_grids : bool, default=True
        Also reproject tie-point grids into bands.
    reference_pixel_x, reference_pixel_y, easting, northing : float, optional
        Reference pixel and its model position. All or none.
    orientation : float, default=0.0
        Grid orientation in degrees, ``[0, 360]``.
    pixel_size_x, pixel_size_y : float, optional
        Target pixel size in CRS units. Both or none.
    width, height : int, optional
        Target size in pixels.
    orthorectify : bool, default=False
        Correct terrain displacement of rasters whose geocoding carries
        viewing geometry.
    elevation_model_name : str, optional
        Installed elevation model used for orthorectification. Without
        one the tie-point elevation of the geocoding is used.
    no_data_value : float, optional
        No-data value of every target band.

    Examples
    --------
    >>> op = ReprojectionOp(source_product=product, crs_code='EPSG:32633',
    ...                     resampling='Bilinear')
    >>> target = op.initialize()
    >>> data = target.get_band('radiance_1').source_image.get_image(0)
    >>> op.dispose()
    """

    # -- Annotated tunable params --
    source_product: Annotated[object, Desc('Product to reproject')]
    collocation_product: Annotated[Optional[object],
                                   Desc('Product to collocate with')] = None
    crs_code: Annotated[Optional[str],
                        Desc('EPSG or AUTO code of the target CRS')] = None
    wkt_file: Annotated[Optional[str],
                        Desc('File holding the target CRS as WKT')] = None
    wkt: Annotated[Optional[str], Desc('Target CRS as WKT')] = None
    resampling: Annotated[str,
                          Options('Nearest', 'Bilinear', 'Bicubic',
                                  ignore_case=True),
                          Desc('Resampling of floating-point rasters')] = 'Nearest'
    include_tie_point_grids: Annotated[bool,
                                       Desc('Reproject tie-point grids')] = True
    reference_pixel_x: Annotated[Optional[float],
                                 Desc('X position of the reference pixel')] = None
    reference_pixel_y: Annotated[Optional[float],
                                 Desc('Y position of the reference pixel')] = None
    easting: Annotated[Optional[float],
                       Desc('Easting of the reference pixel')] = None
    northing: Annotated[Optional[float],
                        Desc('Northing of the reference pixel')] = None
    orientation: Annotated[float, Range(min=0.0, max=360.0),
                           Desc('Orientation of the target grid in degrees')] = 0.0
    pixel_size_x: Annotated[Optional[float],
                            Desc('Pixel size in X, in CRS units')] = None
    pixel_size_y: Annotated[Optional[float],
                            Desc('Pixel size in Y, in CRS units')] = None
    width: Annotated[Optional[int], Desc('Target width in pixels')] = None
    height: Annotated[Optional[int], Desc('Target height in pixels')] = None
    orthorectify: Annotated[bool,
                            Desc('Orthorectify rasters with viewing geometry')] = False
    elevation_model_name: Annotated[Optional[str],
                                    Desc('Installed elevation model')] = None
    no_data_value: Annotated[Optional[float],
                             Desc('No-data value of the target bands')] = None

    def __post_init__(self) -> None:
        self.elevation_model_registry: Optional[ElevationModelRegistry] = None
        self.target_product: Optional[Product] = None
        self._elevation_model: Optional[ElevationModel] = None
        self._ortho_geocodings: Dict[int, Geocoding] = {}

    @property
    def elevation_model(self) -> Optional[ElevationModel]:
        return self._elevation_model

    # -----------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------
    def initialize(self) -> Product:
        """Validate the parameters and build the target product.

        Returns
        -------
        Product
            Target product ``projected_<source name>``. Band pixels are
            computed on request.

        Raises
        ------
        ValidationError
            If the parameters are inconsistent. ``AmbiguousCrsSpecError``
            when the target CRS is specified zero or several times.
        ResolutionError
            If the CRS cannot be decoded, no coordinate transform exists,
            or the elevation model is not installed.
        GeolocationError
            If the source product is not geocoded.
        """
        self.validate()
        resampling = parse_resampling(self.resampling)
        try:
            target = self._build_target(resampling)
        except Exception:
            self.dispose()
            raise
        self.target_product = target
        return target

    def dispose(self) -> None:
        """Release the elevation model. Further calls do nothing."""
        if self._elevation_model is not None:
            logger.debug("Disposing elevation model %r", self._elevation_model)
            self._elevation_model.dispose()
            self._elevation_model = None
        self._ortho_geocodings.clear()

    def validate(self) -> None:
        """Check all parameters before any geometry is computed.

        Raises
        ------
        ValidationError
            If a parameter or parameter group is invalid.
        """
        self._resolve_params({})
        if self.source_product is None:
            raise ValidationError("Parameter 'source_product' is required")
        check_crs_spec(self.crs_code, self.wkt_file, self.wkt, self.collocation_product)
        parse_resampling(self.resampling)
        check_reference_group(
            self.reference_pixel_x, self.reference_pixel_y, self.easting, self.northing
        )
        check_pixel_size_group(self.pixel_size_x, self.pixel_size_y)

    # -----------------------------------------------------------------
    # Target product
    # -----------------------------------------------------------------
    def _build_target(self, resampling: ResamplingMethod) -> Product:
        source = self.source_product
        logger.info(
            "Reprojecting '%s' (%d x %d)", source.name, source.width, source.height
        )

        target_crs = resolve_crs(
            self.crs_code, self.wkt_file, self.wkt, self.collocation_product,
            source_geocoding=source.geocoding,
            source_shape=(source.height, source.width),
        )
        geometry = self._create_geometry(target_crs)

        target = Product(
            f"projected_{source.name}",
            geometry.width,
            geometry.height,
            description=f"projection of: {source.description}",
            product_type=source.product_type,
            preferred_tile_size=source.preferred_tile_size,
        )
        target.start_time = source.start_time
        target.end_time = source.end_time

        if self.orthorectify:
            self._elevation_model = self._create_elevation_model()

        source.copy_metadata_to(target)
        for coding in source.flag_coding_group.values():
            target.add_flag_coding(coding.copy())
        for coding in source.index_coding_group.values():
            target.add_index_coding(coding.copy())

        target.geocoding = self._create_target_geocoding(geometry)
        target_model = MultiLevelModel(
            MultiLevelModel.default_level_count(
                target.width, target.height, target.preferred_tile_size
            ),
            target.geocoding.image_to_model,
            target.width,
            target.height,
        )

        rasters: List[RasterDataNode] = list(source.bands)
        if self.include_tie_point_grids:
            rasters.extend(source.tie_point_grids)
        for raster in rasters:
            self._reproject_raster(raster, target, target_model, resampling)

        target.pins = self._copy_placemarks(source.pins, source, target)
        target.gcps = self._copy_placemarks(source.gcps, source, target)

        logger.info(
            "Created '%s' (%d x %d) with %d bands",
            target.name, target.width, target.height, len(target.bands),
        )
        return target

    def _create_geometry(self, target_crs: Any) -> ImageGeometry:
        if self.collocation_product is not None:
            return create_collocation_geometry(self.collocation_product)
        return create_target_geometry(
            self.source_product,
            target_crs,
            pixel_size_x=self.pixel_size_x,
            pixel_size_y=self.pixel_size_y,
            width=self.width,
            height=self.height,
            orientation=self.orientation,
            easting=self.easting,
            northing=self.northing,
            reference_pixel_x=self.reference_pixel_x,
            reference_pixel_y=self.reference_pixel_y,
        )

    def _create_target_geocoding(self, geometry: ImageGeometry) -> Geocoding:
        # An image-space collocation grid has no CRS to rebuild from
        if isinstance(geometry.model_crs, ImageCRS):
            return self.collocation_product.geocoding
        return CrsGeocoding(
            geometry.image_to_model,
            (geometry.height, geometry.width),
            geometry.model_crs,
        )

    def _create_elevation_model(self) -> Optional[ElevationModel]:
        if self.elevation_model_name is None:
            logger.info("Orthorectifying with tie-point elevation")
            return None
        registry = self.elevation_model_registry or get_default_registry()
        model = registry.create(self.elevation_model_name)
        logger.info("Orthorectifying with elevation model '%s'", self.elevation_model_name)
        return model

    # -----------------------------------------------------------------
    # Rasters
    # -----------------------------------------------------------------
    def _source_geocoding(self, raster: RasterDataNode) -> Geocoding:
        geocoding = raster.geocoding
        if geocoding is None:
            raise GeolocationError(f"Raster '{raster.name}' is not geocoded")
        if not (self.orthorectify and geocoding.can_orthorectify):
            return geocoding
        key = id(geocoding)
        if key not in self._ortho_geocodings:
            self._ortho_geocodings[key] = OrthorectifiedGeocoding(
                geocoding, self._elevation_model
            )
        return self._ortho_geocodings[key]

    def _reproject_raster(
        self,
        raster: RasterDataNode,
        target: Product,
        target_model: MultiLevelModel,
        resampling: ResamplingMethod,
    ) -> Band:
        if raster.source_image is None:
            raise ValidationError(f"Raster '{raster.name}' has no pixel data")

        no_data = resolve_no_data(raster, self.no_data_value)
        band = Band(
            raster.name,
            raster.data_type,
            target.width,
            target.height,
            description=raster.description,
            unit=raster.unit,
            no_data_value=no_data,
            no_data_value_used=True,
        )
        if isinstance(raster, Band):
            band.spectral_wavelength = raster.spectral_wavelength
            band.spectral_bandwidth = raster.spectral_bandwidth
            coding = raster.sample_coding
            if raster.is_flag_band:
                band.sample_coding = target.flag_coding_group.get(coding.name)
            elif raster.is_index_band:
                band.sample_coding = target.index_coding_group.get(coding.name)
        target.add_band(band)

        geocoding = self._source_geocoding(raster)
        source_image = raster.source_image
        if raster.valid_mask_expression:
            source_image = MultiLevelImage(
                ValidMaskSource(raster, raster.valid_mask_expression, no_data)
            )
        source_model = MultiLevelModel(
            source_image.level_count, geocoding.image_to_model,
            raster.width, raster.height,
        )

        reprojector = Reprojector(
            source_image,
            source_model,
            geocoding.model_crs,
            target_model,
            target.geocoding.model_crs,
            resampling=resampling,
            no_data_value=no_data,
            data_type=raster.data_type,
            tile_size=target.preferred_tile_size,
        )
        image = MultiLevelImage(ReprojectedSource(reprojector))
        if must_replace_nan(raster, self.no_data_value, no_data):
            image = MultiLevelImage(
                TransformedLevelSource(image, ReplaceNaN(value=no_data))
            )
        band.source_image = image
        logger.debug(
            "Band '%s': %s, %s, no-data %r",
            band.name, band.data_type, reprojector.resampling.value, no_data,
        )
        return band

    # -----------------------------------------------------------------
    # Placemarks
    # -----------------------------------------------------------------
    def _copy_placemarks(
        self,
        placemarks: List[Placemark],
        source: Product,
        target: Product,
    ) -> List[Placemark]:
        copies: List[Placemark] = []
        for placemark in placemarks:
            lat, lon = placemark.lat, placemark.lon
            if (lat is None or lon is None) and source.geocoding is not None \
                    and placemark.row is not None and placemark.col is not None:
                lat, lon, _ = source.geocoding.image_to_latlon(
                    float(placemark.row), float(placemark.col)
                )
            if lat is None or lon is None or math.isnan(lat) or math.isnan(lon):
                warnings.warn(
                    f"Placemark '{placemark.name}' has no geographic position "
                    f"and is not copied",
                    UserWarning,
                    stacklevel=3,
                )
                continue
            row, col = target.geocoding.latlon_to_image(float(lat), float(lon))
            copies.append(Placemark(
                name=placemark.name,
                label=placemark.label,
                description=placemark.description,
                lat=float(lat),
                lon=float(lon),
                row=None if np.isnan(row) else float(row),
                col=None if np.isnan(col) else float(col),
            ))
        return copies
