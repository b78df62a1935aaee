# -*- coding: utf-8 -*-
"""
Product Model - Rasters, codings and placemarks of a remote-sensing product.

A ``Product`` groups equally-sized rasters (``Band`` and ``TiePointGrid``)
that share one geocoding, together with categorical sample codings
(``FlagCoding``, ``IndexCoding``), free-form metadata, and placemarks
(pins and ground control points). Every raster exposes its pixels as a
``MultiLevelImage`` so that consumers can request any pyramid level.

Dependencies
------------
numpy
rasterio

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
2026-10-07

Modified
--------
2026-10-15
"""

# Standard library
import copy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

# Third-party
import numpy as np
from rasterio.transform import Affine

# georeproj internal
from georeproj.raster.multilevel import (
    ArrayMultiLevelSource,
    MultiLevelImage,
    MultiLevelModel,
    MultiLevelSource,
)

DEFAULT_TILE_SIZE = 512


# ===================================================================
# Sample codings
# ===================================================================

@dataclass
class CodingEntry:
    """One named value of a sample coding."""

    name: str
    value: int
    description: str = ''


class SampleCoding:
    """Named mapping from categorical sample values to meanings.

    Parameters
    ----------
    name : str
        Coding name. Bands refer to codings by this name.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.entries: Dict[str, CodingEntry] = {}

    def add(self, name: str, value: int, description: str = '') -> CodingEntry:
        entry = CodingEntry(name, int(value), description)
        self.entries[name] = entry
        return entry

    def get_value(self, name: str) -> int:
        return self.entries[name].value

    def copy(self) -> 'SampleCoding':
        duplicate = type(self)(self.name)
        for entry in self.entries.values():
            duplicate.add(entry.name, entry.value, entry.description)
        return duplicate

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {len(self)} entries)"


class FlagCoding(SampleCoding):
    """Bit-mask coding: each entry is a flag mask."""


class IndexCoding(SampleCoding):
    """Class-index coding: each entry is a class index."""


# ===================================================================
# Placemarks
# ===================================================================

@dataclass
class Placemark:
    """A pin or ground control point.

    Attributes
    ----------
    name : str
        Unique identifier.
    label : str
        Display label.
    description : str
        Free text.
    lat, lon : float, optional
        Geographic position in degrees.
    row, col : float, optional
        Continuous image position.
    """

    name: str
    label: str = ''
    description: str = ''
    lat: Optional[float] = None
    lon: Optional[float] = None
    row: Optional[float] = None
    col: Optional[float] = None


# ===================================================================
# Rasters
# ===================================================================

class RasterDataNode:
    """Base raster of a product.

    Parameters
    ----------
    name : str
        Raster name, unique within the product.
    data_type : numpy dtype-like
        Data type of the geophysical values.
    width, height : int
        Raster size in pixels.
    description, unit : str, optional
        Descriptive metadata.
    no_data_value : float, default=0.0
        No-data sentinel.
    no_data_value_used : bool, default=False
        Whether *no_data_value* marks invalid samples.
    valid_mask_expression : str, optional
        Boolean expression over raster names selecting valid samples.
    geocoding : Geocoding, optional
        Raster-specific geocoding. Falls back to the product geocoding.
    spectral_wavelength, spectral_bandwidth : float, default=0.0
        Spectral properties in nanometres.
    """

    def __init__(
        self,
        name: str,
        data_type: Any,
        width: int,
        height: int,
        description: str = '',
        unit: str = '',
        no_data_value: float = 0.0,
        no_data_value_used: bool = False,
        valid_mask_expression: Optional[str] = None,
        geocoding: Optional[Any] = None,
        spectral_wavelength: float = 0.0,
        spectral_bandwidth: float = 0.0,
    ) -> None:
        self.name = name
        self.data_type = np.dtype(data_type)
        self.width = int(width)
        self.height = int(height)
        self.description = description
        self.unit = unit
        self.no_data_value = no_data_value
        self.no_data_value_used = no_data_value_used
        self.valid_mask_expression = valid_mask_expression
        self.spectral_wavelength = spectral_wavelength
        self.spectral_bandwidth = spectral_bandwidth
        self.product: Optional['Product'] = None
        self._geocoding = geocoding
        self._source_image: Optional[MultiLevelImage] = None

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    @property
    def is_floating_point(self) -> bool:
        return np.issubdtype(self.data_type, np.floating)

    @property
    def geocoding(self) -> Optional[Any]:
        if self._geocoding is not None:
            return self._geocoding
        if self.product is not None:
            return self.product.geocoding
        return None

    @geocoding.setter
    def geocoding(self, value: Optional[Any]) -> None:
        self._geocoding = value

    @property
    def source_image(self) -> Optional[MultiLevelImage]:
        """Pixels of this raster as a multi-level image."""
        return self._source_image

    @source_image.setter
    def source_image(
        self, image: Union[np.ndarray, MultiLevelSource, MultiLevelImage]
    ) -> None:
        if isinstance(image, np.ndarray):
            image = ArrayMultiLevelSource(image, tile_size=self._tile_size())
        if isinstance(image, MultiLevelSource):
            image = MultiLevelImage(image)
        model = image.model
        if (model.height, model.width) != self.shape:
            raise ValueError(
                f"Image size {model.height} x {model.width} does not match "
                f"raster '{self.name}' size {self.height} x {self.width}"
            )
        self._source_image = image

    def _tile_size(self) -> int:
        if self.product is not None:
            return self.product.preferred_tile_size
        return DEFAULT_TILE_SIZE

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.name!r}, {self.data_type}, "
            f"{self.width} x {self.height})"
        )


class Band(RasterDataNode):
    """A measured or derived raster.

    Parameters
    ----------
    sample_coding : FlagCoding or IndexCoding, optional
        Categorical meaning of the sample values.
    **kwargs
        Forwarded to ``RasterDataNode``.
    """

    def __init__(
        self,
        name: str,
        data_type: Any,
        width: int,
        height: int,
        sample_coding: Optional[SampleCoding] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, data_type, width, height, **kwargs)
        self.sample_coding = sample_coding

    @property
    def is_flag_band(self) -> bool:
        return isinstance(self.sample_coding, FlagCoding)

    @property
    def is_index_band(self) -> bool:
        return isinstance(self.sample_coding, IndexCoding)


def _axis_weights(pos: np.ndarray, n: int) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Lower index, upper index and weight of *pos* on a grid axis of *n* nodes.

    Positions beyond the outermost nodes extrapolate linearly.
    """
    if n < 2:
        zeros = np.zeros(pos.shape, dtype=np.intp)
        return zeros, zeros, np.zeros(pos.shape)
    i0 = np.clip(np.floor(pos), 0, n - 2).astype(np.intp)
    return i0, i0 + 1, pos - i0


class TiePointGrid(RasterDataNode):
    """Raster interpolated from a coarse grid of tie points.

    Tie point ``(j, i)`` of the grid sits at the continuous image position
    ``x = offset_x + i * sub_sampling_x``, ``y = offset_y + j * sub_sampling_y``.
    Values between tie points are interpolated bilinearly and values
    outside the grid are extrapolated from the outermost cells.

    Parameters
    ----------
    name : str
        Raster name.
    grid : np.ndarray
        Tie-point values, shape ``(grid_rows, grid_cols)``.
    width, height : int
        Scene size in pixels.
    offset_x, offset_y : float, default=0.5
        Image position of the first tie point.
    sub_sampling_x, sub_sampling_y : float, default=1.0
        Pixel spacing between tie points.
    **kwargs
        Forwarded to ``RasterDataNode``.
    """

    def __init__(
        self,
        name: str,
        grid: np.ndarray,
        width: int,
        height: int,
        offset_x: float = 0.5,
        offset_y: float = 0.5,
        sub_sampling_x: float = 1.0,
        sub_sampling_y: float = 1.0,
        **kwargs: Any,
    ) -> None:
        grid = np.asarray(grid, dtype=np.float64)
        if grid.ndim != 2:
            raise ValueError(f"Tie-point grid must be 2D, got {grid.ndim}D")
        if sub_sampling_x <= 0 or sub_sampling_y <= 0:
            raise ValueError("Tie-point sub-sampling must be positive")
        super().__init__(name, np.float32, width, height, **kwargs)
        self.grid = grid
        self.offset_x = float(offset_x)
        self.offset_y = float(offset_y)
        self.sub_sampling_x = float(sub_sampling_x)
        self.sub_sampling_y = float(sub_sampling_y)

    @property
    def grid_positions(self) -> Tuple[np.ndarray, np.ndarray]:
        """``(rows, cols)`` image positions of every tie point, grid-shaped."""
        grid_rows, grid_cols = self.grid.shape
        rows = self.offset_y + np.arange(grid_rows) * self.sub_sampling_y
        cols = self.offset_x + np.arange(grid_cols) * self.sub_sampling_x
        return np.meshgrid(rows, cols, indexing='ij')

    def get_pixel_values(self, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
        """Interpolate the grid at continuous image positions.

        Non-finite positions yield NaN.
        """
        rows = np.asarray(rows, dtype=np.float64)
        cols = np.asarray(cols, dtype=np.float64)
        finite = np.isfinite(rows) & np.isfinite(cols)
        rows = np.where(finite, rows, 0.0)
        cols = np.where(finite, cols, 0.0)
        grid_rows, grid_cols = self.grid.shape
        j0, j1, wj = _axis_weights((rows - self.offset_y) / self.sub_sampling_y, grid_rows)
        i0, i1, wi = _axis_weights((cols - self.offset_x) / self.sub_sampling_x, grid_cols)
        g = self.grid
        top = g[j0, i0] * (1.0 - wi) + g[j0, i1] * wi
        bottom = g[j1, i0] * (1.0 - wi) + g[j1, i1] * wi
        return np.where(finite, top * (1.0 - wj) + bottom * wj, np.nan)

    @property
    def source_image(self) -> MultiLevelImage:
        if self._source_image is None:
            self._source_image = MultiLevelImage(_TiePointGridSource(self))
        return self._source_image

    @source_image.setter
    def source_image(self, image: Any) -> None:
        RasterDataNode.source_image.fset(self, image)


class _TiePointGridSource(MultiLevelSource):
    """Evaluates a tie-point grid at the pixel centres of each level."""

    def __init__(self, grid: TiePointGrid) -> None:
        level_count = MultiLevelModel.default_level_count(
            grid.width, grid.height, grid._tile_size()
        )
        super().__init__(MultiLevelModel(
            level_count, Affine.identity(), grid.width, grid.height
        ))
        self._grid = grid

    def realize(self, level: int) -> np.ndarray:
        bounds = self.model.level_bounds(level)
        scale = self.model.get_scale(level)
        rows = (np.arange(bounds.height) + 0.5) * scale
        cols = (np.arange(bounds.width) + 0.5) * scale
        rr, cc = np.meshgrid(rows, cols, indexing='ij')
        return self._grid.get_pixel_values(rr, cc).astype(np.float32)


# ===================================================================
# Product
# ===================================================================

class Product:
    """A raster product: equally-sized rasters sharing one geocoding.

    Parameters
    ----------
    name : str
        Product name.
    width, height : int
        Scene size in pixels.
    description : str, optional
        Free text.
    product_type : str, optional
        Product type identifier.
    geocoding : Geocoding, optional
        Scene geocoding.
    preferred_tile_size : int, default=512
        Tile size hint for renderers and pyramid depth.
    """

    def __init__(
        self,
        name: str,
        width: int,
        height: int,
        description: str = '',
        product_type: str = '',
        geocoding: Optional[Any] = None,
        preferred_tile_size: int = DEFAULT_TILE_SIZE,
    ) -> None:
        self.name = name
        self.width = int(width)
        self.height = int(height)
        self.description = description
        self.product_type = product_type
        self.geocoding = geocoding
        self.preferred_tile_size = int(preferred_tile_size)
        self.start_time: Optional[Any] = None
        self.end_time: Optional[Any] = None
        self.bands: List[Band] = []
        self.tie_point_grids: List[TiePointGrid] = []
        self.flag_coding_group: Dict[str, FlagCoding] = {}
        self.index_coding_group: Dict[str, IndexCoding] = {}
        self.metadata: Dict[str, Any] = {}
        self.pins: List[Placemark] = []
        self.gcps: List[Placemark] = []

    @property
    def shape(self) -> Tuple[int, int]:
        return (self.height, self.width)

    # -- rasters ---------------------------------------------------------

    def add_band(self, band: Band) -> Band:
        self._attach(band)
        self.bands.append(band)
        return band

    def add_tie_point_grid(self, grid: TiePointGrid) -> TiePointGrid:
        self._attach(grid)
        self.tie_point_grids.append(grid)
        return grid

    def _attach(self, raster: RasterDataNode) -> None:
        if raster.shape != self.shape:
            raise ValueError(
                f"Raster '{raster.name}' size {raster.height} x {raster.width} "
                f"does not match product size {self.height} x {self.width}"
            )
        if self.get_raster(raster.name) is not None:
            raise ValueError(f"Duplicate raster name '{raster.name}'")
        raster.product = self

    def get_band(self, name: str) -> Optional[Band]:
        for band in self.bands:
            if band.name == name:
                return band
        return None

    def get_tie_point_grid(self, name: str) -> Optional[TiePointGrid]:
        for grid in self.tie_point_grids:
            if grid.name == name:
                return grid
        return None

    def get_raster(self, name: str) -> Optional[RasterDataNode]:
        """Band or tie-point grid called *name*."""
        return self.get_band(name) or self.get_tie_point_grid(name)

    @property
    def rasters(self) -> List[RasterDataNode]:
        return [*self.bands, *self.tie_point_grids]

    # -- codings ---------------------------------------------------------

    def add_flag_coding(self, coding: FlagCoding) -> FlagCoding:
        self.flag_coding_group[coding.name] = coding
        return coding

    def add_index_coding(self, coding: IndexCoding) -> IndexCoding:
        self.index_coding_group[coding.name] = coding
        return coding

    def copy_metadata_to(self, target: 'Product') -> None:
        target.metadata = copy.deepcopy(self.metadata)

    # -- geometry --------------------------------------------------------

    @property
    def multi_level_model(self) -> MultiLevelModel:
        """Pyramid geometry implied by the geocoding and tile size."""
        if self.geocoding is not None:
            image_to_model = self.geocoding.image_to_model
        else:
            image_to_model = Affine.identity()
        level_count = MultiLevelModel.default_level_count(
            self.width, self.height, self.preferred_tile_size
        )
        return MultiLevelModel(level_count, image_to_model, self.width, self.height)

    def __repr__(self) -> str:
        return (
            f"Product({self.name!r}, {self.width} x {self.height}, "
            f"{len(self.bands)} bands)"
        )
