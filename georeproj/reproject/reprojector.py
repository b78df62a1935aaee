# -*- coding: utf-8 -*-
"""
Reprojector - Per-level resampling of a raster onto a target pixel grid.

For each target pyramid level the reprojector back-projects the centre of
every target pixel through the chain

    target image -> target model (CRS_t) -> source model (CRS_s) -> source image

and samples the source level image there with
``scipy.ndimage.map_coordinates``. Target pixels whose back-projection
falls outside the source level rectangle, or has no position at all, are
filled with the no-data value.

Target levels deeper than the source pyramid reuse the coarsest source
level.

Dependencies
------------
scipy

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
2026-10-17
"""

# Standard library
import logging
from typing import Any, Tuple, Union

# Third-party
import numpy as np
from scipy.ndimage import map_coordinates, spline_filter

# georeproj internal
from georeproj.raster.multilevel import (
    MultiLevelImage,
    MultiLevelModel,
    MultiLevelSource,
    Rectangle,
)
from georeproj.raster.product import DEFAULT_TILE_SIZE
from georeproj.reproject.nodata import fill_value_for
from georeproj.reproject.resampling import select_resampling
from georeproj.reproject.transform import find_model_transform
from georeproj.vocabulary import ResamplingMethod

logger = logging.getLogger(__name__)


class Reprojector:
    """Resample the levels of a source image onto a target pyramid.

    The model transform between the two CRSs is resolved at construction,
    so a missing transform fails before any level is realized.

    Parameters
    ----------
    source_image : MultiLevelImage
        Source pixels.
    source_model : MultiLevelModel
        Source pyramid geometry in *source_crs* model coordinates.
    source_crs : pyproj.CRS or ImageCRS
        Model CRS of the source geocoding.
    target_model : MultiLevelModel
        Target pyramid geometry in *target_crs* model coordinates.
    target_crs : pyproj.CRS or ImageCRS
        Model CRS of the target product.
    resampling : ResamplingMethod or str, default=NEAREST
        Requested kernel. Non-floating-point data always uses nearest.
    no_data_value : float, default=NaN
        Fill value for target pixels without a source sample.
    data_type : numpy dtype-like, optional
        Output data type. Defaults to the source level-0 data type.
    tile_size : int, default=512
        Edge length of the target tiles processed at once.

    Raises
    ------
    ResolutionError
        If no model transform exists from *target_crs* to *source_crs*.
    """

    def __init__(
        self,
        source_image: MultiLevelImage,
        source_model: MultiLevelModel,
        source_crs: Any,
        target_model: MultiLevelModel,
        target_crs: Any,
        resampling: Union[ResamplingMethod, str] = ResamplingMethod.NEAREST,
        no_data_value: float = float('nan'),
        data_type: Any = None,
        tile_size: int = DEFAULT_TILE_SIZE,
    ) -> None:
        if tile_size < 1:
            raise ValueError(f"tile_size must be positive, got {tile_size}")
        self.source_image = source_image
        self.source_model = source_model
        self.source_crs = source_crs
        self.target_model = target_model
        self.target_crs = target_crs
        self.data_type = np.dtype(
            data_type if data_type is not None else source_image.get_image(0).dtype
        )
        self.resampling = select_resampling(resampling, self.data_type)
        self.no_data_value = no_data_value
        self.tile_size = int(tile_size)
        self._model_transform = find_model_transform(target_crs, source_crs)

    def source_level(self, target_level: int) -> int:
        """Source level sampled for *target_level*."""
        return min(target_level, self.source_model.level_count - 1)

    def compute_mapping(
        self,
        level: int,
        tile: Rectangle,
    ) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Source array indices for the target pixels of *tile*.

        Parameters
        ----------
        level : int
            Target level.
        tile : Rectangle
            Tile in target level array coordinates.

        Returns
        -------
        Tuple[np.ndarray, np.ndarray, np.ndarray]
            ``(source_rows, source_cols, valid)``, each of shape
            ``(tile.height, tile.width)``. Indices refer to the source
            level array, where index ``i`` is the centre of pixel ``i``.
            ``valid`` is True where the pixel centre back-projects inside
            the source level rectangle.
        """
        src_level = self.source_level(level)
        src_rect = self.source_model.level_bounds(src_level)
        tgt_rect = self.target_model.level_bounds(level)

        cols = tgt_rect.x + tile.x + np.arange(tile.width) + 0.5
        rows = tgt_rect.y + tile.y + np.arange(tile.height) + 0.5
        col_grid, row_grid = np.meshgrid(cols, rows)

        model_x, model_y = self.target_model.image_to_model(level) * (
            col_grid.ravel(), row_grid.ravel()
        )
        src_x, src_y = self._model_transform(np.asarray(model_x), np.asarray(model_y))
        px, py = self.source_model.model_to_image(src_level) * (src_x, src_y)
        px = np.asarray(px, dtype=np.float64).reshape(tile.height, tile.width)
        py = np.asarray(py, dtype=np.float64).reshape(tile.height, tile.width)

        valid = (
            np.isfinite(px) & np.isfinite(py)
            & (px >= src_rect.x) & (px <= src_rect.x + src_rect.width)
            & (py >= src_rect.y) & (py <= src_rect.y + src_rect.height)
        )
        return py - src_rect.y - 0.5, px - src_rect.x - 0.5, valid

    def reproject_level(self, level: int) -> np.ndarray:
        """Compute the target raster of *level*.

        Returns
        -------
        np.ndarray
            Array of ``data_type`` with the shape of the target level
            bounds.
        """
        src_level = self.source_level(level)
        tgt_rect = self.target_model.level_bounds(level)
        logger.debug(
            "Reprojecting target level %d (%d x %d) from source level %d with %s",
            level, tgt_rect.width, tgt_rect.height, src_level,
            self.resampling.value,
        )

        fill = fill_value_for(self.no_data_value, self.data_type)
        output = np.full((tgt_rect.height, tgt_rect.width), fill, dtype=self.data_type)
        sampler = _LevelSampler(
            self.source_image.get_image(src_level), self.resampling.order
        )

        step = self.tile_size
        for y0 in range(0, tgt_rect.height, step):
            for x0 in range(0, tgt_rect.width, step):
                tile = Rectangle(
                    x0, y0,
                    min(step, tgt_rect.width - x0),
                    min(step, tgt_rect.height - y0),
                )
                rows, cols, valid = self.compute_mapping(level, tile)
                if not np.any(valid):
                    continue
                block = output[y0:y0 + tile.height, x0:x0 + tile.width]
                block[valid] = sampler.sample(rows[valid], cols[valid]).astype(
                    self.data_type
                )
        return output


class _LevelSampler:
    """Interpolates one source level array at fractional indices.

    Spline coefficients are computed once per level. NaN samples are kept
    out of the spline and any interpolated value that touches one is NaN.
    """

    def __init__(self, data: np.ndarray, order: int) -> None:
        self._order = order
        self._nan_mask = None
        if order == 0:
            self._coeffs = data
            return
        values = np.asarray(data, dtype=np.float64)
        nan_mask = np.isnan(values)
        if np.any(nan_mask):
            values = np.where(nan_mask, 0.0, values)
            self._nan_mask = nan_mask.astype(np.float64)
        self._coeffs = (
            spline_filter(values, order=order, mode='nearest')
            if order > 1 else values
        )

    def sample(self, rows: np.ndarray, cols: np.ndarray) -> np.ndarray:
        coords = np.array([rows, cols])
        if self._order == 0:
            # Round half up so pixel boundaries pick the lower-right pixel
            coords = np.floor(coords + 0.5)
        values = map_coordinates(
            self._coeffs, coords, order=self._order, mode='nearest',
            prefilter=False,
        )
        if self._nan_mask is not None:
            touched = map_coordinates(
                self._nan_mask, coords, order=1, mode='nearest', prefilter=False
            )
            values = np.where(touched > 0.0, np.nan, values)
        return values


class ReprojectedSource(MultiLevelSource):
    """Multi-level source whose levels are realized by a ``Reprojector``."""

    def __init__(self, reprojector: Reprojector) -> None:
        super().__init__(reprojector.target_model)
        self.reprojector = reprojector

    def realize(self, level: int) -> np.ndarray:
        return self.reprojector.reproject_level(level)
