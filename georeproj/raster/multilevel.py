# -*- coding: utf-8 -*-
"""
Multi-Level Rasters - Resolution pyramids realized lazily per level.

A raster exists as an ordered sequence of resolution levels. Level 0 is
full resolution and level ``L`` is downsampled by ``2**L``. Each level has
its own image-to-model affine transform and pixel bounds, both derived
from level 0 and the level scale by ``MultiLevelModel``.

Level realization is split in two: a ``MultiLevelSource`` computes a
level as a pure function of its inputs, and a ``MultiLevelImage`` owns
memoization so that concurrent requests for the same level from several
worker threads realize it only once.

Dependencies
------------
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
import logging
import math
import threading
from abc import ABC, abstractmethod
from typing import Dict, NamedTuple, Optional, Tuple

# Third-party
import numpy as np
from rasterio.transform import Affine

logger = logging.getLogger(__name__)

# Decimal places kept before snapping level bounds to integers
_BOUNDS_PRECISION = 9


class Rectangle(NamedTuple):
    """Integer pixel rectangle.

    Attributes
    ----------
    x : int
        First column (inclusive).
    y : int
        First row (inclusive).
    width : int
        Number of columns. Always ``>= 1``.
    height : int
        Number of rows. Always ``>= 1``.
    """

    x: int
    y: int
    width: int
    height: int


class MultiLevelModel:
    """Geometry of a resolution pyramid.

    Parameters
    ----------
    level_count : int
        Number of levels (at least 1).
    image_to_model : Affine
        Level-0 image ``(x=col, y=row)`` to model transform.
    width : int
        Level-0 width in pixels.
    height : int
        Level-0 height in pixels.

    Raises
    ------
    ValueError
        If *level_count* or the image size is not positive, or the
        transform is not invertible.
    """

    def __init__(
        self,
        level_count: int,
        image_to_model: Affine,
        width: int,
        height: int,
    ) -> None:
        if level_count < 1:
            raise ValueError(f"level_count must be >= 1, got {level_count}")
        if width < 1 or height < 1:
            raise ValueError(
                f"Image size must be positive, got {width} x {height}"
            )
        if image_to_model.is_degenerate:
            raise ValueError(f"Degenerate image-to-model transform: {image_to_model!r}")
        self.level_count = int(level_count)
        self.width = int(width)
        self.height = int(height)
        self._image_to_model = image_to_model

    @staticmethod
    def default_level_count(width: int, height: int, tile_size: int) -> int:
        """Number of halvings until the coarsest level fits in one tile."""
        count = 1
        w, h = int(width), int(height)
        while w > tile_size or h > tile_size:
            w = -(-w // 2)
            h = -(-h // 2)
            count += 1
        return count

    def get_scale(self, level: int) -> float:
        return float(2 ** level)

    def image_to_model(self, level: int = 0) -> Affine:
        """Image-to-model transform of *level*."""
        self._check_level(level)
        scale = self.get_scale(level)
        return self._image_to_model * Affine.scale(scale, scale)

    def model_to_image(self, level: int = 0) -> Affine:
        """Model-to-image transform of *level*."""
        return ~self.image_to_model(level)

    def model_corners(self) -> Tuple[Tuple[float, float], ...]:
        """Model coordinates of the level-0 image corners, clockwise."""
        w, h = self.width, self.height
        return tuple(
            self._image_to_model * corner
            for corner in ((0, 0), (w, 0), (w, h), (0, h))
        )

    def level_bounds(self, level: int) -> Rectangle:
        """Integer bounding rectangle of the image at *level*.

        The level-0 image quadrilateral is mapped to model space and back
        through the level's model-to-image transform.
        """
        m2i = self.model_to_image(level)
        xs, ys = zip(*(m2i * corner for corner in self.model_corners()))
        return _bounding_rectangle(xs, ys)

    def _check_level(self, level: int) -> None:
        if not 0 <= level < self.level_count:
            raise ValueError(
                f"Level {level} outside pyramid of {self.level_count} levels"
            )

    def __repr__(self) -> str:
        return (
            f"MultiLevelModel(level_count={self.level_count}, "
            f"width={self.width}, height={self.height})"
        )


def _bounding_rectangle(xs, ys) -> Rectangle:
    x0 = math.floor(round(min(xs), _BOUNDS_PRECISION))
    y0 = math.floor(round(min(ys), _BOUNDS_PRECISION))
    x1 = math.ceil(round(max(xs), _BOUNDS_PRECISION))
    y1 = math.ceil(round(max(ys), _BOUNDS_PRECISION))
    return Rectangle(x0, y0, max(1, x1 - x0), max(1, y1 - y0))


class MultiLevelSource(ABC):
    """Computes the pixels of one pyramid level on demand.

    Implementations must be pure: repeated calls for the same level
    return equal arrays, and calls for different levels may run
    concurrently.

    Parameters
    ----------
    model : MultiLevelModel
        Pyramid geometry of the produced raster.
    """

    def __init__(self, model: MultiLevelModel) -> None:
        self.model = model

    @abstractmethod
    def realize(self, level: int) -> np.ndarray:
        """Compute the ``(rows, cols)`` raster of *level*."""
        ...


class MultiLevelImage:
    """Memoizing, thread-safe view over a ``MultiLevelSource``.

    Each level is realized at most once. Returned arrays are read-only
    and the same object is returned for repeated requests.

    Parameters
    ----------
    source : MultiLevelSource
        Level producer.
    """

    def __init__(self, source: MultiLevelSource) -> None:
        self.source = source
        self._cache: Dict[int, np.ndarray] = {}
        self._lock = threading.Lock()
        self._level_locks: Dict[int, threading.Lock] = {}

    @property
    def model(self) -> MultiLevelModel:
        return self.source.model

    @property
    def level_count(self) -> int:
        return self.source.model.level_count

    def get_image(self, level: int = 0) -> np.ndarray:
        """Return the read-only raster of *level*, realizing it if needed.

        Raises
        ------
        ValueError
            If *level* is outside the pyramid.
        """
        if not 0 <= level < self.level_count:
            raise ValueError(
                f"Level {level} outside pyramid of {self.level_count} levels"
            )
        with self._lock:
            cached = self._cache.get(level)
            if cached is not None:
                return cached
            level_lock = self._level_locks.setdefault(level, threading.Lock())

        # Other levels stay available while this one is realized
        with level_lock:
            with self._lock:
                cached = self._cache.get(level)
            if cached is not None:
                return cached
            logger.debug(
                "Realizing level %d of %s", level, type(self.source).__name__
            )
            data = np.asarray(self.source.realize(level))
            data.setflags(write=False)
            with self._lock:
                self._cache[level] = data
            return data

    def invalidate(self) -> None:
        """Drop all cached levels."""
        with self._lock:
            self._cache.clear()


class ArrayMultiLevelSource(MultiLevelSource):
    """Pyramid over an in-memory level-0 array.

    Coarser levels are built by nearest-centre decimation: level pixel
    ``i`` takes level-0 sample ``min(i * s + s // 2, n - 1)`` with
    ``s = 2**level``.

    Parameters
    ----------
    data : np.ndarray
        Level-0 raster, shape ``(rows, cols)``.
    image_to_model : Affine, optional
        Level-0 image-to-model transform. Defaults to identity.
    level_count : int, optional
        Number of levels. Defaults to
        ``MultiLevelModel.default_level_count(cols, rows, tile_size)``.
    tile_size : int, default=512
        Tile size used for the default level count.

    Raises
    ------
    ValueError
        If *data* is not 2D.
    """

    def __init__(
        self,
        data: np.ndarray,
        image_to_model: Optional[Affine] = None,
        level_count: Optional[int] = None,
        tile_size: int = 512,
    ) -> None:
        data = np.asarray(data)
        if data.ndim != 2:
            raise ValueError(f"Expected 2D array, got {data.ndim}D")
        rows, cols = data.shape
        if level_count is None:
            level_count = MultiLevelModel.default_level_count(cols, rows, tile_size)
        if image_to_model is None:
            image_to_model = Affine.identity()
        super().__init__(MultiLevelModel(level_count, image_to_model, cols, rows))
        self._data = data

    def realize(self, level: int) -> np.ndarray:
        if level == 0:
            return self._data.copy()
        bounds = self.model.level_bounds(level)
        s = 2 ** level
        rows, cols = self._data.shape
        row_idx = np.minimum(np.arange(bounds.height) * s + s // 2, rows - 1)
        col_idx = np.minimum(np.arange(bounds.width) * s + s // 2, cols - 1)
        return self._data[np.ix_(row_idx, col_idx)]
