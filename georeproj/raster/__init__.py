# -*- coding: utf-8 -*-
"""
Raster Module - Multi-level raster model and product collaborators.

Key Classes
-----------
- MultiLevelModel, MultiLevelSource, MultiLevelImage, ArrayMultiLevelSource
- Product, Band, TiePointGrid, RasterDataNode
- FlagCoding, IndexCoding, Placemark

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
2026-10-07
"""

from georeproj.raster.multilevel import (
    ArrayMultiLevelSource,
    MultiLevelImage,
    MultiLevelModel,
    MultiLevelSource,
    Rectangle,
)
from georeproj.raster.product import (
    Band,
    CodingEntry,
    FlagCoding,
    IndexCoding,
    Placemark,
    Product,
    RasterDataNode,
    SampleCoding,
    TiePointGrid,
)

__all__ = [
    'ArrayMultiLevelSource',
    'MultiLevelImage',
    'MultiLevelModel',
    'MultiLevelSource',
    'Rectangle',
    'Band',
    'CodingEntry',
    'FlagCoding',
    'IndexCoding',
    'Placemark',
    'Product',
    'RasterDataNode',
    'SampleCoding',
    'TiePointGrid',
]
