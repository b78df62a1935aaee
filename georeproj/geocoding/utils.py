# -*- coding: utf-8 -*-
"""
Geocoding Utilities - Helper functions for footprint computation.

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
2026-10-07

Modified
--------
2026-10-09
"""

from typing import Tuple

import numpy as np


def sample_image_perimeter(
    shape: Tuple[int, int],
    samples_per_edge: int = 10
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Generate sample points along the outer boundary of an image.

    Image coordinates are continuous, so the boundary runs along the
    outer pixel edges from ``0`` to ``rows`` and ``0`` to ``cols``
    rather than through the corner pixel centres.

    Parameters
    ----------
    shape : Tuple[int, int]
        Image shape (rows, cols)
    samples_per_edge : int, default=10
        Number of sample points per edge (at least 2).

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        (rows, cols) arrays of sample coordinates along perimeter,
        clockwise from the top-left corner.
    """
    rows, cols = shape
    n = max(int(samples_per_edge), 2)

    # Top edge (row=0, col varies)
    top_rows = np.zeros(n)
    top_cols = np.linspace(0, cols, n)

    # Right edge (col=cols, row varies)
    right_rows = np.linspace(0, rows, n)
    right_cols = np.full(n, float(cols))

    # Bottom edge (row=rows, col varies)
    bottom_rows = np.full(n, float(rows))
    bottom_cols = np.linspace(cols, 0, n)

    # Left edge (col=0, row varies)
    left_rows = np.linspace(rows, 0, n)
    left_cols = np.zeros(n)

    all_rows = np.concatenate([top_rows, right_rows, bottom_rows, left_rows])
    all_cols = np.concatenate([top_cols, right_cols, bottom_cols, left_cols])

    return all_rows, all_cols
