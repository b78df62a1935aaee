# -*- coding: utf-8 -*-
"""
georeproj Vocabulary - Shared enumerations for the reprojection core.

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
2026-10-06

Modified
--------
2026-10-06
"""

from enum import Enum


class ResamplingMethod(Enum):
    """Resampling kernels available to the reprojection operator.

    The value is the user-facing name accepted by
    ``ReprojectionOp(resampling=...)``. ``order`` is the spline order
    handed to ``scipy.ndimage.map_coordinates``.
    """

    NEAREST = "Nearest"
    BILINEAR = "Bilinear"
    BICUBIC = "Bicubic"

    @property
    def order(self) -> int:
        return _SPLINE_ORDERS[self]

    @classmethod
    def from_name(cls, name: str) -> 'ResamplingMethod':
        """Look up a method by name, ignoring case.

        Raises
        ------
        ValueError
            If *name* is not a known resampling method.
        """
        if isinstance(name, str):
            for member in cls:
                if member.value.lower() == name.lower():
                    return member
        raise ValueError(f"Unknown resampling method: {name!r}")


_SPLINE_ORDERS = {
    ResamplingMethod.NEAREST: 0,
    ResamplingMethod.BILINEAR: 1,
    ResamplingMethod.BICUBIC: 3,
}
