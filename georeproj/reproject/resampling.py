# -*- coding: utf-8 -*-
"""
Resampling Selection - Map resampling names and band types to kernels.

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
2026-10-10
"""

# Standard library
from typing import Any, Union

# Third-party
import numpy as np

# georeproj internal
from georeproj.exceptions import ValidationError
from georeproj.vocabulary import ResamplingMethod


def parse_resampling(name: Union[str, ResamplingMethod]) -> ResamplingMethod:
    """Resampling method called *name*, ignoring case.

    Raises
    ------
    ValidationError
        If *name* is not one of ``Nearest``, ``Bilinear``, ``Bicubic``.
    """
    if isinstance(name, ResamplingMethod):
        return name
    try:
        return ResamplingMethod.from_name(name)
    except ValueError as exc:
        choices = ', '.join(m.value for m in ResamplingMethod)
        raise ValidationError(
            f"Invalid resampling method {name!r}; expected one of {choices}"
        ) from exc


def select_resampling(
    method: Union[str, ResamplingMethod],
    data_type: Any,
) -> ResamplingMethod:
    """Kernel to use for a band of *data_type*.

    Non-floating-point bands always use nearest neighbour.
    """
    method = parse_resampling(method)
    if not np.issubdtype(np.dtype(data_type), np.floating):
        return ResamplingMethod.NEAREST
    return method
