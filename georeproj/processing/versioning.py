# -*- coding: utf-8 -*-
"""
Processor Versioning - Version decorator for georeproj processors.

Provides the ``@processor_version`` class decorator for stamping semantic
version strings on processor classes (``ReprojectionOp``, ``ReplaceNaN``).
The stamped version is the single source of truth for both the algorithm
version and the output format version.

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

# Standard library
from typing import Optional, Type, TypeVar, overload
import importlib.metadata

T = TypeVar('T')


@overload
def processor_version(version: str):
    ...

@overload
def processor_version():
    ...

def processor_version(version: Optional[str] = None):
    """Class decorator that stamps a processor version on a processor class.

    Sets ``__processor_version__`` as a class attribute. If a version is
    not provided, it is inferred from the installed ``georeproj``
    distribution metadata, falling back to ``"unknown"``.

    Parameters
    ----------
    version : str, optional
        Semantic version string (e.g., ``'1.0.0'``).

    Returns
    -------
    Callable
        Class decorator that sets ``__processor_version__`` on the class.

    Examples
    --------
    >>> from georeproj.processing.versioning import processor_version
    >>> from georeproj.processing.base import ImageTransform
    >>>
    >>> @processor_version('1.0.0')
    ... class Passthrough(ImageTransform):
    ...     def apply(self, source, **kwargs):
    ...         return source
    >>>
    >>> Passthrough.__processor_version__
    '1.0.0'
    """
    def decorator(cls: Type[T]) -> Type[T]:
        if version:
            cls.__processor_version__ = version
        else:
            try:
                cls.__processor_version__ = importlib.metadata.version('georeproj')
            except importlib.metadata.PackageNotFoundError:
                cls.__processor_version__ = "unknown"
        return cls
    return decorator
