# -*- coding: utf-8 -*-
"""
Processor Base Classes - Abstract interfaces for georeproj processors.

Defines the ``ImageProcessor`` common base class for operators and
per-array transforms, and the ``ImageTransform`` ABC for dense raster
transforms. ``ImageProcessor`` provides version checking at first
instantiation and ``typing.Annotated``-based tunable parameter
declarations with automatic ``__init__`` generation and runtime
resolution through ``**kwargs``.

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
2026-10-06

Modified
--------
2026-10-20
"""

# Standard library
import logging
import warnings
from abc import ABC, abstractmethod
from typing import Any, Dict, Tuple

# Third-party
import numpy as np

# georeproj internal
from georeproj.processing.params import ParamSpec, collect_param_specs, _make_init

logger = logging.getLogger(__name__)


class ImageProcessor(ABC):
    """
    Common base class for all georeproj processors.

    Provides two cross-cutting capabilities:

    **Version checking**: Concrete subclasses that do not declare a processor
    version via ``@processor_version('x.y.z')`` will trigger a
    ``UserWarning`` at first instantiation.  The check uses ``__new__``
    rather than ``__init_subclass__`` so that decorators have been applied
    by the time the check runs.

    **Tunable parameter flow**: Subclasses declare tunable parameters as
    ``typing.Annotated`` class-body fields using constraint markers from
    :mod:`georeproj.processing.params` (``Range``, ``Options``, ``Desc``).
    ``__init_subclass__`` collects these into ``__param_specs__`` and
    auto-generates an ``__init__`` (unless the subclass defines its own).
    At runtime, ``_resolve_params(kwargs)`` merges instance defaults with
    keyword-argument overrides and validates constraints.
    """

    # Track which classes have been checked to warn only once per class.
    _version_warned_classes: set = set()

    #: Tuple of :class:`~georeproj.processing.params.ParamSpec` built
    #: automatically by ``__init_subclass__`` from ``Annotated`` fields.
    __param_specs__: Tuple[ParamSpec, ...] = ()

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.__param_specs__ = collect_param_specs(cls)
        # Auto-generate __init__ only when the subclass has Annotated
        # params and did NOT define its own __init__.
        if cls.__param_specs__ and '__init__' not in cls.__dict__:
            cls.__init__ = _make_init(cls.__param_specs__)

    # -----------------------------------------------------------------
    # Version checking (fires once per class at first instantiation)
    # -----------------------------------------------------------------
    def __new__(cls, *args: Any, **kwargs: Any) -> 'ImageProcessor':
        if cls not in ImageProcessor._version_warned_classes:
            ImageProcessor._version_warned_classes.add(cls)
            if (
                not getattr(cls, '__processor_version__', None)
                and not getattr(cls, '__abstractmethods__', None)
            ):
                warnings.warn(
                    f"{cls.__qualname__} does not declare a processor version. "
                    f"Use @processor_version('x.y.z') to declare one.",
                    UserWarning,
                    stacklevel=2,
                )
        logger.debug("Instantiating %s", cls.__qualname__)
        return super().__new__(cls)

    # -----------------------------------------------------------------
    # Tunable parameter resolution
    # -----------------------------------------------------------------
    def _resolve_params(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Merge instance defaults with runtime *kwargs* overrides.

        For each declared parameter in ``__param_specs__``:

        1. If present in *kwargs*, use the *kwargs* value.
        2. Otherwise use the instance attribute (``self.<name>``).

        Every resolved value is validated against its spec's type, range,
        and choices constraints.

        Parameters
        ----------
        kwargs : Dict[str, Any]
            Runtime keyword arguments. Keys that are not declared
            parameters are ignored.

        Returns
        -------
        Dict[str, Any]
            ``{param_name: resolved_value}`` for every declared param.

        Raises
        ------
        TypeError
            If a value has the wrong type.
        ValidationError
            If a value violates range or choices constraints.
        """
        resolved: Dict[str, Any] = {}
        for spec in type(self).__param_specs__:
            if spec.name in kwargs:
                value = kwargs[spec.name]
            else:
                value = getattr(self, spec.name)
            spec.validate(value)
            resolved[spec.name] = value
        return resolved


class ImageTransform(ImageProcessor):
    """
    Abstract base class for image transforms.

    Provides interface for transforms that take a source image array and
    produce a transformed output array of the same shape, such as the
    NaN-to-sentinel replacement applied after reprojection.
    """

    @abstractmethod
    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        """
        Apply the transform to a source image array.

        Parameters
        ----------
        source : np.ndarray
            Input image, shape ``(rows, cols)``.

        Returns
        -------
        np.ndarray
            Transformed image.
        """
        ...
