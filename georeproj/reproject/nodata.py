# -*- coding: utf-8 -*-
"""
No-Data Handling - Sentinel resolution, valid masks and NaN replacement.

Each reprojected raster gets exactly one no-data sentinel: the global
override when one is configured, otherwise the source raster's own value
when it is used, otherwise NaN. Invalid source samples are replaced by
the sentinel before resampling, and NaNs produced by resampling are
replaced after it whenever a real (non-NaN) sentinel is in effect for a
floating-point band.

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
2026-10-12

Modified
--------
2026-10-20
"""

# Standard library
import ast
import logging
import math
from typing import Annotated, Any, Dict, Optional, Union

# Third-party
import numpy as np

# georeproj internal
from georeproj.exceptions import ValidationError
from georeproj.processing.base import ImageTransform
from georeproj.processing.params import Desc
from georeproj.processing.versioning import processor_version
from georeproj.raster.multilevel import MultiLevelImage, MultiLevelSource

logger = logging.getLogger(__name__)

_MASK_NODES = (
    ast.Expression, ast.BoolOp, ast.BinOp, ast.UnaryOp, ast.Compare,
    ast.Constant, ast.Name, ast.Call, ast.Attribute, ast.Subscript,
    ast.Slice, ast.Tuple, ast.keyword, ast.boolop, ast.operator,
    ast.unaryop, ast.cmpop, ast.expr_context,
)


def _is_numpy_attribute(node: ast.AST) -> bool:
    """Whether *node* is a public attribute chain rooted at ``np``."""
    while isinstance(node, ast.Attribute):
        if node.attr.startswith('_'):
            return False
        node = node.value
    return isinstance(node, ast.Name) and node.id == 'np'


def _check_mask_expression(tree: ast.Expression, expression: str, name: str) -> None:
    """Reject valid-mask syntax outside plain array arithmetic.

    Raises
    ------
    ValidationError
        If *tree* holds a node other than operators, constants, names,
        subscripts and public ``np`` attributes or calls.
    """
    for node in ast.walk(tree):
        if not isinstance(node, _MASK_NODES):
            reason = type(node).__name__
        elif isinstance(node, ast.Name) and node.id.startswith('_'):
            reason = f"name '{node.id}'"
        elif isinstance(node, ast.Attribute) and not _is_numpy_attribute(node):
            reason = f"attribute '{node.attr}'"
        elif isinstance(node, ast.Call) and not _is_numpy_attribute(node.func):
            reason = 'call of a non-numpy function'
        else:
            continue
        raise ValidationError(
            f"Unsupported {reason} in valid-mask expression {expression!r} "
            f"of raster '{name}'"
        )


def resolve_no_data(raster: Any, override: Optional[float] = None) -> float:
    """Target no-data sentinel for *raster*.

    Parameters
    ----------
    raster : RasterDataNode
        Source raster.
    override : float, optional
        Global no-data value. Takes precedence when given.

    Returns
    -------
    float
        *override*, else the raster's no-data value if it is used,
        else NaN.
    """
    if override is not None:
        return float(override)
    if raster.no_data_value_used:
        return float(raster.no_data_value)
    return float('nan')


def must_replace_nan(
    raster: Any,
    override: Optional[float],
    no_data_value: float,
) -> bool:
    """Whether NaNs in the reprojected *raster* must become *no_data_value*.

    True exactly when the raster is floating point, a no-data value is in
    effect (the raster uses one or *override* is given) and the resolved
    sentinel is not NaN.
    """
    is_float = np.issubdtype(np.dtype(raster.data_type), np.floating)
    no_data_given = raster.no_data_value_used or override is not None
    return is_float and no_data_given and not math.isnan(no_data_value)


def fill_value_for(no_data_value: float, data_type: Any) -> Union[bool, int, float]:
    """Representable fill value of *no_data_value* in *data_type*.

    Integer types cannot hold NaN and fall back to 0; other values are
    truncated and clipped to the type's range.
    """
    dtype = np.dtype(data_type)
    if dtype == np.bool_:
        return bool(no_data_value) if np.isfinite(no_data_value) else False
    if np.issubdtype(dtype, np.integer):
        if not np.isfinite(no_data_value):
            return 0
        info = np.iinfo(dtype)
        return int(min(max(int(no_data_value), info.min), info.max))
    return no_data_value


@processor_version('1.0.0')
class ReplaceNaN(ImageTransform):
    """Replace every NaN of an image with a constant.

    Examples
    --------
    >>> import numpy as np
    >>> ReplaceNaN(value=-1.0).apply(np.array([[np.nan, 2.0]]))
    array([[-1.,  2.]])
    """

    value: Annotated[float, Desc('Value written in place of NaN')] = 0.0

    def apply(self, source: np.ndarray, **kwargs: Any) -> np.ndarray:
        params = self._resolve_params(kwargs)
        source = np.asarray(source)
        if not np.issubdtype(source.dtype, np.floating):
            return source
        return np.where(np.isnan(source), params['value'], source).astype(
            source.dtype, copy=False
        )


class TransformedLevelSource(MultiLevelSource):
    """Applies an ``ImageTransform`` to every level of an image.

    Parameters
    ----------
    image : MultiLevelImage
        Input pyramid.
    transform : ImageTransform
        Per-level transform.
    """

    def __init__(self, image: MultiLevelImage, transform: ImageTransform) -> None:
        super().__init__(image.model)
        self.image = image
        self.transform = transform

    def realize(self, level: int) -> np.ndarray:
        return self.transform.apply(self.image.get_image(level))


class ValidMaskSource(MultiLevelSource):
    """Source raster with samples outside its valid mask set to no-data.

    The expression is a numpy boolean expression over raster names of the
    owning product. It is evaluated per level with each referenced
    raster's level image bound to its name and numpy bound to ``np``.
    Only operators, constants, subscripts, raster names and public
    ``np`` attributes and calls are accepted; no built-ins are available.

    Parameters
    ----------
    raster : RasterDataNode
        Raster to mask. Must belong to a product.
    expression : str
        Valid-mask expression.
    no_data_value : float
        Value written where the mask is False.

    Raises
    ------
    ValidationError
        If the expression does not compile, uses unsupported syntax, or
        names something that is neither a raster of the product nor ``np``.
    """

    def __init__(self, raster: Any, expression: str, no_data_value: float) -> None:
        image = raster.source_image
        super().__init__(image.model)
        product = raster.product
        if product is None:
            raise ValidationError(
                f"Raster '{raster.name}' must belong to a product to "
                f"evaluate its valid-mask expression"
            )
        try:
            tree = ast.parse(expression, mode='eval')
        except SyntaxError as exc:
            raise ValidationError(
                f"Invalid valid-mask expression {expression!r} of raster "
                f"'{raster.name}': {exc.msg}"
            ) from exc
        _check_mask_expression(tree, expression, raster.name)
        self._code = compile(tree, f'<valid mask of {raster.name}>', 'eval')

        names = sorted({
            node.id for node in ast.walk(tree) if isinstance(node, ast.Name)
        })
        self._rasters: Dict[str, Any] = {}
        for name in names:
            if name == 'np':
                continue
            referenced = product.get_raster(name)
            if referenced is None:
                raise ValidationError(
                    f"Valid-mask expression {expression!r} of raster "
                    f"'{raster.name}' refers to unknown raster '{name}'"
                )
            self._rasters[name] = referenced

        self.raster = raster
        self.expression = expression
        self.no_data_value = no_data_value
        self._image = image

    def realize(self, level: int) -> np.ndarray:
        data = self._image.get_image(level)
        logger.debug(
            "Masking level %d of '%s' with %r", level, self.raster.name, self.expression
        )
        namespace: Dict[str, Any] = {'__builtins__': {}, 'np': np}
        for name, raster in self._rasters.items():
            image = raster.source_image
            namespace[name] = image.get_image(min(level, image.level_count - 1))
        try:
            mask = eval(self._code, namespace)
            result = np.where(
                mask, data, fill_value_for(self.no_data_value, data.dtype)
            )
        except (ArithmeticError, LookupError, TypeError, ValueError) as exc:
            raise ValidationError(
                f"Cannot evaluate valid-mask expression {self.expression!r} "
                f"of raster '{self.raster.name}': {exc}"
            ) from exc
        return result.astype(data.dtype, copy=False)
