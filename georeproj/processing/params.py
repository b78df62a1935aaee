# -*- coding: utf-8 -*-
"""
Tunable Parameter Annotations - Declarative parameter constraints via typing.Annotated.

Provides constraint marker types (``Range``, ``Options``, ``Desc``) for use
inside ``typing.Annotated`` annotations on ``ImageProcessor`` subclasses, plus
the ``ParamSpec`` introspection class and collection/init-generation utilities
consumed by ``ImageProcessor.__init_subclass__``.

Usage
-----
Declare parameters as class-body annotations::

    from typing import Annotated, Optional
    from georeproj.processing.params import Range, Options, Desc

    class MyOperator(ImageProcessor):
        orientation: Annotated[float, Range(min=0.0, max=360.0),
                               Desc('Orientation in degrees')] = 0.0
        resampling: Annotated[str, Options('Nearest', 'Bilinear', ignore_case=True),
                              Desc('Resampling method')] = 'Nearest'
        width: Annotated[Optional[int], Desc('Output width')] = None

Parameters are automatically collected into ``cls.__param_specs__`` at class
definition time. An ``__init__`` is auto-generated unless the class defines
its own. ``Optional[...]`` parameters accept ``None``.

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
2026-10-20
"""

# Standard library
import inspect
from typing import (
    Annotated,
    Any,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
    get_type_hints,
)

# georeproj internal
from georeproj.exceptions import ValidationError


class ParamMeta:
    """Marks an ``Annotated`` field as an operator parameter."""


class Range(ParamMeta):
    """Inclusive numeric range constraint.

    Parameters
    ----------
    min : int or float, optional
        Minimum allowed value (inclusive).
    max : int or float, optional
        Maximum allowed value (inclusive).
    """

    __slots__ = ('min', 'max')

    def __init__(
        self,
        min: Optional[Union[int, float]] = None,
        max: Optional[Union[int, float]] = None,
    ) -> None:
        self.min = min
        self.max = max

    def __repr__(self) -> str:
        parts = []
        if self.min is not None:
            parts.append(f"min={self.min!r}")
        if self.max is not None:
            parts.append(f"max={self.max!r}")
        return f"Range({', '.join(parts)})"


class Options(ParamMeta):
    """Discrete choice constraint.

    Parameters
    ----------
    *choices
        Allowed values.  Must supply at least one.
    ignore_case : bool, default=False
        Compare string values case-insensitively.
    """

    __slots__ = ('choices', 'ignore_case')

    def __init__(self, *choices: Any, ignore_case: bool = False) -> None:
        if not choices:
            raise ValueError("Options requires at least one choice")
        self.choices = choices
        self.ignore_case = ignore_case

    def __repr__(self) -> str:
        return f"Options{self.choices!r}"


class Desc(ParamMeta):
    """Human-readable parameter description.

    Parameters
    ----------
    text : str
        Description of the parameter.
    """

    __slots__ = ('text',)

    def __init__(self, text: str) -> None:
        self.text = text

    def __repr__(self) -> str:
        return f"Desc({self.text!r})"


_SENTINEL = object()


class ParamSpec:
    """Resolved constraints of one operator parameter.

    Attributes
    ----------
    name : str
        Parameter name (keyword-argument key).
    param_type : type
        Expected Python type (``float``, ``int``, ``str``, ``bool``, ...).
    default : Any
        Default value, or ``None`` if the parameter is required.
    nullable : bool
        Whether ``None`` is an accepted value (``Optional[...]`` hint).
    description : str
        Human-readable description.
    min_value : int, float, or None
        Inclusive minimum (from ``Range``).
    max_value : int, float, or None
        Inclusive maximum (from ``Range``).
    choices : tuple or None
        Allowed values (from ``Options``).
    ignore_case : bool
        Whether string choices match case-insensitively.
    """

    __slots__ = (
        'name', 'param_type', 'default', '_has_default', 'nullable',
        'description', 'min_value', 'max_value', 'choices', 'ignore_case',
    )

    def __init__(
        self,
        name: str,
        param_type: type,
        default: Any,
        has_default: bool,
        description: str,
        min_value: Optional[Union[int, float]],
        max_value: Optional[Union[int, float]],
        choices: Optional[Tuple],
        nullable: bool = False,
        ignore_case: bool = False,
    ) -> None:
        self.name = name
        self.param_type = param_type
        self.default = default
        self._has_default = has_default
        self.nullable = nullable
        self.description = description
        self.min_value = min_value
        self.max_value = max_value
        self.choices = choices
        self.ignore_case = ignore_case

    @property
    def required(self) -> bool:
        """Whether this parameter is required (has no default)."""
        return not self._has_default

    def validate(self, value: Any) -> None:
        """Check *value* against the type, range and choices.

        ``None`` passes for nullable parameters and ``int`` passes for
        ``float`` parameters.

        Raises
        ------
        TypeError
            If *value* has the wrong type.
        ValidationError
            If *value* violates range or choices constraints.
        """
        if value is None and self.nullable:
            return

        if self.param_type is float:
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise TypeError(
                    f"Parameter '{self.name}' must be "
                    f"{self.param_type.__name__}, got {type(value).__name__}"
                )
        elif self.param_type is not object:
            if not isinstance(value, self.param_type):
                raise TypeError(
                    f"Parameter '{self.name}' must be "
                    f"{self.param_type.__name__}, got {type(value).__name__}"
                )

        if self.min_value is not None and value < self.min_value:
            raise ValidationError(
                f"Parameter '{self.name}' value {value!r} "
                f"is below minimum {self.min_value!r}"
            )
        if self.max_value is not None and value > self.max_value:
            raise ValidationError(
                f"Parameter '{self.name}' value {value!r} "
                f"is above maximum {self.max_value!r}"
            )

        if self.choices is not None and not self._is_choice(value):
            raise ValidationError(
                f"Parameter '{self.name}' value {value!r} "
                f"is not in allowed choices {self.choices!r}"
            )

    def _is_choice(self, value: Any) -> bool:
        if self.ignore_case and isinstance(value, str):
            return value.lower() in {
                c.lower() for c in self.choices if isinstance(c, str)
            }
        return value in self.choices

    def __repr__(self) -> str:
        extras = [
            f"{key}={value!r}" for key, value in (
                ('default', self.default), ('min_value', self.min_value),
                ('max_value', self.max_value), ('choices', self.choices),
            ) if value is not None
        ]
        if self.nullable:
            extras.append('nullable=True')
        return f"ParamSpec({self.name!r}, {self.param_type.__name__}, {', '.join(extras)})"


def _unwrap_optional(base_type: Any) -> Tuple[Any, bool]:
    """Split ``Optional[T]`` into ``(T, True)``; other types pass through."""
    if get_origin(base_type) is Union:
        args = [a for a in get_args(base_type) if a is not type(None)]
        if len(args) == 1 and len(args) < len(get_args(base_type)):
            return args[0], True
    return base_type, False


def collect_param_specs(cls: type) -> Tuple[ParamSpec, ...]:
    """Parse ``Annotated`` type hints on *cls* into a tuple of ``ParamSpec``.

    Only fields whose ``Annotated`` metadata includes at least one
    ``ParamMeta`` subclass instance are collected.  Fields are ordered by
    MRO (parent-first, preserving declaration order within each class).

    Raises
    ------
    TypeError
        If a field has both ``Range`` and ``Options`` constraints
        (mutually exclusive).
    """
    try:
        hints = get_type_hints(cls, include_extras=True)
    except NameError:
        # Unresolvable forward references: the class declares no usable params
        return ()

    seen: set = set()
    ordered_names: list = []
    for klass in reversed(cls.__mro__):
        for name in getattr(klass, '__annotations__', {}):
            if name not in seen and name in hints:
                seen.add(name)
                ordered_names.append(name)

    specs: list = []
    for name in ordered_names:
        hint = hints[name]
        if get_origin(hint) is not Annotated:
            continue

        base_type, nullable = _unwrap_optional(hint.__args__[0])
        metadata = hint.__metadata__

        param_metas = [m for m in metadata if isinstance(m, ParamMeta)]
        if not param_metas:
            continue

        range_meta: Optional[Range] = None
        options_meta: Optional[Options] = None
        desc_meta: Optional[Desc] = None
        for m in param_metas:
            if isinstance(m, Range):
                range_meta = m
            elif isinstance(m, Options):
                options_meta = m
            elif isinstance(m, Desc):
                desc_meta = m

        if range_meta and options_meta:
            raise TypeError(
                f"Parameter '{name}' on {cls.__qualname__}: "
                f"Range and Options are mutually exclusive."
            )

        default = getattr(cls, name, _SENTINEL)
        has_default = default is not _SENTINEL

        specs.append(ParamSpec(
            name=name,
            param_type=base_type if isinstance(base_type, type) else object,
            default=default if has_default else None,
            has_default=has_default,
            description=desc_meta.text if desc_meta else '',
            min_value=range_meta.min if range_meta else None,
            max_value=range_meta.max if range_meta else None,
            choices=options_meta.choices if options_meta else None,
            nullable=nullable,
            ignore_case=options_meta.ignore_case if options_meta else False,
        ))

    return tuple(specs)


def _make_init(param_specs: Tuple[ParamSpec, ...]):
    """Keyword-only ``__init__`` that validates and stores each parameter,
    then calls ``__post_init__`` when the class defines one.
    """
    _specs = param_specs

    def __init__(self, **kwargs):
        expected = {s.name for s in _specs}
        unexpected = set(kwargs) - expected
        if unexpected:
            raise TypeError(
                f"{type(self).__name__}() got unexpected "
                f"keyword arguments: {', '.join(sorted(unexpected))}"
            )

        for spec in _specs:
            if spec.name in kwargs:
                value = kwargs[spec.name]
            elif spec._has_default:
                value = spec.default
            else:
                raise TypeError(
                    f"{type(self).__name__}() missing required "
                    f"keyword argument: '{spec.name}'"
                )
            spec.validate(value)
            object.__setattr__(self, spec.name, value)

        if hasattr(self, '__post_init__'):
            self.__post_init__()

    params = [inspect.Parameter('self', inspect.Parameter.POSITIONAL_OR_KEYWORD)]
    for spec in _specs:
        default = spec.default if spec._has_default else inspect.Parameter.empty
        params.append(inspect.Parameter(
            spec.name, inspect.Parameter.KEYWORD_ONLY, default=default
        ))
    __init__.__signature__ = inspect.Signature(params)
    __init__.__qualname__ = '__init__'

    return __init__
