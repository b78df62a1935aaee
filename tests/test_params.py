# -*- coding: utf-8 -*-
"""
Annotated Tunable Parameter Tests.

Tests for the typing.Annotated-based tunable parameter system: constraint
markers (Range, Options, Desc), ParamSpec validation including nullable
and case-insensitive parameters, auto-generated __init__, __post_init__,
_resolve_params, and processor version stamping.

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
2026-10-08

Modified
--------
2026-10-20
"""

import inspect
import warnings
from typing import Annotated, Optional

import numpy as np
import pytest

from georeproj.exceptions import ValidationError
from georeproj.processing import (
    Desc,
    ImageProcessor,
    ImageTransform,
    Options,
    ParamSpec,
    Range,
    processor_version,
)
from georeproj.processing.params import ParamMeta, collect_param_specs


# ---------------------------------------------------------------------------
# Constraint markers
# ---------------------------------------------------------------------------

class TestMarkers:
    """Test Range, Options and Desc markers."""

    def test_range(self):
        r = Range(min=0.0, max=360.0)
        assert r.min == 0.0
        assert r.max == 360.0
        assert isinstance(r, ParamMeta)
        assert 'max=360.0' in repr(r)

    def test_options(self):
        o = Options('Nearest', 'Bilinear', ignore_case=True)
        assert o.choices == ('Nearest', 'Bilinear')
        assert o.ignore_case is True

    def test_options_empty_raises(self):
        with pytest.raises(ValueError, match="at least one"):
            Options()

    def test_desc(self):
        assert Desc('Pixel size').text == 'Pixel size'


# ---------------------------------------------------------------------------
# ParamSpec validation
# ---------------------------------------------------------------------------

class TestParamSpec:
    """Test ParamSpec.validate."""

    def test_int_accepted_as_float(self):
        spec = ParamSpec('x', float, 0.0, True, '', None, None, None)
        spec.validate(3)

    def test_bool_rejected_as_float(self):
        spec = ParamSpec('x', float, 0.0, True, '', None, None, None)
        with pytest.raises(TypeError, match="'x'"):
            spec.validate(True)

    def test_range_violation_is_validation_error(self):
        spec = ParamSpec('orientation', float, 0.0, True, '', 0.0, 360.0, None)
        with pytest.raises(ValidationError, match="above maximum"):
            spec.validate(361.0)
        with pytest.raises(ValueError, match="below minimum"):
            spec.validate(-1.0)

    def test_range_bounds_inclusive(self):
        spec = ParamSpec('orientation', float, 0.0, True, '', 0.0, 360.0, None)
        spec.validate(0.0)
        spec.validate(360.0)

    def test_nullable_accepts_none(self):
        spec = ParamSpec('easting', float, None, True, '', None, None, None,
                         nullable=True)
        spec.validate(None)

    def test_not_nullable_rejects_none(self):
        spec = ParamSpec('easting', float, 0.0, True, '', None, None, None)
        with pytest.raises(TypeError):
            spec.validate(None)

    def test_choices_ignore_case(self):
        spec = ParamSpec('resampling', str, 'Nearest', True, '', None, None,
                         ('Nearest', 'Bicubic'), ignore_case=True)
        spec.validate('bicubic')
        with pytest.raises(ValidationError, match="not in allowed choices"):
            spec.validate('Lanczos')

    def test_choices_case_sensitive_by_default(self):
        spec = ParamSpec('mode', str, 'a', True, '', None, None, ('a', 'b'))
        with pytest.raises(ValidationError):
            spec.validate('A')

    def test_repr(self):
        spec = ParamSpec('x', float, None, True, '', None, None, None,
                         nullable=True)
        assert 'nullable=True' in repr(spec)


# ---------------------------------------------------------------------------
# Annotation collection
# ---------------------------------------------------------------------------

class TestCollectParamSpecs:
    """Test collect_param_specs."""

    def test_optional_unwrapped(self):
        class P:
            width: Annotated[Optional[int], Desc('width')] = None

        spec, = collect_param_specs(P)
        assert spec.param_type is int
        assert spec.nullable is True
        assert spec.default is None
        assert spec.required is False

    def test_plain_annotations_ignored(self):
        class P:
            x: float = 1.0

        assert collect_param_specs(P) == ()

    def test_required_field(self):
        class P:
            source: Annotated[object, Desc('source')]

        spec, = collect_param_specs(P)
        assert spec.required is True
        assert spec.param_type is object

    def test_range_and_options_mutually_exclusive(self):
        class P:
            x: Annotated[float, Range(min=0), Options(1.0, 2.0)] = 1.0

        with pytest.raises(TypeError, match="mutually exclusive"):
            collect_param_specs(P)


# ---------------------------------------------------------------------------
# Generated __init__ and __post_init__
# ---------------------------------------------------------------------------

@processor_version('1.0.0')
class _ScaleTransform(ImageTransform):
    """Test transform with Annotated tunable parameters."""

    factor: Annotated[float, Range(min=0.0), Desc('Scale factor')] = 1.0
    offset: Annotated[Optional[float], Desc('Offset')] = None
    mode: Annotated[str, Options('Multiply', 'Divide', ignore_case=True),
                    Desc('Operation')] = 'Multiply'

    def __post_init__(self):
        self.calls = 0

    def apply(self, source, **kwargs):
        params = self._resolve_params(kwargs)
        self.calls += 1
        if params['mode'].lower() == 'multiply':
            out = source * params['factor']
        else:
            out = source / params['factor']
        if params['offset'] is not None:
            out = out + params['offset']
        return out


class TestGeneratedInit:
    """Test the auto-generated keyword-only __init__."""

    def test_defaults(self):
        t = _ScaleTransform()
        assert t.factor == 1.0
        assert t.offset is None
        assert t.mode == 'Multiply'

    def test_post_init_called(self):
        assert _ScaleTransform().calls == 0

    def test_required_missing_raises(self):
        @processor_version('1.0.0')
        class P(ImageTransform):
            value: Annotated[float, Desc('required')]

            def apply(self, source, **kwargs):
                return source

        with pytest.raises(TypeError, match="missing required"):
            P()

    def test_unexpected_kwargs_raises(self):
        with pytest.raises(TypeError, match="unexpected"):
            _ScaleTransform(sigma=2.0)

    def test_validation_in_init(self):
        with pytest.raises(ValidationError, match="below minimum"):
            _ScaleTransform(factor=-1.0)

    def test_signature_introspectable(self):
        params = inspect.signature(_ScaleTransform).parameters
        assert list(params) == ['factor', 'offset', 'mode']
        assert params['factor'].kind is inspect.Parameter.KEYWORD_ONLY


class TestResolveParams:
    """Test _resolve_params and apply integration."""

    def test_runtime_override(self):
        t = _ScaleTransform(factor=2.0)
        out = t.apply(np.ones((2, 2)), factor=3.0, offset=1.0)
        np.testing.assert_array_equal(out, np.full((2, 2), 4.0))
        assert t.calls == 1

    def test_case_insensitive_choice(self):
        t = _ScaleTransform(factor=2.0, mode='divide')
        np.testing.assert_array_equal(t.apply(np.full((1, 2), 4.0)), [[2.0, 2.0]])

    def test_mutated_attribute_revalidated(self):
        t = _ScaleTransform()
        t.factor = -5.0
        with pytest.raises(ValidationError):
            t._resolve_params({})

    def test_undeclared_keys_ignored(self):
        resolved = _ScaleTransform()._resolve_params({'tile': (0, 0)})
        assert 'tile' not in resolved


# ---------------------------------------------------------------------------
# Versioning
# ---------------------------------------------------------------------------

class TestProcessorVersion:
    """Test @processor_version and the missing-version warning."""

    def test_version_stamped(self):
        assert _ScaleTransform.__processor_version__ == '1.0.0'

    def test_missing_version_warns_once(self):
        class Unversioned(ImageProcessor):
            pass

        with pytest.warns(UserWarning, match="does not declare a processor version"):
            Unversioned()
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            Unversioned()

    def test_version_inferred(self):
        @processor_version()
        class P(ImageTransform):
            def apply(self, source, **kwargs):
                return source

        assert isinstance(P.__processor_version__, str)
        assert P.__processor_version__
