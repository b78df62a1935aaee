# -*- coding: utf-8 -*-
"""
Processing Module - Processor base classes and tunable parameters.

Sub-modules
-----------
base.py
    ``ImageProcessor`` (version checking, tunable parameters) and the
    ``ImageTransform`` ABC for dense array transforms.
params.py
    ``Range``, ``Options``, ``Desc`` constraint markers for tunable
    parameters via ``Annotated`` type hints.
versioning.py
    ``@processor_version`` decorator.

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
2026-10-06
"""

from georeproj.processing.base import ImageProcessor, ImageTransform
from georeproj.processing.versioning import processor_version
from georeproj.processing.params import (
    Range,
    Options,
    Desc,
    ParamSpec,
)
