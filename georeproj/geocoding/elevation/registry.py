# -*- coding: utf-8 -*-
"""
Elevation Model Registry - Named, installable elevation datasets.

Elevation datasets are referred to by name (for example
``ReprojectionOp(elevation_model_name='SRTM_3Sec')``). An
``ElevationModelRegistry`` maps names to ``ElevationModelDescriptor``
objects that know whether their data is installed and how to create the
model.

The default registry is populated from the ``GEOREPROJ_DEM_DIR``
environment variable: every ``<name>.tif`` file in that directory is
registered as a GeoTIFF DEM called ``<name>``. Further datasets are added
with ``register()``.

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
2026-10-09

Modified
--------
2026-10-14
"""

# Standard library
import logging
import os
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

# georeproj internal
from georeproj.exceptions import ResolutionError
from georeproj.geocoding.elevation.base import ElevationModel

logger = logging.getLogger(__name__)

DEM_DIR_ENV = 'GEOREPROJ_DEM_DIR'


class ElevationModelDescriptor:
    """Describes a named elevation dataset.

    Parameters
    ----------
    name : str
        Dataset name.
    factory : Callable[[], ElevationModel]
        Creates a new model instance.
    installed : Callable[[], bool], optional
        Reports whether the dataset is available locally. Defaults to
        always available.
    """

    def __init__(
        self,
        name: str,
        factory: Callable[[], ElevationModel],
        installed: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.name = name
        self._factory = factory
        self._installed = installed

    def is_installed(self) -> bool:
        if self._installed is None:
            return True
        return bool(self._installed())

    def create(self) -> ElevationModel:
        return self._factory()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


class GeoTIFFDEMDescriptor(ElevationModelDescriptor):
    """Descriptor of a GeoTIFF DEM file. Installed when the file exists."""

    def __init__(self, name: str, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(name, self._open, self.path.is_file)

    def _open(self) -> ElevationModel:
        from georeproj.geocoding.elevation.geotiff_dem import GeoTIFFDEM
        return GeoTIFFDEM(self.path, name=self.name)


class ElevationModelRegistry:
    """Name -> descriptor lookup for elevation datasets.

    Names are matched case-insensitively.
    """

    def __init__(self) -> None:
        self._descriptors: Dict[str, ElevationModelDescriptor] = {}
        self._lock = threading.Lock()

    def register(self, descriptor: ElevationModelDescriptor) -> None:
        with self._lock:
            self._descriptors[descriptor.name.lower()] = descriptor
        logger.debug("Registered elevation model %s", descriptor.name)

    def unregister(self, name: str) -> None:
        with self._lock:
            self._descriptors.pop(name.lower(), None)

    def get_descriptor(self, name: str) -> Optional[ElevationModelDescriptor]:
        with self._lock:
            return self._descriptors.get(name.lower())

    @property
    def names(self) -> List[str]:
        with self._lock:
            return sorted(d.name for d in self._descriptors.values())

    def create(self, name: str) -> ElevationModel:
        """Create the elevation model called *name*.

        Raises
        ------
        ResolutionError
            If no dataset of that name is registered or its data is not
            installed.
        """
        descriptor = self.get_descriptor(name)
        if descriptor is None:
            raise ResolutionError(f"Unknown elevation model '{name}'")
        if not descriptor.is_installed():
            raise ResolutionError(f"Elevation model '{name}' is not installed")
        logger.info("Creating elevation model %s", descriptor.name)
        return descriptor.create()

    def scan_directory(self, directory: Union[str, Path]) -> int:
        """Register every ``*.tif`` file in *directory* by file stem.

        Returns
        -------
        int
            Number of registered files.
        """
        directory = Path(directory)
        if not directory.is_dir():
            logger.warning("Elevation model directory %s does not exist", directory)
            return 0
        count = 0
        for path in sorted(directory.glob('*.tif')):
            self.register(GeoTIFFDEMDescriptor(path.stem, path))
            count += 1
        return count


_default_registry: Optional[ElevationModelRegistry] = None
_default_lock = threading.Lock()


def get_default_registry() -> ElevationModelRegistry:
    """Process-wide registry, populated from ``GEOREPROJ_DEM_DIR`` on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            registry = ElevationModelRegistry()
            dem_dir = os.environ.get(DEM_DIR_ENV)
            if dem_dir:
                registry.scan_directory(dem_dir)
            _default_registry = registry
        return _default_registry


def register(descriptor: ElevationModelDescriptor) -> None:
    """Add *descriptor* to the default registry."""
    get_default_registry().register(descriptor)
