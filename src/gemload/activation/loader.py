"""Module loader interface and a file-system backed implementation.

The loader maps a symbolic path to a file and executes it at most once per
absolute location. It keeps its own record of loaded features for the
lifetime of the process; package activation never consults or changes it
except through ``load``.
"""
from __future__ import annotations

import logging
import os
import runpy
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple

from ..common.logging_utils import Timer, extra_context, is_debug_enabled
from ..constants import Constants
from .errors import FeatureNotFoundError

logger = logging.getLogger(__name__)

Snapshot = Tuple[FrozenSet[str], FrozenSet[str]]


class FeatureSet:
    """Loaded features, tracked both by symbolic name and by absolute location."""

    def __init__(self) -> None:
        self._features: Set[str] = set()
        self._locations: Set[str] = set()

    def add(self, feature: str, location: Optional[str] = None) -> None:
        self._features.add(feature)
        if location:
            self._locations.add(os.path.abspath(location))

    def has_feature(self, feature: str) -> bool:
        return feature in self._features

    def has_location(self, location: str) -> bool:
        return os.path.abspath(location) in self._locations

    def snapshot(self) -> Snapshot:
        return frozenset(self._features), frozenset(self._locations)

    def restore(self, snapshot: Snapshot) -> None:
        features, locations = snapshot
        self._features = set(features)
        self._locations = set(locations)

    @contextmanager
    def saved(self) -> Iterator["FeatureSet"]:
        """Restore the loaded set on exit, whatever was loaded inside the block."""
        snapshot = self.snapshot()
        try:
            yield self
        finally:
            self.restore(snapshot)

    def __contains__(self, feature: object) -> bool:
        return feature in self._features

    def __len__(self) -> int:
        return len(self._features)


class ModuleLoader(ABC):
    """Interface of the loader a LoadInterceptor delegates to."""

    def __init__(self, features: Optional[FeatureSet] = None):
        self.features = features if features is not None else FeatureSet()

    @abstractmethod
    def load(self, path: str) -> bool:
        """Load ``path``.

        Returns:
            True if this call loaded something, False if it was already loaded.

        Raises:
            FeatureNotFoundError: If ``path`` cannot be mapped to a file.
        """

    def is_loaded(self, path: str) -> bool:
        return self.features.has_feature(path)

    def snapshot(self) -> Snapshot:
        return self.features.snapshot()

    def restore(self, snapshot: Snapshot) -> None:
        self.features.restore(snapshot)


def execute_file(location: str) -> None:
    """Default executor: run Python sources, leave anything else to the host."""
    if location.endswith(".py"):
        runpy.run_path(location)


class FileLoader(ModuleLoader):
    """Resolves symbolic paths against a load path and executes each file once.

    Directories from ``extra_paths`` (typically the require paths of the
    active packages) are searched before the static ``load_path``.
    Loads are serialised, so concurrent requests for one file run it once.
    """

    def __init__(
        self,
        load_path: Iterable[str] = (),
        suffixes: Optional[Iterable[str]] = None,
        executor: Optional[Callable[[str], None]] = None,
        extra_paths: Optional[Callable[[], Iterable[str]]] = None,
        features: Optional[FeatureSet] = None,
    ):
        super().__init__(features)
        self.load_path: List[str] = list(load_path)
        self.suffixes: List[str] = list(suffixes) if suffixes is not None else list(Constants.LOADABLE_SUFFIXES)
        self.executor = executor or execute_file
        self.extra_paths = extra_paths
        self._lock = threading.RLock()

    def search_path(self) -> List[str]:
        dirs = list(self.extra_paths()) if self.extra_paths else []
        return dirs + [d for d in self.load_path if d not in dirs]

    def resolve(self, path: str) -> Optional[str]:
        """Return the absolute file backing ``path``, or None."""
        if os.path.isabs(path):
            roots, rel = [""], path
        else:
            roots, rel = self.search_path(), path
        for root in roots:
            base = os.path.join(root, rel) if root else rel
            if os.path.splitext(base)[1] in self.suffixes and os.path.isfile(base):
                return os.path.abspath(base)
            for suffix in self.suffixes:
                candidate = base + suffix
                if os.path.isfile(candidate):
                    return os.path.abspath(candidate)
        return None

    def load(self, path: str) -> bool:
        # Re-entrant: an executed file may load further paths
        with self._lock:
            return self._load(path)

    def _load(self, path: str) -> bool:
        if self.features.has_feature(path):
            return False

        location = self.resolve(path)
        if location is None:
            raise FeatureNotFoundError(path)
        if self.features.has_location(location):
            self.features.add(path, location)
            return False

        with Timer() as timer:
            self.executor(location)
        self.features.add(path, location)
        if is_debug_enabled(logger):
            logger.debug("Loaded %s from %s", path, location, extra=extra_context(
                event="loaded", component="loader", target=location, duration_ms=timer.duration_ms()
            ))
        return True
