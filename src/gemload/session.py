"""Activation session: the owned state hosts and tests interact with.

A session bundles the catalog, the activation registry, the unresolved
tracker, their lock, a resolver and a load interceptor. Separate sessions
share nothing, so tests build a fresh one per case.
"""
from __future__ import annotations

import threading
from typing import Callable, Dict, Iterable, List, Optional, Union

from .activation.catalog import SpecificationCatalog
from .activation.interceptor import LoadInterceptor
from .activation.loader import FileLoader, ModuleLoader
from .activation.resolver import Resolver
from .activation.specification import Specification
from .activation.state import ActivationRegistry, UnresolvedTracker
from .common.logging_utils import configure_logging
from .config import Settings, load_settings
from .versioning.models import Requirement
from .versioning.parser import RequirementLike, parse_requirement


class ActivationSession:
    """Process-level activation state behind an explicit object."""

    def __init__(
        self,
        specs: Union[SpecificationCatalog, Iterable[Specification]] = (),
        loader: Optional[ModuleLoader] = None,
        settings: Optional[Settings] = None,
        executor: Optional[Callable[[str], None]] = None,
    ):
        self.settings = settings or Settings()
        self.catalog = specs if isinstance(specs, SpecificationCatalog) else SpecificationCatalog(specs)
        self.lock = threading.RLock()
        self.registry = ActivationRegistry()
        self.tracker = UnresolvedTracker()
        self.resolver = Resolver(self.catalog, self.registry, self.tracker, self.lock)
        self.loader = loader if loader is not None else FileLoader(
            load_path=self.settings.load_path,
            suffixes=self.settings.loadable_suffixes,
            executor=executor,
            extra_paths=self.load_paths,
        )
        self.interceptor = LoadInterceptor(self.resolver, self.loader, try_activate=self.settings.try_activate)

    @classmethod
    def from_config(
        cls,
        specs: Union[SpecificationCatalog, Iterable[Specification]] = (),
        config_path: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
        **kwargs,
    ) -> "ActivationSession":
        """Build a session from YAML and environment settings, configuring logging to match."""
        settings = load_settings(config_path, environ)
        configure_logging(settings.log_level)
        return cls(specs, settings=settings, **kwargs)

    def activate(self, spec: Specification) -> bool:
        """Activate ``spec`` directly, cascading into its dependencies."""
        return self.resolver.activate(spec)

    def gem(self, name: str, *requirements: RequirementLike) -> bool:
        """Activate the best installed ``name`` meeting all ``requirements``."""
        return self.resolver.activate_dependency(name, parse_requirement(*requirements))

    def reconcile(self, path: str) -> Optional[Specification]:
        return self.resolver.reconcile(path)

    def load(self, path: str) -> bool:
        """Handle a load request for the symbolic ``path``."""
        return self.interceptor.load(path)

    def active_specifications(self) -> List[Specification]:
        with self.lock:
            return self.registry.specifications()

    def pending_requirements(self) -> Dict[str, Requirement]:
        with self.lock:
            return self.tracker.requirements()

    def loaded_spec_names(self) -> List[str]:
        """Sorted full names of active specs, e.g. ``["a-1", "b-2"]``."""
        with self.lock:
            return self.registry.full_names()

    def unresolved_names(self) -> List[str]:
        """Sorted pending dependencies, e.g. ``["b (>= 1)"]``."""
        with self.lock:
            return sorted(str(dep) for dep in self.tracker.dependencies())

    def load_paths(self) -> List[str]:
        """Require directories of the active specs, in name order."""
        with self.lock:
            return [p for spec in self.registry.specifications() for p in spec.full_require_paths]
