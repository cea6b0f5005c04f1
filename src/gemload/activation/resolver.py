"""Activation and demand-driven resolution of installed specifications.

``activate`` binds a specification and cascades into its dependencies:
a dependency with exactly one installed candidate is activated at once,
anything else is recorded as pending. ``reconcile`` runs before every load
request and binds a pending package when the requested path belongs to it.

All state changes happen while holding the session lock. The lock is
re-entrant because activation recurses.
"""
from __future__ import annotations

import logging
import threading
from typing import List, Optional

from ..common.logging_utils import Timer, extra_context, is_debug_enabled
from ..constants import Constants
from ..versioning.models import Dependency, Requirement
from .catalog import SpecificationCatalog
from .errors import AmbiguousProviderError, ConflictError, MissingSpecError, UnsatisfiableError
from .specification import Specification
from .state import ActivationRegistry, UnresolvedTracker

logger = logging.getLogger(__name__)


class Resolver:
    """Owns activation decisions for one session."""

    def __init__(
        self,
        catalog: SpecificationCatalog,
        registry: Optional[ActivationRegistry] = None,
        tracker: Optional[UnresolvedTracker] = None,
        lock: Optional[threading.RLock] = None,
    ):
        self.catalog = catalog
        self.registry = registry if registry is not None else ActivationRegistry()
        self.tracker = tracker if tracker is not None else UnresolvedTracker()
        self.lock = lock if lock is not None else threading.RLock()

    # ------------------------------------------------------------------ #
    # Activation
    # ------------------------------------------------------------------ #

    def activate(self, spec: Specification) -> bool:
        """Make ``spec`` the active version of its name.

        Returns:
            True if the spec was newly activated, False if it already was.

        Raises:
            ConflictError: If another version of the name is active, or an
                active package does not satisfy one of the spec's dependencies.
        """
        with self.lock:
            active = self.registry.get(spec.name)
            if active is not None:
                if active.version == spec.version:
                    return False
                message = Constants.MSG_ALREADY_ACTIVATED.format(
                    full_name=spec.full_name, active=active.full_name
                )
                logger.warning("%s", message, extra=extra_context(
                    event="activation_conflict", component="resolver", package=spec.name
                ))
                raise ConflictError(message, name=spec.name, active=active)

            self._check_pending(spec)
            for dep in spec.dependencies:
                self._check_active(spec, dep)

            self.registry.bind(spec)
            self.tracker.discard(spec.name)
            logger.info("Activated %s", spec.full_name, extra=extra_context(
                event="activated", component="resolver", action="activate", package=spec.name
            ))

            for dep in sorted(spec.dependencies, key=lambda d: d.name):
                self._activate_dependency_of(spec, dep)
            return True

    def _check_pending(self, spec: Specification) -> None:
        """Raise ConflictError if ``spec`` violates the pending requirement on its name."""
        requirement = self.tracker.get(spec.name)
        if requirement is None or spec.satisfies(requirement):
            return
        message = Constants.MSG_PENDING_CONFLICT.format(
            full_name=spec.full_name, dependency=Dependency(spec.name, requirement)
        )
        logger.warning("%s", message, extra=extra_context(
            event="pending_conflict", component="resolver", package=spec.name
        ))
        raise ConflictError(message, name=spec.name, requirement=requirement)

    def _check_active(self, spec: Specification, dep: Dependency) -> None:
        """Raise ConflictError if ``dep.name`` is active at a version ``dep`` rejects."""
        active = self.registry.get(dep.name)
        if active is None or active.satisfies(dep.requirement):
            return
        message = Constants.MSG_DEPENDENCY_CONFLICT.format(
            full_name=spec.full_name, active=active.full_name, dependency=dep
        )
        logger.warning("%s", message, extra=extra_context(
            event="dependency_conflict", component="resolver", package=dep.name
        ))
        raise ConflictError(message, name=dep.name, requirement=dep.requirement, active=active)

    def _activate_dependency_of(self, spec: Specification, dep: Dependency) -> None:
        """Bind ``dep`` now when a single installed version qualifies, else defer it."""
        if dep.name in self.registry:
            # An earlier sibling's cascade may have bound it after the pre-check
            self._check_active(spec, dep)
            return

        effective = self.tracker.merged_with(dep.name, dep.requirement)
        candidates = self.catalog.find_by_name(dep.name, effective)
        if len(candidates) == 1:
            if is_debug_enabled(logger):
                logger.debug(
                    "Single candidate %s for %s, activating eagerly",
                    candidates[0].full_name, Dependency(dep.name, effective),
                    extra=extra_context(event="eager", component="resolver", package=dep.name),
                )
            self.activate(candidates[0])
            return

        self.tracker.record(dep.name, effective)
        if is_debug_enabled(logger):
            logger.debug(
                "Deferred %s required by %s (%d candidates)",
                Dependency(dep.name, effective), spec.full_name, len(candidates),
                extra=extra_context(event="deferred", component="resolver", package=dep.name),
            )

    def activate_dependency(self, name: str, requirement: Requirement) -> bool:
        """Activate the best installed version of ``name`` satisfying ``requirement``.

        Returns:
            True if a spec was activated, False if an active one already satisfies.

        Raises:
            ConflictError: If the active version does not satisfy ``requirement``.
            MissingSpecError: If no installed version satisfies ``requirement``.
            UnsatisfiableError: If satisfying versions exist but none is
                compatible with the active packages.
        """
        with self.lock:
            dependency = Dependency(name, requirement)
            active = self.registry.get(name)
            if active is not None:
                if active.satisfies(requirement):
                    return False
                message = Constants.MSG_ALREADY_ACTIVATED.format(
                    full_name=dependency, active=active.full_name
                )
                logger.warning("%s", message, extra=extra_context(
                    event="activation_conflict", component="resolver", package=name
                ))
                raise ConflictError(message, name=name, requirement=requirement, active=active)

            effective = self.tracker.merged_with(name, requirement)
            matching = self.catalog.find_by_name(name, effective)
            if not matching:
                error = MissingSpecError(name, effective, len(self.catalog))
                logger.warning("%s", error, extra=extra_context(
                    event="missing_spec", component="resolver", package=name
                ))
                raise error
            return self.activate(self._select(name, matching, effective))

    # ------------------------------------------------------------------ #
    # Demand-driven resolution
    # ------------------------------------------------------------------ #

    def reconcile(self, path: str) -> Optional[Specification]:
        """Bind the pending package providing ``path``, if there is one.

        Returns:
            The activated specification, or None when no action was needed.

        Raises:
            AmbiguousProviderError: If more than one package name that is not
                active provides ``path``. Raised before any state change.
            UnsatisfiableError: If the pending package has no installed
                version providing ``path`` that fits its requirement and the
                active packages.
        """
        with self.lock, Timer() as timer:
            if not self.tracker:
                return None

            providers = self.catalog.find_by_path(path)
            if any(self.registry.get(s.name) == s for s in providers):
                return None

            pending = sorted({s.name for s in providers if s.name in self.tracker})
            if not pending:
                return None

            contenders = [n for n in self.catalog.names_providing(path) if n not in self.registry]
            if len(contenders) > 1:
                error = AmbiguousProviderError(path, contenders)
                logger.warning("%s", error, extra=extra_context(
                    event="ambiguous_provider", component="resolver", target=path
                ))
                raise error

            name = pending[0]
            requirement = self.tracker.get(name)
            matching = [s for s in self.catalog.find_by_name(name, requirement) if s.provides(path)]
            chosen = self._select(name, matching, requirement)
            self.activate(chosen)

            if is_debug_enabled(logger):
                logger.debug(
                    "Resolved %s to %s",
                    path, chosen.full_name,
                    extra=extra_context(
                        event="reconciled", component="resolver", target=path,
                        package=name, duration_ms=timer.duration_ms(),
                    ),
                )
            return chosen

    def try_activate(self, path: str) -> bool:
        """Activate the latest installed package providing ``path`` that is not yet active.

        Used when a load request could not find ``path`` on the current load path.

        Returns:
            True if a spec was activated, False if no inactive package provides ``path``.

        Raises:
            AmbiguousProviderError: If several inactive names provide ``path``.
            UnsatisfiableError: If no provider version is compatible.
        """
        with self.lock:
            providers = [s for s in self.catalog.find_by_path(path) if s.name not in self.registry]
            if not providers:
                return False

            names = sorted({s.name for s in providers})
            if len(names) > 1:
                error = AmbiguousProviderError(path, names)
                logger.warning("%s", error, extra=extra_context(
                    event="ambiguous_provider", component="resolver", target=path
                ))
                raise error

            name = names[0]
            requirement = self.tracker.get(name)
            matching = self.catalog.find_by_name(name, requirement)
            self.activate(self._select(name, [s for s in matching if s.provides(path)], requirement))
            return True

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def compatible(self, spec: Specification) -> bool:
        """True when every dependency of ``spec`` on an active name is satisfied."""
        for dep in spec.dependencies:
            active = self.registry.get(dep.name)
            if active is not None and not active.satisfies(dep.requirement):
                return False
        return True

    def _select(
        self, name: str, candidates: List[Specification], requirement: Optional[Requirement]
    ) -> Specification:
        """Pick the highest compatible version among ``candidates``."""
        viable = [s for s in candidates if self.compatible(s)]
        if not viable:
            error = UnsatisfiableError(name, requirement)
            logger.warning("%s", error, extra=extra_context(
                event="unsatisfiable", component="resolver", package=name
            ))
            raise error
        return max(viable, key=lambda s: s.version)
