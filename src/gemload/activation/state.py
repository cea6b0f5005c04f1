"""Activation registry and unresolved constraint tracker.

Both maps are owned by one session and mutated only by its Resolver while
holding the session lock. A name is in at most one of them.
"""
from __future__ import annotations

from typing import Dict, Iterator, List, Optional

from ..versioning.models import Dependency, Requirement
from .specification import Specification


class ActivationRegistry:
    """Package name -> the single active Specification. Entries are never removed."""

    def __init__(self) -> None:
        self._active: Dict[str, Specification] = {}

    def get(self, name: str) -> Optional[Specification]:
        return self._active.get(name)

    def bind(self, spec: Specification) -> None:
        """Record ``spec`` as active.

        Raises:
            ValueError: If another version of the name is already bound.
        """
        current = self._active.get(spec.name)
        if current is not None and current.version != spec.version:
            raise ValueError(f"{spec.name} already bound to {current.full_name}")
        self._active[spec.name] = spec

    def specifications(self) -> List[Specification]:
        return sorted(self._active.values(), key=lambda s: s.name)

    def full_names(self) -> List[str]:
        return sorted(s.full_name for s in self._active.values())

    def __contains__(self, name: object) -> bool:
        return name in self._active

    def __iter__(self) -> Iterator[str]:
        return iter(self._active)

    def __len__(self) -> int:
        return len(self._active)


class UnresolvedTracker:
    """Package name -> pending requirement not yet bound to a version."""

    def __init__(self) -> None:
        self._pending: Dict[str, Requirement] = {}

    def get(self, name: str) -> Optional[Requirement]:
        return self._pending.get(name)

    def merged_with(self, name: str, requirement: Requirement) -> Requirement:
        """Return ``requirement`` intersected with the pending entry for ``name``, if any."""
        existing = self._pending.get(name)
        return requirement if existing is None else existing.intersect(requirement)

    def record(self, name: str, requirement: Requirement) -> None:
        """Set the pending requirement for ``name``; callers merge first."""
        self._pending[name] = requirement

    def discard(self, name: str) -> Optional[Requirement]:
        return self._pending.pop(name, None)

    def requirements(self) -> Dict[str, Requirement]:
        return dict(self._pending)

    def dependencies(self) -> List[Dependency]:
        return [Dependency(n, r) for n, r in sorted(self._pending.items())]

    def __contains__(self, name: object) -> bool:
        return name in self._pending

    def __iter__(self) -> Iterator[str]:
        return iter(self._pending)

    def __len__(self) -> int:
        return len(self._pending)
