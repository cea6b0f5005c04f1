"""Read-only catalog of installed specifications.

Indexes are built once at construction: by name (highest version first)
and by provided symbolic path.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from ..common.logging_utils import extra_context
from ..versioning.models import Requirement
from .specification import Specification

logger = logging.getLogger(__name__)


class SpecificationCatalog:
    """The set of installed specifications, queryable by name and by path."""

    def __init__(self, specs: Iterable[Specification] = ()):
        self._specs: List[Specification] = []
        self._by_name: Dict[str, List[Specification]] = {}
        self._by_path: Dict[str, List[Specification]] = {}

        seen = set()
        for spec in specs:
            key = (spec.name, spec.version)
            if key in seen:
                logger.warning(
                    "Duplicate specification %s ignored",
                    spec.full_name,
                    extra=extra_context(event="catalog_duplicate", component="catalog", package=spec.name),
                )
                continue
            seen.add(key)
            self._specs.append(spec)
            self._by_name.setdefault(spec.name, []).append(spec)
            for path in spec.provided_paths:
                self._by_path.setdefault(path, []).append(spec)

        for group in self._by_name.values():
            group.sort(key=lambda s: s.version, reverse=True)
        for group in self._by_path.values():
            group.sort(key=lambda s: (s.name, s.version))

    def find_by_name(self, name: str, requirement: Optional[Requirement] = None) -> List[Specification]:
        """Return installed specs named ``name``, highest version first.

        Args:
            name: Package name.
            requirement: When given, only specs whose version satisfies it.
        """
        specs = self._by_name.get(name, [])
        if requirement is None:
            return list(specs)
        return [s for s in specs if s.satisfies(requirement)]

    def find_by_path(self, path: str) -> List[Specification]:
        """Return installed specs providing the symbolic ``path``."""
        return list(self._by_path.get(path, []))

    def names_providing(self, path: str) -> List[str]:
        """Sorted distinct package names providing ``path``."""
        return sorted({s.name for s in self._by_path.get(path, [])})

    def __iter__(self) -> Iterator[Specification]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)

    def __contains__(self, spec: object) -> bool:
        return spec in self._specs
