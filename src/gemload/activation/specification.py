"""Installed package specifications.

A Specification describes one installed version of a package: its
dependencies and the files it makes loadable. Load requests use symbolic
paths, i.e. the file path with the require path prefix and the suffix
stripped (``lib/b/c.rb`` is loaded as ``b/c``).
"""
from __future__ import annotations

import os
import posixpath
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from packaging.version import Version

from ..constants import Constants
from ..versioning.models import Dependency, Requirement
from ..versioning.parser import RequirementLike, parse_dependencies, parse_version


def symbolic_path(file: str, require_paths: Iterable[str], suffixes: Iterable[str]) -> Optional[str]:
    """Map a package-relative file to the path a load request would use.

    Returns None when the file is outside every require path or its suffix
    is not loadable.
    """
    normalized = posixpath.normpath(file.replace("\\", "/"))
    for root in require_paths:
        root = posixpath.normpath(root.replace("\\", "/")).strip("/")
        # "." is the package root itself
        prefix = "" if root in ("", ".") else root + "/"
        if not normalized.startswith(prefix):
            continue
        stem, ext = posixpath.splitext(normalized[len(prefix):])
        if ext in suffixes and stem:
            return stem
    return None


@dataclass(frozen=True)
class Specification:
    """One installed package version."""
    name: str
    version: Version
    dependencies: Tuple[Dependency, ...] = ()
    files: Tuple[str, ...] = ()
    require_paths: Tuple[str, ...] = tuple(Constants.REQUIRE_PATHS)
    suffixes: Tuple[str, ...] = field(default=tuple(Constants.LOADABLE_SUFFIXES), compare=False)
    base_dir: Optional[str] = field(default=None, compare=False)

    @property
    def full_name(self) -> str:
        return f"{self.name}-{self.version}"

    @property
    def dependency_map(self) -> Dict[str, Requirement]:
        return {dep.name: dep.requirement for dep in self.dependencies}

    @cached_property
    def provided_paths(self) -> FrozenSet[str]:
        """Symbolic paths this specification makes loadable."""
        paths = (symbolic_path(f, self.require_paths, self.suffixes) for f in self.files)
        return frozenset(p for p in paths if p)

    @property
    def full_require_paths(self) -> Tuple[str, ...]:
        """Absolute require directories; empty when the install location is unknown."""
        if not self.base_dir:
            return ()
        root = os.path.join(self.base_dir, self.full_name)
        return tuple(os.path.join(root, rp) for rp in self.require_paths)

    def provides(self, path: str) -> bool:
        return path in self.provided_paths

    def satisfies(self, requirement: Requirement) -> bool:
        return requirement.satisfied_by(self.version)

    def __str__(self) -> str:
        return self.full_name


def build_spec(
    name: str,
    version,
    dependencies: Optional[Mapping[str, RequirementLike]] = None,
    *files: str,
    settings=None,
    base_dir: Optional[str] = None,
) -> Specification:
    """Construct a Specification from loosely typed parts.

    Args:
        name: Package name.
        version: Version string or Version.
        dependencies: Mapping of dependency name to requirement string(s).
        *files: Package-relative file paths, e.g. ``"lib/a.rb"``.
        settings: Optional Settings supplying require paths and suffixes.
        base_dir: Directory holding the unpacked ``<name>-<version>`` tree.

    Returns:
        The immutable Specification.
    """
    require_paths = tuple(settings.require_paths) if settings else tuple(Constants.REQUIRE_PATHS)
    suffixes = tuple(settings.loadable_suffixes) if settings else tuple(Constants.LOADABLE_SUFFIXES)
    deps = parse_dependencies(dict(dependencies) if dependencies else None)
    return Specification(
        name=name,
        version=parse_version(version),
        dependencies=tuple(Dependency(n, r) for n, r in sorted(deps.items())),
        files=tuple(files),
        require_paths=require_paths,
        suffixes=suffixes,
        base_dir=base_dir,
    )
