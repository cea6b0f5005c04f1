"""Parsing utilities for versions and requirement strings."""

import re
from typing import Optional, Union

from packaging.version import InvalidVersion, Version

from .models import Operator, Requirement

_ALIASES = {
    "==": Operator.EXACT,
    "~=": Operator.PESSIMISTIC,
}

_CONSTRAINT_RE = re.compile(r"^\s*(~>|~=|==|!=|>=|<=|=|>|<)?\s*([^\s,]+)\s*$")

RequirementLike = Union[str, Version, Requirement, None]


def parse_version(value: Union[str, int, Version]) -> Version:
    """Return a ``packaging`` Version for ``value``.

    Raises:
        ValueError: If the value is not a valid version.
    """
    if isinstance(value, Version):
        return value
    try:
        return Version(str(value).strip())
    except InvalidVersion as e:
        raise ValueError(f"Malformed version: {value!r}") from e


def _parse_operator(token: Optional[str]) -> Operator:
    """Map an operator token to an Operator; a missing token means exact."""
    if not token:
        return Operator.EXACT
    if token in _ALIASES:
        return _ALIASES[token]
    return Operator(token)


def _parse_one(raw: str) -> Requirement:
    """Parse one comma separated requirement string, e.g. ``">= 1, < 2"``."""
    constraints = []
    for part in raw.split(","):
        if not part.strip():
            continue
        match = _CONSTRAINT_RE.match(part)
        if not match:
            raise ValueError(f"Malformed requirement: {raw!r}")
        op = _parse_operator(match.group(1))
        constraints.append((op, parse_version(match.group(2))))
    if not constraints:
        return Requirement.default()
    return Requirement(tuple(constraints))


def parse_requirement(*specs: RequirementLike) -> Requirement:
    """Build a Requirement from any mix of strings, versions and requirements.

    All given parts are intersected. No parts (or only ``None``) yields the
    default ``>= 0`` requirement.

    Raises:
        ValueError: If a string part is malformed.
    """
    result: Optional[Requirement] = None
    for spec in specs:
        if spec is None:
            continue
        if isinstance(spec, Requirement):
            current = spec
        elif isinstance(spec, Version):
            current = Requirement.exact(spec)
        else:
            current = _parse_one(str(spec))
        result = current if result is None else result.intersect(current)
    return result if result is not None else Requirement.default()


def parse_dependencies(raw: Optional[dict]) -> dict:
    """Normalize a ``{name: requirement-like}`` mapping to ``{name: Requirement}``."""
    if not raw:
        return {}
    out = {}
    for name, spec in raw.items():
        if isinstance(spec, (list, tuple)):
            out[name] = parse_requirement(*spec)
        else:
            out[name] = parse_requirement(spec)
    return out
