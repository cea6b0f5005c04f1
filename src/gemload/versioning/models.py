"""Data models for versions, requirements and dependencies."""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from packaging.version import Version

ZERO = Version("0")


class Operator(Enum):
    """Enum for supported requirement operators."""
    EXACT = "="
    NOT_EQUAL = "!="
    GREATER = ">"
    LESS = "<"
    AT_LEAST = ">="
    AT_MOST = "<="
    PESSIMISTIC = "~>"


def release_of(version: Version) -> Version:
    """Return ``version`` without pre/post/dev/local parts."""
    return Version(version.base_version)


def bump(version: Version) -> Version:
    """Return the exclusive upper bound used by the pessimistic operator.

    The last release segment is dropped (unless it is the only one) and the
    new last segment incremented: 1.2.3 -> 1.3, 1.2 -> 2, 1 -> 2.
    """
    segments = list(version.release)
    if len(segments) > 1:
        segments.pop()
    segments[-1] += 1
    return Version(".".join(str(s) for s in segments))


_OPS = {
    Operator.EXACT: lambda v, r: v == r,
    Operator.NOT_EQUAL: lambda v, r: v != r,
    Operator.GREATER: lambda v, r: v > r,
    Operator.LESS: lambda v, r: v < r,
    Operator.AT_LEAST: lambda v, r: v >= r,
    Operator.AT_MOST: lambda v, r: v <= r,
    Operator.PESSIMISTIC: lambda v, r: v >= r and release_of(v) < bump(r),
}

Constraint = Tuple[Operator, Version]


@dataclass(frozen=True)
class Requirement:
    """Conjunction of (operator, version) constraints.

    An empty, satisfiable requirement admits every version. The empty
    requirement produced by contradictory intersections has
    ``satisfiable=False`` and admits nothing.
    """
    constraints: Tuple[Constraint, ...] = ()
    satisfiable: bool = True

    @classmethod
    def default(cls) -> "Requirement":
        """Requirement admitting any version (``>= 0``)."""
        return cls(((Operator.AT_LEAST, ZERO),))

    @classmethod
    def none(cls) -> "Requirement":
        """Requirement no version can satisfy."""
        return cls((), satisfiable=False)

    @classmethod
    def exact(cls, version: Version) -> "Requirement":
        return cls(((Operator.EXACT, version),))

    @property
    def is_exact(self) -> bool:
        return self.satisfiable and any(op is Operator.EXACT for op, _ in self.constraints)

    @property
    def is_satisfiable(self) -> bool:
        return self.satisfiable

    def satisfied_by(self, version: Version) -> bool:
        """Return True when ``version`` meets every constraint."""
        if not self.satisfiable:
            return False
        return all(_OPS[op](version, bound) for op, bound in self.constraints)

    def intersect(self, other: "Requirement") -> "Requirement":
        """Combine two requirements into one satisfied only by versions meeting both.

        An exact constraint on either side narrows the result to that
        version, or to the empty requirement when the pinned version fails
        any other constraint.
        """
        if not (self.satisfiable and other.satisfiable):
            return Requirement.none()

        merged = tuple(dict.fromkeys(self.constraints + other.constraints))
        if len(merged) > 1:
            # ">= 0" adds nothing next to any other constraint
            merged = tuple(c for c in merged if c != (Operator.AT_LEAST, ZERO)) or merged

        pins = [bound for op, bound in merged if op is Operator.EXACT]
        if pins:
            pinned = pins[0]
            if all(_OPS[op](pinned, bound) for op, bound in merged):
                return Requirement.exact(pinned)
            return Requirement.none()
        return Requirement(merged)

    def __str__(self) -> str:
        if not self.satisfiable:
            return "none"
        if not self.constraints:
            return f"{Operator.AT_LEAST.value} {ZERO}"
        return ", ".join(f"{op.value} {bound}" for op, bound in self.constraints)


@dataclass(frozen=True)
class Dependency:
    """A named requirement, e.g. ``b (>= 1)``."""
    name: str
    requirement: Requirement

    def __str__(self) -> str:
        return f"{self.name} ({self.requirement})"
