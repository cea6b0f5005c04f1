"""Version and requirement value types."""

from .models import Dependency, Operator, Requirement
from .parser import parse_dependencies, parse_requirement, parse_version

__all__ = [
    "Dependency",
    "Operator",
    "Requirement",
    "parse_dependencies",
    "parse_requirement",
    "parse_version",
]
