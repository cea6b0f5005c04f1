"""Package activation: specifications, catalog, state, resolution and loading."""

from .catalog import SpecificationCatalog
from .errors import (
    AmbiguousProviderError,
    ConflictError,
    FeatureNotFoundError,
    LoadError,
    MissingSpecError,
    UnsatisfiableError,
)
from .interceptor import LoadInterceptor
from .loader import FeatureSet, FileLoader, ModuleLoader
from .resolver import Resolver
from .specification import Specification, build_spec
from .state import ActivationRegistry, UnresolvedTracker

__all__ = [
    "ActivationRegistry",
    "AmbiguousProviderError",
    "ConflictError",
    "FeatureNotFoundError",
    "FeatureSet",
    "FileLoader",
    "LoadError",
    "LoadInterceptor",
    "MissingSpecError",
    "ModuleLoader",
    "Resolver",
    "Specification",
    "SpecificationCatalog",
    "UnresolvedTracker",
    "UnsatisfiableError",
    "build_spec",
]
