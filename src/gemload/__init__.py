"""gemload - lazy activation of installed package versions at load time."""

from .activation import (
    AmbiguousProviderError,
    ConflictError,
    FeatureNotFoundError,
    LoadError,
    MissingSpecError,
    Specification,
    SpecificationCatalog,
    UnsatisfiableError,
    build_spec,
)
from .config import Settings, load_settings
from .session import ActivationSession

__version__ = "0.1.0"

__all__ = [
    "ActivationSession",
    "AmbiguousProviderError",
    "ConflictError",
    "FeatureNotFoundError",
    "LoadError",
    "MissingSpecError",
    "Settings",
    "Specification",
    "SpecificationCatalog",
    "UnsatisfiableError",
    "build_spec",
    "load_settings",
]
