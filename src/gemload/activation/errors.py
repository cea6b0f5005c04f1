"""Exceptions raised while activating packages and loading paths."""

from typing import Optional, Sequence

from ..constants import Constants


class LoadError(Exception):
    """Base error for failed activations and load requests.

    Attributes:
        name: Package name the failure concerns, when there is one.
        requirement: Requirement that could not be met, when there is one.
    """

    def __init__(self, message: str, name: Optional[str] = None, requirement=None):
        super().__init__(message)
        self.name = name
        self.requirement = requirement


class ConflictError(LoadError):
    """An active package contradicts a requested version or requirement."""

    def __init__(self, message: str, name: Optional[str] = None, requirement=None, active=None):
        super().__init__(message, name=name, requirement=requirement)
        self.active = active


class AmbiguousProviderError(LoadError):
    """Two or more distinct package names provide the requested path."""

    def __init__(self, path: str, names: Sequence[str]):
        self.path = path
        self.names = sorted(names)
        super().__init__(Constants.MSG_AMBIGUOUS.format(path=path, names=", ".join(self.names)))


class UnsatisfiableError(LoadError):
    """No installed candidate meets the requirement and the active packages."""

    def __init__(self, name: str, requirement=None):
        super().__init__(Constants.MSG_UNSATISFIABLE.format(name=name), name=name, requirement=requirement)


class MissingSpecError(LoadError):
    """No installed specification of a name satisfies the requirement."""

    def __init__(self, name: str, requirement, total: int):
        super().__init__(
            Constants.MSG_MISSING_SPEC.format(name=name, requirement=requirement, total=total),
            name=name,
            requirement=requirement,
        )


class FeatureNotFoundError(LoadError):
    """A loader could not map a symbolic path to a file."""

    def __init__(self, path: str):
        super().__init__(Constants.MSG_FEATURE_NOT_FOUND.format(path=path))
        self.path = path
