"""Entry point invoked for every load request."""
from __future__ import annotations

import logging

from ..common.logging_utils import extra_context
from .errors import FeatureNotFoundError
from .loader import ModuleLoader
from .resolver import Resolver

logger = logging.getLogger(__name__)


class LoadInterceptor:
    """Reconciles package state for a path, then delegates to the loader."""

    def __init__(self, resolver: Resolver, loader: ModuleLoader, try_activate: bool = True):
        self.resolver = resolver
        self.loader = loader
        self.try_activate = try_activate

    def load(self, path: str) -> bool:
        """Load ``path``, activating the package that provides it when needed.

        Returns:
            The loader's result: True if this call loaded a file, False if
            it had already been loaded by any means.

        Raises:
            AmbiguousProviderError, UnsatisfiableError, ConflictError: from
                resolution; the loader is not called.
            FeatureNotFoundError: If no file backs ``path``, even after
                activating an installed package that provides it.
        """
        self.resolver.reconcile(path)

        try:
            return self.loader.load(path)
        except FeatureNotFoundError:
            if not self.try_activate or not self.resolver.try_activate(path):
                raise
            logger.debug("Retrying %s after activating its provider", path, extra=extra_context(
                event="retry_load", component="interceptor", target=path
            ))
            return self.loader.load(path)
