"""Tests for the load interceptor and the session facade."""

import pytest

from gemload.activation.catalog import SpecificationCatalog
from gemload.activation.errors import AmbiguousProviderError, FeatureNotFoundError
from gemload.activation.interceptor import LoadInterceptor
from gemload.activation.loader import ModuleLoader
from gemload.activation.resolver import Resolver
from gemload.activation.specification import build_spec
from gemload.config import Settings
from gemload.session import ActivationSession
from gemload.versioning.parser import parse_requirement


class CountingLoader(ModuleLoader):
    """In-memory loader: every path loads once, unless listed as missing."""

    def __init__(self, missing=()):
        super().__init__()
        self.calls = []
        self.missing = set(missing)

    def load(self, path):
        self.calls.append(path)
        if path in self.missing:
            raise FeatureNotFoundError(path)
        if self.features.has_feature(path):
            return False
        self.features.add(path)
        return True


class TestLoadInterceptor:
    """Delegation to the loader around resolution."""

    def test_result_is_loader_result(self):
        loader = CountingLoader()
        interceptor = LoadInterceptor(Resolver(SpecificationCatalog()), loader)
        assert interceptor.load("set") is True
        assert interceptor.load("set") is False
        assert loader.calls == ["set", "set"]

    def test_resolution_error_skips_loader(self):
        a1 = build_spec("a", "1", {"b": ">= 0", "x": ">= 0"})
        specs = [a1] + [build_spec(n, v, None, "lib/ib.rb") for n in ("b", "x") for v in ("1", "2")]
        resolver = Resolver(SpecificationCatalog(specs))
        resolver.activate(a1)
        loader = CountingLoader()

        with pytest.raises(AmbiguousProviderError):
            LoadInterceptor(resolver, loader).load("ib")
        assert loader.calls == []

    def test_missing_feature_triggers_try_activate(self):
        b1 = build_spec("b", "1", None, "lib/b.rb")
        resolver = Resolver(SpecificationCatalog([b1]))

        class AppearsAfterActivation(CountingLoader):
            def load(self, path):
                self.missing = set() if "b" in resolver.registry else {"b"}
                return super().load(path)

        loader = AppearsAfterActivation()
        assert LoadInterceptor(resolver, loader).load("b") is True
        assert loader.calls == ["b", "b"]
        assert resolver.registry.full_names() == ["b-1"]

    def test_missing_feature_reraised_when_disabled(self):
        b1 = build_spec("b", "1", None, "lib/b.rb")
        resolver = Resolver(SpecificationCatalog([b1]))
        loader = CountingLoader(missing={"b"})
        with pytest.raises(FeatureNotFoundError):
            LoadInterceptor(resolver, loader, try_activate=False).load("b")
        assert resolver.registry.full_names() == []

    def test_missing_feature_without_provider(self):
        loader = CountingLoader(missing={"nope"})
        with pytest.raises(FeatureNotFoundError):
            LoadInterceptor(Resolver(SpecificationCatalog()), loader).load("nope")
        assert loader.calls == ["nope"]


class TestActivationSession:
    """Owned state and accessors."""

    def test_sessions_are_isolated(self):
        a1 = build_spec("a", "1", {"b": ">= 1"})
        b1, b2 = build_spec("b", "1"), build_spec("b", "2")
        first = ActivationSession([a1, b1, b2], loader=CountingLoader())
        second = ActivationSession([a1, b1, b2], loader=CountingLoader())

        first.activate(a1)
        assert first.loaded_spec_names() == ["a-1"]
        assert first.unresolved_names() == ["b (>= 1)"]
        assert second.loaded_spec_names() == []
        assert second.pending_requirements() == {}

    def test_accessors(self):
        a1 = build_spec("a", "1", {"b": ">= 1"})
        b1, b2 = build_spec("b", "1"), build_spec("b", "2")
        session = ActivationSession(SpecificationCatalog([a1, b1, b2]), loader=CountingLoader())
        session.activate(a1)
        assert session.active_specifications() == [a1]
        assert session.pending_requirements() == {"b": parse_requirement(">= 1")}

    def test_gem_parses_requirements(self):
        b1, b2, b3 = build_spec("b", "1"), build_spec("b", "2"), build_spec("b", "3")
        session = ActivationSession([b1, b2, b3], loader=CountingLoader())
        assert session.gem("b", ">= 1", "< 3") is True
        assert session.loaded_spec_names() == ["b-2"]

    def test_reconcile_passthrough(self):
        a1 = build_spec("a", "1", {"b": ">= 1"})
        b1, b2 = build_spec("b", "1", None, "lib/b.rb"), build_spec("b", "2", None, "lib/b.rb")
        session = ActivationSession([a1, b1, b2], loader=CountingLoader())
        session.activate(a1)
        assert session.reconcile("b") == b2

    def test_load_paths_follow_active_specs(self, tmp_path):
        a1 = build_spec("a", "1", None, "lib/a.rb", base_dir=str(tmp_path))
        session = ActivationSession([a1], settings=Settings(load_path=(str(tmp_path / "std"),)))
        assert session.load_paths() == []
        session.activate(a1)
        assert session.load_paths() == [str(tmp_path / "a-1" / "lib")]
        assert session.loader.search_path() == [str(tmp_path / "a-1" / "lib"), str(tmp_path / "std")]

    def test_try_activate_setting_reaches_interceptor(self):
        session = ActivationSession([], loader=CountingLoader(), settings=Settings(try_activate=False))
        assert session.interceptor.try_activate is False
