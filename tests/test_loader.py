"""Tests for the file loader and its loaded-feature tracking."""

import threading
import time

import pytest

from gemload.activation.errors import FeatureNotFoundError
from gemload.activation.loader import FeatureSet, FileLoader, execute_file


@pytest.fixture
def lib_dirs(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    for d in (first, second):
        (d / "pkg").mkdir(parents=True)
    (first / "pkg" / "mod.rb").write_text("# first\n", encoding="utf-8")
    (second / "pkg" / "mod.rb").write_text("# second\n", encoding="utf-8")
    (second / "only.py").write_text("VALUE = 1\n", encoding="utf-8")
    return first, second


class TestFeatureSet:
    """Loaded-feature bookkeeping."""

    def test_add_and_query(self, tmp_path):
        features = FeatureSet()
        features.add("x", str(tmp_path / "x.rb"))
        assert "x" in features
        assert features.has_location(str(tmp_path / "x.rb"))
        assert not features.has_feature("y")
        assert len(features) == 1

    def test_saved_restores_on_exit(self):
        features = FeatureSet()
        features.add("before")
        with features.saved():
            features.add("inside")
            assert "inside" in features
        assert "inside" not in features
        assert "before" in features

    def test_saved_restores_after_error(self):
        features = FeatureSet()
        with pytest.raises(RuntimeError):
            with features.saved():
                features.add("inside")
                raise RuntimeError("boom")
        assert len(features) == 0


class TestFileLoader:
    """Resolution and once-only execution."""

    def test_resolve_follows_search_order(self, lib_dirs):
        first, second = lib_dirs
        loader = FileLoader(load_path=[str(second), str(first)], executor=lambda _: None)
        assert loader.resolve("pkg/mod") == str(second / "pkg" / "mod.rb")

    def test_extra_paths_come_first(self, lib_dirs):
        first, second = lib_dirs
        loader = FileLoader(load_path=[str(second)], extra_paths=lambda: [str(first)], executor=lambda _: None)
        assert loader.search_path() == [str(first), str(second)]
        assert loader.resolve("pkg/mod") == str(first / "pkg" / "mod.rb")

    def test_resolve_with_explicit_suffix_and_absolute(self, lib_dirs):
        _, second = lib_dirs
        loader = FileLoader(load_path=[str(second)], executor=lambda _: None)
        assert loader.resolve("pkg/mod.rb") == str(second / "pkg" / "mod.rb")
        assert loader.resolve(str(second / "pkg" / "mod")) == str(second / "pkg" / "mod.rb")
        assert loader.resolve("pkg/missing") is None

    def test_load_executes_once(self, lib_dirs):
        _, second = lib_dirs
        executed = []
        loader = FileLoader(load_path=[str(second)], executor=executed.append)
        assert loader.load("pkg/mod") is True
        assert loader.load("pkg/mod") is False
        assert executed == [str(second / "pkg" / "mod.rb")]
        assert loader.is_loaded("pkg/mod")

    def test_same_location_under_another_name_is_not_reloaded(self, lib_dirs):
        _, second = lib_dirs
        executed = []
        loader = FileLoader(load_path=[str(second)], executor=executed.append)
        assert loader.load("pkg/mod") is True
        assert loader.load("pkg/mod.rb") is False
        assert len(executed) == 1

    def test_missing_feature_raises(self, lib_dirs):
        loader = FileLoader(load_path=[str(lib_dirs[0])], executor=lambda _: None)
        with pytest.raises(FeatureNotFoundError) as e:
            loader.load("nope")
        assert str(e.value) == "cannot load such file -- nope"

    def test_snapshot_and_restore(self, lib_dirs):
        _, second = lib_dirs
        executed = []
        loader = FileLoader(load_path=[str(second)], executor=executed.append)
        snapshot = loader.snapshot()
        loader.load("pkg/mod")
        loader.restore(snapshot)
        assert loader.load("pkg/mod") is True
        assert len(executed) == 2

    def test_failed_execution_is_not_recorded(self, lib_dirs):
        _, second = lib_dirs

        def explode(_):
            raise SyntaxError("bad file")

        loader = FileLoader(load_path=[str(second)], executor=explode)
        with pytest.raises(SyntaxError):
            loader.load("pkg/mod")
        assert not loader.is_loaded("pkg/mod")

    def test_default_executor_runs_python(self, lib_dirs, tmp_path):
        marker = tmp_path / "marker.txt"
        script = tmp_path / "write_marker.py"
        script.write_text(
            f"with open({str(marker)!r}, 'w') as f:\n    f.write('ran')\n", encoding="utf-8"
        )
        execute_file(str(script))
        assert marker.read_text() == "ran"
        execute_file(str(lib_dirs[0] / "pkg" / "mod.rb"))

    def test_concurrent_loads_execute_once(self, lib_dirs):
        _, second = lib_dirs
        executed = []

        def slow(location):
            time.sleep(0.05)
            executed.append(location)

        loader = FileLoader(load_path=[str(second)], executor=slow)
        barrier = threading.Barrier(4)
        results = []

        def worker():
            barrier.wait()
            results.append(loader.load("pkg/mod"))

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results) == [False, False, False, True]
        assert executed == [str(second / "pkg" / "mod.rb")]

    def test_nested_load_from_executed_file(self, lib_dirs):
        _, second = lib_dirs
        executed = []
        loader = FileLoader(load_path=[str(second)])

        def nested(location):
            executed.append(location)
            if location.endswith("mod.rb"):
                assert loader.load("only") is True

        loader.executor = nested
        assert loader.load("pkg/mod") is True
        assert executed == [str(second / "pkg" / "mod.rb"), str(second / "only.py")]
        assert loader.is_loaded("only")
