"""Shared fixtures: installing specs on disk and building sessions."""

from typing import List

import pytest

from gemload.activation.specification import build_spec
from gemload.config import Settings
from gemload.session import ActivationSession


class RecordingExecutor:
    """Executor that remembers which files it was asked to run."""

    def __init__(self):
        self.executed: List[str] = []

    def __call__(self, location):
        self.executed.append(location)


@pytest.fixture
def gem_home(tmp_path):
    """Directory holding unpacked ``<name>-<version>`` trees."""
    home = tmp_path / "gems"
    home.mkdir()
    return home


@pytest.fixture
def new_spec(gem_home):
    """Factory building specs installed under ``gem_home``."""

    def _new_spec(name, version, deps=None, *files):
        spec = build_spec(name, version, deps, *files, base_dir=str(gem_home))
        for rel in files:
            target = gem_home / spec.full_name / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"# {spec.full_name} {rel}\n", encoding="utf-8")
        return spec

    return _new_spec


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def stdlib_dir(tmp_path):
    """A base load path directory, outside of any package."""
    path = tmp_path / "stdlib"
    path.mkdir()
    return path


@pytest.fixture
def make_session(executor, stdlib_dir):
    """Build a session over the given specs with a FileLoader on disk."""

    def _make(*specs, settings=None):
        settings = settings or Settings(load_path=(str(stdlib_dir),))
        return ActivationSession(specs, settings=settings, executor=executor)

    return _make
