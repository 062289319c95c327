# Copyright (c) Microsoft Corporation.
# Licensed under the MIT License.

"""Global pytest configuration and fixtures."""

import logging

import pytest

from costexplorer.settings import reset_config


class FakeClock:
    """Monotonic clock advancing by ``step`` seconds on every reading pair.

    Explorer.smt_query() reads the clock before and after each oracle call,
    so every query appears to take exactly ``step`` seconds.
    """

    def __init__(self, step: float = 1.0):
        self.step = step
        self.now = 0.0
        self._readings = 0

    def monotonic(self) -> float:
        self._readings += 1
        if self._readings % 2 == 0:
            self.now += self.step
        return self.now


@pytest.fixture
def output_dir(tmp_path):
    """Fresh (not yet created) output directory for the exploration logs."""
    return tmp_path / "out"


@pytest.fixture
def fake_clock(monkeypatch):
    """Replace the explorer's clock; each query then costs one second."""
    import costexplorer.exploration.explorer as explorer_module

    clock = FakeClock(step=1.0)
    monkeypatch.setattr(explorer_module, "time", clock)
    return clock


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Run settings tests in an empty directory with no COSTEXP_* variables."""
    import os

    for key in list(os.environ):
        if key.startswith("COSTEXP_"):
            monkeypatch.delenv(key)
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    reset_config()
    yield project
    reset_config()


@pytest.fixture
def clean_logging():
    """Reset root logger handlers for test isolation."""
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    root.handlers.clear()
    yield
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
