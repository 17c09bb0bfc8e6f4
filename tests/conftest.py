"""Pytest configuration helpers for the CalcHub project.

``tests.conftest`` is imported before any test module, so it is the place to
put the repository on ``sys.path`` and to keep the suite off the on-disk
storage document that the default configuration points at.
"""

from __future__ import annotations

import os

import pytest

from tests import _ensure_repo_on_path

# Must run before calchub.settings is first imported and cached.
os.environ.setdefault("STORAGE_BACKEND", "memory")


def pytest_configure(config: pytest.Config) -> None:
    """Hook executed by pytest prior to running any tests."""

    _ensure_repo_on_path()
