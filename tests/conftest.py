"""Pytest fixtures.

This file adjusts sys.path for src-layout imports.
"""

# ruff: noqa: E402

import os
import sys

# Ensure `src` is on sys.path so imports like `from searchlens.core...` resolve during tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if os.path.isdir(SRC):
    sys.path.insert(0, SRC)
sys.path.insert(0, ROOT)

import pytest
from rich.traceback import install

from searchlens.core.spock.spock import Spock
from tests.utils import CountingIndex, build_article_index

# Enable readable tracebacks in development / test environments.
# Can be disabled with PYTEST_RICH=0
if os.getenv("PYTEST_RICH", "1") == "1":
    install(
        show_locals=True,  # show local variables for each frame
        width=None,  # use terminal width
        word_wrap=True,  # wrap long lines
        extra_lines=1,  # some context around lines
        suppress=["/usr/lib/python3", "site-packages"],  # hide "noisy" third-party frames
    )


@pytest.fixture(autouse=True)
def _clean_searchlens_env(monkeypatch):
    """Keep SEARCHLENS__* variables of the host environment out of the tests."""
    for key in list(os.environ):
        if key.startswith("SEARCHLENS__"):
            monkeypatch.delenv(key)


@pytest.fixture
def index() -> CountingIndex:
    """An article index with three articles and one user, counting loads."""
    return build_article_index()


@pytest.fixture
def spock() -> Spock:
    """A loaded Spock with default settings."""
    instance = Spock()
    instance.load()
    return instance


@pytest.fixture
def verbose_spock() -> Spock:
    """A loaded Spock returning diagnostics to the caller."""
    instance = Spock()
    instance.load(config={"searchlens": {"display_errors": True}})
    return instance
