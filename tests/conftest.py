"""Shared test fixtures."""

from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def isolate_settings(tmp_path, monkeypatch):
    """Point XDG_CONFIG_HOME at a temp directory so no real settings are read."""
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    return config_home / "dircleaner" / "settings.json"


@pytest.fixture
def sample_tree(tmp_path):
    """Build the tree::

        tree/a/dup.txt
        tree/b/c/dup.txt
        tree/dup2.txt
    """
    root = tmp_path / "tree"
    (root / "a").mkdir(parents=True)
    (root / "b" / "c").mkdir(parents=True)
    (root / "a" / "dup.txt").write_text("first copy")
    (root / "b" / "c" / "dup.txt").write_text("second copy")
    (root / "dup2.txt").write_text("not a match")
    return root
