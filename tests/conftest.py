from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture()
def tmp_cache_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    from ccs import cache

    cache_dir = tmp_path / "cache" / "ccs"
    monkeypatch.setattr(cache, "CACHE_DIR", cache_dir)
    monkeypatch.setattr(cache, "CACHE_FILE", cache_dir / "conversations.json")
    return cache_dir


@pytest.fixture()
def tmp_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    from ccs import config

    config_file = tmp_path / "config" / "ccs" / "config.json"
    monkeypatch.setattr(config, "CONFIG_FILE", config_file)
    return config_file


@pytest.fixture()
def projects_dir(tmp_path: Path) -> Path:
    root = tmp_path / ".claude" / "projects"
    root.mkdir(parents=True)
    return root
