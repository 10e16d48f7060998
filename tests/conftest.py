from pathlib import Path

import pytest

from webserve.config import ServeConfig
from webserve.resolver import canonical_root


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """root/a.txt ("hi") and an empty root/sub directory."""

    root = canonical_root(tmp_path / "site")
    root.mkdir()
    (root / "a.txt").write_text("hi")
    (root / "sub").mkdir()
    return root


@pytest.fixture
def make_config(site: Path):
    def _make(**overrides) -> ServeConfig:
        return ServeConfig(root=site, **overrides)

    return _make
