"""Shared fixtures: a fresh garden in a temp directory."""

from pathlib import Path

import pytest
from garden.config import GardenConfig, GardenSectionConfig
from garden.layout import init_garden


@pytest.fixture
def config(tmp_path: Path) -> GardenConfig:
    """A garden rooted at tmp_path with stage dirs and default templates."""
    cfg = GardenConfig(garden=GardenSectionConfig(root=str(tmp_path)))
    init_garden(cfg)
    return cfg
