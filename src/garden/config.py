"""Garden configuration loaded from .garden.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from garden.models import Stage

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".garden.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG = Path.home() / ".config" / "garden" / "config.toml"


class FoldersConfig(BaseModel):
    """[garden.folders] section -- output directory per stage."""

    seed: str = "seeds"
    growing: str = "growing"
    harvested: str = "harvested"
    abandoned: str = "abandoned"


class GardenSectionConfig(BaseModel):
    """[garden] section."""

    root: str = "."
    store: str = "posts.json"
    templates: str = "templates"
    folders: FoldersConfig = Field(default_factory=FoldersConfig)


class GardenConfig(BaseModel):
    """Top-level configuration for a garden."""

    garden: GardenSectionConfig = Field(default_factory=GardenSectionConfig)

    @property
    def root(self) -> Path:
        return Path(self.garden.root)

    @property
    def store_path(self) -> Path:
        return self.root / self.garden.store

    @property
    def templates_dir(self) -> Path:
        return self.root / self.garden.templates

    def folder_name(self, stage: Stage | str) -> str:
        """Name of the directory holding rendered posts for ``stage``."""
        return getattr(self.garden.folders, Stage(stage).value)

    def stage_dir(self, stage: Stage | str) -> Path:
        return self.root / self.folder_name(stage)

    def template_path(self, stage: Stage | str) -> Path:
        return self.templates_dir / f"{Stage(stage).value}-template.html"

    @property
    def stage_dirs(self) -> list[tuple[Stage, Path]]:
        """All stage directories in lifecycle order."""
        return [(stage, self.stage_dir(stage)) for stage in Stage]


def load_config(path: str | Path | None = None) -> GardenConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .garden.toml in CWD
    3. ~/.config/garden/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged GardenConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG.exists():
            data = _load_toml(GLOBAL_CONFIG)
            logger.info("Loaded config from %s", GLOBAL_CONFIG)

    config = GardenConfig.model_validate(data) if data else GardenConfig()

    return _apply_env_vars(config)


CLI_OVERRIDE_KEYS = ("root", "store", "templates")


def merge_cli_overrides(config: GardenConfig, **cli_kwargs: object) -> GardenConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only overrides values where the CLI flag was explicitly provided
    (i.e., not None).
    """
    data = config.model_dump()

    for key, value in cli_kwargs.items():
        if value is None or key not in CLI_OVERRIDE_KEYS:
            continue
        data["garden"][key] = str(value)

    return GardenConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: GardenConfig) -> GardenConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, str] = {
        "GARDEN_ROOT": "root",
        "GARDEN_STORE": "store",
        "GARDEN_TEMPLATES": "templates",
    }

    for env_var, field in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data["garden"][field] = value

    return GardenConfig.model_validate(data)
