"""Bootstrap a garden directory: stage folders plus default templates."""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path

from garden.config import GardenConfig
from garden.models import Stage

logger = logging.getLogger(__name__)


def default_template(stage: Stage | str) -> str:
    """Return the packaged default template for ``stage``."""
    name = f"{Stage(stage).value}-template.html"
    return (resources.files("garden") / "templates" / name).read_text(encoding="utf-8")


def init_garden(config: GardenConfig, *, overwrite: bool = False) -> list[Path]:
    """Create missing stage directories and templates.

    Existing templates are kept unless ``overwrite`` is set, so local
    edits survive a re-run. The store file is not created; a missing
    store already reads as empty.

    Returns:
        Paths that were created or rewritten.
    """
    created: list[Path] = []

    for _, directory in config.stage_dirs:
        if not directory.exists():
            directory.mkdir(parents=True)
            created.append(directory)

    config.templates_dir.mkdir(parents=True, exist_ok=True)
    for stage in Stage:
        path = config.template_path(stage)
        if path.exists() and not overwrite:
            logger.debug("Keeping existing template %s", path)
            continue
        path.write_text(default_template(stage), encoding="utf-8")
        created.append(path)

    return created
