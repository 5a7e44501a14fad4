"""Render posts into stage templates.

Templates are plain HTML documents with literal ``{{token}}``
placeholders. Every occurrence of every token is replaced; the tokens
are disjoint so substitution order does not matter.

Post values are interpolated as raw HTML with no escaping. Content,
tags and links all come from the operator who owns the garden, so this
is a trust boundary, not a sanitizer: never render posts from anyone
else through this module.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from garden.config import GardenConfig
from garden.errors import TemplateNotFoundError
from garden.models import Post, Stage

logger = logging.getLogger(__name__)


def format_date(value: object) -> str:
    """Return the ``YYYY-MM-DD`` part of an ISO timestamp, or "" if absent."""
    return str(value).split("T")[0] if value else ""


def render_tags(tags: list[str]) -> str:
    items = "".join(f'<li class="bg-gray-300 px-2 py-1 rounded">{tag}</li>' for tag in tags)
    return f'<ul class="flex flex-row gap-2">{items}</ul>'


def render_links(links: list[str]) -> str:
    items = "".join(
        f'<li><a href="{link}" target="_blank" class="text-blue-600 underline">{link}</a></li>'
        for link in links
    )
    return f'<ul class="list-disc pl-5">{items}</ul>'


def placeholders(post: Post) -> dict[str, str]:
    """Map each template token to its rendered value for ``post``."""
    dates = post.dates
    return {
        "{{title}}": post.title_text,
        "{{dates.planted}}": format_date(dates.planted),
        "{{dates.lastUpdated}}": format_date(dates.lastUpdated),
        "{{dates.growingStarted}}": format_date(dates.growingStarted),
        "{{dates.harvestedOn}}": format_date(dates.harvestedOn),
        "{{dates.abandonedOn}}": format_date(dates.abandonedOn),
        "{{tags}}": render_tags(post.tags or []),
        "{{content}}": "" if post.content is None else str(post.content),
        "{{links}}": render_links(post.links or []),
    }


_TOKEN_RE = re.compile(r"\{\{[\w.]+\}\}")


def render(post: Post, template: str) -> str:
    """Fill ``template`` text with the post's fields.

    Unknown ``{{...}}`` tokens are left as-is. Substitution is a single
    pass, so a value that itself contains a token is not expanded again.
    """
    values = placeholders(post)
    return _TOKEN_RE.sub(lambda m: values.get(m.group(0), m.group(0)), template)


class TemplateRenderer:
    """Writes rendered posts into the garden's stage directories."""

    def __init__(self, config: GardenConfig) -> None:
        self.config = config

    def load_template(self, stage: Stage | str) -> str:
        path = self.config.template_path(stage)
        if not path.exists():
            raise TemplateNotFoundError(path)
        return path.read_text(encoding="utf-8")

    def output_path(self, post: Post, stage: Stage | str) -> Path:
        return self.config.stage_dir(stage) / post.filename

    def relative_link(self, post: Post, stage: Stage | str) -> str:
        """Path stored as ``post.link``: ``<stageFolder>/<slug>.html``."""
        return f"{self.config.folder_name(stage)}/{post.filename}"

    def write(self, post: Post, stage: Stage | str) -> str:
        """Render ``post`` with the stage template and write it to disk.

        Returns the link relative to the garden root.
        """
        html = render(post, self.load_template(stage))
        path = self.output_path(post, stage)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(html, encoding="utf-8")
        logger.debug("Rendered %s", path)
        return self.relative_link(post, stage)
