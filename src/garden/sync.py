"""Reverse sync: read operator edits in rendered HTML back into the store.

Each rendered file is matched to a post by the exact text of its
``<title>``. The inner HTML of ``#content`` replaces the post's
content, and the ``#updated_date`` marker in the file is rewritten with
today's date. Files that can't be matched are skipped and reported;
the store is saved once at the end.

BeautifulSoup locates the elements, but content is sliced out of the
file text and the marker is spliced back into it, so entities, attribute
order and self-closing slashes survive exactly as written. Serializing
the parse tree is only a fallback for elements that are never closed.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, date, datetime
from pathlib import Path

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from garden.config import GardenConfig
from garden.errors import SyncReport
from garden.lifecycle import timestamp_now
from garden.models import Post
from garden.store import find_post, load_posts, save_posts

logger = logging.getLogger(__name__)

CONTENT_ID = "content"
UPDATED_MARKER_ID = "updated_date"


class SourceOrderFormatter(HTMLFormatter):
    """Keep attributes in the order they were written."""

    def attributes(self, tag: Tag):
        return list(tag.attrs.items()) if tag.attrs else []


# Escape only &, < and >; keep non-ASCII text and void tags as authored.
FORMATTER = SourceOrderFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
)


def _tag_pattern(name: str) -> re.Pattern[str]:
    return re.compile(
        rf"<(/?){re.escape(name)}(?=[\s/>])(?:[^>\"']|\"[^\"]*\"|'[^']*')*>",
        re.IGNORECASE,
    )


def inner_span(html: str, tag: Tag) -> tuple[int, int] | None:
    """Offsets of ``tag``'s inner HTML within the source text ``html``.

    Returns None if the parser recorded no position or the element is
    never closed.
    """
    if tag.sourceline is None or tag.sourcepos is None:
        return None
    line_start = 0
    for _ in range(tag.sourceline - 1):
        line_start = html.index("\n", line_start) + 1
    pattern = _tag_pattern(tag.name)
    opening = pattern.match(html, line_start + tag.sourcepos)
    if opening is None or opening.group(1):
        return None

    depth = 1
    for match in pattern.finditer(html, opening.end()):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return opening.end(), match.start()
        elif not match.group(0).endswith("/>"):
            depth += 1
    return None


def extract(html: str) -> tuple[str, str | None, BeautifulSoup]:
    """Parse a rendered post.

    Returns:
        (title, content fragment or None if ``#content`` is missing, soup)
    """
    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.get_text().strip() if soup.title else ""
    container = soup.find(id=CONTENT_ID)
    if container is None:
        return title, None, soup
    span = inner_span(html, container)
    if span is None:
        return title, container.decode_contents(formatter=FORMATTER), soup
    start, end = span
    return title, html[start:end], soup


def marker_text(today: date) -> str:
    return f"<b>Data Updated:</b> {today.isoformat()}"


def stamp_updated_marker(html: str, soup: BeautifulSoup, today: date) -> str | None:
    """Return ``html`` with ``#updated_date`` set to today's date.

    Only the marker's inner HTML changes. Returns None if the document
    has no marker.
    """
    marker = soup.find(id=UPDATED_MARKER_ID)
    if marker is None:
        return None
    span = inner_span(html, marker)
    if span is not None:
        start, end = span
        return html[:start] + marker_text(today) + html[end:]

    marker.clear()
    label = soup.new_tag("b")
    label.string = "Data Updated:"
    marker.append(label)
    marker.append(f" {today.isoformat()}")
    return soup.decode(formatter=FORMATTER)


def sync_file(
    path: Path,
    posts: list[Post],
    report: SyncReport,
    *,
    timestamp: str,
    today: date,
) -> None:
    """Sync one rendered file into ``posts``, recording the outcome."""
    try:
        html = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        report.add_skip(path, f"unreadable: {exc}")
        return

    title, content, soup = extract(html)
    logger.debug("%s: title=%r content=%d chars", path.name, title, len(content or ""))

    if not content:
        logger.warning('No content found in <div id="%s"> for: %s', CONTENT_ID, path)
        report.add_skip(path, "no content container", title)
        return

    post = find_post(posts, title)
    if post is None:
        logger.warning("No matching post found in store for file: %s", path)
        report.add_skip(path, "no matching title", title)
        return

    post.content = content
    post.touch(timestamp)
    report.synced.append(title)

    stamped = stamp_updated_marker(html, soup, today)
    if stamped is None:
        logger.warning('No <span id="%s"> found in: %s', UPDATED_MARKER_ID, path)
        return
    if stamped != html:
        path.write_text(stamped, encoding="utf-8")
    report.markers_updated.append(str(path))


def sync_html_to_store(
    config: GardenConfig,
    posts: list[Post],
    *,
    timestamp: str | None = None,
) -> SyncReport:
    """Scan every stage directory and pull edited content into ``posts``.

    ``posts`` is mutated in place; saving is left to the caller.
    """
    ts = timestamp or timestamp_now()
    today = datetime.fromisoformat(ts.replace("Z", "+00:00")).astimezone(UTC).date()
    report = SyncReport()

    for stage, directory in config.stage_dirs:
        if not directory.is_dir():
            logger.debug("Skipping missing %s directory %s", stage, directory)
            continue
        for path in sorted(directory.glob("*.html")):
            sync_file(path, posts, report, timestamp=ts, today=today)

    return report


def sync(config: GardenConfig, *, timestamp: str | None = None) -> SyncReport:
    """Load the store, sync every rendered file into it, save once."""
    posts = load_posts(config.store_path)
    report = sync_html_to_store(config, posts, timestamp=timestamp)
    save_posts(posts, config.store_path)
    logger.info(
        "Synced %d post(s), skipped %d file(s)", len(report.synced), len(report.skipped)
    )
    return report
