"""JSON-backed post store.

The store is a single pretty-printed JSON array of post records. It is
read wholesale and rewritten wholesale: every operation does its own
load → mutate → save cycle, so concurrent runs are last-writer-wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from garden.errors import PostNotFoundError, StoreCorruptError
from garden.models import Post, Stage

logger = logging.getLogger(__name__)

STORE_FILENAME = "posts.json"

_posts_adapter = TypeAdapter(list[Post])


def load_posts(path: Path) -> list[Post]:
    """Load every post from the store.

    Returns an empty list if the file doesn't exist. Raises
    StoreCorruptError if it exists but isn't a JSON array of objects.
    Field values inside a record are not checked.
    """
    if not path.exists():
        return []
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise StoreCorruptError(path, str(exc)) from exc
    if not isinstance(raw, list):
        raise StoreCorruptError(path, "expected a JSON array")
    try:
        return _posts_adapter.validate_python(raw)
    except ValidationError as exc:
        raise StoreCorruptError(path, str(exc)) from exc


def save_posts(posts: list[Post], path: Path) -> None:
    """Overwrite the store with ``posts``, 2-space indented."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = [post.to_record() for post in posts]
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.debug("Saved %d post(s) to %s", len(posts), path)


def find_post(posts: list[Post], title: str) -> Post | None:
    """Return the first post whose title equals ``title`` exactly."""
    for post in posts:
        if post.title == title:
            return post
    return None


def replace_post(posts: list[Post], post: Post) -> None:
    """Replace the first entry sharing ``post``'s title, in place.

    Raises PostNotFoundError if no entry matches.
    """
    for index, existing in enumerate(posts):
        if existing.title == post.title:
            posts[index] = post
            return
    raise PostNotFoundError(post.title)


def posts_in_stage(posts: list[Post], *stages: Stage | str) -> list[Post]:
    """Return posts whose stage is one of ``stages``, in store order."""
    wanted = tuple(str(s) for s in stages)
    return [p for p in posts if p.stage in wanted]
