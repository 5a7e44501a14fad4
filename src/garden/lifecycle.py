"""Stage transition engine -- planting posts and moving them through stages.

Each operation coordinates three things in a fixed order: stamp the
post's dates, render the new stage file and delete the old one, then
reload the store, replace the post by title and save. There is no
rollback; a failure part-way leaves the store and files out of step.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from garden.config import GardenConfig
from garden.errors import InvalidTransitionError, PostNotFoundError
from garden.models import TRANSITIONS, Post, PostDates, Stage, can_transition
from garden.render import TemplateRenderer
from garden.store import find_post, load_posts, posts_in_stage, replace_post, save_posts

logger = logging.getLogger(__name__)


def timestamp_now() -> str:
    """Current UTC instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_list(text: str) -> list[str]:
    """Split comma-separated input, trimming items and dropping empties."""
    return [item.strip() for item in text.split(",") if item.strip()]


def plant(
    config: GardenConfig,
    title: str,
    content: str,
    tags: list[str] | None = None,
    links: list[str] | None = None,
    *,
    timestamp: str | None = None,
) -> Post:
    """Create a new seed post, render it and append it to the store."""
    ts = timestamp or timestamp_now()
    post = Post(
        title=title,
        stage=Stage.SEED.value,
        tags=list(tags or []),
        content=content,
        links=list(links or []),
        dates=PostDates.planted_at(ts),
        link="",
    )
    post.link = TemplateRenderer(config).write(post, Stage.SEED)

    posts = load_posts(config.store_path)
    posts.append(post)
    save_posts(posts, config.store_path)

    logger.info("Planted seed %r at %s", title, post.link)
    return post


def transition(
    config: GardenConfig,
    post: Post,
    target: Stage | str,
    date_field: str | None = None,
    *,
    timestamp: str | None = None,
) -> Post:
    """Move ``post`` to ``target``, re-rendering it in the new stage.

    Args:
        config: Garden layout.
        post: The post as loaded from the store; it is mutated in place.
        target: Stage to move to.
        date_field: Date to stamp. Defaults to the field the state
            machine assigns to ``target``.
        timestamp: Instant to stamp; defaults to now.

    Returns:
        The updated post.

    Raises:
        InvalidTransitionError: If the state machine forbids the move.
        PostNotFoundError: If the store has no post with this title.
    """
    target = Stage(target)
    if not can_transition(post.stage, target):
        raise InvalidTransitionError(post.title, post.stage, target.value)
    if date_field is None:
        _, date_field = TRANSITIONS[target]

    renderer = TemplateRenderer(config)
    old_file = renderer.output_path(post, post.stage)

    ts = timestamp or timestamp_now()
    post.stage = target.value
    post.stamp(date_field, ts)
    post.link = renderer.write(post, target)

    if old_file.exists():
        old_file.unlink()
    else:
        logger.debug("No previous file to remove at %s", old_file)

    posts = load_posts(config.store_path)
    replace_post(posts, post)
    save_posts(posts, config.store_path)

    logger.info("Moved %r to %s: %s", post.title, target.value, post.link)
    return post


def transition_by_title(
    config: GardenConfig,
    title: str,
    target: Stage | str,
    *,
    timestamp: str | None = None,
) -> Post:
    """Look a post up by exact title and transition it."""
    post = find_post(load_posts(config.store_path), title)
    if post is None:
        raise PostNotFoundError(title)
    return transition(config, post, target, timestamp=timestamp)


def grow(config: GardenConfig, post: Post, **kwargs: str | None) -> Post:
    return transition(config, post, Stage.GROWING, **kwargs)


def harvest(config: GardenConfig, post: Post, **kwargs: str | None) -> Post:
    return transition(config, post, Stage.HARVESTED, **kwargs)


def abandon(config: GardenConfig, post: Post, **kwargs: str | None) -> Post:
    return transition(config, post, Stage.ABANDONED, **kwargs)


def candidates(posts: list[Post], target: Stage | str) -> list[Post]:
    """Posts that may move to ``target``, in store order."""
    sources, _ = TRANSITIONS[Stage(target)]
    return posts_in_stage(posts, *sources)
