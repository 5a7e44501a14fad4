"""Garden domain models -- pure Pydantic v2 data types.

A post moves through the editorial lifecycle seed → growing →
harvested, or is abandoned from seed or growing. No I/O lives here;
services import from this module.
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Stage(StrEnum):
    """Lifecycle stage of a post."""

    SEED = "seed"
    GROWING = "growing"
    HARVESTED = "harvested"
    ABANDONED = "abandoned"


# Stage -> (stages it may be entered from, date field stamped on entry)
TRANSITIONS: dict[Stage, tuple[frozenset[Stage], str]] = {
    Stage.GROWING: (frozenset({Stage.SEED}), "growingStarted"),
    Stage.HARVESTED: (frozenset({Stage.GROWING}), "harvestedOn"),
    Stage.ABANDONED: (frozenset({Stage.SEED, Stage.GROWING}), "abandonedOn"),
}

DATE_FIELDS = ("planted", "growingStarted", "harvestedOn", "abandonedOn", "lastUpdated")

_WHITESPACE_RE = re.compile(r"\s+")


def slugify(title: str) -> str:
    """Lower-case the title and replace each whitespace run with a hyphen."""
    return _WHITESPACE_RE.sub("-", title.lower())


def post_filename(title: str) -> str:
    return slugify(title) + ".html"


def can_transition(current: Stage | str, target: Stage | str) -> bool:
    """Check whether the state machine allows ``current -> target``."""
    try:
        sources, _ = TRANSITIONS[Stage(target)]
        return Stage(current) in sources
    except (KeyError, TypeError, ValueError):
        return False


class PostDates(BaseModel):
    """Lifecycle timestamps, kept exactly as written.

    Values are normally ISO-8601 strings, but hand-edited stores may hold
    anything; they are carried through untouched. Field names keep the
    camelCase spelling of the JSON store.
    """

    model_config = ConfigDict(extra="allow")

    planted: Any = None
    growingStarted: Any = None  # noqa: N815
    harvestedOn: Any = None  # noqa: N815
    abandonedOn: Any = None  # noqa: N815
    lastUpdated: Any = None  # noqa: N815

    @classmethod
    def planted_at(cls, timestamp: str) -> PostDates:
        """Dates for a new seed: every field present, only planted/lastUpdated set."""
        return cls(
            planted=timestamp,
            growingStarted=None,
            harvestedOn=None,
            abandonedOn=None,
            lastUpdated=timestamp,
        )

    def stamp(self, field: str, timestamp: str) -> None:
        """Set ``field`` and ``lastUpdated`` to the same instant."""
        setattr(self, field, timestamp)
        self.lastUpdated = timestamp


class Post(BaseModel):
    """A single garden post -- one object in the JSON store.

    Field shapes are not validated, so a hand-edited record loads and
    saves back as written. Unknown keys survive a load/save cycle, and
    keys a record never had are not added (see ``to_record``).
    """

    model_config = ConfigDict(extra="allow")

    title: Any = None
    stage: Any = Stage.SEED.value
    tags: Any = Field(default_factory=list)
    content: Any = ""
    links: Any = Field(default_factory=list)
    dates: PostDates = Field(default_factory=PostDates)
    link: Any = ""

    @property
    def title_text(self) -> str:
        return "" if self.title is None else str(self.title)

    @property
    def slug(self) -> str:
        return slugify(self.title_text)

    @property
    def filename(self) -> str:
        return post_filename(self.title_text)

    def to_record(self) -> dict[str, Any]:
        """JSON-ready dict holding only the keys this post actually has."""
        return self.model_dump(mode="json", exclude_unset=True)

    def stamp(self, field: str, timestamp: str) -> None:
        """Stamp a lifecycle date and ``lastUpdated`` with one instant."""
        dates = self.dates
        dates.stamp(field, timestamp)
        # Reassign so a record loaded without "dates" still writes them out.
        self.dates = dates

    def touch(self, timestamp: str) -> None:
        """Refresh ``lastUpdated`` only."""
        dates = self.dates
        dates.lastUpdated = timestamp
        self.dates = dates
