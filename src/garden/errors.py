"""Exception taxonomy and per-run reports for garden operations."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class GardenError(Exception):
    """Base class for errors reported to the operator."""


class StoreCorruptError(GardenError):
    """The store file exists but does not hold a JSON array of posts."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Post store at {path} is unreadable: {reason}")
        self.path = path


class TemplateNotFoundError(GardenError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Template not found: {path}")
        self.path = path


class PostNotFoundError(GardenError):
    """No post in the store has the requested title."""

    def __init__(self, title: str) -> None:
        super().__init__(f'No post titled "{title}" in the store')
        self.title = title


class InvalidTransitionError(GardenError):
    def __init__(self, title: str, current: str, target: str) -> None:
        super().__init__(f'Cannot move "{title}" from {current} to {target}')
        self.title = title
        self.current = current
        self.target = target


class SkippedFile(BaseModel):
    """A rendered file that sync left alone, and why."""

    path: str
    reason: str
    title: str = ""


class SyncReport(BaseModel):
    """Outcome of one HTML→store sync run.

    One bad file never aborts the batch; it is recorded here instead.
    """

    synced: list[str] = Field(default_factory=list)
    skipped: list[SkippedFile] = Field(default_factory=list)
    markers_updated: list[str] = Field(default_factory=list)

    def add_skip(self, path: Path, reason: str, title: str = "") -> None:
        self.skipped.append(SkippedFile(path=str(path), reason=reason, title=title))

    @property
    def scanned(self) -> int:
        return len(self.synced) + len(self.skipped)

    @property
    def has_skips(self) -> bool:
        return bool(self.skipped)
