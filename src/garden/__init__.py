"""Digital garden -- posts that grow from seed to harvest.

Posts live in a JSON store and are rendered to one static HTML file
each, in the directory for their current stage. Operator edits made in
the HTML can be synced back into the store.
"""

from garden.config import GardenConfig, load_config
from garden.errors import (
    GardenError,
    InvalidTransitionError,
    PostNotFoundError,
    StoreCorruptError,
    SyncReport,
    TemplateNotFoundError,
)
from garden.lifecycle import abandon, grow, harvest, plant, transition
from garden.models import Post, PostDates, Stage, slugify
from garden.render import TemplateRenderer
from garden.store import load_posts, save_posts

__version__ = "0.1.0"

__all__ = [
    "GardenConfig",
    "GardenError",
    "InvalidTransitionError",
    "Post",
    "PostDates",
    "PostNotFoundError",
    "Stage",
    "StoreCorruptError",
    "SyncReport",
    "TemplateNotFoundError",
    "TemplateRenderer",
    "__version__",
    "abandon",
    "grow",
    "harvest",
    "load_config",
    "load_posts",
    "plant",
    "save_posts",
    "slugify",
    "transition",
]
