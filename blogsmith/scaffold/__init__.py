"""Scaffolding for new blog posts."""

from blogsmith.scaffold.generator import PostGenerator, open_in_editor, slugify
from blogsmith.scaffold.models import PostExistsError, PostOptions

__all__ = [
    "PostExistsError",
    "PostGenerator",
    "PostOptions",
    "open_in_editor",
    "slugify",
]
