"""Generates new dated post files from markdown templates."""

from __future__ import annotations

import json
import logging
import re
import shlex
import subprocess
from datetime import date, datetime, timezone
from pathlib import Path

from blogsmith.config.models import PostConfig
from blogsmith.scaffold.models import PostExistsError, PostOptions

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = """\
---
layout: post
title: "{{TITLE}}"
date: {{DATE}}
categories: {{CATEGORIES}}
tags: {{TAGS}}
author: {{AUTHOR}}
description: "{{DESCRIPTION}}"
---

# {{TITLE}}

## Introduction

Write your introduction here.

## Main Content

### Section 1

Add your content here.

### Section 2

Add more content here.

## Conclusion

Summarize your post here.
"""


def slugify(title: str) -> str:
    """My New Post! -> my-new-post"""
    slug = title.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def format_yaml_array(items: list[str]) -> str:
    """Inline YAML flow sequence of quoted strings."""
    return json.dumps(items, ensure_ascii=False)


def describe(title: str) -> str:
    return (
        f"A comprehensive guide to {title.lower()}. Learn about best practices, "
        "implementation details, and real-world examples."
    )


class PostGenerator:
    """Creates ``<posts_dir>/<YYYY-MM-DD>-<slug>.md`` from a template."""

    def __init__(self, config: PostConfig | None = None) -> None:
        self.config = config or PostConfig()
        self.posts_dir = Path(self.config.posts_dir)
        self.templates_dir = Path(self.config.templates_dir)

    def post_path(self, options: PostOptions, today: date | None = None) -> Path:
        today = today or date.today()
        return self.posts_dir / f"{today.strftime('%Y-%m-%d')}-{slugify(options.title)}.md"

    def load_template(self, name: str | None) -> str:
        template_path = self.templates_dir / f"{name or self.config.template}.md"
        if template_path.is_file():
            return template_path.read_text(encoding="utf-8")
        logger.debug("Template %s not found, using built-in default", template_path)
        return DEFAULT_TEMPLATE

    def generate_content(self, options: PostOptions, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        replacements = {
            "{{TITLE}}": options.title,
            "{{DATE}}": now.strftime("%Y-%m-%d %H:%M:%S +0000"),
            "{{AUTHOR}}": options.author or self.config.author,
            "{{CATEGORIES}}": format_yaml_array(options.categories),
            "{{TAGS}}": format_yaml_array(options.tags),
            "{{SLUG}}": slugify(options.title),
            "{{DESCRIPTION}}": describe(options.title),
        }
        content = self.load_template(options.template)
        for placeholder, value in replacements.items():
            content = content.replace(placeholder, value)
        return content

    def create(self, options: PostOptions, now: datetime | None = None) -> Path:
        """Write the new post. Raises PostExistsError rather than overwrite."""
        now = now or datetime.now(timezone.utc)
        dest = self.post_path(options, now.date())
        if dest.exists():
            raise PostExistsError(dest)

        content = self.generate_content(options, now)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(content, encoding="utf-8")
        logger.info("wrote %s (%d bytes)", dest, len(content))
        return dest


def open_in_editor(path: Path, editor: str | None) -> int | None:
    """Launch ``editor`` on ``path``; returns its exit code, or None if no editor."""
    if not editor:
        return None
    cmd = [*shlex.split(editor), str(path)]
    logger.debug("Launching editor: %s", cmd)
    return subprocess.run(cmd, check=False).returncode
