"""Locate, read and validate blogsmith.yaml."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import BlogsmithConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "blogsmith.yaml"
CONFIG_ENV_VAR = "BLOGSMITH_CONFIG"

# ${VAR} or ${VAR:-fallback}
_ENV_REF = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def config_search_path(cli_path: str | None = None) -> list[Path]:
    """Candidate files, highest priority first.

    --config flag, then $BLOGSMITH_CONFIG, then ./blogsmith.yaml, then
    ~/.blogsmith/config.yaml.
    """
    candidates = [cli_path, os.environ.get(CONFIG_ENV_VAR)]
    paths = [Path(c).expanduser() for c in candidates if c]
    paths.append(Path(".") / CONFIG_FILENAME)
    paths.append(Path.home() / ".blogsmith" / "config.yaml")
    return paths


def load_config(cli_path: str | None = None) -> BlogsmithConfig:
    """Load the first non-empty config file on the search path, else defaults.

    Raises ValueError for unreadable YAML, a non-mapping document, or values
    the models reject.
    """
    for path in config_search_path(cli_path):
        if not path.is_file():
            continue
        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if raw is None:
            continue
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid config in {path}: top level must be a mapping")
        try:
            config = BlogsmithConfig(**_expand_env_vars(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid config in {path}: {e}") from e
        logger.debug("Loaded config from %s", path)
        return config

    return BlogsmithConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} and ${VAR:-fallback} in strings."""
    if isinstance(obj, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1)) or (m.group(2) or ""), obj)
    if isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `blogsmith config init`
DEFAULT_CONFIG_TEMPLATE = """\
# blogsmith.yaml

# Diagram rendering service
diagrams:
  kroki_url: "https://kroki.io"
  output_format: "svg"         # svg | png
  default_dialect: "plantuml"
  timeout: 10.0

# Client-side diagram lifecycle
lifecycle:
  root_margin: 50              # pre-fetch margin in px
  threshold: 0.1               # minimum visible fraction
  notification_seconds: 3.0
  download_dir: "."

# Diagram text colours per theme
theme:
  attribute: "data-mode"
  light_text: "#1f2937"
  dark_text: "#f9fafb"
  light_note: "#374151"
  dark_note: "#e5e7eb"

# Post scaffolding
posts:
  posts_dir: "_posts"
  templates_dir: "_templates"
  author: "Anonymous"          # or "${BLOG_AUTHOR}"
  template: "default"          # default | technical | tutorial | review
  open_editor: true
  words_per_minute: 200

# Content filters
filters:
  remove_emojis: true
  diagram_tags: true

# Logging
log_level: "info"              # debug | info | warn | error
"""
