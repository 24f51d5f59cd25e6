"""Build-time content transforms and post enhancements."""

from blogsmith.config.models import BlogsmithConfig

from .emoji import RemoveEmojis
from .pipeline import Transform, TransformPipeline


def build_pipeline(config: BlogsmithConfig) -> TransformPipeline:
    """Emoji filter first, then diagram tags, as enabled in config."""
    from blogsmith.diagrams.tags import DiagramTagProcessor

    transforms: list[Transform] = []
    if config.filters.remove_emojis:
        transforms.append(RemoveEmojis())
    if config.filters.diagram_tags:
        transforms.append(DiagramTagProcessor(config.diagrams))
    return TransformPipeline(transforms)


__all__ = [
    "RemoveEmojis",
    "Transform",
    "TransformPipeline",
    "build_pipeline",
]
