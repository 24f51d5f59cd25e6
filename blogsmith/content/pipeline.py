"""Ordered transforms run on post content before rendering."""

from abc import ABC, abstractmethod


class Transform(ABC):
    @abstractmethod
    def apply(self, content: str, metadata: dict) -> str:
        """Transform post content. metadata carries front matter plus ``output_ext``."""
        ...


class TransformPipeline:
    def __init__(self, transforms: list[Transform]):
        self.transforms = transforms

    def apply(self, content: str, metadata: dict) -> str:
        for t in self.transforms:
            content = t.apply(content, metadata)
        return content
