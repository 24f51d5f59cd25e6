"""blogsmith: diagram tags, content filters, post enhancements and post scaffolding."""

from blogsmith.config import BlogsmithConfig, load_config
from blogsmith.content import TransformPipeline, build_pipeline
from blogsmith.diagrams import DiagramLifecycleManager, DiagramTagProcessor, decode, encode
from blogsmith.scaffold import PostGenerator

__version__ = "0.1.0"

__all__ = [
    "BlogsmithConfig",
    "DiagramLifecycleManager",
    "DiagramTagProcessor",
    "PostGenerator",
    "TransformPipeline",
    "build_pipeline",
    "decode",
    "encode",
    "load_config",
]
