from .loader import load_config
from .models import (
    BlogsmithConfig,
    DiagramConfig,
    FilterConfig,
    LifecycleConfig,
    PostConfig,
    ThemeConfig,
)

__all__ = [
    "BlogsmithConfig",
    "DiagramConfig",
    "FilterConfig",
    "LifecycleConfig",
    "PostConfig",
    "ThemeConfig",
    "load_config",
]
