from pydantic import BaseModel, Field
from typing import Literal


class DiagramConfig(BaseModel):
    kroki_url: str = "https://kroki.io"
    output_format: Literal["svg", "png"] = "svg"
    default_dialect: str = "plantuml"
    timeout: float = Field(default=10.0, gt=0)


class LifecycleConfig(BaseModel):
    root_margin: float = Field(default=50.0, ge=0)
    threshold: float = Field(default=0.1, ge=0, le=1)
    notification_seconds: float = Field(default=3.0, gt=0)
    download_dir: str = "."


class ThemeConfig(BaseModel):
    attribute: str = "data-mode"
    light_text: str = "#1f2937"
    dark_text: str = "#f9fafb"
    light_note: str = "#374151"
    dark_note: str = "#e5e7eb"
    font_weight: str = "500"
    note_font_size: str = "12px"


class PostConfig(BaseModel):
    posts_dir: str = "_posts"
    templates_dir: str = "_templates"
    author: str = "Anonymous"
    template: str = "default"
    open_editor: bool = True
    words_per_minute: int = Field(default=200, gt=0)


class FilterConfig(BaseModel):
    remove_emojis: bool = True
    diagram_tags: bool = True


class BlogsmithConfig(BaseModel):
    diagrams: DiagramConfig = Field(default_factory=DiagramConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    posts: PostConfig = Field(default_factory=PostConfig)
    filters: FilterConfig = Field(default_factory=FilterConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "info"
