"""Pydantic models for post scaffolding."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class PostOptions(BaseModel):
    """What the author asked for on the command line."""

    title: str
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    author: str | None = None
    template: str | None = None

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be blank")
        return v.strip()

    @field_validator("categories", "tags", mode="before")
    @classmethod
    def _split_csv(cls, v: object) -> object:
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v


class PostExistsError(Exception):
    """Raised when the target post file is already on disk."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Post already exists at {path}")
