"""Pydantic model for annotator options."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, field_validator

from img_size_cache.config.defaults import (
    DEFAULT_CACHE_FILE,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_PROCESS_REMOTE_IMAGES,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_USER_AGENT,
)


class AnnotatorOptions(BaseModel):
    """Options exposed to the embedding pipeline.

    ``cache_file_path`` is made absolute against the working directory when
    the options are built, so a later ``chdir`` does not move the cache.
    ``base_dir`` is where relative local references are looked up; None
    means the working directory at resolution time.
    """

    model_config = ConfigDict(extra="ignore")

    cache_file_path: Path = Field(default_factory=lambda: DEFAULT_CACHE_FILE)
    process_remote_images: bool = DEFAULT_PROCESS_REMOTE_IMAGES
    request_timeout: PositiveFloat = DEFAULT_REQUEST_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    base_dir: Path | None = None
    max_concurrency: PositiveInt = DEFAULT_MAX_CONCURRENCY

    @field_validator("cache_file_path", mode="after")
    @classmethod
    def _absolute_cache_path(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @field_validator("base_dir", mode="after")
    @classmethod
    def _expand_base_dir(cls, value: Path | None) -> Path | None:
        return value.expanduser() if value is not None else None
