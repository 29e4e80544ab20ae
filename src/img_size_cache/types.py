"""Shared Pydantic models for img-size-cache."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PositiveInt

# ── Data models ──


class ImageSize(BaseModel):
    """Intrinsic pixel dimensions of an image."""

    model_config = ConfigDict(frozen=True)

    width: PositiveInt
    height: PositiveInt

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


class CacheRecord(BaseModel):
    """One persisted cache entry: a reference and its dimensions.

    Files written by older tooling name the reference ``url``; both keys
    are accepted on read, ``reference`` is always written.
    """

    reference: str = Field(validation_alias=AliasChoices("reference", "url"))
    width: PositiveInt
    height: PositiveInt

    @property
    def size(self) -> ImageSize:
        return ImageSize(width=self.width, height=self.height)


# Reference -> dimensions, as held in memory for one run
ImageSizeCache = dict[str, ImageSize]


# ── Runtime models ──


class ImageNode(BaseModel):
    """An image reference surfaced by a document walk.

    The annotator fills in ``width``/``height``; nodes it cannot size are
    left untouched.
    """

    src: str
    alt: str = ""
    title: str | None = None
    width: int | None = None
    height: int | None = None

    @property
    def annotated(self) -> bool:
        return self.width is not None and self.height is not None

    def apply(self, size: ImageSize) -> None:
        self.width = size.width
        self.height = size.height


class AnnotationReport(BaseModel):
    """Per-run counters returned by the annotator."""

    total: int = 0
    skipped: int = 0
    from_cache: int = 0
    resolved: int = 0
    failed: int = 0
    cache_updated: bool = False
    failed_references: list[str] = Field(default_factory=list)

    @property
    def annotated(self) -> int:
        return self.from_cache + self.resolved


class AnnotatedDocument(BaseModel):
    """Annotated document text plus the run report."""

    text: str
    report: AnnotationReport = Field(default_factory=AnnotationReport)
    images: list[ImageNode] = Field(default_factory=list)

    def save(self, path: str | Path) -> Path:
        """Write the annotated text to ``path``, creating parent directories."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.text, encoding="utf-8")
        return path
