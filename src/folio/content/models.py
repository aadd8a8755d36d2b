"""Content domain models: pure Pydantic v2 data types.

Posts and projects start life as drafts and are promoted to published
by the orchestrator, which also freezes their slug.  SiteSettings is a
singleton holding everything that styles or names the generated site.
No I/O lives here.
"""

from __future__ import annotations

import re
import uuid
from datetime import UTC, datetime
from enum import StrEnum
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(tz=UTC)


class RecordKind(StrEnum):
    """Kinds of records that own generated artifacts."""

    POST = "post"
    PROJECT = "project"


class Theme(StrEnum):
    """Visual themes for the generated site."""

    LIGHT_MINIMAL = "Light Minimal"
    LIGHT_BOLD = "Light Bold"
    DARK_MINIMAL = "Dark Minimal"
    DARK_BOLD = "Dark Bold"

    @property
    def is_light(self) -> bool:
        return self in (Theme.LIGHT_MINIMAL, Theme.LIGHT_BOLD)

    @property
    def is_bold(self) -> bool:
        return self in (Theme.LIGHT_BOLD, Theme.DARK_BOLD)

    @property
    def background_color(self) -> str:
        return {
            Theme.LIGHT_MINIMAL: "#FFFFFF",
            Theme.LIGHT_BOLD: "#F5F5F5",
            Theme.DARK_MINIMAL: "#1A1A1A",
            Theme.DARK_BOLD: "#0D0D0D",
        }[self]

    @property
    def text_color(self) -> str:
        return "#1A1A1A" if self.is_light else "#F5F5F5"

    @property
    def default_accent_color(self) -> str:
        return {
            Theme.LIGHT_MINIMAL: "#007AFF",
            Theme.LIGHT_BOLD: "#FF3B30",
            Theme.DARK_MINIMAL: "#0A84FF",
            Theme.DARK_BOLD: "#FF453A",
        }[self]

    @property
    def font_family(self) -> str:
        if self.is_bold:
            return "'Helvetica Neue', Helvetica, Arial, sans-serif"
        return "-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif"

    @property
    def font_weight(self) -> str:
        return "600" if self.is_bold else "400"

    @property
    def max_width(self) -> str:
        return "1200px" if self.is_bold else "800px"


class _Record(BaseModel):
    """Fields shared by every publishable record."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: str = Field(default_factory=_new_id)
    title: str = ""
    subtitle: str = ""
    image: bytes | None = None
    draft: bool = True
    slug: str | None = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def is_published(self) -> bool:
        return not self.draft and bool(self.slug)


class Post(_Record):
    """A blog post.  ``body`` is an already-converted markup fragment."""

    body: str = ""
    author: str = ""
    published_at: datetime = Field(default_factory=_now)

    kind: ClassVar[RecordKind] = RecordKind.POST


class Project(_Record):
    """A portfolio entry.  ``description`` is an already-converted markup fragment."""

    description: str = ""
    technologies: list[str] = Field(default_factory=list)
    url: str = ""
    display_order: int = 0

    kind: ClassVar[RecordKind] = RecordKind.PROJECT


class SiteSettings(BaseModel):
    """Site-wide naming, styling and serving options."""

    site_name: str = "NG Web Portal"
    tagline: str = "Welcome to my website"
    author: str = "John Q Public"
    theme: Theme = Theme.LIGHT_MINIMAL
    accent_color: str = ""
    blog_title: str = "Blog"
    blog_tagline: str = "Thoughts, stories, and ideas"
    home_hero_title: str = "Your Site, Your Way"
    home_hero_subtitle: str = "Share your thoughts, stories, and ideas with the world."
    home_cta_text: str = "Read the Blog"
    about_title: str = "About Me"
    about_content: str = "This is your about page. Edit it to tell your story!"
    portfolio_title: str = "Portfolio"
    portfolio_tagline: str = "Selected work and projects"
    landing_page: Literal["home", "blog"] = "home"
    output_directory: str = "./site"
    server_port: int = Field(default=8080, ge=0, le=65535)

    @field_validator("accent_color")
    @classmethod
    def _check_accent(cls, value: str) -> str:
        value = value.strip()
        if value and not _HEX_COLOR.match(value):
            raise ValueError(f"accent_color must be #RGB or #RRGGBB, got {value!r}")
        return value

    @property
    def effective_accent(self) -> str:
        """The configured accent color, or the theme's default."""
        return self.accent_color or self.theme.default_accent_color
