"""Tests for content models: records, themes and site settings."""

import json

import pytest
from pydantic import ValidationError

from folio.content.models import Post, Project, RecordKind, SiteSettings, Theme


class TestRecords:
    def test_new_post_is_draft_without_slug(self):
        post = Post(title="Hello")
        assert post.draft is True
        assert post.slug is None
        assert post.is_published is False

    def test_ids_are_unique(self):
        assert Post().id != Post().id

    def test_published_requires_slug(self):
        assert Post(draft=False).is_published is False
        assert Post(draft=False, slug="hello").is_published is True

    def test_kind_is_class_level(self):
        assert Post.kind == RecordKind.POST
        assert Project.kind == RecordKind.PROJECT
        assert "kind" not in Post().model_dump()

    def test_timestamps_are_tz_aware(self):
        post = Post()
        assert post.created_at.tzinfo is not None
        assert post.published_at.tzinfo is not None

    def test_image_round_trips_as_base64(self):
        post = Post(title="Pic", image=b"\x89PNG\r\n\x1a\nrest")
        raw = json.loads(post.model_dump_json())
        assert isinstance(raw["image"], str)
        assert Post.model_validate_json(post.model_dump_json()).image == post.image

    def test_project_defaults(self):
        project = Project(title="Tool")
        assert project.technologies == []
        assert project.display_order == 0
        assert project.url == ""


class TestTheme:
    def test_values_match_display_names(self):
        assert Theme("Dark Bold") is Theme.DARK_BOLD

    @pytest.mark.parametrize("theme", list(Theme))
    def test_every_theme_has_palette(self, theme: Theme):
        assert theme.background_color.startswith("#")
        assert theme.text_color.startswith("#")
        assert theme.default_accent_color.startswith("#")
        assert theme.font_family
        assert theme.max_width

    def test_light_and_dark_backgrounds_differ(self):
        assert Theme.LIGHT_MINIMAL.is_light
        assert not Theme.DARK_MINIMAL.is_light
        assert Theme.LIGHT_MINIMAL.background_color != Theme.DARK_MINIMAL.background_color

    def test_bold_weight(self):
        assert Theme.LIGHT_BOLD.is_bold
        assert Theme.LIGHT_BOLD.font_weight != Theme.LIGHT_MINIMAL.font_weight


class TestSiteSettings:
    def test_defaults(self):
        settings = SiteSettings()
        assert settings.site_name == "NG Web Portal"
        assert settings.author == "John Q Public"
        assert settings.theme is Theme.LIGHT_MINIMAL
        assert settings.landing_page == "home"
        assert settings.output_directory == "./site"
        assert settings.server_port == 8080

    def test_effective_accent_falls_back_to_theme(self):
        settings = SiteSettings(theme=Theme.DARK_BOLD)
        assert settings.effective_accent == Theme.DARK_BOLD.default_accent_color

    def test_effective_accent_uses_override(self):
        assert SiteSettings(accent_color="#ff0000").effective_accent == "#ff0000"

    @pytest.mark.parametrize("value", ["#abc", "#A1B2C3", ""])
    def test_accepts_valid_accent(self, value: str):
        SiteSettings(accent_color=value)

    @pytest.mark.parametrize("value", ["red", "#12", "#1234567", "abc123"])
    def test_rejects_invalid_accent(self, value: str):
        with pytest.raises(ValidationError):
            SiteSettings(accent_color=value)

    def test_rejects_out_of_range_port(self):
        with pytest.raises(ValidationError):
            SiteSettings(server_port=70000)

    def test_rejects_unknown_landing_page(self):
        with pytest.raises(ValidationError):
            SiteSettings(landing_page="portfolio")
