"""Process configuration loaded from .folio.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.

This covers where content and output live and how the server binds.
Site appearance is stored with the content as ``SiteSettings``.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from folio.content.models import SiteSettings

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".folio.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "folio" / "config.toml"


class ContentConfig(BaseModel):
    """[content] section."""

    directory: str = "./content"


class OutputConfig(BaseModel):
    """[output] section.

    An empty directory defers to ``SiteSettings.output_directory``.
    """

    directory: str = ""


class ServerConfig(BaseModel):
    """[server] section."""

    host: str = "127.0.0.1"
    port: int | None = Field(default=None, ge=0, le=65535)


class IndexConfig(BaseModel):
    """[index] section."""

    page_size: int | None = Field(default=None, ge=1)


class SlugsConfig(BaseModel):
    """[slugs] section."""

    max_attempts: int = Field(default=100, ge=1)


class FolioConfig(BaseModel):
    """Top-level configuration model."""

    content: ContentConfig = Field(default_factory=ContentConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    slugs: SlugsConfig = Field(default_factory=SlugsConfig)

    def output_dir(self, settings: SiteSettings) -> Path:
        """Site root: the [output] override, else the stored setting.

        Relative paths are taken from the content directory so the store
        and its site travel together.
        """
        raw = Path(self.output.directory or settings.output_directory)
        if raw.is_absolute():
            return raw
        return Path(self.content.directory) / raw

    def server_port(self, settings: SiteSettings) -> int:
        return self.server.port if self.server.port is not None else settings.server_port


def load_config(path: str | Path | None = None) -> FolioConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .folio.toml in CWD
    3. ~/.config/folio/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged FolioConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = FolioConfig.model_validate(data) if data else FolioConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: FolioConfig, **cli_kwargs: object) -> FolioConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only values that are not ``None`` override.  Keys are the section and
    field joined by an underscore (``content_directory``, ``server_port``).
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "content_directory": ("content", "directory"),
        "output_directory": ("output", "directory"),
        "server_host": ("server", "host"),
        "server_port": ("server", "port"),
        "page_size": ("index", "page_size"),
    }

    for key, value in cli_kwargs.items():
        if value is None:
            continue
        if key in mapping:
            section, field = mapping[key]
            data[section][field] = value
        else:
            logger.debug("Ignoring unknown CLI override %s", key)

    return FolioConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: FolioConfig) -> FolioConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "FOLIO_CONTENT_DIR": ("content", "directory"),
        "FOLIO_OUTPUT_DIR": ("output", "directory"),
        "FOLIO_HOST": ("server", "host"),
    }
    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    # Integer-valued env vars
    for env_var, (section, field) in {
        "FOLIO_PORT": ("server", "port"),
        "FOLIO_PAGE_SIZE": ("index", "page_size"),
    }.items():
        raw = os.environ.get(env_var)
        if raw is None or not raw.strip():
            continue
        try:
            data[section][field] = int(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", env_var, raw)

    return FolioConfig.model_validate(data)
