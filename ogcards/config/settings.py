"""
Build Settings
==============

Main build settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json
from pathlib import Path


class Settings(BaseSettings):
    """Build settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="ogcards", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Site Identity
    site_title: str = Field(default="My Site", description="Site title")
    site_owner: str = Field(default="Site Owner", description="Name used in archive card titles")
    site_url: str = Field(default="http://localhost:4000", description="Absolute site URL")
    site_description: str = Field(default="", description="Default meta description")

    # Paths
    source_path: Path = Field(default=Path("."), description="Site source directory")
    destination_path: Path = Field(default=Path("_site"), description="Site output directory")
    stylesheet_path: Path = Field(
        default=Path("assets/css/main.scss"), description="Shared stylesheet, relative to source"
    )
    image_root: Path = Field(
        default=Path("assets/images/open-graph"),
        description="Directory captured preview images are written to, relative to source",
    )
    preview_staging_path: Path = Field(
        default=Path(".ogcards/preview-pages"),
        description="Render root for preview pages in production, relative to source",
    )
    log_path: Optional[Path] = Field(default=None, description="Optional log directory")

    # Preview Pages
    og_image_prefix: str = Field(
        default="assets/images/open-graph", description="Logical prefix written into og_image"
    )
    preview_directory: str = Field(default="open-graph", description="Preview page output directory")
    preview_layout: str = Field(default="open-graph", description="Layout used by preview pages")
    preview_selector: str = Field(default="#open-graph-card", description="Captured DOM region")
    preview_page_extensions: List[str] = Field(
        default=[".md"], description="Static page extensions that receive a preview page"
    )

    # Styles
    sass_output_style: str = Field(default="compressed", description="libsass output style")

    # Browser Configuration
    viewport_width: int = Field(default=1200, description="Capture viewport width")
    viewport_height: int = Field(default=630, description="Capture viewport height")
    device_scale_factor: float = Field(default=1.0, description="Capture device scale factor")
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    playwright_timeout: int = Field(default=30000, description="Playwright timeout in milliseconds")
    capture_settle_delay: float = Field(
        default=1.0, ge=0.0, description="Seconds to wait for web fonts before capturing"
    )
    optimize_png: bool = Field(default=False, description="Re-encode captures with Pillow")
    capture_continue_on_error: bool = Field(
        default=False, description="Finish the capture batch before reporting failures"
    )

    # Monitoring Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("sass_output_style")
    @classmethod
    def validate_sass_output_style(cls, v: str) -> str:
        """Validate libsass output style."""
        allowed = {"nested", "expanded", "compact", "compressed"}
        if v not in allowed:
            raise ValueError(f"Sass output style must be one of: {allowed}")
        return v

    @field_validator("preview_page_extensions", mode="before")
    @classmethod
    def parse_extensions(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse extensions from string or list."""
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [ext.strip() for ext in v.split(",") if ext.strip()]
        return v

    @field_validator("site_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def resolve(self, path: Path) -> Path:
        """Resolve a path against the source directory unless it is absolute."""
        return path if path.is_absolute() else self.source_path / path

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="OGCARDS_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings(**overrides) -> Settings:
    """Reload settings from environment, applying keyword overrides."""
    global settings
    settings = Settings(**overrides)
    return settings
