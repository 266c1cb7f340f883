"""Configuration management for nbframe."""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ImageProtocol = Literal["auto", "halfblock", "kitty", "iterm", "none"]


class NbframeConfig(BaseSettings):
    """Application configuration loaded from environment variables.

    Environment variables should be prefixed with NBFRAME_
    Example: NBFRAME_IMAGE_PROTOCOL=kitty

    Attributes:
        code_theme: Pygments theme used for fenced code blocks
        image_protocol: Terminal graphics protocol for inline images
        image_margin: Columns kept free on the right of an image
        width: Override of the detected terminal width
        height: Override of the detected terminal height
        border_style: Rich style applied to the frame glyphs
    """

    # Rendering
    code_theme: str = Field(
        default="monokai",
        description="Pygments theme for code cells",
    )
    border_style: str = Field(
        default="color(238)",
        description="Rich style for box-drawing glyphs",
    )

    # Images
    image_protocol: ImageProtocol = Field(
        default="auto",
        description="Graphics protocol (auto-detected by default)",
    )
    image_margin: int = Field(
        default=2,
        ge=0,
        le=20,
        description="Columns subtracted from the content column for images",
    )

    # Terminal geometry
    width: Optional[int] = Field(
        default=None,
        ge=10,
        description="Terminal width override",
    )
    height: Optional[int] = Field(
        default=None,
        ge=2,
        description="Terminal height override",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="NBFRAME_",
        case_sensitive=False,
        extra="ignore",
    )


# Global config instance (lazy-loaded)
_config: NbframeConfig | None = None


def get_config() -> NbframeConfig:
    """Get or create the global configuration instance.

    Returns:
        NbframeConfig: The configuration object
    """
    global _config
    if _config is None:
        _config = NbframeConfig()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
