"""Configuration module using Pydantic Settings.

Provides typed configuration for worlds and codecs with environment variable support.

Usage:
    from blockworld.config import CodecSettings

    settings = CodecSettings(border_block="basic_black")
"""

from blockworld.config.settings import CodecSettings, load_registry

__all__ = [
    "CodecSettings",
    "load_registry",
]
