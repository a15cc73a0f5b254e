"""Configuration settings using Pydantic Settings.

Usage:
    from blockworld.config import CodecSettings, load_registry

    # Load from environment variables (BLOCKWORLD_*)
    settings = CodecSettings()

    # Or override with explicit values
    settings = CodecSettings(border_block="basic_black", registry_path="blocks.json")
    registry = load_registry(settings)
    world = World(64, 64, registry, border_block=settings.border_block)
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from blockworld.core.registry import LocalRegistry
from blockworld.world.world import DEFAULT_BORDER_BLOCK


class CodecSettings(BaseSettings):  # type: ignore[misc]
    """Application-level configuration for worlds and codecs.

    Codecs never read these on their own; callers pass the values in
    explicitly, so the wire formats do not depend on the environment.

    Attributes:
        border_block: Block name placed on the outer edge by ``World.clear(border=True)``.
        registry_path: Registry file loaded by ``load_registry`` (None for sentinel only).

    Environment Variables:
        BLOCKWORLD_BORDER_BLOCK
        BLOCKWORLD_REGISTRY_PATH
    """

    model_config = SettingsConfigDict(
        env_prefix="BLOCKWORLD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    border_block: str = DEFAULT_BORDER_BLOCK
    registry_path: Path | None = None


def load_registry(settings: CodecSettings | None = None) -> LocalRegistry:
    """Build the registry named by settings.

    Returns:
        Registry loaded from ``registry_path``, or one holding only the empty block.
    """
    settings = settings or CodecSettings()
    if settings.registry_path is None:
        return LocalRegistry()
    return LocalRegistry.from_file(settings.registry_path)
