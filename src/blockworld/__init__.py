"""BlockWorld: two-layer tile worlds with binary and text codecs.

Usage:
    from blockworld import BinaryCodec, Layer, LocalRegistry, TextCodec, World

    registry = LocalRegistry()
    registry.register("basic_gray", 9)

    world = BinaryCodec(registry).decode(payload, width=50, height=50)
    world.place(1, 1, Layer.FOREGROUND, "basic_gray")

    document = TextCodec(registry).encode(world, {"name": "Arena"})
"""

__version__ = "0.1.0"

# Codecs
from blockworld.codecs import BinaryCodec, TextCodec, WorldDocument

# Configuration
from blockworld.config import CodecSettings, load_registry

# Core primitives
from blockworld.core import (
    EMPTY_BLOCK,
    EMPTY_BLOCK_ID,
    EMPTY_BLOCK_NAME,
    Block,
    BlockRegistry,
    FieldType,
    FieldValue,
    Int32,
    Layer,
    LocalRegistry,
    WorldPosition,
)

# Errors and warnings
from blockworld.errors import (
    BlockWorldError,
    BlockWorldWarning,
    BufferLengthMismatch,
    DocumentFormatError,
    FieldSchemaMismatch,
    FileVersionMismatch,
    OutOfRange,
    PaletteDecodeAmbiguity,
    RegistryConflictError,
    UnknownBlockId,
    UnknownBlockName,
    UnsupportedFieldType,
)

# World
from blockworld.world import World

__all__ = [
    # Version
    "__version__",
    # Core
    "Block",
    "EMPTY_BLOCK",
    "EMPTY_BLOCK_ID",
    "EMPTY_BLOCK_NAME",
    "FieldType",
    "FieldValue",
    "Int32",
    "Layer",
    "WorldPosition",
    "BlockRegistry",
    "LocalRegistry",
    # World
    "World",
    # Codecs
    "BinaryCodec",
    "TextCodec",
    "WorldDocument",
    # Config
    "CodecSettings",
    "load_registry",
    # Errors
    "BlockWorldError",
    "UnknownBlockName",
    "UnknownBlockId",
    "OutOfRange",
    "UnsupportedFieldType",
    "FieldSchemaMismatch",
    "RegistryConflictError",
    "DocumentFormatError",
    "PaletteDecodeAmbiguity",
    # Warnings
    "BlockWorldWarning",
    "BufferLengthMismatch",
    "FileVersionMismatch",
]
