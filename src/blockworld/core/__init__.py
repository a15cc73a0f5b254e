"""Core functionalities: stateless value types and the registry contract.

Architecture Note:
    core/ holds immutable values (Block, field values) and the registry
    that resolves them. Stateful grids live in world/, and the byte and text
    formats live in codecs/.
"""

from blockworld.core.block import EMPTY_BLOCK, Block, Layer, WorldPosition
from blockworld.core.fields import FieldType, FieldValue, Int32
from blockworld.core.registry import (
    EMPTY_BLOCK_ID,
    EMPTY_BLOCK_NAME,
    BlockRegistry,
    LocalRegistry,
)

__all__ = [
    # Block
    "Block",
    "EMPTY_BLOCK",
    "Layer",
    "WorldPosition",
    # Fields
    "FieldType",
    "FieldValue",
    "Int32",
    # Registry
    "BlockRegistry",
    "LocalRegistry",
    "EMPTY_BLOCK_ID",
    "EMPTY_BLOCK_NAME",
]
