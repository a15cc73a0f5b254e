"""Block values and cell addressing."""

from blockworld.core.block.models import EMPTY_BLOCK, Block, Layer, WorldPosition

__all__ = [
    "Block",
    "EMPTY_BLOCK",
    "Layer",
    "WorldPosition",
]
