"""Block registry: name/id mapping and field schemas."""

from blockworld.core.registry.local import EMPTY_BLOCK_ID, EMPTY_BLOCK_NAME, LocalRegistry
from blockworld.core.registry.protocol import BlockRegistry

__all__ = [
    "BlockRegistry",
    "LocalRegistry",
    "EMPTY_BLOCK_ID",
    "EMPTY_BLOCK_NAME",
]
