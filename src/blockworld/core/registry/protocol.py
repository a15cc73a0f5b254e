"""Registry protocol consumed by blocks, worlds, and codecs.

Any object with these three lookups can back a World, so tests and tools
can use synthetic registries.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from blockworld.core.fields import FieldType


@runtime_checkable
class BlockRegistry(Protocol):
    """Bidirectional name/id lookup plus per-type field schemas."""

    def id_of(self, name: str) -> int:
        """Resolve a block name. Raises UnknownBlockName if absent."""
        ...

    def name_of(self, block_id: int) -> str:
        """Resolve a block id. Raises UnknownBlockId if absent."""
        ...

    def field_schema_of(self, name: str) -> Sequence[FieldType]:
        """Ordered field types for a block name (empty if none registered)."""
        ...
