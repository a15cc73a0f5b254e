"""Block value model and cell addressing.

Usage:
    stone = Block.of("basic_gray", registry)
    door = Block(43, (Int32(5),))
    assert door.is_same_as(Block(43, (Int32(5),)))

    pos = WorldPosition(x=3, y=4, layer=Layer.FOREGROUND)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import NamedTuple

from blockworld.core.fields import FieldValue, raw_value
from blockworld.core.registry import EMPTY_BLOCK_ID
from blockworld.core.registry.protocol import BlockRegistry
from blockworld.errors import UnknownBlockId


class Layer(IntEnum):
    """The two parallel grids of a world."""

    BACKGROUND = 0
    FOREGROUND = 1

    @classmethod
    def coerce(cls, value: int) -> Layer:
        """Accept a Layer or its integer value.

        Raises:
            ValueError: If value is not 0 or 1.
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Layer must be 0 (background) or 1 (foreground), got {value!r}"
            ) from None


class WorldPosition(NamedTuple):
    """Address of a single cell."""

    x: int
    y: int
    layer: Layer


@dataclass(frozen=True, slots=True)
class Block:
    """Single cell value: type id plus typed auxiliary data.

    Blocks are values. Worlds replace a cell's Block rather than changing it,
    which is what makes sharing instances between worlds safe.

    Attributes:
        id: Numeric block type id (0 is the empty block).
        data: Ordered auxiliary field values.
    """

    id: int
    data: tuple[FieldValue, ...] = field(default=())

    def __post_init__(self) -> None:
        # Accept any iterable for data but always store a tuple
        if not isinstance(self.data, tuple):
            object.__setattr__(self, "data", tuple(self.data))

    @classmethod
    def of(
        cls,
        id_or_name: int | str,
        registry: BlockRegistry,
        data: Iterable[FieldValue] = (),
    ) -> Block:
        """Build a block from an id or a registry name.

        Raises:
            UnknownBlockName: If a name is given and is not registered.
        """
        if isinstance(id_or_name, str):
            block_id = registry.id_of(id_or_name)
        else:
            block_id = id_or_name
        return cls(block_id, tuple(data))

    @property
    def is_empty(self) -> bool:
        return self.id == EMPTY_BLOCK_ID

    @property
    def values(self) -> tuple[int, ...]:
        """Auxiliary data as plain Python values."""
        return tuple(raw_value(v) for v in self.data)

    def is_same_as(self, other: Block) -> bool:
        """Structural equality: same id and elementwise-equal data."""
        if self.id != other.id:
            return False
        if len(self.data) != len(other.data):
            return False
        return all(a == b for a, b in zip(self.data, other.data, strict=True))

    def name(self, registry: BlockRegistry) -> str:
        """Registry name for this block's id.

        Raises:
            UnknownBlockId: If the id has no mapping.
        """
        return registry.name_of(self.id)

    def field_count(self, registry: BlockRegistry) -> int:
        """Number of auxiliary fields this block type declares.

        Returns 0 for the empty block and for ids the registry cannot resolve.
        """
        if self.is_empty:
            return 0
        try:
            name = registry.name_of(self.id)
        except UnknownBlockId:
            return 0
        return len(registry.field_schema_of(name))


EMPTY_BLOCK = Block(EMPTY_BLOCK_ID)
