"""World: two same-size grids of blocks with region operations.

Usage:
    world = World(64, 32, registry)
    world.clear(border=True)

    # Single cells
    world.place(3, 4, Layer.FOREGROUND, "coin_door", [10])
    door = world.block_at(3, 4, Layer.FOREGROUND)

    # Regions (cells are shared with the source, not cloned)
    chunk = world.copy(0, 0, 9, 9)
    world.paste(20, 5, chunk)
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from blockworld.core.block import EMPTY_BLOCK, Block, Layer, WorldPosition
from blockworld.core.fields import FieldType
from blockworld.core.registry import EMPTY_BLOCK_NAME
from blockworld.core.registry.protocol import BlockRegistry
from blockworld.errors import FieldSchemaMismatch, OutOfRange, UnsupportedFieldType

DEFAULT_BORDER_BLOCK = "basic_gray"

Grid = list[list[Block]]
"""Column-major grid: grid[x][y]."""


def make_grid(width: int, height: int, fill: Block = EMPTY_BLOCK) -> Grid:
    """Allocate a width x height grid with every cell set to fill."""
    return [[fill] * height for _ in range(width)]


class World:
    """Offline chunk of two-layer block data, manipulated like a pixel raster.

    Both grids are indexed ``[x][y]`` and every cell always holds a Block.
    ``copy`` and ``paste`` share Block instances between worlds; this is safe
    because Blocks are immutable values that are replaced, never edited.

    Args:
        width: Number of columns (> 0).
        height: Number of rows (> 0).
        registry: Registry used to resolve names, ids and field schemas.
        border_block: Block name used for the edge by ``clear(border=True)``.
    """

    def __init__(
        self,
        width: int,
        height: int,
        registry: BlockRegistry,
        border_block: str = DEFAULT_BORDER_BLOCK,
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"World dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.registry = registry
        self.border_block = border_block
        self.foreground: Grid = make_grid(width, height)
        self.background: Grid = make_grid(width, height)

    def __repr__(self) -> str:
        return f"World(width={self.width}, height={self.height})"

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfRange(x, y, self.width, self.height)

    def layer(self, layer: Layer | int) -> Grid:
        """Grid for a layer (background = 0, foreground = 1)."""
        if Layer.coerce(layer) is Layer.FOREGROUND:
            return self.foreground
        return self.background

    def clear(self, border: bool) -> None:
        """Reset every cell to empty, optionally framing the foreground.

        With ``border`` set, foreground cells on the outer rectangle get the
        border block. Worlds two cells wide or tall are therefore all border.

        Raises:
            UnknownBlockName: If border is set and the border block is not registered.
        """
        edge = Block.of(self.border_block, self.registry) if border else EMPTY_BLOCK
        last_x = self.width - 1
        last_y = self.height - 1
        for x in range(self.width):
            fg_column = self.foreground[x]
            bg_column = self.background[x]
            for y in range(self.height):
                at_edge = border and (x == 0 or y == 0 or x == last_x or y == last_y)
                fg_column[y] = edge if at_edge else EMPTY_BLOCK
                bg_column[y] = EMPTY_BLOCK

    def place(
        self,
        x: int,
        y: int,
        layer: Layer | int,
        block: int | str,
        data: Sequence[object] = (),
    ) -> tuple[WorldPosition, Block]:
        """Overwrite one cell with a new block.

        Args:
            x: Column.
            y: Row.
            layer: Target layer.
            block: Block id or registry name.
            data: Raw auxiliary values, one per declared schema field.

        Returns:
            The written position and the Block stored there.

        Raises:
            OutOfRange: If (x, y) is outside the world.
            UnknownBlockName: If a name is given and is not registered.
            UnknownBlockId: If the id is not registered.
            FieldSchemaMismatch: If len(data) differs from the declared field count.
            UnsupportedFieldType: If the schema declares a kind that cannot be stored.
        """
        self._check_bounds(x, y)
        target = Layer.coerce(layer)
        new_block = self._build_block(block, data)
        self.layer(target)[x][y] = new_block
        return WorldPosition(x, y, target), new_block

    def _build_block(self, block: int | str, data: Sequence[object]) -> Block:
        bare = Block.of(block, self.registry)
        name = bare.name(self.registry)
        schema = () if name == EMPTY_BLOCK_NAME else tuple(self.registry.field_schema_of(name))
        if len(data) != len(schema):
            raise FieldSchemaMismatch(
                f"Block {name!r} declares {len(schema)} field(s), got {len(data)}"
            )
        values = []
        for field_type, value in zip(schema, data, strict=True):
            if not isinstance(field_type, FieldType):
                raise UnsupportedFieldType(field_type, name)
            values.append(field_type.coerce(value))
        return Block(bare.id, tuple(values))

    def block_at(self, x: int, y: int, layer: Layer | int) -> Block:
        """Block stored at a cell (the stored instance, not a copy).

        Raises:
            OutOfRange: If (x, y) is outside the world.
        """
        self._check_bounds(x, y)
        return self.layer(layer)[x][y]

    def copy(self, x1: int, y1: int, x2: int, y2: int) -> World:
        """Extract the inclusive rectangle between two corners as a new World.

        Corners may be given in any order. The new world shares Block
        instances with this one.

        Raises:
            OutOfRange: If either corner is outside the world.
        """
        self._check_bounds(x1, y1)
        self._check_bounds(x2, y2)
        x1, x2 = min(x1, x2), max(x1, x2)
        y1, y2 = min(y1, y2), max(y1, y2)

        world = World(x2 - x1 + 1, y2 - y1 + 1, self.registry, self.border_block)
        for x in range(x1, x2 + 1):
            world.background[x - x1] = self.background[x][y1 : y2 + 1]
            world.foreground[x - x1] = self.foreground[x][y1 : y2 + 1]
        return world

    def paste(self, x_offset: int, y_offset: int, source: World) -> None:
        """Write every cell of source into this world at an offset.

        Cells are shared with source, not cloned. Nothing is written unless
        the whole source rectangle fits.

        Raises:
            OutOfRange: If any destination cell falls outside this world.
        """
        self._check_bounds(x_offset, y_offset)
        self._check_bounds(x_offset + source.width - 1, y_offset + source.height - 1)

        for x in range(source.width):
            fg_column = self.foreground[x + x_offset]
            bg_column = self.background[x + x_offset]
            fg_column[y_offset : y_offset + source.height] = source.foreground[x]
            bg_column[y_offset : y_offset + source.height] = source.background[x]

    def cells(self, layer: Layer | int) -> Iterator[tuple[WorldPosition, Block]]:
        """Yield every cell of a layer, x outer and y inner."""
        target = Layer.coerce(layer)
        grid = self.layer(target)
        for x in range(self.width):
            column = grid[x]
            for y in range(self.height):
                yield WorldPosition(x, y, target), column[y]

    def is_same_as(self, other: World) -> bool:
        """Same dimensions and structurally equal blocks in both layers."""
        if (self.width, self.height) != (other.width, other.height):
            return False
        layers = ((self.background, other.background), (self.foreground, other.foreground))
        for mine, theirs in layers:
            for x in range(self.width):
                for a, b in zip(mine[x], theirs[x], strict=True):
                    if not a.is_same_as(b):
                        return False
        return True
