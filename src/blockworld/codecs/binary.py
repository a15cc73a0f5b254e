"""Fixed-layout binary world codec.

Layout: background layer, then foreground layer. Within a layer, x is the
outer loop and y the inner loop. Each cell is a little-endian int32 block id
followed by that block type's declared fields (none for the empty block).
Dimensions are not stored; callers supply them.

Usage:
    codec = BinaryCodec(registry)
    world = codec.decode(payload, width=200, height=200)

    # Streams are read incrementally
    with open("world.bin", "rb") as f:
        world = codec.decode(f, width=200, height=200)

    payload = codec.encode(world)
"""

from __future__ import annotations

import struct
import warnings
from collections.abc import Iterator
from typing import BinaryIO, TypeAlias

from blockworld.core.block import Block
from blockworld.core.fields import FieldType, FieldValue
from blockworld.core.registry import EMPTY_BLOCK_ID
from blockworld.core.registry.protocol import BlockRegistry
from blockworld.errors import (
    BufferLengthMismatch,
    FieldSchemaMismatch,
    UnknownBlockId,
    UnsupportedFieldType,
)
from blockworld.world.world import DEFAULT_BORDER_BLOCK, Grid, World

ID_STRUCT = struct.Struct("<i")

FIELD_STRUCTS: dict[FieldType, struct.Struct] = {
    FieldType.INT32: struct.Struct("<i"),
}
"""Wire format per field kind. A kind missing here cannot be decoded."""

_DRAIN_CHUNK = 64 * 1024

BinarySource: TypeAlias = bytes | bytearray | memoryview | BinaryIO


class _Truncated(Exception):
    """Source ran out of bytes in the middle of a cell record."""


class _Reader:
    """Cursor over an in-memory buffer or a binary stream.

    Tracks how many bytes have been consumed so the caller can compare with
    the source length once decoding ends.
    """

    def __init__(self, source: BinarySource):
        if isinstance(source, bytes | bytearray | memoryview):
            self._buffer: memoryview | None = memoryview(source).cast("B")
            self._stream: BinaryIO | None = None
        else:
            self._buffer = None
            self._stream = source
        self.consumed = 0
        self._pulled = 0

    def read(self, n: int) -> bytes | memoryview:
        if self._buffer is not None:
            end = self.consumed + n
            if end > len(self._buffer):
                raise _Truncated
            chunk: bytes | memoryview = self._buffer[self.consumed : end]
        else:
            chunk = self._read_stream(n)
        self.consumed += n
        return chunk

    def _read_stream(self, n: int) -> bytes:
        # Unbuffered streams may return fewer bytes than asked for before EOF
        assert self._stream is not None
        parts = []
        remaining = n
        while remaining:
            chunk = self._stream.read(remaining)
            if not chunk:
                raise _Truncated
            self._pulled += len(chunk)
            parts.append(chunk)
            remaining -= len(chunk)
        return b"".join(parts)

    def unpack(self, fmt: struct.Struct) -> int:
        return fmt.unpack(self.read(fmt.size))[0]

    def total_length(self) -> int:
        """Length of the whole source, draining any unread stream data."""
        if self._buffer is not None:
            return len(self._buffer)
        assert self._stream is not None
        length = self._pulled
        while chunk := self._stream.read(_DRAIN_CHUNK):
            length += len(chunk)
        return length


class BinaryCodec:
    """Decode flat cell records into worlds, and encode them back.

    Args:
        registry: Registry used to resolve field schemas.
        border_block: Border block name given to decoded worlds.
    """

    def __init__(self, registry: BlockRegistry, border_block: str = DEFAULT_BORDER_BLOCK):
        self.registry = registry
        self.border_block = border_block

    def decode(self, source: BinarySource, width: int, height: int) -> World:
        """Build a new world from encoded cell records.

        Decoding is best effort: if the source is shorter or longer than the
        records it holds, a BufferLengthMismatch warning is emitted and the
        world is still returned (cells past a truncation stay empty).

        Args:
            source: Bytes-like buffer or binary stream.
            width: World width.
            height: World height.

        Returns:
            Decoded World.

        Raises:
            UnsupportedFieldType: If a schema declares a field kind with no wire format.
        """
        world = World(width, height, self.registry, self.border_block)
        _, mismatch = self._populate(world, source)
        if mismatch is not None:
            warnings.warn(mismatch, stacklevel=2)
        return world

    def decode_into(self, world: World, source: BinarySource) -> int:
        """Populate an existing world's grids from encoded cell records.

        Returns:
            Number of bytes decoded as cell records.
        """
        consumed, mismatch = self._populate(world, source)
        if mismatch is not None:
            warnings.warn(mismatch, stacklevel=2)
        return consumed

    def _populate(
        self, world: World, source: BinarySource
    ) -> tuple[int, BufferLengthMismatch | None]:
        reader = _Reader(source)
        truncated = False
        try:
            self._decode_layer(world.background, reader, world.width, world.height)
            self._decode_layer(world.foreground, reader, world.width, world.height)
        except _Truncated:
            truncated = True
        length = reader.total_length()
        if truncated or length != reader.consumed:
            return reader.consumed, BufferLengthMismatch(length, reader.consumed, truncated)
        return reader.consumed, None

    def _decode_layer(self, grid: Grid, reader: _Reader, width: int, height: int) -> None:
        for x in range(width):
            column = grid[x]
            for y in range(height):
                column[y] = self._decode_block(reader)

    def _decode_block(self, reader: _Reader) -> Block:
        block_id = reader.unpack(ID_STRUCT)
        if block_id == EMPTY_BLOCK_ID:
            return Block(block_id)

        name, schema = self._schema_for(block_id)
        data: list[FieldValue] = []
        for field_type in schema:
            fmt = FIELD_STRUCTS.get(field_type)  # type: ignore[call-overload]
            if fmt is None:
                raise UnsupportedFieldType(field_type, name)
            data.append(field_type.coerce(reader.unpack(fmt)))
        return Block(block_id, tuple(data))

    def _schema_for(self, block_id: int) -> tuple[str | None, tuple[FieldType, ...]]:
        # Unknown ids decode as field-less; the length check reports the skew
        try:
            name = self.registry.name_of(block_id)
        except UnknownBlockId:
            return None, ()
        return name, tuple(self.registry.field_schema_of(name))

    def encode(self, world: World) -> bytes:
        """Encode a world as cell records.

        Raises:
            UnsupportedFieldType: If a schema declares a field kind with no wire format.
        """
        return b"".join(self.iter_encode(world))

    def iter_encode(self, world: World) -> Iterator[bytes]:
        """Yield encoded cell records one at a time, background first."""
        for grid in (world.background, world.foreground):
            for x in range(world.width):
                for block in grid[x]:
                    yield self._encode_block(block)

    def _encode_block(self, block: Block) -> bytes:
        parts = [ID_STRUCT.pack(block.id)]
        if block.id == EMPTY_BLOCK_ID:
            return parts[0]
        name, schema = self._schema_for(block.id)
        if len(schema) != len(block.data):
            raise FieldSchemaMismatch(
                f"Block {name or block.id!r} declares {len(schema)} field(s), "
                f"carries {len(block.data)}"
            )
        for field_type, value in zip(schema, block.data, strict=True):
            fmt = FIELD_STRUCTS.get(field_type)  # type: ignore[call-overload]
            if fmt is None:
                raise UnsupportedFieldType(field_type, name)
            parts.append(fmt.pack(value.value))
        return b"".join(parts)
