"""Palette-compressed text world codec.

A world becomes a document whose ``palette`` lists every block name in
first-occurrence order (``"empty"`` is always index 0) and whose two layer
strings hold one token per cell, foreground first. Cells are visited with x
as the outer loop and y as the inner loop, like the binary codec.

Token grammar (each token is followed by a single space):
    token  := index (":" field)*
    index  := palette index in base 36, digits 0-9A-Z
    field  := decimal integer, optionally negative

Usage:
    codec = TextCodec(registry)
    document = codec.encode(world, {"name": "Lobby", "owner": "someone"})
    world = codec.decode(document)

    # JSON files, written incrementally
    with open("world.json", "w") as f:
        codec.dump(world, f, {"name": "Lobby"})
    with open("world.json") as f:
        world = codec.load(f)
"""

from __future__ import annotations

import json
import re
import warnings
from collections.abc import Iterator, Mapping
from typing import IO, Any

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError

from blockworld.core.block import Block, Layer
from blockworld.core.fields import FieldType
from blockworld.core.registry import EMPTY_BLOCK_NAME
from blockworld.core.registry.protocol import BlockRegistry
from blockworld.errors import (
    DocumentFormatError,
    FileVersionMismatch,
    PaletteDecodeAmbiguity,
    UnsupportedFieldType,
)
from blockworld.world.world import DEFAULT_BORDER_BLOCK, Grid, World

FILE_VERSION = 0
CELL_SEPARATOR = " "
FIELD_DELIMITER = ":"
RESERVED_KEYS = frozenset({"fileVersion", "width", "height", "palette", "layers"})

_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_INDEX_RE = re.compile(r"[0-9A-Z]+")
_FIELD_RE = re.compile(r"-?[0-9]+")


def to_base36(value: int) -> str:
    """Uppercase base-36 rendering of a non-negative integer."""
    if value < 0:
        raise ValueError(f"Palette index must be non-negative, got {value}")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_DIGITS[rem])
    return "".join(reversed(digits))


class LayersDocument(BaseModel):
    foreground: str
    background: str


class WorldDocument(BaseModel):
    """Validated shape of a text-encoded world. Unknown top-level keys are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    file_version: int = Field(alias="fileVersion")
    width: PositiveInt
    height: PositiveInt
    palette: list[str] = Field(min_length=1)
    layers: LayersDocument

    @property
    def metadata(self) -> dict[str, Any]:
        """Caller-supplied keys that are not part of the format."""
        return dict(self.model_extra or {})


class Palette:
    """Append-only name list with O(1) index lookup."""

    def __init__(self) -> None:
        self.names: list[str] = [EMPTY_BLOCK_NAME]
        self._index = {EMPTY_BLOCK_NAME: 0}

    def index_of(self, name: str) -> int:
        index = self._index.get(name)
        if index is None:
            index = len(self.names)
            self.names.append(name)
            self._index[name] = index
        return index


class TextCodec:
    """Encode worlds as palette-compressed documents and decode them back.

    Args:
        registry: Registry used to resolve block names and field schemas.
        border_block: Border block name given to decoded worlds.
    """

    def __init__(self, registry: BlockRegistry, border_block: str = DEFAULT_BORDER_BLOCK):
        self.registry = registry
        self.border_block = border_block

    # Encoding

    def encode(
        self, world: World, extra_metadata: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Build the document for a world.

        Args:
            world: World to encode.
            extra_metadata: Extra top-level keys (must not reuse reserved names).

        Returns:
            Document dict ready for JSON serialization.

        Raises:
            UnknownBlockId: If a cell holds an id the registry cannot name.
            ValueError: If extra_metadata reuses a reserved key.
        """
        document = self._header(world, extra_metadata)
        palette = Palette()
        foreground = "".join(self.iter_layer_tokens(world, Layer.FOREGROUND, palette))
        background = "".join(self.iter_layer_tokens(world, Layer.BACKGROUND, palette))
        document["palette"] = palette.names
        document["layers"] = {"foreground": foreground, "background": background}
        return document

    def _header(
        self, world: World, extra_metadata: Mapping[str, Any] | None
    ) -> dict[str, Any]:
        extra = dict(extra_metadata or {})
        clashes = RESERVED_KEYS.intersection(extra)
        if clashes:
            raise ValueError(f"extra_metadata uses reserved keys: {sorted(clashes)}")
        return {
            "fileVersion": FILE_VERSION,
            "width": world.width,
            "height": world.height,
            **extra,
        }

    def iter_layer_tokens(
        self, world: World, layer: Layer | int, palette: Palette | None = None
    ) -> Iterator[str]:
        """Yield the space-terminated token for every cell of a layer.

        Names are added to palette as they are first seen.
        """
        palette = palette if palette is not None else Palette()
        for _, block in world.cells(layer):
            yield self.encode_token(palette.index_of(block.name(self.registry)), block)

    def encode_token(self, index: int, block: Block) -> str:
        """Single cell token, including its trailing separator."""
        fields = "".join(f"{FIELD_DELIMITER}{value}" for value in block.values)
        return f"{to_base36(index)}{fields}{CELL_SEPARATOR}"

    def dumps(self, world: World, extra_metadata: Mapping[str, Any] | None = None) -> str:
        """Encode a world as a JSON string."""
        return json.dumps(self.encode(world, extra_metadata))

    def dump(
        self,
        world: World,
        fp: IO[str],
        extra_metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Write a world as JSON to a text stream without building the layer strings.

        Layers are written token by token; the palette follows them, since it
        is only complete once every cell has been seen. Metadata and block
        names are checked before anything is written, so a failing call leaves
        fp untouched.

        Raises:
            UnknownBlockId: If a cell holds an id the registry cannot name.
            TypeError: If extra_metadata is not JSON serializable.
            ValueError: If extra_metadata reuses a reserved key.
        """
        header = "".join(
            f"{json.dumps(key)}: {json.dumps(value)}, "
            for key, value in self._header(world, extra_metadata).items()
        )
        self._check_names(world)

        fp.write("{")
        fp.write(header)
        # Tokens hold only base-36 digits, signs, delimiters and spaces; no JSON escaping
        palette = Palette()
        fp.write('"layers": {"foreground": "')
        for token in self.iter_layer_tokens(world, Layer.FOREGROUND, palette):
            fp.write(token)
        fp.write('", "background": "')
        for token in self.iter_layer_tokens(world, Layer.BACKGROUND, palette):
            fp.write(token)
        fp.write('"}, ')
        fp.write(f'"palette": {json.dumps(palette.names)}}}')

    def _check_names(self, world: World) -> None:
        seen: set[int] = set()
        for layer in Layer:
            for _, block in world.cells(layer):
                if block.id not in seen:
                    block.name(self.registry)
                    seen.add(block.id)

    # Decoding

    def decode(self, document: Mapping[str, Any]) -> World:
        """Rebuild a world from a document.

        Raises:
            DocumentFormatError: If the document shape is invalid or a layer has
                the wrong number of cells.
            PaletteDecodeAmbiguity: If a token cannot be split into a palette
                index and the fields its block type declares.
            UnknownBlockName: If a palette name is not registered.
        """
        try:
            parsed = WorldDocument.model_validate(document)
        except ValidationError as e:
            raise DocumentFormatError(f"Invalid world document: {e}") from e

        if parsed.file_version > FILE_VERSION:
            warnings.warn(FileVersionMismatch(parsed.file_version, FILE_VERSION), stacklevel=2)

        palette = [self._resolve(name) for name in parsed.palette]
        world = World(parsed.width, parsed.height, self.registry, self.border_block)
        self._decode_layer(world, world.foreground, parsed.layers.foreground, palette)
        self._decode_layer(world, world.background, parsed.layers.background, palette)
        return world

    def loads(self, text: str) -> World:
        """Decode a world from a JSON string."""
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise DocumentFormatError(f"World document is not valid JSON: {e}") from e
        return self.decode(document)

    def load(self, fp: IO[str]) -> World:
        """Decode a world from a JSON text stream."""
        try:
            document = json.load(fp)
        except json.JSONDecodeError as e:
            raise DocumentFormatError(f"World document is not valid JSON: {e}") from e
        return self.decode(document)

    def _resolve(self, name: str) -> tuple[int, tuple[FieldType, ...]]:
        block_id = self.registry.id_of(name)
        if name == EMPTY_BLOCK_NAME:
            return block_id, ()
        schema = tuple(self.registry.field_schema_of(name))
        for field_type in schema:
            if not isinstance(field_type, FieldType):
                raise UnsupportedFieldType(field_type, name)
        return block_id, schema

    def _decode_layer(
        self,
        world: World,
        grid: Grid,
        text: str,
        palette: list[tuple[int, tuple[FieldType, ...]]],
    ) -> None:
        expected = world.width * world.height
        # Identical tokens decode to equal values, so one Block per distinct token
        seen: dict[str, Block] = {}
        tokens = iter_tokens(text)
        count = 0
        for x in range(world.width):
            column = grid[x]
            for y in range(world.height):
                token = next(tokens, None)
                if token is None:
                    raise DocumentFormatError(
                        f"Layer has {count} cells, expected {expected}"
                    )
                block = seen.get(token)
                if block is None:
                    block = seen[token] = self.decode_token(token, palette)
                column[y] = block
                count += 1
        if next(tokens, None) is not None:
            raise DocumentFormatError(f"Layer has more than {expected} cells")

    def decode_token(
        self, token: str, palette: list[tuple[int, tuple[FieldType, ...]]]
    ) -> Block:
        """Split a token into palette index and fields and build its Block.

        Args:
            token: Cell token without its separator.
            palette: Resolved (block_id, schema) per palette index.
        """
        head, *fields = token.split(FIELD_DELIMITER)
        if not _INDEX_RE.fullmatch(head):
            raise PaletteDecodeAmbiguity(f"Malformed palette index in token {token!r}")
        index = int(head, 36)
        if index >= len(palette):
            raise PaletteDecodeAmbiguity(
                f"Token {token!r} refers to palette index {index} of {len(palette)}; "
                f"fields must be separated by {FIELD_DELIMITER!r}"
            )

        block_id, schema = palette[index]
        if len(fields) != len(schema):
            raise PaletteDecodeAmbiguity(
                f"Token {token!r} carries {len(fields)} field(s), block declares {len(schema)}"
            )
        values = []
        for field_type, raw in zip(schema, fields, strict=True):
            if not _FIELD_RE.fullmatch(raw):
                raise PaletteDecodeAmbiguity(f"Malformed field {raw!r} in token {token!r}")
            try:
                values.append(field_type.coerce(int(raw)))
            except (TypeError, ValueError) as e:
                raise PaletteDecodeAmbiguity(f"Invalid field in token {token!r}: {e}") from e
        return Block(block_id, tuple(values))


def iter_tokens(text: str) -> Iterator[str]:
    """Lazily split a layer string on the cell separator.

    A single trailing separator is expected and ignored. Empty tokens
    (doubled separators) are rejected.
    """
    start = 0
    length = len(text)
    while start < length:
        end = text.find(CELL_SEPARATOR, start)
        if end == -1:
            end = length
        if end == start:
            raise DocumentFormatError(f"Empty cell token at offset {start}")
        yield text[start:end]
        start = end + 1
