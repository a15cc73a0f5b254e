"""World codecs: fixed-layout binary and palette-compressed text."""

from blockworld.codecs.binary import BinaryCodec
from blockworld.codecs.text import (
    FIELD_DELIMITER,
    FILE_VERSION,
    Palette,
    TextCodec,
    WorldDocument,
    to_base36,
)

__all__ = [
    "BinaryCodec",
    "TextCodec",
    "WorldDocument",
    "Palette",
    "FIELD_DELIMITER",
    "FILE_VERSION",
    "to_base36",
]
