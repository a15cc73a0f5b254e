"""Exception and warning taxonomy.

Fatal problems (bad ids, bad coordinates, unparseable data) raise a
``BlockWorldError`` subclass at the call site. Compatibility problems that
still allow a best-effort result are reported with ``warnings.warn`` using a
``BlockWorldWarning`` subclass, so callers can filter or escalate them.
"""

from __future__ import annotations


class BlockWorldError(Exception):
    """Base class for all blockworld errors."""


class UnknownBlockName(BlockWorldError, KeyError):
    """Raised when a block name has no id in the registry."""

    def __init__(self, name: str):
        super().__init__(f"Unknown block name: {name!r}")
        self.name = name


class UnknownBlockId(BlockWorldError, KeyError):
    """Raised when a block id has no name in the registry."""

    def __init__(self, block_id: int):
        super().__init__(f"Unknown block id: {block_id}")
        self.block_id = block_id


class OutOfRange(BlockWorldError, IndexError):
    """Raised when coordinates fall outside a world's bounds."""

    def __init__(self, x: int, y: int, width: int, height: int):
        super().__init__(f"Position ({x}, {y}) is outside world of size {width}x{height}")
        self.x = x
        self.y = y


class UnsupportedFieldType(BlockWorldError, TypeError):
    """Raised when a codec meets a field type it cannot read or write."""

    def __init__(self, field_type: object, block_name: str | None = None):
        where = f" on block {block_name!r}" if block_name is not None else ""
        super().__init__(f"Unsupported field type {field_type!r}{where}")
        self.field_type = field_type
        self.block_name = block_name


class FieldSchemaMismatch(BlockWorldError, ValueError):
    """Raised when auxiliary data does not match a block's field schema."""


class RegistryConflictError(BlockWorldError, ValueError):
    """Raised when a registration would break the name/id bijection."""


class DocumentFormatError(BlockWorldError, ValueError):
    """Raised when a text document is structurally invalid."""


class PaletteDecodeAmbiguity(DocumentFormatError):
    """Raised when a cell token cannot be split into index and fields."""


class BlockWorldWarning(UserWarning):
    """Base class for non-fatal compatibility warnings."""


class BufferLengthMismatch(BlockWorldWarning):
    """Binary decode consumed a different number of bytes than supplied.

    Usually means the data was written with a registry that knows block
    types (or field schemas) this one does not.

    Attributes:
        length: Bytes available in the source.
        consumed: Bytes decoded as complete reads.
        truncated: True if the source ended in the middle of the cells.
    """

    def __init__(self, length: int, consumed: int, truncated: bool = False):
        if truncated:
            detail = f"Buffer ended after {length} bytes before every cell was decoded. "
        else:
            detail = f"Buffer length and decoded size do not match ({length} != {consumed}). "
        super().__init__(detail + "The data may contain blocks this registry does not know yet.")
        self.length = length
        self.consumed = consumed
        self.truncated = truncated


class FileVersionMismatch(BlockWorldWarning):
    """Text document declares a file version this reader does not know."""

    def __init__(self, found: int, supported: int):
        super().__init__(f"Document fileVersion {found} is newer than supported ({supported})")
        self.found = found
        self.supported = supported
