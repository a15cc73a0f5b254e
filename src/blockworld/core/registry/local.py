"""In-memory block registry.

Usage:
    registry = LocalRegistry()
    registry.register("basic_gray", 9)
    registry.register("coin_door", 43, fields=[FieldType.INT32])

    # Or from a registry file
    registry = LocalRegistry.from_file("blocks.json")
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Mapping
from os import PathLike
from pathlib import Path
from typing import Any

from blockworld.core.fields import FieldType
from blockworld.errors import RegistryConflictError, UnknownBlockId, UnknownBlockName

EMPTY_BLOCK_ID = 0
EMPTY_BLOCK_NAME = "empty"


class LocalRegistry:
    """Dict-backed registry keeping name and id maps in lockstep.

    Structure:
        _ids[name] = block_id
        _names[block_id] = name
        _schemas[name] = (FieldType, ...)

    The empty sentinel (id 0) is always registered and never carries fields.
    """

    def __init__(self) -> None:
        self._ids: dict[str, int] = {EMPTY_BLOCK_NAME: EMPTY_BLOCK_ID}
        self._names: dict[int, str] = {EMPTY_BLOCK_ID: EMPTY_BLOCK_NAME}
        self._schemas: dict[str, tuple[FieldType, ...]] = {}

    def register(
        self, name: str, block_id: int, fields: Iterable[FieldType | str] = ()
    ) -> None:
        """Add a block type.

        Args:
            name: Block name.
            block_id: Non-negative numeric id.
            fields: Ordered field types; strings are parsed as FieldType values.

        Raises:
            RegistryConflictError: If name or id is already taken by another entry.
            ValueError: If block_id is negative or a field type name is unknown.
        """
        if block_id < 0:
            raise ValueError(f"Block id must be non-negative, got {block_id}")

        existing_id = self._ids.get(name)
        existing_name = self._names.get(block_id)
        if existing_id is not None and existing_id != block_id:
            raise RegistryConflictError(
                f"Block {name!r} already registered with id {existing_id}"
            )
        if existing_name is not None and existing_name != name:
            raise RegistryConflictError(
                f"Block id {block_id} already registered as {existing_name!r}"
            )

        schema = tuple(FieldType(f) for f in fields)
        if block_id == EMPTY_BLOCK_ID and schema:
            raise RegistryConflictError(f"{EMPTY_BLOCK_NAME!r} cannot declare fields")

        self._ids[name] = block_id
        self._names[block_id] = name
        if schema:
            self._schemas[name] = schema

    def id_of(self, name: str) -> int:
        try:
            return self._ids[name]
        except KeyError:
            raise UnknownBlockName(name) from None

    def name_of(self, block_id: int) -> str:
        try:
            return self._names[block_id]
        except KeyError:
            raise UnknownBlockId(block_id) from None

    def field_schema_of(self, name: str) -> tuple[FieldType, ...]:
        if name == EMPTY_BLOCK_NAME:
            return ()
        return self._schemas.get(name, ())

    def names(self) -> Iterator[str]:
        """Iterate registered names in id order."""
        for block_id in sorted(self._names):
            yield self._names[block_id]

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return item in self._ids
        if isinstance(item, int):
            return item in self._names
        return False

    def __len__(self) -> int:
        return len(self._ids)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the registry file format."""
        return {
            "blocks": [
                {
                    "name": name,
                    "id": self._ids[name],
                    "fields": [f.value for f in self.field_schema_of(name)],
                }
                for name in self.names()
            ]
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LocalRegistry:
        """Build from ``{"blocks": [{"name", "id", "fields"}, ...]}``."""
        registry = cls()
        for entry in data.get("blocks", []):
            registry.register(entry["name"], int(entry["id"]), entry.get("fields", ()))
        return registry

    @classmethod
    def from_file(cls, path: str | PathLike[str]) -> LocalRegistry:
        """Load a registry file written in the ``to_dict`` format."""
        with Path(path).open(encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
