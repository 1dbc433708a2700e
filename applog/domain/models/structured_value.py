"""Generic structured value: a tagged variant over object / array / scalar.

Payloads coming from request bodies or caller-supplied mappings are
converted into this shape once, so tree walkers (masking) dispatch on the
``kind`` tag instead of probing concrete Python types at every node.

Usage:
    value = StructuredValue.from_python({"user": {"password": "x"}})
    value.kind                      # ValueKind.OBJECT
    value.to_python()               # back to plain dicts/lists
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ValueKind(StrEnum):
    """Variant tag of a StructuredValue."""

    OBJECT = "object"
    ARRAY = "array"
    SCALAR = "scalar"


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-standard JSON constant: {name}")


@dataclass(frozen=True)
class StructuredValue:
    """One node of a structured payload.

    Attributes:
        kind: Variant tag.
        members: For OBJECT, ordered ``(name, value)`` pairs.
        items: For ARRAY, ordered element values.
        scalar: For SCALAR, the leaf value (str, int, float, bool or None).
    """

    kind: ValueKind
    members: tuple[tuple[str, StructuredValue], ...] = ()
    items: tuple[StructuredValue, ...] = ()
    scalar: Any = None

    @classmethod
    def object(cls, members: tuple[tuple[str, StructuredValue], ...]) -> StructuredValue:
        return cls(kind=ValueKind.OBJECT, members=members)

    @classmethod
    def array(cls, items: tuple[StructuredValue, ...]) -> StructuredValue:
        return cls(kind=ValueKind.ARRAY, items=items)

    @classmethod
    def leaf(cls, value: Any) -> StructuredValue:
        return cls(kind=ValueKind.SCALAR, scalar=value)

    @classmethod
    def from_python(cls, value: Any) -> StructuredValue:
        """Convert plain Python data into a tagged tree.

        Mappings become OBJECT nodes (keys stringified), lists and tuples
        become ARRAY nodes, anything else is a SCALAR leaf.
        """
        if isinstance(value, Mapping):
            return cls.object(
                tuple((str(name), cls.from_python(member)) for name, member in value.items())
            )
        if isinstance(value, (list, tuple)):
            return cls.array(tuple(cls.from_python(item) for item in value))
        return cls.leaf(value)

    @classmethod
    def from_json(cls, text: str) -> StructuredValue:
        """Parse strict JSON text into a tagged tree.

        ``NaN``, ``Infinity`` and ``-Infinity`` are rejected since they have
        no JSON rendering.

        Raises:
            ValueError: If the text is not valid JSON.
            RecursionError: If the document nests deeper than the
                interpreter's recursion limit.
        """
        return cls.from_python(json.loads(text, parse_constant=_reject_constant))

    def to_python(self) -> Any:
        """Convert back into plain dicts, lists and scalars."""
        if self.kind is ValueKind.OBJECT:
            return {name: member.to_python() for name, member in self.members}
        if self.kind is ValueKind.ARRAY:
            return [item.to_python() for item in self.items]
        return self.scalar
