"""Tagged union over decoded JSON values."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from ecsmapper.typing.enums import JsonNodeKind

JsonScalarValue = str | int | float | bool


@dataclass(frozen=True)
class JsonScalar:
    """A string, number or boolean."""

    kind: ClassVar[JsonNodeKind] = JsonNodeKind.SCALAR

    value: JsonScalarValue


@dataclass(frozen=True)
class JsonContainer:
    """An object or array, exposed as ordered `(key, child)` pairs.

    Array children are keyed by their stringified index.
    """

    kind: ClassVar[JsonNodeKind] = JsonNodeKind.CONTAINER

    children: tuple[tuple[str, object], ...] = field(default=())


@dataclass(frozen=True)
class JsonAbsent:
    """A JSON `null`, or a path that does not resolve."""

    kind: ClassVar[JsonNodeKind] = JsonNodeKind.ABSENT


JsonNode = JsonScalar | JsonContainer | JsonAbsent
