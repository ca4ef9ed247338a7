"""Project enums."""

from __future__ import annotations

from enum import StrEnum


class _EnumMixin(StrEnum):
    """Shared conversion helpers for user-facing enums."""

    @classmethod
    def from_str(cls, value: str) -> _EnumMixin:
        """Parse enum from string.

        Args:
            value: Raw string value.

        Raises:
            ValueError: If the value is not supported.

        Returns:
            _EnumMixin: Parsed enum value.
        """
        try:
            return cls(value)
        except ValueError as exc:
            supported = ", ".join(member.value for member in cls)
            message = f"Unsupported {cls.__name__} value '{value}'. Expected one of: {supported}"
            raise ValueError(message) from exc

    def to_str(self) -> str:
        """Return string representation.

        Returns:
            str: Enum string value.
        """
        return self.value


class MappingType(_EnumMixin):
    """Whether a field maps onto an ECS field or a custom one."""

    ECS = "ecs"
    NON_ECS = "non-ecs"


class DbStatus(_EnumMixin):
    """Outcome of the backend persistence step for one mapped field."""

    EXISTS = "exists"
    INSERTED = "inserted"


class JsonNodeKind(_EnumMixin):
    """Kinds of decoded JSON values seen by the path walker."""

    SCALAR = "scalar"
    CONTAINER = "container"
    ABSENT = "absent"


class ClassifierModel(_EnumMixin):
    """Classifier models offered for /map-batch."""

    GPT_4O_MINI = "gpt-4o-mini"
    GPT_4O = "gpt-4o"
    O4_MINI = "o4-mini"
