"""Persisted mapping row models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from ecsmapper.typing.enums import MappingType


class MappingRow(BaseModel):
    """Mapping row stored by the backend, plus the client-side verification flag."""

    model_config = ConfigDict(extra="ignore")

    id: int
    sourcetype: str
    source_field: str
    mapped_field_name: str
    mapping_type: MappingType
    rationale: str | None = None
    confidence: float | None = None
    created_at: str
    human_verified: bool = False

    @property
    def mapped_field_name_underscore(self) -> str:
        """Return the mapped name with dots replaced by underscores."""
        return self.mapped_field_name.replace(".", "_")


class MappingListPage(BaseModel):
    """One page of /mappings."""

    model_config = ConfigDict(extra="ignore")

    items: list[MappingRow] = Field(default_factory=list)
    total: int = 0


class MappingUpdate(BaseModel):
    """Partial update sent to PATCH /mappings/{id}."""

    model_config = ConfigDict(extra="forbid")

    human_verified: bool
    mapped_field_name: str


class EditSession(BaseModel):
    """The single in-progress edit of the mappings table."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    row_id: int
    human_verified: bool = False
    mapped_field_name: str = ""
