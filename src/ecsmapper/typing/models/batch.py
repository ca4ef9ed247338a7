"""Batch mapping request/response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ecsmapper.typing.enums import DbStatus, MappingType


class BatchInputItem(BaseModel):
    """One field submitted to /map-batch."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    sourcetype: str
    field: str
    description: str


class MapBatchQuery(BaseModel):
    """Query echoed back by the classifier for one field."""

    model_config = ConfigDict(extra="ignore")

    sourcetype: str
    field: str
    limit: int
    model: str


class LlmDecision(BaseModel):
    """Classifier verdict for one field."""

    model_config = ConfigDict(extra="ignore")

    mapping_type: MappingType
    mapped_field_name: str
    ecs_version: str
    rationale: str | None = None
    confidence: float


class MapBatchResultItem(BaseModel):
    """Result correlating one submitted field with its decision."""

    model_config = ConfigDict(extra="ignore")

    query: MapBatchQuery
    hints: Any = None
    llm_decision: LlmDecision
    db_status: DbStatus


class MapBatchResponse(BaseModel):
    """Envelope returned by /map-batch and written by the JSON export."""

    model_config = ConfigDict(extra="ignore")

    results: list[MapBatchResultItem] = Field(default_factory=list)


class ResultRow(BaseModel):
    """Flattened, display-ready view of a `MapBatchResultItem`."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str
    mapped_field_name: str
    mapping_type: str
    confidence: str
    ecs_version: str
    rationale: str
    db_status: str
    sourcetype: str

    @classmethod
    def from_result(cls, item: MapBatchResultItem) -> ResultRow:
        """Build a display row, rounding the confidence to two decimals.

        Args:
            item (MapBatchResultItem): Classifier result.

        Returns:
            ResultRow: Display row.
        """
        decision = item.llm_decision
        return cls(
            field=item.query.field,
            mapped_field_name=decision.mapped_field_name,
            mapping_type=decision.mapping_type.to_str(),
            confidence=f"{decision.confidence:.2f}",
            ecs_version=decision.ecs_version,
            rationale=decision.rationale or "",
            db_status=item.db_status.to_str(),
            sourcetype=item.query.sourcetype,
        )
