"""Typing-centric domain modules."""

from ecsmapper.typing.enums import ClassifierModel, DbStatus, JsonNodeKind, MappingType
from ecsmapper.typing.models import (
    BatchInputItem,
    EditSession,
    JsonAbsent,
    JsonContainer,
    JsonNode,
    JsonScalar,
    LlmDecision,
    MapBatchQuery,
    MapBatchResponse,
    MapBatchResultItem,
    MappingListPage,
    MappingRow,
    MappingUpdate,
    ResultRow,
)
from ecsmapper.typing.protocol import MappingService

__all__ = [
    "BatchInputItem",
    "ClassifierModel",
    "DbStatus",
    "EditSession",
    "JsonAbsent",
    "JsonContainer",
    "JsonNode",
    "JsonNodeKind",
    "JsonScalar",
    "LlmDecision",
    "MapBatchQuery",
    "MapBatchResponse",
    "MapBatchResultItem",
    "MappingListPage",
    "MappingRow",
    "MappingService",
    "MappingUpdate",
    "ResultRow",
]
