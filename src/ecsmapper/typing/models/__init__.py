"""Core domain model exports."""

from ecsmapper.typing.models.batch import (
    BatchInputItem,
    LlmDecision,
    MapBatchQuery,
    MapBatchResponse,
    MapBatchResultItem,
    ResultRow,
)
from ecsmapper.typing.models.json_node import JsonAbsent, JsonContainer, JsonNode, JsonScalar
from ecsmapper.typing.models.mappings import EditSession, MappingListPage, MappingRow, MappingUpdate

__all__ = [
    "BatchInputItem",
    "EditSession",
    "JsonAbsent",
    "JsonContainer",
    "JsonNode",
    "JsonScalar",
    "LlmDecision",
    "MapBatchQuery",
    "MapBatchResponse",
    "MapBatchResultItem",
    "MappingListPage",
    "MappingRow",
    "MappingUpdate",
    "ResultRow",
]
