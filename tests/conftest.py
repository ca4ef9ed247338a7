"""Pytest marker auto-assignment by folder, plus shared fixtures."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from ecsmapper import logger


def _mark_tests_by_directory(
    config: pytest.Config,
    items: list[pytest.Item],
    marker: str,
) -> None:
    """Mark collected tests located under tests/<marker>/."""
    target_dir = (Path(config.rootpath) / "tests" / marker).resolve()

    for item in items:
        try:
            path = Path(str(item.path)).resolve()
        except OSError:
            logger.warning(f"Could not resolve path for test item {item.name!s}; skipping {marker!s} marker")
            continue

        if path == target_dir or target_dir in path.parents:
            item.add_marker(getattr(pytest.mark, marker))


def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    """Apply directory-based markers to test items."""
    _mark_tests_by_directory(config, items, "unit")
    _mark_tests_by_directory(config, items, "integration")
    _mark_tests_by_directory(config, items, "end2end")


def make_result(
    field: str,
    *,
    mapped: str = "source.ip",
    confidence: float = 0.876,
    db_status: str = "inserted",
    sourcetype: str = "pan_traffic",
) -> dict[str, Any]:
    """Return a raw /map-batch result item."""
    return {
        "query": {"sourcetype": sourcetype, "field": field, "limit": 5, "model": "gpt-4o-mini"},
        "hints": [{"name": mapped, "score": 0.5}],
        "llm_decision": {
            "mapping_type": "ecs",
            "mapped_field_name": mapped,
            "ecs_version": "8.10.0",
            "rationale": f"{field} looks like {mapped}",
            "confidence": confidence,
        },
        "db_status": db_status,
    }


def make_row(row_id: int, **overrides: Any) -> dict[str, Any]:
    """Return a raw /mappings row."""
    row: dict[str, Any] = {
        "id": row_id,
        "sourcetype": "pan_traffic",
        "source_field": f"field_{row_id}",
        "mapped_field_name": f"source.field_{row_id}",
        "mapping_type": "ecs",
        "rationale": None,
        "confidence": 0.9,
        "created_at": "2025-01-02T03:04:05Z",
    }
    row.update(overrides)
    return row


@pytest.fixture(name="result_factory")
def _result_factory() -> Any:
    return make_result


@pytest.fixture(name="row_factory")
def _row_factory() -> Any:
    return make_row
