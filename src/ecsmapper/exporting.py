"""Local JSON and CSV exports."""

from __future__ import annotations

import csv
import io
import json
from pathlib import Path
from typing import TYPE_CHECKING

from ecsmapper import logger
from ecsmapper.exceptions import ExportError
from ecsmapper.processing.payload import render_scalar
from ecsmapper.typing.models import MapBatchResponse

if TYPE_CHECKING:
    from ecsmapper.typing.models import MapBatchResultItem, MappingRow

BATCH_EXPORT_FILENAME = "ecs-mappings-batch.json"
MAPPINGS_EXPORT_FILENAME = "ecs-mappings.csv"

MAPPINGS_CSV_HEADER = (
    "id",
    "sourcetype",
    "source_field",
    "mapped_field_name",
    "mapped_field_name_underscore",
    "mapping_type",
    "confidence",
    "created_at",
    "human_verified",
)


def results_to_json(results: list[MapBatchResultItem]) -> str:
    """Serialize batch results as the pretty-printed `{"results": [...]}` envelope.

    Args:
        results (list[MapBatchResultItem]): In-memory results.

    Returns:
        str: JSON document.
    """
    envelope = MapBatchResponse(results=results)
    return json.dumps(envelope.model_dump(mode="json"), indent=2, ensure_ascii=False)


def _csv_cells(row: MappingRow) -> list[str]:
    return [
        str(row.id),
        row.sourcetype,
        row.source_field,
        row.mapped_field_name,
        row.mapped_field_name_underscore,
        row.mapping_type.to_str(),
        "" if row.confidence is None else render_scalar(row.confidence),
        row.created_at,
        "true" if row.human_verified else "false",
    ]


def rows_to_csv(rows: list[MappingRow]) -> str:
    """Render mapping rows as CSV with every value quoted.

    Args:
        rows (list[MappingRow]): Rows to export.

    Returns:
        str: Header line followed by one line per row.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(MAPPINGS_CSV_HEADER)
    writer.writerows(_csv_cells(row) for row in rows)
    return buffer.getvalue()


def write_export(directory: Path, filename: str, content: str) -> Path:
    """Write an export file as UTF-8.

    Args:
        directory (Path): Target directory, created when missing.
        filename (str): File name.
        content (str): File content.

    Raises:
        ExportError: If the directory is a file or the write fails.

    Returns:
        Path: Written file path.
    """
    if directory.exists() and not directory.is_dir():
        raise ExportError(message=f"Export target is not a directory: {directory}")

    path = directory / filename
    try:
        directory.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ExportError(message=f"Failed to write export {path}: {exc}") from exc

    logger.info("Export written", extra={"path": str(path), "bytes": len(content.encode("utf-8"))})
    return path
