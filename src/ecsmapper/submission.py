"""Batch mapping session: payload building, submission and JSON export."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING

from ecsmapper import logger
from ecsmapper.exceptions import BackendError, InputParseError, PayloadShapeError
from ecsmapper.exporting import BATCH_EXPORT_FILENAME, results_to_json, write_export
from ecsmapper.processing.paths import DEFAULT_MAX_DEPTH
from ecsmapper.processing.payload import build_batch_payload
from ecsmapper.typing.models import ResultRow

if TYPE_CHECKING:
    from ecsmapper.settings import Settings
    from ecsmapper.typing.models import BatchInputItem, MapBatchResultItem
    from ecsmapper.typing.protocol import MappingService

MAPPING_FAILED_MESSAGE = "Mapping failed. Check backend logs."


class BatchMappingSession:
    """State behind the "map from JSON" workflow.

    `results` and `error` are mutually exclusive after a submission: a success replaces
    the results wholesale, a failure leaves them empty.
    """

    def __init__(self, client: MappingService, settings: Settings | None = None) -> None:
        """Initialize session.

        Args:
            client (MappingService): Mapping backend.
            settings (Settings | None): Settings providing the default sourcetype, model and limit.
        """
        self._client = client
        self.text = ""
        self.sourcetype = settings.default_sourcetype if settings else "pan_traffic"
        self.model = settings.default_model if settings else "gpt-4o-mini"
        self.limit = settings.default_limit if settings else 5
        self.max_depth = settings.max_depth if settings else DEFAULT_MAX_DEPTH
        self.loading = False
        self.error: str | None = None
        self.results: list[MapBatchResultItem] = []
        self._generation = 0

    def build_payload(self, *, silent: bool = False) -> list[BatchInputItem] | None:
        """Build the batch payload from the current text.

        Args:
            silent (bool): Do not record parse or shape errors (live preview).

        Returns:
            list[BatchInputItem] | None: Payload, or None when there is none to send.
        """
        try:
            return build_batch_payload(self.text, sourcetype=self.sourcetype, max_depth=self.max_depth)
        except (InputParseError, PayloadShapeError) as exc:
            if not silent:
                self.error = exc.message
            return None

    def preview_payload(self) -> str:
        """Return the pretty-printed payload, or an empty string when it cannot be built."""
        payload = self.build_payload(silent=True)
        if not payload:
            return ""
        return json.dumps([item.model_dump(mode="json") for item in payload], indent=2, ensure_ascii=False)

    async def submit(self) -> list[MapBatchResultItem]:
        """Send the current payload to the classifier and store its results.

        Every call supersedes the previous one, even when it sends nothing: a response
        that resolves after a newer call started is dropped.

        Returns:
            list[MapBatchResultItem]: Results held by the session after this call.
        """
        self._generation += 1
        generation = self._generation
        self.error = None
        self.results = []
        self.loading = False
        payload = self.build_payload(silent=False)
        if not payload:
            return self.results

        self.loading = True
        try:
            results = await self._client.map_batch(payload, limit=self.limit, model=self.model)
        except BackendError as exc:
            if generation == self._generation:
                self.error = exc.user_message(MAPPING_FAILED_MESSAGE)
                self.results = []
            logger.warning("Batch mapping failed", extra={"error": str(exc), "status_code": exc.status_code})
        else:
            if generation == self._generation:
                self.results = results
            else:
                logger.info("Dropped stale batch response", extra={"generation": generation})
        finally:
            if generation == self._generation:
                self.loading = False
        return self.results

    def result_rows(self) -> list[ResultRow]:
        """Return display rows for the current results."""
        return [ResultRow.from_result(item) for item in self.results]

    def export_json(self) -> str:
        """Serialize the in-memory results as `{"results": [...]}`."""
        return results_to_json(self.results)

    def download_json(self, directory: Path = Path()) -> Path:
        """Write the in-memory results to `ecs-mappings-batch.json`.

        Args:
            directory (Path): Target directory.

        Returns:
            Path: Written file path.
        """
        return write_export(directory, BATCH_EXPORT_FILENAME, self.export_json())
