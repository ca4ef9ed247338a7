"""Mappings table: paginated loading, client-side filtering, single-row editing and CSV export."""

from __future__ import annotations

import math
from pathlib import Path
from typing import TYPE_CHECKING

from ecsmapper import logger
from ecsmapper.exceptions import BackendError, EndpointNotImplementedError, MappingValidationError
from ecsmapper.exporting import MAPPINGS_EXPORT_FILENAME, rows_to_csv, write_export
from ecsmapper.typing.models import EditSession, MappingRow, MappingUpdate

if TYPE_CHECKING:
    from ecsmapper.typing.protocol import MappingService

DEFAULT_PAGE_SIZE = 20


class MappingsTable:
    """Cached page of persisted mapping rows with at most one row under edit.

    The visible rows are the loaded page filtered again by `query`, while page counts
    come from the server `total`, so a page may show fewer rows than it fetched.
    """

    def __init__(self, client: MappingService, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        """Initialize table state.

        Args:
            client (MappingService): Mapping backend.
            page_size (int): Rows requested per page.
        """
        self._client = client
        self.items: list[MappingRow] = []
        self.query = ""
        self.page = 1
        self.page_size = page_size
        self.total = 0
        self.loading = False
        self.not_implemented = False
        self.edit: EditSession | None = None
        self.saving_id: int | None = None
        self._generation = 0

    async def load(self) -> None:
        """Fetch the current page.

        A 404 flags the endpoint as not implemented; other failures are logged. In both
        cases the previously loaded rows are kept. Responses of superseded loads are dropped.
        """
        self._generation += 1
        generation = self._generation
        self.loading = True
        self.not_implemented = False
        try:
            listing = await self._client.list_mappings(search=self.query, page=self.page, page_size=self.page_size)
        except EndpointNotImplementedError as exc:
            if generation == self._generation:
                self.not_implemented = True
            logger.warning("Mappings endpoint not implemented", extra={"error": str(exc)})
        except BackendError as exc:
            logger.error("Failed to load mappings", extra={"error": str(exc), "status_code": exc.status_code})
        else:
            if generation == self._generation:
                self.items = listing.items
                self.total = listing.total
        finally:
            if generation == self._generation:
                self.loading = False

    def set_query(self, query: str) -> None:
        """Change the search query and go back to the first page without reloading."""
        self.query = query
        self.page = 1

    def filtered(self) -> list[MappingRow]:
        """Return loaded rows whose sourcetype, source field or mapped name contain the query."""
        if not self.query:
            return list(self.items)
        needle = self.query.lower()
        return [
            row
            for row in self.items
            if needle in row.sourcetype.lower()
            or needle in row.source_field.lower()
            or needle in row.mapped_field_name.lower()
        ]

    @property
    def total_pages(self) -> int:
        """Number of pages according to the server total."""
        return max(1, math.ceil(self.total / self.page_size))

    def status_line(self) -> str:
        """Return the `Page X / Y (N total)` summary."""
        return f"Page {self.page} / {self.total_pages} ({self.total} total)"

    async def go_to_page(self, page: int) -> bool:
        """Move to `page`, clamped to the known page range, and reload when it changed.

        Args:
            page (int): Requested 1-based page.

        Returns:
            bool: True when the page changed.
        """
        target = min(max(1, page), self.total_pages)
        if target == self.page:
            return False
        self.page = target
        await self.load()
        return True

    async def next_page(self) -> bool:
        """Move to the next page."""
        return await self.go_to_page(self.page + 1)

    async def prev_page(self) -> bool:
        """Move to the previous page."""
        return await self.go_to_page(self.page - 1)

    def find(self, row_id: int) -> MappingRow | None:
        """Return the loaded row with `row_id`, if any."""
        return next((row for row in self.items if row.id == row_id), None)

    def start_edit(self, row: MappingRow) -> EditSession:
        """Open the edit session on `row`, abandoning any other unsaved edit.

        Args:
            row (MappingRow): Row to edit.

        Returns:
            EditSession: The new session, seeded from the row.
        """
        self.edit = EditSession(
            row_id=row.id,
            human_verified=row.human_verified,
            mapped_field_name=row.mapped_field_name or "",
        )
        return self.edit

    def cancel_edit(self) -> None:
        """Drop the current edit session without saving."""
        self.edit = None

    def is_editing(self, row_id: int) -> bool:
        """Return whether `row_id` is the row under edit."""
        return self.edit is not None and self.edit.row_id == row_id

    def underscore_name(self, row: MappingRow) -> str:
        """Return the underscore variant of the mapped name, using the edited value while editing."""
        if self.edit is not None and self.edit.row_id == row.id:
            return self.edit.mapped_field_name.replace(".", "_")
        return row.mapped_field_name_underscore

    async def save_edit(self) -> MappingRow | None:
        """Persist the current edit and patch the cached row in place.

        Raises:
            MappingValidationError: If no edit is open or the mapped name is blank; nothing is sent.
            BackendError: If the backend rejects the update; rows and edit session are kept.

        Returns:
            MappingRow | None: The patched row, or None when it is not on the loaded page.
        """
        session = self.edit
        if session is None:
            raise MappingValidationError(message="No mapping row is being edited.")

        next_name = session.mapped_field_name.strip()
        if not next_name:
            raise MappingValidationError(message="Mapped Field cannot be empty.")

        row_id = session.row_id
        update = MappingUpdate(human_verified=session.human_verified, mapped_field_name=next_name)
        self.saving_id = row_id
        try:
            await self._client.update_mapping(row_id, update)
        except BackendError as exc:
            logger.error("Failed to update mapping", extra={"row_id": row_id, "error": str(exc)})
            raise
        finally:
            self.saving_id = None

        self.items = [
            row.model_copy(update=update.model_dump()) if row.id == row_id else row for row in self.items
        ]
        if self.edit is session:
            self.edit = None
        return self.find(row_id)

    def export_csv(self) -> str:
        """Render the filtered rows of the loaded page as CSV."""
        return rows_to_csv(self.filtered())

    def download_csv(self, directory: Path = Path()) -> Path:
        """Write the filtered rows of the loaded page to `ecs-mappings.csv`.

        Args:
            directory (Path): Target directory.

        Returns:
            Path: Written file path.
        """
        return write_export(directory, MAPPINGS_EXPORT_FILENAME, self.export_csv())
