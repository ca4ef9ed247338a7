"""Mapping service interface."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ecsmapper.typing.models import BatchInputItem, MapBatchResultItem, MappingListPage, MappingUpdate


class MappingService(Protocol):
    """Operations the sessions need from the mapping backend."""

    async def map_batch(
        self,
        items: list[BatchInputItem],
        *,
        limit: int,
        model: str,
    ) -> list[MapBatchResultItem]:
        """Classify a batch of fields.

        Args:
            items: Fields to classify.
            limit: Number of retrieval hints per field.
            model: Classifier model.

        Returns:
            list[MapBatchResultItem]: One result per classified field.
        """

    async def list_mappings(self, *, search: str, page: int, page_size: int) -> MappingListPage:
        """Fetch one page of persisted mapping rows.

        Args:
            search: Server-side search string.
            page: 1-based page number.
            page_size: Rows per page.

        Returns:
            MappingListPage: Rows and server total.
        """

    async def update_mapping(self, row_id: int, update: MappingUpdate) -> None:
        """Persist a partial update of one mapping row.

        Args:
            row_id: Row identifier.
            update: Fields to update.
        """
