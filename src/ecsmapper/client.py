"""Async HTTP client for the ECS mapping service."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from ecsmapper import logger
from ecsmapper.exceptions import BackendError, EndpointNotImplementedError
from ecsmapper.typing.models import (
    BatchInputItem,
    MapBatchResultItem,
    MappingListPage,
    MappingRow,
    MappingUpdate,
)

if TYPE_CHECKING:
    from ecsmapper.settings import Settings

MAP_BATCH_PATH = "/map-batch"
MAPPINGS_PATH = "/mappings"

M = TypeVar("M", bound=BaseModel)


def _error_detail(response: httpx.Response) -> str | None:
    """Extract the `detail` or `message` field of a JSON error body.

    Args:
        response (httpx.Response): Failed response.

    Returns:
        str | None: Backend-supplied detail text, if any.
    """
    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None

    for key in ("detail", "message"):
        value = payload.get(key)
        if not value:
            continue
        return value if isinstance(value, str) else json.dumps(value)
    return None


def _validate_each(model: type[M], raw_items: list[Any], path: str) -> list[M]:
    """Validate items one by one, skipping and logging those that do not match `model`.

    Args:
        model (type[M]): Pydantic model of one item.
        raw_items (list[Any]): Decoded items.
        path (str): Endpoint path, for logging.

    Returns:
        list[M]: Valid items in their original order.
    """
    valid: list[M] = []
    for index, raw in enumerate(raw_items):
        try:
            valid.append(model.model_validate(raw))
        except ValidationError as exc:
            logger.warning(
                "Skipping malformed item",
                extra={"path": path, "index": index, "errors": exc.error_count()},
            )
    return valid


def _json_body(response: httpx.Response, path: str) -> Any:
    try:
        return response.json()
    except ValueError as exc:
        raise BackendError(message=f"{path} returned a non-JSON body", status_code=response.status_code) from exc


class EcsMappingClient:
    """Client for `/map-batch` and `/mappings` on the configured backend origin."""

    def __init__(self, settings: Settings) -> None:
        """Initialize client.

        Args:
            settings (Settings): Runtime settings holding the backend origin and HTTPX clients.
        """
        self._settings = settings

    def _http_client(self) -> httpx.AsyncClient:
        client = self._settings.select_async_httpx_client(self._settings.api_base_url)
        if client is None:
            raise BackendError(message="httpx clients are not initialized in settings")
        return client

    def _url(self, path: str) -> str:
        return f"{self._settings.api_base_url}{path if path.startswith('/') else f'/{path}'}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: Any = None,
        not_found_means_missing_endpoint: bool = False,
    ) -> httpx.Response:
        """Send one request and translate failures into package errors.

        Args:
            method (str): HTTP method.
            path (str): Path relative to the backend origin.
            params (dict[str, Any] | None): Query parameters.
            body (Any): JSON body.
            not_found_means_missing_endpoint (bool): Map a 404 to `EndpointNotImplementedError`.

        Raises:
            BackendError: If the transport fails or the status is not 2xx.
            EndpointNotImplementedError: If a 404 signals a missing endpoint.

        Returns:
            httpx.Response: Successful response.
        """
        try:
            response = await self._http_client().request(method, self._url(path), params=params, json=body)
        except httpx.TimeoutException as exc:
            raise BackendError(message=f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise BackendError(message=f"{method} {path} failed: {exc}") from exc

        if response.is_success:
            return response

        status_code = response.status_code
        detail = _error_detail(response)
        if status_code == httpx.codes.NOT_FOUND and not_found_means_missing_endpoint:
            raise EndpointNotImplementedError(
                message=f"{path} is not implemented by the backend",
                status_code=status_code,
                detail=detail,
            )
        raise BackendError(
            message=f"{method} {path} failed with status {status_code}",
            status_code=status_code,
            detail=detail,
        )

    async def map_batch(
        self,
        items: list[BatchInputItem],
        *,
        limit: int,
        model: str,
    ) -> list[MapBatchResultItem]:
        """Classify a batch of fields.

        Args:
            items (list[BatchInputItem]): Fields to classify.
            limit (int): Number of retrieval hints per field.
            model (str): Classifier model.

        Raises:
            BackendError: If the request fails.

        Returns:
            list[MapBatchResultItem]: Well-formed results; empty when the body carries no `results` list.
        """
        response = await self._request(
            "POST",
            MAP_BATCH_PATH,
            params={"limit": limit, "model": model},
            body=[item.model_dump(mode="json") for item in items],
        )
        data = _json_body(response, MAP_BATCH_PATH)
        raw_results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(raw_results, list):
            logger.warning("Batch response carried no results list", extra={"fields": len(items)})
            return []

        results = _validate_each(MapBatchResultItem, raw_results, MAP_BATCH_PATH)
        logger.info("Batch mapped", extra={"fields": len(items), "results": len(results), "model": model})
        return results

    async def list_mappings(self, *, search: str, page: int, page_size: int) -> MappingListPage:
        """Fetch one page of persisted mapping rows.

        Args:
            search (str): Server-side search string.
            page (int): 1-based page number.
            page_size (int): Rows per page.

        Raises:
            BackendError: If the request fails or the total is not an integer.

        Returns:
            MappingListPage: Well-formed rows and the server total.
        """
        response = await self._request(
            "GET",
            MAPPINGS_PATH,
            params={"search": search, "page": page, "pageSize": page_size},
            not_found_means_missing_endpoint=True,
        )
        data = _json_body(response, MAPPINGS_PATH)
        if not isinstance(data, dict):
            data = {}

        raw_items = data.get("items")
        rows = _validate_each(MappingRow, raw_items if isinstance(raw_items, list) else [], MAPPINGS_PATH)
        try:
            listing = MappingListPage(items=rows, total=data.get("total") or 0)
        except ValidationError as exc:
            raise BackendError(message=f"{MAPPINGS_PATH} returned an invalid total: {exc}") from exc

        logger.debug("Mappings page loaded", extra={"page": page, "rows": len(listing.items), "total": listing.total})
        return listing

    async def update_mapping(self, row_id: int, update: MappingUpdate) -> None:
        """Persist a partial update of one mapping row.

        Args:
            row_id (int): Row identifier.
            update (MappingUpdate): Fields to update.
        """
        await self._request("PATCH", f"{MAPPINGS_PATH}/{row_id}", body=update.model_dump(mode="json"))
        logger.info("Mapping updated", extra={"row_id": row_id})
