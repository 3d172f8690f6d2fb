"""Item Service — public binding surface: fetch one or many remote items by id.

Invariants:
    - Null/invalid arguments raise ArgumentValidationError before any transport call
    - bind_to_items returns one response per id, in order (RETURN_ERRORS by default)
    - bind_to_item always uses THROW_ON_ERROR over a singleton id list
    - bind_to_item_as accepts the requested kind or any kind specializing it
    - Settings and the statistics cache are read, never replaced, by requests

Design Decisions:
    - One service instance is shared by concurrent callers; the only shared
      mutable state is the statistics cache (lock-guarded)
    - Async context manager closes the transport on exit
"""

import json
import logging
import uuid
from collections.abc import Iterable
from typing import Any

import httpx

from bindwire.config import ClientSettings
from bindwire.core.domain_types import ItemId, ItemKind, PropertySet, ServiceErrorHandling
from bindwire.core.errors import (
    ArgumentValidationError,
    ItemTypeNotCompatibleError,
    ServiceLocalError,
)
from bindwire.core.items import Item
from bindwire.core.responses import GetItemResponse, ServiceResponseCollection
from bindwire.core.validation import validate_param, validate_param_collection
from bindwire.infrastructure.client_statistics import ClientStatisticsCache, default_cache
from bindwire.infrastructure.transport import Transport, TransportRequest
from bindwire.services.get_item_request import GetItemRequest

logger = logging.getLogger(__name__)

CLIENT_REQUEST_ID_HEADER = "client-request-id"


class ItemService:
    """Binding to a remote item service."""

    def __init__(
        self,
        settings: ClientSettings,
        transport: Transport,
        statistics_cache: ClientStatisticsCache | None = None,
    ):
        self.settings = settings
        self.transport = transport
        self.statistics_cache = statistics_cache if statistics_cache is not None else default_cache

    @property
    def send_client_latencies(self) -> bool:
        return self.settings.send_client_latencies

    @property
    def url(self) -> str:
        return self.settings.service_url

    async def __aenter__(self) -> "ItemService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.transport.aclose()

    # -- Request plumbing (used by ServiceRequestBase) -------------------------

    def validate(self) -> None:
        if not self.url:
            raise ServiceLocalError("The service URL must be set before issuing requests.")

    def prepare_request(
        self, payload: dict[str, Any], extra_headers: dict[str, str] | None = None,
    ) -> TransportRequest:
        headers = httpx.Headers({
            "Content-Type": "application/json; charset=utf-8",
            "Accept": "application/json",
            "User-Agent": self.settings.user_agent,
            CLIENT_REQUEST_ID_HEADER: str(uuid.uuid4()),
        })
        if extra_headers:
            headers.update(extra_headers)
        return TransportRequest(
            method="POST",
            url=self.url,
            headers=headers,
            content=json.dumps(payload, ensure_ascii=False).encode("utf-8"),
        )

    # -- Binding ---------------------------------------------------------------

    async def bind_to_items(
        self,
        item_ids: Iterable[ItemId],
        property_set: PropertySet,
        anchor_mailbox: str | None = None,
        error_handling: ServiceErrorHandling = ServiceErrorHandling.RETURN_ERRORS,
    ) -> ServiceResponseCollection[GetItemResponse]:
        """Bind to multiple items in one call; one response per id, in order."""
        ids = validate_param_collection(item_ids, "item_ids", ItemId)
        validate_param(property_set, "property_set", PropertySet)
        return await self._internal_bind_to_items(ids, property_set, anchor_mailbox, error_handling)

    async def bind_to_item(self, item_id: ItemId, property_set: PropertySet) -> Item:
        """Bind to a single item; a remote error is raised as ServiceResponseError."""
        validate_param(item_id, "item_id", ItemId)
        validate_param(property_set, "property_set", PropertySet)

        responses = await self._internal_bind_to_items(
            [item_id], property_set, None, ServiceErrorHandling.THROW_ON_ERROR,
        )
        return responses[0].item

    async def bind_to_item_as(
        self, item_id: ItemId, property_set: PropertySet, kind: ItemKind,
    ) -> Item:
        """Bind to a single item and require it to be a variant of `kind`."""
        validate_param(kind, "kind")
        try:
            requested = ItemKind(kind)
        except ValueError as e:
            raise ArgumentValidationError(f"Unknown item kind '{kind}'", "kind") from e

        item = await self.bind_to_item(item_id, property_set)

        if item.is_variant_of(requested):
            return item
        raise ItemTypeNotCompatibleError(item.type_name, requested.value)

    async def _internal_bind_to_items(
        self,
        item_ids: list[ItemId],
        property_set: PropertySet,
        anchor_mailbox: str | None,
        error_handling: ServiceErrorHandling,
    ) -> ServiceResponseCollection[GetItemResponse]:
        request = GetItemRequest(
            self, error_handling,
            item_ids=item_ids,
            property_set=property_set,
            anchor_mailbox=anchor_mailbox,
        )
        logger.debug(
            f"Binding {len(item_ids)} item(s)",
            extra={"item_count": len(item_ids), "anchor_mailbox": anchor_mailbox},
        )
        return await request.execute()
