"""GetItem Request — binds item ids to items with a selected property set.

Invariants:
    - One response message expected per item id, same order
    - anchor_mailbox, when set, is sent as X-AnchorMailbox to pin the backing partition
    - Successful messages materialize their first item; error messages carry no item
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from bindwire.core.domain_types import (
    ItemId,
    ItemKind,
    PropertySet,
    ServiceErrorHandling,
    ServiceResult,
)
from bindwire.core.items import Item
from bindwire.core.responses import GetItemResponse
from bindwire.core.validation import validate_param, validate_param_collection
from bindwire.schemas.wire import (
    GetItemRequestEnvelope,
    ItemShape,
    ResponseMessage,
    WireItem,
    WireItemId,
)
from bindwire.services.multi_response_request import MultiResponseServiceRequest

if TYPE_CHECKING:
    from bindwire.services.item_service import ItemService

ANCHOR_MAILBOX_HEADER = "X-AnchorMailbox"


class GetItemRequest(MultiResponseServiceRequest[GetItemResponse]):
    """GetItem operation over one or more item ids."""

    def __init__(
        self,
        service: "ItemService",
        error_handling_mode: ServiceErrorHandling,
        item_ids: Iterable[ItemId] | None = (),
        property_set: PropertySet | None = None,
        anchor_mailbox: str | None = None,
    ):
        super().__init__(service, error_handling_mode)
        self.item_ids: list[ItemId] | None = list(item_ids) if item_ids is not None else None
        self.property_set = property_set
        self.anchor_mailbox = anchor_mailbox

    def validate(self) -> None:
        super().validate()
        validate_param_collection(self.item_ids, "item_ids", ItemId)
        validate_param(self.property_set, "property_set", PropertySet)

    def get_expected_response_message_count(self) -> int:
        return len(self.item_ids)

    def get_payload(self) -> dict[str, Any]:
        envelope = GetItemRequestEnvelope(
            operation=self.operation_name,
            item_shape=ItemShape(
                base_shape=self.property_set.base_property_set,
                additional_properties=list(self.property_set.additional_properties),
            ),
            item_ids=[
                WireItemId(id=i.unique_id, change_key=i.change_key) for i in self.item_ids
            ],
        )
        return envelope.model_dump(mode="json", by_alias=True, exclude_none=True)

    def get_request_headers(self) -> dict[str, str]:
        if self.anchor_mailbox:
            return {ANCHOR_MAILBOX_HEADER: self.anchor_mailbox}
        return {}

    def create_service_response(self, message: ResponseMessage, index: int) -> GetItemResponse:
        item = None
        if message.response_class != ServiceResult.ERROR and message.items:
            item = _materialize(message.items[0])
        return GetItemResponse(
            item=item,
            result=message.response_class,
            error_code=message.response_code,
            error_message=message.message_text,
            error_details=message.message_details,
        )


def _materialize(wire: WireItem) -> Item:
    return Item(
        item_id=ItemId(wire.item_id.id, wire.item_id.change_key),
        kind=ItemKind.from_wire(wire.item_type),
        properties=dict(wire.properties),
        type_name=wire.item_type or "",
    )
