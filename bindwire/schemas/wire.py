"""Wire Schemas — pydantic models for the GetItem JSON envelopes.

Invariants:
    - Field names on the wire are PascalCase (aliases); Python side is snake_case
    - Requests serialize with by_alias=True, exclude_none=True
    - Unknown response fields are ignored (forward-compatible servers)
    - A fault envelope is only produced with a non-2xx status

Design Decisions:
    - ResponseMessage.items is a list although GetItem returns at most one item
      per message: the service shares the message shape across operations
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bindwire.core.domain_types import BasePropertySet, ServiceResult


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ─── Request ────────────────────────────────────────────────────

class WireItemId(WireModel):
    id: str = Field(alias="Id", min_length=1)
    change_key: str | None = Field(None, alias="ChangeKey")


class ItemShape(WireModel):
    base_shape: BasePropertySet = Field(alias="BaseShape")
    additional_properties: list[str] = Field(default_factory=list, alias="AdditionalProperties")


class GetItemRequestEnvelope(WireModel):
    operation: str = Field("GetItem", alias="Operation")
    item_shape: ItemShape = Field(alias="ItemShape")
    item_ids: list[WireItemId] = Field(alias="ItemIds", min_length=1)


# ─── Response ───────────────────────────────────────────────────

class WireItem(WireModel):
    item_type: str | None = Field(None, alias="ItemType")
    item_id: WireItemId = Field(alias="ItemId")
    properties: dict[str, Any] = Field(default_factory=dict, alias="Properties")


class ResponseMessage(WireModel):
    response_class: ServiceResult = Field(alias="ResponseClass")
    response_code: str = Field("NoError", alias="ResponseCode")
    message_text: str | None = Field(None, alias="MessageText")
    message_details: dict[str, Any] | None = Field(None, alias="MessageDetails")
    items: list[WireItem] = Field(default_factory=list, alias="Items")


class ResponseEnvelope(WireModel):
    response_messages: list[ResponseMessage] = Field(alias="ResponseMessages")


# ─── Fault ──────────────────────────────────────────────────────

class FaultDetail(WireModel):
    fault_code: str | None = Field(None, alias="FaultCode")
    response_code: str = Field(alias="ResponseCode")
    message: str | None = Field(None, alias="Message")
    back_off_ms: int | None = Field(None, alias="BackOffMilliseconds", ge=0)


class FaultEnvelope(WireModel):
    fault: FaultDetail = Field(alias="Fault")
