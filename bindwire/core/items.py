"""Item entity — tagged remote item returned by a bind."""

from dataclasses import dataclass, field
from typing import Any

from bindwire.core.domain_types import ItemId, ItemKind


@dataclass
class Item:
    """A bound item. `kind` is the variant tag; properties hold the loaded fields.

    `type_name` is the type the service reported. It differs from `kind.value`
    when the service sent a type this client has no kind for (kind is then ITEM).
    """
    item_id: ItemId
    kind: ItemKind = ItemKind.ITEM
    properties: dict[str, Any] = field(default_factory=dict)
    type_name: str = ""

    def __post_init__(self):
        if not self.type_name:
            self.type_name = self.kind.value

    def is_variant_of(self, kind: ItemKind) -> bool:
        return self.kind.is_variant_of(kind)

    def get(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self.properties[name]
