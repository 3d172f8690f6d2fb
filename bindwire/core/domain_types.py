"""Domain Types — identifiers, property selections and the enums the pipeline runs on.

Invariants:
    - ItemId and PropertySet are frozen: a request never sees them change
    - ItemId.unique_id is a non-empty string (checked by validate())
    - PropertySet additional properties are non-empty and unique (checked by validate())
    - ServiceErrorHandling is fixed per request at construction
    - Every valid state is an Enum member — no raw string matching

Design Decisions:
    - str Enums: values are the wire spellings, so payloads need no mapping table
    - validate() methods raise ServiceValidationError; validate_param() turns
      that into an ArgumentValidationError naming the parameter
"""

from dataclasses import dataclass
from enum import Enum

from bindwire.core.errors import ServiceValidationError


class ServiceErrorHandling(str, Enum):
    """How a multi-response request reports per-item errors."""
    THROW_ON_ERROR = "ThrowOnError"
    RETURN_ERRORS = "ReturnErrors"


class ServiceResult(str, Enum):
    """Outcome class of one per-item response."""
    SUCCESS = "Success"
    WARNING = "Warning"
    ERROR = "Error"


class BasePropertySet(str, Enum):
    """Base shape of the properties returned for each item."""
    ID_ONLY = "IdOnly"
    FIRST_CLASS_PROPERTIES = "AllProperties"


@dataclass(frozen=True)
class ItemId:
    """Opaque identifier of one remote item."""
    unique_id: str
    change_key: str | None = None

    def validate(self) -> None:
        if not isinstance(self.unique_id, str) or not self.unique_id.strip():
            raise ServiceValidationError("ItemId.unique_id must be a non-empty string.")

    def __str__(self) -> str:
        return self.unique_id


@dataclass(frozen=True)
class PropertySet:
    """Immutable selection of the item properties to load."""
    base_property_set: BasePropertySet = BasePropertySet.FIRST_CLASS_PROPERTIES
    additional_properties: tuple[str, ...] = ()

    @classmethod
    def id_only(cls) -> "PropertySet":
        return cls(BasePropertySet.ID_ONLY)

    @classmethod
    def first_class_properties(cls) -> "PropertySet":
        return cls(BasePropertySet.FIRST_CLASS_PROPERTIES)

    def with_properties(self, *names: str) -> "PropertySet":
        """Return a new PropertySet with names appended."""
        return PropertySet(self.base_property_set, self.additional_properties + tuple(names))

    def validate(self) -> None:
        seen: set[str] = set()
        for name in self.additional_properties:
            if not isinstance(name, str) or not name.strip():
                raise ServiceValidationError("Additional property names must be non-empty strings.")
            if name in seen:
                raise ServiceValidationError(f"Property '{name}' is listed more than once.")
            seen.add(name)


class ItemKind(str, Enum):
    """Tagged item variants. Each kind specializes its parent (see _PARENTS)."""
    ITEM = "Item"
    MESSAGE = "Message"
    MEETING_MESSAGE = "MeetingMessage"
    MEETING_REQUEST = "MeetingRequest"
    MEETING_RESPONSE = "MeetingResponse"
    MEETING_CANCELLATION = "MeetingCancellation"
    APPOINTMENT = "CalendarItem"
    CONTACT = "Contact"
    CONTACT_GROUP = "DistributionList"
    TASK = "Task"
    POST_ITEM = "PostItem"

    @property
    def parent(self) -> "ItemKind | None":
        return _PARENTS.get(self)

    def is_variant_of(self, other: "ItemKind") -> bool:
        """True when self equals other or specializes it."""
        kind: ItemKind | None = self
        while kind is not None:
            if kind is other:
                return True
            kind = kind.parent
        return False

    @classmethod
    def from_wire(cls, value: str | None) -> "ItemKind":
        """Map a wire type name to a kind; unknown names fall back to ITEM."""
        try:
            return cls(value)
        except ValueError:
            return cls.ITEM


_PARENTS: dict[ItemKind, ItemKind] = {
    ItemKind.MESSAGE: ItemKind.ITEM,
    ItemKind.MEETING_MESSAGE: ItemKind.MESSAGE,
    ItemKind.MEETING_REQUEST: ItemKind.MEETING_MESSAGE,
    ItemKind.MEETING_RESPONSE: ItemKind.MEETING_MESSAGE,
    ItemKind.MEETING_CANCELLATION: ItemKind.MEETING_MESSAGE,
    ItemKind.APPOINTMENT: ItemKind.ITEM,
    ItemKind.CONTACT: ItemKind.ITEM,
    ItemKind.CONTACT_GROUP: ItemKind.ITEM,
    ItemKind.TASK: ItemKind.ITEM,
    ItemKind.POST_ITEM: ItemKind.ITEM,
}
