"""Domain records: clients, orders, service templates and the persisted payload.

All records are immutable pydantic models.  The data store never edits one in
place; it builds a re-validated copy and swaps it in, so a malformed
``Client`` or ``Order`` cannot exist at any point.

On disk the records use camelCase keys (``clientId``, ``isArchived``, ...) and
ISO-8601 UTC timestamps truncated to whole seconds.
"""
import datetime
import math
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime.datetime:
    """Current time as an aware UTC datetime with whole-second precision."""
    return datetime.datetime.now(datetime.timezone.utc).replace(microsecond=0)


def to_utc(value: datetime.datetime) -> datetime.datetime:
    """Normalise *value* to aware UTC, dropping sub-second precision.

    Naive datetimes are interpreted as local wall-clock time.
    """
    if value.tzinfo is None:
        value = value.astimezone()
    return value.astimezone(datetime.timezone.utc).replace(microsecond=0)


class OrderStatus(str, Enum):
    """Workflow status of an order.  No status is terminal."""

    NEW = 'New'
    IN_PROGRESS = 'In Progress'
    DONE = 'Done'
    CANCELED = 'Canceled'


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Client(_Record):
    """A customer.  Archived clients stay addressable by id."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    note: Optional[str] = None
    created_at: datetime.datetime = Field(default_factory=utcnow)
    is_archived: bool = False

    @field_validator('name')
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('client name must not be empty')
        return value

    @field_validator('created_at')
    @classmethod
    def _normalise_created_at(cls, value: datetime.datetime) -> datetime.datetime:
        return to_utc(value)


class Order(_Record):
    """A scheduled service engagement for one client."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    client_id: uuid.UUID
    service_name: str
    service_icon: str = ''
    service_color_hex: str = ''
    price: float
    date: datetime.datetime
    note: Optional[str] = None
    status: OrderStatus = OrderStatus.NEW
    created_at: datetime.datetime = Field(default_factory=utcnow)

    @field_validator('service_name')
    @classmethod
    def _service_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError('service name must not be empty')
        return value

    @field_validator('price')
    @classmethod
    def _price_positive(cls, value: float) -> float:
        if not math.isfinite(value) or value <= 0:
            raise ValueError('price must be a positive number')
        return value

    @field_validator('date', 'created_at')
    @classmethod
    def _normalise_timestamps(cls, value: datetime.datetime) -> datetime.datetime:
        return to_utc(value)


class ServiceTemplate(_Record):
    """A preset used to pre-fill new orders.  Never persisted."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    base_price: float
    icon: str
    color_hex: str

    @classmethod
    def default_templates(cls) -> List['ServiceTemplate']:
        """Return the built-in template catalog (5 entries)."""
        return [
            cls(name='Haircut', base_price=30, icon='scissors', color_hex='#FFA500'),
            cls(name='Manicure', base_price=25, icon='hand.raised.fill', color_hex='#FF66B2'),
            cls(name='Consulting', base_price=50, icon='person.text.rectangle', color_hex='#40E0D0'),
            cls(name='Photo', base_price=70, icon='camera.fill', color_hex='#A55EFF'),
            cls(name='Training', base_price=40, icon='dumbbell.fill', color_hex='#6FFF7B'),
        ]


class Payload(_Record):
    """Full snapshot of the dataset; the unit of persistence.

    Schema::

        {
            "clients":  [{"createdAt", "id", "isArchived", "name", "note"}, ...],
            "orders":   [{"clientId", "createdAt", "date", "id", "note", "price",
                          "serviceColorHex", "serviceIcon", "serviceName",
                          "status"}, ...],
            "seededAt": "<ISO-8601>" | null
        }
    """

    clients: List[Client] = Field(default_factory=list)
    orders: List[Order] = Field(default_factory=list)
    seeded_at: Optional[datetime.datetime] = None

    @field_validator('seeded_at')
    @classmethod
    def _normalise_seeded_at(cls, value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
        return to_utc(value) if value is not None else None

    def to_document(self) -> Dict[str, Any]:
        """Return the JSON-ready dict written to disk."""
        return self.model_dump(mode='json', by_alias=True)
