"""Domain models for events, registrations and the views built from them."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class EventType(StrEnum):
    NORMAL = "Normal"
    MERCHANDISE = "Merchandise"


class EventCategory(StrEnum):
    TECHNICAL = "Technical"
    CULTURAL = "Cultural"
    SPORTS = "Sports"
    LITERARY = "Literary"
    ART = "Art"
    MUSIC = "Music"
    DANCE = "Dance"
    PHOTOGRAPHY = "Photography"
    GAMING = "Gaming"
    OTHER = "Other"


class Eligibility(StrEnum):
    ALL = "All"
    IIIT = "IIIT"
    NON_IIIT = "Non-IIIT"


class EventStatus(StrEnum):
    """Derived on every read from publication flag, dates and the clock."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ONGOING = "ongoing"
    COMPLETED = "completed"


class RegistrationStatus(StrEnum):
    REGISTERED = "registered"
    ATTENDED = "attended"
    CANCELLED = "cancelled"


class PaymentStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class TimeWindow(StrEnum):
    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"


class SearchTarget(StrEnum):
    EVENT_NAME = "event_name"
    PARTICIPANT = "participant"


# Sentinel accepted by the status and payment filters.
ALL = "all"


class WireModel(BaseModel):
    """Base for records exchanged with the events API (camelCase on the wire)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _object_id() -> Any:
    return Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="id")


# ---------------------------------------------------------------------------
# Embedded references
# ---------------------------------------------------------------------------


class OrganizerRef(WireModel):
    id: str = _object_id()
    organizer_name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    category: str | None = None


class ParticipantRef(WireModel):
    id: str = _object_id()
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class CustomFormField(WireModel):
    field_label: str
    field_type: str
    is_required: bool = False
    options: list[str] = Field(default_factory=list)
    placeholder: str = ""


class MerchandiseVariant(WireModel):
    name: str | None = None
    price: float | None = None
    description: str | None = None


class ItemDetails(WireModel):
    size: list[str] = Field(default_factory=list)
    color: list[str] = Field(default_factory=list)
    variants: list[MerchandiseVariant] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.size or self.color or self.variants)


def _ref_id(value: OrganizerRef | str | None) -> str | None:
    if isinstance(value, OrganizerRef):
        return value.id
    return value


def ref_ids(values: Any) -> frozenset[str]:
    """Collapse bare ids and populated records (`{"_id": ...}`) into ids."""
    if not values:
        return frozenset()
    return frozenset(
        (item.get("_id") or item.get("id")) if isinstance(item, dict) else item
        for item in values
    )


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class Event(WireModel):
    id: str = _object_id()
    name: str
    description: str = ""
    type: EventType
    category: EventCategory | None = None
    start_date: datetime
    end_date: datetime
    registration_deadline: datetime
    registration_fee: float = Field(default=0, ge=0)
    registration_limit: int | None = Field(default=None, ge=1)
    organizer: OrganizerRef | str | None = None
    custom_form: list[CustomFormField] | None = None
    item_details: ItemDetails | None = None
    stock_quantity: int | None = Field(default=None, ge=0)
    purchase_limit_per_participant: int | None = Field(default=None, ge=1)
    is_published: bool = False
    current_registrations: int = Field(default=0, ge=0)
    image_url: str | None = None
    venue: str | None = None
    tags: list[str] = Field(default_factory=list)
    eligibility: Eligibility = Eligibility.ALL

    @model_validator(mode="after")
    def _end_not_before_start(self) -> Event:
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self

    @property
    def organizer_id(self) -> str | None:
        return _ref_id(self.organizer)


class EventSummary(WireModel):
    """The slice of an event the API embeds inside a registration."""

    id: str = _object_id()
    name: str
    type: EventType | None = None
    category: EventCategory | None = None
    start_date: datetime
    end_date: datetime | None = None
    venue: str | None = None
    image_url: str | None = None
    registration_fee: float = 0
    organizer: OrganizerRef | str | None = None

    @property
    def organizer_id(self) -> str | None:
        return _ref_id(self.organizer)


class Registration(WireModel):
    id: str = _object_id()
    event: EventSummary | str
    participant: ParticipantRef | str
    status: RegistrationStatus = RegistrationStatus.REGISTERED
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_amount: float = 0
    ticket_id: str | None = None
    form_data: dict = Field(default_factory=dict)
    registration_date: datetime | None = None

    @property
    def event_summary(self) -> EventSummary | None:
        return self.event if isinstance(self.event, EventSummary) else None

    @property
    def participant_ref(self) -> ParticipantRef | None:
        return self.participant if isinstance(self.participant, ParticipantRef) else None


class Session(BaseModel):
    """Authenticated caller, passed explicitly into the API client."""

    token: str


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class FilterSet(BaseModel):
    """Optional, conjunctive predicates over events or registrations.

    Every field defaults to the value that bypasses its predicate.
    """

    status: RegistrationStatus | str = ALL
    payment_status: PaymentStatus | str = ALL
    time_window: TimeWindow = TimeWindow.ALL
    search: str = ""
    search_target: SearchTarget = SearchTarget.EVENT_NAME
    followed_only: bool = False
    following: frozenset[str] = frozenset()
    event_type: EventType | None = None
    category: EventCategory | None = None
    starts_after: datetime | None = None
    starts_before: datetime | None = None

    @field_validator("status")
    @classmethod
    def _status_or_all(cls, value: str) -> str:
        if value != ALL:
            return RegistrationStatus(value)
        return value

    @field_validator("payment_status")
    @classmethod
    def _payment_or_all(cls, value: str) -> str:
        if value != ALL:
            return PaymentStatus(value)
        return value


# ---------------------------------------------------------------------------
# Response DTOs
# ---------------------------------------------------------------------------


class EventView(BaseModel):
    event: Event
    status: EventStatus
    registration_open: bool
    is_full: bool
    low_stock: bool


class EditabilityView(BaseModel):
    event_id: str
    status: EventStatus
    has_registrations: bool
    editable_fields: list[str]


class StaleEditResponse(BaseModel):
    detail: str
    status: EventStatus
    editable_fields: list[str]
