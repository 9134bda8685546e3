"""Domain models used in business logic."""
import uuid
from collections.abc import Iterable
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


DEFAULT_COUNTRY = "US"


class ClientStatus(StrEnum):
    """Lifecycle status of a client record."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class ClientFields(BaseModel):
    """Fields shared by a persisted client and a creation payload."""
    first_name: str = Field(..., min_length=1, description="First name cannot be blank")
    last_name: str = Field(..., min_length=1, description="Last name cannot be blank")

    email: EmailStr | None = None
    phone: str | None = None

    date_of_birth: date | None = None
    gender: str | None = None
    occupation: str | None = None
    avatar_url: str | None = None

    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str = DEFAULT_COUNTRY

    status: ClientStatus = ClientStatus.ACTIVE

    notes: str | None = None
    alerts: str | None = None
    last_visit: date | None = None

    model_config = {"from_attributes": True}


class Client(ClientFields):
    """Domain model for Client used in business logic."""
    id: UUID = Field(default_factory=uuid.uuid4, description="Unique client ID")
    client_id: int | None = Field(default=None, description="Human-facing sequence number")
    labels: list[str] = Field(default_factory=list)
    total_visits: int = Field(default=0, ge=0)
    lifetime_value: Decimal = Field(default=Decimal("0"), ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), description="Creation timestamp")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC), description="Last mutation timestamp")

    @field_validator("labels", mode="before")
    @classmethod
    def labels_never_absent(cls, v: Any) -> Any:
        """A missing label collection is stored as an empty one."""
        return [] if v is None else v

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ClientDraft(ClientFields):
    """
    Payload for creating a client.

    Business rules such as "email or phone is required" belong to the form
    layer; the draft only carries what will be persisted. Counters and labels
    left unset are defaulted by the service.
    """
    labels: list[str] | None = None
    total_visits: int | None = Field(default=None, ge=0)
    lifetime_value: Decimal | None = Field(default=None, ge=0)


class ClientPatch(BaseModel):
    """
    Partial update of a client.

    Only the fields explicitly set on the patch are applied; everything else is
    left untouched. ``id`` and ``created_at`` cannot be changed.
    """
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    phone: str | None = None
    date_of_birth: date | None = None
    gender: str | None = None
    occupation: str | None = None
    avatar_url: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    status: ClientStatus | None = None
    labels: list[str] | None = None
    notes: str | None = None
    alerts: str | None = None
    last_visit: date | None = None
    total_visits: int | None = Field(default=None, ge=0)
    lifetime_value: Decimal | None = Field(default=None, ge=0)

    model_config = {"extra": "forbid"}

    @field_validator("first_name", "last_name", "status", "country", "total_visits", "lifetime_value")
    @classmethod
    def not_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field cannot be cleared")
        return v

    @field_validator("labels", mode="before")
    @classmethod
    def labels_never_absent(cls, v: Any) -> Any:
        return [] if v is None else v

    def changes(self) -> dict[str, Any]:
        """Fields explicitly set on this patch."""
        return self.model_dump(exclude_unset=True)

    def is_empty(self) -> bool:
        return not self.model_fields_set


class ClientFilter(BaseModel):
    """Server-side filter for listing clients."""
    search: str | None = None
    status: ClientStatus | None = None
    labels: list[str] | None = None
    limit: int | None = Field(default=None, gt=0)
    offset: int | None = Field(default=None, ge=0)

    model_config = {"frozen": True}

    @property
    def has_text_search(self) -> bool:
        return bool(self.search and self.search.strip())


class ClientStats(BaseModel):
    """Client counts per status."""
    total: int = 0
    active: int = 0
    inactive: int = 0
    archived: int = 0

    @classmethod
    def tally(cls, statuses: Iterable[ClientStatus | str]) -> "ClientStats":
        """Count statuses one by one."""
        counts = {status: 0 for status in ClientStatus}
        for status in statuses:
            counts[ClientStatus(status)] += 1
        return cls.from_counts(counts)

    @classmethod
    def from_counts(cls, counts: dict[ClientStatus, int]) -> "ClientStats":
        """Build stats from per-status counts; total is their sum."""
        active = counts.get(ClientStatus.ACTIVE, 0)
        inactive = counts.get(ClientStatus.INACTIVE, 0)
        archived = counts.get(ClientStatus.ARCHIVED, 0)
        return cls(
            total=active + inactive + archived,
            active=active,
            inactive=inactive,
            archived=archived,
        )
