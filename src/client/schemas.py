"""API schemas for client requests and responses."""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


class ClientStatusEnum(str, Enum):
    """Client status enum for API."""
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class CreateClientRequest(BaseModel):
    """
    Request schema for creating a new client.

    This is where form rules live: names must not be blank and at least one
    way of reaching the client (email or phone) is required.
    """
    first_name: str = Field(..., min_length=1, description="First name cannot be blank")
    last_name: str = Field(..., min_length=1, description="Last name cannot be blank")
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)

    date_of_birth: date | None = None
    gender: str | None = None
    occupation: str | None = None
    avatar_url: str | None = None

    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str = "US"

    status: ClientStatusEnum = ClientStatusEnum.ACTIVE
    labels: list[str] = Field(default_factory=list)

    notes: str | None = None
    alerts: str | None = None
    last_visit: date | None = None
    total_visits: int = Field(default=0, ge=0)
    lifetime_value: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Ensure name fields are not just whitespace."""
        if not v or not v.strip():
            raise ValueError("Field cannot be blank or only whitespace")
        return v.strip()

    @field_validator("phone", mode="before")
    @classmethod
    def blank_phone_is_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_contact(self) -> "CreateClientRequest":
        """Require at least one of email and phone."""
        if not self.email and not self.phone:
            raise ValueError("Either email or phone number is required")
        return self


class UpdateClientRequest(BaseModel):
    """Request schema for a partial client update; only the fields sent are changed."""
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=20)
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
    status: ClientStatusEnum | None = None
    labels: list[str] | None = None
    notes: str | None = None
    alerts: str | None = None
    last_visit: date | None = None
    total_visits: int | None = Field(default=None, ge=0)
    lifetime_value: Decimal | None = Field(default=None, ge=0)

    model_config = {"extra": "forbid"}

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_not_blank(cls, v: str | None) -> str | None:
        """Ensure name fields, when sent, are not just whitespace."""
        if v is not None and not v.strip():
            raise ValueError("Field cannot be blank or only whitespace")
        return v.strip() if v is not None else v


class ClientResponse(BaseModel):
    """Response schema for client data returned by the API."""
    id: UUID
    client_id: int | None = None
    first_name: str
    last_name: str
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
    country: str
    status: ClientStatusEnum
    labels: list[str] = Field(default_factory=list)
    notes: str | None = None
    alerts: str | None = None
    last_visit: date | None = None
    total_visits: int
    lifetime_value: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class ClientStatsResponse(BaseModel):
    """Client counts per status."""
    total: int
    active: int
    inactive: int
    archived: int

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    """Backend connectivity report."""
    status: str = Field(..., description="healthy, degraded or unhealthy")
    connected: bool
    message: str
