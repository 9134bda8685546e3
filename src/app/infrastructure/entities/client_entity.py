from datetime import date, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import (
    ARRAY,
    CheckConstraint,
    Date,
    DateTime,
    Identity,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.database.database import Base


class ClientEntity(Base):
    """SQLAlchemy model for Client table."""
    __tablename__ = "clients"
    __table_args__ = (
        CheckConstraint("status IN ('active', 'inactive', 'archived')", name="ck_clients_status"),
        CheckConstraint("total_visits >= 0", name="ck_clients_total_visits"),
        CheckConstraint("lifetime_value >= 0", name="ck_clients_lifetime_value"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    client_id: Mapped[int] = mapped_column(Integer, Identity(), unique=True)

    first_name: Mapped[str] = mapped_column(String(100), index=True)
    last_name: Mapped[str] = mapped_column(String(100), index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)

    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    gender: Mapped[str | None] = mapped_column(String(20), nullable=True)
    occupation: Mapped[str | None] = mapped_column(String(100), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    address_line1: Mapped[str | None] = mapped_column(String(255), nullable=True)
    address_line2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(50), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    country: Mapped[str] = mapped_column(String(50), server_default="US")

    status: Mapped[str] = mapped_column(String(20), server_default="active", index=True)
    labels: Mapped[list[str]] = mapped_column(ARRAY(String), server_default=text("'{}'"))

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    alerts: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_visit: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_visits: Mapped[int] = mapped_column(Integer, server_default="0")
    lifetime_value: Mapped[Decimal] = mapped_column(Numeric(10, 2), server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )


# GIN indexes for substring search using pg_trgm extension
# These keep the ILIKE filters in ClientRepository.search usable on large tables
Index(
    'ix_clients_first_name_gin',
    ClientEntity.first_name,
    postgresql_using='gin',
    postgresql_ops={'first_name': 'gin_trgm_ops'}
)

Index(
    'ix_clients_last_name_gin',
    ClientEntity.last_name,
    postgresql_using='gin',
    postgresql_ops={'last_name': 'gin_trgm_ops'}
)

Index(
    'ix_clients_email_gin',
    ClientEntity.email,
    postgresql_using='gin',
    postgresql_ops={'email': 'gin_trgm_ops'}
)

Index(
    'ix_clients_labels_gin',
    ClientEntity.labels,
    postgresql_using='gin',
)
