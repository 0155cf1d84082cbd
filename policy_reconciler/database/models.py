"""SQLAlchemy models for policy records and field confirmations."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    TIMESTAMP,
    UniqueConstraint,
    func,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from policy_reconciler.database.base import Base


class PolicyRecordModel(Base):
    """Authoritative policy record. Only written with reconciliation output."""

    __tablename__ = "policy_records"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    insurer: Mapped[str | None] = mapped_column(String, nullable=True)
    policy_number: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    insured_name: Mapped[str | None] = mapped_column(String, nullable=True)
    premium: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    monthly_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    deductible: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)

    # Optimistic concurrency: every write bumps the revision it was read at
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    extraction_quality: Mapped[int | None] = mapped_column(Integer, nullable=True)
    source_reliability: Mapped[str | None] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    confirmed_fields: Mapped[list["ConfirmedFieldModel"]] = relationship(
        "ConfirmedFieldModel", back_populates="record", cascade="all, delete-orphan"
    )


class ConfirmedFieldModel(Base):
    """A field value locked by a human against automated overwrite."""

    __tablename__ = "policy_confirmed_fields"
    __table_args__ = (
        UniqueConstraint("record_id", "field_name", name="uq_policy_confirmed_fields_record_field"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    record_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("policy_records.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    field_name: Mapped[str] = mapped_column(String, nullable=False)
    field_value: Mapped[str] = mapped_column(Text, nullable=False)
    confirmed_by: Mapped[str | None] = mapped_column(String, nullable=True)
    confirmed_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    record: Mapped["PolicyRecordModel"] = relationship(
        "PolicyRecordModel", back_populates="confirmed_fields"
    )
