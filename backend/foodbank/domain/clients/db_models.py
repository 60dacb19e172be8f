from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from foodbank.infra.db import Base, UUID_TYPE


class Client(Base):
    __tablename__ = "clients"
    __table_args__ = (
        sa.Index("ix_clients_org_status", "organization_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID_TYPE, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        UUID_TYPE, sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(sa.String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(sa.String(50), nullable=True)
    address: Mapped[str] = mapped_column(sa.String(500), nullable=False)
    household_size: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    dietary_restrictions: Mapped[list[str]] = mapped_column(sa.JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(
        sa.String(16), nullable=False, default="active", server_default="active"
    )
    notes: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), onupdate=sa.func.now(), nullable=False
    )

    visits: Mapped[list["ClientVisit"]] = relationship(
        "ClientVisit",
        back_populates="client",
        cascade="save-update, merge",
        passive_deletes=True,
    )


class ClientVisit(Base):
    __tablename__ = "client_visits"
    __table_args__ = (
        sa.Index("ix_client_visits_org_client_date", "organization_id", "client_id", "visit_date"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID_TYPE, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        UUID_TYPE, sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID_TYPE, sa.ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    visit_date: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False
    )
    notes: Mapped[str | None] = mapped_column(sa.Text, nullable=True)
    served_by: Mapped[uuid.UUID | None] = mapped_column(
        UUID_TYPE, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    client: Mapped["Client"] = relationship("Client", back_populates="visits", foreign_keys=[client_id])
