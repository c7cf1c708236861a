"""Offer model.

Represents one Mobgran listing, keyed by the canonical identifier found in
its share link. Owns the cavaletes of the most recent successful import.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from sqlalchemy import JSON, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mobgran_sync.stores.postgres import Base

if TYPE_CHECKING:
    from mobgran_sync.models.cavalete import Cavalete

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests)
JsonDocument = JSON().with_variant(JSONB(), "postgresql")


def generate_record_id() -> str:
    """Generate internal record ID."""
    return str(uuid4())


class Offer(Base):
    """Synchronized provider offer."""

    __tablename__ = "offers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_record_id)

    # Natural / idempotency key extracted from the provider link
    canonical_id: Mapped[str] = mapped_column(String(36), unique=True, index=True)

    # Projection of the upstream header fields
    status: Mapped[str | None] = mapped_column(String(100))
    company_name: Mapped[str | None] = mapped_column(String(255))
    logo_url: Mapped[str | None] = mapped_column(Text)

    # Full upstream body, verbatim (audit / replay)
    document: Mapped[dict[str, Any] | None] = mapped_column(JsonDocument)

    cavaletes: Mapped[list["Cavalete"]] = relationship(
        back_populates="offer",
        order_by="Cavalete.position",
        passive_deletes=True,
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        return f"<Offer {self.canonical_id} id={self.id}>"
