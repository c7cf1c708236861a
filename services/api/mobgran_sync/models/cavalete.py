"""Cavalete model.

A priced group of slabs (one physical rack) inside an offer. Rows only live as
part of the latest import snapshot of their offer.
"""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mobgran_sync.models.offer import JsonDocument, generate_record_id
from mobgran_sync.stores.postgres import Base

if TYPE_CHECKING:
    from mobgran_sync.models.item import Item
    from mobgran_sync.models.offer import Offer


class Cavalete(Base):
    """Slab group belonging to exactly one offer."""

    __tablename__ = "cavaletes"
    __table_args__ = (
        # code + block is a business key only within the parent offer
        UniqueConstraint("offer_id", "code", "block", name="uq_cavaletes_offer_code_block"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_record_id)
    offer_id: Mapped[str] = mapped_column(
        ForeignKey("offers.id", ondelete="CASCADE"),
        index=True,
    )

    # Order in the upstream document
    position: Mapped[int] = mapped_column(Integer, default=0)

    # Business key
    code: Mapped[str] = mapped_column(String(255), index=True)
    block: Mapped[str] = mapped_column(String(255))

    # Material
    material_name: Mapped[str | None] = mapped_column(String(255), index=True)
    thickness_name: Mapped[str | None] = mapped_column(String(255))
    classification: Mapped[str | None] = mapped_column(String(255))
    finish: Mapped[str | None] = mapped_column(String(255))

    # Dimensions (stored as given upstream; NULL when absent)
    length: Mapped[Decimal | None] = mapped_column(Numeric())
    height: Mapped[Decimal | None] = mapped_column(Numeric())
    width: Mapped[Decimal | None] = mapped_column(Numeric())
    weight: Mapped[Decimal | None] = mapped_column(Numeric())
    metragem: Mapped[Decimal | None] = mapped_column(Numeric())
    metragem_type: Mapped[str | None] = mapped_column(String(50))

    item_count: Mapped[int] = mapped_column(Integer, default=0)

    # {"nome", "url", "urlMin"} or NULL
    primary_image: Mapped[dict[str, Any] | None] = mapped_column(JsonDocument)

    # Downstream workflow flags
    approved: Mapped[bool] = mapped_column(default=False, index=True)
    imported: Mapped[bool] = mapped_column(default=False)

    offer: Mapped["Offer"] = relationship(back_populates="cavaletes")
    items: Mapped[list["Item"]] = relationship(
        back_populates="cavalete",
        order_by="Item.position",
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
        return f"<Cavalete {self.code}/{self.block} offer={self.offer_id}>"
