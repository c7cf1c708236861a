"""Item model: an individual slab inside a cavalete."""

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mobgran_sync.models.offer import generate_record_id
from mobgran_sync.stores.postgres import Base

if TYPE_CHECKING:
    from mobgran_sync.models.cavalete import Cavalete


class Item(Base):
    """Slab belonging to exactly one cavalete."""

    __tablename__ = "items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_record_id)
    cavalete_id: Mapped[str] = mapped_column(
        ForeignKey("cavaletes.id", ondelete="CASCADE"),
        index=True,
    )

    position: Mapped[int] = mapped_column(Integer, default=0)

    code: Mapped[str] = mapped_column(String(255), index=True)
    block: Mapped[str] = mapped_column(String(255))

    thickness_name: Mapped[str | None] = mapped_column(String(255))
    classification: Mapped[str | None] = mapped_column(String(255))
    finish: Mapped[str | None] = mapped_column(String(255))

    length: Mapped[Decimal | None] = mapped_column(Numeric())
    height: Mapped[Decimal | None] = mapped_column(Numeric())
    width: Mapped[Decimal | None] = mapped_column(Numeric())
    weight: Mapped[Decimal | None] = mapped_column(Numeric())
    metragem: Mapped[Decimal | None] = mapped_column(Numeric())
    metragem_type: Mapped[str | None] = mapped_column(String(50))

    approved: Mapped[bool] = mapped_column(default=False)
    imported: Mapped[bool] = mapped_column(default=False)

    cavalete: Mapped["Cavalete"] = relationship(back_populates="items")

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
        return f"<Item {self.code}/{self.block} cavalete={self.cavalete_id}>"
