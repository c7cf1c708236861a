"""Catalog queries over synchronized offers.

Snapshot of one offer (offer + cavaletes + items), cavalete listings by
approval state, and the approval itself.
"""

from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mobgran_sync.models import Cavalete, Offer


async def get_offer_snapshot(session: AsyncSession, offer_id: str) -> Offer | None:
    """Load an offer with its cavaletes and their items (upstream order)."""
    result = await session.execute(
        select(Offer)
        .where(Offer.id == offer_id)
        .options(selectinload(Offer.cavaletes).selectinload(Cavalete.items))
    )
    return result.scalar_one_or_none()


async def list_cavaletes(
    session: AsyncSession,
    *,
    approved: bool = False,
    offset: int = 0,
    limit: int = 50,
) -> tuple[list[Cavalete], int]:
    """List cavaletes by approval state, newest offers first. Returns (cavaletes, total)."""
    stmt = select(Cavalete).join(Offer).where(Cavalete.approved.is_(approved))

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        stmt.options(selectinload(Cavalete.offer))
        .order_by(Offer.updated_at.desc(), Offer.id, Cavalete.position)
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all()), total


async def approve_cavalete(session: AsyncSession, cavalete_id: str) -> Cavalete | None:
    """Mark a cavalete as approved. Idempotent; returns None if it doesn't exist."""
    result = await session.execute(
        update(Cavalete)
        .where(Cavalete.id == cavalete_id)
        .values(approved=True, updated_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return None
    return await session.get(Cavalete, cavalete_id, populate_existing=True)
