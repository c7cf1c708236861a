"""Persistence gateway: CRUD primitives used by the sync engine.

One function per entity per verb. Each issues a single statement on the
caller's session and never commits; ordering and transaction scope belong to
mobgran_sync.services.sync. No business rules here beyond what the schema
enforces (unique canonical_id, foreign keys, unique code+block per offer).
"""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mobgran_sync.models import Cavalete, Item, Offer
from mobgran_sync.schemas.mobgran import OfferDocument, UpstreamCavalete, UpstreamItem
from mobgran_sync.services.errors import PersistenceError

logger = logging.getLogger("uvicorn.error")


async def find_offer_id(session: AsyncSession, canonical_id: str) -> str | None:
    """Return the internal ID of the offer stored for `canonical_id`, if any."""
    result = await session.execute(
        select(Offer.id).where(Offer.canonical_id == canonical_id)
    )
    return result.scalar_one_or_none()


async def insert_offer(
    session: AsyncSession,
    canonical_id: str,
    document: OfferDocument,
    raw: dict[str, Any],
) -> str:
    """Insert a new offer row and return its internal ID."""
    offer = Offer(
        canonical_id=canonical_id,
        status=document.situacao,
        company_name=document.nome_empresa,
        logo_url=document.url_logo,
        document=raw,
    )
    session.add(offer)
    await session.flush()
    return offer.id


async def update_offer(
    session: AsyncSession,
    offer_id: str,
    document: OfferDocument,
    raw: dict[str, Any],
) -> None:
    """Overwrite the mutable fields of an existing offer."""
    result = await session.execute(
        update(Offer)
        .where(Offer.id == offer_id)
        .values(
            status=document.situacao,
            company_name=document.nome_empresa,
            logo_url=document.url_logo,
            document=raw,
            updated_at=datetime.now(timezone.utc),
        )
    )
    if result.rowcount == 0:
        logger.error(f"Offer row vanished before update: offer={offer_id}")
        raise PersistenceError("Offer to replace no longer exists; no changes were applied")


async def insert_cavalete(
    session: AsyncSession,
    offer_id: str,
    cavalete: UpstreamCavalete,
    position: int = 0,
) -> str:
    """Insert a cavalete under `offer_id` and return its internal ID."""
    image = cavalete.imagem_principal
    primary_image = None
    if image is not None and not image.is_empty():
        primary_image = image.model_dump(by_alias=True)

    row = Cavalete(
        offer_id=offer_id,
        position=position,
        code=cavalete.codigo,
        block=cavalete.bloco,
        material_name=cavalete.nome_material,
        thickness_name=cavalete.nome_espessura,
        classification=cavalete.nome_classificacao,
        finish=cavalete.nome_acabamento,
        length=cavalete.comprimento,
        height=cavalete.altura,
        width=cavalete.largura,
        weight=cavalete.peso,
        metragem=cavalete.metragem,
        metragem_type=cavalete.tipo_metragem,
        item_count=len(cavalete.itens),
        primary_image=primary_image,
    )
    session.add(row)
    await session.flush()
    return row.id


async def insert_item(
    session: AsyncSession,
    cavalete_id: str,
    item: UpstreamItem,
    position: int = 0,
) -> str:
    """Insert an item under `cavalete_id` and return its internal ID."""
    row = Item(
        cavalete_id=cavalete_id,
        position=position,
        code=item.codigo,
        block=item.bloco,
        thickness_name=item.nome_espessura,
        classification=item.nome_classificacao,
        finish=item.nome_acabamento,
        length=item.comprimento,
        height=item.altura,
        width=item.largura,
        weight=item.peso,
        metragem=item.metragem,
        metragem_type=item.tipo_metragem,
    )
    session.add(row)
    await session.flush()
    return row.id


async def delete_children(session: AsyncSession, offer_id: str) -> tuple[int, int]:
    """Delete every item and cavalete of an offer, items first.

    Explicit child-before-parent order, so it holds even where FK cascades
    are not enforced (SQLite without PRAGMA foreign_keys).

    Returns:
        (deleted cavaletes, deleted items)
    """
    cavalete_ids = select(Cavalete.id).where(Cavalete.offer_id == offer_id)
    items = await session.execute(
        delete(Item)
        .where(Item.cavalete_id.in_(cavalete_ids))
        .execution_options(synchronize_session=False)
    )
    cavaletes = await session.execute(
        delete(Cavalete)
        .where(Cavalete.offer_id == offer_id)
        .execution_options(synchronize_session=False)
    )
    return cavaletes.rowcount, items.rowcount
