"""Tests for the persistence gateway primitives (SQLite in memory)."""

from decimal import Decimal

import pytest
from sqlalchemy import select

from conftest import OFFER_ID, make_cavalete, make_document, make_item
from mobgran_sync.models import Cavalete, Item, Offer
from mobgran_sync.schemas.mobgran import OfferDocument
from mobgran_sync.services import gateway
from mobgran_sync.services.errors import PersistenceError


async def _insert_offer(session, raw: dict) -> str:
    document = OfferDocument.model_validate(raw)
    offer_id = await gateway.insert_offer(session, OFFER_ID, document, raw)
    for i, cavalete in enumerate(document.cavaletes):
        cavalete_id = await gateway.insert_cavalete(session, offer_id, cavalete, position=i)
        for j, item in enumerate(cavalete.itens):
            await gateway.insert_item(session, cavalete_id, item, position=j)
    return offer_id


@pytest.mark.asyncio
async def test_find_offer_id_absent_is_none(db):
    async with db() as session:
        assert await gateway.find_offer_id(session, OFFER_ID) is None


@pytest.mark.asyncio
async def test_insert_offer_projects_header_and_keeps_raw(db, two_cavalete_document):
    async with db() as session:
        offer_id = await _insert_offer(session, two_cavalete_document)
        await session.commit()

    async with db() as session:
        assert await gateway.find_offer_id(session, OFFER_ID) == offer_id
        offer = await session.get(Offer, offer_id)

    assert len(offer_id) == 36
    assert offer.status == "Disponível"
    assert offer.company_name == "Granitos Serra Azul"
    assert offer.logo_url == "https://cdn.mobgran.test/logo.png"
    assert offer.document == two_cavalete_document


@pytest.mark.asyncio
async def test_children_keep_parent_links_and_values(db, two_cavalete_document):
    async with db() as session:
        offer_id = await _insert_offer(session, two_cavalete_document)
        await session.commit()

    async with db() as session:
        cavaletes = (
            await session.execute(select(Cavalete).order_by(Cavalete.position))
        ).scalars().all()
        items = (await session.execute(select(Item))).scalars().all()

    assert [c.code for c in cavaletes] == ["CV-1", "CV-2"]
    assert all(c.offer_id == offer_id for c in cavaletes)
    assert [c.item_count for c in cavaletes] == [3, 1]

    first = cavaletes[0]
    assert first.block == "B-100"
    assert first.material_name == "Branco Siena"
    assert first.length == Decimal("3.05")
    assert first.metragem == Decimal("17.385")
    assert first.primary_image == {
        "nome": "CV-1.jpg",
        "url": "https://cdn.mobgran.test/CV-1.jpg",
        "urlMin": "https://cdn.mobgran.test/CV-1_min.jpg",
    }
    assert first.approved is False
    assert first.imported is False

    by_cavalete = {c.id: sorted(i.code for i in items if i.cavalete_id == c.id) for c in cavaletes}
    assert by_cavalete[cavaletes[0].id] == ["CH-1", "CH-2", "CH-3"]
    assert by_cavalete[cavaletes[1].id] == ["CH-4"]


@pytest.mark.asyncio
async def test_absent_dimensions_are_stored_as_null(db):
    item = make_item("CH-1")
    del item["peso"]
    item["largura"] = None
    raw = make_document([make_cavalete("CV-1", [item], imagemPrincipal=None, metragem=None)])

    async with db() as session:
        await _insert_offer(session, raw)
        await session.commit()

    async with db() as session:
        cavalete = (await session.execute(select(Cavalete))).scalar_one()
        stored = (await session.execute(select(Item))).scalar_one()

    assert cavalete.metragem is None
    assert cavalete.primary_image is None
    assert stored.weight is None
    assert stored.width is None
    assert stored.length == Decimal("3.05")


@pytest.mark.asyncio
async def test_update_offer_overwrites_header(db, two_cavalete_document, one_empty_cavalete_document):
    async with db() as session:
        offer_id = await _insert_offer(session, two_cavalete_document)
        await session.commit()

    replacement = OfferDocument.model_validate(one_empty_cavalete_document)
    async with db() as session:
        await gateway.update_offer(session, offer_id, replacement, one_empty_cavalete_document)
        await session.commit()

    async with db() as session:
        offer = await session.get(Offer, offer_id)
    assert offer.status == "Reservado"
    assert offer.document == one_empty_cavalete_document
    assert offer.canonical_id == OFFER_ID


@pytest.mark.asyncio
async def test_update_missing_offer_raises(db, one_empty_cavalete_document):
    document = OfferDocument.model_validate(one_empty_cavalete_document)
    async with db() as session:
        with pytest.raises(PersistenceError):
            await gateway.update_offer(session, "does-not-exist", document, one_empty_cavalete_document)


@pytest.mark.asyncio
async def test_delete_children_removes_only_that_offers_rows(db, two_cavalete_document):
    async with db() as session:
        offer_id = await _insert_offer(session, two_cavalete_document)
        other = make_document([make_cavalete("CV-X", [make_item("CH-X")])])
        other_doc = OfferDocument.model_validate(other)
        other_id = await gateway.insert_offer(
            session, "00000000-1111-2222-3333-444444444444", other_doc, other
        )
        cavalete_id = await gateway.insert_cavalete(session, other_id, other_doc.cavaletes[0])
        await gateway.insert_item(session, cavalete_id, other_doc.cavaletes[0].itens[0])
        await session.commit()

    async with db() as session:
        deleted = await gateway.delete_children(session, offer_id)
        await session.commit()
    assert deleted == (2, 4)

    async with db() as session:
        cavaletes = (await session.execute(select(Cavalete))).scalars().all()
        items = (await session.execute(select(Item))).scalars().all()
        offer = await session.get(Offer, offer_id)
    assert [c.code for c in cavaletes] == ["CV-X"]
    assert [i.code for i in items] == ["CH-X"]
    assert offer is not None


@pytest.mark.asyncio
async def test_decimals_are_stored_without_rounding(db):
    item = make_item("CH-1", metragem=5.819775, peso=12345678.5)
    raw = make_document([make_cavalete("CV-1", [item], metragem=23.279100)])

    async with db() as session:
        await _insert_offer(session, raw)
        await session.commit()

    async with db() as session:
        cavalete = (await session.execute(select(Cavalete))).scalar_one()
        stored = (await session.execute(select(Item))).scalar_one()

    assert stored.metragem == Decimal("5.819775")
    assert stored.weight == Decimal("12345678.5")
    assert cavalete.metragem == Decimal("23.2791")
