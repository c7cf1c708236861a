"""Offer sync service: link → identifier → Mobgran API → offers/cavaletes/items.

This is the core pipeline for importing a Mobgran offer into the database.

Flow:
1. Validate the link (domain marker) and extract the canonical identifier
2. Take the per-identifier lock (one sync per offer at a time)
3. Look up an existing offer for the identifier
4. Existing offer and no replace requested → report it, touch nothing, skip the fetch
5. Fetch the current document from the Mobgran API
6. In ONE transaction:
   - create path: insert offer, then each cavalete, then its items
   - replace path: update offer, delete items then cavaletes, reinsert children
7. Any failure rolls the whole transaction back and is reported with its stage

Nothing is retried; the caller decides whether to try again.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mobgran_sync.schemas.mobgran import OfferDocument
from mobgran_sync.services import gateway
from mobgran_sync.services.errors import (
    ErrorKind,
    PersistenceError,
    SyncError,
    SyncStage,
)
from mobgran_sync.services.identifier import validate_link
from mobgran_sync.services.locks import identifier_lock
from mobgran_sync.services.mobgran_client import FetchedDocument, MobgranClient, get_mobgran_client
from mobgran_sync.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")


class SyncOutcome(Enum):
    """Terminal state of one import."""

    CREATED = "created"
    REPLACED = "replaced"
    ALREADY_EXISTS = "already_exists"
    FAILED = "failed"


@dataclass
class SyncRequest:
    """Input of one import."""

    link: str
    replace_if_existing: bool = False


@dataclass
class SyncResult:
    """Outcome of one import."""

    succeeded: bool
    message: str
    outcome: SyncOutcome
    offer_internal_id: str | None = None
    canonical_id: str | None = None
    error_kind: ErrorKind | None = None
    stage: SyncStage | None = None
    cavalete_count: int = 0
    item_count: int = 0


async def sync_offer(
    request: SyncRequest,
    client: MobgranClient | None = None,
) -> SyncResult:
    """Synchronize the offer behind `request.link` into the database.

    Args:
        request: Link and replace flag.
        client: Optional Mobgran client (defaults to the shared singleton).

    Returns:
        SyncResult; failures are reported in the result, not raised.
    """
    logger.info(
        f"Starting offer sync link={request.link} replace_if_existing={request.replace_if_existing}"
    )

    canonical_id: str | None = None
    try:
        # Before any I/O: bad links never reach the provider or the DB
        canonical_id = validate_link(request.link)

        async with identifier_lock(canonical_id):
            result = await _sync_locked(
                canonical_id=canonical_id,
                replace_if_existing=request.replace_if_existing,
                client=client or get_mobgran_client(),
            )
    except SyncError as e:
        logger.error(
            f"Offer sync failed id={canonical_id} stage={e.stage.value} kind={e.kind.value}: {e.message}"
        )
        return SyncResult(
            succeeded=False,
            message=e.message,
            outcome=SyncOutcome.FAILED,
            canonical_id=canonical_id,
            error_kind=e.kind,
            stage=e.stage,
        )

    logger.info(
        f"Offer sync complete id={canonical_id} outcome={result.outcome.value} "
        f"offer={result.offer_internal_id} cavaletes={result.cavalete_count} itens={result.item_count}"
    )
    return result


async def _sync_locked(
    canonical_id: str,
    replace_if_existing: bool,
    client: MobgranClient,
) -> SyncResult:
    """Steps 3-6; caller holds the identifier lock."""
    existing_id = await _resolve_existing(canonical_id)

    if existing_id is not None and not replace_if_existing:
        return SyncResult(
            succeeded=True,
            message="Offer already exists and replacement was not requested",
            outcome=SyncOutcome.ALREADY_EXISTS,
            offer_internal_id=existing_id,
            canonical_id=canonical_id,
        )

    # Outside the transaction: no DB connection is held during the slow call
    fetched = await client.fetch_document(canonical_id)

    try:
        async with get_session() as session:
            if existing_id is None:
                offer_id = await gateway.insert_offer(
                    session, canonical_id, fetched.document, fetched.raw
                )
                outcome = SyncOutcome.CREATED
            else:
                offer_id = existing_id
                await _replace_offer(session, offer_id, fetched)
                outcome = SyncOutcome.REPLACED

            cavaletes, items = await _insert_children(session, offer_id, fetched.document)
    except SQLAlchemyError as e:
        logger.exception(f"Database write failed for id={canonical_id}, transaction rolled back")
        raise PersistenceError("Failed to save offer; no changes were applied") from e

    message = "Offer imported" if outcome is SyncOutcome.CREATED else "Offer replaced"
    return SyncResult(
        succeeded=True,
        message=message,
        outcome=outcome,
        offer_internal_id=offer_id,
        canonical_id=canonical_id,
        cavalete_count=cavaletes,
        item_count=items,
    )


async def _resolve_existing(canonical_id: str) -> str | None:
    """Existence check; absence is not an error."""
    try:
        async with get_session() as session:
            return await gateway.find_offer_id(session, canonical_id)
    except SQLAlchemyError as e:
        logger.exception(f"Existence check failed for id={canonical_id}")
        raise PersistenceError(
            "Failed to check for an existing offer", stage=SyncStage.EXISTENCE_CHECK
        ) from e


async def _replace_offer(session: AsyncSession, offer_id: str, fetched: FetchedDocument) -> None:
    await gateway.update_offer(session, offer_id, fetched.document, fetched.raw)
    cavaletes, items = await gateway.delete_children(session, offer_id)
    logger.info(f"Cleared offer={offer_id} snapshot: cavaletes={cavaletes} itens={items}")


async def _insert_children(
    session: AsyncSession,
    offer_id: str,
    document: OfferDocument,
) -> tuple[int, int]:
    """Insert every cavalete of `document`, each followed by its items."""
    items = 0
    for i, cavalete in enumerate(document.cavaletes):
        cavalete_id = await gateway.insert_cavalete(session, offer_id, cavalete, position=i)
        for j, item in enumerate(cavalete.itens):
            await gateway.insert_item(session, cavalete_id, item, position=j)
            items += 1
        logger.debug(
            f"Saved cavalete codigo={cavalete.codigo} bloco={cavalete.bloco} itens={len(cavalete.itens)}"
        )
    return len(document.cavaletes), items
