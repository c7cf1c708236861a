"""Offer sync endpoints.

POST /v1/offers/sync          - import (or replace) the offer behind a Mobgran link
POST /v1/offers/validate-link - check a link without importing it
POST /v1/offers/extract-id    - extract the canonical identifier of a link
GET  /v1/offers/{offer_id}    - current snapshot of a synchronized offer
GET  /v1/cavaletes            - cavaletes by approval state (pending by default)
POST /v1/cavaletes/{id}/approve - approve a cavalete

Authentication and role checks live in front of this router, not here.
"""

import logging

from fastapi import APIRouter, HTTPException, Path, Query
from fastapi.responses import JSONResponse

from mobgran_sync.schemas import (
    CavaleteOut,
    ExtractIdResponse,
    LinkRequest,
    OfferOut,
    CavaleteListItemOut,
    CavaleteListResponse,
    SyncOfferRequest,
    SyncOfferResponse,
    ValidateLinkResponse,
    error_body,
)
from mobgran_sync.services.catalog import approve_cavalete, get_offer_snapshot, list_cavaletes
from mobgran_sync.services.errors import ErrorKind, SyncError
from mobgran_sync.services.identifier import extract_canonical_id, validate_link
from mobgran_sync.services.sync import SyncRequest, SyncResult, sync_offer
from mobgran_sync.stores.postgres import get_session

router = APIRouter()
cavaletes_router = APIRouter()
logger = logging.getLogger("uvicorn.error")

# ErrorKind -> HTTP status
ERROR_STATUS = {
    ErrorKind.INVALID_IDENTIFIER: 400,
    ErrorKind.INVALID_DOMAIN: 400,
    ErrorKind.SYNC_IN_PROGRESS: 409,
    ErrorKind.UPSTREAM_REJECTED: 502,
    ErrorKind.UPSTREAM_MALFORMED: 502,
    ErrorKind.UPSTREAM_UNAVAILABLE: 504,
    ErrorKind.PERSISTENCE_FAILURE: 500,
}


def _to_response(result: SyncResult) -> SyncOfferResponse:
    return SyncOfferResponse(
        succeeded=result.succeeded,
        message=result.message,
        outcome=result.outcome.value,
        offer_internal_id=result.offer_internal_id,
        canonical_id=result.canonical_id,
        cavalete_count=result.cavalete_count,
        item_count=result.item_count,
    )


@router.post("/sync", response_model=SyncOfferResponse)
async def sync_offer_endpoint(request: SyncOfferRequest) -> SyncOfferResponse | JSONResponse:
    """Synchronize the offer behind a Mobgran link.

    Returns 200 for created / replaced / already_exists outcomes. Failures use
    the standard error envelope with the error kind as code and the failed
    stage in detail.
    """
    result = await sync_offer(
        SyncRequest(link=request.link, replace_if_existing=request.replace_if_existing)
    )
    if result.succeeded:
        return _to_response(result)

    kind = result.error_kind or ErrorKind.PERSISTENCE_FAILURE
    return JSONResponse(
        status_code=ERROR_STATUS.get(kind, 500),
        content=error_body(
            code=kind.value.upper(),
            message=result.message,
            detail={
                "stage": result.stage.value if result.stage else None,
                "canonical_id": result.canonical_id,
            },
        ),
    )


@router.post("/validate-link", response_model=ValidateLinkResponse)
async def validate_link_endpoint(request: LinkRequest) -> ValidateLinkResponse:
    """Report whether a link can be imported, without importing it."""
    try:
        canonical_id = validate_link(request.link)
    except SyncError as e:
        return ValidateLinkResponse(valid=False, message=e.message)
    return ValidateLinkResponse(valid=True, message="Valid link", canonical_id=canonical_id)


@router.post("/extract-id", response_model=ExtractIdResponse)
async def extract_id_endpoint(request: LinkRequest) -> ExtractIdResponse:
    """Extract the canonical identifier from any text (no domain check)."""
    try:
        canonical_id = extract_canonical_id(request.link)
    except SyncError as e:
        raise HTTPException(
            status_code=400,
            detail=error_body(code=e.kind.value.upper(), message=e.message),
        )
    return ExtractIdResponse(canonical_id=canonical_id)


@router.get("/{offer_id}", response_model=OfferOut)
async def get_offer_endpoint(
    offer_id: str = Path(
        description="Internal offer ID",
        min_length=1,
        max_length=36,
        pattern=r"^[a-zA-Z0-9-]+$",
    ),
) -> OfferOut:
    """Return the current snapshot of an offer with its cavaletes and items."""
    async with get_session() as session:
        offer = await get_offer_snapshot(session, offer_id)
        if offer is None:
            raise HTTPException(
                status_code=404,
                detail=error_body(
                    code="OFFER_NOT_FOUND",
                    message=f"Offer {offer_id} not found",
                    detail={"offer_id": offer_id},
                ),
            )
        return OfferOut.model_validate(offer)


@cavaletes_router.get("", response_model=CavaleteListResponse)
async def list_cavaletes_endpoint(
    approved: bool = Query(default=False, description="false = waiting for approval"),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> CavaleteListResponse:
    """List cavaletes by approval state, newest offers first."""
    async with get_session() as session:
        cavaletes, total = await list_cavaletes(
            session, approved=approved, offset=offset, limit=limit
        )
        rows = [
            CavaleteListItemOut(
                **CavaleteOut.model_validate(c).model_dump(),
                company_name=c.offer.company_name,
            )
            for c in cavaletes
        ]
    return CavaleteListResponse(cavaletes=rows, total=total, offset=offset, limit=limit)


@cavaletes_router.post("/{cavalete_id}/approve", response_model=CavaleteOut)
async def approve_cavalete_endpoint(
    cavalete_id: str = Path(
        description="Internal cavalete ID",
        min_length=1,
        max_length=36,
        pattern=r"^[a-zA-Z0-9-]+$",
    ),
) -> CavaleteOut:
    """Approve a cavalete. Approving twice is a no-op."""
    async with get_session() as session:
        cavalete = await approve_cavalete(session, cavalete_id)
        if cavalete is None:
            raise HTTPException(
                status_code=404,
                detail=error_body(
                    code="CAVALETE_NOT_FOUND",
                    message=f"Cavalete {cavalete_id} not found",
                    detail={"cavalete_id": cavalete_id},
                ),
            )
        logger.info(f"Cavalete approved cavalete={cavalete_id} offer={cavalete.offer_id}")
        return CavaleteOut.model_validate(cavalete)
