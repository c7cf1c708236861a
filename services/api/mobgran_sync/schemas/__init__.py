"""Pydantic schemas for API request/response validation and upstream documents."""

from mobgran_sync.schemas.common import ErrorDetail, ErrorResponse, error_body
from mobgran_sync.schemas.mobgran import (
    ImagemPrincipal,
    OfferDocument,
    UpstreamCavalete,
    UpstreamItem,
)
from mobgran_sync.schemas.offers import (
    CavaleteOut,
    CavaleteWithItemsOut,
    ExtractIdResponse,
    ItemOut,
    LinkRequest,
    OfferOut,
    CavaleteListItemOut,
    CavaleteListResponse,
    SyncOfferRequest,
    SyncOfferResponse,
    ValidateLinkResponse,
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "error_body",
    "ImagemPrincipal",
    "OfferDocument",
    "UpstreamCavalete",
    "UpstreamItem",
    "CavaleteOut",
    "CavaleteWithItemsOut",
    "ExtractIdResponse",
    "ItemOut",
    "LinkRequest",
    "OfferOut",
    "CavaleteListItemOut",
    "CavaleteListResponse",
    "SyncOfferRequest",
    "SyncOfferResponse",
    "ValidateLinkResponse",
]
