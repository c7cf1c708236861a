"""Schemas for the offer sync endpoints (/v1/offers, /v1/cavaletes)."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SyncOfferRequest(BaseModel):
    """Request body for POST /v1/offers/sync."""

    link: str = Field(min_length=1, max_length=2000)
    replace_if_existing: bool = False


class SyncOfferResponse(BaseModel):
    """Outcome of one import."""

    succeeded: bool
    message: str
    outcome: str
    offer_internal_id: str | None = None
    canonical_id: str | None = None
    cavalete_count: int = 0
    item_count: int = 0


class LinkRequest(BaseModel):
    """Request body for link utilities."""

    link: str = Field(max_length=2000)


class ValidateLinkResponse(BaseModel):
    valid: bool
    message: str
    canonical_id: str | None = None


class ExtractIdResponse(BaseModel):
    canonical_id: str


class ItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    block: str
    thickness_name: str | None = None
    classification: str | None = None
    finish: str | None = None
    length: Decimal | None = None
    height: Decimal | None = None
    width: Decimal | None = None
    weight: Decimal | None = None
    metragem: Decimal | None = None
    metragem_type: str | None = None
    approved: bool
    imported: bool


class CavaleteOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    offer_id: str
    code: str
    block: str
    material_name: str | None = None
    thickness_name: str | None = None
    classification: str | None = None
    finish: str | None = None
    length: Decimal | None = None
    height: Decimal | None = None
    width: Decimal | None = None
    weight: Decimal | None = None
    metragem: Decimal | None = None
    metragem_type: str | None = None
    item_count: int
    primary_image: dict[str, Any] | None = None
    approved: bool
    imported: bool


class CavaleteWithItemsOut(CavaleteOut):
    items: list[ItemOut] = Field(default_factory=list)


class OfferOut(BaseModel):
    """Current snapshot of a synchronized offer."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    canonical_id: str
    status: str | None = None
    company_name: str | None = None
    logo_url: str | None = None
    created_at: datetime
    updated_at: datetime
    cavaletes: list[CavaleteWithItemsOut] = Field(default_factory=list)


class CavaleteListItemOut(CavaleteOut):
    company_name: str | None = None


class CavaleteListResponse(BaseModel):
    cavaletes: list[CavaleteListItemOut]
    total: int
    offset: int
    limit: int
