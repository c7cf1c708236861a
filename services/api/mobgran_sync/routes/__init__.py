"""API routes."""

from fastapi import APIRouter

from mobgran_sync.routes import offers

api_router = APIRouter()

# Offer sync + snapshots
api_router.include_router(offers.router, prefix="/v1/offers", tags=["offers"])

# Cavaletes awaiting approval
api_router.include_router(offers.cavaletes_router, prefix="/v1/cavaletes", tags=["cavaletes"])
