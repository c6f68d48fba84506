"""Marketplace Routes — seller profiles, listings and orders.

Invariants:
    - Listing detail exposes only the preview slice, never the full prompt
    - Stripe checkout returns the PaymentIntent client_secret; completion
      arrives later on the webhook
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_current_user, get_stripe_gateway
from app.core.errors import ResourceNotFoundError
from app.infrastructure.database import get_db
from app.models.user import User
from app.schemas.marketplace import (
    ListingCreate, ListingPreview, ListingResponse, ListingUpdate,
    OrderCreate, OrderResponse, SellerProfileResponse, SellerProfileUpsert,
)
from app.services.listing_service import ListingService
from app.services.order_service import OrderService

router = APIRouter(prefix="/api/marketplace", tags=["marketplace"])


@router.get("/seller-profile", response_model=SellerProfileResponse)
async def get_seller_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await ListingService(db).seller_profile(user.id)
    if profile is None:
        raise ResourceNotFoundError("SellerProfile", str(user.id))
    return SellerProfileResponse.model_validate(profile)


@router.post("/seller-profile", response_model=SellerProfileResponse)
async def upsert_seller_profile(
    body: SellerProfileUpsert,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await ListingService(db).upsert_seller_profile(user, body)
    return SellerProfileResponse.model_validate(profile)


@router.post("/listings", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    body: ListingCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ListingResponse.model_validate(await ListingService(db).create_listing(user, body))


@router.get("/listings")
async def list_listings(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    listings = await ListingService(db).list_active(limit, offset)
    return {
        "items": [ListingResponse.model_validate(item) for item in listings],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/listings/{listing_id}")
async def get_listing(listing_id: UUID, db: AsyncSession = Depends(get_db)):
    service = ListingService(db)
    listing = await service.get_or_404(listing_id)
    return {
        "listing": ListingResponse.model_validate(listing),
        "preview": ListingPreview(**await service.preview(listing_id)),
    }


@router.get("/listings/{listing_id}/preview", response_model=ListingPreview)
async def get_listing_preview(listing_id: UUID, db: AsyncSession = Depends(get_db)):
    return ListingPreview(**await ListingService(db).preview(listing_id))


@router.patch("/listings/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: UUID,
    body: ListingUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    listing = await ListingService(db).update_listing(user, listing_id, body)
    return ListingResponse.model_validate(listing)


@router.post("/orders", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: OrderCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    stripe_gateway=Depends(get_stripe_gateway),
):
    order, client_secret = await OrderService(db, stripe_gateway).create_order(user, body)
    return {
        "order": OrderResponse.model_validate(order),
        "client_secret": client_secret,
    }


@router.get("/orders")
async def list_orders(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    orders = await OrderService(db).list_for_user(user)
    return {
        key: [OrderResponse.model_validate(o) for o in rows]
        for key, rows in orders.items()
    }


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return OrderResponse.model_validate(await OrderService(db).get_for_party(user, order_id))
