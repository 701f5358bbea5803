"""Seasonal pricing, discounts and bulk price changes."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from resort.controllers.dependencies import (
    get_pricing_service,
    require_roles,
    to_http_exception,
)
from resort.controllers.schemas import BulkResponse, DiscountResponse, SeasonalPricingResponse
from resort.domain.intervals import parse_interval, parse_optional_interval
from resort.domain.models import (
    MANAGEMENT_ROLES,
    Discount,
    DiscountType,
    RoomType,
    SeasonalPricing,
    User,
    UserRole,
)
from resort.services.pricing_service import PricingService
from resort.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/rooms", tags=["pricing"])

management_only = require_roles(*MANAGEMENT_ROLES)


class SeasonalPricingRequest(BaseModel):
    rooms: list[int] = Field(min_length=1)
    start_date: date
    end_date: date
    price: float = Field(ge=0.0)
    description: Optional[str] = None


class SeasonalPricingUpdateRequest(BaseModel):
    room_id: int = Field(gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price: Optional[float] = Field(default=None, ge=0.0)
    description: Optional[str] = None


class DiscountPayload(BaseModel):
    type: DiscountType
    percentage: float = Field(ge=0.0, le=100.0)
    valid_from: date
    valid_until: date
    minimum_stay: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None

    def to_discount(self) -> Discount:
        return Discount(
            discount_type=self.type,
            percentage=self.percentage,
            validity=parse_interval(
                self.valid_from,
                self.valid_until,
                start_field="valid_from",
                end_field="valid_until",
            ),
            minimum_stay=self.minimum_stay,
            description=self.description,
        )


class DiscountRequest(DiscountPayload):
    rooms: list[int] = Field(min_length=1)


class DiscountUpdateRequest(BaseModel):
    room_id: int = Field(gt=0)
    type: Optional[DiscountType] = None
    percentage: Optional[float] = Field(default=None, ge=0.0, le=100.0)
    valid_from: Optional[date] = None
    valid_until: Optional[date] = None
    minimum_stay: Optional[int] = Field(default=None, ge=1)
    description: Optional[str] = None


class SeasonalPricingWindow(BaseModel):
    start_date: date
    end_date: date
    price: float = Field(ge=0.0)
    description: Optional[str] = None


class BulkPricingRequest(BaseModel):
    rooms: list[int] = Field(min_length=1)
    base_price: Optional[float] = Field(default=None, ge=0.0)
    price_per_night: Optional[float] = Field(default=None, ge=0.0)
    seasonal_pricing: Optional[SeasonalPricingWindow] = None
    discount: Optional[DiscountPayload] = None


def _serialize(rows: list[dict[str, Any]], key: str, dto: type[BaseModel]) -> dict[str, Any]:
    return {
        "results": len(rows),
        "rooms": [
            {**row, key: [dto.from_domain(entry).model_dump(mode="json") for entry in row[key]]}
            for row in rows
        ],
    }


@router.get("/pricing/seasonal")
async def list_seasonal_pricing(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    type: Optional[RoomType] = Query(None),
    service: PricingService = Depends(get_pricing_service),
    _: User = Depends(management_only),
) -> dict[str, Any]:
    rows = service.list_seasonal_pricing(start=start_date, end=end_date, room_type=type)
    return _serialize(rows, "seasonal_pricing", SeasonalPricingResponse)


@router.post(
    "/pricing/seasonal",
    response_model=BulkResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_seasonal_pricing(
    payload: SeasonalPricingRequest,
    service: PricingService = Depends(get_pricing_service),
    _: User = Depends(management_only),
) -> BulkResponse:
    try:
        result = service.add_seasonal_pricing(
            payload.rooms,
            parse_interval(payload.start_date, payload.end_date),
            payload.price,
            payload.description,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BulkResponse.from_result(result)


@router.patch("/pricing/seasonal/{pricing_id}", response_model=SeasonalPricingResponse)
async def update_seasonal_pricing(
    pricing_id: int,
    payload: SeasonalPricingUpdateRequest,
    service: PricingService = Depends(get_pricing_service),
    _: User = Depends(management_only),
) -> SeasonalPricingResponse:
    try:
        entry = service.update_seasonal_pricing(
            payload.room_id,
            pricing_id,
            interval=parse_optional_interval(payload.start_date, payload.end_date),
            price=payload.price,
            description=payload.description,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return SeasonalPricingResponse.from_domain(entry)


@router.delete("/pricing/seasonal/{pricing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_seasonal_pricing(
    pricing_id: int,
    room_id: int = Query(..., gt=0),
    service: PricingService = Depends(get_pricing_service),
    _: User = Depends(management_only),
) -> None:
    try:
        service.delete_seasonal_pricing(room_id, pricing_id)
    except Exception as exc:
        raise to_http_exception(exc) from exc


@router.get("/pricing/discounts")
async def list_discounts(
    discount_type: Optional[DiscountType] = Query(None, alias="type"),
    valid_from: Optional[date] = Query(None),
    valid_until: Optional[date] = Query(None),
    room_type: Optional[RoomType] = Query(None),
    service: PricingService = Depends(get_pricing_service),
    _: User = Depends(management_only),
) -> dict[str, Any]:
    rows = service.list_discounts(
        discount_type=discount_type,
        valid_from=valid_from,
        valid_until=valid_until,
        room_type=room_type,
    )
    return _serialize(rows, "discounts", DiscountResponse)


@router.post(
    "/pricing/discounts",
    response_model=BulkResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_discount(
    payload: DiscountRequest,
    service: PricingService = Depends(get_pricing_service),
    _: User = Depends(management_only),
) -> BulkResponse:
    try:
        result = service.add_discount(payload.rooms, payload.to_discount())
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return BulkResponse.from_result(result)


@router.patch("/pricing/discounts/{discount_id}", response_model=DiscountResponse)
async def update_discount(
    discount_id: int,
    payload: DiscountUpdateRequest,
    service: PricingService = Depends(get_pricing_service),
    _: User = Depends(management_only),
) -> DiscountResponse:
    try:
        entry = service.update_discount(
            payload.room_id,
            discount_id,
            discount_type=payload.type,
            percentage=payload.percentage,
            validity=parse_optional_interval(
                payload.valid_from,
                payload.valid_until,
                start_field="valid_from",
                end_field="valid_until",
            ),
            minimum_stay=payload.minimum_stay,
            clear_minimum_stay=(
                "minimum_stay" in payload.model_fields_set and payload.minimum_stay is None
            ),
            description=payload.description,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    return DiscountResponse.from_domain(entry)


@router.delete("/pricing/discounts/{discount_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_discount(
    discount_id: int,
    room_id: int = Query(..., gt=0),
    service: PricingService = Depends(get_pricing_service),
    _: User = Depends(management_only),
) -> None:
    try:
        service.delete_discount(room_id, discount_id)
    except Exception as exc:
        raise to_http_exception(exc) from exc


@router.post("/bulk-pricing", response_model=BulkResponse)
async def bulk_update_pricing(
    payload: BulkPricingRequest,
    service: PricingService = Depends(get_pricing_service),
    _: User = Depends(require_roles(UserRole.ADMIN)),
) -> BulkResponse:
    """Base price, nightly price, one seasonal window and one discount per room."""
    try:
        seasonal = None
        if payload.seasonal_pricing is not None:
            window = payload.seasonal_pricing
            seasonal = SeasonalPricing(
                interval=parse_interval(window.start_date, window.end_date),
                price=window.price,
                description=window.description,
            )
        result = service.bulk_update_pricing(
            payload.rooms,
            base_price=payload.base_price,
            price_per_night=payload.price_per_night,
            seasonal_pricing=seasonal,
            discount=payload.discount.to_discount() if payload.discount else None,
        )
    except Exception as exc:
        raise to_http_exception(exc) from exc
    logger.info("Bulk pricing update applied to %s room(s)", len(result.success))
    return BulkResponse.from_result(result)
