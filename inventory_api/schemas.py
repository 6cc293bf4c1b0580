"""Pydantic request/response models for the inventory API.

API schemas are separate from kernel DTOs.  JSON keys are camelCase;
snake_case names are accepted on input as well.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from inventory_kernel.domain.dtos import (
    AdjustmentRecord,
    OrderItemRecord,
    OrderRecord,
    Page,
    ProductRecord,
)


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request Models
# ---------------------------------------------------------------------------
class OrderLineIn(ApiModel):
    product_id: UUID
    quantity: int = Field(..., gt=0)


class CreateOrderRequest(ApiModel):
    items: list[OrderLineIn] = Field(..., min_length=1)
    status: Literal["PENDING", "COMPLETED", "CANCELLED"] | None = None


class UpdateOrderStatusRequest(ApiModel):
    status: Literal["PENDING", "COMPLETED", "CANCELLED"]


class CreateAdjustmentRequest(ApiModel):
    product_id: UUID
    quantity: int
    type: Literal["IN", "OUT"]
    reason: str | None = Field(default=None, max_length=1000)


class CreateProductRequest(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    sku: str = Field(..., min_length=1, max_length=64)
    description: str | None = None
    price: Decimal = Field(..., ge=0, max_digits=14, decimal_places=2)
    stock_level: int = Field(default=0, ge=0)
    low_stock_threshold: int = Field(default=10, ge=0)


class UpdateProductRequest(ApiModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    sku: str | None = Field(default=None, min_length=1, max_length=64)
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)
    low_stock_threshold: int | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------
class PaginationResponse(ApiModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "PaginationResponse":
        return cls(
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
        )


class ProductResponse(ApiModel):
    id: UUID
    sku: str
    name: str
    description: str | None = None
    price: Decimal
    stock_level: int
    low_stock_threshold: int
    is_low_stock: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: ProductRecord) -> "ProductResponse":
        return cls(
            id=record.id,
            sku=record.sku,
            name=record.name,
            description=record.description,
            price=record.price,
            stock_level=record.stock_level,
            low_stock_threshold=record.low_stock_threshold,
            is_low_stock=record.is_low_stock,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class AdjustmentResponse(ApiModel):
    id: UUID
    product_id: UUID
    product_name: str | None = None
    product_sku: str | None = None
    user_id: UUID
    quantity: int
    type: str
    reason: str | None = None
    order_id: UUID | None = None
    timestamp: datetime

    @classmethod
    def from_record(cls, record: AdjustmentRecord) -> "AdjustmentResponse":
        return cls(
            id=record.id,
            product_id=record.product_id,
            product_name=record.product_name,
            product_sku=record.product_sku,
            user_id=record.user_id,
            quantity=record.quantity,
            type=record.type.value,
            reason=record.reason,
            order_id=record.order_id,
            timestamp=record.timestamp,
        )


class ProductDetailResponse(ApiModel):
    product: ProductResponse
    recent_adjustments: list[AdjustmentResponse]


class ProductListResponse(ApiModel):
    products: list[ProductResponse]
    pagination: PaginationResponse


class LowStockResponse(ApiModel):
    count: int
    products: list[ProductResponse]


class OrderItemResponse(ApiModel):
    line_no: int
    product_id: UUID
    product_name: str | None = None
    product_sku: str | None = None
    quantity: int
    price_at_time: Decimal
    line_total: Decimal

    @classmethod
    def from_record(cls, record: OrderItemRecord) -> "OrderItemResponse":
        return cls(
            line_no=record.line_no,
            product_id=record.product_id,
            product_name=record.product_name,
            product_sku=record.product_sku,
            quantity=record.quantity,
            price_at_time=record.price_at_time,
            line_total=record.line_total,
        )


class OrderResponse(ApiModel):
    id: UUID
    user_id: UUID
    status: str
    total_amount: Decimal
    item_count: int
    created_at: datetime
    items: list[OrderItemResponse]

    @classmethod
    def from_record(cls, record: OrderRecord) -> "OrderResponse":
        return cls(
            id=record.id,
            user_id=record.user_id,
            status=record.status.value,
            total_amount=record.total_amount,
            item_count=record.item_count,
            created_at=record.created_at,
            items=[OrderItemResponse.from_record(item) for item in record.items],
        )


class OrderListResponse(ApiModel):
    orders: list[OrderResponse]
    pagination: PaginationResponse


class TodaysOrdersResponse(ApiModel):
    count: int
    total_revenue: Decimal
    orders: list[OrderResponse]


class AdjustmentCreatedResponse(ApiModel):
    adjustment: AdjustmentResponse
    new_stock_level: int


class AdjustmentListResponse(ApiModel):
    adjustments: list[AdjustmentResponse]
    pagination: PaginationResponse


class ProductStockSummary(ApiModel):
    id: UUID
    name: str
    sku: str
    current_stock: int


class ProductAdjustmentsResponse(ApiModel):
    product: ProductStockSummary
    adjustments: list[AdjustmentResponse]


class HealthResponse(ApiModel):
    status: str = "ok"
    database: str = "ok"
