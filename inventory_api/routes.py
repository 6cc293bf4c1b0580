"""FastAPI routes for the inventory API.

Thin adapters that translate HTTP requests into kernel service calls.
No business logic -- just schema -> request DTO -> response translation.
Handlers are sync and run in the thread pool; each kernel call opens its
own transaction.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy import text

from inventory_api.auth import Actor, get_actor, require_write_role
from inventory_api.schemas import (
    AdjustmentCreatedResponse,
    AdjustmentListResponse,
    AdjustmentResponse,
    CreateAdjustmentRequest,
    CreateOrderRequest,
    CreateProductRequest,
    HealthResponse,
    LowStockResponse,
    OrderListResponse,
    OrderResponse,
    PaginationResponse,
    ProductAdjustmentsResponse,
    ProductDetailResponse,
    ProductListResponse,
    ProductResponse,
    ProductStockSummary,
    TodaysOrdersResponse,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
)
from inventory_kernel.domain.dtos import AdjustmentRequest, OrderLineRequest, OrderRequest
from inventory_kernel.domain.values import AdjustmentType, OrderStatus

product_router = APIRouter(prefix="/api/products", tags=["products"])
order_router = APIRouter(prefix="/api/orders", tags=["orders"])
inventory_router = APIRouter(prefix="/api/inventory", tags=["inventory"])
health_router = APIRouter(tags=["health"])


def _page_size(request: Request, limit: int | None) -> int:
    api = request.app.state.config.api
    if limit is None:
        return api.default_page_size
    return min(limit, api.max_page_size)


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
@product_router.post("", status_code=201, response_model=ProductResponse)
def create_product(
    body: CreateProductRequest,
    request: Request,
    actor: Actor = Depends(require_write_role),
) -> ProductResponse:
    record = request.app.state.product_service.create_product(
        actor.id,
        name=body.name,
        sku=body.sku,
        price=body.price,
        description=body.description,
        initial_stock=body.stock_level,
        low_stock_threshold=body.low_stock_threshold,
    )
    return ProductResponse.from_record(record)


@product_router.get("", response_model=ProductListResponse)
def list_products(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    actor: Actor = Depends(get_actor),
) -> ProductListResponse:
    result = request.app.state.product_service.list_products(
        page=page, limit=_page_size(request, limit)
    )
    return ProductListResponse(
        products=[ProductResponse.from_record(p) for p in result.items],
        pagination=PaginationResponse.from_page(result),
    )


@product_router.get("/low-stock", response_model=LowStockResponse)
def low_stock_products(
    request: Request,
    actor: Actor = Depends(get_actor),
) -> LowStockResponse:
    products = request.app.state.product_service.low_stock_products()
    return LowStockResponse(
        count=len(products),
        products=[ProductResponse.from_record(p) for p in products],
    )


@product_router.get("/{product_id}", response_model=ProductDetailResponse)
def get_product(
    product_id: UUID,
    request: Request,
    actor: Actor = Depends(get_actor),
) -> ProductDetailResponse:
    detail = request.app.state.product_service.get_product(product_id)
    return ProductDetailResponse(
        product=ProductResponse.from_record(detail.product),
        recent_adjustments=[AdjustmentResponse.from_record(a) for a in detail.adjustments],
    )


@product_router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: UUID,
    body: UpdateProductRequest,
    request: Request,
    actor: Actor = Depends(require_write_role),
) -> ProductResponse:
    fields = body.model_dump(exclude_unset=True)
    record = request.app.state.product_service.update_product(product_id, **fields)
    return ProductResponse.from_record(record)


@product_router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: UUID,
    request: Request,
    actor: Actor = Depends(require_write_role),
) -> Response:
    request.app.state.product_service.delete_product(product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderResponse)
def create_order(
    body: CreateOrderRequest,
    request: Request,
    actor: Actor = Depends(require_write_role),
) -> OrderResponse:
    order_request = OrderRequest(
        lines=tuple(
            OrderLineRequest(product_id=line.product_id, quantity=line.quantity)
            for line in body.items
        ),
        status=OrderStatus(body.status) if body.status else OrderStatus.PENDING,
    )
    record = request.app.state.order_service.place_order(
        actor.id, order_request, actor_name=actor.name
    )
    return OrderResponse.from_record(record)


@order_router.get("", response_model=OrderListResponse)
def list_orders(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    status_filter: str | None = Query(None, alias="status"),
    user_id: UUID | None = Query(None, alias="userId"),
    actor: Actor = Depends(get_actor),
) -> OrderListResponse:
    result = request.app.state.order_service.list_orders(
        page=page,
        limit=_page_size(request, limit),
        status=status_filter,
        user_id=user_id,
    )
    return OrderListResponse(
        orders=[OrderResponse.from_record(o) for o in result.items],
        pagination=PaginationResponse.from_page(result),
    )


@order_router.get("/today", response_model=TodaysOrdersResponse)
def todays_orders(
    request: Request,
    actor: Actor = Depends(get_actor),
) -> TodaysOrdersResponse:
    summary = request.app.state.order_service.todays_orders()
    return TodaysOrdersResponse(
        count=summary.count,
        total_revenue=summary.total_revenue,
        orders=[OrderResponse.from_record(o) for o in summary.orders],
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: UUID,
    request: Request,
    actor: Actor = Depends(get_actor),
) -> OrderResponse:
    return OrderResponse.from_record(request.app.state.order_service.get_order(order_id))


@order_router.patch("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: UUID,
    body: UpdateOrderStatusRequest,
    request: Request,
    actor: Actor = Depends(require_write_role),
) -> OrderResponse:
    record = request.app.state.order_service.update_order_status(
        order_id, OrderStatus(body.status)
    )
    return OrderResponse.from_record(record)


# ---------------------------------------------------------------------------
# Inventory adjustments
# ---------------------------------------------------------------------------
@inventory_router.post("", status_code=201, response_model=AdjustmentCreatedResponse)
def create_adjustment(
    body: CreateAdjustmentRequest,
    request: Request,
    actor: Actor = Depends(require_write_role),
) -> AdjustmentCreatedResponse:
    result = request.app.state.adjustment_service.create_adjustment(
        actor.id,
        AdjustmentRequest(
            product_id=body.product_id,
            quantity=body.quantity,
            type=AdjustmentType(body.type),
            reason=body.reason,
        ),
    )
    return AdjustmentCreatedResponse(
        adjustment=AdjustmentResponse.from_record(result.adjustment),
        new_stock_level=result.new_stock_level,
    )


@inventory_router.get("", response_model=AdjustmentListResponse)
def list_adjustments(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    product_id: UUID | None = Query(None, alias="productId"),
    type: str | None = Query(None),
    actor: Actor = Depends(get_actor),
) -> AdjustmentListResponse:
    result = request.app.state.adjustment_service.list_adjustments(
        page=page,
        limit=_page_size(request, limit),
        product_id=product_id,
        type=type,
    )
    return AdjustmentListResponse(
        adjustments=[AdjustmentResponse.from_record(a) for a in result.items],
        pagination=PaginationResponse.from_page(result),
    )


@inventory_router.get("/product/{product_id}", response_model=ProductAdjustmentsResponse)
def product_adjustments(
    product_id: UUID,
    request: Request,
    actor: Actor = Depends(get_actor),
) -> ProductAdjustmentsResponse:
    history = request.app.state.adjustment_service.product_adjustments(product_id)
    return ProductAdjustmentsResponse(
        product=ProductStockSummary(
            id=history.product.id,
            name=history.product.name,
            sku=history.product.sku,
            current_stock=history.product.stock_level,
        ),
        adjustments=[AdjustmentResponse.from_record(a) for a in history.adjustments],
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@health_router.get("/health", response_model=HealthResponse)
def health(request: Request) -> HealthResponse:
    request.app.state.executor.read(lambda session: session.execute(text("SELECT 1")))
    return HealthResponse()
