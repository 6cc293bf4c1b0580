"""Inventory API application factory.

Usage:
    uvicorn inventory_api.app:create_app --factory --host 0.0.0.0 --port 8000

create_app() wires configuration, logging, the database engine, the
kernel services and the listener hub, then maps kernel exceptions to HTTP
responses in one place.
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session, sessionmaker
from starlette.exceptions import HTTPException

from inventory_api.routes import (
    health_router,
    inventory_router,
    order_router,
    product_router,
)
from inventory_config import InventoryConfig, get_active_config
from inventory_kernel.db.engine import (
    create_tables,
    get_session_factory,
    init_engine_from_url,
)
from inventory_kernel.db.immutability import register_immutability_listeners
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.exceptions import (
    DuplicateSkuError,
    InsufficientStockError,
    InventoryKernelError,
    NotFoundError,
    ProductNotFoundError,
    StockError,
    ValidationError,
)
from inventory_kernel.logging_config import LogContext, configure_logging, get_logger
from inventory_kernel.services.adjustment_service import AdjustmentService
from inventory_kernel.services.notifier import EventNotifier, ListenerHub
from inventory_kernel.services.order_service import OrderService
from inventory_kernel.services.product_service import ProductService
from inventory_kernel.services.transaction import TransactionExecutor

logger = get_logger("api")

_CLIENT_ERRORS: tuple[tuple[type[InventoryKernelError], int], ...] = (
    (NotFoundError, 404),
    (ValidationError, 400),
    (DuplicateSkuError, 400),
    (StockError, 400),
)


def _status_for(exc: InventoryKernelError) -> int | None:
    for error_type, status_code in _CLIENT_ERRORS:
        if isinstance(exc, error_type):
            return status_code
    return None


def _error_body(exc: InventoryKernelError) -> dict:
    body: dict = {"error": str(exc), "code": exc.code}
    if isinstance(exc, InsufficientStockError):
        body.update(
            productId=exc.product_id,
            productName=exc.product_name,
            available=exc.available,
            requested=exc.requested,
        )
    elif isinstance(exc, ValidationError) and exc.field_errors:
        body["errors"] = exc.field_errors
    elif isinstance(exc, ProductNotFoundError):
        body["productIds"] = exc.product_ids
    return body


def _install_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(InventoryKernelError)
    async def kernel_error_handler(request: Request, exc: InventoryKernelError):
        status_code = _status_for(exc)
        if status_code is None:
            logger.error(
                "request_failed",
                extra={"path": request.url.path, "error_code": exc.code},
                exc_info=exc,
            )
            return JSONResponse(status_code=500, content={"error": "Internal server error"})
        logger.info(
            "request_rejected",
            extra={
                "path": request.url.path,
                "error_code": exc.code,
                "status_code": status_code,
            },
        )
        return JSONResponse(status_code=status_code, content=_error_body(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"] if part != "body"),
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "code": "VALIDATION_ERROR", "errors": errors},
        )

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(
            "request_failed",
            extra={"path": request.url.path},
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(
    config: InventoryConfig | None = None,
    notifier: EventNotifier | None = None,
    session_factory: sessionmaker[Session] | None = None,
    clock: Clock | None = None,
) -> FastAPI:
    """
    Build the application.

    When no session_factory is given, the engine is initialised from
    config.database and the tables are created if missing.  When no
    notifier is given, a ListenerHub-backed one is created and exposed as
    ``app.state.listener_hub``.
    """
    config = config or get_active_config()
    configure_logging(level=config.logging.level)

    if session_factory is None:
        db = config.database
        init_engine_from_url(
            db.url,
            echo=db.echo,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
            pool_timeout=db.pool_timeout,
            pool_recycle=db.pool_recycle,
        )
        create_tables()
        session_factory = get_session_factory()
    register_immutability_listeners()

    hub: ListenerHub | None = None
    if notifier is None:
        hub = ListenerHub()
        notifier = EventNotifier(hub)
    clock = clock or SystemClock()

    app = FastAPI(
        title=config.api.title,
        description="Products, orders and stock adjustments",
    )
    app.state.config = config
    app.state.listener_hub = hub
    app.state.notifier = notifier
    app.state.executor = TransactionExecutor(session_factory)
    app.state.product_service = ProductService(session_factory, clock=clock)
    app.state.order_service = OrderService(session_factory, notifier=notifier, clock=clock)
    app.state.adjustment_service = AdjustmentService(
        session_factory, notifier=notifier, clock=clock
    )

    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        correlation_id = request.headers.get("x-request-id") or str(uuid4())
        with LogContext.bind(correlation_id=correlation_id):
            response = await call_next(request)
        response.headers["X-Request-Id"] = correlation_id
        return response

    _install_exception_handlers(app)

    app.include_router(product_router)
    app.include_router(order_router)
    app.include_router(inventory_router)
    app.include_router(health_router)

    return app
