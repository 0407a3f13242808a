"""HTTP surface for order creation and payment confirmation.

`create_app` takes an already-built `OrderService` (tests pass fakes); when
none is given the production Razorpay + Firestore service is built during
app startup from environment settings.
"""

from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from payrelay.common.config import Settings, settings
from payrelay.common.errors import DownstreamError, RelayError
from payrelay.common.gateway import RazorpayGateway
from payrelay.common.logging import configure_logging, correlation_id_ctx, logger
from payrelay.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
    relay_failures_total,
)
from payrelay.common.startup import log_startup_config
from payrelay.common.store import FirestoreOrderStore
from payrelay.common.tracing import enable_tracing
from payrelay.services.orders.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    ErrorResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from payrelay.services.orders.service import OrderService

LIVENESS_MESSAGE = "Razorpay + Firebase relay is running"
ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter()


def build_service(cfg: Settings) -> OrderService:
    """Construct the production service from environment credentials."""

    return OrderService(RazorpayGateway.from_settings(cfg), FirestoreOrderStore.from_settings(cfg), cfg)


def get_service(request: Request) -> OrderService:
    return request.app.state.service


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build SDK-backed clients once per process unless a service was injected."""

    cfg: Settings = app.state.settings
    log_startup_config(cfg)
    if app.state.service is None:
        app.state.service = build_service(cfg)
    yield


async def request_context_middleware(request: Request, call_next):
    """Assign a correlation id and record request count and latency.

    Unexpected exceptions become the 500 envelope here, so they still carry
    the correlation header and pass back through CORS.
    """

    correlation_id = request.headers.get("x-correlation-id") or str(uuid4())
    correlation_id_ctx.set(correlation_id)
    request.state.correlation_id = correlation_id

    service_name = request.app.state.settings.service_name
    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        try:
            response = await call_next(request)
        except Exception as exc:
            response = unhandled_error_response(request, exc)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        response.headers["X-Correlation-ID"] = correlation_id
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(service=service_name, route=route, method=method).observe(elapsed)
        http_requests_total.labels(
            service=service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


def _correlation_id(request: Request) -> str:
    return getattr(request.state, "correlation_id", "") or correlation_id_ctx.get()


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Render relay errors as `{success: false, error}`.

    Downstream failures get a correlation id instead of the raw cause.
    """

    service_name = request.app.state.settings.service_name
    relay_failures_total.labels(service=service_name, operation=request.url.path, reason=type(exc).__name__).inc()
    body = exc.to_dict()
    if isinstance(exc, DownstreamError):
        body["correlationId"] = _correlation_id(request)
        logger.error(
            "downstream_failure path=%s error=%s",
            request.url.path,
            exc.message,
            exc_info=exc.__cause__ or exc,
        )
    else:
        logger.warning("request_rejected path=%s status=%s error=%s", request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("request_invalid path=%s errors=%s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"success": False, "error": "Invalid request body"})


def unhandled_error_response(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error path=%s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal server error", "correlationId": _correlation_id(request)},
    )


@router.get("/", response_class=PlainTextResponse)
def liveness():
    """Deployment liveness probe."""

    return LIVENESS_MESSAGE


@router.post("/create-order", response_model=CreateOrderResponse, responses=ERROR_RESPONSES)
def create_order(req: CreateOrderRequest | None = None, service: OrderService = Depends(get_service)):
    """Create a gateway order and store it with status `created`.

    A missing body is treated like `{}` so it fails with "Amount is required".
    """

    return service.create_order(req or CreateOrderRequest())


@router.post("/verify-payment", response_model=VerifyPaymentResponse, responses=ERROR_RESPONSES)
def verify_payment(req: VerifyPaymentRequest | None = None, service: OrderService = Depends(get_service)):
    """Mark an order paid after client-side checkout confirmation."""

    return service.verify_payment(req or VerifyPaymentRequest())


@router.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}


@router.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


def create_app(service: OrderService | None = None, cfg: Settings = settings) -> FastAPI:
    app = FastAPI(title="PayRelay", lifespan=lifespan)
    app.state.settings = cfg
    app.state.service = service

    app.middleware("http")(request_context_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID"],
    )
    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)
    enable_tracing(app, cfg)
    return app


configure_logging()
app = create_app()


def run() -> None:
    """Console entrypoint: serve the relay on the configured host/port."""

    logger.info("relay_listening host=%s port=%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
