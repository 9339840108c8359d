import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Every model module must be imported before create_all runs
from . import (
    models,  # noqa: F401
    models_invoice,  # noqa: F401
    models_loyalty,  # noqa: F401
    models_payment,  # noqa: F401
    models_quality,  # noqa: F401
)
from .database import Base, engine
from .domain.customers import router as customers_router
from .domain.email import router as email_router
from .domain.finances import finances_router
from .domain.finances import router as invoices_router
from .domain.loyalty import router as loyalty_router
from .domain.notifications import router as notification_settings_router
from .domain.orders import router as orders_router
from .domain.payment_gateways import router as payment_gateways_router
from .domain.products import router as products_router
from .domain.products import variants_router as product_variants_router
from .domain.quality_control import router as quality_control_router
from .domain.reports import router as reports_router
from .domain.shipping import router as shipping_router
from .domain.users import router as users_router
from .security_headers import SecurityHeadersMiddleware

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# TestClient and uvicorn access logs are noisy at INFO
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
SLOW_REQUEST_SECONDS = float(os.getenv("SLOW_REQUEST_SECONDS", "2.0"))
API_PREFIX = "/api"

ROUTERS = (
    customers_router,
    products_router,
    product_variants_router,
    orders_router,
    shipping_router,
    payment_gateways_router,
    loyalty_router,
    quality_control_router,
    invoices_router,
    finances_router,
    reports_router,
    notification_settings_router,
    users_router,
    email_router,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Storefront admin API starting")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info(f"✅ Database ready ({engine.url.get_backend_name()})")
    except Exception as e:
        # Another worker may have created the tables first
        if "already exists" not in str(e):
            logger.error(f"❌ Failed to create database tables: {e}")
            raise
    yield
    logger.info("👋 Storefront admin API stopped")


app = FastAPI(title="Storefront Admin API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"⚠️ Invalid payload for {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"❌ {request.method} {request.url.path} failed: {e}")
        raise

    elapsed = time.perf_counter() - started
    if elapsed > SLOW_REQUEST_SECONDS:
        logger.warning(f"🐌 {request.method} {request.url.path} took {elapsed:.2f}s")
    return response


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
else:
    logger.warning("Security headers disabled")

logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
    # Export filenames are read by the dashboard download handler
    expose_headers=["Content-Disposition"],
)

for router in ROUTERS:
    app.include_router(router, prefix=API_PREFIX)


@app.get("/")
def root():
    return {"message": "Storefront Admin API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
