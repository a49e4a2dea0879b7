"""
FoodPOS - FastAPI Backend Application
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import structlog

from foodpos.config import settings
from foodpos.api import auth, notifications, orders, products, shifts, stock
from foodpos.terminal import build_terminal

# Configure structured logging
logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting FoodPOS API", version="1.0.0", gateway=settings.gateway_backend)
    # Tests install their own terminal before startup
    if getattr(app.state, "terminal", None) is None:
        app.state.terminal = build_terminal(settings)
    yield
    await app.state.terminal.close()
    logger.info("Shutting down FoodPOS API")


# Create FastAPI application
app = FastAPI(
    title="FoodPOS",
    description="Point-of-sale order lifecycle and shift accounting",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoint
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": "1.0.0"}


# Include API routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(products.router, prefix="/products", tags=["Products"])
app.include_router(stock.router, prefix="/stock", tags=["Stock"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(shifts.router, prefix="/shifts", tags=["Shifts"])
app.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "foodpos.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
