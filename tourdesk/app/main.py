"""FastAPI application."""

import logging

from fastapi import FastAPI

from tourdesk.app.api.errors import register_exception_handlers
from tourdesk.app.api.routes.b2b import router as b2b_router
from tourdesk.app.api.routes.health import router as health_router
from tourdesk.app.api.routes.metrics import router as metrics_router
from tourdesk.app.api.routes.rates import router as rates_router
from tourdesk.app.api.routes.tours import router as tours_router
from tourdesk.app.config import get_settings

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="TourDesk Pricing API", version="0.1.0")

register_exception_handlers(app)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(tours_router)
app.include_router(rates_router)
app.include_router(b2b_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "TourDesk Pricing API", "version": "0.1.0"}
