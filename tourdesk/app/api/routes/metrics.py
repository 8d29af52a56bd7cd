"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - pricing_latency_ms{kind, outcome}
    - pricing_calculations_total{kind, outcome}
    - rate_conflicts_total{category, source}
    - unresolved_rates_total{kind}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
