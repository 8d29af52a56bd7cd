"""Structured logging for pricing calculations."""

import logging
from decimal import Decimal
from typing import Any

from tourdesk.app.db.context import RequestContext

logger = logging.getLogger(__name__)


class StructuredPricingLogger:
    """Structured logger for pricing calculations."""

    def log_calculation(
        self,
        ctx: RequestContext,
        kind: str,
        outcome: str,
        latency_ms: float,
        pax: int | None = None,
        grand_total: Decimal | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log a pricing calculation with structured data."""
        log_data: dict[str, Any] = {
            "org_id": str(ctx.org_id),
            "user_id": str(ctx.user_id),
            "kind": kind,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if pax is not None:
            log_data["pax"] = pax
        if grand_total is not None:
            log_data["grand_total"] = str(grand_total)
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Pricing calculation: {kind} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
