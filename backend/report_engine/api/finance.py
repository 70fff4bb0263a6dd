from fastapi import APIRouter, HTTPException
from typing import Any, Dict, List, Optional
import logging
import math

from pydantic import Field

from report_engine.models.forecast import (
    ForecastAssumptions,
    ForecastMonthlyEntry,
    ForecastScheduledEntry,
    MonthlyRollup,
)
from report_engine.models.lead import RecordModel
from report_engine.services.forecast import (
    PER_MONTH,
    build_monthly_rollup,
    compute_minimum_sales_target,
    revenue_target,
    total_forecasted_expenses,
)
from report_engine.utils.formatting import format_currency

logger = logging.getLogger(__name__)
router = APIRouter()


class MinimumSalesTargetRequest(RecordModel):
    forecasted_expenses: float
    contingency_percent: float = 0
    desired_profit_per_period: float = 0
    period_count: int = Field(default=1, ge=0)
    gross_margin_percent: float
    target_period_mode: str = PER_MONTH


class RollupRequest(RecordModel):
    month: str
    monthly_entries: List[ForecastMonthlyEntry] = []
    scheduled_entries: List[ForecastScheduledEntry] = []


@router.post("/minimum-sales-target")
async def minimum_sales_target(req: MinimumSalesTargetRequest) -> Dict[str, Any]:
    target = compute_minimum_sales_target(
        req.forecasted_expenses,
        req.contingency_percent,
        req.desired_profit_per_period,
        req.period_count,
        req.gross_margin_percent,
        req.target_period_mode,
    )
    valid_margin = not math.isinf(target)
    if not valid_margin:
        logger.warning("Minimum sales target requested with gross margin %s", req.gross_margin_percent)

    # JSON has no Infinity; report it as null with the flag set
    return {
        "minimum_sales_target": target if valid_margin else None,
        "valid_margin": valid_margin,
        "display": format_currency(target),
    }


@router.post("/rollup")
async def monthly_rollup(req: RollupRequest) -> Dict[str, Any]:
    try:
        rollup = build_monthly_rollup(req.month, req.monthly_entries, req.scheduled_entries)
    except ValueError as e:
        logger.warning("Rejected rollup request: %s", e)
        raise HTTPException(status_code=400, detail=str(e))
    return rollup.model_dump(by_alias=True)


class RevenueTargetRequest(RecordModel):
    rollups: List[MonthlyRollup] = []
    assumptions: ForecastAssumptions = ForecastAssumptions()
    # first N months of the rollups; all of them when omitted
    months: Optional[int] = Field(default=None, ge=1)


@router.post("/revenue-target")
async def dashboard_revenue_target(req: RevenueTargetRequest) -> Dict[str, Any]:
    expenses = total_forecasted_expenses(req.rollups, req.months)
    target = revenue_target(req.rollups, req.assumptions, req.months)
    valid_margin = not math.isinf(target)
    logger.info("Revenue target rollups=%s months=%s expenses=%s", len(req.rollups), req.months, expenses)
    return {
        "total_forecasted_expenses": expenses,
        "revenue_target": target if valid_margin else None,
        "valid_margin": valid_margin,
        "display": format_currency(target),
    }
