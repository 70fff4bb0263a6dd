import logging
import math
import re
from datetime import timedelta
from typing import Dict, Iterable, Optional, Sequence

from report_engine.models.forecast import (
    ForecastAssumptions,
    ForecastMonthlyEntry,
    ForecastScheduledEntry,
    MonthlyRollup,
)
from report_engine.services import clock

logger = logging.getLogger(__name__)

PER_MONTH = "per-month"
MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")


def compute_minimum_sales_target(
    forecasted_expenses: float,
    contingency_percent: float,
    desired_profit_per_period: float,
    period_count: int,
    gross_margin_percent: float,
    target_period_mode: str = PER_MONTH,
) -> float:
    """Sales needed to cover expenses, a contingency buffer and the desired profit.

    Percentages are fractions (0.4 for 40%). Returns math.inf when the gross
    margin is not positive; callers show "Invalid Margin %" for it.
    """
    contingency_amount = forecasted_expenses * contingency_percent
    if target_period_mode == PER_MONTH:
        total_desired_profit = desired_profit_per_period * period_count
    else:
        total_desired_profit = desired_profit_per_period
    total_needed = forecasted_expenses + contingency_amount + total_desired_profit

    if gross_margin_percent > 0:
        return total_needed / gross_margin_percent
    return math.inf


def _month_bounds(month: str):
    match = MONTH_RE.match(month or "")
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValueError(f"month must be in YYYY-MM format, got {month!r}")
    return clock.month_bounds(int(match.group(1)), int(match.group(2)))


def _occurrences(entry: ForecastScheduledEntry, month_start, month_end):
    current = clock.parse_timestamp(entry.date)
    if current is None:
        logger.warning("Skipping scheduled forecast entry id=%s: bad date %r", entry.id, entry.date)
        return
    end_date = clock.parse_timestamp(entry.end_date) if entry.end_date else None

    while current <= month_end:
        if end_date is not None and end_date < current:
            break
        if current >= month_start:
            yield current
        if entry.recurrence == "Weekly":
            current = current + timedelta(weeks=1)
        elif entry.recurrence == "Monthly":
            current = clock.add_months(current, 1)
        else:
            break


def build_monthly_rollup(
    month: str,
    monthly_entries: Iterable[ForecastMonthlyEntry],
    scheduled_entries: Iterable[ForecastScheduledEntry],
) -> MonthlyRollup:
    """Forecast expense rollup for one "YYYY-MM" month.

    Manual entries recorded for the month are summed as they are. Scheduled
    entries are expanded from their start date (weekly or monthly recurrence,
    bounded by their end date) and every occurrence inside the month counts.
    """
    month_start, month_end = _month_bounds(month)
    totals_by_category: Dict[str, float] = {}

    manual_total = 0.0
    for entry in monthly_entries:
        if entry.month != month:
            continue
        manual_total += entry.amount
        if entry.category_id:
            totals_by_category[entry.category_id] = totals_by_category.get(entry.category_id, 0) + entry.amount

    scheduled_total = 0.0
    for entry in scheduled_entries:
        for _ in _occurrences(entry, month_start, month_end):
            scheduled_total += entry.amount
            if entry.category_id:
                totals_by_category[entry.category_id] = totals_by_category.get(entry.category_id, 0) + entry.amount

    logger.info("Forecast rollup month=%s manual=%s scheduled=%s", month, manual_total, scheduled_total)
    return MonthlyRollup(
        month=month,
        total_forecast_expense=manual_total,
        scheduled_forecast_expense=scheduled_total,
        combined_forecast_expense=manual_total + scheduled_total,
        totals_by_category=totals_by_category,
    )


def total_forecasted_expenses(rollups: Sequence[MonthlyRollup], months: Optional[int] = None) -> float:
    selected = rollups if months is None else rollups[:months]
    return sum(r.combined_forecast_expense or r.total_forecast_expense for r in selected)


def revenue_target(
    rollups: Sequence[MonthlyRollup],
    assumptions: ForecastAssumptions,
    months: Optional[int] = None,
) -> float:
    """Dashboard revenue target over the first `months` rollups."""
    selected = rollups if months is None else rollups[:months]
    expenses = total_forecasted_expenses(selected)
    if expenses == 0:
        return 0
    return compute_minimum_sales_target(
        expenses,
        assumptions.contingency_percent,
        assumptions.desired_profit,
        len(selected) or 1,
        assumptions.gross_margin_percent,
        assumptions.target_period_mode,
    )
