from typing import Dict, Literal, Optional

from pydantic import Field

from report_engine.models.lead import RecordModel


class ForecastMonthlyEntry(RecordModel):
    month: str
    category_id: Optional[str] = None
    amount: float = 0


class ForecastScheduledEntry(RecordModel):
    id: Optional[str] = None
    date: str
    category_id: Optional[str] = None
    amount: float = 0
    recurrence: Literal["One-time", "Weekly", "Monthly"] = "One-time"
    end_date: Optional[str] = None


class MonthlyRollup(RecordModel):
    month: str
    total_forecast_expense: float = 0
    scheduled_forecast_expense: float = 0
    combined_forecast_expense: float = 0
    totals_by_category: Dict[str, float] = Field(default_factory=dict)


class ForecastAssumptions(RecordModel):
    gross_margin_percent: float = Field(default=0, ge=0, le=1)
    desired_profit: float = 0
    contingency_percent: float = Field(default=0, ge=0)
    target_period_mode: Literal["per-month", "total-range"] = "per-month"
