import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from report_engine.models.lead import PATCHES, Lead
from report_engine.services import clock
from report_engine.services.city import normalize_city

logger = logging.getLogger(__name__)

ALL = "all"
DEFAULT_PRIORITY = "Regular"


class ReportWindow(NamedTuple):
    start: Optional[datetime]
    end: Optional[datetime]
    basis: str

    @property
    def unbounded(self) -> bool:
        return self.start is None and self.end is None


def _submitted(lead: Lead) -> Optional[datetime]:
    return clock.parse_timestamp(lead.submission_date_time)


def _range_window(date_range: Optional[Dict[str, Any]]) -> Optional[ReportWindow]:
    if not date_range:
        return None
    raw_from, raw_to = date_range.get("from"), date_range.get("to")
    if not raw_from and not raw_to:
        return None

    start = clock.parse_timestamp(raw_from) if raw_from else None
    if start is not None and clock.is_date_only(raw_from):
        start = clock.start_of_day(start)
    end = clock.parse_timestamp(raw_to) if raw_to else None
    if end is not None and clock.is_date_only(raw_to):
        end = clock.end_of_day(end)
    elif not raw_to and start is not None:
        # a lone "from" selects that single day
        end = clock.end_of_day(start)

    if start is None and end is None:
        logger.debug("Ignoring unparseable date range %r", date_range)
        return None
    return ReportWindow(start, end, "range")


def _parse_month_day(text: str, year: int) -> Optional[date]:
    parts = text.strip().split(".")
    if len(parts) != 2:
        return None
    month, day = clock.parse_int(parts[0]), clock.parse_int(parts[1])
    if month is None or day is None:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _week_window(selected_week: Optional[str], year: Optional[int]) -> Optional[ReportWindow]:
    if not selected_week or year is None or "-" not in selected_week:
        return None
    start_text, end_text = selected_week.split("-", 1)
    start = _parse_month_day(start_text, year)
    end = _parse_month_day(end_text, year)
    if start is None or end is None:
        return None
    if end < start:
        # Week spans New Year, e.g. "12.30-01.05". Weeks start on Monday, which
        # tells us whether it began in December of the previous year or this one.
        previous_start = _parse_month_day(start_text, year - 1)
        if previous_start is not None and previous_start.weekday() == 0:
            start = previous_start
        else:
            end = _parse_month_day(end_text, year + 1)
        if end is None:
            return None
    return ReportWindow(
        datetime(start.year, start.month, start.day, tzinfo=clock.REPORT_TZ),
        clock.end_of_day(datetime(end.year, end.month, end.day, tzinfo=clock.REPORT_TZ)),
        "week",
    )


def resolve_window(
    selected_year: Any,
    selected_month: Any,
    selected_week: Optional[str] = None,
    date_range: Optional[Dict[str, Any]] = None,
) -> ReportWindow:
    """Pick the reporting window; the first applicable rule wins.

    custom date range > selected week > whole data set ("all" or bad year)
    > whole year ("all" or bad month) > calendar month.
    """
    window = _range_window(date_range)
    if window:
        return window

    year = None if selected_year == ALL else clock.parse_int(selected_year)
    if year is not None and not 1 <= year <= 9999:
        year = None

    window = _week_window(selected_week, year)
    if window:
        return window

    if year is None:
        return ReportWindow(None, None, "all")

    month = None if selected_month == ALL else clock.parse_int(selected_month)
    if month is None or not 1 <= month <= 12:
        start, end = clock.year_bounds(year)
        return ReportWindow(start, end, "year")

    start, end = clock.month_bounds(year, month)
    return ReportWindow(start, end, "month")


def filter_leads(leads: Sequence[Lead], window: ReportWindow) -> List[Lead]:
    if window.unbounded:
        return list(leads)
    selected = []
    for lead in leads:
        submitted = _submitted(lead)
        if submitted is None:
            continue
        if window.start is not None and submitted < window.start:
            continue
        if window.end is not None and submitted > window.end:
            continue
        selected.append(lead)
    return selected


def available_years(leads: Sequence[Lead]) -> List[int]:
    years = set()
    for lead in leads:
        submitted = _submitted(lead)
        if submitted is not None:
            years.add(clock.to_local(submitted).year)
    return sorted(years, reverse=True)


def available_weeks(leads: Sequence[Lead], selected_year: Any) -> List[str]:
    year = clock.parse_int(selected_year)
    if year is None:
        return []
    weeks: Dict[str, datetime] = {}
    for lead in leads:
        submitted = _submitted(lead)
        if submitted is None or clock.to_local(submitted).year != year:
            continue
        start = clock.start_of_week(submitted)
        end = clock.end_of_week(submitted)
        weeks.setdefault(f"{start:%m.%d}-{end:%m.%d}", start)
    return [label for label, _ in sorted(weeks.items(), key=lambda item: item[1])]


def sales_rep_data(leads: Sequence[Lead]) -> List[Dict[str, Any]]:
    stats: Dict[str, Dict[str, Any]] = {}
    for lead in leads:
        quantity = lead.sales_quantity
        amount = lead.sales_amount
        if quantity <= 0 and amount <= 0:
            continue
        rep = lead.sales_representative or ""
        bucket = stats.setdefault(rep, {"quantity": 0, "amount": 0, "customer_days": set()})
        bucket["quantity"] += quantity
        bucket["amount"] += amount

        submitted = _submitted(lead)
        day = clock.to_local(submitted).strftime("%Y-%m-%d") if submitted else lead.submission_date_time
        bucket["customer_days"].add((lead.customer_name, day))

    rows = [
        {
            "name": rep,
            "quantity": bucket["quantity"],
            "customerCount": len(bucket["customer_days"]),
            "amount": bucket["amount"],
        }
        for rep, bucket in stats.items()
    ]
    return sorted(rows, key=lambda row: row["quantity"], reverse=True)


def priority_data(leads: Sequence[Lead]) -> List[Dict[str, Any]]:
    totals: Dict[str, int] = {}
    for lead in leads:
        quantity = lead.sales_quantity
        if quantity > 0:
            priority = lead.priority_type or DEFAULT_PRIORITY
            totals[priority] = totals.get(priority, 0) + quantity
    rows = [{"name": name, "value": value} for name, value in totals.items()]
    return sorted(rows, key=lambda row: row["value"], reverse=True)


def _series(leads: Sequence[Lead], bucket_of) -> List[Tuple[Any, str, int, float]]:
    """Sum quantity and amount per bucket; returns (sort_key, label, qty, amount)."""
    buckets: Dict[str, List[Any]] = {}
    for lead in leads:
        submitted = _submitted(lead)
        if submitted is None:
            continue
        quantity = lead.sales_quantity
        amount = lead.sales_amount
        if quantity <= 0 and amount <= 0:
            continue
        sort_key, label = bucket_of(clock.shift_to_sales_day(submitted))
        bucket = buckets.setdefault(label, [sort_key, label, 0, 0])
        bucket[2] += quantity
        bucket[3] += amount
    return sorted((tuple(b) for b in buckets.values()), key=lambda b: b[0])


def _day_bucket(shifted: datetime):
    return shifted.date(), shifted.strftime("%b-%d-%Y")


def _week_bucket(shifted: datetime):
    start = shifted.date() - timedelta(days=shifted.weekday())
    end = start + timedelta(days=6)
    return start, f"{start:%b %d} - {end:%b %d}"


def daily_sales_data(leads: Sequence[Lead]) -> List[Dict[str, Any]]:
    return [
        {"date": label, "quantity": quantity, "amount": amount}
        for _, label, quantity, amount in _series(leads, _day_bucket)
    ]


def weekly_sales_data(leads: Sequence[Lead]) -> List[Dict[str, Any]]:
    return [
        {"week": label, "quantity": quantity, "amount": amount}
        for _, label, quantity, amount in _series(leads, _week_bucket)
    ]


def sold_qty_by_product_type(leads: Sequence[Lead]) -> List[Dict[str, Any]]:
    totals: Dict[str, int] = {}
    for lead in leads:
        for order in lead.orders:
            if order.product_type == PATCHES:
                continue
            totals[order.product_type] = totals.get(order.product_type, 0) + order.quantity
    rows = [{"name": name, "quantity": quantity} for name, quantity in totals.items()]
    return sorted(rows, key=lambda row: (row["name"].casefold(), row["name"]))


def sales_by_city_data(leads: Sequence[Lead]) -> List[Dict[str, Any]]:
    totals: Dict[str, Dict[str, Any]] = {}
    for lead in leads:
        amount = lead.sales_amount
        if not lead.city or amount <= 0:
            continue
        city = normalize_city(lead.city)
        if not city:
            continue
        bucket = totals.setdefault(city, {"city": city, "amount": 0, "orderCount": 0})
        bucket["amount"] += amount
        bucket["orderCount"] += 1
    return sorted(totals.values(), key=lambda row: row["amount"], reverse=True)


def total_sales(leads: Sequence[Lead]) -> float:
    return sum(lead.sales_amount for lead in leads)


def generate_sales_report(
    leads: Sequence[Lead],
    selected_year: Any = ALL,
    selected_month: Any = ALL,
    selected_week: Optional[str] = None,
    date_range: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    window = resolve_window(selected_year, selected_month, selected_week, date_range)
    filtered = filter_leads(leads, window)
    logger.debug(
        "Sales report window=%s start=%s end=%s leads=%s selected=%s",
        window.basis, window.start, window.end, len(leads), len(filtered),
    )

    return {
        "salesRepData": sales_rep_data(filtered),
        "priorityData": priority_data(filtered),
        "dailySalesData": daily_sales_data(filtered),
        "weeklySalesData": weekly_sales_data(filtered),
        "soldQtyByProductType": sold_qty_by_product_type(filtered),
        "salesByCityData": sales_by_city_data(filtered),
        "totalSales": total_sales(filtered),
        "availableYears": available_years(leads),
        "availableWeeks": available_weeks(leads, selected_year),
    }
