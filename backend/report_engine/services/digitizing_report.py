"""Digitizing (embroidery programming) dashboard aggregates.

Four independent views are produced from the same lead list:

- statusSummary: where each queued order sits in the programming workflow
- overdueSummary: SLA standing of every non-archived programming order
- digitizerSummary: queued orders per assigned digitizer
- dailyProgressData: uploads per digitizer per day of a month

The status and digitizer views honour the priority filter; the SLA view and
the productivity view deliberately do not.
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from report_engine.models.lead import UNASSIGNED, Lead
from report_engine.services import clock

logger = logging.getLogger(__name__)

ALL_PRIORITIES = "All"

RUSH_DEADLINE_DAYS = 2
REGULAR_DEADLINE_DAYS = 6
NEARLY_OVERDUE_DAYS = 2

ON_TRACK = "On Track"
NEARLY_OVERDUE = "Nearly Overdue"
OVERDUE = "Overdue"

# First matching rule wins; the last one catches everything left.
STATUS_RULES: List[Tuple[str, Callable[[Lead], bool]]] = [
    ("Under Revision", lambda lead: lead.is_revision),
    ("Pending Initial Program", lambda lead: not lead.is_under_programming),
    ("For Initial Approval", lambda lead: not lead.is_initial_approval),
    ("For Testing", lambda lead: not lead.is_logo_testing),
    ("Awaiting Final Approval", lambda lead: not lead.is_final_approval),
    ("For Final Program Uploading", lambda lead: True),
]

# Chart order of the status buckets, independent of rule order
STATUS_BUCKETS = [
    "Pending Initial Program",
    "For Initial Approval",
    "For Testing",
    "Under Revision",
    "Awaiting Final Approval",
    "For Final Program Uploading",
]


def classify_status(lead: Lead) -> str:
    for label, predicate in STATUS_RULES:
        if predicate(lead):
            return label
    raise AssertionError("STATUS_RULES must end with a catch-all rule")


def programming_queue(leads: Sequence[Lead], priority_filter: str = ALL_PRIORITIES) -> List[Lead]:
    queue = [lead for lead in leads if lead.in_programming_queue]
    if priority_filter == ALL_PRIORITIES:
        return queue
    return [lead for lead in queue if lead.priority_type == priority_filter]


def status_summary(queue: Sequence[Lead]) -> List[Dict[str, Any]]:
    counts = {name: 0 for name in STATUS_BUCKETS}
    for lead in queue:
        counts[classify_status(lead)] += 1
    return [{"name": name, "count": count} for name, count in counts.items()]


def deadline_for(lead: Lead, submitted: datetime) -> datetime:
    days = RUSH_DEADLINE_DAYS if lead.priority_type == "Rush" else REGULAR_DEADLINE_DAYS
    return clock.add_days(submitted, days)


def remaining_days(lead: Lead, now: datetime) -> Optional[int]:
    """Days left before (positive) or past (negative) the digitizing deadline.

    Finished programs are measured at their completion time, everything else
    against `now`. None when the submission time is unreadable.
    """
    submitted = clock.parse_timestamp(lead.submission_date_time)
    if submitted is None:
        return None

    completed = None
    if lead.is_final_program and lead.final_program_timestamp:
        completed = clock.parse_timestamp(lead.final_program_timestamp)
    return clock.days_between(deadline_for(lead, submitted), completed or now)


def sla_bucket(days_left: int) -> str:
    if days_left < 0:
        return OVERDUE
    if days_left <= NEARLY_OVERDUE_DAYS:
        return NEARLY_OVERDUE
    return ON_TRACK


def overdue_summary(leads: Sequence[Lead], now: Optional[datetime] = None) -> List[Dict[str, Any]]:
    now = now or clock.now_local()
    counts = {ON_TRACK: 0, NEARLY_OVERDUE: 0, OVERDUE: 0}
    for lead in leads:
        if not lead.has_jo_number or lead.is_digitizing_archived or lead.skips_programming:
            continue
        days_left = remaining_days(lead, now)
        if days_left is None:
            logger.debug("Skipping lead id=%s in overdue summary: bad submissionDateTime", lead.id)
            continue
        counts[sla_bucket(days_left)] += 1
    return [{"name": name, "count": count} for name, count in counts.items()]


def digitizer_summary(queue: Sequence[Lead]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for lead in queue:
        name = lead.assigned_digitizer or UNASSIGNED
        counts[name] = counts.get(name, 0) + 1

    assigned = sorted(
        ({"name": name, "count": count} for name, count in counts.items() if name != UNASSIGNED),
        key=lambda row: row["count"],
        reverse=True,
    )
    if UNASSIGNED in counts:
        assigned.append({"name": UNASSIGNED, "count": counts[UNASSIGNED]})
    return assigned


def daily_progress(leads: Sequence[Lead], selected_month: Any, selected_year: Any) -> List[Dict[str, Any]]:
    year = clock.parse_int(selected_year)
    month = clock.parse_int(selected_month)
    if year is None or month is None or not 1 <= month <= 12 or not 1 <= year <= 9999:
        logger.debug("No productivity data for month=%r year=%r", selected_month, selected_year)
        return []

    slots = [slot for lead in leads for layout in lead.layouts for slot in layout.upload_slots()]
    uploaders = sorted({slot.uploaded_by for slot in slots if slot.uploaded_by})

    daily_counts: Dict[str, Dict[str, int]] = defaultdict(lambda: defaultdict(int))
    for slot in slots:
        if not (slot.has_file and slot.uploaded_by and slot.upload_time):
            continue
        uploaded = clock.parse_timestamp(slot.upload_time)
        if uploaded is None:
            logger.debug("Skipping %s upload by %s: bad uploadTime %r", slot.source, slot.uploaded_by, slot.upload_time)
            continue
        uploaded = clock.to_local(uploaded)
        if uploaded.year == year and uploaded.month == month:
            daily_counts[uploaded.strftime("%b-%d")][slot.uploaded_by] += 1

    rows = []
    for day in clock.days_in_month(year, month):
        key = day.strftime("%b-%d")
        counts = daily_counts.get(key, {})
        row: Dict[str, Any] = {"date": key}
        for uploader in uploaders:
            row[uploader] = counts.get(uploader, 0)
        rows.append(row)
    return rows


def generate_digitizing_report(
    leads: Sequence[Lead],
    priority_filter: str = ALL_PRIORITIES,
    selected_month: Any = None,
    selected_year: Any = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    queue = programming_queue(leads, priority_filter)
    report = {
        "statusSummary": status_summary(queue),
        "overdueSummary": overdue_summary(leads, now),
        "digitizerSummary": digitizer_summary(queue),
        "dailyProgressData": daily_progress(leads, selected_month, selected_year),
    }
    logger.debug(
        "Digitizing report leads=%s queued=%s priority=%s month=%s year=%s",
        len(leads), len(queue), priority_filter, selected_month, selected_year,
    )
    return report
