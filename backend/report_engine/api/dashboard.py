from fastapi import APIRouter, HTTPException
from typing import Any, Dict, List, Optional
import logging

from report_engine.models.lead import RecordModel, parse_leads
from report_engine.services.digitizing_report import ALL_PRIORITIES, generate_digitizing_report
from report_engine.services.sales_report import ALL, generate_sales_report

logger = logging.getLogger(__name__)
router = APIRouter()


class DigitizingReportRequest(RecordModel):
    # raw documents; malformed ones are skipped instead of failing the request
    leads: List[Any] = []
    priority_filter: str = ALL_PRIORITIES
    selected_month: Optional[str] = None
    selected_year: Optional[str] = None


class SalesReportRequest(RecordModel):
    leads: List[Any] = []
    selected_year: str = ALL
    selected_month: str = ALL
    selected_week: Optional[str] = None
    date_range: Optional[Dict[str, Optional[str]]] = None


@router.post("/digitizing")
async def digitizing_report(req: DigitizingReportRequest) -> Dict[str, Any]:
    leads = parse_leads(req.leads)
    try:
        report = generate_digitizing_report(leads, req.priority_filter, req.selected_month, req.selected_year)
    except Exception as e:
        logger.exception("Failed to compute digitizing report: %s", e)
        raise HTTPException(status_code=500, detail="Failed to compute digitizing report")

    logger.info(
        "Digitizing report leads=%s priority=%s queued=%s",
        len(leads), req.priority_filter, sum(row["count"] for row in report["statusSummary"]),
    )
    return report


@router.post("/sales")
async def sales_report(req: SalesReportRequest) -> Dict[str, Any]:
    leads = parse_leads(req.leads)
    try:
        report = generate_sales_report(
            leads,
            selected_year=req.selected_year,
            selected_month=req.selected_month,
            selected_week=req.selected_week,
            date_range=req.date_range,
        )
    except Exception as e:
        logger.exception("Failed to compute sales report: %s", e)
        raise HTTPException(status_code=500, detail="Failed to compute sales report")

    logger.info("Sales report leads=%s total_sales=%s", len(leads), report["totalSales"])
    return report
