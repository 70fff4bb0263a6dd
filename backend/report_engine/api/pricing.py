from fastapi import APIRouter
from typing import Any, Dict, List, Optional
import logging

from pydantic import Field

from report_engine.models.lead import RecordModel
from report_engine.models.pricing import PricingConfig
from report_engine.services.pricing import PriceEngine
from report_engine.services.pricing_data import DEFAULT_PRICING_CONFIG

logger = logging.getLogger(__name__)
router = APIRouter()


class EstimateLine(RecordModel):
    product_type: str
    quantity: int = Field(ge=0)
    embroidery: Optional[str] = "logo"
    patch_price: float = 0
    order_type: Optional[str] = None


class EstimateRequest(RecordModel):
    lines: List[EstimateLine]
    # falls back to the shipped price list
    config: Optional[PricingConfig] = None


class ValidateConfigRequest(RecordModel):
    config: Optional[PricingConfig] = None


@router.get("/config")
async def pricing_config() -> Dict[str, Any]:
    return DEFAULT_PRICING_CONFIG.model_dump(by_alias=True)


@router.post("/estimate")
async def estimate(req: EstimateRequest) -> Dict[str, Any]:
    engine = PriceEngine(req.config)
    lines = [
        engine.estimate_line(line.product_type, line.quantity, line.embroidery, line.patch_price, line.order_type)
        for line in req.lines
    ]
    total = sum(line["total"] for line in lines)
    logger.info("Estimated %s lines total=%s", len(lines), total)
    return {"lines": lines, "total": total}


@router.post("/validate")
async def validate_config(req: ValidateConfigRequest) -> Dict[str, Any]:
    problems = PriceEngine(req.config).validate_tiers()
    return {"valid": not problems, "problems": problems}
