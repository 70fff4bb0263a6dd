import logging
import math
from typing import Any, Dict, List, Optional

from report_engine.models.pricing import PriceTier, PricingConfig, TierSchedule
from report_engine.services.pricing_data import DEFAULT_PRICING_CONFIG

logger = logging.getLogger(__name__)

PATCHES = "Patches"
CLIENT_OWNED = "Client Owned"


class PriceEngine:
    """Tier-based garment pricing.

    Unit prices come from the pricing configuration: a product type maps to a
    product group, and each (group, embroidery option) pair has an ordered
    list of quantity tiers. Programming fees are a fixed business rule and do
    not come from the configuration.
    """

    PROGRAMMING_FEE_LOGO = 500
    PROGRAMMING_FEE_BACK_TEXT = 300
    PROGRAMMING_FEE_MAX_QTY = 3

    # Order types that never pay programming fees
    FEE_EXEMPT_ORDER_TYPES = {"Services", "MTO", "Stock (Jacket Only)"}

    # Made-to-order flat rates below MTO_FLAT_RATE_BELOW pcs: group -> (logo, logoAndText)
    MTO_FLAT_RATES = {
        "GroupD": (799, 899),
        "GroupE": (699, 799),
        "GroupF": (599, 699),
    }
    MTO_FLAT_RATE_BELOW = 51

    def __init__(self, config: Optional[PricingConfig] = None):
        self.config = config or DEFAULT_PRICING_CONFIG

    def _embroidery_for_pricing(self, embroidery: Optional[str]) -> str:
        # names are priced like a logo
        if not embroidery or embroidery == "name":
            return "logo"
        return embroidery

    def _find_tier(self, group: str, embroidery: Optional[str], quantity: int) -> Optional[PriceTier]:
        schedule = self.config.pricing_tiers.get(group, {}).get(self._embroidery_for_pricing(embroidery))
        if schedule is None:
            return None
        return schedule.find(quantity)

    def resolve_group(self, product_type: str) -> Optional[str]:
        if product_type == PATCHES:
            return None
        return self.config.product_group_mapping.get(product_type) or None

    def resolve_unit_price(
        self,
        product_type: str,
        quantity: int,
        embroidery: Optional[str] = "logo",
        patch_price: float = 0,
        order_type: Optional[str] = None,
    ) -> float:
        if product_type == CLIENT_OWNED:
            return 0
        if product_type == PATCHES:
            return patch_price

        group = self.resolve_group(product_type)
        if group is None:
            return 0

        if order_type == "MTO" and group in self.MTO_FLAT_RATES and quantity < self.MTO_FLAT_RATE_BELOW:
            logo_rate, logo_and_text_rate = self.MTO_FLAT_RATES[group]
            return logo_rate if self._embroidery_for_pricing(embroidery) == "logo" else logo_and_text_rate

        tier = self._find_tier(group, embroidery, quantity)
        return tier.price if tier else 0

    def resolve_tier_label(self, product_type: str, quantity: int, embroidery: Optional[str] = "logo") -> str:
        if product_type in (CLIENT_OWNED, PATCHES):
            return "N/A"
        group = self.resolve_group(product_type)
        if group is None:
            return ""
        tier = self._find_tier(group, embroidery, quantity)
        return tier.label if tier else ""

    def resolve_programming_fees(
        self,
        quantity: int,
        embroidery: Optional[str],
        is_client_owned: bool = False,
        order_type: Optional[str] = None,
    ) -> Dict[str, float]:
        no_fees = {"logoFee": 0, "backTextFee": 0}
        if order_type in self.FEE_EXEMPT_ORDER_TYPES:
            return no_fees
        if embroidery == "name":
            return no_fees

        if is_client_owned or 1 <= quantity <= self.PROGRAMMING_FEE_MAX_QTY:
            return {
                "logoFee": self.PROGRAMMING_FEE_LOGO,
                "backTextFee": self.PROGRAMMING_FEE_BACK_TEXT if embroidery == "logoAndText" else 0,
            }
        return no_fees

    def resolve_add_on_price(self, add_on: str, quantity: int) -> float:
        schedule = self.config.add_on_pricing.get(add_on)
        if schedule is None:
            return 0
        tier = schedule.find(quantity)
        return tier.price if tier else 0

    def estimate_line(
        self,
        product_type: str,
        quantity: int,
        embroidery: Optional[str] = "logo",
        patch_price: float = 0,
        order_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        unit_price = self.resolve_unit_price(product_type, quantity, embroidery, patch_price, order_type)
        fees = self.resolve_programming_fees(
            quantity, embroidery, is_client_owned=product_type == CLIENT_OWNED, order_type=order_type
        )
        line_total = unit_price * quantity
        total = line_total + fees["logoFee"] + fees["backTextFee"]

        return {
            "product_type": product_type,
            "group": self.resolve_group(product_type),
            "quantity": quantity,
            "embroidery": embroidery,
            "unit_price": unit_price,
            "tier_label": self.resolve_tier_label(product_type, quantity, embroidery),
            "line_total": line_total,
            "logo_fee": fees["logoFee"],
            "back_text_fee": fees["backTextFee"],
            "total": total,
        }

    def validate_tiers(self) -> List[str]:
        """Check every schedule partitions 1..infinity with no gaps or overlaps."""
        problems: List[str] = []
        for group, options in self.config.pricing_tiers.items():
            for option, schedule in options.items():
                problems.extend(self._schedule_problems(f"{group}/{option}", schedule))
        if problems:
            logger.warning("Pricing configuration has %s tier problems", len(problems))
        return problems

    def _schedule_problems(self, name: str, schedule: TierSchedule) -> List[str]:
        tiers = schedule.tiers
        if not tiers:
            return [f"{name}: no tiers"]

        problems: List[str] = []
        if tiers[0].min != 1:
            problems.append(f"{name}: first tier starts at {tiers[0].min}, expected 1")
        for prev, tier in zip(tiers, tiers[1:]):
            if tier.min <= prev.max:
                problems.append(f"{name}: tier {tier.min} overlaps tier ending at {prev.max:g}")
            elif tier.min != prev.max + 1:
                problems.append(f"{name}: gap between {prev.max:g} and {tier.min}")
        for tier in tiers:
            if tier.min > tier.max:
                problems.append(f"{name}: tier {tier.min}-{tier.max:g} is empty")
        if not math.isinf(tiers[-1].max):
            problems.append(f"{name}: last tier ends at {tiers[-1].max:g}, expected unbounded")
        return problems
