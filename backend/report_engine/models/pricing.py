import math
from typing import Any, Dict, List

from pydantic import Field, field_serializer, field_validator

from report_engine.models.lead import RecordModel


class PriceTier(RecordModel):
    min: int
    max: float = math.inf
    price: float

    @field_validator("max", mode="before")
    @classmethod
    def _unbounded(cls, value: Any) -> Any:
        # Infinity does not survive JSON; accept the spellings the config store produces.
        if isinstance(value, str) and value.strip().lower() in ("infinity", "inf", "+inf"):
            return math.inf
        return value

    @field_serializer("max")
    def _dump_unbounded(self, value: float):
        return None if math.isinf(value) else value

    @property
    def label(self) -> str:
        if math.isinf(self.max):
            return f"{self.min} pcs & above"
        if self.min == self.max:
            return f"{self.min} pc(s)"
        return f"{self.min}–{int(self.max)} pcs"

    def matches(self, quantity: int) -> bool:
        return self.min <= quantity <= self.max


class TierSchedule(RecordModel):
    tiers: List[PriceTier] = Field(default_factory=list)

    def find(self, quantity: int):
        for tier in self.tiers:
            if tier.matches(quantity):
                return tier
        return None


class PricingConfig(RecordModel):
    product_group_mapping: Dict[str, str] = Field(default_factory=dict)
    # group -> embroidery option -> schedule
    pricing_tiers: Dict[str, Dict[str, TierSchedule]] = Field(default_factory=dict)
    add_on_pricing: Dict[str, TierSchedule] = Field(default_factory=dict)
