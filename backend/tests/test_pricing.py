"""
Tests for the tiered pricing engine.
"""

import math

import pytest

from report_engine.models.pricing import PriceTier, PricingConfig
from report_engine.services.pricing import PriceEngine
from report_engine.services.pricing_data import DEFAULT_PRICING_CONFIG


@pytest.fixture
def engine() -> PriceEngine:
    return PriceEngine()


def _config(tiers):
    return PricingConfig.model_validate({
        "productGroupMapping": {"Test Jacket": "GroupA"},
        "pricingTiers": {"GroupA": {"logo": {"tiers": tiers}}},
    })


class TestGroupResolution:
    """Product type -> price group lookup."""

    def test_known_product(self, engine: PriceEngine):
        assert engine.resolve_group("Corporate Jacket") == "GroupC"

    def test_unknown_product_is_none(self, engine: PriceEngine):
        assert engine.resolve_group("Mystery Hoodie") is None

    def test_lookup_is_exact(self, engine: PriceEngine):
        assert engine.resolve_group("corporate jacket") is None

    def test_patches_have_no_group(self, engine: PriceEngine):
        assert engine.resolve_group("Patches") is None


class TestUnitPrice:
    """Tier lookup for unit prices."""

    @pytest.mark.parametrize("quantity,expected", [
        (1, 1299), (3, 1299), (4, 999), (10, 999), (11, 899),
        (200, 849), (201, 799), (999, 749), (1000, 699), (50000, 699),
    ])
    def test_group_a_logo_tiers(self, engine: PriceEngine, quantity, expected):
        assert engine.resolve_unit_price("Executive Jacket 1", quantity, "logo") == expected

    def test_logo_and_text_uses_its_own_schedule(self, engine: PriceEngine):
        assert engine.resolve_unit_price("Executive Jacket 1", 5, "logoAndText") == 1099

    def test_name_embroidery_priced_as_logo(self, engine: PriceEngine):
        assert engine.resolve_unit_price("Reversible v1", 20, "name") == engine.resolve_unit_price(
            "Reversible v1", 20, "logo"
        )

    def test_unknown_product_is_zero(self, engine: PriceEngine):
        assert engine.resolve_unit_price("Mystery Hoodie", 10, "logo") == 0

    def test_quantity_outside_tiers_is_zero(self, engine: PriceEngine):
        assert engine.resolve_unit_price("Executive Jacket 1", 0, "logo") == 0

    def test_patches_use_patch_price(self, engine: PriceEngine):
        assert engine.resolve_unit_price("Patches", 10, "logo", patch_price=45) == 45

    def test_client_owned_is_free(self, engine: PriceEngine):
        assert engine.resolve_unit_price("Client Owned", 10, "logo") == 0

    def test_mto_flat_rate_below_51(self, engine: PriceEngine):
        product = "Polo Shirt (Smilee) - Cool Pass"
        assert engine.resolve_unit_price(product, 10, "logo", order_type="MTO") == 799
        assert engine.resolve_unit_price(product, 10, "logoAndText", order_type="MTO") == 899
        # regular tiers again from 51 pcs
        assert engine.resolve_unit_price(product, 51, "logo", order_type="MTO") == 749

    def test_every_quantity_has_exactly_one_price(self, engine: PriceEngine):
        """Tiers are contiguous: no valid quantity falls through to 0."""
        for group, options in DEFAULT_PRICING_CONFIG.pricing_tiers.items():
            product = next(p for p, g in DEFAULT_PRICING_CONFIG.product_group_mapping.items() if g == group)
            for option, schedule in options.items():
                for quantity in range(1, 2001):
                    matches = [t for t in schedule.tiers if t.matches(quantity)]
                    assert len(matches) == 1, (group, option, quantity)
                    assert engine.resolve_unit_price(product, quantity, option) > 0


class TestTierLabel:
    """Human-readable tier labels."""

    def test_range_label(self, engine: PriceEngine):
        assert engine.resolve_tier_label("Executive Jacket 1", 2, "logo") == "1–3 pcs"

    def test_open_ended_label(self, engine: PriceEngine):
        assert engine.resolve_tier_label("Executive Jacket 1", 1500, "logo") == "1000 pcs & above"

    def test_single_quantity_label(self):
        engine = PriceEngine(_config([
            {"min": 1, "max": 1, "price": 10},
            {"min": 2, "max": None, "price": 5},
        ]))
        assert engine.resolve_tier_label("Test Jacket", 1, "logo") == "1 pc(s)"
        assert engine.resolve_tier_label("Test Jacket", 7, "logo") == "2 pcs & above"

    def test_unknown_product_label_is_empty(self, engine: PriceEngine):
        assert engine.resolve_tier_label("Mystery Hoodie", 5, "logo") == ""

    def test_patches_label_not_applicable(self, engine: PriceEngine):
        assert engine.resolve_tier_label("Patches", 5, "logo") == "N/A"


class TestProgrammingFees:
    """Flat programming fee rule for very small runs."""

    @pytest.mark.parametrize("quantity", [1, 2, 3])
    def test_small_runs_pay_fees(self, engine: PriceEngine, quantity):
        assert engine.resolve_programming_fees(quantity, "logoAndText") == {"logoFee": 500, "backTextFee": 300}

    def test_logo_only_has_no_back_text_fee(self, engine: PriceEngine):
        assert engine.resolve_programming_fees(2, "logo") == {"logoFee": 500, "backTextFee": 0}

    @pytest.mark.parametrize("quantity", [0, 4, 100])
    def test_other_quantities_pay_nothing(self, engine: PriceEngine, quantity):
        assert engine.resolve_programming_fees(quantity, "logoAndText") == {"logoFee": 0, "backTextFee": 0}

    def test_client_owned_always_pays(self, engine: PriceEngine):
        fees = engine.resolve_programming_fees(40, "logoAndText", is_client_owned=True)
        assert fees == {"logoFee": 500, "backTextFee": 300}

    def test_exempt_order_types(self, engine: PriceEngine):
        assert engine.resolve_programming_fees(2, "logo", order_type="MTO") == {"logoFee": 0, "backTextFee": 0}

    def test_names_only_pay_nothing(self, engine: PriceEngine):
        assert engine.resolve_programming_fees(2, "name") == {"logoFee": 0, "backTextFee": 0}


class TestAddOnsAndEstimate:
    """Add-on tiers and the per-line estimate breakdown."""

    def test_back_logo_add_on(self, engine: PriceEngine):
        assert engine.resolve_add_on_price("backLogo", 2) == 200
        assert engine.resolve_add_on_price("backLogo", 5) == 100
        assert engine.resolve_add_on_price("backLogo", 500) == 50

    def test_empty_or_unknown_add_on(self, engine: PriceEngine):
        assert engine.resolve_add_on_price("rushFee", 5) == 0
        assert engine.resolve_add_on_price("embossing", 5) == 0

    def test_estimate_line_includes_fees(self, engine: PriceEngine):
        line = engine.estimate_line("Executive Jacket 1", 2, "logoAndText")
        assert line["unit_price"] == 1399
        assert line["line_total"] == 2798
        assert line["total"] == 2798 + 500 + 300
        assert line["tier_label"] == "1–3 pcs"
        assert line["group"] == "GroupA"


class TestTierValidation:
    """Partition checks on pricing configurations."""

    def test_default_config_is_partitioned(self, engine: PriceEngine):
        assert engine.validate_tiers() == []

    def test_gap_and_bounded_top_reported(self):
        engine = PriceEngine(_config([
            {"min": 1, "max": 3, "price": 10},
            {"min": 5, "max": 10, "price": 8},
        ]))
        problems = engine.validate_tiers()
        assert any("gap" in p for p in problems)
        assert any("unbounded" in p for p in problems)

    def test_overlap_reported(self):
        engine = PriceEngine(_config([
            {"min": 1, "max": 5, "price": 10},
            {"min": 4, "max": "Infinity", "price": 8},
        ]))
        assert any("overlaps" in p for p in engine.validate_tiers())

    def test_infinity_spellings(self):
        for value in ("Infinity", "inf", None, math.inf):
            tier = PriceTier.model_validate({"min": 1, "max": value, "price": 1})
            assert math.isinf(tier.max)
