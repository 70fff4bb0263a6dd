import math

from report_engine.models.pricing import PricingConfig

QUANTITY_BANDS = [(1, 3), (4, 10), (11, 50), (51, 200), (201, 300), (301, 999), (1000, math.inf)]


def _schedule(*prices):
    return {"tiers": [{"min": lo, "max": hi, "price": p} for (lo, hi), p in zip(QUANTITY_BANDS, prices)]}


def _group(logo, logo_and_text):
    return {
        "logo": _schedule(*logo),
        "name": _schedule(*logo),
        "logoAndText": _schedule(*logo_and_text),
    }


DEFAULT_PRODUCT_GROUP_MAPPING = {
    "Executive Jacket 1": "GroupA",
    "Executive Jacket v2 (with lines)": "GroupA",
    "Turtle Neck Jacket": "GroupA",
    "Reversible v1": "GroupB",
    "Reversible v2": "GroupB",
    "Corporate Jacket": "GroupC",
    "Polo Shirt (Smilee) - Cool Pass": "GroupD",
    "Polo Shirt (Smilee) - Cotton Blend": "GroupD",
    "Polo Shirt (Lifeline)": "GroupE",
    "Polo Shirt (Blue Corner)": "GroupE",
    "Polo Shirt (Softex)": "GroupF",
}

DEFAULT_PRICING_TIERS = {
    "GroupA": _group((1299, 999, 899, 849, 799, 749, 699), (1399, 1099, 999, 949, 899, 849, 799)),
    "GroupB": _group((1599, 1299, 1199, 1149, 1099, 1049, 999), (1599, 1399, 1299, 1249, 1199, 1149, 1099)),
    "GroupC": _group((1399, 1099, 999, 949, 899, 849, 799), (1499, 1199, 1099, 1049, 999, 849, 899)),
    "GroupD": _group((899, 849, 799, 749, 699, 649, 599), (999, 949, 899, 849, 799, 749, 699)),
    "GroupE": _group((899, 799, 699, 649, 599, 549, 499), (999, 899, 799, 749, 699, 649, 599)),
    "GroupF": _group((699, 649, 599, 549, 499, 449, 399), (799, 749, 699, 649, 599, 549, 499)),
}

DEFAULT_ADD_ON_PRICING = {
    "backLogo": {"tiers": [
        {"min": 1, "max": 3, "price": 200},
        {"min": 4, "max": 10, "price": 100},
        {"min": 11, "max": math.inf, "price": 50},
    ]},
    "names": {"tiers": [{"min": 1, "max": math.inf, "price": 100}]},
    "plusSize": {"tiers": [{"min": 1, "max": math.inf, "price": 100}]},
    "programFeeLogo": {"tiers": [{"min": 1, "max": math.inf, "price": 500}]},
    "programFeeBackText": {"tiers": [{"min": 1, "max": math.inf, "price": 300}]},
    "rushFee": {"tiers": []},
    "shippingFee": {"tiers": []},
}

DEFAULT_PRICING_CONFIG = PricingConfig.model_validate({
    "productGroupMapping": DEFAULT_PRODUCT_GROUP_MAPPING,
    "pricingTiers": DEFAULT_PRICING_TIERS,
    "addOnPricing": DEFAULT_ADD_ON_PRICING,
})
