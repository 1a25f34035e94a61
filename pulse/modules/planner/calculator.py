"""
Production plan math: from a net-income target to deal counts and an
activity funnel per side (buyer / listing).

All functions are pure. Divisions by zero fall back to a neutral value (0,
or the undivided amount) instead of producing inf/NaN. Rounding is always
half-up; required GCI is whole dollars and monthly figures are annual / 12
to two decimals.
"""

from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP
from typing import Dict, Mapping, Union
from pulse.modules.planner.schemas import (
    PlanInputs, PlanResult, ConversionRates, ExpenseItem, FunnelStages, FunnelCategory
)

MONTHS = 12

# Closings are known; each earlier stage is derived from the one after it
_STAGES = (
    ("contracts", "closings", "contract_to_closing"),
    ("agreements", "contracts", "agreement_to_contract"),
    ("appointments", "agreements", "appointment_to_agreement"),
    ("conversations", "appointments", "conversation_to_appointment"),
)


def _d(value) -> Decimal:
    return Decimal(str(value))


def _round(value: Decimal, places: int = 2) -> float:
    return float(value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP))


def _whole(value: Decimal) -> int:
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _ceil(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_CEILING))


def annual_expenses(expenses: Mapping[str, Union[ExpenseItem, float]]) -> Decimal:
    total = Decimal(0)
    for item in (expenses or {}).values():
        if isinstance(item, ExpenseItem):
            amount = _d(item.amount)
            total += amount * MONTHS if item.frequency == "monthly" else amount
        else:
            total += _d(item or 0)
    return total


def keep_fraction(inputs: PlanInputs) -> Decimal:
    """Share of one average commission the agent keeps after brokerage, team and income splits."""
    hundred = Decimal(100)
    buyer_keep = (1 - _d(inputs.brokerage_split_buyers) / hundred) * (1 - _d(inputs.team_split_buyers) / hundred)
    seller_keep = (1 - _d(inputs.brokerage_split_sellers) / hundred) * (1 - _d(inputs.team_split_sellers) / hundred)
    buyer_share = _d(inputs.buyer_seller_split) / hundred
    weighted = buyer_keep * buyer_share + seller_keep * (1 - buyer_share)
    return weighted * _d(inputs.income_split) / hundred


def funnel(closings: int, rates: ConversionRates) -> Dict[str, int]:
    """Reverse a closings count through the conversion rates. A zero rate zeroes that stage and everything before it."""
    stages = {"closings": closings}
    broken = False
    for stage, following, rate_name in _STAGES:
        rate = _d(getattr(rates, rate_name))
        if broken or rate <= 0:
            broken = True
            stages[stage] = 0
            continue
        stages[stage] = _ceil(_d(stages[following]) / (rate / 100))
    return stages


def monthly(annual: Mapping[str, int]) -> Dict[str, float]:
    return {k: _round(_d(v) / MONTHS) for k, v in annual.items()}


def calculate_plan(inputs: PlanInputs) -> PlanResult:
    total_expenses = annual_expenses(inputs.personal_expenses) + annual_expenses(inputs.business_expenses)
    gross_income_needed = _d(inputs.net_income_goal) + total_expenses

    tax = _d(inputs.tax_rate) / 100
    tax_reserve = gross_income_needed / (1 - tax) - gross_income_needed if tax < 1 else Decimal(0)
    total_income_needed = gross_income_needed + tax_reserve

    avg_commission = _d(inputs.avg_sale_price) * _d(inputs.commission_rate) / 100
    keep = keep_fraction(inputs)
    gci_required = _whole(total_income_needed / keep if keep > 0 else total_income_needed)

    total_deals = _ceil(_d(gci_required) / avg_commission) if avg_commission > 0 else 0
    buyer_deals = _whole(_d(total_deals) * _d(inputs.buyer_seller_split) / 100)
    listing_deals = total_deals - buyer_deals

    buyer_annual = funnel(buyer_deals, inputs.buyer_conversion_rates)
    listing_annual = funnel(listing_deals, inputs.listing_conversion_rates)
    total_annual = {k: buyer_annual[k] + listing_annual[k] for k in buyer_annual}

    return PlanResult(
        total_expenses=_round(total_expenses),
        gross_income_needed=_round(gross_income_needed),
        tax_reserve=_round(tax_reserve),
        total_income_needed=_round(total_income_needed),
        avg_commission=_round(avg_commission),
        keep_fraction=_round(keep, 4),
        gci_required=gci_required,
        total_deals_needed=total_deals,
        buyer_deals=buyer_deals,
        listing_deals=listing_deals,
        total_sales_volume=_round(_d(total_deals) * _d(inputs.avg_sale_price)),
        funnel={
            name: FunnelCategory(annual=FunnelStages(**annual), monthly=FunnelStages(**monthly(annual)))
            for name, annual in (("buyer", buyer_annual), ("listing", listing_annual), ("total", total_annual))
        },
    )
