from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any, Literal, Union
from datetime import datetime

PLAN_SCHEMA_VERSION = 1


class ExpenseItem(BaseModel):
    amount: float = 0
    frequency: Literal["monthly", "annual"] = "annual"


class ConversionRates(BaseModel):
    """Stage-to-stage conversion percentages for one side of the business."""
    conversation_to_appointment: float = Field(ge=0, le=100)
    appointment_to_agreement: float = Field(ge=0, le=100)
    agreement_to_contract: float = Field(ge=0, le=100)
    contract_to_closing: float = Field(ge=0, le=100)


def default_buyer_rates() -> ConversionRates:
    return ConversionRates(
        conversation_to_appointment=12.5,
        appointment_to_agreement=50,
        agreement_to_contract=100,
        contract_to_closing=100,
    )


def default_listing_rates() -> ConversionRates:
    return ConversionRates(
        conversation_to_appointment=20,
        appointment_to_agreement=50,
        agreement_to_contract=100,
        contract_to_closing=100,
    )


class PlanInputs(BaseModel):
    """Planner inputs. Stored verbatim (with `version`) as the business plan's detailed_plan."""
    version: int = PLAN_SCHEMA_VERSION
    plan_year: int = Field(default_factory=lambda: datetime.utcnow().year)
    net_income_goal: float = Field(default=70000, ge=0)
    personal_expenses: Dict[str, Union[ExpenseItem, float]] = {}
    business_expenses: Dict[str, Union[ExpenseItem, float]] = {}
    tax_rate: float = Field(default=25, ge=0, le=100)
    avg_sale_price: float = Field(default=450000, ge=0)
    commission_rate: float = Field(default=3, ge=0, le=100)
    buyer_seller_split: float = Field(default=60, ge=0, le=100)
    income_split: float = Field(default=60, ge=0, le=100)
    brokerage_split_buyers: float = Field(default=20, ge=0, le=100)
    brokerage_split_sellers: float = Field(default=20, ge=0, le=100)
    team_split_buyers: float = Field(default=0, ge=0, le=100)
    team_split_sellers: float = Field(default=0, ge=0, le=100)
    buyer_conversion_rates: ConversionRates = Field(default_factory=default_buyer_rates)
    listing_conversion_rates: ConversionRates = Field(default_factory=default_listing_rates)


class FunnelStages(BaseModel):
    conversations: float
    appointments: float
    agreements: float
    contracts: float
    closings: float


class FunnelCategory(BaseModel):
    annual: FunnelStages
    monthly: FunnelStages


class PlanResult(BaseModel):
    total_expenses: float
    gross_income_needed: float
    tax_reserve: float
    total_income_needed: float
    avg_commission: float
    keep_fraction: float
    gci_required: int
    total_deals_needed: int
    buyer_deals: int
    listing_deals: int
    total_sales_volume: float
    funnel: Dict[str, FunnelCategory]


class PlanResponse(BaseModel):
    inputs: PlanInputs
    result: PlanResult
    plan: Optional[Dict[str, Any]] = None
    goals: List[Dict[str, Any]] = []
