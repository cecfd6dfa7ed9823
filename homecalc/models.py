"""Input and result records for the purchase-power engine.

Money is in 만원 (10,000 KRW) throughout; rates on result records are
decimals.
"""
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

LoanTerm = Literal[10, 15, 20, 30]


class Region(str, Enum):
    SEOUL = "seoul"
    GYEONGGI = "gyeonggi"
    METROPOLITAN = "metropolitan"
    OTHER = "other"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class Borrower(_Record):
    monthly_net_income: float = Field(gt=0)
    annual_gross_income: float = Field(gt=0)
    use_credit_loan: bool = False
    credit_score: int = Field(default=700, ge=300, le=999)


class SingleHousehold(_Record):
    kind: Literal["single"] = "single"
    applicant: Borrower

    @property
    def borrowers(self) -> List[Borrower]:
        return [self.applicant]


class JointHousehold(_Record):
    kind: Literal["joint"] = "joint"
    applicant: Borrower
    spouse: Borrower

    @property
    def borrowers(self) -> List[Borrower]:
        return [self.applicant, self.spouse]


Household = Annotated[Union[SingleHousehold, JointHousehold], Field(discriminator="kind")]


class CalculationInput(_Record):
    household: Household
    savings: float = Field(default=0.0, ge=0)
    parent_gift: float = Field(default=0.0, ge=0)
    other_assets: float = Field(default=0.0, ge=0)
    emergency_fund: float = Field(default=0.0, ge=0)
    interior_cost: float = Field(default=0.0, ge=0)
    moving_cost: float = Field(default=0.0, ge=0)
    region: Region
    loan_term_years: LoanTerm = 30
    interest_rate_pct: float = Field(default=4.0, ge=0, le=15)
    # 0 asks for the maximum affordable price instead of evaluating a target.
    target_price: float = Field(default=0.0, ge=0)

    @property
    def is_joint(self) -> bool:
        return self.household.kind == "joint"

    @property
    def total_assets(self) -> float:
        return self.savings + self.parent_gift + self.other_assets

    @property
    def reserved_costs(self) -> float:
        return self.emergency_fund + self.interior_cost + self.moving_cost

    @property
    def total_annual_gross_income(self) -> float:
        return sum(b.annual_gross_income for b in self.household.borrowers)

    @property
    def total_monthly_net_income(self) -> float:
        return sum(b.monthly_net_income for b in self.household.borrowers)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


class AcquisitionTaxBreakdown(_Record):
    base_tax: float
    education_tax: float
    # Rural/special tax is not modelled and is always zero.
    special_tax: float = 0.0
    subtotal: float
    exemption: float
    final_tax: float


class LoanInfo(_Record):
    ltv: float
    max_loan_by_ltv: float
    max_loan_by_dsr: float
    max_loan_by_cap: float
    max_loan: float
    max_loan_at_cap: float
    monthly_payment_min: float
    monthly_payment_max: float
    loan_term_years: int


class CreditLoanInfo(_Record):
    borrower: Literal["applicant", "spouse"] = "applicant"
    eligible: bool
    max_loan: float = 0.0
    monthly_payment: float = 0.0
    reason: Optional[str] = None


class RegulationInfo(_Record):
    region: Region
    region_name: str
    is_regulated: bool
    mortgage_cap: float
    ltv_limit: float
    stress_test_rate: float
    details: str


class GovernmentLoanProduct(_Record):
    name: str
    income_limit: str
    price_limit: str
    ltv: float
    interest_rate: str
    eligible: bool
    reason: Optional[str] = None


class RegionalFeasibility(_Record):
    region: Region
    region_name: str
    ltv_standard: float
    ltv_applied: float
    max_price_by_ltv: float
    feasible: bool
    reason: str


class IncomeSummary(_Record):
    monthly_net_total: float
    annual_net_total: float
    annual_gross_total: float
    first_time_eligible: bool


class CostBreakdown(_Record):
    savings: float
    parent_gift: float
    other_assets: float
    emergency_fund: float
    interior_cost: float
    moving_cost: float
    acquisition_tax: float
    registration_fee: float


class PurchasePowerSummary(_Record):
    cash_only: float
    with_mortgage: float
    regulatory_cap_max: float
    with_credit_loan: float


class PaymentBurden(_Record):
    ratio: float
    percent: int
    level: Literal["heavy", "moderate", "comfortable"]


class BindingConstraint(str, Enum):
    DSR = "dsr"
    LTV = "ltv"
    REGULATORY_CAP = "regulatory_cap"


class RationaleSummary(_Record):
    binding_constraint: BindingConstraint
    limits: Dict[BindingConstraint, float]
    reason: str
    target_price: Optional[float] = None
    total_purchasing_power: float
    target_achievable: Optional[bool] = None
    target_gap: Optional[float] = None
    target_reason: Optional[str] = None


class SolverDiagnostics(_Record):
    mode: Literal["solve", "target"]
    converged: bool
    iterations: int
    final_delta: float


class PriceEstimate(_Record):
    """Transaction costs and remaining cash at one candidate price."""

    price: float
    tax: AcquisitionTaxBreakdown
    registration_fee: float
    total_deductions: float
    available_budget: float


class RuleResult(_Record):
    code: str
    severity: Literal["info", "warn", "critical"]
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


class CalculationResult(_Record):
    income: IncomeSummary
    total_assets: float
    reserved_costs: float
    total_deductions: float
    available_budget: float
    cost_breakdown: CostBreakdown
    acquisition_tax: AcquisitionTaxBreakdown
    loan: LoanInfo
    credit_loans: List[CreditLoanInfo]
    credit_loan_total: float
    regulation: RegulationInfo
    purchase_power: PurchasePowerSummary
    payment_burden: PaymentBurden
    government_loans: List[GovernmentLoanProduct]
    regional_feasibility: List[RegionalFeasibility]
    rationale: RationaleSummary
    solver: SolverDiagnostics
    advisories: List[RuleResult] = Field(default_factory=list)
    disclaimer: str = ""

    @property
    def conservative_price(self) -> float:
        return self.purchase_power.cash_only

    @property
    def recommended_price(self) -> float:
        return self.purchase_power.with_mortgage

    @property
    def optimistic_price(self) -> float:
        return self.purchase_power.regulatory_cap_max
