"""Request boundary for the calculator.

Accepts the flat payload posted by the web form, validates it, converts it
into a :class:`~homecalc.models.CalculationInput` and maps the engine outcome
to an HTTP status plus JSON body.  The engine itself never sees an invalid
request.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from .engine import calculate
from .errors import CalculationError, InputValidationError
from .i18n import t
from .models import Borrower, CalculationInput, JointHousehold, LoanTerm, Region, SingleHousehold
from .policy import PolicyConfig
from .rules import evaluate_request, has_blocking

logger = logging.getLogger(__name__)


class CalculationRequest(BaseModel):
    """Flat form payload; camelCase keys from the browser are accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    is_couple: bool = False
    applicant_income: float = Field(default=0.0, ge=0)
    applicant_pre_tax_annual: float = Field(default=0.0, ge=0)
    spouse_income: float = Field(default=0.0, ge=0)
    spouse_pre_tax_annual: float = Field(default=0.0, ge=0)
    savings: float = Field(default=0.0, ge=0)
    parent_gift: float = Field(default=0.0, ge=0)
    other_assets: float = Field(default=0.0, ge=0)
    emergency_fund: float = Field(default=0.0, ge=0)
    interior_cost: float = Field(default=0.0, ge=0)
    moving_cost: float = Field(default=0.0, ge=0)
    target_region: Region
    loan_term_years: LoanTerm
    interest_rate: float = Field(default=4.0, ge=0, le=15)
    target_property_price: float = Field(default=0.0, ge=0)
    use_lifestyle_loan: bool = False
    credit_score: int = Field(default=700, ge=300, le=999)
    use_spouse_credit_loan: bool = False
    spouse_credit_score: int = Field(default=700, ge=300, le=999)

    def to_input(self) -> CalculationInput:
        applicant = Borrower(
            monthly_net_income=self.applicant_income,
            annual_gross_income=self.applicant_pre_tax_annual,
            use_credit_loan=self.use_lifestyle_loan,
            credit_score=self.credit_score,
        )
        if self.is_couple:
            spouse = Borrower(
                monthly_net_income=self.spouse_income,
                annual_gross_income=self.spouse_pre_tax_annual,
                # spouse credit is only offered alongside the applicant's
                use_credit_loan=self.use_lifestyle_loan and self.use_spouse_credit_loan,
                credit_score=self.spouse_credit_score,
            )
            household = JointHousehold(applicant=applicant, spouse=spouse)
        else:
            household = SingleHousehold(applicant=applicant)
        return CalculationInput(
            household=household,
            savings=self.savings,
            parent_gift=self.parent_gift,
            other_assets=self.other_assets,
            emergency_fund=self.emergency_fund,
            interior_cost=self.interior_cost,
            moving_cost=self.moving_cost,
            region=self.target_region,
            loan_term_years=self.loan_term_years,
            interest_rate_pct=self.interest_rate,
            target_price=self.target_property_price,
        )


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    where = ".".join(str(p) for p in err.get("loc", ())) or "request"
    return f"{where}: {err.get('msg', 'invalid value')}"


def parse_request(payload: Mapping[str, Any], lang: str = "en") -> CalculationInput:
    """Validate a raw payload, raising :class:`InputValidationError` on rejection."""
    if not isinstance(payload, Mapping):
        raise InputValidationError("INVALID_REQUEST", "request body must be a JSON object")
    try:
        req = CalculationRequest.model_validate(dict(payload))
    except ValidationError as exc:
        raise InputValidationError("INVALID_REQUEST", _first_error(exc)) from exc

    findings = evaluate_request(req)
    if has_blocking(findings):
        first = next(f for f in findings if f.severity == "critical")
        raise InputValidationError(first.code, t(f"request.{first.code}", lang))
    return req.to_input()


def handle_calculate(
    payload: Mapping[str, Any],
    policy: Optional[PolicyConfig] = None,
    lang: str = "en",
) -> Tuple[int, Dict[str, Any]]:
    """Run one calculation request and return ``(status, body)``."""
    try:
        inp = parse_request(payload, lang)
    except InputValidationError as exc:
        return 400, {"error": exc.message, "code": exc.code}

    try:
        result = calculate(inp, policy=policy, lang=lang)
    except CalculationError as exc:
        logger.exception("calculation failed")
        return 500, {"error": t("request.calculation_failed", lang), "detail": str(exc)}
    return 200, result.model_dump(mode="json")
