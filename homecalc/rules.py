from __future__ import annotations

from typing import TYPE_CHECKING, List

from .models import CalculationResult, RuleResult

if TYPE_CHECKING:  # pragma: no cover
    from .api import CalculationRequest

__all__ = ["RuleResult", "evaluate_rules", "evaluate_request", "has_blocking"]


def evaluate_rules(result: CalculationResult) -> List[RuleResult]:
    """Advisory findings a reader should see next to the headline figures."""
    res: List[RuleResult] = []

    if not result.solver.converged:
        res.append(
            RuleResult(
                code="SOLVER_NOT_CONVERGED",
                severity="critical",
                message="Purchase price did not settle within the iteration cap; check the tax policy.",
                context={
                    "iterations": result.solver.iterations,
                    "final_delta": result.solver.final_delta,
                },
            )
        )

    if result.available_budget <= 0:
        res.append(
            RuleResult(
                code="NO_AVAILABLE_BUDGET",
                severity="warn",
                message="Reserved costs and transaction taxes use up all liquid assets.",
                context={
                    "total_assets": result.total_assets,
                    "total_deductions": result.total_deductions,
                },
            )
        )

    if result.payment_burden.level == "heavy":
        res.append(
            RuleResult(
                code="PAYMENT_HEAVY",
                severity="warn",
                message="Monthly mortgage payment is a heavy share of take-home pay.",
                context={"percent": result.payment_burden.percent},
            )
        )

    if result.credit_loan_total > 0:
        res.append(
            RuleResult(
                code="CREDIT_LOAN_LEVERAGE",
                severity="warn",
                message="Unsecured credit is included; total debt service rises accordingly.",
                context={
                    "credit_loan_total": result.credit_loan_total,
                    "monthly_payment": sum(c.monthly_payment for c in result.credit_loans),
                },
            )
        )

    rationale = result.rationale
    if rationale.target_achievable is False:
        res.append(
            RuleResult(
                code="TARGET_SHORTFALL",
                severity="warn",
                message="Target price exceeds total purchasing power.",
                context={
                    "target_price": rationale.target_price,
                    "shortfall": -rationale.target_gap,
                },
            )
        )

    if rationale.binding_constraint.value == "regulatory_cap":
        res.append(
            RuleResult(
                code="REGULATORY_CAP_BINDING",
                severity="info",
                message="The regional mortgage cap, not income or LTV, limits the loan.",
                context={"mortgage_cap": result.regulation.mortgage_cap},
            )
        )

    if not result.income.first_time_eligible:
        res.append(
            RuleResult(
                code="NOT_FIRST_TIME_BUYER",
                severity="info",
                message="Household income exceeds the first-time buyer limit; standard LTV and no tax exemption apply.",
                context={"annual_gross_total": result.income.annual_gross_total},
            )
        )

    return res


def evaluate_request(req: "CalculationRequest") -> List[RuleResult]:
    """Checks the request handler runs before anything reaches the engine."""
    res: List[RuleResult] = []

    if req.applicant_income <= 0:
        res.append(
            RuleResult(
                code="APPLICANT_NET_INCOME_MISSING",
                severity="critical",
                message="Enter the applicant's monthly take-home income.",
            )
        )
    if req.applicant_pre_tax_annual <= 0:
        res.append(
            RuleResult(
                code="APPLICANT_GROSS_INCOME_MISSING",
                severity="critical",
                message="Enter the applicant's pre-tax annual income.",
            )
        )
    if req.is_couple:
        if req.spouse_income <= 0:
            res.append(
                RuleResult(
                    code="SPOUSE_NET_INCOME_MISSING",
                    severity="critical",
                    message="Enter the spouse's monthly take-home income.",
                )
            )
        if req.spouse_pre_tax_annual <= 0:
            res.append(
                RuleResult(
                    code="SPOUSE_GROSS_INCOME_MISSING",
                    severity="critical",
                    message="Enter the spouse's pre-tax annual income.",
                )
            )

    return res


def has_blocking(res: List[RuleResult]) -> bool:
    return any(r.severity == "critical" for r in res)
