"""Purchase-power engine.

:func:`calculate` is the single entry point. Acquisition tax and the
registration fee depend on the purchase price, while the price depends on the
cash left after paying them, so the price is found by fixed-point iteration
in :func:`solve_purchase_price` before loan limits are sized against the
resulting budget.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

from .calculators import (
    acquisition_tax,
    credit_loan,
    max_loan_by_dsr,
    monthly_payment,
    registration_fee,
    total_credit_loan,
)
from .errors import CalculationError, ConvergenceError, HomeCalcError
from .i18n import t
from .models import (
    BindingConstraint,
    CalculationInput,
    CalculationResult,
    CostBreakdown,
    IncomeSummary,
    LoanInfo,
    PaymentBurden,
    PriceEstimate,
    PurchasePowerSummary,
    RationaleSummary,
    SolverDiagnostics,
)
from .policy import DEFAULT_POLICY, PaymentPolicy, PolicyConfig
from .regulations import (
    evaluate_government_loans,
    is_first_time_buyer,
    lookup_regulation,
    regional_feasibility,
)
from .rules import evaluate_rules

logger = logging.getLogger(__name__)

BORROWER_LABELS = ("applicant", "spouse")


def estimate_at_price(price, total_assets, reserved_costs, first_time: bool, policy: PolicyConfig) -> PriceEstimate:
    tax = acquisition_tax(price, first_time, policy.tax)
    fee = registration_fee(price, policy.registration_fee_rate)
    deductions = reserved_costs + tax.final_tax + fee
    return PriceEstimate(
        price=price,
        tax=tax,
        registration_fee=fee,
        total_deductions=deductions,
        available_budget=max(0.0, total_assets - deductions),
    )


def ltv_loan_limit(available_budget, ltv):
    """Largest loan for which ``loan / (budget + loan)`` stays within ``ltv``."""
    return available_budget * ltv / (1 - ltv)


def solve_purchase_price(
    total_assets,
    reserved_costs,
    first_time: bool,
    ltv: float,
    dsr_limit: float,
    policy: PolicyConfig,
) -> Tuple[PriceEstimate, SolverDiagnostics]:
    """Iterate price -> costs -> budget -> loan -> price until it settles.

    Each step prices the taxes at the current estimate, derives the budget and
    sets the next price to ``budget + min(LTV loan, DSR loan)``.  The loop
    stops once consecutive prices differ by less than ``solver.tolerance`` or
    after ``solver.max_iterations`` steps.  Hitting the cap means the tax
    schedule is no longer a contraction; it is logged and flagged, and raises
    :class:`ConvergenceError` when ``solver.strict`` is set.

    The regional mortgage cap is not applied inside the loop; it only limits
    the final loan.  When the cap binds, taxes are priced at a price the
    household cannot reach, so the returned budget is slightly understated.
    """
    cfg = policy.solver
    price = cfg.seed_price
    delta = float("inf")
    iterations = 0
    for iterations in range(1, cfg.max_iterations + 1):
        est = estimate_at_price(price, total_assets, reserved_costs, first_time, policy)
        loan = min(ltv_loan_limit(est.available_budget, ltv), dsr_limit)
        next_price = est.available_budget + loan
        delta = abs(next_price - price)
        logger.debug("solver step %d: price %.1f -> %.1f (delta %.2f)", iterations, price, next_price, delta)
        price = next_price
        if delta < cfg.tolerance:
            break

    converged = delta < cfg.tolerance
    if not converged:
        logger.warning(
            "purchase price did not converge after %d iterations (delta %.2f, tolerance %.2f)",
            iterations,
            delta,
            cfg.tolerance,
        )
        if cfg.strict:
            raise ConvergenceError(iterations, delta)

    final = estimate_at_price(price, total_assets, reserved_costs, first_time, policy)
    return final, SolverDiagnostics(mode="solve", converged=converged, iterations=iterations, final_delta=delta)


def payment_burden(payment, monthly_net_income, policy: PaymentPolicy) -> PaymentBurden:
    ratio = payment / monthly_net_income if monthly_net_income > 0 else 0.0
    if ratio > policy.heavy_ratio:
        level = "heavy"
    elif ratio >= policy.moderate_ratio:
        level = "moderate"
    else:
        level = "comfortable"
    return PaymentBurden(ratio=ratio, percent=int(round(ratio * 100)), level=level)


def build_rationale(
    by_dsr,
    by_ltv,
    by_cap,
    ltv: float,
    dsr_ratio: float,
    target_price,
    purchasing_power,
    lang: str = "en",
) -> RationaleSummary:
    """Explain which limit sets the mortgage and whether a target is reachable.

    Ties go to the first constraint in DSR, LTV, regulatory cap order.
    """
    limits: Dict[BindingConstraint, float] = {
        BindingConstraint.DSR: by_dsr,
        BindingConstraint.LTV: by_ltv,
        BindingConstraint.REGULATORY_CAP: by_cap,
    }
    binding = min(limits, key=limits.__getitem__)
    reason = t(
        f"rationale.{binding.value}",
        lang,
        limit=limits[binding],
        dsr_pct=dsr_ratio * 100,
        ltv_pct=ltv * 100,
    )

    achievable = gap = target_reason = None
    target = target_price if target_price > 0 else None
    if target is not None:
        gap = purchasing_power - target
        achievable = gap >= 0
        key = "rationale.target_met" if achievable else "rationale.target_short"
        target_reason = t(key, lang, target=target, power=purchasing_power, gap=abs(gap))

    return RationaleSummary(
        binding_constraint=binding,
        limits=limits,
        reason=reason,
        target_price=target,
        total_purchasing_power=purchasing_power,
        target_achievable=achievable,
        target_gap=gap,
        target_reason=target_reason,
    )


def _calculate(inp: CalculationInput, policy: PolicyConfig, lang: str) -> CalculationResult:
    gross = inp.total_annual_gross_income
    net = inp.total_monthly_net_income
    first_time = is_first_time_buyer(gross, inp.is_joint, policy.first_time)
    regulation = lookup_regulation(inp.region, first_time, policy)
    ltv = regulation.ltv_limit

    rate = inp.interest_rate_pct / 100
    reference_rate = policy.dsr.reference_rate if policy.dsr.reference_rate is not None else rate
    term = inp.loan_term_years
    by_dsr = max_loan_by_dsr(gross, term, reference_rate, policy.dsr.ratio)

    if inp.target_price > 0:
        estimate = estimate_at_price(inp.target_price, inp.total_assets, inp.reserved_costs, first_time, policy)
        solver = SolverDiagnostics(mode="target", converged=True, iterations=0, final_delta=0.0)
    else:
        estimate, solver = solve_purchase_price(
            inp.total_assets, inp.reserved_costs, first_time, ltv, by_dsr, policy
        )

    budget = estimate.available_budget
    by_ltv = ltv_loan_limit(budget, ltv)
    by_cap = regulation.mortgage_cap
    at_cap = min(by_ltv, by_cap)
    max_loan = min(at_cap, by_dsr)

    spread = policy.payment.rate_spread
    loan = LoanInfo(
        ltv=ltv,
        max_loan_by_ltv=by_ltv,
        max_loan_by_dsr=by_dsr,
        max_loan_by_cap=by_cap,
        max_loan=max_loan,
        max_loan_at_cap=at_cap,
        monthly_payment_min=monthly_payment(max_loan, max(0.0, rate - spread), term),
        monthly_payment_max=monthly_payment(max_loan, rate + spread, term),
        loan_term_years=term,
    )

    # Ownership status is not collected yet, so nobody is treated as a multi-property owner.
    credit_loans = [
        credit_loan(
            b.use_credit_loan,
            b.annual_gross_income,
            b.credit_score,
            policy.credit,
            multi_property_owner=False,
            borrower=label,
            lang=lang,
        )
        for label, b in zip(BORROWER_LABELS, inp.household.borrowers)
    ]
    credit_total = total_credit_loan(credit_loans)

    power = PurchasePowerSummary(
        cash_only=budget,
        with_mortgage=budget + max_loan,
        regulatory_cap_max=budget + at_cap,
        with_credit_loan=budget + max_loan + credit_total,
    )

    result = CalculationResult(
        income=IncomeSummary(
            monthly_net_total=net,
            annual_net_total=net * 12,
            annual_gross_total=gross,
            first_time_eligible=first_time,
        ),
        total_assets=inp.total_assets,
        reserved_costs=inp.reserved_costs,
        total_deductions=estimate.total_deductions,
        available_budget=budget,
        cost_breakdown=CostBreakdown(
            savings=inp.savings,
            parent_gift=inp.parent_gift,
            other_assets=inp.other_assets,
            emergency_fund=inp.emergency_fund,
            interior_cost=inp.interior_cost,
            moving_cost=inp.moving_cost,
            acquisition_tax=estimate.tax.final_tax,
            registration_fee=estimate.registration_fee,
        ),
        acquisition_tax=estimate.tax,
        loan=loan,
        credit_loans=credit_loans,
        credit_loan_total=credit_total,
        regulation=regulation,
        purchase_power=power,
        payment_burden=payment_burden(loan.monthly_payment_min, net, policy.payment),
        government_loans=evaluate_government_loans(
            power.with_mortgage, gross, inp.is_joint, first_time, policy, lang
        ),
        regional_feasibility=regional_feasibility(budget, first_time, policy, lang),
        rationale=build_rationale(
            by_dsr,
            by_ltv,
            by_cap,
            ltv,
            policy.dsr.ratio,
            inp.target_price,
            power.with_credit_loan,
            lang,
        ),
        solver=solver,
        disclaimer=policy.disclaimer,
    )
    return result.model_copy(update={"advisories": evaluate_rules(result)})


def calculate(
    inp: CalculationInput,
    policy: Optional[PolicyConfig] = None,
    lang: str = "en",
) -> CalculationResult:
    """Derive the full purchase-power picture for one household.

    The call is pure: no I/O and no state survives it, so identical input and
    policy always yield an identical result.  Failures surface as
    :class:`CalculationError`, never as a zero-valued result.
    """
    policy = policy or DEFAULT_POLICY
    try:
        result = _calculate(inp, policy, lang)
    except HomeCalcError:
        raise
    except (ArithmeticError, ValueError, TypeError, LookupError, AttributeError) as exc:
        raise CalculationError(f"Calculation failed: {exc}") from exc

    logger.info(
        "region=%s max_loan=%.0f recommended_price=%.0f binding=%s iterations=%d",
        inp.region.value,
        result.loan.max_loan,
        result.recommended_price,
        result.rationale.binding_constraint.value,
        result.solver.iterations,
    )
    return result
