"""What-if helpers built on repeated :func:`~homecalc.engine.calculate` calls."""
from __future__ import annotations

from typing import Dict, Optional

import pandas as pd

from .engine import calculate
from .models import CalculationInput, CalculationResult, Region
from .policy import PolicyConfig


def _metrics(res: CalculationResult) -> dict:
    return {
        "max_loan": res.loan.max_loan,
        "recommended_price": res.recommended_price,
        "with_credit_loan": res.purchase_power.with_credit_loan,
        "monthly_payment_max": res.loan.monthly_payment_max,
        "acquisition_tax": res.acquisition_tax.final_tax,
        "binding_constraint": res.rationale.binding_constraint.value,
    }


def what_if(inp: CalculationInput, policy: Optional[PolicyConfig] = None) -> Dict[str, dict]:
    """Recalculate under a few common adjustments to the household's plan.

    ``rate_plus_0.5`` raises the mortgage rate by half a point,
    ``savings_plus_1000`` adds 1,000 of savings and ``term_30`` stretches the
    loan to thirty years.
    """

    variants = {
        "base": inp,
        "rate_plus_0.5": inp.model_copy(update={"interest_rate_pct": min(inp.interest_rate_pct + 0.5, 15.0)}),
        "savings_plus_1000": inp.model_copy(update={"savings": inp.savings + 1000}),
        "term_30": inp.model_copy(update={"loan_term_years": 30}),
    }
    return {name: _metrics(calculate(v, policy=policy)) for name, v in variants.items()}


def compare_scenarios(
    inp: CalculationInput,
    policy: Optional[PolicyConfig] = None,
    alt_rate_pct: Optional[float] = None,
    alt_region: Optional[Region] = None,
    alt_term: Optional[int] = None,
) -> Dict[str, dict]:
    """Compare the base plan with an alternative rate, region or term."""

    update = {}
    if alt_rate_pct is not None:
        update["interest_rate_pct"] = alt_rate_pct
    if alt_region is not None:
        update["region"] = Region(alt_region)
    if alt_term is not None:
        update["loan_term_years"] = alt_term
    # Re-validate so an out-of-range alternative is rejected like any other input.
    alt = CalculationInput.model_validate({**inp.model_dump(), **update})
    return {
        "base": _metrics(calculate(inp, policy=policy)),
        "alt": _metrics(calculate(alt, policy=policy)),
    }


def scenario_frame(scenarios: Dict[str, dict]) -> pd.DataFrame:
    """Tabulate scenario metrics with one row per scenario."""

    return pd.DataFrame.from_dict(scenarios, orient="index")
