"""Regulation lookups and eligibility tables.

Nothing here computes loan sizes; these helpers only read the policy tables
and annotate them for one household.
"""
from __future__ import annotations

from typing import List

from .i18n import t
from .models import GovernmentLoanProduct, Region, RegionalFeasibility, RegulationInfo
from .policy import FirstTimeBuyerPolicy, GovernmentLoanRule, PolicyConfig


def is_first_time_buyer(annual_gross_income, joint: bool, policy: FirstTimeBuyerPolicy) -> bool:
    """Income test for preferential LTV and the acquisition tax exemption."""
    limit = policy.max_income_joint if joint else policy.max_income_single
    return annual_gross_income <= limit


def lookup_regulation(region: Region, first_time: bool, policy: PolicyConfig) -> RegulationInfo:
    rule = policy.regions[Region(region)]
    return RegulationInfo(
        region=Region(region),
        region_name=rule.name,
        is_regulated=rule.regulated,
        mortgage_cap=rule.mortgage_cap,
        ltv_limit=rule.ltv_for(first_time),
        stress_test_rate=rule.stress_test_rate,
        details=rule.details,
    )


def _loan_ineligibility(
    rule: GovernmentLoanRule, purchase_price, annual_gross_income, joint: bool, first_time: bool, lang: str
):
    """Return the reason a product is out of reach, or ``None`` if it fits."""
    if rule.requires_first_time and not first_time:
        return t("gov.not_first_time", lang)
    income_cap = rule.max_income_joint if joint else rule.max_income_single
    if income_cap is not None and annual_gross_income > income_cap:
        return t("gov.income_over", lang, limit=income_cap)
    if rule.max_price is not None and purchase_price > rule.max_price:
        return t("gov.price_over", lang, limit=rule.max_price)
    return None


def evaluate_government_loans(
    purchase_price,
    annual_gross_income,
    joint: bool,
    first_time: bool,
    policy: PolicyConfig,
    lang: str = "en",
) -> List[GovernmentLoanProduct]:
    """Annotate the subsidised loan catalog with per-household eligibility.

    A product with no first-time, income or price condition is a catch-all and
    is always eligible.
    """
    products = []
    for rule in policy.government_loans:
        reason = _loan_ineligibility(rule, purchase_price, annual_gross_income, joint, first_time, lang)
        products.append(
            GovernmentLoanProduct(
                name=rule.name,
                income_limit=rule.income_limit,
                price_limit=rule.price_limit,
                ltv=rule.ltv,
                interest_rate=rule.interest_rate,
                eligible=reason is None,
                reason=reason,
            )
        )
    return products


def regional_feasibility(available_budget, first_time: bool, policy: PolicyConfig, lang: str = "en") -> List[RegionalFeasibility]:
    """Highest price each region's LTV allows for the cash on hand."""
    rows = []
    for region, rule in policy.regions.items():
        ltv = rule.ltv_for(first_time)
        max_price = max(0.0, available_budget) / (1 - ltv)
        feasible = max_price > 0
        reason = t("region.feasible", lang, price=max_price) if feasible else t("region.infeasible", lang)
        rows.append(
            RegionalFeasibility(
                region=region,
                region_name=rule.name,
                ltv_standard=rule.ltv_standard,
                ltv_applied=ltv,
                max_price_by_ltv=max_price,
                feasible=feasible,
                reason=reason,
            )
        )
    return rows
