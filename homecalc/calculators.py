from __future__ import annotations

from typing import List, Literal

import pandas as pd

from .i18n import t
from .models import AcquisitionTaxBreakdown, CreditLoanInfo
from .policy import AcquisitionTaxPolicy, CreditLoanPolicy
from .utils import credit_tier


def monthly_payment(principal, annual_rate, term_years):
    """Calculate the level monthly payment for a fixed-rate loan.

    ``principal`` is the loan amount, ``annual_rate`` the nominal yearly rate
    as a decimal (``0.04`` for 4%), and ``term_years`` the amortization period.
    A zero or vanishingly small rate degenerates to straight-line repayment.
    """

    L = float(principal)
    n = int(term_years * 12)
    if n <= 0 or L <= 0:
        return 0.0
    r = annual_rate / 12
    if abs(r) < 1e-9:
        return L / n
    factor = (1 + r) ** n
    return L * r * factor / (factor - 1)


def principal_from_payment(payment, annual_rate, term_years):
    """Reverse amortization to find the loan amount for a given payment.

    This is the exact inverse of :func:`monthly_payment`: feeding the result
    back through it at the same rate and term reproduces ``payment``.
    """

    P = float(payment)
    n = int(term_years * 12)
    if n <= 0 or P <= 0:
        return 0.0
    r = annual_rate / 12
    if abs(r) < 1e-9:
        return P * n
    factor = (1 + r) ** n
    return P * (factor - 1) / (r * factor)


def amortization_schedule(principal, annual_rate, term_years) -> pd.DataFrame:
    """Month-by-month split of each payment into interest and principal."""

    n = int(term_years * 12)
    payment = monthly_payment(principal, annual_rate, term_years)
    balance = float(principal)
    records = []
    for month in range(1, n + 1):
        interest = balance * annual_rate / 12
        principal_paid = min(payment - interest, balance)
        balance = max(balance - principal_paid, 0.0)
        records.append(
            {
                "month": month,
                "payment": payment,
                "interest": interest,
                "principal": principal_paid,
                "ending_balance": balance,
            }
        )
    if not records:
        return pd.DataFrame(columns=["payment", "interest", "principal", "ending_balance"])
    return pd.DataFrame.from_records(records).set_index("month")


def dsr_payment_ceiling(annual_gross_income, dsr_ratio):
    """Largest monthly debt payment allowed by the debt-service ratio."""

    return max(0.0, float(annual_gross_income)) * dsr_ratio / 12


def max_loan_by_dsr(annual_gross_income, term_years, reference_rate, dsr_ratio=0.40):
    """Maximum principal whose payment stays inside the DSR ceiling.

    The ceiling is ``dsr_ratio`` of gross annual income spread over twelve
    months, reverse-amortized at ``reference_rate`` over ``term_years``.
    """

    ceiling = dsr_payment_ceiling(annual_gross_income, dsr_ratio)
    return principal_from_payment(ceiling, reference_rate, term_years)


def progressive_tax(price, brackets):
    """Apply marginal rates band by band; the last bracket is open-ended."""

    tax = 0.0
    lower = 0.0
    for b in brackets:
        if b.up_to is None:
            tax += max(0.0, price - lower) * b.rate
            break
        band = max(0.0, min(price, b.up_to) - lower)
        tax += band * b.rate
        lower = b.up_to
        if price <= lower:
            break
    return tax


def acquisition_tax(purchase_price, first_time: bool, policy: AcquisitionTaxPolicy) -> AcquisitionTaxBreakdown:
    """Acquisition tax with education surtax and the first-time buyer exemption.

    ``policy.exemption_order`` decides whether the capped exemption comes off
    the total after the surtax has been added (``"after_surtax"``) or off the
    base tax before the surtax is levied on what remains (``"before_surtax"``).
    """

    price = max(0.0, float(purchase_price))
    base = progressive_tax(price, policy.brackets)
    special = 0.0
    cap = policy.first_time_exemption_cap if first_time else 0.0

    if policy.exemption_order == "before_surtax":
        exemption = min(base, cap)
        education = (base - exemption) * policy.education_surtax_rate
    else:
        education = base * policy.education_surtax_rate
        exemption = min(base + education + special, cap)

    subtotal = base + education + special
    final = max(0.0, subtotal - exemption)
    return AcquisitionTaxBreakdown(
        base_tax=base,
        education_tax=education,
        special_tax=special,
        subtotal=subtotal,
        exemption=exemption,
        final_tax=final,
    )


def registration_fee(purchase_price, rate):
    """Registration fee charged as a flat share of the purchase price."""

    return max(0.0, float(purchase_price)) * rate


def credit_loan(
    opted_in: bool,
    annual_gross_income,
    credit_score,
    policy: CreditLoanPolicy,
    multi_property_owner: bool = False,
    borrower: Literal["applicant", "spouse"] = "applicant",
    lang: str = "en",
) -> CreditLoanInfo:
    """Unsecured loan limit for one borrower.

    Multi-property owners never qualify.  The ``tiered`` model takes the lesser
    of ``income_multiplier`` times income and the credit-score tier cap; the
    ``income_only`` model uses the income multiple alone.
    """

    if not opted_in:
        return CreditLoanInfo(borrower=borrower, eligible=False, reason=t("credit.not_requested", lang))
    if multi_property_owner:
        return CreditLoanInfo(borrower=borrower, eligible=False, reason=t("credit.multi_property", lang))

    by_income = max(0.0, float(annual_gross_income)) * policy.income_multiplier
    if policy.model == "tiered":
        limit = min(by_income, credit_tier(credit_score, policy.tiers).cap)
    else:
        limit = by_income

    return CreditLoanInfo(
        borrower=borrower,
        eligible=True,
        max_loan=limit,
        monthly_payment=monthly_payment(limit, policy.annual_rate, policy.term_years),
    )


def total_credit_loan(loans: List[CreditLoanInfo]) -> float:
    return sum(c.max_loan for c in loans if c.eligible)
