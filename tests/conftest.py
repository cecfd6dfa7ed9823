import pytest

from homecalc.models import Borrower, CalculationInput, JointHousehold, SingleHousehold


def _build(joint=False, net=400, gross=5000, spouse_net=300, spouse_gross=4000,
           use_credit=False, score=700, spouse_credit=False, spouse_score=700, **fields):
    applicant = Borrower(monthly_net_income=net, annual_gross_income=gross,
                         use_credit_loan=use_credit, credit_score=score)
    if joint:
        spouse = Borrower(monthly_net_income=spouse_net, annual_gross_income=spouse_gross,
                          use_credit_loan=spouse_credit, credit_score=spouse_score)
        household = JointHousehold(applicant=applicant, spouse=spouse)
    else:
        household = SingleHousehold(applicant=applicant)
    base = {
        "savings": 30000,
        "emergency_fund": 1000,
        "interior_cost": 1000,
        "moving_cost": 100,
        "region": "seoul",
        "loan_term_years": 30,
        "interest_rate_pct": 4.0,
    }
    base.update(fields)
    return CalculationInput(household=household, **base)


@pytest.fixture
def make_input():
    """Factory for calculation inputs; defaults match the form's sample household."""
    return _build


@pytest.fixture
def scenario_a():
    return _build()
