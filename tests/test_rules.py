from homecalc.api import CalculationRequest
from homecalc.engine import calculate
from homecalc.rules import evaluate_request, evaluate_rules, has_blocking


def _codes(result):
    return {r.code for r in evaluate_rules(result)}


def _request(**fields):
    base = {"target_region": "seoul", "loan_term_years": 30, "applicant_income": 400, "applicant_pre_tax_annual": 5000}
    base.update(fields)
    return CalculationRequest(**base)


def test_advisories_attached_to_result(scenario_a):
    res = calculate(scenario_a)
    assert {a.code for a in res.advisories} == _codes(res)


def test_heavy_payment(scenario_a):
    res = calculate(scenario_a)
    assert res.payment_burden.level == "heavy"
    assert "PAYMENT_HEAVY" in _codes(res)


def test_comfortable_household_has_no_warnings(make_input):
    res = calculate(make_input(net=1200, gross=20000, savings=10000, emergency_fund=0, interior_cost=0, moving_cost=0))
    assert res.payment_burden.level == "comfortable"
    assert not [a for a in evaluate_rules(res) if a.severity != "info"]
    assert "NOT_FIRST_TIME_BUYER" in _codes(res)


def test_credit_leverage(make_input):
    res = calculate(make_input(use_credit=True))
    finding = next(r for r in evaluate_rules(res) if r.code == "CREDIT_LOAN_LEVERAGE")
    assert finding.severity == "warn"
    assert finding.context["credit_loan_total"] == res.credit_loan_total


def test_target_shortfall(make_input):
    res = calculate(make_input(target_price=80000))
    finding = next(r for r in evaluate_rules(res) if r.code == "TARGET_SHORTFALL")
    assert finding.context["shortfall"] > 0


def test_regulatory_cap_binding(make_input):
    assert "REGULATORY_CAP_BINDING" in _codes(calculate(make_input(gross=20000, savings=200000)))


def test_no_available_budget(make_input):
    assert "NO_AVAILABLE_BUDGET" in _codes(calculate(make_input(savings=1000)))


def test_request_missing_applicant_income():
    findings = evaluate_request(_request(applicant_income=0, applicant_pre_tax_annual=0))
    codes = [f.code for f in findings]
    assert codes == ["APPLICANT_NET_INCOME_MISSING", "APPLICANT_GROSS_INCOME_MISSING"]
    assert has_blocking(findings)


def test_request_spouse_checked_only_for_couples():
    assert evaluate_request(_request(spouse_income=0)) == []
    findings = evaluate_request(_request(is_couple=True, spouse_income=0, spouse_pre_tax_annual=4000))
    assert [f.code for f in findings] == ["SPOUSE_NET_INCOME_MISSING"]


def test_complete_request_is_not_blocking():
    findings = evaluate_request(_request(is_couple=True, spouse_income=300, spouse_pre_tax_annual=4000))
    assert not has_blocking(findings)
