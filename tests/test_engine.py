import logging

import pytest
from pydantic import ValidationError

import homecalc.engine as engine
from homecalc.calculators import max_loan_by_dsr
from homecalc.engine import calculate, estimate_at_price, solve_purchase_price
from homecalc.errors import CalculationError, ConvergenceError
from homecalc.models import BindingConstraint, Region
from homecalc.policy import DsrPolicy, PolicyConfig, SolverPolicy


def test_single_filer_in_seoul(scenario_a):
    res = calculate(scenario_a)
    assert res.income.first_time_eligible is True
    assert res.loan.ltv == pytest.approx(0.80)
    assert res.regulation.mortgage_cap == 60000
    assert res.loan.max_loan == pytest.approx(
        min(res.loan.max_loan_by_cap, res.loan.max_loan_by_ltv, res.loan.max_loan_by_dsr)
    )
    assert res.loan.max_loan_by_dsr == pytest.approx(max_loan_by_dsr(5000, 30, 0.04))
    assert res.rationale.binding_constraint == BindingConstraint.DSR
    assert res.solver.mode == "solve"
    assert res.solver.converged is True
    assert res.total_assets == 30000
    assert res.reserved_costs == 2100


def test_unregulated_region_never_lends_less(scenario_a, make_input):
    seoul = calculate(scenario_a)
    other = calculate(make_input(region="other"))
    assert other.regulation.is_regulated is False
    assert other.loan.ltv == pytest.approx(0.85)
    assert other.loan.max_loan >= seoul.loan.max_loan


def test_result_invariants(scenario_a):
    res = calculate(scenario_a)
    power = res.purchase_power
    assert res.available_budget >= 0
    assert res.loan.max_loan <= res.loan.max_loan_at_cap + 1e-9
    assert power.cash_only <= power.with_mortgage <= power.with_credit_loan
    assert res.conservative_price <= res.recommended_price <= res.optimistic_price
    assert res.loan.monthly_payment_min <= res.loan.monthly_payment_max
    assert res.cost_breakdown.acquisition_tax == res.acquisition_tax.final_tax
    assert res.disclaimer


def test_calculation_is_idempotent(scenario_a):
    assert calculate(scenario_a).model_dump_json() == calculate(scenario_a).model_dump_json()


@pytest.mark.parametrize("rate", [0.0, 2.5, 5.0, 7.5, 10.0])
@pytest.mark.parametrize("term", [10, 15, 20, 30])
@pytest.mark.parametrize("region", list(Region))
@pytest.mark.parametrize("gross,savings", [(5000, 30000), (12000, 150000), (3000, 8000)])
def test_solver_converges_across_inputs(make_input, rate, term, region, gross, savings):
    res = calculate(
        make_input(gross=gross, savings=savings, region=region, loan_term_years=term, interest_rate_pct=rate)
    )
    assert res.solver.converged is True
    assert res.solver.iterations <= 10
    assert res.solver.final_delta < 100


def test_regulatory_cap_binds_for_large_budget(make_input):
    res = calculate(make_input(gross=20000, savings=200000))
    assert res.income.first_time_eligible is False
    assert res.loan.ltv == pytest.approx(0.50)
    assert res.rationale.binding_constraint == BindingConstraint.REGULATORY_CAP
    assert res.loan.max_loan == pytest.approx(60000)


def test_ltv_binds_for_small_budget(make_input):
    res = calculate(make_input(gross=20000, savings=10000, emergency_fund=0, interior_cost=0, moving_cost=0))
    assert res.rationale.binding_constraint == BindingConstraint.LTV
    assert res.loan.max_loan == pytest.approx(res.available_budget)


def test_no_budget_left(make_input):
    res = calculate(make_input(savings=1000))
    assert res.available_budget == 0
    assert res.loan.max_loan == 0
    assert res.solver.converged is True
    assert all(not row.feasible for row in res.regional_feasibility)


def test_not_first_time_buyer_gets_no_exemption(make_input):
    res = calculate(make_input(gross=5001))
    assert res.income.first_time_eligible is False
    assert res.acquisition_tax.exemption == 0
    assert res.loan.ltv == pytest.approx(0.50)


def test_target_price_skips_solver(make_input):
    res = calculate(make_input(target_price=80000))
    assert res.solver.mode == "target"
    assert res.solver.iterations == 0
    # 600 + 400 base, 100 surtax, 200 exemption
    assert res.acquisition_tax.final_tax == pytest.approx(900)
    assert res.cost_breakdown.registration_fee == pytest.approx(320)
    assert res.available_budget == pytest.approx(30000 - 2100 - 900 - 320)


def test_target_price_shortfall(make_input):
    res = calculate(make_input(target_price=80000))
    rationale = res.rationale
    assert rationale.target_price == 80000
    assert rationale.target_achievable is False
    assert rationale.target_gap == pytest.approx(res.purchase_power.with_credit_loan - 80000)
    assert rationale.target_gap < 0
    assert rationale.target_reason


def test_target_price_met(make_input):
    res = calculate(make_input(target_price=50000))
    assert res.rationale.target_achievable is True
    assert res.rationale.target_gap >= 0


def test_without_target_no_target_fields(scenario_a):
    rationale = calculate(scenario_a).rationale
    assert rationale.target_price is None
    assert rationale.target_achievable is None
    assert rationale.target_gap is None


def test_joint_household_credit_loans(make_input):
    res = calculate(
        make_input(joint=True, use_credit=True, score=800, spouse_credit=True, spouse_score=700)
    )
    applicant, spouse = res.credit_loans
    assert applicant.borrower == "applicant"
    assert applicant.max_loan == pytest.approx(2500)
    assert spouse.borrower == "spouse"
    assert spouse.max_loan == pytest.approx(2000)
    assert res.credit_loan_total == pytest.approx(4500)
    assert res.purchase_power.with_credit_loan == pytest.approx(res.purchase_power.with_mortgage + 4500)


def test_joint_household_sums_incomes(make_input):
    res = calculate(make_input(joint=True))
    assert res.income.annual_gross_total == 9000
    assert res.income.monthly_net_total == 700
    assert res.income.annual_net_total == 8400
    assert res.income.first_time_eligible is False


def test_credit_loan_not_requested(scenario_a):
    res = calculate(scenario_a)
    assert len(res.credit_loans) == 1
    assert res.credit_loans[0].eligible is False
    assert res.credit_loan_total == 0


def test_fixed_dsr_reference_rate(make_input):
    policy = PolicyConfig(dsr=DsrPolicy(reference_rate=0.045))
    low = calculate(make_input(interest_rate_pct=3.0), policy=policy)
    high = calculate(make_input(interest_rate_pct=6.0), policy=policy)
    assert low.loan.max_loan_by_dsr == pytest.approx(high.loan.max_loan_by_dsr)


def test_dsr_follows_caller_rate_by_default(make_input):
    low = calculate(make_input(interest_rate_pct=3.0))
    high = calculate(make_input(interest_rate_pct=6.0))
    assert low.loan.max_loan_by_dsr > high.loan.max_loan_by_dsr


def test_payment_range_brackets_rate(scenario_a):
    res = calculate(scenario_a)
    assert res.loan.monthly_payment_min < res.loan.monthly_payment_max


def test_government_loans_evaluated(scenario_a):
    res = calculate(scenario_a)
    by_name = {p.name: p for p in res.government_loans}
    assert by_name["일반 주담대"].eligible is True
    # purchasing power is above 6억, beyond both subsidised products
    assert res.purchase_power.with_mortgage > 60000
    assert by_name["보금자리론"].eligible is False


def test_regional_feasibility_covers_every_region(scenario_a):
    res = calculate(scenario_a)
    assert {row.region for row in res.regional_feasibility} == set(Region)
    for row in res.regional_feasibility:
        assert row.max_price_by_ltv == pytest.approx(res.available_budget / (1 - row.ltv_applied))


def test_korean_reasons(scenario_a):
    res = calculate(scenario_a, lang="ko")
    assert res.credit_loans[0].reason == "신용대출 미선택"
    assert "DSR" in res.rationale.reason


def test_strict_solver_raises(scenario_a):
    policy = PolicyConfig(solver=SolverPolicy(max_iterations=1, strict=True))
    with pytest.raises(ConvergenceError) as exc:
        calculate(scenario_a, policy=policy)
    assert exc.value.iterations == 1


def test_non_converged_is_flagged(scenario_a, caplog):
    policy = PolicyConfig(solver=SolverPolicy(max_iterations=1))
    with caplog.at_level(logging.WARNING, logger="homecalc.engine"):
        res = calculate(scenario_a, policy=policy)
    assert res.solver.converged is False
    assert res.solver.iterations == 1
    assert "SOLVER_NOT_CONVERGED" in {a.code for a in res.advisories}
    assert "did not converge" in caplog.text


def test_solver_reaches_fixed_point():
    est, diag = solve_purchase_price(30000, 2100, True, 0.8, 34911.0, PolicyConfig())
    assert diag.converged is True
    assert est.price == pytest.approx(est.available_budget + 34911.0, abs=100)


def test_near_zero_rate_matches_zero_rate(make_input):
    tiny = calculate(make_input(interest_rate_pct=1e-15))
    zero = calculate(make_input(interest_rate_pct=0.0))
    assert zero.loan.max_loan_by_dsr == pytest.approx(60000)
    assert tiny.loan.max_loan_by_dsr == pytest.approx(zero.loan.max_loan_by_dsr)


def test_core_failure_wrapped(monkeypatch, scenario_a):
    def broken(*args, **kwargs):
        raise KeyError("seoul")

    monkeypatch.setattr(engine, "lookup_regulation", broken)
    with pytest.raises(CalculationError):
        calculate(scenario_a)


def test_price_estimate_is_frozen():
    est = estimate_at_price(50000, 30000, 2100, True, PolicyConfig())
    assert est.available_budget == pytest.approx(30000 - 2100 - est.tax.final_tax - est.registration_fee)
    with pytest.raises(ValidationError):
        est.price = 1


def test_cap_is_left_out_of_solver_loop(make_input):
    res = calculate(make_input(gross=20000, savings=200000))
    priced_at = res.available_budget + min(res.loan.max_loan_by_ltv, res.loan.max_loan_by_dsr)
    assert res.rationale.binding_constraint == BindingConstraint.REGULATORY_CAP
    assert res.purchase_power.with_mortgage < priced_at
    assert res.acquisition_tax.base_tax > 0
