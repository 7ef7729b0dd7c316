"""Tests for loan and PPA financing estimates."""
import pytest
from engine.economics.financing import annuity_payment, loan_amortization, power_purchase_agreement, solar_loan


class TestAnnuityPayment:
    def test_zero_rate(self):
        assert annuity_payment(12000, 0.0, 12) == pytest.approx(1000)

    def test_known_value(self):
        # 100k at 5% over 10 years
        assert annuity_payment(100000, 0.05, 10) == pytest.approx(12950.46, abs=0.01)

    def test_degenerate(self):
        assert annuity_payment(0, 0.05, 10) == 0.0
        assert annuity_payment(1000, 0.05, 0) == 0.0


class TestLoanAmortization:
    def test_monthly_solar_loan_schedule(self):
        schedule = loan_amortization(26000, 0.0699, 10, periods_per_year=12)
        assert len(schedule) == 120
        assert [e["period"] for e in schedule[:3]] == [1, 2, 3]
        assert schedule[0]["interest_payment"] == pytest.approx(26000 * 0.0699 / 12, abs=0.01)
        assert schedule[-1]["remaining_balance"] == pytest.approx(0.0, abs=1.0)

    def test_principal_repaid_with_interest(self):
        schedule = loan_amortization(26000, 0.0699, 10, periods_per_year=12)
        repaid = sum(e["principal_payment"] for e in schedule)
        interest = sum(e["interest_payment"] for e in schedule)
        assert repaid == pytest.approx(26000, abs=1.0)
        assert interest > 0
        # interest share shrinks as the balance falls
        assert schedule[0]["interest_payment"] > schedule[-1]["interest_payment"]

    def test_annual_periods(self):
        schedule = loan_amortization(12000, 0.05, 3)
        assert len(schedule) == 3
        assert schedule[0]["payment"] == pytest.approx(annuity_payment(12000, 0.05, 3), abs=0.01)

    def test_interest_free(self):
        schedule = loan_amortization(6000, 0.0, 1, periods_per_year=12)
        assert {e["interest_payment"] for e in schedule} == {0.0}
        assert {e["payment"] for e in schedule} == {500.0}

    def test_nothing_to_amortize(self):
        assert loan_amortization(0, 0.0699, 10) == []
        assert loan_amortization(26000, 0.0699, 0) == []


class TestOffers:
    def test_solar_loan(self):
        loan = solar_loan(30000, 6000, 0.0699, 10)
        assert loan.down_payment == 6000
        assert loan.monthly_payment == pytest.approx(annuity_payment(24000, 0.0699 / 12, 120), abs=0.01)
        assert loan.total_cost > 30000

    def test_down_payment_capped_at_cost(self):
        loan = solar_loan(5000, 8000, 0.05, 5)
        assert loan.down_payment == 5000
        assert loan.monthly_payment == 0.0

    def test_ppa(self):
        ppa = power_purchase_agreement(10, 120, term_years=20)
        assert ppa.monthly_payment == pytest.approx(100.0)
        assert ppa.total_cost == pytest.approx(24000.0)
        assert ppa.to_dict()["interest_rate"] is None
