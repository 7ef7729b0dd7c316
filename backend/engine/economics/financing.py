"""Financing estimates: loan amortization and power purchase agreements.

Used by cost optimization to turn an over-budget system into monthly
payments the buyer can compare.  Figures are indicative only; no taxes,
fees or incentives are modelled.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


MONTHS_PER_YEAR = 12


def annuity_payment(principal: float, rate_per_period: float, periods: int) -> float:
    """Level payment that retires ``principal`` over ``periods``.

    P = L * r * (1 + r)^n / ((1 + r)^n - 1), or L / n when r == 0.
    """
    if periods <= 0 or principal <= 0:
        return 0.0
    if rate_per_period <= 0:
        return principal / periods
    growth = (1 + rate_per_period) ** periods
    return principal * rate_per_period * growth / (growth - 1)


def loan_amortization(
    principal: float,
    interest_rate: float,
    loan_term: int,
    periods_per_year: int = 1,
) -> list[dict[str, float]]:
    """Generate a loan amortization schedule.

    ``interest_rate`` is the nominal annual rate and ``loan_term`` is in
    years; with ``periods_per_year=12`` the schedule is monthly.

    Returns a list of dicts with keys: period, payment, principal_payment,
    interest_payment, remaining_balance.
    """
    if loan_term <= 0 or principal <= 0:
        return []

    n = loan_term * periods_per_year
    r = max(interest_rate, 0.0) / periods_per_year
    payment = annuity_payment(principal, r, n)

    schedule = []
    balance = principal
    for period in range(1, n + 1):
        interest = balance * r
        principal_pmt = payment - interest
        balance -= principal_pmt
        schedule.append({
            "period": period,
            "payment": round(payment, 2),
            "principal_payment": round(principal_pmt, 2),
            "interest_payment": round(interest, 2),
            "remaining_balance": round(max(balance, 0.0), 2),
        })

    return schedule


# ---------------------------------------------------------------------------
# Financing offers
# ---------------------------------------------------------------------------
@dataclass
class FinancingOption:
    type: str                     # "solar_loan" | "ppa"
    description: str
    down_payment: float
    monthly_payment: float
    term_years: int
    total_cost: float
    interest_rate: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "down_payment": self.down_payment,
            "monthly_payment": self.monthly_payment,
            "term_years": self.term_years,
            "total_cost": self.total_cost,
            "interest_rate": self.interest_rate,
        }


def solar_loan(
    system_cost: float,
    down_payment: float,
    interest_rate: float,
    term_years: int,
) -> FinancingOption:
    """Amortized loan on the part of ``system_cost`` not paid up front."""
    down = min(max(down_payment, 0.0), system_cost)
    schedule = loan_amortization(system_cost - down, interest_rate, term_years, MONTHS_PER_YEAR)
    monthly = schedule[0]["payment"] if schedule else 0.0
    total = down + sum(e["payment"] for e in schedule)
    return FinancingOption(
        type="solar_loan",
        description=f"{term_years}-year solar loan at {interest_rate * 100:.2f}% APR",
        down_payment=round(down, 2),
        monthly_payment=round(monthly, 2),
        term_years=term_years,
        total_cost=round(total, 2),
        interest_rate=interest_rate,
    )


def power_purchase_agreement(
    system_size_kw: float,
    rate_per_kw_year: float,
    term_years: int = 20,
) -> FinancingOption:
    """Third-party owned system billed at a flat rate per installed kW."""
    annual = system_size_kw * rate_per_kw_year
    return FinancingOption(
        type="ppa",
        description="Power purchase agreement with no upfront cost",
        down_payment=0.0,
        monthly_payment=round(annual / MONTHS_PER_YEAR, 2),
        term_years=term_years,
        total_cost=round(annual * term_years, 2),
    )
