"""Financing estimates for recommended systems."""

from .financing import FinancingOption, loan_amortization, power_purchase_agreement, solar_loan

__all__ = ["FinancingOption", "loan_amortization", "power_purchase_agreement", "solar_loan"]
