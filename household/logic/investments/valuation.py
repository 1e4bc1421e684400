"""Investment valuation and projection.

Daily values compound a running balance with the daily equivalent of the
expected annual return, applying ledger transactions on their calendar date.
A recorded valuation on a date replaces the running value from that day on.
Projections compound monthly with a fixed contribution.
"""
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Any

from dateutil.relativedelta import relativedelta

from household.domain.Investment import InvestmentTransaction, InvestmentValuation
from household.utilities.constants import RISK_PRESETS, CONSERVATIVE_OFFSET, AGGRESSIVE_OFFSET, ISO_DATE


def get_daily_rate(annual_return: float) -> float:
    return (1 + annual_return / 100) ** (1 / 365) - 1


def get_monthly_rate(annual_return: float) -> float:
    return (1 + annual_return / 100) ** (1 / 12) - 1


def calculate_contribution_total(transactions: Iterable[InvestmentTransaction]) -> float:
    """Deposits and dividends minus withdrawals and fees."""
    total = 0.0
    for tx in transactions:
        if tx.type in ("deposit", "dividend"):
            total += tx.amount
        else:
            total -= tx.amount
    return total


def calculate_net_deposits(transactions: Iterable[InvestmentTransaction]) -> float:
    total = 0.0
    for tx in transactions:
        if tx.type == "deposit":
            total += tx.amount
        elif tx.type == "withdrawal":
            total -= tx.amount
    return total


def calculate_daily_values(transactions: Iterable[InvestmentTransaction], valuations: Iterable[InvestmentValuation],
                           start: date, end: date, annual_return: float) -> List[Dict[str, Any]]:
    """One row per day from start to end inclusive.

    Each day applies that day's transactions (any dated before start are
    applied on the first day), grows a positive balance by one day, then lets
    a recorded valuation override it. Fees reduce value but not contributions.
    """
    daily_rate = get_daily_rate(annual_return)
    pending = sorted(transactions, key=lambda t: t.transaction_date)
    recorded = {v.valuation_date: v.value for v in valuations}

    rows = []
    value = 0.0
    contributions = 0.0
    idx = 0
    day = start
    while day <= end:
        while idx < len(pending) and pending[idx].transaction_date <= day:
            tx = pending[idx]
            if tx.type in ("deposit", "dividend"):
                value += tx.amount
                contributions += tx.amount
            else:
                value -= tx.amount
                if tx.type == "withdrawal":
                    contributions -= tx.amount
            idx += 1

        if value > 0:
            value *= 1 + daily_rate

        source = "estimated"
        if day in recorded:
            value = recorded[day]
            source = "manual"

        rows.append({
            "date": day.strftime(ISO_DATE),
            "value": max(0.0, value),
            "source": source,
            "contributions": contributions,
            "growth": value - contributions,
        })
        day += timedelta(days=1)
    return rows


def calculate_projection(current_value: float, monthly_contribution: float, annual_return: float, months: int) -> float:
    rate = get_monthly_rate(annual_return)
    value = current_value
    for _ in range(months):
        value += monthly_contribution
        value *= 1 + rate
    return value


def calculate_projection_scenarios(current_value: float, monthly_contribution: float, annual_return: float,
                                   months: int) -> Dict[str, float]:
    return {
        "expected": calculate_projection(current_value, monthly_contribution, annual_return, months),
        "conservative": calculate_projection(current_value, monthly_contribution,
                                             annual_return + CONSERVATIVE_OFFSET, months),
        "aggressive": calculate_projection(current_value, monthly_contribution,
                                           annual_return + AGGRESSIVE_OFFSET, months),
    }


def generate_projection_data(current_value: float, monthly_contribution: float, annual_return: float,
                             months_ahead: int, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Month-by-month chart series starting at today's value."""
    today = today or date.today()
    rate = get_monthly_rate(annual_return)
    value = current_value
    data = []
    for i in range(months_ahead + 1):
        if i > 0:
            value += monthly_contribution
            value *= 1 + rate
        data.append({"date": (today + relativedelta(months=i)).strftime(ISO_DATE), "value": round(value, 2)})
    return data


def calculate_return(current_value: float, total_contributions: float) -> float:
    """Percentage gain over contributions (0 when nothing was contributed)."""
    if total_contributions <= 0:
        return 0.0
    return (current_value - total_contributions) / total_contributions * 100


def calculate_daily_change(current_value: float, annual_return: float) -> Dict[str, float]:
    rate = get_daily_rate(annual_return)
    previous = current_value / (1 + rate)
    return {"amount": current_value - previous, "percentage": rate * 100}


def convert_quote_currency(price: float, currency: Optional[str]) -> float:
    """Quotes in pence (GBp) become pounds."""
    if currency == "GBp":
        return price / 100
    return price


__all__ = [
    'RISK_PRESETS', 'get_daily_rate', 'get_monthly_rate', 'calculate_contribution_total',
    'calculate_net_deposits', 'calculate_daily_values', 'calculate_projection',
    'calculate_projection_scenarios', 'generate_projection_data', 'calculate_return',
    'calculate_daily_change', 'convert_quote_currency',
]
