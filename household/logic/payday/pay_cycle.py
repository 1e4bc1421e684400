"""Pay cycle date arithmetic.

A pay cycle runs from one (adjusted) payday up to the day before the next
one. Paydays are configured as a day of month plus an adjustment rule that
applies when the nominal date is a weekend or bank holiday.
"""
from datetime import date, timedelta
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from household.logic.payday.working_days import (
    is_working_day,
    get_previous_working_day,
    get_next_working_day,
    get_closest_working_day,
)
from household.utilities.constants import DEFAULT_PAYDAY_DATE, DEFAULT_ADJUSTMENT_RULE, ISO_DATE

ADJUSTMENT_RULES = ("previous_working_day", "next_working_day", "closest_working_day", "no_adjustment")


class PaydaySettings:
    def __init__(self, payday_date: int = DEFAULT_PAYDAY_DATE, adjustment_rule: str = DEFAULT_ADJUSTMENT_RULE):
        if not 1 <= int(payday_date) <= 31:
            raise ValueError("payday_date must be between 1 and 31")
        if adjustment_rule not in ADJUSTMENT_RULES:
            raise ValueError(f"Unknown adjustment rule: {adjustment_rule}")
        self.payday_date = int(payday_date)
        self.adjustment_rule = adjustment_rule

    def __repr__(self) -> str:
        return f"PaydaySettings({self.payday_date}, {self.adjustment_rule!r})"


DEFAULT_SETTINGS = PaydaySettings()


class PayCycle:
    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end

    def __eq__(self, other) -> bool:
        return isinstance(other, PayCycle) and (self.start, self.end) == (other.start, other.end)

    def __repr__(self) -> str:
        return f"PayCycle({self.start.isoformat()} -> {self.end.isoformat()})"

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def to_dict(self):
        return {
            "start": self.start.strftime(ISO_DATE),
            "end": self.end.strftime(ISO_DATE),
            "length_days": pay_cycle_length_days(self),
            "label": format_pay_cycle_label(self),
        }


def get_payday(year: int, month: int, settings: Optional[PaydaySettings] = None) -> date:
    """Actual payday for a month: day clamped to month length, then shifted per rule."""
    settings = settings or DEFAULT_SETTINGS
    nominal = date(year, month, 1) + relativedelta(day=settings.payday_date)
    rule = settings.adjustment_rule
    if rule == "no_adjustment" or is_working_day(nominal):
        return nominal
    if rule == "next_working_day":
        return get_next_working_day(nominal)
    if rule == "closest_working_day":
        return get_closest_working_day(nominal)
    return get_previous_working_day(nominal)


def _paydays_around(d: date, settings: PaydaySettings, before: int = 2, after: int = 2) -> List[date]:
    out = []
    first = d.replace(day=1)
    for delta in range(-before, after + 1):
        month = first + relativedelta(months=delta)
        out.append(get_payday(month.year, month.month, settings))
    return out


def get_next_payday(d: date, settings: Optional[PaydaySettings] = None) -> date:
    """First payday on or after d."""
    settings = settings or DEFAULT_SETTINGS
    return min(p for p in _paydays_around(d, settings) if p >= d)


def get_previous_payday(d: date, settings: Optional[PaydaySettings] = None) -> date:
    """Last payday strictly before d."""
    settings = settings or DEFAULT_SETTINGS
    return max(p for p in _paydays_around(d, settings) if p < d)


def get_pay_cycle_for_date(d: date, settings: Optional[PaydaySettings] = None) -> PayCycle:
    """Cycle containing d: latest payday <= d up to the day before the following payday."""
    settings = settings or DEFAULT_SETTINGS
    start = get_previous_payday(d + timedelta(days=1), settings)
    following = get_next_payday(start + timedelta(days=1), settings)
    return PayCycle(start, following - timedelta(days=1))


def get_next_pay_cycle(cycle: PayCycle, settings: Optional[PaydaySettings] = None) -> PayCycle:
    return get_pay_cycle_for_date(cycle.end + timedelta(days=1), settings)


def get_prev_pay_cycle(cycle: PayCycle, settings: Optional[PaydaySettings] = None) -> PayCycle:
    return get_pay_cycle_for_date(cycle.start - timedelta(days=1), settings)


def get_paydays_in_range(start: date, end: date, settings: Optional[PaydaySettings] = None) -> List[date]:
    settings = settings or DEFAULT_SETTINGS
    paydays = []
    month = start.replace(day=1) - relativedelta(months=1)
    while month <= end:
        p = get_payday(month.year, month.month, settings)
        if start <= p <= end:
            paydays.append(p)
        month += relativedelta(months=1)
    return paydays


def get_days_until_payday(d: date, settings: Optional[PaydaySettings] = None) -> int:
    return (get_next_payday(d, settings) - d).days


def pay_cycle_length_days(cycle: PayCycle) -> int:
    return (cycle.end - cycle.start).days + 1


def pay_cycle_spend(daily_cost: float, cycle: PayCycle) -> float:
    """Projected spend over a cycle for a steady daily cost."""
    return round(daily_cost * pay_cycle_length_days(cycle), 2)


def format_pay_cycle_label(cycle: PayCycle) -> str:
    return f"{cycle.start.day} {cycle.start:%b} → {cycle.end.day} {cycle.end:%b %Y}"


def format_pay_cycle_label_short(cycle: PayCycle) -> str:
    return f"{cycle.start.day} {cycle.start:%b} – {cycle.end.day} {cycle.end:%b}"


__all__ = [
    'ADJUSTMENT_RULES', 'PaydaySettings', 'PayCycle', 'DEFAULT_SETTINGS', 'get_payday',
    'get_next_payday', 'get_previous_payday', 'get_pay_cycle_for_date', 'get_next_pay_cycle',
    'get_prev_pay_cycle', 'get_paydays_in_range', 'get_days_until_payday', 'pay_cycle_length_days',
    'pay_cycle_spend', 'format_pay_cycle_label', 'format_pay_cycle_label_short',
]
