"""Bill occurrence projection.

Expands recurring bills into dated occurrences inside an inclusive range.
Weekly and fortnightly bills step from their start date; month-based
frequencies step whole months from the start month and use the due day
clamped to the month length (a due day of 31 lands on 28/29 Feb, 30 Apr...).
"""
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Any

from dateutil.relativedelta import relativedelta

from household.domain.Bill import Bill
from household.utilities.constants import DEFAULT_BILL_START, ISO_DATE

DAY_STEPS = {"weekly": 7, "fortnightly": 14}
MONTH_STEPS = {"monthly": 1, "quarterly": 3, "biannual": 6, "yearly": 12}


def occurrence_id(bill_id: str, due: date) -> str:
    return f"{bill_id}-{due.strftime(ISO_DATE)}"


def _occurrence(bill: Bill, due: date, today: Optional[date], paid_ids) -> Dict[str, Any]:
    oid = occurrence_id(bill.id, due)
    if oid in paid_ids:
        status = "paid"
    elif today is not None and due < today:
        status = "overdue"
    else:
        status = "due"
    return {
        "id": oid,
        "bill_id": bill.id,
        "bill_name": bill.name,
        "category": bill.category,
        "due_date": due,
        "expected_amount": bill.amount,
        "status": status,
    }


def _day_stepped(start: date, step: int, range_start: date, range_end: date) -> List[date]:
    cur = start
    if cur < range_start:
        skip = (range_start - cur).days // step
        cur += timedelta(days=skip * step)
    out = []
    while cur <= range_end:
        if cur >= range_start:
            out.append(cur)
        cur += timedelta(days=step)
    return out


def _month_stepped(start: date, step: int, due_day: int, range_start: date, range_end: date) -> List[date]:
    month = start.replace(day=1)
    first = range_start.replace(day=1)
    if month < first:
        gap = relativedelta(first, month)
        month += relativedelta(months=(gap.years * 12 + gap.months) // step * step)
    out = []
    while month <= range_end:
        due = month + relativedelta(day=due_day)
        if range_start <= due <= range_end:
            out.append(due)
        month += relativedelta(months=step)
    return out


def generate_bill_occurrences(bill: Bill, range_start: date, range_end: date, *,
                              today: Optional[date] = None, paid_ids: Iterable[str] = ()) -> List[Dict[str, Any]]:
    """Occurrences of one bill within [range_start, range_end].

    Inactive bills produce nothing. Dates before the bill's start date or after
    its end date are skipped.
    """
    if not bill.is_active or range_end < range_start:
        return []
    start = bill.start_date or date.fromisoformat(DEFAULT_BILL_START)
    lo = max(range_start, start)
    hi = min(range_end, bill.end_date) if bill.end_date else range_end
    if hi < lo:
        return []

    if bill.frequency in DAY_STEPS:
        dates = _day_stepped(start, DAY_STEPS[bill.frequency], lo, hi)
    elif bill.frequency in MONTH_STEPS:
        dates = _month_stepped(start, MONTH_STEPS[bill.frequency], bill.due_day, lo, hi)
    else:
        raise ValueError(f"Unknown bill frequency: {bill.frequency}")

    paid = set(paid_ids)
    return [_occurrence(bill, d, today, paid) for d in dates]


def get_bill_occurrences_in_range(bills: Iterable[Bill], range_start: date, range_end: date, *,
                                  today: Optional[date] = None, paid_ids: Iterable[str] = ()) -> List[Dict[str, Any]]:
    paid = set(paid_ids)
    out = []
    for bill in bills:
        out.extend(generate_bill_occurrences(bill, range_start, range_end, today=today, paid_ids=paid))
    out.sort(key=lambda o: (o["due_date"], o["bill_name"]))
    return out


def get_bill_occurrences_for_month(bills: Iterable[Bill], year: int, month: int, *,
                                   today: Optional[date] = None, paid_ids: Iterable[str] = ()) -> List[Dict[str, Any]]:
    first = date(year, month, 1)
    last = first + relativedelta(day=31)
    return get_bill_occurrences_in_range(bills, first, last, today=today, paid_ids=paid_ids)


def summarise_occurrences(occurrences: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Totals for a list of occurrences, overall and per status."""
    by_status: Dict[str, float] = defaultdict(float)
    for o in occurrences:
        by_status[o["status"]] += o["expected_amount"]
    return {
        "count": len(occurrences),
        "total_expected": round(sum(o["expected_amount"] for o in occurrences), 2),
        "by_status": {k: round(v, 2) for k, v in by_status.items()},
    }


__all__ = [
    'occurrence_id', 'generate_bill_occurrences', 'get_bill_occurrences_in_range',
    'get_bill_occurrences_for_month', 'summarise_occurrences',
]
