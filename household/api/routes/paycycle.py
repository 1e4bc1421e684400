from datetime import date
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from household.logic.payday.pay_cycle import (
    PaydaySettings,
    format_pay_cycle_label,
    format_pay_cycle_label_short,
    get_days_until_payday,
    get_next_pay_cycle,
    get_next_payday,
    get_pay_cycle_for_date,
    get_prev_pay_cycle,
)
from household.utilities.constants import DEFAULT_ADJUSTMENT_RULE, DEFAULT_PAYDAY_DATE
from household.utilities.validators import AdjustmentRule

router = APIRouter(prefix="/api", tags=["pay-cycle"])


@router.get("/pay-cycle")
def pay_cycle(on: Optional[date] = Query(None, alias="date"),
              payday_date: int = Query(DEFAULT_PAYDAY_DATE, ge=1, le=31),
              adjustment_rule: AdjustmentRule = DEFAULT_ADJUSTMENT_RULE):
    """Pay cycle containing the given date (default today) with its neighbours."""
    try:
        settings = PaydaySettings(payday_date, adjustment_rule)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    on = on or date.today()
    cycle = get_pay_cycle_for_date(on, settings)
    return {
        "date": on.isoformat(),
        "cycle": cycle.to_dict(),
        "next": get_next_pay_cycle(cycle, settings).to_dict(),
        "prev": get_prev_pay_cycle(cycle, settings).to_dict(),
        "next_payday": get_next_payday(on, settings).isoformat(),
        "days_until_payday": get_days_until_payday(on, settings),
        "label": format_pay_cycle_label(cycle),
        "short_label": format_pay_cycle_label_short(cycle),
    }
