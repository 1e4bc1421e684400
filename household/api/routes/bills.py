import calendar
import logging
from datetime import date
from typing import Optional

from dateutil.relativedelta import relativedelta
from fastapi import APIRouter, Depends, HTTPException, Query, Response

from household.api.security import get_current_user
from household.domain.Bill import Bill
from household.infra.Bill_Repository import BillRepository, BillPaymentRepository
from household.infra.pdf_utils import generate_bills_pdf
from household.logic.bills.occurrences import (
    generate_bill_occurrences,
    get_bill_occurrences_for_month,
    get_bill_occurrences_in_range,
    occurrence_id,
    summarise_occurrences,
)
from household.utilities.validators import BillInput, BillPaymentInput

router = APIRouter(prefix="/api/bills", tags=["bills"])
logger = logging.getLogger(__name__)


def get_bill_repository() -> BillRepository:
    return BillRepository()


def get_payment_repository() -> BillPaymentRepository:
    return BillPaymentRepository()


def _bill_row(payload: BillInput) -> dict:
    return Bill(**payload.model_dump()).to_dict()


def _month_bounds(year: int, month: int):
    first = date(year, month, 1)
    return first, first + relativedelta(day=31)


@router.get("")
def list_bills(user: dict = Depends(get_current_user), repo: BillRepository = Depends(get_bill_repository)):
    bills = repo.list_bills(user["id"])
    return {"bills": [b.to_dict() for b in bills], "count": len(bills)}


@router.post("", status_code=201)
def create_bill(payload: BillInput, user: dict = Depends(get_current_user),
                repo: BillRepository = Depends(get_bill_repository)):
    row = _bill_row(payload)
    row.pop("id")
    return repo.insert(row, user["id"])


@router.get("/occurrences")
def bill_occurrences(year: Optional[int] = Query(None, ge=2000, le=2100), month: Optional[int] = Query(None, ge=1, le=12),
                     start: Optional[date] = None, end: Optional[date] = None,
                     user: dict = Depends(get_current_user), repo: BillRepository = Depends(get_bill_repository),
                     payments: BillPaymentRepository = Depends(get_payment_repository)):
    """Occurrences for a month (year+month) or an explicit start/end range, defaulting to this month."""
    today = date.today()
    if start is None and end is None:
        start, end = _month_bounds(year or today.year, month or today.month)
    elif start is None or end is None:
        raise HTTPException(status_code=400, detail="start and end must be given together")
    elif end < start:
        raise HTTPException(status_code=400, detail="end is before start")

    bills = repo.list_bills(user["id"])
    paid = payments.paid_occurrence_ids(user["id"])
    occurrences = get_bill_occurrences_in_range(bills, start, end, today=today, paid_ids=paid)
    return {
        "start": start.isoformat(),
        "end": end.isoformat(),
        "occurrences": occurrences,
        "summary": summarise_occurrences(occurrences),
    }


@router.get("/export")
def export_bills_pdf(year: int = Query(..., ge=2000, le=2100), month: int = Query(..., ge=1, le=12),
                     user: dict = Depends(get_current_user), repo: BillRepository = Depends(get_bill_repository),
                     payments: BillPaymentRepository = Depends(get_payment_repository)):
    bills = repo.list_bills(user["id"])
    occurrences = get_bill_occurrences_for_month(bills, year, month, today=date.today(),
                                                 paid_ids=payments.paid_occurrence_ids(user["id"]))
    title = f"Bills – {calendar.month_name[month]} {year}"
    pdf_bytes = generate_bills_pdf(title, occurrences, summarise_occurrences(occurrences))
    filename = f"bills_{year}_{month:02d}.pdf"
    return Response(content=pdf_bytes, media_type="application/pdf",
                    headers={"Content-Disposition": f'attachment; filename="{filename}"'})


@router.get("/{bill_id}")
def get_bill(bill_id: str, user: dict = Depends(get_current_user), repo: BillRepository = Depends(get_bill_repository)):
    bill = repo.get_bill(bill_id, user["id"])
    if bill is None:
        raise HTTPException(status_code=404, detail="Bill not found")
    return bill.to_dict()


@router.put("/{bill_id}")
def update_bill(bill_id: str, payload: BillInput, user: dict = Depends(get_current_user),
                repo: BillRepository = Depends(get_bill_repository)):
    updated = repo.update(bill_id, _bill_row(payload), user["id"])
    if updated is None:
        raise HTTPException(status_code=404, detail="Bill not found")
    return updated


@router.delete("/{bill_id}")
def delete_bill(bill_id: str, user: dict = Depends(get_current_user), repo: BillRepository = Depends(get_bill_repository)):
    if not repo.delete(bill_id, user["id"]):
        raise HTTPException(status_code=404, detail="Bill not found")
    return {"status": "deleted", "id": bill_id}


@router.post("/{bill_id}/payments")
def mark_bill_paid(bill_id: str, payload: BillPaymentInput, user: dict = Depends(get_current_user),
                   repo: BillRepository = Depends(get_bill_repository),
                   payments: BillPaymentRepository = Depends(get_payment_repository)):
    """Mark the occurrence due on payload.due_date as paid."""
    bill = repo.get_bill(bill_id, user["id"])
    if bill is None:
        raise HTTPException(status_code=404, detail="Bill not found")
    if not generate_bill_occurrences(bill, payload.due_date, payload.due_date):
        raise HTTPException(status_code=400, detail="due_date is not an occurrence of this bill")
    amount = bill.amount if payload.amount is None else payload.amount
    row = payments.mark_paid(user["id"], occurrence_id(bill.id, payload.due_date), bill.id, amount)
    logger.info("Bill %s marked paid for %s", bill.id, payload.due_date)
    return row
