"""Bill persistence (bills table plus paid occurrence markers)."""
from typing import List, Optional, Set

from household.domain.Bill import Bill
from household.infra.Table_Repository import TableRepository


class BillRepository(TableRepository):
    table = "bills"

    def list_bills(self, user_id: str, active_only: bool = False) -> List[Bill]:
        bills = [Bill.from_dict(r) for r in self.list(user_id)]
        if active_only:
            bills = [b for b in bills if b.is_active]
        return bills

    def get_bill(self, bill_id: str, user_id: str) -> Optional[Bill]:
        row = self.get(bill_id, user_id)
        return Bill.from_dict(row) if row else None


class BillPaymentRepository(TableRepository):
    table = "bill_payments"

    def paid_occurrence_ids(self, user_id: str) -> Set[str]:
        return {r["occurrence_id"] for r in self.list(user_id) if r.get("occurrence_id")}

    def mark_paid(self, user_id: str, occurrence_id: str, bill_id: str, amount: float):
        return self.upsert({"occurrence_id": occurrence_id, "bill_id": bill_id, "amount": amount,
                            "user_id": user_id}, keys=("user_id", "occurrence_id"), user_id=user_id)
