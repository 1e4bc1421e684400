"""Investment domain entities: accounts, ledger transactions and valuations."""
from datetime import date
from typing import Optional

from household.utilities.constants import ISO_DATE

TRANSACTION_TYPES = ("deposit", "withdrawal", "fee", "dividend")
VALUATION_SOURCES = ("manual", "estimated", "live")


def _as_date(value) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not value:
        return None
    return date.fromisoformat(str(value)[:10])


class InvestmentAccount:
    def __init__(self, id: str = "", name: str = "", ticker: Optional[str] = None,
                 expected_annual_return: float = 8.0, monthly_contribution: float = 0.0,
                 start_date: Optional[date] = None, user_id: str = ""):
        self.id = id
        self.name = name
        self.ticker = ticker
        self.expected_annual_return = float(expected_annual_return)
        self.monthly_contribution = float(monthly_contribution)
        self.start_date = start_date
        self.user_id = user_id

    @staticmethod
    def from_dict(data):
        d = dict(data) if isinstance(data, dict) else {}
        allowed = {"id", "name", "ticker", "expected_annual_return", "monthly_contribution", "user_id"}
        filtered = {k: v for k, v in d.items() if k in allowed and v is not None}
        filtered["start_date"] = _as_date(d.get("start_date"))
        return InvestmentAccount(**filtered)

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "ticker": self.ticker,
            "expected_annual_return": self.expected_annual_return,
            "monthly_contribution": self.monthly_contribution,
            "start_date": self.start_date.strftime(ISO_DATE) if self.start_date else None,
        }


class InvestmentTransaction:
    def __init__(self, transaction_date: date, type: str, amount: float, id: str = ""):
        if type not in TRANSACTION_TYPES:
            raise ValueError(f"Unknown transaction type: {type}")
        self.id = id
        self.transaction_date = transaction_date
        self.type = type
        self.amount = abs(float(amount))

    @staticmethod
    def from_dict(data):
        return InvestmentTransaction(_as_date(data["transaction_date"]), data["type"],
                                     data.get("amount", 0), data.get("id", ""))

    def to_dict(self):
        return {
            "id": self.id,
            "transaction_date": self.transaction_date.strftime(ISO_DATE),
            "type": self.type,
            "amount": self.amount,
        }


class InvestmentValuation:
    def __init__(self, valuation_date: date, value: float, source: str = "manual"):
        self.valuation_date = valuation_date
        self.value = float(value)
        self.source = source

    @staticmethod
    def from_dict(data):
        return InvestmentValuation(_as_date(data["valuation_date"]), data.get("value", 0),
                                   data.get("source", "manual"))

    def to_dict(self):
        return {
            "valuation_date": self.valuation_date.strftime(ISO_DATE),
            "value": self.value,
            "source": self.source,
        }
