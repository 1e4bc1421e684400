"""Investment persistence: accounts, ledger transactions and valuations."""
from typing import List, Optional

from household.domain.Investment import InvestmentAccount, InvestmentTransaction, InvestmentValuation
from household.infra.Table_Repository import TableRepository, Row


class InvestmentAccountRepository(TableRepository):
    table = "investment_accounts"

    def get_account(self, account_id: str, user_id: str) -> Optional[InvestmentAccount]:
        row = self.get(account_id, user_id)
        return InvestmentAccount.from_dict(row) if row else None


class InvestmentTransactionRepository(TableRepository):
    table = "investment_transactions"

    def for_account(self, account_id: str, user_id: str) -> List[InvestmentTransaction]:
        rows = self.list(user_id, investment_account_id=account_id)
        return [InvestmentTransaction.from_dict(r) for r in rows]


class InvestmentValuationRepository(TableRepository):
    table = "investment_valuations"

    def for_account(self, account_id: str, user_id: str) -> List[InvestmentValuation]:
        rows = self.list(user_id, investment_account_id=account_id)
        return [InvestmentValuation.from_dict(r) for r in rows]

    def upsert_valuation(self, account_id: str, user_id: str, valuation: InvestmentValuation) -> Row:
        row = dict(valuation.to_dict(), investment_account_id=account_id, user_id=user_id)
        return self.upsert(row, keys=("investment_account_id", "valuation_date"), user_id=user_id)
