import logging
from datetime import date
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query

from household.api.security import get_current_user, get_http_client
from household.domain.Investment import InvestmentAccount, InvestmentTransaction, InvestmentValuation
from household.infra.Investment_Repository import (
    InvestmentAccountRepository,
    InvestmentTransactionRepository,
    InvestmentValuationRepository,
)
from household.infra.yahoo_finance import YahooFinanceClient
from household.logic.investments.valuation import (
    RISK_PRESETS,
    calculate_contribution_total,
    calculate_daily_change,
    calculate_daily_values,
    calculate_net_deposits,
    calculate_projection_scenarios,
    calculate_return,
    convert_quote_currency,
    generate_projection_data,
)
from household.utilities.validators import (
    InvestmentAccountInput,
    TransactionInput,
    ValuationInput,
    ProjectionInput,
    QuoteRequest,
)

router = APIRouter(prefix="/api/investments", tags=["investments"])
logger = logging.getLogger(__name__)


def get_account_repository() -> InvestmentAccountRepository:
    return InvestmentAccountRepository()


def get_transaction_repository() -> InvestmentTransactionRepository:
    return InvestmentTransactionRepository()


def get_valuation_repository() -> InvestmentValuationRepository:
    return InvestmentValuationRepository()


def get_quote_client(http: httpx.AsyncClient = Depends(get_http_client)) -> YahooFinanceClient:
    return YahooFinanceClient(http)


def _require_account(repo: InvestmentAccountRepository, account_id: str, user_id: str) -> InvestmentAccount:
    account = repo.get_account(account_id, user_id)
    if account is None:
        raise HTTPException(status_code=404, detail="Investment account not found")
    return account


@router.get("/accounts")
def list_accounts(user: dict = Depends(get_current_user), repo: InvestmentAccountRepository = Depends(get_account_repository)):
    return {"accounts": repo.list(user["id"])}


@router.post("/accounts", status_code=201)
def create_account(payload: InvestmentAccountInput, user: dict = Depends(get_current_user),
                   repo: InvestmentAccountRepository = Depends(get_account_repository)):
    row = InvestmentAccount(**payload.model_dump()).to_dict()
    row.pop("id")
    return repo.insert(row, user["id"])


@router.get("/{account_id}/transactions")
def list_transactions(account_id: str, user: dict = Depends(get_current_user),
                      accounts: InvestmentAccountRepository = Depends(get_account_repository),
                      repo: InvestmentTransactionRepository = Depends(get_transaction_repository)):
    _require_account(accounts, account_id, user["id"])
    txs = sorted(repo.for_account(account_id, user["id"]), key=lambda t: t.transaction_date)
    return {
        "transactions": [t.to_dict() for t in txs],
        "contribution_total": calculate_contribution_total(txs),
        "net_deposits": calculate_net_deposits(txs),
    }


@router.post("/{account_id}/transactions", status_code=201)
def add_transaction(account_id: str, payload: TransactionInput, user: dict = Depends(get_current_user),
                    accounts: InvestmentAccountRepository = Depends(get_account_repository),
                    repo: InvestmentTransactionRepository = Depends(get_transaction_repository)):
    _require_account(accounts, account_id, user["id"])
    tx = InvestmentTransaction(payload.transaction_date, payload.type, payload.amount)
    row = dict(tx.to_dict(), investment_account_id=account_id)
    row.pop("id")
    return repo.insert(row, user["id"])


@router.get("/{account_id}/valuations")
def list_valuations(account_id: str, user: dict = Depends(get_current_user),
                    accounts: InvestmentAccountRepository = Depends(get_account_repository),
                    repo: InvestmentValuationRepository = Depends(get_valuation_repository)):
    _require_account(accounts, account_id, user["id"])
    vals = sorted(repo.for_account(account_id, user["id"]), key=lambda v: v.valuation_date)
    return {"valuations": [v.to_dict() for v in vals]}


@router.post("/{account_id}/valuations")
def record_valuation(account_id: str, payload: ValuationInput, user: dict = Depends(get_current_user),
                     accounts: InvestmentAccountRepository = Depends(get_account_repository),
                     repo: InvestmentValuationRepository = Depends(get_valuation_repository)):
    _require_account(accounts, account_id, user["id"])
    valuation = InvestmentValuation(payload.valuation_date, payload.value, "manual")
    return repo.upsert_valuation(account_id, user["id"], valuation)


@router.get("/{account_id}/daily-values")
def daily_values(account_id: str, start: Optional[date] = None, end: Optional[date] = None,
                 annual_return: Optional[float] = Query(None, ge=-50, le=50),
                 user: dict = Depends(get_current_user),
                 accounts: InvestmentAccountRepository = Depends(get_account_repository),
                 txs: InvestmentTransactionRepository = Depends(get_transaction_repository),
                 vals: InvestmentValuationRepository = Depends(get_valuation_repository)):
    """Daily estimated values between start (default: first transaction) and end (default: today)."""
    account = _require_account(accounts, account_id, user["id"])
    transactions = txs.for_account(account_id, user["id"])
    valuations = vals.for_account(account_id, user["id"])
    end = end or date.today()
    if start is None:
        first = [t.transaction_date for t in transactions] + [v.valuation_date for v in valuations]
        start = account.start_date or (min(first) if first else end)
    if end < start:
        raise HTTPException(status_code=400, detail="end is before start")
    rate = account.expected_annual_return if annual_return is None else annual_return

    values = calculate_daily_values(transactions, valuations, start, end, rate)
    latest = values[-1] if values else {"value": 0.0, "contributions": 0.0}
    return {
        "values": values,
        "current_value": latest["value"],
        "return_percent": calculate_return(latest["value"], latest["contributions"]),
        "daily_change": calculate_daily_change(latest["value"], rate),
    }


@router.post("/projection")
def projection(payload: ProjectionInput):
    if payload.expected_annual_return is not None:
        rate = payload.expected_annual_return
    elif payload.risk_preset is not None:
        rate = RISK_PRESETS[payload.risk_preset]
    else:
        rate = RISK_PRESETS["medium"]
    return {
        "annual_return": rate,
        "scenarios": calculate_projection_scenarios(payload.current_value, payload.monthly_contribution,
                                                    rate, payload.months),
        "series": generate_projection_data(payload.current_value, payload.monthly_contribution, rate, payload.months),
    }


@router.post("/quote")
async def fetch_quote(payload: QuoteRequest, user: dict = Depends(get_current_user),
                      client: YahooFinanceClient = Depends(get_quote_client),
                      accounts: InvestmentAccountRepository = Depends(get_account_repository),
                      repo: InvestmentValuationRepository = Depends(get_valuation_repository)):
    """Fetch the latest close for a ticker, convert pence to pounds and store it as a live valuation."""
    if not payload.ticker or not payload.investment_account_id:
        raise HTTPException(status_code=400, detail="ticker and investment_account_id required")
    _require_account(accounts, payload.investment_account_id, user["id"])
    try:
        quote = await client.fetch_quote(payload.ticker)
    except Exception as e:
        logger.error("Error fetching price for %s: %s", payload.ticker, e)
        raise HTTPException(status_code=500, detail=str(e))

    price = convert_quote_currency(quote["price"], quote["currency"])
    previous = quote["previous_close"]
    if previous:
        previous = convert_quote_currency(previous, quote["currency"])

    repo.upsert_valuation(payload.investment_account_id, user["id"],
                          InvestmentValuation(quote["date"], price, "live"))

    daily_change = None
    if previous:
        daily_change = {"amount": price - previous, "percentage": (price - previous) / previous * 100}
    return {
        "ticker": payload.ticker,
        "price": price,
        "previousClose": previous,
        "date": quote["date"].isoformat(),
        "currency": "GBP",
        "dailyChange": daily_change,
    }
