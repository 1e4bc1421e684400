import unittest
from datetime import date, timedelta

from household.domain.Investment import InvestmentTransaction, InvestmentValuation
from household.infra.yahoo_finance import QuoteError, parse_chart
from household.logic.investments.valuation import (
    calculate_contribution_total,
    calculate_daily_change,
    calculate_daily_values,
    calculate_net_deposits,
    calculate_projection,
    calculate_projection_scenarios,
    calculate_return,
    convert_quote_currency,
    generate_projection_data,
    get_daily_rate,
    get_monthly_rate,
)

START = date(2026, 1, 1)


class TestRates(unittest.TestCase):

    def test_daily_and_monthly_rates_compound_to_annual(self):
        self.assertEqual(get_daily_rate(0), 0)
        self.assertAlmostEqual((1 + get_daily_rate(8)) ** 365, 1.08)
        self.assertAlmostEqual((1 + get_monthly_rate(8)) ** 12, 1.08)


class TestDailyValues(unittest.TestCase):

    def test_single_deposit_compounds_daily(self):
        rate = get_daily_rate(8)
        rows = calculate_daily_values([InvestmentTransaction(START, "deposit", 1000)], [], START,
                                      START + timedelta(days=9), 8)
        self.assertEqual(len(rows), 10)
        self.assertAlmostEqual(rows[0]["value"], 1000 * (1 + rate))
        self.assertAlmostEqual(rows[9]["value"], 1000 * (1 + rate) ** 10)
        self.assertEqual(rows[9]["contributions"], 1000)
        self.assertAlmostEqual(rows[9]["growth"], rows[9]["value"] - 1000)
        self.assertEqual(rows[0]["date"], "2026-01-01")
        self.assertEqual(rows[0]["source"], "estimated")

    def test_deposit_applied_on_its_date(self):
        rows = calculate_daily_values([InvestmentTransaction(START + timedelta(days=2), "deposit", 500)], [],
                                      START, START + timedelta(days=3), 0)
        self.assertEqual([r["value"] for r in rows], [0.0, 0.0, 500.0, 500.0])

    def test_transactions_before_start_land_on_first_day(self):
        rows = calculate_daily_values([InvestmentTransaction(START - timedelta(days=30), "deposit", 200)], [],
                                      START, START + timedelta(days=1), 0)
        self.assertEqual(rows[0]["value"], 200.0)
        self.assertEqual(rows[0]["contributions"], 200.0)

    def test_recorded_valuation_overrides(self):
        txs = [InvestmentTransaction(START, "deposit", 1000)]
        vals = [InvestmentValuation(START + timedelta(days=2), 1500)]
        rows = calculate_daily_values(txs, vals, START, START + timedelta(days=3), 0)
        self.assertEqual(rows[2]["value"], 1500)
        self.assertEqual(rows[2]["source"], "manual")
        self.assertEqual(rows[3]["value"], 1500)
        self.assertEqual(rows[3]["source"], "estimated")

    def test_fees_and_withdrawals(self):
        txs = [
            InvestmentTransaction(START, "deposit", 100),
            InvestmentTransaction(START, "fee", 5),
            InvestmentTransaction(START + timedelta(days=1), "withdrawal", 150),
        ]
        rows = calculate_daily_values(txs, [], START, START + timedelta(days=1), 0)
        self.assertEqual(rows[0]["value"], 95.0)
        self.assertEqual(rows[0]["contributions"], 100.0)
        # never reported below zero
        self.assertEqual(rows[1]["value"], 0.0)
        self.assertEqual(rows[1]["contributions"], -50.0)


class TestLedger(unittest.TestCase):

    def test_totals(self):
        txs = [
            InvestmentTransaction(START, "deposit", 1000),
            InvestmentTransaction(START, "dividend", 20),
            InvestmentTransaction(START, "fee", 5),
            InvestmentTransaction(START, "withdrawal", 100),
        ]
        self.assertEqual(calculate_contribution_total(txs), 915)
        self.assertEqual(calculate_net_deposits(txs), 900)

    def test_transaction_validation(self):
        with self.assertRaises(ValueError):
            InvestmentTransaction(START, "gift", 10)
        self.assertEqual(InvestmentTransaction(START, "fee", -5).amount, 5)


class TestProjection(unittest.TestCase):

    def test_zero_return(self):
        self.assertEqual(calculate_projection(1000, 0, 0, 12), 1000)
        self.assertEqual(calculate_projection(0, 100, 0, 12), 1200)

    def test_one_year_lump_sum(self):
        self.assertAlmostEqual(calculate_projection(1000, 0, 8, 12), 1080)

    def test_scenarios_ordered(self):
        s = calculate_projection_scenarios(1000, 100, 8, 60)
        self.assertLess(s["conservative"], s["expected"])
        self.assertLess(s["expected"], s["aggressive"])
        self.assertAlmostEqual(s["conservative"], calculate_projection(1000, 100, 5, 60))

    def test_projection_series(self):
        series = generate_projection_data(1000, 100, 0, 3, today=date(2026, 1, 31))
        self.assertEqual([p["date"] for p in series], ["2026-01-31", "2026-02-28", "2026-03-31", "2026-04-30"])
        self.assertEqual([p["value"] for p in series], [1000, 1100, 1200, 1300])

    def test_return_and_daily_change(self):
        self.assertAlmostEqual(calculate_return(1100, 1000), 10)
        self.assertEqual(calculate_return(500, 0), 0.0)
        change = calculate_daily_change(1000, 0)
        self.assertEqual(change, {"amount": 0.0, "percentage": 0.0})


class TestQuotes(unittest.TestCase):

    def test_pence_converted(self):
        self.assertAlmostEqual(convert_quote_currency(12345, "GBp"), 123.45)
        self.assertEqual(convert_quote_currency(123.45, "GBP"), 123.45)
        self.assertEqual(convert_quote_currency(10, "USD"), 10)

    def test_parse_chart_uses_latest_close(self):
        payload = {"chart": {"result": [{
            "meta": {"currency": "GBp", "regularMarketPrice": 999},
            "timestamp": [1770681600, 1770768000, 1770854400],
            "indicators": {"quote": [{"close": [100.0, 102.0, None]}]},
        }]}}
        quote = parse_chart(payload)
        self.assertEqual(quote["price"], 102.0)
        self.assertEqual(quote["previous_close"], 100.0)
        self.assertEqual(quote["date"], date(2026, 2, 11))
        self.assertEqual(quote["currency"], "GBp")

    def test_parse_chart_without_data(self):
        with self.assertRaises(QuoteError):
            parse_chart({"chart": {"result": []}})


if __name__ == "__main__":
    unittest.main()
