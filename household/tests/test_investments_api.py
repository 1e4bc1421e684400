from datetime import date

import httpx

from household.api.security import get_http_client
from household.api.api_run import app
from household.domain.Investment import InvestmentValuation
from household.infra.Investment_Repository import InvestmentValuationRepository
from household.tests.api_case import ApiTestCase, mock_http

CHART = {"chart": {"result": [{
    "meta": {"currency": "GBp", "regularMarketPrice": 10550},
    "timestamp": [1770681600, 1770768000],
    "indicators": {"quote": [{"close": [10000, 10550]}]},
}]}}


class TestInvestmentsAPI(ApiTestCase):

    def setUp(self):
        super().setUp()
        resp = self.client.post('/api/investments/accounts', json={"name": "ISA", "ticker": "VWRP.L",
                                                                   "expected_annual_return": 0},
                                headers=self.headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        self.account = resp.json()

    def _quote_handler(self, status=200, payload=None):
        def handler(request: httpx.Request):
            self.requests.append(request)
            return httpx.Response(status, json=payload if payload is not None else CHART)
        self.requests = []
        return handler

    def test_accounts_listed_per_user(self):
        self.assertEqual(len(self.client.get('/api/investments/accounts', headers=self.headers).json()['accounts']), 1)
        other = self.client.get('/api/investments/accounts', headers=self.other_user_headers()).json()
        self.assertEqual(other['accounts'], [])

    def test_transactions_and_daily_values(self):
        url = f"/api/investments/{self.account['id']}/transactions"
        self.client.post(url, json={"transaction_date": "2026-01-01", "type": "deposit", "amount": 1000},
                         headers=self.headers)
        self.client.post(url, json={"transaction_date": "2026-01-03", "type": "withdrawal", "amount": 100},
                         headers=self.headers)
        txs = self.client.get(url, headers=self.headers).json()
        self.assertEqual(len(txs['transactions']), 2)
        self.assertEqual(txs['net_deposits'], 900)

        resp = self.client.get(f"/api/investments/{self.account['id']}/daily-values",
                               params={'start': '2026-01-01', 'end': '2026-01-05'}, headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(len(data['values']), 5)
        self.assertEqual(data['current_value'], 900)
        self.assertEqual(data['return_percent'], 0)

    def test_daily_values_bad_range(self):
        resp = self.client.get(f"/api/investments/{self.account['id']}/daily-values",
                               params={'start': '2026-01-05', 'end': '2026-01-01'}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)

    def test_manual_valuation_upserts(self):
        url = f"/api/investments/{self.account['id']}/valuations"
        self.client.post(url, json={"valuation_date": "2026-01-02", "value": 1200}, headers=self.headers)
        self.client.post(url, json={"valuation_date": "2026-01-02", "value": 1250}, headers=self.headers)
        vals = self.client.get(url, headers=self.headers).json()['valuations']
        self.assertEqual(vals, [{"valuation_date": "2026-01-02", "value": 1250.0, "source": "manual"}])

    def test_unknown_account(self):
        resp = self.client.get('/api/investments/nope/transactions', headers=self.headers)
        self.assertEqual(resp.status_code, 404)

    def test_projection_presets(self):
        resp = self.client.post('/api/investments/projection', json={"current_value": 1000, "months": 12,
                                                                     "risk_preset": "aggressive"})
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data['annual_return'], 12.0)
        self.assertEqual(len(data['series']), 13)
        self.assertEqual(set(data['scenarios']), {"expected", "conservative", "aggressive"})

        resp = self.client.post('/api/investments/projection', json={"current_value": 1000, "months": 12})
        self.assertEqual(resp.json()['annual_return'], 8.0)

    def test_quote_converts_pence_and_stores_live_valuation(self):
        app.dependency_overrides[get_http_client] = mock_http(self._quote_handler())
        resp = self.client.post('/api/investments/quote',
                                json={"ticker": "VWRP.L", "investment_account_id": self.account['id']},
                                headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        data = resp.json()
        self.assertEqual(data['price'], 105.5)
        self.assertEqual(data['previousClose'], 100.0)
        self.assertEqual(data['currency'], 'GBP')
        self.assertEqual(data['date'], '2026-02-11')
        self.assertAlmostEqual(data['dailyChange']['amount'], 5.5)
        self.assertAlmostEqual(data['dailyChange']['percentage'], 5.5)

        self.assertEqual(self.requests[0].url.params['range'], '5d')
        vals = self.client.get(f"/api/investments/{self.account['id']}/valuations", headers=self.headers).json()
        self.assertEqual(vals['valuations'][0]['source'], 'live')
        self.assertEqual(vals['valuations'][0]['value'], 105.5)

    def test_quote_requires_auth_and_fields(self):
        resp = self.client.post('/api/investments/quote', json={"ticker": "VWRP.L", "investment_account_id": "x"})
        self.assertEqual(resp.status_code, 401)
        resp = self.client.post('/api/investments/quote', json={"ticker": "VWRP.L"}, headers=self.headers)
        self.assertEqual(resp.status_code, 400)

    def test_quote_for_another_users_account(self):
        url = f"/api/investments/{self.account['id']}/valuations"
        self.client.post(url, json={"valuation_date": "2026-02-11", "value": 5000}, headers=self.headers)
        app.dependency_overrides[get_http_client] = mock_http(self._quote_handler())
        resp = self.client.post('/api/investments/quote',
                                json={"ticker": "VWRP.L", "investment_account_id": self.account['id']},
                                headers=self.other_user_headers())
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.requests, [])
        vals = self.client.get(url, headers=self.headers).json()['valuations']
        self.assertEqual(vals, [{"valuation_date": "2026-02-11", "value": 5000.0, "source": "manual"}])

    def test_valuation_upsert_keeps_owner(self):
        repo = InvestmentValuationRepository()
        repo.upsert_valuation(self.account['id'], self.user['id'], InvestmentValuation(date(2026, 2, 11), 5000))
        repo.upsert_valuation(self.account['id'], 'someone-else', InvestmentValuation(date(2026, 2, 11), 1, "live"))
        mine = repo.list(self.user['id'])
        self.assertEqual([(r['value'], r['source']) for r in mine], [(5000, 'manual')])
        self.assertEqual(len(repo.list('someone-else')), 1)

    def test_quote_upstream_failure(self):
        app.dependency_overrides[get_http_client] = mock_http(self._quote_handler(status=404, payload={}))
        resp = self.client.post('/api/investments/quote',
                                json={"ticker": "NOPE", "investment_account_id": self.account['id']},
                                headers=self.headers)
        self.assertEqual(resp.status_code, 500)
        self.assertIn('404', resp.json()['detail'])
