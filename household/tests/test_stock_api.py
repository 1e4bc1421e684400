from datetime import date, timedelta

from household.events import web_observers
from household.tests.api_case import ApiTestCase


class TestStockAPI(ApiTestCase):

    def setUp(self):
        super().setUp()
        web_observers.start()
        web_observers.clear()
        self.addCleanup(web_observers.clear)

    def _create(self, **overrides):
        body = {"name": "Shampoo", "kind": "toiletry", "category": "hair", "total_size": 500, "size_unit": "ml",
                "cost_per_item": 5.0, "usage_rate_per_day": 10, "current_remaining": 100, "retailer": "Boots"}
        body.update(overrides)
        resp = self.client.post('/api/stock/items', json=body, headers=self.headers)
        self.assertEqual(resp.status_code, 201, resp.text)
        return resp.json()

    def test_create_list_and_filter(self):
        self._create()
        self._create(name="Rice", kind="grocery", category="food", size_unit="g")
        self.assertEqual(self.client.get('/api/stock/items', headers=self.headers).json()['count'], 2)
        groceries = self.client.get('/api/stock/items', params={'kind': 'grocery'}, headers=self.headers).json()
        self.assertEqual([i['name'] for i in groceries['items']], ['Rice'])
        self.assertEqual(self.client.get('/api/stock/items', params={'kind': 'car'}, headers=self.headers).status_code, 422)

    def test_invalid_item(self):
        resp = self.client.post('/api/stock/items', json={"name": "X", "total_size": 0}, headers=self.headers)
        self.assertEqual(resp.status_code, 422)

    def test_usage_log_decrements_remaining(self):
        item = self._create()
        resp = self.client.post(f"/api/stock/items/{item['id']}/usage", json={"amount_used": 30}, headers=self.headers)
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()['item_id'], item['id'])
        after = self.client.get(f"/api/stock/items/{item['id']}", headers=self.headers).json()
        self.assertEqual(after['current_remaining'], 70.0)

        self.client.post(f"/api/stock/items/{item['id']}/usage", json={"amount_used": 500}, headers=self.headers)
        after = self.client.get(f"/api/stock/items/{item['id']}", headers=self.headers).json()
        self.assertEqual(after['current_remaining'], 0.0)

    def test_weight_readings(self):
        item = self._create(usage_rate_per_day=1)
        url = f"/api/stock/items/{item['id']}/weights"
        resp = self.client.post(url, json={"reading_type": "full", "weight": 600, "recorded_at": "2026-02-01"},
                                headers=self.headers)
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()['item']['full_weight'], 600)

        again = self.client.post(url, json={"reading_type": "full", "weight": 600}, headers=self.headers)
        self.assertEqual(again.status_code, 400)

        resp = self.client.post(url, json={"reading_type": "regular", "weight": 400, "recorded_at": "2026-02-11"},
                                headers=self.headers)
        usage = resp.json()['usage']
        self.assertEqual(usage['source'], 'weight_based')
        self.assertEqual(usage['usage_rate_per_day'], 20)
        self.assertEqual(resp.json()['item']['current_remaining'], 400)

        resp = self.client.post(url, json={"reading_type": "empty", "weight": 100, "recorded_at": "2026-02-20"},
                                headers=self.headers)
        self.assertEqual(resp.json()['item']['status'], 'out_of_stock')
        done = self.client.post(url, json={"reading_type": "regular", "weight": 90}, headers=self.headers)
        self.assertEqual(done.status_code, 400)
        readings = self.client.get(url, headers=self.headers).json()
        self.assertEqual(readings['count'], 3)
        self.assertEqual([(r['reading_type'], r['weight'], r['recorded_at']) for r in readings['readings']],
                         [("full", 600, "2026-02-01"), ("regular", 400, "2026-02-11"), ("empty", 100, "2026-02-20")])
        self.assertEqual(self.client.get(url, headers=self.other_user_headers()).status_code, 404)

    def test_weight_readings_listed_by_date(self):
        item = self._create(usage_rate_per_day=1)
        url = f"/api/stock/items/{item['id']}/weights"
        self.client.post(url, json={"reading_type": "full", "weight": 600, "recorded_at": "2026-02-01"},
                         headers=self.headers)
        self.client.post(url, json={"reading_type": "regular", "weight": 300, "recorded_at": "2026-02-15"},
                         headers=self.headers)
        # a reading entered late for an earlier day
        self.client.post(url, json={"reading_type": "regular", "weight": 450, "recorded_at": "2026-02-08"},
                         headers=self.headers)
        dates = [r['recorded_at'] for r in self.client.get(url, headers=self.headers).json()['readings']]
        self.assertEqual(dates, ["2026-02-01", "2026-02-08", "2026-02-15"])

    def test_retailer_profile_upsert(self):
        body = {"dispatch_days_min": 0, "dispatch_days_max": 1, "delivery_days_min": 1, "delivery_days_max": 2,
                "cutoff_time": "14:00"}
        self.client.put('/api/stock/retailers/Boots', json=body, headers=self.headers)
        body["delivery_days_max"] = 3
        resp = self.client.put('/api/stock/retailers/Boots', json=body, headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        profiles = self.client.get('/api/stock/retailers', headers=self.headers).json()['profiles']
        self.assertEqual(len(profiles), 1)
        self.assertEqual(profiles[0]['delivery_days_max'], 3)

        body["cutoff_time"] = "25:00"
        self.assertEqual(self.client.put('/api/stock/retailers/Boots', json=body, headers=self.headers).status_code, 422)

    def test_forecasts_and_reorder_alert(self):
        self.client.put('/api/stock/retailers/Boots', json={"dispatch_days_max": 1, "delivery_days_max": 2},
                        headers=self.headers)
        urgent = self._create(name="Toothpaste", current_remaining=20)  # two days left
        self._create(name="Soap", usage_rate_per_day=1, current_remaining=400, retailer="")
        self._create(name="Old", status="discontinued")

        resp = self.client.get('/api/stock/forecasts', headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        forecasts = {f['name']: f for f in data['forecasts']}
        self.assertEqual(set(forecasts), {"Toothpaste", "Soap"})
        self.assertEqual(forecasts['Toothpaste']['reorder_status'], 'overdue')
        self.assertEqual(forecasts['Toothpaste']['reorder_label'], 'Overdue')
        self.assertEqual(forecasts['Toothpaste']['run_out_date'], (date.today() + timedelta(days=2)).isoformat())
        self.assertEqual(forecasts['Soap']['reorder_status'], 'no_data')
        self.assertEqual(data['stats']['active_item_count'], 2)

        alerts = self.client.get('/api/alerts', headers=self.headers).json()
        self.assertEqual([e['item_id'] for e in alerts['events']], [urgent['id']])
        self.assertEqual(alerts['events'][0]['type'], 'stock.reorder_due')
        # alerts are private to the owner
        other = self.client.get('/api/alerts', headers=self.other_user_headers()).json()
        self.assertEqual(other['events'], [])

    def test_reorder_alert_published_once_per_state(self):
        self.client.put('/api/stock/retailers/Boots', json={"dispatch_days_max": 1, "delivery_days_max": 2},
                        headers=self.headers)
        item = self._create(name="Toothpaste", current_remaining=0)
        for _ in range(3):
            self.assertEqual(self.client.get('/api/stock/forecasts', headers=self.headers).status_code, 200)
        alerts = self.client.get('/api/alerts', headers=self.headers).json()['events']
        self.assertEqual([(e['item_id'], e['reorder_status']) for e in alerts], [(item['id'], 'overdue')])

        # restocking clears the alert state so running low again alerts again
        self.client.put(f"/api/stock/items/{item['id']}", json={"name": "Toothpaste", "total_size": 500,
                                                                "usage_rate_per_day": 10, "current_remaining": 500,
                                                                "retailer": "Boots"}, headers=self.headers)
        self.client.get('/api/stock/forecasts', headers=self.headers)
        self.client.post(f"/api/stock/items/{item['id']}/usage", json={"amount_used": 500}, headers=self.headers)
        self.client.get('/api/stock/forecasts', headers=self.headers)
        alerts = self.client.get('/api/alerts', headers=self.headers).json()['events']
        self.assertEqual(len(alerts), 2)

    def test_forecast_prefers_logged_usage(self):
        item = self._create(usage_rate_per_day=10, current_remaining=400)
        self.client.post(f"/api/stock/items/{item['id']}/usage", json={"amount_used": 4}, headers=self.headers)
        forecast = self.client.get('/api/stock/forecasts', headers=self.headers).json()['forecasts'][0]
        self.assertEqual(forecast['usage_rate_per_day'], 4.0)
        self.assertEqual(forecast['usage']['confidence'], 'low')

    def test_purchase(self):
        resp = self.client.post('/api/stock/purchase', json={"required_amount": 250, "pack_size": 100, "cost_per_item": 3.5})
        self.assertEqual(resp.json()['packs_needed'], 3)
        resp = self.client.post('/api/stock/purchase', json={"required_amount": 250, "pack_size": 0})
        self.assertEqual(resp.status_code, 422)
