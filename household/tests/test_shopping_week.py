import unittest
from datetime import date

from household.logic.mealplan.shopping_week import (
    Blackout,
    describe_shopping_week,
    format_shopping_week_range,
    get_active_dates,
    get_blackout_reason,
    get_next_shopping_week,
    get_previous_shopping_week,
    get_shopping_week_dates,
    get_shopping_week_range,
    get_smart_week_start,
    is_current_shopping_week,
    is_date_in_shopping_week,
)
from household.tests.api_case import ApiTestCase


class TestShoppingWeek(unittest.TestCase):

    def test_range_from_midweek(self):
        r = get_shopping_week_range(date(2026, 2, 10))
        self.assertEqual(r, {"start": date(2026, 2, 8), "end": date(2026, 2, 16)})

    def test_sunday_monday_saturday_anchors(self):
        self.assertEqual(get_shopping_week_range(date(2026, 2, 15))["start"], date(2026, 2, 15))
        self.assertEqual(get_shopping_week_range(date(2026, 2, 16))["start"], date(2026, 2, 15))
        self.assertEqual(get_shopping_week_range(date(2026, 2, 14))["start"], date(2026, 2, 8))

    def test_nine_days(self):
        dates = get_shopping_week_dates(date(2026, 2, 10))
        self.assertEqual(len(dates), 9)
        self.assertEqual(dates[0], date(2026, 2, 8))
        self.assertEqual(dates[-1], date(2026, 2, 16))

    def test_label(self):
        self.assertEqual(format_shopping_week_range(date(2026, 2, 10)), "Sun 8 Feb → Mon 16 Feb 2026")

    def test_navigation(self):
        self.assertEqual(get_next_shopping_week(date(2026, 2, 10)), date(2026, 2, 15))
        self.assertEqual(get_previous_shopping_week(date(2026, 2, 10)), date(2026, 2, 1))
        self.assertTrue(is_date_in_shopping_week(date(2026, 2, 16), date(2026, 2, 10)))
        self.assertFalse(is_date_in_shopping_week(date(2026, 2, 17), date(2026, 2, 10)))
        self.assertTrue(is_current_shopping_week(date(2026, 2, 9), today=date(2026, 2, 12)))
        self.assertFalse(is_current_shopping_week(date(2026, 2, 15), today=date(2026, 2, 12)))

    def test_overlapping_days_belong_to_both_windows(self):
        for today in (date(2026, 2, 15), date(2026, 2, 16)):
            self.assertTrue(is_current_shopping_week(date(2026, 2, 9), today=today))
            self.assertTrue(is_current_shopping_week(date(2026, 2, 15), today=today))
        self.assertFalse(is_current_shopping_week(date(2026, 2, 9), today=date(2026, 2, 17)))

    def test_smart_week_start(self):
        self.assertEqual(get_smart_week_start(date(2026, 2, 15)), date(2026, 2, 16))
        self.assertEqual(get_smart_week_start(date(2026, 2, 11)), date(2026, 2, 9))


class TestBlackouts(unittest.TestCase):

    def test_active_dates_exclude_blackouts(self):
        blackouts = [Blackout(date(2026, 2, 9), date(2026, 2, 10), "Away")]
        active = get_active_dates(date(2026, 2, 10), blackouts)
        self.assertEqual(len(active), 7)
        self.assertNotIn(date(2026, 2, 9), active)
        self.assertEqual(get_blackout_reason(date(2026, 2, 10), blackouts), "Away")
        self.assertIsNone(get_blackout_reason(date(2026, 2, 11), blackouts))

    def test_invalid_blackout(self):
        with self.assertRaises(ValueError):
            Blackout(date(2026, 2, 10), date(2026, 2, 9))

    def test_describe(self):
        week = describe_shopping_week(date(2026, 2, 10), [Blackout(date(2026, 2, 16), date(2026, 2, 20))])
        self.assertEqual(week["start"], "2026-02-08")
        self.assertEqual(week["end"], "2026-02-16")
        self.assertEqual(len(week["active_dates"]), 8)
        self.assertEqual(week["blackout_days"], [{"date": "2026-02-16", "reason": None}])
        self.assertEqual(week["next_start"], "2026-02-15")


class TestShoppingWeekAPI(ApiTestCase):

    def test_week_with_blackouts(self):
        resp = self.client.post('/api/shopping-week/blackouts',
                                json={"start_date": "2026-02-09", "end_date": "2026-02-10", "reason": "Away"},
                                headers=self.headers)
        self.assertEqual(resp.status_code, 201)
        blackout_id = resp.json()['id']

        week = self.client.get('/api/shopping-week', params={'anchor': '2026-02-10'}, headers=self.headers).json()
        self.assertEqual(week['label'], "Sun 8 Feb → Mon 16 Feb 2026")
        self.assertEqual(len(week['active_dates']), 7)
        self.assertIn('smart_week_start', week)

        # other users do not see this blackout
        other = self.client.get('/api/shopping-week', params={'anchor': '2026-02-10'},
                                headers=self.other_user_headers()).json()
        self.assertEqual(len(other['active_dates']), 9)

        self.assertEqual(self.client.delete(f"/api/shopping-week/blackouts/{blackout_id}",
                                            headers=self.headers).status_code, 200)
        self.assertEqual(self.client.get('/api/shopping-week/blackouts', headers=self.headers).json()['blackouts'], [])

    def test_blackout_order_validated(self):
        resp = self.client.post('/api/shopping-week/blackouts',
                                json={"start_date": "2026-02-10", "end_date": "2026-02-09"}, headers=self.headers)
        self.assertEqual(resp.status_code, 422)


if __name__ == "__main__":
    unittest.main()
