import unittest
from datetime import date

from household.domain.Bill import Bill
from household.logic.bills.occurrences import (
    generate_bill_occurrences,
    get_bill_occurrences_for_month,
    get_bill_occurrences_in_range,
    occurrence_id,
    summarise_occurrences,
)


def _dates(occurrences):
    return [o["due_date"] for o in occurrences]


class TestBillOccurrences(unittest.TestCase):

    def test_due_day_clamped_to_month_end(self):
        bill = Bill("b1", "Rent", 950, 31, "monthly", date(2025, 1, 1))
        self.assertEqual(_dates(get_bill_occurrences_for_month([bill], 2026, 2)), [date(2026, 2, 28)])
        self.assertEqual(_dates(get_bill_occurrences_for_month([bill], 2028, 2)), [date(2028, 2, 29)])
        self.assertEqual(_dates(get_bill_occurrences_for_month([bill], 2026, 4)), [date(2026, 4, 30)])

    def test_nothing_before_start(self):
        bill = Bill("b1", "Gym", 30, 1, "monthly", date(2026, 3, 1))
        self.assertEqual(get_bill_occurrences_for_month([bill], 2026, 2), [])
        occ = generate_bill_occurrences(bill, date(2026, 1, 1), date(2026, 6, 30))
        self.assertEqual(_dates(occ), [date(2026, m, 1) for m in (3, 4, 5, 6)])

    def test_nothing_after_end(self):
        bill = Bill("b1", "Gym", 30, 1, "monthly", date(2026, 3, 1), date(2026, 4, 15))
        occ = generate_bill_occurrences(bill, date(2026, 1, 1), date(2026, 6, 30))
        self.assertEqual(_dates(occ), [date(2026, 3, 1), date(2026, 4, 1)])

    def test_weekly_and_fortnightly(self):
        weekly = Bill("w", "Cleaner", 40, 1, "weekly", date(2026, 1, 5))
        fortnightly = Bill("f", "Window", 15, 1, "fortnightly", date(2026, 1, 5))
        self.assertEqual(_dates(generate_bill_occurrences(weekly, date(2026, 1, 1), date(2026, 1, 31))),
                         [date(2026, 1, 5), date(2026, 1, 12), date(2026, 1, 19), date(2026, 1, 26)])
        self.assertEqual(_dates(generate_bill_occurrences(fortnightly, date(2026, 1, 1), date(2026, 1, 31))),
                         [date(2026, 1, 5), date(2026, 1, 19)])

    def test_weekly_range_starting_mid_cycle(self):
        weekly = Bill("w", "Cleaner", 40, 1, "weekly", date(2026, 1, 5))
        self.assertEqual(_dates(generate_bill_occurrences(weekly, date(2026, 1, 10), date(2026, 1, 31))),
                         [date(2026, 1, 12), date(2026, 1, 19), date(2026, 1, 26)])

    def test_quarterly_anchored_on_start_month(self):
        bill = Bill("q", "Water", 90, 15, "quarterly", date(2026, 1, 10))
        occ = generate_bill_occurrences(bill, date(2026, 1, 1), date(2026, 12, 31))
        self.assertEqual(_dates(occ), [date(2026, 1, 15), date(2026, 4, 15), date(2026, 7, 15), date(2026, 10, 15)])

    def test_quarterly_first_due_before_start_is_skipped(self):
        bill = Bill("q", "Water", 90, 15, "quarterly", date(2026, 1, 20))
        occ = generate_bill_occurrences(bill, date(2026, 1, 1), date(2026, 12, 31))
        self.assertEqual(_dates(occ), [date(2026, 4, 15), date(2026, 7, 15), date(2026, 10, 15)])

    def test_yearly_and_biannual(self):
        yearly = Bill("y", "Insurance", 400, 1, "yearly", date(2024, 6, 1))
        biannual = Bill("h", "Boiler", 80, 1, "biannual", date(2025, 3, 1))
        self.assertEqual(_dates(generate_bill_occurrences(yearly, date(2026, 1, 1), date(2026, 12, 31))),
                         [date(2026, 6, 1)])
        self.assertEqual(_dates(generate_bill_occurrences(biannual, date(2026, 1, 1), date(2026, 12, 31))),
                         [date(2026, 3, 1), date(2026, 9, 1)])

    def test_month_steps_clamp_across_years(self):
        bill = Bill("b1", "Insurance", 200, 31, "biannual", date(2025, 8, 1))
        occ = generate_bill_occurrences(bill, date(2025, 1, 1), date(2028, 12, 31))
        self.assertEqual(_dates(occ), [date(2025, 8, 31), date(2026, 2, 28), date(2026, 8, 31), date(2027, 2, 28),
                                       date(2027, 8, 31), date(2028, 2, 29), date(2028, 8, 31)])
        later = generate_bill_occurrences(bill, date(2027, 6, 1), date(2028, 3, 31))
        self.assertEqual(_dates(later), [date(2027, 8, 31), date(2028, 2, 29)])

    def test_inactive_bill_produces_nothing(self):
        bill = Bill("b1", "Old", 10, 1, "monthly", date(2025, 1, 1), is_active=False)
        self.assertEqual(generate_bill_occurrences(bill, date(2026, 1, 1), date(2026, 12, 31)), [])

    def test_unknown_frequency(self):
        bill = Bill("b1", "Odd", 10, 1, "hourly", date(2025, 1, 1))
        with self.assertRaises(ValueError):
            generate_bill_occurrences(bill, date(2026, 1, 1), date(2026, 1, 31))

    def test_status_and_ids(self):
        bill = Bill("b1", "Phone", 20, 10, "monthly", date(2025, 1, 1), category="utilities")
        occ = generate_bill_occurrences(bill, date(2026, 2, 1), date(2026, 3, 31), today=date(2026, 2, 15))
        self.assertEqual([o["id"] for o in occ], ["b1-2026-02-10", "b1-2026-03-10"])
        self.assertEqual([o["status"] for o in occ], ["overdue", "due"])
        self.assertEqual(occ[0]["category"], "utilities")
        self.assertEqual(occ[0]["expected_amount"], 20.0)

        paid = generate_bill_occurrences(bill, date(2026, 2, 1), date(2026, 3, 31), today=date(2026, 2, 15),
                                         paid_ids={occurrence_id("b1", date(2026, 2, 10))})
        self.assertEqual(paid[0]["status"], "paid")

    def test_range_sorted_and_summarised(self):
        bills = [
            Bill("b", "Water", 30, 5, "monthly", date(2025, 1, 1)),
            Bill("a", "Energy", 120.5, 5, "monthly", date(2025, 1, 1)),
            Bill("c", "Rent", 900, 1, "monthly", date(2025, 1, 1)),
        ]
        occ = get_bill_occurrences_in_range(bills, date(2026, 2, 1), date(2026, 2, 28), today=date(2026, 2, 3))
        self.assertEqual([o["bill_name"] for o in occ], ["Rent", "Energy", "Water"])
        summary = summarise_occurrences(occ)
        self.assertEqual(summary["count"], 3)
        self.assertEqual(summary["total_expected"], 1050.5)
        self.assertEqual(summary["by_status"], {"overdue": 900.0, "due": 150.5})


if __name__ == "__main__":
    unittest.main()
