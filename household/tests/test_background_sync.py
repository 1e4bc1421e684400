import asyncio
import unittest

from household.tests.api_case import ApiTestCase
from household.utilities.sync import BackgroundSync


class TestBackgroundSync(unittest.TestCase):

    def setUp(self):
        self.sync = BackgroundSync(interval=60, initial_delay=0)
        self.ran = []

        async def ok():
            self.ran.append("ok")
            return 3

        async def broken():
            self.ran.append("broken")
            raise RuntimeError("carrier down")

        self.sync.register("ok", ok)
        self.sync.register("broken", broken)

    def test_failures_do_not_stop_other_jobs(self):
        results = asyncio.run(self.sync.run_once())
        self.assertEqual(results["ok"], {"status": "fulfilled"})
        self.assertEqual(results["broken"], {"status": "rejected", "error": "carrier down"})
        self.assertEqual(sorted(self.ran), ["broken", "ok"])
        self.assertIsNotNone(self.sync.last_run_at)
        self.assertEqual(self.sync.last_results, results)

    def test_overlapping_run_skipped(self):
        self.sync._running = True
        self.assertIsNone(asyncio.run(self.sync.run_once()))
        self.assertEqual(self.ran, [])

    def test_start_and_stop(self):
        async def scenario():
            self.sync.start()
            await asyncio.sleep(0.05)
            running = self.sync.status()["enabled"]
            await self.sync.stop()
            return running

        self.assertTrue(asyncio.run(scenario()))
        self.assertIn("ok", self.ran)
        status = self.sync.status()
        self.assertFalse(status["enabled"])
        self.assertEqual(status["jobs"], ["ok", "broken"])
        self.assertEqual(status["interval_seconds"], 60)


class TestSyncStatusAPI(ApiTestCase):

    def test_status_endpoint(self):
        resp = self.client.get('/api/sync/status', headers=self.headers)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()['jobs'], ['tracking-poll'])
        self.assertEqual(self.client.get('/api/sync/status').status_code, 401)


if __name__ == "__main__":
    unittest.main()
