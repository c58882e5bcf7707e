import unittest
from promo_pay.config import Config
from promo_pay.core.scheduler import ThreadedScheduler
from promo_pay.services.checkout_session import CheckoutSession

class TestCheckoutSession(unittest.TestCase):

    def test_defaults_to_threaded_scheduler_and_static_catalog(self):
        session = CheckoutSession(Config)
        try:
            self.assertIsInstance(session.scheduler, ThreadedScheduler)
            self.assertTrue(session.countdown.is_running)
            self.assertIsNone(session.selector)
        finally:
            session.close()

    def test_close_stops_the_countdown_thread(self):
        session = CheckoutSession({"PROCESS_DURATION_SECONDS": 60, "TICK_INTERVAL_SECONDS": 0.01})
        session.countdown.open_selector(True)
        self.assertGreaterEqual(session.scheduler.live_timers(), 1)

        session.close()
        self.assertEqual(session.scheduler.live_timers(), 0)
        session.pump()
        remaining = session.countdown.remaining_seconds
        session.pump()
        self.assertEqual(session.countdown.remaining_seconds, remaining)

    def test_close_is_idempotent(self):
        session = CheckoutSession(Config)
        session.close()
        session.close()
        self.assertEqual(session.scheduler.live_timers(), 0)

if __name__ == '__main__':
    unittest.main()
