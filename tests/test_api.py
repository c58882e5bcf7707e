import unittest
from promo_pay.app import create_app
from promo_pay.config import Config
from promo_pay.core.scheduler import ManualScheduler
from promo_pay.services.checkout_session import CheckoutSession
from promo_pay.services.payment_types import StaticPaymentTypesRepository
from fakes import ManualRepository


class ApiTestConfig(Config):
    TESTING = True
    LOG_LEVEL = "WARNING"


class TestCheckoutApi(unittest.TestCase):

    def setUp(self):
        self.scheduler = ManualScheduler()
        self.repository = StaticPaymentTypesRepository(
            self.scheduler, names=["Visa", "Mastercard", "PayPal"], delay=2
        )
        self.session = CheckoutSession(ApiTestConfig, scheduler=self.scheduler, repository=self.repository)
        self.app = create_app(ApiTestConfig, session=self.session)
        self.client = self.app.test_client()

    def open_and_load(self):
        self.client.post('/selector/open', json={})
        self.scheduler.advance(2)

    def test_initial_state(self):
        resp = self.client.get('/state')
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertEqual(data["remaining_seconds"], 60)
        self.assertEqual(data["screen_phase"], "counting_down")
        self.assertFalse(data["is_selector_open"])
        self.assertFalse(data["can_finish"])
        self.assertIsNone(data["selector"])
        self.assertEqual(data["message"], "You have only 60 seconds left to get the discount")

    def test_state_follows_ticks(self):
        self.scheduler.advance(5)
        data = self.client.get('/state').get_json()
        self.assertEqual(data["remaining_seconds"], 55)

    def test_open_selector_starts_loading(self):
        data = self.client.post('/selector/open', json={"open": True}).get_json()
        self.assertTrue(data["is_selector_open"])
        self.assertEqual(data["selector"]["loading_phase"], "loading")
        self.assertEqual(data["selector"]["affirmative_label"], "Cancel")

    def test_search_and_select_flow(self):
        self.open_and_load()
        data = self.client.post('/selector/search', json={"text": "pay"}).get_json()
        self.assertEqual([o["name"] for o in data["selector"]["displayed_options"]], ["PayPal"])

        data = self.client.post('/selector/toggle', json={"name": "PayPal"}).get_json()
        self.assertEqual(data["selector"]["selected"]["name"], "PayPal")
        self.assertEqual(data["selector"]["affirmative_label"], "Done")

        data = self.client.post('/selector/dismiss', json={"confirm": True}).get_json()
        self.assertFalse(data["is_selector_open"])
        self.assertEqual(data["selected_option"]["name"], "PayPal")
        self.assertTrue(data["can_finish"])

    def test_toggle_unknown_option(self):
        self.open_and_load()
        resp = self.client.post('/selector/toggle', json={"name": "Bitcoin"})
        self.assertEqual(resp.status_code, 404)
        self.assertIn("Bitcoin", resp.get_json()["detail"])

    def test_invalid_body(self):
        self.open_and_load()
        resp = self.client.post('/selector/toggle', json={"label": "Visa"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("detail", resp.get_json())

    def test_refresh_reloads(self):
        self.open_and_load()
        resp = self.client.post('/selector/refresh')
        self.assertEqual(resp.status_code, 202)
        self.assertEqual(resp.get_json()["selector"]["loading_phase"], "loading")
        self.assertEqual(self.repository.requests_made, 2)
        self.scheduler.advance(2)
        self.assertEqual(self.client.get('/state').get_json()["selector"]["loading_phase"], "ready")

    def test_selector_endpoints_need_an_open_selector(self):
        for path, body in [
            ('/selector/search', {"text": "pay"}),
            ('/selector/toggle', {"name": "Visa"}),
            ('/selector/refresh', None),
            ('/selector/dismiss', {"confirm": True}),
        ]:
            resp = self.client.post(path, json=body)
            self.assertEqual(resp.status_code, 409, path)
        data = self.client.get('/state').get_json()
        self.assertIsNone(data["selector"])
        self.assertEqual(self.repository.requests_made, 0)

    def test_finish_requires_selection(self):
        resp = self.client.post('/finish')
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(self.client.get('/state').get_json()["screen_phase"], "counting_down")

    def test_finish_with_time_left(self):
        self.open_and_load()
        self.client.post('/selector/toggle', json={"name": "Visa"})
        self.client.post('/selector/dismiss', json={})
        data = self.client.post('/finish').get_json()
        self.assertEqual(data["screen_phase"], "finished")
        self.assertEqual(data["message"], "Congratulations")

    def test_finish_after_expiry(self):
        self.open_and_load()
        self.client.post('/selector/toggle', json={"name": "Visa"})
        self.client.post('/selector/dismiss', json={})
        self.scheduler.advance(120)
        data = self.client.post('/finish').get_json()
        self.assertEqual(data["remaining_seconds"], 0)
        self.assertEqual(data["message"], "Uh oh, the countdown expired :(")


class TestCompletionMarshalling(unittest.TestCase):

    def test_fetch_result_applied_on_next_request(self):
        scheduler = ManualScheduler()
        repository = ManualRepository()
        session = CheckoutSession(ApiTestConfig, scheduler=scheduler, repository=repository)
        client = create_app(ApiTestConfig, session=session).test_client()

        client.post('/selector/open', json={})
        # provider answers from "another thread"; only queued so far
        repository.succeed(["Visa", "PayPal"])
        self.assertEqual(session.selector.all_options, [])

        data = client.get('/state').get_json()
        self.assertEqual(data["selector"]["loading_phase"], "ready")
        self.assertEqual([o["name"] for o in data["selector"]["all_options"]], ["Visa", "PayPal"])

if __name__ == '__main__':
    unittest.main()
