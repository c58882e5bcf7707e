# src/promo_pay/services/payment_types.py

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import requests
from pydantic import ValidationError

from promo_pay.api.schemas import PaymentTypeSchema
from promo_pay.config import Config
from promo_pay.core.scheduler import Scheduler
from promo_pay.errors import FetchFailed
from promo_pay.models.payment_option import PaymentType
from promo_pay.utils.helpers import get_setting

logger = logging.getLogger(__name__)


DEFAULT_CATALOG = [
    "Visa",
    "Mastercard",
    "American Express",
    "PayPal",
    "Apple Pay",
    "Google Pay",
    "Bank Transfer",
    "Klarna",
    "Cash on Delivery",
]


@dataclass
class FetchResult:
    types: List[PaymentType] = field(default_factory=list)
    error: Optional[FetchFailed] = None

    @property
    def ok(self) -> bool:
        return self.error is None


Completion = Callable[[FetchResult], None]


class PaymentTypesRepository:
    """
    Asynchronous source of payment types.

    `get_types` must return immediately and call `completion` exactly once,
    later, possibly from another thread.
    """

    def get_types(self, completion: Completion) -> None:
        raise NotImplementedError


class StaticPaymentTypesRepository(PaymentTypesRepository):
    """Serves a fixed catalog after a simulated network delay."""

    def __init__(
        self,
        scheduler: Scheduler,
        names: Optional[List[str]] = None,
        delay: float = Config.PAYMENT_TYPES_DELAY_SECONDS,
        error: Optional[FetchFailed] = None,
    ):
        self.scheduler = scheduler
        self.names = list(DEFAULT_CATALOG if names is None else names)
        self.delay = delay
        # set to make every request fail (useful for demos and tests)
        self.error = error
        self.requests_made = 0

    def get_types(self, completion: Completion) -> None:
        self.requests_made += 1
        if self.error is not None:
            result = FetchResult(error=self.error)
        else:
            result = FetchResult(types=[PaymentType(name=n) for n in self.names])
        self.scheduler.call_later(self.delay, lambda: completion(result))


class HttpPaymentTypesRepository(PaymentTypesRepository):
    """
    Loads payment types from a JSON endpoint returning
    `[{"name": "Visa"}, {"name": "PayPal"}, ...]`.

    The request runs on a worker thread; the completion is called from that
    thread, so callers must marshal it back to their own thread.
    """

    def __init__(
        self,
        url: str,
        session: Optional[requests.Session] = None,
        timeout: float = Config.PAYMENT_TYPES_TIMEOUT,
    ):
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout
        # most recent request thread, joinable by callers that need to wait
        self.last_worker: Optional[threading.Thread] = None

    def fetch_types(self) -> List[PaymentType]:
        try:
            resp = self.session.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            raise FetchFailed(f"Could not fetch payment types from {self.url}: {e}") from e

        if not isinstance(data, list):
            raise FetchFailed("Unexpected payment type format: expected a JSON list")
        try:
            items = [PaymentTypeSchema.model_validate(item) for item in data]
        except ValidationError as e:
            raise FetchFailed(f"Invalid payment type entry: {e}") from e
        return [PaymentType(name=item.name) for item in items]

    def get_types(self, completion: Completion) -> None:
        def _run():
            try:
                result = FetchResult(types=self.fetch_types())
            except FetchFailed as e:
                result = FetchResult(error=e)
            completion(result)

        self.last_worker = threading.Thread(target=_run, daemon=True)
        self.last_worker.start()


def build_repository(config, scheduler: Scheduler) -> PaymentTypesRepository:
    """Pick the provider named by the config (an object or a mapping)."""
    url = get_setting(config, "PAYMENT_TYPES_URL")
    if url:
        logger.info("Using HTTP payment type provider at %s", url)
        return HttpPaymentTypesRepository(
            url, timeout=get_setting(config, "PAYMENT_TYPES_TIMEOUT", Config.PAYMENT_TYPES_TIMEOUT)
        )
    return StaticPaymentTypesRepository(
        scheduler,
        delay=get_setting(config, "PAYMENT_TYPES_DELAY_SECONDS", Config.PAYMENT_TYPES_DELAY_SECONDS),
    )
