# src/promo_pay/services/checkout_session.py
"""
One promo checkout flow, packaged for front ends (Flask, Streamlit).

The session owns the scheduler and the countdown controller. Front ends call
`pump()` from the thread that handles user input before reading or changing
state; that drains timer ticks and fetch completions, making that thread the
single "UI thread" of the flow.
"""

import threading
from typing import Optional

from promo_pay.config import Config
from promo_pay.core.scheduler import Scheduler, ThreadedScheduler
from promo_pay.services.countdown import CountdownController
from promo_pay.services.payment_types import PaymentTypesRepository, build_repository
from promo_pay.utils.helpers import get_setting


class CheckoutSession:
    def __init__(
        self,
        config=None,
        scheduler: Optional[Scheduler] = None,
        repository: Optional[PaymentTypesRepository] = None,
        autostart: bool = True,
    ):
        config = config or Config
        self.scheduler: Scheduler = scheduler or ThreadedScheduler()
        self.repository: PaymentTypesRepository = repository or build_repository(config, self.scheduler)
        self.countdown = CountdownController(
            self.scheduler,
            self.repository,
            duration_seconds=get_setting(config, "PROCESS_DURATION_SECONDS", Config.PROCESS_DURATION_SECONDS),
            tick_interval=get_setting(config, "TICK_INTERVAL_SECONDS", Config.TICK_INTERVAL_SECONDS),
        )
        self.lock = threading.RLock()
        if autostart:
            self.countdown.start()

    def pump(self) -> int:
        with self.lock:
            return self.scheduler.run_pending()

    @property
    def selector(self):
        """The selector if it exists already; never creates one."""
        if self.countdown.has_selector:
            return self.countdown.selector
        return None

    def close(self) -> None:
        """Stop the countdown thread(s); the session is unusable afterwards."""
        with self.lock:
            self.scheduler.shutdown()
