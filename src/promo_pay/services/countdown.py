# src/promo_pay/services/countdown.py

import logging
from typing import Optional

from promo_pay.config import Config
from promo_pay.core.scheduler import Scheduler, TimerHandle
from promo_pay.models.payment_option import PaymentOption, ScreenPhase
from promo_pay.services.payment_types import PaymentTypesRepository
from promo_pay.services.selector import SelectorController

logger = logging.getLogger(__name__)

SUCCESS_MESSAGE = "Congratulations"
EXPIRED_MESSAGE = "Uh oh, the countdown expired :("


class CountdownController:
    """
    Top-level state of the promo screen.

    Counts the discount window down one second per tick, tracks whether the
    payment selector is open and which option was confirmed in it, and
    switches to the finished phase when the user taps "Finish".

    The countdown does not finish the flow on its own: reaching zero only
    stops the timer, and the finished view later shows the "expired"
    message instead of the congratulations one.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        repository: PaymentTypesRepository,
        duration_seconds: int = Config.PROCESS_DURATION_SECONDS,
        tick_interval: float = Config.TICK_INTERVAL_SECONDS,
    ) -> None:
        if duration_seconds < 0:
            raise ValueError("duration_seconds must not be negative.")

        self.scheduler = scheduler
        self.repository = repository
        self.duration_seconds = int(duration_seconds)
        self.tick_interval = tick_interval

        self.remaining_seconds: int = self.duration_seconds
        self.is_selector_open: bool = False
        self.selected_option: Optional[PaymentOption] = None
        self.screen_phase: ScreenPhase = ScreenPhase.COUNTING_DOWN

        self._timer: Optional[TimerHandle] = None
        self._started = False
        self._selector: Optional[SelectorController] = None

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Begin ticking. The countdown runs once; later calls do nothing."""
        if self._started:
            return
        self._started = True
        if self.remaining_seconds <= 0 or self.screen_phase is ScreenPhase.FINISHED:
            return
        self._timer = self.scheduler.call_repeating(self.tick_interval, self._tick)
        logger.info("Countdown started at %d seconds", self.remaining_seconds)

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    def _tick(self) -> None:
        if self.screen_phase is ScreenPhase.FINISHED or self.remaining_seconds <= 0:
            self._stop_timer()
            return
        self.remaining_seconds -= 1
        if self.remaining_seconds <= 0:
            self._stop_timer()
            logger.info("Countdown expired")

    def _stop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # ------------------------------------------------------------------
    # Selector
    # ------------------------------------------------------------------
    @property
    def selector(self) -> SelectorController:
        """The session's selector, created (and first loaded) on first use."""
        if self._selector is None:
            self._selector = SelectorController(
                self.repository,
                self.scheduler,
                on_dismiss=self._handle_selector_result,
            )
        return self._selector

    @property
    def has_selector(self) -> bool:
        return self._selector is not None

    def open_selector(self, open: bool = True) -> None:
        if open:
            # reopening reuses the loaded list and the previous selection
            self.selector
        self.is_selector_open = open

    def _handle_selector_result(self, confirm: bool, selection: Optional[PaymentOption]) -> None:
        if confirm:
            self.on_selector_dismissed(selection)

    def on_selector_dismissed(self, selection: Optional[PaymentOption]) -> None:
        self.selected_option = selection
        self.is_selector_open = False

    @property
    def can_finish(self) -> bool:
        return self.selected_option is not None

    # ------------------------------------------------------------------
    # Finish
    # ------------------------------------------------------------------
    def finish(self) -> None:
        # expects a selection; the UI only offers "Finish" once there is one
        self._stop_timer()
        self.screen_phase = ScreenPhase.FINISHED
        logger.info(
            "Flow finished with %d seconds left (selection: %s)",
            self.remaining_seconds,
            self.selected_option.name if self.selected_option else None,
        )

    def time_remaining_at_finish(self) -> bool:
        return self.remaining_seconds > 0

    def countdown_message(self) -> str:
        return f"You have only {self.remaining_seconds} seconds left to get the discount"

    def finished_message(self) -> str:
        return SUCCESS_MESSAGE if self.time_remaining_at_finish() else EXPIRED_MESSAGE
