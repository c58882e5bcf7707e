# src/promo_pay/services/selector.py
"""
State holder behind the payment-method selector sheet.

Owns the fetched option list, the search box text, the filtered list shown
to the user and the (single) selected option. Fetch completions may arrive
from any thread; they are handed to the scheduler and applied on the owner
thread, so every field here is only ever mutated from one place.
"""

import logging
from typing import Callable, List, Optional

from promo_pay.core.scheduler import Scheduler
from promo_pay.models.payment_option import LoadingPhase, PaymentOption
from promo_pay.services.payment_types import FetchResult, PaymentTypesRepository
from promo_pay.utils.helpers import filter_options

logger = logging.getLogger(__name__)

# (confirm, selected option or None)
DismissHandler = Callable[[bool, Optional[PaymentOption]], None]


class SelectorController:
    def __init__(
        self,
        repository: PaymentTypesRepository,
        scheduler: Scheduler,
        on_dismiss: Optional[DismissHandler] = None,
        autoload: bool = True,
    ) -> None:
        self.repository = repository
        self.scheduler = scheduler
        self._on_dismiss = on_dismiss

        self.all_options: List[PaymentOption] = []
        self.displayed_options: List[PaymentOption] = []
        self.search_text: str = ""
        self.selected: Optional[PaymentOption] = None
        self.loading_phase: LoadingPhase = LoadingPhase.LOADING

        self._in_flight = 0

        if autoload:
            self.load()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Fetch the option list unless a fetch is already running."""
        if self._in_flight:
            logger.debug("Payment types already loading, ignoring load()")
            return
        self._fetch()

    def refresh(self) -> None:
        """Pull-to-refresh: always fetch, even over a running request."""
        self._fetch()

    def _fetch(self) -> None:
        self.loading_phase = LoadingPhase.LOADING
        self._in_flight += 1
        logger.debug("Requesting payment types (%d in flight)", self._in_flight)
        self.repository.get_types(self._on_types_fetched)

    def _on_types_fetched(self, result: FetchResult) -> None:
        # may run on a provider thread
        self.scheduler.call_soon(lambda: self._apply_result(result))

    def _apply_result(self, result: FetchResult) -> None:
        self._in_flight = max(0, self._in_flight - 1)
        if result.ok:
            self.all_options = [PaymentOption.from_type(t) for t in result.types]
            self.displayed_options = filter_options(self.all_options, self.search_text)
            logger.debug("Loaded %d payment types", len(self.all_options))
        else:
            logger.warning("Payment type fetch failed: %s", result.error)
        self.loading_phase = LoadingPhase.READY

    # ------------------------------------------------------------------
    # Search & selection
    # ------------------------------------------------------------------
    def set_search_text(self, text: str) -> None:
        self.search_text = text or ""
        self.displayed_options = filter_options(self.all_options, self.search_text)

    def toggle_select(self, option: PaymentOption) -> None:
        if option.same_as(self.selected):
            self.selected = None
        else:
            self.selected = option

    def find_option(self, name: str) -> Optional[PaymentOption]:
        for opt in self.all_options:
            if opt.name == name:
                return opt
        return None

    def has_selection(self) -> bool:
        return self.selected is not None

    def has_options(self) -> bool:
        return bool(self.all_options)

    def affirmative_label(self) -> str:
        return "Done" if self.has_selection() else "Cancel"

    # ------------------------------------------------------------------
    # Closing
    # ------------------------------------------------------------------
    def dismiss(self, confirm: bool = True) -> None:
        """Report the current selection back to whoever owns this selector."""
        if self._on_dismiss is not None:
            self._on_dismiss(confirm, self.selected)
