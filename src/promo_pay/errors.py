class PromoPayError(Exception):
    """Base class for errors raised by promo_pay."""


class FetchFailed(PromoPayError):
    """The payment-type provider could not deliver its catalog."""
