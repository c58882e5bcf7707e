import logging
from typing import Iterable, List, Optional

from promo_pay.models.payment_option import PaymentOption


def configure_logging(level="INFO"):
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def filter_options(options: Iterable[PaymentOption], search_text: Optional[str]) -> List[PaymentOption]:
    """
    Keep the options whose lowercased name contains the lowercased search text.

    Plain substring test, so characters like '(' or '*' in the search box are
    matched literally. An empty search keeps everything in its original order.
    """
    needle = (search_text or "").lower()
    if not needle:
        return list(options)
    return [opt for opt in options if needle in opt.normalized_search_key]


def get_setting(config, key, default=None):
    """Read a setting from a Config class/object or a mapping (e.g. app.config)."""
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)
