# src/promo_pay/models/payment_option.py
from dataclasses import dataclass
from enum import Enum


class ScreenPhase(str, Enum):
    COUNTING_DOWN = "counting_down"
    FINISHED = "finished"


class LoadingPhase(str, Enum):
    LOADING = "loading"
    READY = "ready"


@dataclass(frozen=True)
class PaymentType:
    """Raw record as delivered by a payment-type provider."""
    name: str


@dataclass(frozen=True)
class PaymentOption:
    name: str
    normalized_search_key: str  # lowercased name, used by the search box

    @classmethod
    def from_name(cls, name: str) -> "PaymentOption":
        return cls(name=name, normalized_search_key=name.lower())

    @classmethod
    def from_type(cls, payment_type: PaymentType) -> "PaymentOption":
        return cls.from_name(payment_type.name)

    def same_as(self, other) -> bool:
        return other is not None and self.name == other.name
