from promo_pay.errors import FetchFailed
from promo_pay.models.payment_option import PaymentType
from promo_pay.services.payment_types import FetchResult, PaymentTypesRepository


class ManualRepository(PaymentTypesRepository):
    """Keeps completions around until the test resolves them."""

    def __init__(self):
        self.pending = []

    def get_types(self, completion):
        self.pending.append(completion)

    def succeed(self, names, index=0):
        completion = self.pending.pop(index)
        completion(FetchResult(types=[PaymentType(name=n) for n in names]))

    def fail(self, message="offline", index=0):
        completion = self.pending.pop(index)
        completion(FetchResult(error=FetchFailed(message)))
