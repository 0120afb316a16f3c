"""Simulated payment processing.

There is no real gateway: the processor approves every charge unless
`STORE_SIMULATE_PAYMENT_FAILURE` is set. The processor class is configurable
through `STORE_PAYMENT_PROCESSOR` (dotted path).
"""

import time
import uuid
from dataclasses import dataclass

from django.conf import settings
from django.utils.module_loading import import_string


@dataclass(frozen=True)
class PaymentResult:
    approved: bool
    transaction_id: str = ""
    processor: str = ""
    card_last4: str = ""
    card_type: str = ""
    message: str = ""


class SimulatedPaymentProcessor:
    """Approves charges with a generated transaction id and masked card details."""

    name = "simulated"

    def charge(self, order) -> PaymentResult:
        if getattr(settings, "STORE_SIMULATE_PAYMENT_FAILURE", False):
            return PaymentResult(approved=False, processor=self.name, message="Payment declined.")

        is_card = order.payment_method == "credit_card"
        return PaymentResult(
            approved=True,
            transaction_id=f"txn_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}",
            processor=f"{self.name}:{order.payment_method}",
            card_last4="1234" if is_card else "",
            card_type="visa" if is_card else "",
        )


def get_payment_processor():
    return import_string(settings.STORE_PAYMENT_PROCESSOR)()
