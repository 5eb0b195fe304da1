from enum import Enum


class PaymentMethod(str, Enum):

    cash = "cash"
    credit_card = "credit_card"
    debit_card = "debit_card"
    bank_transfer = "bank_transfer"
    online_payment = "online_payment"
    voucher = "voucher"


class PaymentStatus(str, Enum):

    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"
    partially_refunded = "partially_refunded"


# pending -> {completed, failed} -> {refunded, partially_refunded}
PAYMENT_TRANSITIONS = {
    PaymentStatus.pending: {PaymentStatus.completed, PaymentStatus.failed},
    PaymentStatus.completed: {PaymentStatus.refunded, PaymentStatus.partially_refunded},
    PaymentStatus.failed: set(),
    PaymentStatus.refunded: set(),
    PaymentStatus.partially_refunded: set(),
}

# Money that actually reached the hotel at some point
COLLECTED_STATUSES = (
    PaymentStatus.completed.value,
    PaymentStatus.refunded.value,
    PaymentStatus.partially_refunded.value,
)


def can_transition(current: str, target: PaymentStatus) -> bool:
    try:
        return target in PAYMENT_TRANSITIONS[PaymentStatus(current)]
    except ValueError:
        return False


class ReportType(str, Enum):

    occupancy = "occupancy"
    financial = "financial"
    guest = "guest"
    comprehensive = "comprehensive"
