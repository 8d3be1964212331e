"""Payment Status Enum"""

from enum import StrEnum


class PaymentStatus(StrEnum):
    NONE = 'NONE'  # local draft, never submitted
    PENDING = 'PENDING'
    PAID = 'PAID'
    FAILED = 'FAILED'
