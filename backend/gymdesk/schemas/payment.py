"""
gymdesk/schemas/payment.py
Membership payments. A payment is tagged with the month it pays for
(`paymentMonth`/`paymentYear`), which is unrelated to when it was recorded.
"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class MembershipStatus(str, Enum):
    paid = "paid"
    pending = "pending"
    overdue = "overdue"


class Payment(BaseModel):
    id: str
    clientId: str
    amount: float
    paymentMonth: int
    paymentYear: int
    recordedAt: Optional[datetime] = None


class PaymentStatusOut(BaseModel):
    clientId: str
    month: int
    year: int
    status: MembershipStatus
