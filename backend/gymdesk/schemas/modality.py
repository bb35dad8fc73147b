"""
gymdesk/schemas/modality.py
A modality is a named, priced offering of one gym ("Crossfit 3x/week").
Shifts and client subscriptions point at it by id.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class Modality(BaseModel):
    id: str
    name: str
    price: float
    description: str = ""
    createdAt: Optional[datetime] = None
