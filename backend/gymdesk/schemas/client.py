"""
gymdesk/schemas/client.py
Gym members on an admin's roster.

| Field             | Type            | Notes |
|-------------------|-----------------|-------|
| name              | `str`           | required, non-empty |
| phone             | `str`           | optional |
| email             | `str`           | optional |
| associatedUserUid | `str` / `null`  | account that may sign in as this client |
| currentModalityId | `str` / `null`  | subscribed modality |
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from gymdesk.schemas.payment import MembershipStatus


class Client(BaseModel):
    id: str
    name: str
    phone: Optional[str] = ""
    email: Optional[str] = ""
    associatedUserUid: Optional[str] = None
    currentModalityId: Optional[str] = None
    createdAt: Optional[datetime] = None


class ClientCreate(BaseModel):
    # name is checked by the directory so the error shape matches other validation errors
    name: Optional[str] = Field(None, description="Full name")
    phone: Optional[str] = Field("", description="Phone number")
    email: Optional[str] = Field("", description="E-mail")
    associatedUserUid: Optional[str] = Field(None, description="Account id to link")


class ClientUpdate(BaseModel):
    """All optional; only the fields sent are written."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    associatedUserUid: Optional[str] = None
    currentModalityId: Optional[str] = None


class ClientWithStatus(Client):
    paymentStatus: MembershipStatus
