"""
gymdesk/schemas/account.py
Accounts, roles and the auth responses.

The first account ever registered becomes `admin` (a gym owner, i.e. a
tenant); every later one is a `client`. The role never changes afterwards.
"""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["admin", "client"]
ADMIN: Role = "admin"
CLIENT: Role = "client"


class Account(BaseModel):
    id: str = Field(..., description="Firebase UID")
    email: Optional[str] = Field(None, description="E-mail (if any)")
    role: Role = Field(..., description="admin | client")
    createdAt: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


class BrandSettings(BaseModel):
    imageUrl: str = Field("", description="Gym logo / banner URL")


class AuthResponse(BaseModel):
    """Token bundle returned by register and login."""
    account: Account
    id_token: str
    refresh_token: str
    expires_in: int  # seconds


class ClientAccount(BaseModel):
    """A client-role account as offered when linking a roster entry."""
    id: str
    email: Optional[str] = None
    linked: bool = Field(False, description="Already carried by a client of some gym")
