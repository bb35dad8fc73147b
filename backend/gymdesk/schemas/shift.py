"""
gymdesk/schemas/shift.py
Shifts are capacity-bounded class slots. `date` is YYYY-MM-DD and `time` is
HH:MM, both stored as strings so that `date + "T" + time` sorts
chronologically.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


class Shift(BaseModel):
    id: str
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM")
    capacity: int = Field(..., description="Maximum number of booked clients")
    modalityId: str = ""
    bookedClients: List[str] = Field(default_factory=list, description="Booked client ids")
    createdAt: Optional[datetime] = None

    @property
    def sort_key(self) -> str:
        return f"{self.date}T{self.time}"

    @property
    def starts_at(self) -> Optional[datetime]:
        try:
            return datetime.strptime(self.sort_key, f"{DATE_FORMAT}T{TIME_FORMAT}")
        except ValueError:
            return None

    @property
    def spots_left(self) -> int:
        return max(self.capacity - len(self.bookedClients), 0)


class ShiftView(BaseModel):
    """What a client sees of a shift: no roster, only its own booking."""
    id: str
    date: str
    time: str
    capacity: int
    spotsLeft: int
    modalityId: str
    modalityName: Optional[str] = None
    booked: bool = False
