from typing import List

from pydantic import BaseModel

from gymdesk.schemas.shift import Shift


class DashboardSummary(BaseModel):
    totalClients: int
    totalShifts: int
    totalIncome: float
    overdueClients: int
    upcomingShifts: List[Shift]
