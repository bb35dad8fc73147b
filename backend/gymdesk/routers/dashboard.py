"""
Admin dashboard.

### GET /admin/dashboard
`totalClients`, `totalShifts`, `totalIncome` (sum of every payment ever
recorded), `overdueClients` (clients overdue this month) and the next five
`upcomingShifts`. Recomputed from the full collections on every call.
"""
from fastapi import APIRouter, Depends, Request

from gymdesk.core.deps import get_app_settings, get_store
from gymdesk.core.security import get_current_admin
from gymdesk.schemas.account import Account
from gymdesk.schemas.dashboard import DashboardSummary
from gymdesk.services.dashboard import DashboardService

admin_router = APIRouter(tags=["Admin: Dashboard"], dependencies=[Depends(get_current_admin)])


@admin_router.get("/dashboard", response_model=DashboardSummary)
def get_dashboard(request: Request, admin: Account = Depends(get_current_admin)):
    service = DashboardService(get_store(request), admin.id, due_day=get_app_settings(request).due_day)
    return service.summary()
