"""
Admin settings: the gym's brand image shown in the client app.
Stored at `accounts/{adminId}/settings/brand` as `{imageUrl}`.
"""
from fastapi import APIRouter, Depends, Form, Request

from gymdesk.core.deps import get_store
from gymdesk.core.security import get_current_admin
from gymdesk.schemas.account import Account, BrandSettings
from gymdesk.services.accounts import AccountRegistry

admin_router = APIRouter(prefix="/settings", tags=["Admin: Settings"], dependencies=[Depends(get_current_admin)])


@admin_router.get("/brand", response_model=BrandSettings)
def get_brand(request: Request, admin: Account = Depends(get_current_admin)):
    return BrandSettings(imageUrl=AccountRegistry(get_store(request)).get_brand_image(admin.id))


@admin_router.put("/brand", response_model=BrandSettings)
def set_brand(
    request: Request,
    image_url: str = Form("", description="Public URL of the logo; empty clears it"),
    admin: Account = Depends(get_current_admin),
):
    return AccountRegistry(get_store(request)).set_brand_image(admin.id, image_url)
