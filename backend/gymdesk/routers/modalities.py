"""
# gymdesk/routers/modalities.py - Modality management (admin)

Modalities are stored per gym under `tenants/{adminId}/modalities/{id}`.

### GET /admin/modalities/
All modalities of the gym, by name.

### POST /admin/modalities/
Form data: `name` (required), `price` (> 0), `description` (optional).

### PUT /admin/modalities/{modality_id}
Same fields. `404` if the modality does not exist.

### DELETE /admin/modalities/{modality_id}
Refused with `409 REFERENTIAL_CONFLICT` while shifts still use the modality;
edit or delete those shifts first.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, Request, status

from gymdesk.core.deps import get_store
from gymdesk.core.security import get_current_admin
from gymdesk.schemas.account import Account
from gymdesk.schemas.modality import Modality
from gymdesk.services.modalities import ModalityCatalog

admin_router = APIRouter(prefix="/modalities", tags=["Admin: Modalities"], dependencies=[Depends(get_current_admin)])


def _catalog(request: Request, admin: Account = Depends(get_current_admin)) -> ModalityCatalog:
    return ModalityCatalog(get_store(request), admin.id)


@admin_router.get("/", response_model=List[Modality])
def list_modalities(catalog: ModalityCatalog = Depends(_catalog)):
    return catalog.list_modalities()


@admin_router.post("/", response_model=Modality, status_code=status.HTTP_201_CREATED)
def create_modality(
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    catalog: ModalityCatalog = Depends(_catalog),
):
    return catalog.add_modality(name, price, description)


@admin_router.put("/{modality_id}", response_model=Modality)
def update_modality(
    modality_id: str,
    name: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    catalog: ModalityCatalog = Depends(_catalog),
):
    return catalog.update_modality(modality_id, name, price, description)


@admin_router.delete("/{modality_id}")
def delete_modality(modality_id: str, catalog: ModalityCatalog = Depends(_catalog)):
    catalog.delete_modality(modality_id)
    return {"detail": "Modality deleted"}
