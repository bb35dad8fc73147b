# gymdesk/services/modalities.py
from __future__ import annotations

import logging
from typing import List, Optional

from gymdesk.core.errors import NotFound, ReferentialConflict
from gymdesk.schemas.modality import Modality
from gymdesk.services.validation import optional_text, positive_number, required_text
from gymdesk.store import paths
from gymdesk.store.base import DocumentStore

logger = logging.getLogger("gymdesk.modalities")


class ModalityCatalog:
    """Priced offerings of one tenant."""

    def __init__(self, store: DocumentStore, tenant_id: str) -> None:
        self._store = store
        self.tenant_id = tenant_id
        self._collection = paths.tenant_collection(tenant_id, paths.MODALITIES)

    def _path(self, modality_id: str) -> str:
        return paths.document(self._collection, modality_id)

    def list_modalities(self) -> List[Modality]:
        items = [Modality(**d.to_dict()) for d in self._store.query(self._collection)]
        items.sort(key=lambda m: m.name.lower())
        return items

    def get_modality(self, modality_id: str) -> Modality:
        return Modality(**self._store.get(self._path(modality_id)).to_dict())

    def exists(self, modality_id: Optional[str]) -> bool:
        if not modality_id:
            return False
        try:
            self._store.get(self._path(modality_id))
        except NotFound:
            return False
        return True

    def add_modality(self, name, price, description=None) -> Modality:
        fields = {
            "name": required_text(name, "name"),
            "price": positive_number(price, "price"),
            "description": optional_text(description),
        }
        modality_id = self._store.create(self._collection, fields)
        logger.info("Tenant %s added modality %s", self.tenant_id, modality_id)
        return self.get_modality(modality_id)

    def update_modality(self, modality_id: str, name, price, description=None) -> Modality:
        fields = {
            "name": required_text(name, "name"),
            "price": positive_number(price, "price"),
        }
        if description is not None:
            fields["description"] = optional_text(description)
        self._store.update(self._path(modality_id), fields)
        return self.get_modality(modality_id)

    def delete_modality(self, modality_id: str) -> None:
        """Refuses while any shift still uses the modality."""
        shifts = self._store.query(
            paths.tenant_collection(self.tenant_id, paths.SHIFTS),
            [("modalityId", "==", modality_id)],
        )
        if shifts:
            raise ReferentialConflict(
                "The modality is used by existing shifts; edit or delete those shifts first",
                modality_id,
                [s.id for s in shifts],
            )
        self._store.delete(self._path(modality_id))
        logger.info("Tenant %s deleted modality %s", self.tenant_id, modality_id)
