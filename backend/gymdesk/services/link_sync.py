# gymdesk/services/link_sync.py
from __future__ import annotations

import logging

from gymdesk.core.errors import GymDeskError
from gymdesk.services.association import AssociationResolver
from gymdesk.store.base import DocumentStore

logger = logging.getLogger("gymdesk.link_sync")


def reconcile_account_links_once(store: DocumentStore) -> int:
    """
    Scheduled job: repair the account-link index from the client rosters.
    Returns the number of index documents changed (0 when the run failed).
    """
    try:
        return AssociationResolver(store).reconcile()
    except GymDeskError as exc:
        # the next run starts from scratch, nothing to resume
        logger.warning("Account link reconciliation skipped: %s", exc.message)
        return 0
