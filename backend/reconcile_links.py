#!/usr/bin/env python3
"""
Rebuild the account_links index from every gym's client roster, or show which
gym and client a single account resolves to.

Usage:
    python reconcile_links.py              # repair the whole index
    python reconcile_links.py <account_id> # resolve one account
"""
import sys

from dotenv import load_dotenv

load_dotenv()

from gymdesk.config import build_store, settings  # noqa: E402
from gymdesk.core.errors import NotAssociated  # noqa: E402
from gymdesk.core.logging import setup_logging  # noqa: E402
from gymdesk.services.association import AssociationResolver  # noqa: E402


def main(argv) -> int:
    setup_logging(settings.debug)
    store = build_store(settings)
    resolver = AssociationResolver(store)

    if len(argv) > 2:
        print("Usage: python reconcile_links.py [account_id]")
        return 1

    if len(argv) == 2:
        account_id = argv[1]
        try:
            association = resolver.resolve(account_id)
        except NotAssociated:
            print(f"Account {account_id} is not linked to any client")
            return 1
        client = association.client
        print(f"Account {account_id} -> tenant {association.tenant_id}, client {client.id} ({client.name})")
        return 0

    changed = resolver.reconcile()
    print(f"Account link index reconciled, {changed} entries changed")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))
