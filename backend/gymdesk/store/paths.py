"""
Collection and document paths.

    accounts/{accountId}                    account registry
    accounts/{accountId}/settings/brand     admin branding
    account_links/{accountId}               account -> (tenant, client) index
    tenants/{tenantId}/{collection}         tenant scoped data
"""
ACCOUNTS = "accounts"
ACCOUNT_LINKS = "account_links"

MODALITIES = "modalities"
SHIFTS = "shifts"
CLIENTS = "clients"
PAYMENTS = "payments"


def tenant_collection(tenant_id: str, name: str) -> str:
    return f"tenants/{tenant_id}/{name}"


def document(collection: str, doc_id: str) -> str:
    return f"{collection}/{doc_id}"


def account(account_id: str) -> str:
    return document(ACCOUNTS, account_id)


def brand_settings(account_id: str) -> str:
    return f"{account(account_id)}/settings/brand"


def account_link(account_id: str) -> str:
    return document(ACCOUNT_LINKS, account_id)
