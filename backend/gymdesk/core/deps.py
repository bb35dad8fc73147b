"""
Request-scoped access to the backends and settings the app was built with.

`create_app` puts the store, the identity service and the settings on
`app.state`; tests build the app with fakes instead of patching globals.
"""
from fastapi import Request

from gymdesk.config import Settings
from gymdesk.store.base import DocumentStore


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_identity(request: Request):
    return request.app.state.identity


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings
