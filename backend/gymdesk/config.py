"""
gymdesk/config.py - Application configuration and backend construction.

Settings are loaded from the environment (and `.env`) with pydantic-settings.
`build_store` / `build_identity` create the document store and identity
service the app hands to every request; nothing else in the package creates
Firebase clients.
"""
import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("gymdesk.config")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    store_backend: str = Field("firestore", description="firestore | memory")

    firebase_cred_file: str = "firebase_service_account.json"
    firebase_project_id: Optional[str] = None

    # Firebase credentials from environment variables (for Cloud Run)
    firebase_private_key_id: Optional[str] = None
    firebase_private_key: Optional[str] = None
    firebase_client_email: Optional[str] = None
    firebase_client_id: Optional[str] = None
    firebase_auth_uri: Optional[str] = None
    firebase_token_uri: Optional[str] = None
    firebase_auth_provider_x509_cert_url: Optional[str] = None
    firebase_client_x509_cert_url: Optional[str] = None
    firebase_web_api_key: str = ""

    debug: bool = False
    allowed_origins: str = "*"  # Comma-separated list or '*' for all

    due_day: int = Field(10, ge=1, le=28, description="Last day of the month a membership counts as pending")
    booking_max_attempts: int = Field(3, ge=1, le=10)
    link_reconcile_minutes: int = Field(60, ge=0, description="0 disables the job")

    def model_post_init(self, __context):
        """Validate Firebase Web API Key format when Firestore is used."""
        if self.store_backend not in ("firestore", "memory"):
            raise ValueError("STORE_BACKEND must be 'firestore' or 'memory'")
        if self.store_backend == "firestore" and not self.firebase_web_api_key.startswith("AIza"):
            raise ValueError("FIREBASE_WEB_API_KEY must be a valid Firebase Web API Key starting with 'AIza'")


def init_firebase(settings: Settings):
    """Initialize the Firebase Admin SDK once and return the default app."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    env_creds = [
        settings.firebase_private_key_id,
        settings.firebase_private_key,
        settings.firebase_client_email,
        settings.firebase_client_id,
        settings.firebase_auth_uri,
        settings.firebase_token_uri,
        settings.firebase_auth_provider_x509_cert_url,
        settings.firebase_client_x509_cert_url,
    ]
    if all(env_creds):
        cred = credentials.Certificate({
            "type": "service_account",
            "project_id": settings.firebase_project_id,
            "private_key_id": settings.firebase_private_key_id,
            # Cloud Run secrets arrive with escaped newlines
            "private_key": settings.firebase_private_key.replace("\\n", "\n"),
            "client_email": settings.firebase_client_email,
            "client_id": settings.firebase_client_id,
            "auth_uri": settings.firebase_auth_uri,
            "token_uri": settings.firebase_token_uri,
            "auth_provider_x509_cert_url": settings.firebase_auth_provider_x509_cert_url,
            "client_x509_cert_url": settings.firebase_client_x509_cert_url,
        })
    else:
        # Use service account file (local development)
        cred = credentials.Certificate(settings.firebase_cred_file)

    options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
    app = firebase_admin.initialize_app(cred, options)
    logger.info("Firebase initialized for project %s", app.project_id)
    return app


def build_store(settings: Settings):
    if settings.store_backend == "memory":
        from gymdesk.store.memory import InMemoryDocumentStore
        logger.warning("Using the in-memory document store; data is lost on restart")
        return InMemoryDocumentStore()

    from gymdesk.store.firestore import FirestoreDocumentStore
    init_firebase(settings)
    return FirestoreDocumentStore(firestore.client())


def build_identity(settings: Settings):
    from gymdesk.core.identity import FirebaseIdentityService
    return FirebaseIdentityService(settings.firebase_web_api_key)


# Load settings from environment (.env file, etc.)
settings = Settings()
