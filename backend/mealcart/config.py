"""
mealcart/config.py - Application configuration and Firestore bootstrap.

This module defines a pydantic-settings `Settings` class that loads configuration from the
environment (or a `.env` file), plus `init_firestore()` which initializes the Firebase Admin SDK
and returns a Firestore client. Nothing connects at import time: `mealcart.main` calls
`init_firestore()` once on startup and hands the client to the cart repository.
"""
import logging
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("mealcart.config")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

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

    firebase_collection_prefix: str = ""
    carts_collection: str = "carts"

    default_price: float = 14.99
    tax_rate: float = 0.1

    allowed_origins: str = "*"  # Comma-separated list or '*' for all
    port: int = 8000
    log_level: str = "INFO"
    empty_cart_sweep_minutes: int = 0  # 0 disables the sweep

    @property
    def carts_collection_name(self) -> str:
        """Carts collection name with FIREBASE_COLLECTION_PREFIX applied."""
        prefix = (self.firebase_collection_prefix or "").strip()
        return f"{prefix}{self.carts_collection}" if prefix else self.carts_collection

    @property
    def origins(self) -> list[str]:
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    def _inline_credentials(self) -> Optional[dict]:
        fields = [
            self.firebase_private_key_id,
            self.firebase_private_key,
            self.firebase_client_email,
            self.firebase_client_id,
            self.firebase_auth_uri,
            self.firebase_token_uri,
            self.firebase_auth_provider_x509_cert_url,
            self.firebase_client_x509_cert_url,
        ]
        if not all(fields):
            return None
        return {
            "type": "service_account",
            "project_id": self.firebase_project_id,
            "private_key_id": self.firebase_private_key_id,
            # Cloud Run secrets usually carry the key with escaped newlines
            "private_key": self.firebase_private_key.replace("\\n", "\n"),
            "client_email": self.firebase_client_email,
            "client_id": self.firebase_client_id,
            "auth_uri": self.firebase_auth_uri,
            "token_uri": self.firebase_token_uri,
            "auth_provider_x509_cert_url": self.firebase_auth_provider_x509_cert_url,
            "client_x509_cert_url": self.firebase_client_x509_cert_url,
        }


# Load settings from environment (.env file, etc.)
settings = Settings()


def init_firestore(cfg: Settings = settings):
    """
    Initialize the Firebase Admin SDK (once per process) and return a Firestore client.
    Inline credentials win over the service account file when all of them are set.
    """
    try:
        firebase_app = firebase_admin.get_app()
    except ValueError:
        cred_dict = cfg._inline_credentials()
        if cred_dict is not None:
            cred = credentials.Certificate(cred_dict)
        else:
            cred = credentials.Certificate(cfg.firebase_cred_file)
        options = {"projectId": cfg.firebase_project_id} if cfg.firebase_project_id else None
        firebase_app = firebase_admin.initialize_app(cred, options)
        logger.info("Firebase app initialized for project %s", cfg.firebase_project_id or "<from credentials>")
    return firestore.client(firebase_app)
