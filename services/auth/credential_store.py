"""Bearer token storage."""

import logging
from typing import Optional

from core.config import get_config
from core.storage import KeyValueStore

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Holds the API bearer token in persistent storage.

    The token is set once by the login flow and read on every outbound call.
    There is no validation, expiry or refresh.
    """

    def __init__(self, store: KeyValueStore, key: Optional[str] = None):
        self.store = store
        self.key = key or get_config().storage.token_key

    def get(self) -> Optional[str]:
        """Return the stored token, or None when unset."""
        return self.store.get(self.key)

    def set(self, token: str):
        """Store the token, overwriting any previous value."""
        self.store.set(self.key, token)
        logger.debug("Bearer token updated")

    def auth_headers(self) -> dict[str, str]:
        """Authorization header for the current token."""
        token = self.get()
        if not token:
            logger.warning("No bearer token stored; request will be unauthenticated")
        return {"Authorization": f"Bearer {token or ''}"}
