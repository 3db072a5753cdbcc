"""
Credential Service

Persists the bearer token used to authenticate video API requests.
"""

from .credential_store import CredentialStore

__all__ = ["CredentialStore"]
