"""
Kastela SDK - Python client for the Kastela data protection server.

Usage:
    from kastela import Client

    client = Client(
        "https://127.0.0.1:3201",
        ca_cert="./ca.crt",
        client_cert="./client.crt",
        client_key="./client.key",
    )

    # Vault
    tokens = client.vault_store({"vaultID": "users", "values": [{"name": "jane doe"}]})
    values = client.vault_get({"vaultID": "users", "tokens": tokens})

    # Protection
    client.protection_seal({"protectionID": "user-email", "primaryKeys": [1, 2, 3]})
    emails = client.protection_open({"protectionID": "user-email", "tokens": ["..."]})

Every call is one request. Failures raise a KastelaError subclass.
"""

__version__ = "0.2.0"

from kastela.client import Client
from kastela.errors import (
    KastelaError,
    ServerError,
    TransportError,
    UnsupportedOperationError,
    ValidationError,
    VersionMismatchError,
)
from kastela.models import EncryptionMode, HashMode, SecureOperation
from kastela.revisions import BATCHED, DEFAULT_REVISION, PER_RESOURCE, Revision
from kastela.version import satisfies

__all__ = [
    # Client
    "Client",
    # Errors
    "KastelaError",
    "ServerError",
    "TransportError",
    "UnsupportedOperationError",
    "ValidationError",
    "VersionMismatchError",
    # Shapes
    "EncryptionMode",
    "HashMode",
    "SecureOperation",
    # Revisions
    "Revision",
    "BATCHED",
    "PER_RESOURCE",
    "DEFAULT_REVISION",
    "satisfies",
]

# Async client available if httpx is installed
try:
    from kastela.async_client import AsyncClient
    __all__.append("AsyncClient")
except ImportError:
    pass
