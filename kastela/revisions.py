"""
Kastela server API revisions.

A revision pins the server version line the client accepts, whether
the server takes batched request bodies, and the path template of each
operation it exposes.
"""

from dataclasses import dataclass, field
from typing import Mapping
from urllib.parse import quote

from kastela.errors import UnsupportedOperationError


@dataclass(frozen=True)
class Revision:
    """Wire contract of one server API revision."""

    expected_version: str
    batched: bool
    paths: Mapping[str, str] = field(default_factory=dict)

    def supports(self, operation: str) -> bool:
        return operation in self.paths

    def path(self, operation: str, **params: str) -> str:
        """
        Build the request path for an operation.

        Path parameters are percent-quoted before substitution.

        Raises:
            UnsupportedOperationError: If this revision lacks the operation
        """
        try:
            template = self.paths[operation]
        except KeyError:
            raise UnsupportedOperationError(
                f"{operation} is not available for server revision {self.expected_version}"
            ) from None
        quoted = {name: quote(str(value), safe="") for name, value in params.items()}
        return template.format(**quoted)


_SECURE_PROTECTION_PATHS = {
    "secure_protection_init": "/api/secure/protection/init",
    "secure_protection_commit": "/api/secure/protection/commit",
}

PER_RESOURCE = Revision(
    expected_version="v0.1",
    batched=False,
    paths={
        "vault_store": "/api/vault/{vault_id}/store",
        "vault_fetch": "/api/vault/{vault_id}",
        "vault_get": "/api/vault/{vault_id}/get",
        "vault_update": "/api/vault/{vault_id}/{token}",
        "vault_delete": "/api/vault/{vault_id}/{token}",
        "protection_seal": "/api/protection/{protection_id}/seal",
        "protection_open": "/api/protection/{protection_id}/open",
        **_SECURE_PROTECTION_PATHS,
        "privacy_proxy": "/api/proxy",
    },
)

BATCHED = Revision(
    expected_version="v0.2",
    batched=True,
    paths={
        "vault_store": "/api/vault/store",
        "vault_fetch": "/api/vault/fetch",
        "vault_count": "/api/vault/count",
        "vault_get": "/api/vault/get",
        "vault_update": "/api/vault/update",
        "vault_delete": "/api/vault/delete",
        "protection_seal": "/api/protection/seal",
        "protection_open": "/api/protection/open",
        "protection_tokenize": "/api/protection/tokenize",
        "protection_fetch": "/api/protection/fetch",
        "protection_count": "/api/protection/count",
        **_SECURE_PROTECTION_PATHS,
        "secure_vault_init": "/api/secure/vault/init",
        "secure_vault_commit": "/api/secure/vault/commit",
        "crypto_encrypt": "/api/crypto/encrypt",
        "crypto_decrypt": "/api/crypto/decrypt",
        "crypto_hmac": "/api/crypto/hmac",
        "crypto_equal": "/api/crypto/equal",
        "crypto_sign": "/api/crypto/sign",
        "crypto_verify": "/api/crypto/verify",
        "privacy_proxy": "/api/proxy",
    },
)

DEFAULT_REVISION = BATCHED

REVISIONS = {
    PER_RESOURCE.expected_version: PER_RESOURCE,
    BATCHED.expected_version: BATCHED,
}


def get_revision(name: str) -> Revision:
    """Look up a built-in revision by its version line, e.g. ``"v0.2"``."""
    try:
        return REVISIONS[name]
    except KeyError:
        raise ValueError(
            f"Unknown Kastela revision: {name}. Supported: {', '.join(REVISIONS)}"
        ) from None
