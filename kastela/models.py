"""Typed input shapes for Kastela operations.

Callers use the camelCase names of the Kastela API (``vaultID``,
``primaryKeys``, ...). Field names here are the snake_case names sent on
the wire, so ``to_wire`` is a plain dump. Snake_case names are accepted
on input as well.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


def _alias(camel: str, snake: str):
    return Field(validation_alias=AliasChoices(camel, snake))


class EncryptionMode(str, Enum):
    """Symmetric and asymmetric modes accepted by crypto encrypt."""
    AES_GCM = "AES_GCM"
    CHACHA20_POLY1305 = "CHACHA20_POLY1305"
    XCHACHA20_POLY1305 = "XCHACHA20_POLY1305"
    RSA_OAEP = "RSA_OAEP"


class HashMode(str, Enum):
    """Keyed hash modes accepted by crypto HMAC."""
    BLAKE2B_256 = "BLAKE2B_256"
    BLAKE2B_512 = "BLAKE2B_512"
    SHA256 = "SHA256"
    SHA512 = "SHA512"
    SHA3_256 = "SHA3_256"
    SHA3_512 = "SHA3_512"


class SecureOperation(str, Enum):
    """Operation window a secure credential is issued for."""
    READ = "READ"
    WRITE = "WRITE"


class KastelaModel(BaseModel):
    """Base for all input shapes."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# =============================================================================
# Vault
# =============================================================================

class VaultStoreInput(KastelaModel):
    vault_id: str = _alias("vaultID", "vault_id")
    values: list[Any]


class VaultFetchInput(KastelaModel):
    """Search a vault by its indexed column, with optional pagination."""
    vault_id: str = _alias("vaultID", "vault_id")
    search: Any
    size: Optional[int] = None
    after: Optional[str] = None


class VaultCountInput(KastelaModel):
    vault_id: str = _alias("vaultID", "vault_id")
    search: Any


class VaultGetInput(KastelaModel):
    vault_id: str = _alias("vaultID", "vault_id")
    tokens: list[str]


class VaultUpdateValue(KastelaModel):
    token: str
    value: Any


class VaultUpdateInput(KastelaModel):
    vault_id: str = _alias("vaultID", "vault_id")
    values: list[VaultUpdateValue]


class VaultDeleteInput(KastelaModel):
    vault_id: str = _alias("vaultID", "vault_id")
    tokens: list[str]


# =============================================================================
# Protection
# =============================================================================

class ProtectionSealInput(KastelaModel):
    protection_id: str = _alias("protectionID", "protection_id")
    primary_keys: list[Any] = _alias("primaryKeys", "primary_keys")


class ProtectionOpenInput(KastelaModel):
    protection_id: str = _alias("protectionID", "protection_id")
    tokens: list[Any]


class ProtectionTokenizeInput(KastelaModel):
    protection_id: str = _alias("protectionID", "protection_id")
    values: list[Any]


class ProtectionFetchInput(KastelaModel):
    """Search protected rows by value, with optional pagination."""
    protection_id: str = _alias("protectionID", "protection_id")
    search: Any
    size: Optional[int] = None
    after: Optional[str] = None


class ProtectionCountInput(KastelaModel):
    protection_id: str = _alias("protectionID", "protection_id")
    search: Any


# =============================================================================
# Secure credentials
# =============================================================================

class SecureProtectionInitInput(KastelaModel):
    """Request a credential for a protection operation window.

    ``ttl`` is the credential lifetime in minutes.
    """
    operation: SecureOperation
    protection_ids: list[str] = _alias("protectionIDs", "protection_ids")
    ttl: int = Field(gt=0)


class SecureVaultInitInput(KastelaModel):
    """Request a credential for a vault operation window.

    ``ttl`` is the credential lifetime in minutes.
    """
    operation: SecureOperation
    vault_ids: list[str] = _alias("vaultIDs", "vault_ids")
    ttl: int = Field(gt=0)


# =============================================================================
# Crypto
# =============================================================================

class CryptoEncryptInput(KastelaModel):
    key_id: str = _alias("keyID", "key_id")
    mode: EncryptionMode
    plaintexts: list[Any]


class CryptoHMACInput(KastelaModel):
    key_id: str = _alias("keyID", "key_id")
    mode: HashMode
    values: list[Any]


class CryptoSignInput(KastelaModel):
    key_id: str = _alias("keyID", "key_id")
    values: list[Any]


class CryptoVerifyInput(KastelaModel):
    values: list[Any]
    signatures: list[str]


# =============================================================================
# Privacy proxy
# =============================================================================

def _default_common() -> dict[str, Any]:
    return {"protections": {}, "vaults": {}}


class ProxyInput(KastelaModel):
    """
    Request the server to call ``url`` on the caller's behalf.

    ``common`` maps payload fields to protection ids (``protections``)
    and to ``[vault_id, column]`` pairs (``vaults``). ``options`` may hold
    ``headers``, ``params``, ``body``, ``query`` and ``rootTag``. Both are
    forwarded untouched.
    """
    type: Literal["json", "xml"]
    url: str
    method: str
    common: dict[str, Any] = Field(default_factory=_default_common)
    options: dict[str, Any] = Field(default_factory=dict)
