"""
Synchronous Kastela API client.
"""

import logging
from typing import Any, Optional, Union

import requests
from requests.adapters import HTTPAdapter

from kastela import endpoints
from kastela._tls import TLSMaterial, build_ssl_context
from kastela._wire import Call, handle_response
from kastela.config import KastelaSettings, get_settings
from kastela.errors import TransportError
from kastela.revisions import DEFAULT_REVISION, Revision, get_revision

logger = logging.getLogger(__name__)


class _TLSAdapter(HTTPAdapter):
    """Adapter that hands the client SSL context to urllib3."""

    def __init__(self, ssl_context, **kwargs):
        self._ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(self, *args, **kwargs):
        kwargs["ssl_context"] = self._ssl_context
        return super().init_poolmanager(*args, **kwargs)


class Client:
    """
    Synchronous client for the Kastela API.

    Every request is authenticated with mutual TLS. Responses are only
    returned when the server version matches the selected revision.

    Example:
        client = Client(
            "https://127.0.0.1:3201",
            ca_cert="./ca.crt",
            client_cert="./client.crt",
            client_key="./client.key",
        )
        tokens = client.vault_store({"vaultID": "users", "values": [{"name": "jane"}]})
    """

    def __init__(
        self,
        server_url: str,
        ca_cert: TLSMaterial,
        client_cert: TLSMaterial,
        client_key: TLSMaterial,
        revision: Union[Revision, str] = DEFAULT_REVISION,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the client.

        Args:
            server_url: Base URL of the Kastela server
            ca_cert: CA certificate, as a file path or PEM bytes
            client_cert: Client certificate, as a file path or PEM bytes
            client_key: Client private key, as a file path or PEM bytes
            revision: Server API revision, or its version line (e.g. "v0.2")
            timeout: Request timeout in seconds, None for the transport default
        """
        self.server_url = server_url.rstrip("/")
        self.revision = get_revision(revision) if isinstance(revision, str) else revision
        self.timeout = timeout

        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "User-Agent": f"kastela-sdk-python/{__import__('kastela').__version__}",
        })
        self.session.mount(
            "https://",
            _TLSAdapter(build_ssl_context(ca_cert, client_cert, client_key)),
        )

    @classmethod
    def from_settings(cls, settings: Optional[KastelaSettings] = None) -> "Client":
        """Create a client from ``KASTELA_*`` environment settings."""
        settings = settings or get_settings()
        return cls(
            settings.server_url,
            ca_cert=settings.ca_cert,
            client_cert=settings.client_cert,
            client_key=settings.client_key,
            revision=settings.revision,
            timeout=settings.timeout,
        )

    # =========================================================================
    # Vault
    # =========================================================================

    def vault_store(self, data) -> list:
        """
        Store values in one or more vaults.

        Args:
            data: ``{"vaultID": ..., "values": [...]}`` or a list of them

        Returns:
            Tokens for the stored values. A list of token lists when
            ``data`` is a list.

        Example:
            client.vault_store({"vaultID": "users", "values": [{"name": "jane doe"}]})
        """
        return self._request(endpoints.vault_store(self.revision, data))

    def vault_fetch(self, data) -> list[str]:
        """
        Search a vault by its indexed column.

        Args:
            data: ``{"vaultID": ..., "search": ..., "size": ..., "after": ...}``.
                ``size`` and ``after`` are optional pagination parameters.

        Returns:
            Matching vault tokens
        """
        return self._request(endpoints.vault_fetch(self.revision, data))

    def vault_count(self, data) -> int:
        """Count vault rows matching ``{"vaultID": ..., "search": ...}``."""
        return self._request(endpoints.vault_count(self.revision, data))

    def vault_get(self, data) -> list:
        """
        Get vault values by token.

        Args:
            data: ``{"vaultID": ..., "tokens": [...]}`` or a list of them

        Returns:
            Values in token order
        """
        return self._request(endpoints.vault_get(self.revision, data))

    def vault_update(self, data) -> None:
        """
        Replace vault values.

        Args:
            data: ``{"vaultID": ..., "values": [{"token": ..., "value": ...}]}``
                or a list of them
        """
        self._request(endpoints.vault_update(self.revision, data))

    def vault_delete(self, data) -> None:
        """Delete vault values given ``{"vaultID": ..., "tokens": [...]}`` or a list of them."""
        self._request(endpoints.vault_delete(self.revision, data))

    # =========================================================================
    # Protection
    # =========================================================================

    def protection_seal(self, data) -> None:
        """
        Encrypt protected rows by primary key.

        Use after storing or updating the rows.

        Args:
            data: ``{"protectionID": ..., "primaryKeys": [...]}`` or a list of them
        """
        self._request(endpoints.protection_seal(self.revision, data))

    def protection_open(self, data) -> list:
        """
        Decrypt protected values by token.

        Args:
            data: ``{"protectionID": ..., "tokens": [...]}`` or a list of them

        Returns:
            Decrypted values in token order
        """
        return self._request(endpoints.protection_open(self.revision, data))

    def protection_tokenize(self, data) -> list:
        """Tokenize ``{"protectionID": ..., "values": [...]}`` (or a list) and return the tokens."""
        return self._request(endpoints.protection_tokenize(self.revision, data))

    def protection_fetch(self, data) -> list:
        """Search protected rows, returning their primary keys."""
        return self._request(endpoints.protection_fetch(self.revision, data))

    def protection_count(self, data) -> int:
        return self._request(endpoints.protection_count(self.revision, data))

    # =========================================================================
    # Secure credentials
    # =========================================================================

    def secure_protection_init(self, data) -> str:
        """
        Start a secure protection operation window.

        Args:
            data: ``{"operation": "READ" | "WRITE", "protectionIDs": [...], "ttl": minutes}``

        Returns:
            Short-lived credential to pass to the secure operation and commit
        """
        return self._request(endpoints.secure_protection_init(self.revision, data))

    def secure_protection_commit(self, credential: str) -> None:
        """Finalize a secure protection operation window."""
        self._request(endpoints.secure_protection_commit(self.revision, credential))

    def secure_vault_init(self, data) -> str:
        """Start a secure vault operation window, see ``secure_protection_init``."""
        return self._request(endpoints.secure_vault_init(self.revision, data))

    def secure_vault_commit(self, credential: str) -> None:
        self._request(endpoints.secure_vault_commit(self.revision, credential))

    # =========================================================================
    # Crypto
    # =========================================================================

    def crypto_encrypt(self, data) -> list[str]:
        """
        Encrypt values with a server-managed key.

        Args:
            data: ``{"keyID": ..., "mode": EncryptionMode, "plaintexts": [...]}``

        Returns:
            Ciphertexts in input order
        """
        return self._request(endpoints.crypto_encrypt(self.revision, data))

    def crypto_decrypt(self, ciphertexts: list[str]) -> list:
        return self._request(endpoints.crypto_decrypt(self.revision, ciphertexts))

    def crypto_hmac(self, data) -> list[str]:
        """Hash ``{"keyID": ..., "mode": HashMode, "values": [...]}`` with a server-managed key."""
        return self._request(endpoints.crypto_hmac(self.revision, data))

    def crypto_equal(self, values: list) -> list[bool]:
        """
        Compare pairs of ciphertexts or hashes.

        Args:
            values: List of ``(a, b)`` pairs

        Returns:
            One result per pair
        """
        return self._request(endpoints.crypto_equal(self.revision, values))

    def crypto_sign(self, data) -> list[str]:
        return self._request(endpoints.crypto_sign(self.revision, data))

    def crypto_verify(self, data) -> list[bool]:
        """Verify ``{"values": [...], "signatures": [...]}`` pairwise."""
        return self._request(endpoints.crypto_verify(self.revision, data))

    # =========================================================================
    # Privacy proxy
    # =========================================================================

    def privacy_proxy(self, data) -> Any:
        """
        Have the server call a third-party API on the caller's behalf.

        Fields listed in ``common`` are replaced with vault or protection
        data by the server before the request is sent.

        Args:
            data: ``{"type": "json" | "xml", "url": ..., "method": ...,
                "common": {...}, "options": {...}}``. ``options["rootTag"]``
                is required for xml.

        Returns:
            The third-party response body

        Raises:
            ValidationError: If ``rootTag`` is missing for xml
        """
        return self._request(endpoints.privacy_proxy(self.revision, data))

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _request(self, call: Call) -> Any:
        """
        Send a call to the server and return its unwrapped result.

        Raises:
            TransportError: If no response was received
            ServerError: On a non-2xx status
            VersionMismatchError: If the server version is not compatible
        """
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if call.has_body:
            kwargs["json"] = call.body

        logger.debug(f"Kastela request {call.method} {call.path}")
        try:
            response = self.session.request(
                call.method,
                f"{self.server_url}{call.path}",
                **kwargs,
            )
        except requests.RequestException as e:
            logger.debug(f"Kastela request {call.method} {call.path} failed: {e}")
            raise TransportError(str(e)) from e

        return handle_response(response, call, self.revision.expected_version)

    def close(self):
        """Close the client session."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
