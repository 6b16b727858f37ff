"""
Asynchronous Kastela API client.

Shares request shaping and response handling with the sync client.
"""

import logging
from typing import Any, Optional, Union

import httpx

from kastela import endpoints
from kastela._tls import TLSMaterial, build_ssl_context
from kastela._wire import Call, handle_response
from kastela.config import KastelaSettings, get_settings
from kastela.errors import TransportError
from kastela.revisions import DEFAULT_REVISION, Revision, get_revision

logger = logging.getLogger(__name__)


class AsyncClient:
    """
    Asynchronous client for the Kastela API.

    Use this for async applications (FastAPI, aiohttp, etc.)

    Example:
        async with AsyncClient(server_url, ca_cert, client_cert, client_key) as client:
            values = await client.protection_open({"protectionID": "pii", "tokens": ["t1"]})
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
        Initialize the async client.

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

        client_kwargs: dict[str, Any] = {}
        if timeout is not None:
            client_kwargs["timeout"] = timeout

        self._client = httpx.AsyncClient(
            headers={
                "Content-Type": "application/json",
                "User-Agent": f"kastela-sdk-python-async/{__import__('kastela').__version__}",
            },
            verify=build_ssl_context(ca_cert, client_cert, client_key),
            **client_kwargs,
        )

    @classmethod
    def from_settings(cls, settings: Optional[KastelaSettings] = None) -> "AsyncClient":
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

    # Vault

    async def vault_store(self, data) -> list:
        """Store values, returning their tokens. See ``Client.vault_store``."""
        return await self._request(endpoints.vault_store(self.revision, data))

    async def vault_fetch(self, data) -> list[str]:
        """Search a vault by its indexed column. See ``Client.vault_fetch``."""
        return await self._request(endpoints.vault_fetch(self.revision, data))

    async def vault_count(self, data) -> int:
        return await self._request(endpoints.vault_count(self.revision, data))

    async def vault_get(self, data) -> list:
        return await self._request(endpoints.vault_get(self.revision, data))

    async def vault_update(self, data) -> None:
        await self._request(endpoints.vault_update(self.revision, data))

    async def vault_delete(self, data) -> None:
        await self._request(endpoints.vault_delete(self.revision, data))

    # Protection

    async def protection_seal(self, data) -> None:
        await self._request(endpoints.protection_seal(self.revision, data))

    async def protection_open(self, data) -> list:
        """Decrypt protected values by token. See ``Client.protection_open``."""
        return await self._request(endpoints.protection_open(self.revision, data))

    async def protection_tokenize(self, data) -> list:
        return await self._request(endpoints.protection_tokenize(self.revision, data))

    async def protection_fetch(self, data) -> list:
        return await self._request(endpoints.protection_fetch(self.revision, data))

    async def protection_count(self, data) -> int:
        return await self._request(endpoints.protection_count(self.revision, data))

    # Secure credentials

    async def secure_protection_init(self, data) -> str:
        """Start a secure protection operation window and return its credential."""
        return await self._request(endpoints.secure_protection_init(self.revision, data))

    async def secure_protection_commit(self, credential: str) -> None:
        await self._request(endpoints.secure_protection_commit(self.revision, credential))

    async def secure_vault_init(self, data) -> str:
        return await self._request(endpoints.secure_vault_init(self.revision, data))

    async def secure_vault_commit(self, credential: str) -> None:
        await self._request(endpoints.secure_vault_commit(self.revision, credential))

    # Crypto

    async def crypto_encrypt(self, data) -> list[str]:
        return await self._request(endpoints.crypto_encrypt(self.revision, data))

    async def crypto_decrypt(self, ciphertexts: list[str]) -> list:
        return await self._request(endpoints.crypto_decrypt(self.revision, ciphertexts))

    async def crypto_hmac(self, data) -> list[str]:
        return await self._request(endpoints.crypto_hmac(self.revision, data))

    async def crypto_equal(self, values: list) -> list[bool]:
        return await self._request(endpoints.crypto_equal(self.revision, values))

    async def crypto_sign(self, data) -> list[str]:
        return await self._request(endpoints.crypto_sign(self.revision, data))

    async def crypto_verify(self, data) -> list[bool]:
        return await self._request(endpoints.crypto_verify(self.revision, data))

    # Privacy proxy

    async def privacy_proxy(self, data) -> Any:
        """Proxy a third-party request through the server. See ``Client.privacy_proxy``."""
        return await self._request(endpoints.privacy_proxy(self.revision, data))

    async def _request(self, call: Call) -> Any:
        """Send a call to the server and return its unwrapped result."""
        kwargs: dict[str, Any] = {}
        if call.has_body:
            kwargs["json"] = call.body

        logger.debug(f"Kastela request {call.method} {call.path}")
        try:
            response = await self._client.request(
                call.method,
                f"{self.server_url}{call.path}",
                **kwargs,
            )
        except httpx.RequestError as e:
            logger.debug(f"Kastela request {call.method} {call.path} failed: {e}")
            raise TransportError(str(e)) from e

        return handle_response(response, call, self.revision.expected_version)

    async def close(self):
        """Close the client."""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
