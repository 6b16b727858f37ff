"""Tests for the asynchronous AsyncClient."""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from kastela.async_client import AsyncClient
from kastela.errors import ServerError, TransportError, ValidationError, VersionMismatchError

from conftest import TEST_SERVER_URL, make_async_response, sent_json, sent_url


@pytest.fixture
def async_client(stub_tls):
    return AsyncClient(TEST_SERVER_URL, "ca.crt", "client.crt", "client.key")


class TestAsyncClient:
    """Dispatcher behavior of the async client."""

    @pytest.mark.asyncio
    async def test_store_returns_tokens(self, async_client):
        mock_request = AsyncMock(return_value=make_async_response(json_body={"tokens": [["t1", "t2"]]}))

        async with async_client:
            with patch.object(async_client._client, "request", mock_request):
                tokens = await async_client.vault_store({"vaultID": "v1", "values": ["a", "b"]})

        assert tokens == ["t1", "t2"]
        assert sent_url(mock_request) == f"{TEST_SERVER_URL}/api/vault/store"
        assert sent_json(mock_request) == [{"vault_id": "v1", "values": ["a", "b"]}]

    @pytest.mark.asyncio
    async def test_store_flat_tokens_returned_unchanged(self, async_client):
        mock_request = AsyncMock(return_value=make_async_response(json_body={"tokens": ["t1", "t2"]}))

        async with async_client:
            with patch.object(async_client._client, "request", mock_request):
                tokens = await async_client.vault_store({"vaultID": "v1", "values": ["a", "b"]})

        assert tokens == ["t1", "t2"]

    @pytest.mark.asyncio
    async def test_version_mismatch(self, async_client):
        mock_request = AsyncMock(return_value=make_async_response(json_body={"tokens": ["t1"]}, version="v1.0.0"))

        with patch.object(async_client._client, "request", mock_request):
            with pytest.raises(VersionMismatchError) as exc_info:
                await async_client.vault_fetch({"vaultID": "v1", "search": "x"})

        assert "v0.2" in str(exc_info.value)
        assert "v1.0.0" in str(exc_info.value)
        await async_client.close()

    @pytest.mark.asyncio
    async def test_structured_error(self, async_client):
        mock_request = AsyncMock(return_value=make_async_response(400, json_body={"error": "X"}))

        with patch.object(async_client._client, "request", mock_request):
            with pytest.raises(ServerError) as exc_info:
                await async_client.protection_open({"protectionID": "p1", "tokens": ["t1"]})

        assert str(exc_info.value) == "X"
        await async_client.close()

    @pytest.mark.asyncio
    async def test_plain_text_error(self, async_client):
        mock_request = AsyncMock(return_value=make_async_response(500, text="Y"))

        with patch.object(async_client._client, "request", mock_request):
            with pytest.raises(ServerError) as exc_info:
                await async_client.crypto_hmac({"keyID": "k1", "mode": "SHA256", "values": ["a"]})

        assert str(exc_info.value) == "Y"
        await async_client.close()

    @pytest.mark.asyncio
    async def test_transport_fault(self, async_client):
        fault = httpx.ConnectError("connection refused")
        mock_request = AsyncMock(side_effect=fault)

        with patch.object(async_client._client, "request", mock_request):
            with pytest.raises(TransportError) as exc_info:
                await async_client.secure_protection_commit("cred")

        assert str(exc_info.value) == "connection refused"
        assert exc_info.value.__cause__ is fault
        await async_client.close()

    @pytest.mark.asyncio
    async def test_xml_proxy_without_root_tag(self, async_client):
        mock_request = AsyncMock()

        with patch.object(async_client._client, "request", mock_request):
            with pytest.raises(ValidationError):
                await async_client.privacy_proxy({"type": "xml", "url": "https://x", "method": "post"})

        assert mock_request.await_count == 0
        await async_client.close()

    @pytest.mark.asyncio
    async def test_sentinel_version_and_empty_body(self, async_client):
        mock_request = AsyncMock(return_value=make_async_response(version="v0.0.0"))

        with patch.object(async_client._client, "request", mock_request):
            result = await async_client.vault_delete({"vaultID": "v1", "tokens": ["t1"]})

        assert result is None
        assert sent_json(mock_request) == [{"vault_id": "v1", "tokens": ["t1"]}]
        await async_client.close()

    @pytest.mark.asyncio
    async def test_concurrent_calls_are_independent(self, async_client):
        responses = {
            "/api/vault/count": make_async_response(json_body={"count": 1}),
            "/api/protection/count": make_async_response(json_body={"count": 2}),
        }

        async def fake_request(method, url, **kwargs):
            await asyncio.sleep(0)
            return responses[url[len(TEST_SERVER_URL):]]

        with patch.object(async_client._client, "request", side_effect=fake_request):
            vault, protection = await asyncio.gather(
                async_client.vault_count({"vaultID": "v1", "search": "x"}),
                async_client.protection_count({"protectionID": "p1", "search": "y"}),
            )

        assert (vault, protection) == (1, 2)
        await async_client.close()
