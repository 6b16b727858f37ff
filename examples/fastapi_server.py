#!/usr/bin/env python3
"""
FastAPI Server Example

Exposes Kastela vault and protection operations over a small HTTP API,
using the async client. Any Kastela failure becomes a 500 response
carrying the error message.

Run with: uvicorn fastapi_server:app --port 4000
"""

from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse

from kastela import AsyncClient, KastelaError

client: Optional[AsyncClient] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global client
    client = AsyncClient.from_settings()
    yield
    await client.close()


app = FastAPI(
    title="Kastela FastAPI Example",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(KastelaError)
async def kastela_error_handler(request: Request, exc: KastelaError):
    return PlainTextResponse(str(exc), status_code=500)


@app.post("/vault/{vault_id}/store")
async def vault_store(vault_id: str, values: list[Any]):
    return await client.vault_store({"vaultID": vault_id, "values": values})


@app.get("/vault/{vault_id}")
async def vault_fetch(vault_id: str, search: Optional[str] = None, size: int = 0, after: Optional[str] = None):
    if not search:
        raise HTTPException(status_code=400, detail="search not found in query parameter")
    return await client.vault_fetch({"vaultID": vault_id, "search": search, "size": size, "after": after})


@app.post("/vault/{vault_id}/get")
async def vault_get(vault_id: str, tokens: list[str]):
    return await client.vault_get({"vaultID": vault_id, "tokens": tokens})


@app.put("/vault/{vault_id}/{token}", response_class=PlainTextResponse)
async def vault_update(vault_id: str, token: str, request: Request):
    value = await request.json()
    await client.vault_update({"vaultID": vault_id, "values": [{"token": token, "value": value}]})
    return "OK"


@app.delete("/vault/{vault_id}/{token}", response_class=PlainTextResponse)
async def vault_delete(vault_id: str, token: str):
    await client.vault_delete({"vaultID": vault_id, "tokens": [token]})
    return "OK"


@app.post("/protection/{protection_id}/seal", response_class=PlainTextResponse)
async def protection_seal(protection_id: str, primary_keys: list[Any]):
    await client.protection_seal({"protectionID": protection_id, "primaryKeys": primary_keys})
    return "OK"


@app.post("/protection/{protection_id}/open")
async def protection_open(protection_id: str, tokens: list[Any]):
    return await client.protection_open({"protectionID": protection_id, "tokens": tokens})
