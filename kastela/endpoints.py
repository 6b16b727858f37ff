"""
Request shaping for every Kastela operation.

Each function turns a typed input into a ``Call`` for the given server
revision. It never touches the network, so the sync and async clients
share it. All input validation happens here, before a request exists.

Batch operations take one item or a list of items. The batched
revision sends a list either way and unwraps the result for a single
item. The per-resource revision addresses one resource in the path, so
it accepts a single item only.
"""

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar
from urllib.parse import urlencode

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from kastela._wire import Call, discard
from kastela.errors import KastelaError, UnsupportedOperationError, ValidationError
from kastela.models import (
    CryptoEncryptInput,
    CryptoHMACInput,
    CryptoSignInput,
    CryptoVerifyInput,
    KastelaModel,
    ProtectionCountInput,
    ProtectionFetchInput,
    ProtectionOpenInput,
    ProtectionSealInput,
    ProtectionTokenizeInput,
    ProxyInput,
    SecureProtectionInitInput,
    SecureVaultInitInput,
    VaultCountInput,
    VaultDeleteInput,
    VaultFetchInput,
    VaultGetInput,
    VaultStoreInput,
    VaultUpdateInput,
)
from kastela.revisions import Revision

M = TypeVar("M", bound=KastelaModel)

_STRINGS = TypeAdapter(list[str])
_PAIRS = TypeAdapter(list[tuple[Any, Any]])


# =============================================================================
# Helpers
# =============================================================================

def _check(revision: Revision, operation: str) -> None:
    if not revision.supports(operation):
        raise UnsupportedOperationError(
            f"{operation} is not available for server revision {revision.expected_version}"
        )


def _validate(validator, data: Any, what: str):
    try:
        if isinstance(validator, TypeAdapter):
            return validator.validate_python(data)
        return validator.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"invalid {what}: {e}") from e


def _coerce(model: type[M], data: Any) -> M:
    """Accept a model instance or a camelCase mapping."""
    if isinstance(data, model):
        return data
    if isinstance(data, BaseModel):
        raise ValidationError(
            f"expected {model.__name__}, got {type(data).__name__}"
        )
    return _validate(model, data, model.__name__)


def _items(
    model: type[M],
    data: Any,
    revision: Revision,
    operation: str,
) -> tuple[list[M], bool]:
    """Coerce batch input. Returns the items and whether one item was given."""
    single = isinstance(data, (Mapping, BaseModel))
    if single:
        raw = [data]
    elif isinstance(data, Iterable) and not isinstance(data, (str, bytes)):
        raw = list(data)
    else:
        raise ValidationError(
            f"{operation} expects a {model.__name__} or a list of them"
        )

    items = [_coerce(model, item) for item in raw]
    if not revision.batched and len(items) != 1:
        raise ValidationError(
            f"{operation} takes exactly one item per request "
            f"for server revision {revision.expected_version}"
        )
    return items, single


def _field(data: Any, key: str) -> Any:
    try:
        return data[key]
    except (KeyError, TypeError, IndexError):
        raise KastelaError(f"unexpected response from server: missing {key!r}") from None


def _take(key: str):
    return lambda data: _field(data, key)


def _malformed(key: str, detail: str) -> KastelaError:
    return KastelaError(f"unexpected response from server: {key!r} {detail}")


def _take_batch(key: str, revision: Revision, single: bool, count: int):
    """
    Unwrap a result list to the shape of the caller's input.

    A single item sent to the batched revision may come back either
    nested per item (``[[...]]``) or as a flat list; both are returned
    as the flat list. A list of items needs one result list per item.
    """

    def unwrap(data: Any) -> Any:
        result = _field(data, key)
        if not isinstance(result, list):
            raise _malformed(key, "is not a list")

        if not revision.batched:
            return result if single else [result]

        nested = all(isinstance(entry, list) for entry in result)
        if single:
            if not result:
                raise _malformed(key, "is empty")
            if len(result) == 1 and nested:
                return result[0]
            return result

        if len(result) != count or not nested:
            raise _malformed(key, f"does not hold one result list for each of {count} items")
        return result

    return unwrap


def _page(search: Any, size: int | None, after: str | None) -> dict[str, Any]:
    params = {"search": search}
    if size:
        params["size"] = size
    if after:
        params["after"] = after
    return params


def _search(revision: Revision, operation: str, item, id_field: str, result: str) -> Call:
    wire = item.to_wire()
    resource_id = wire[id_field]
    params = _page(wire["search"], item.size, item.after)
    path = revision.path(operation, **{id_field: resource_id})

    if revision.batched:
        return Call("POST", path, {id_field: resource_id, **params}, _take(result))
    return Call("GET", f"{path}?{urlencode(params)}", unwrap=_take(result))


def _batch(
    revision: Revision,
    operation: str,
    model: type[M],
    data: Any,
    id_field: str,
    per_resource_field: str,
    result: str | None,
) -> Call:
    """Shape a batch operation that posts a list (batched) or one item (per resource)."""
    _check(revision, operation)
    items, single = _items(model, data, revision, operation)
    unwrap = _take_batch(result, revision, single, len(items)) if result else discard

    if revision.batched:
        return Call("POST", revision.path(operation), [item.to_wire() for item in items], unwrap)

    wire = items[0].to_wire()
    path = revision.path(operation, **{id_field: wire[id_field]})
    return Call("POST", path, {per_resource_field: wire[per_resource_field]}, unwrap)


# =============================================================================
# Vault
# =============================================================================

def vault_store(revision: Revision, data: Any) -> Call:
    return _batch(revision, "vault_store", VaultStoreInput, data, "vault_id", "values", "tokens")


def vault_fetch(revision: Revision, data: Any) -> Call:
    _check(revision, "vault_fetch")
    item = _coerce(VaultFetchInput, data)
    return _search(revision, "vault_fetch", item, "vault_id", "tokens")


def vault_count(revision: Revision, data: Any) -> Call:
    _check(revision, "vault_count")
    wire = _coerce(VaultCountInput, data).to_wire()
    path = revision.path("vault_count", vault_id=wire["vault_id"])
    return Call("POST", path, wire, _take("count"))


def vault_get(revision: Revision, data: Any) -> Call:
    return _batch(revision, "vault_get", VaultGetInput, data, "vault_id", "tokens", "values")


def vault_update(revision: Revision, data: Any) -> Call:
    _check(revision, "vault_update")
    items, _ = _items(VaultUpdateInput, data, revision, "vault_update")

    if revision.batched:
        return Call("POST", revision.path("vault_update"), [item.to_wire() for item in items], discard)

    wire = items[0].to_wire()
    if len(wire["values"]) != 1:
        raise ValidationError(
            f"vault_update takes exactly one token per request "
            f"for server revision {revision.expected_version}"
        )
    entry = wire["values"][0]
    path = revision.path("vault_update", vault_id=wire["vault_id"], token=entry["token"])
    return Call("PUT", path, entry["value"], discard)


def vault_delete(revision: Revision, data: Any) -> Call:
    _check(revision, "vault_delete")
    items, _ = _items(VaultDeleteInput, data, revision, "vault_delete")

    if revision.batched:
        return Call("POST", revision.path("vault_delete"), [item.to_wire() for item in items], discard)

    item = items[0]
    if len(item.tokens) != 1:
        raise ValidationError(
            f"vault_delete takes exactly one token per request "
            f"for server revision {revision.expected_version}"
        )
    path = revision.path("vault_delete", vault_id=item.vault_id, token=item.tokens[0])
    return Call("DELETE", path, unwrap=discard)


# =============================================================================
# Protection
# =============================================================================

def protection_seal(revision: Revision, data: Any) -> Call:
    return _batch(
        revision, "protection_seal", ProtectionSealInput, data,
        "protection_id", "primary_keys", None,
    )


def protection_open(revision: Revision, data: Any) -> Call:
    return _batch(
        revision, "protection_open", ProtectionOpenInput, data,
        "protection_id", "tokens", "values",
    )


def protection_tokenize(revision: Revision, data: Any) -> Call:
    return _batch(
        revision, "protection_tokenize", ProtectionTokenizeInput, data,
        "protection_id", "values", "tokens",
    )


def protection_fetch(revision: Revision, data: Any) -> Call:
    _check(revision, "protection_fetch")
    item = _coerce(ProtectionFetchInput, data)
    return _search(revision, "protection_fetch", item, "protection_id", "primary_keys")


def protection_count(revision: Revision, data: Any) -> Call:
    _check(revision, "protection_count")
    wire = _coerce(ProtectionCountInput, data).to_wire()
    path = revision.path("protection_count", protection_id=wire["protection_id"])
    return Call("POST", path, wire, _take("count"))


# =============================================================================
# Secure credentials
# =============================================================================

def _commit(revision: Revision, operation: str, credential: Any) -> Call:
    _check(revision, operation)
    if not isinstance(credential, str) or not credential:
        raise ValidationError("credential must be a non-empty string")
    return Call("POST", revision.path(operation), {"credential": credential}, discard)


def secure_protection_init(revision: Revision, data: Any) -> Call:
    _check(revision, "secure_protection_init")
    wire = _coerce(SecureProtectionInitInput, data).to_wire()
    return Call("POST", revision.path("secure_protection_init"), wire, _take("credential"))


def secure_protection_commit(revision: Revision, credential: str) -> Call:
    return _commit(revision, "secure_protection_commit", credential)


def secure_vault_init(revision: Revision, data: Any) -> Call:
    _check(revision, "secure_vault_init")
    wire = _coerce(SecureVaultInitInput, data).to_wire()
    return Call("POST", revision.path("secure_vault_init"), wire, _take("credential"))


def secure_vault_commit(revision: Revision, credential: str) -> Call:
    return _commit(revision, "secure_vault_commit", credential)


# =============================================================================
# Crypto
# =============================================================================

def crypto_encrypt(revision: Revision, data: Any) -> Call:
    _check(revision, "crypto_encrypt")
    wire = _coerce(CryptoEncryptInput, data).to_wire()
    return Call("POST", revision.path("crypto_encrypt"), wire, _take("ciphertexts"))


def crypto_decrypt(revision: Revision, ciphertexts: Any) -> Call:
    _check(revision, "crypto_decrypt")
    values = _validate(_STRINGS, ciphertexts, "ciphertexts")
    return Call("POST", revision.path("crypto_decrypt"), {"ciphertexts": values}, _take("plaintexts"))


def crypto_hmac(revision: Revision, data: Any) -> Call:
    _check(revision, "crypto_hmac")
    wire = _coerce(CryptoHMACInput, data).to_wire()
    return Call("POST", revision.path("crypto_hmac"), wire, _take("hashes"))


def crypto_equal(revision: Revision, values: Any) -> Call:
    _check(revision, "crypto_equal")
    pairs = _validate(_PAIRS, values, "values")
    body = {"values": [list(pair) for pair in pairs]}
    return Call("POST", revision.path("crypto_equal"), body, _take("results"))


def crypto_sign(revision: Revision, data: Any) -> Call:
    _check(revision, "crypto_sign")
    wire = _coerce(CryptoSignInput, data).to_wire()
    return Call("POST", revision.path("crypto_sign"), wire, _take("signatures"))


def crypto_verify(revision: Revision, data: Any) -> Call:
    _check(revision, "crypto_verify")
    item = _coerce(CryptoVerifyInput, data)
    if len(item.values) != len(item.signatures):
        raise ValidationError("values and signatures must have the same length")
    return Call("POST", revision.path("crypto_verify"), item.to_wire(), _take("results"))


# =============================================================================
# Privacy proxy
# =============================================================================

def privacy_proxy(revision: Revision, data: Any) -> Call:
    _check(revision, "privacy_proxy")
    item = _coerce(ProxyInput, data)
    if item.type == "xml" and not item.options.get("rootTag"):
        raise ValidationError("rootTag is required for xml")
    return Call("POST", revision.path("privacy_proxy"), item.to_wire())
