"""
Mutual TLS material for the Kastela transport.

Each credential may be given as a file path or as raw PEM bytes.
"""

import os
import ssl
import tempfile
from contextlib import ExitStack, contextmanager
from typing import Iterator, Union

TLSMaterial = Union[str, bytes, os.PathLike]


def read_material(material: TLSMaterial) -> bytes:
    """Return PEM bytes for a path or raw-bytes credential."""
    if isinstance(material, bytes):
        return material
    with open(material, "rb") as f:
        return f.read()


@contextmanager
def _as_file(material: TLSMaterial) -> Iterator[str]:
    """Yield a filesystem path holding the credential."""
    if not isinstance(material, bytes):
        yield os.fspath(material)
        return

    # load_cert_chain only reads from disk
    with tempfile.TemporaryDirectory(prefix="kastela-") as tmp:
        path = os.path.join(tmp, "material.pem")
        with open(path, "wb") as f:
            f.write(material)
        yield path


def build_ssl_context(
    ca_cert: TLSMaterial,
    client_cert: TLSMaterial,
    client_key: TLSMaterial,
) -> ssl.SSLContext:
    """
    Build the client SSL context used for every request.

    ``load_cert_chain`` only reads from files. A client certificate or
    key given as bytes is therefore written to a private temporary file
    on disk while it loads, and that file is deleted right after.

    Args:
        ca_cert: CA certificate that signed the server certificate
        client_cert: Client certificate presented to the server
        client_key: Private key for the client certificate

    Returns:
        An ``ssl.SSLContext`` that trusts only ``ca_cert`` and presents
        the client certificate.
    """
    ca_pem = read_material(ca_cert).decode("ascii")
    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cadata=ca_pem)

    with ExitStack() as stack:
        cert_path = stack.enter_context(_as_file(client_cert))
        key_path = stack.enter_context(_as_file(client_key))
        context.load_cert_chain(certfile=cert_path, keyfile=key_path)

    return context
