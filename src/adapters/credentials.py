"""Material de credenciales para mutual TLS.

Responsabilidad:
- Leer el bundle PKCS#12 y el PEM de la CA desde disco (I/O puro).
- Decodificar la identidad cliente (certificado + clave) con `cryptography`.
- Construir el `ssl.SSLContext` que usa la sesión httpx.

Cualquier fallo aquí es un `CredentialError`: no tiene sentido reintentar.
"""

from __future__ import annotations

import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    pkcs12,
)

from core.config import AppSettings
from core.errors import CredentialError


@dataclass(frozen=True)
class CredentialMaterial:
    """Bytes crudos tal como están en disco."""

    bundle: bytes
    passphrase: str | None
    ca_bundle: bytes


@dataclass(frozen=True)
class ClientIdentity:
    """Identidad decodificada, en PEM, lista para `load_cert_chain`."""

    cert_chain_pem: bytes
    key_pem: bytes
    ca_pem: str
    subject: str


def _read(path: Path | None, what: str) -> bytes:
    if path is None:
        raise CredentialError(f"{what}: ruta no configurada")
    try:
        return Path(path).expanduser().read_bytes()
    except OSError as exc:
        raise CredentialError(f"{what}: no se pudo leer {path}: {exc}") from exc


def load_credential_files(settings: AppSettings) -> CredentialMaterial:
    return CredentialMaterial(
        bundle=_read(settings.pfx_path, "bundle PKCS#12"),
        passphrase=settings.pfx_pass,
        ca_bundle=_read(settings.ca_path, "CA"),
    )


def decode_client_identity(material: CredentialMaterial) -> ClientIdentity:
    """Decodifica el PKCS#12 y valida que la CA contenga al menos un certificado."""

    password = material.passphrase.encode("utf-8") if material.passphrase else None
    try:
        key, cert, additional = pkcs12.load_key_and_certificates(material.bundle, password)
    except ValueError as exc:
        raise CredentialError(f"bundle PKCS#12 inválido o passphrase incorrecta: {exc}") from exc

    if key is None or cert is None:
        raise CredentialError("el bundle PKCS#12 no contiene certificado y clave privada")

    try:
        anchors = x509.load_pem_x509_certificates(material.ca_bundle)
    except ValueError as exc:
        raise CredentialError(f"CA inválida: {exc}") from exc

    chain = cert.public_bytes(Encoding.PEM) + b"".join(
        extra.public_bytes(Encoding.PEM) for extra in additional or []
    )
    key_pem = key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption())
    ca_pem = "".join(a.public_bytes(Encoding.PEM).decode("ascii") for a in anchors)

    return ClientIdentity(
        cert_chain_pem=chain,
        key_pem=key_pem,
        ca_pem=ca_pem,
        subject=cert.subject.rfc4514_string(),
    )


def build_ssl_context(identity: ClientIdentity) -> ssl.SSLContext:
    """Contexto TLS con la CA del portal y el certificado cliente cargado.

    `load_cert_chain` solo acepta rutas, así que la identidad se escribe en un
    directorio temporal que se borra al salir.
    """

    try:
        context = ssl.create_default_context(cadata=identity.ca_pem)
        with tempfile.TemporaryDirectory(prefix="jpnic-portal-") as tmp:
            cert_file = Path(tmp) / "client.pem"
            key_file = Path(tmp) / "client.key"
            cert_file.write_bytes(identity.cert_chain_pem)
            key_file.write_bytes(identity.key_pem)
            key_file.chmod(0o600)
            context.load_cert_chain(certfile=str(cert_file), keyfile=str(key_file))
    except ssl.SSLError as exc:
        raise CredentialError(f"no se pudo construir el contexto TLS: {exc}") from exc
    return context
