"""Tests for adapters.credentials: PKCS#12 identity and TLS context."""

from __future__ import annotations

import datetime
import ssl

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import BestAvailableEncryption, Encoding, pkcs12
from cryptography.x509.oid import NameOID

from adapters.credentials import (
    CredentialMaterial,
    build_ssl_context,
    decode_client_identity,
    load_credential_files,
)
from core.config import AppSettings
from core.errors import CredentialError

PASSPHRASE = "s3cret"


def _self_signed(common_name: str) -> tuple[rsa.RSAPrivateKey, x509.Certificate]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )
    return key, cert


@pytest.fixture(scope="module")
def material() -> CredentialMaterial:
    key, cert = _self_signed("member.example.jp")
    _, ca = _self_signed("JPNIC Test CA")
    bundle = pkcs12.serialize_key_and_certificates(
        b"member", key, cert, None, BestAvailableEncryption(PASSPHRASE.encode())
    )
    return CredentialMaterial(bundle=bundle, passphrase=PASSPHRASE, ca_bundle=ca.public_bytes(Encoding.PEM))


class TestDecodeClientIdentity:
    def test_decodes_bundle(self, material):
        identity = decode_client_identity(material)
        assert identity.subject == "CN=member.example.jp"
        assert identity.cert_chain_pem.startswith(b"-----BEGIN CERTIFICATE-----")
        assert b"PRIVATE KEY" in identity.key_pem
        assert "BEGIN CERTIFICATE" in identity.ca_pem

    def test_wrong_passphrase(self, material):
        bad = CredentialMaterial(bundle=material.bundle, passphrase="nope", ca_bundle=material.ca_bundle)
        with pytest.raises(CredentialError, match="passphrase"):
            decode_client_identity(bad)

    def test_garbage_bundle(self, material):
        bad = CredentialMaterial(bundle=b"not a pkcs12", passphrase=PASSPHRASE, ca_bundle=material.ca_bundle)
        with pytest.raises(CredentialError):
            decode_client_identity(bad)

    def test_invalid_ca(self, material):
        bad = CredentialMaterial(bundle=material.bundle, passphrase=PASSPHRASE, ca_bundle=b"garbage")
        with pytest.raises(CredentialError, match="CA"):
            decode_client_identity(bad)


class TestBuildSSLContext:
    def test_context_with_client_identity(self, material):
        context = build_ssl_context(decode_client_identity(material))
        assert isinstance(context, ssl.SSLContext)
        assert context.verify_mode == ssl.CERT_REQUIRED


class TestLoadCredentialFiles:
    def test_reads_files(self, tmp_path, material):
        pfx = tmp_path / "member.p12"
        ca = tmp_path / "ca.pem"
        pfx.write_bytes(material.bundle)
        ca.write_bytes(material.ca_bundle)
        settings = AppSettings(_env_file=None, pfx_path=pfx, pfx_pass=PASSPHRASE, ca_path=ca)

        loaded = load_credential_files(settings)

        assert loaded == material

    def test_missing_path_setting(self):
        with pytest.raises(CredentialError, match="no configurada"):
            load_credential_files(AppSettings(_env_file=None))

    def test_unreadable_file(self, tmp_path):
        settings = AppSettings(_env_file=None, pfx_path=tmp_path / "missing.p12", ca_path=tmp_path / "ca.pem")
        with pytest.raises(CredentialError, match="missing.p12"):
            load_credential_files(settings)
