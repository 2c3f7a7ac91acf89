"""
Shared test helpers: RSA keys, platform certificates and signed gateway responses.
"""
import base64
import json
from datetime import datetime, timedelta, timezone
from functools import lru_cache

import requests
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.x509.oid import NameOID
from requests.structures import CaseInsensitiveDict

from wechatpay.models.datetime_format import format_datetime
from wechatpay.security.models import GatewayCertificate, MerchantCredential


API_V3_KEY = b"0123456789abcdefghijklmnopqrstuv"
MERCHANT_ID = "1900000001"
MERCHANT_SERIAL = "5157F09EFDC096DE15EBE81A47057A7232F1B8E1"
PLATFORM_SERIAL = "PLATFORM_SERIAL_A"
OTHER_PLATFORM_SERIAL = "PLATFORM_SERIAL_B"


@lru_cache(maxsize=None)
def rsa_key(name: str) -> rsa.RSAPrivateKey:
    """One cached 2048-bit key per name."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def merchant_key() -> rsa.RSAPrivateKey:
    return rsa_key("merchant")


def platform_key() -> rsa.RSAPrivateKey:
    return rsa_key("platform")


def other_platform_key() -> rsa.RSAPrivateKey:
    return rsa_key("other-platform")


def make_credential() -> MerchantCredential:
    return MerchantCredential(MERCHANT_ID, MERCHANT_SERIAL, merchant_key(), API_V3_KEY)


def create_x509_certificate(private_key, common_name: str = "Tenpay.com Root CA") -> x509.Certificate:
    """Self-signed certificate carrying the key's public half."""
    name = x509.Name([
        x509.NameAttribute(NameOID.COUNTRY_NAME, "CN"),
        x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Tenpay.com"),
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])
    now = datetime.now(timezone.utc)
    return x509.CertificateBuilder().subject_name(
        name
    ).issuer_name(
        name
    ).public_key(
        private_key.public_key()
    ).serial_number(
        x509.random_serial_number()
    ).not_valid_before(
        now - timedelta(days=1)
    ).not_valid_after(
        now + timedelta(days=365)
    ).sign(private_key, hashes.SHA256())


def make_gateway_certificate(serial_no: str = PLATFORM_SERIAL, private_key=None,
                             effective_time: datetime = None,
                             expire_time: datetime = None) -> GatewayCertificate:
    now = datetime.now(timezone.utc)
    private_key = private_key or platform_key()
    return GatewayCertificate(
        serial_no=serial_no,
        effective_time=effective_time or now - timedelta(days=30),
        expire_time=expire_time or now + timedelta(days=365),
        certificate=create_x509_certificate(private_key)
    )


def sign_response_message(private_key, timestamp: str, nonce: str, body: bytes) -> str:
    message = timestamp.encode() + b"\n" + nonce.encode() + b"\n" + body + b"\n"
    signature = private_key.sign(message, padding.PKCS1v15(), hashes.SHA256())
    return base64.b64encode(signature).decode("ascii")


def signed_headers(private_key, serial_no: str, body: bytes,
                   timestamp: str = "1700000000", nonce: str = "abc123") -> dict:
    return {
        "Wechatpay-Serial": serial_no,
        "Wechatpay-Signature": sign_response_message(private_key, timestamp, nonce, body),
        "Wechatpay-Timestamp": timestamp,
        "Wechatpay-Nonce": nonce,
        "Content-Type": "application/json",
    }


def make_response(body: bytes = b"", status_code: int = 200, headers: dict = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = body
    response.headers = CaseInsensitiveDict(headers or {})
    response.encoding = "utf-8"
    return response


def make_signed_response(body: bytes, private_key=None, serial_no: str = PLATFORM_SERIAL,
                         status_code: int = 200) -> requests.Response:
    private_key = private_key or platform_key()
    return make_response(body, status_code, signed_headers(private_key, serial_no, body))


def encrypt_resource(plaintext: bytes, key: bytes = API_V3_KEY,
                     associated_data: str = "certificate",
                     nonce: str = "a1b2c3d4e5f6", **extra) -> dict:
    ciphertext = AESGCM(key).encrypt(nonce.encode(), plaintext, associated_data.encode())
    resource = {
        "algorithm": "AEAD_AES_256_GCM",
        "nonce": nonce,
        "associated_data": associated_data,
        "ciphertext": base64.b64encode(ciphertext).decode("ascii"),
    }
    resource.update(extra)
    return resource


def certificate_list_body(entries) -> bytes:
    """
    Build a certificate list body.

    Args:
        entries: Iterable of (serial_no, private_key, expire_time) tuples
    """
    now = datetime.now(timezone.utc)
    data = []
    for index, (serial_no, private_key, expire_time) in enumerate(entries):
        certificate = create_x509_certificate(private_key)
        pem = certificate.public_bytes(serialization.Encoding.PEM)
        data.append({
            "serial_no": serial_no,
            "effective_time": format_datetime(now - timedelta(days=10 + index)),
            "expire_time": format_datetime(expire_time or now + timedelta(days=365)),
            "encrypt_certificate": encrypt_resource(pem),
        })
    return json.dumps({"data": data}).encode("utf-8")
