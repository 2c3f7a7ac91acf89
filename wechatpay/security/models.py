"""
Security models: merchant credential, gateway certificates and signing envelopes.
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric import rsa
from requests.structures import CaseInsensitiveDict

from ..exceptions import (
    InvalidCertificateError,
    MalformedPayloadError,
    MissingHeaderError,
)


AEAD_AES_256_GCM = "AEAD_AES_256_GCM"

SERIAL_HEADER = "Wechatpay-Serial"
SIGNATURE_HEADER = "Wechatpay-Signature"
TIMESTAMP_HEADER = "Wechatpay-Timestamp"
NONCE_HEADER = "Wechatpay-Nonce"

MIN_RSA_KEY_SIZE = 2048
API_V3_KEY_LENGTH = 32


class MerchantCredential:
    """
    Merchant identity and key material.

    Immutable after construction. ``repr`` never shows the private key,
    the API v3 key or the certificate serial.
    """

    __slots__ = ("_mch_id", "_serial_no", "_private_key", "_api_v3_key")

    def __init__(
        self,
        mch_id: str,
        mch_certificate_serial_no: str,
        private_key: rsa.RSAPrivateKey,
        api_v3_key: Union[str, bytes]
    ):
        if not mch_id:
            raise ValueError("mch_id is required")
        if not mch_certificate_serial_no:
            raise ValueError("mch_certificate_serial_no is required")
        if not isinstance(private_key, rsa.RSAPrivateKey):
            raise ValueError("private_key must be an RSA private key")
        if private_key.key_size < MIN_RSA_KEY_SIZE:
            raise ValueError(f"private_key must be at least {MIN_RSA_KEY_SIZE} bits")

        key_bytes = api_v3_key.encode("utf-8") if isinstance(api_v3_key, str) else bytes(api_v3_key)
        if len(key_bytes) != API_V3_KEY_LENGTH:
            raise ValueError(f"api_v3_key must be {API_V3_KEY_LENGTH} bytes")

        object.__setattr__(self, "_mch_id", mch_id)
        object.__setattr__(self, "_serial_no", mch_certificate_serial_no)
        object.__setattr__(self, "_private_key", private_key)
        object.__setattr__(self, "_api_v3_key", key_bytes)

    def __setattr__(self, name, value):
        raise AttributeError("MerchantCredential is immutable")

    @property
    def mch_id(self) -> str:
        return self._mch_id

    @property
    def mch_certificate_serial_no(self) -> str:
        return self._serial_no

    @property
    def private_key(self) -> rsa.RSAPrivateKey:
        return self._private_key

    @property
    def api_v3_key(self) -> bytes:
        return self._api_v3_key

    def __repr__(self) -> str:
        return (
            f"MerchantCredential(mch_id={self._mch_id!r}, "
            "mch_certificate_serial_no='...', private_key='...', api_v3_key='...')"
        )

    __str__ = __repr__


@dataclass(frozen=True)
class GatewayCertificate:
    """A gateway (platform) certificate, keyed by serial number."""
    serial_no: str
    effective_time: datetime
    expire_time: datetime
    certificate: x509.Certificate = field(compare=False, repr=False)

    def __post_init__(self):
        # fail early rather than at verification time
        self.public_key()

    def public_key(self) -> rsa.RSAPublicKey:
        """Public key derived from the certificate's subject public key info."""
        try:
            key = self.certificate.public_key()
        except ValueError as e:
            raise InvalidCertificateError(
                f"failed to get public key from certificate: {e}", self.serial_no
            )
        if not isinstance(key, rsa.RSAPublicKey):
            raise InvalidCertificateError(
                "certificate public key is not an RSA key", self.serial_no
            )
        return key

    @classmethod
    def from_pem(cls, serial_no: str, effective_time: datetime, expire_time: datetime,
                 pem: bytes) -> 'GatewayCertificate':
        try:
            certificate = x509.load_pem_x509_certificate(pem)
        except ValueError as e:
            raise InvalidCertificateError(f"invalid certificate PEM: {e}", serial_no)
        return cls(serial_no, effective_time, expire_time, certificate)


@dataclass
class SignableRequest:
    """Fields covered by an outbound request signature."""
    method: str
    path: str
    timestamp: str
    nonce_str: str
    body: bytes = b""


@dataclass
class AuthorizationHeader:
    """Structured value of the outbound Authorization header."""
    mch_id: str
    nonce_str: str
    signature: str
    timestamp: str
    serial_no: str
    scheme: str = "WECHATPAY2-SHA256-RSA2048"

    def __str__(self) -> str:
        return (
            f'{self.scheme} mchid="{self.mch_id}",nonce_str="{self.nonce_str}",'
            f'signature="{self.signature}",timestamp="{self.timestamp}",'
            f'serial_no="{self.serial_no}"'
        )


@dataclass
class SignedResponseEnvelope:
    """Signature metadata and raw body of a gateway response or notification."""
    serial_no: str
    signature: str
    timestamp: str
    nonce: str
    body: bytes

    @classmethod
    def from_headers(cls, headers: Mapping[str, str], body: bytes) -> 'SignedResponseEnvelope':
        """Extract the envelope from HTTP headers. Any missing header is an error."""
        headers = CaseInsensitiveDict(headers)
        values = {}
        for name in (SERIAL_HEADER, SIGNATURE_HEADER, TIMESTAMP_HEADER, NONCE_HEADER):
            value = headers.get(name)
            if value is None:
                raise MissingHeaderError(name)
            values[name] = value

        return cls(
            serial_no=values[SERIAL_HEADER],
            signature=values[SIGNATURE_HEADER],
            timestamp=values[TIMESTAMP_HEADER],
            nonce=values[NONCE_HEADER],
            body=body or b""
        )


@dataclass
class EncryptedResource:
    """AEAD-encrypted payload used by certificate lists and notifications."""
    algorithm: str
    ciphertext: str
    associated_data: str
    nonce: str
    original_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EncryptedResource':
        if not isinstance(data, dict):
            raise MalformedPayloadError("encrypted resource must be an object")
        if data.get("associated_data") is None:
            data = {**data, "associated_data": ""}
        for name in ("algorithm", "ciphertext", "associated_data", "nonce"):
            if name not in data:
                raise MalformedPayloadError(f"encrypted resource missing field: {name}")
            if not isinstance(data[name], str):
                raise MalformedPayloadError(f"encrypted resource field {name} must be a string")
        original_type = data.get("original_type")
        if original_type is not None and not isinstance(original_type, str):
            raise MalformedPayloadError("encrypted resource field original_type must be a string")
        return cls(
            algorithm=data["algorithm"],
            ciphertext=data["ciphertext"],
            associated_data=data["associated_data"],
            nonce=data["nonce"],
            original_type=original_type
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "algorithm": self.algorithm,
            "ciphertext": self.ciphertext,
            "associated_data": self.associated_data,
            "nonce": self.nonce,
        }
        if self.original_type is not None:
            data["original_type"] = self.original_type
        return data
