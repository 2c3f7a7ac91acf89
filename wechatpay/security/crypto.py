"""
AEAD_AES_256_GCM decryption with the merchant API v3 key.
"""
import base64
import binascii
from typing import Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..exceptions import DecryptionError, UnsupportedAlgorithmError
from .models import AEAD_AES_256_GCM, EncryptedResource


def _to_bytes(value: Union[str, bytes]) -> bytes:
    return value if isinstance(value, bytes) else value.encode("utf-8")


def aes_gcm_decrypt(ciphertext: bytes, associated_data: Union[str, bytes],
                    nonce: Union[str, bytes], key: bytes) -> bytes:
    """
    Decrypt ciphertext (with appended tag) using AES-256-GCM.

    Raises:
        DecryptionError: On tag mismatch, bad key length or malformed input
    """
    try:
        if len(key) != 32:
            raise ValueError("AES-256 key must be 32 bytes")
        return AESGCM(key).decrypt(_to_bytes(nonce), ciphertext, _to_bytes(associated_data))
    except (InvalidTag, ValueError, TypeError, AttributeError):
        raise DecryptionError() from None


def decrypt_resource(resource: EncryptedResource, key: bytes) -> bytes:
    """Decrypt an encrypted certificate or notification resource."""
    if resource.algorithm != AEAD_AES_256_GCM:
        raise UnsupportedAlgorithmError(resource.algorithm)
    try:
        ciphertext = base64.b64decode(resource.ciphertext, validate=True)
    except (binascii.Error, ValueError, TypeError):
        raise DecryptionError() from None
    return aes_gcm_decrypt(ciphertext, resource.associated_data, resource.nonce, key)
