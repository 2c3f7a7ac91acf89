"""
Security package: request signing, response verification and certificate trust.
"""
from .models import (
    MerchantCredential,
    GatewayCertificate,
    SignableRequest,
    AuthorizationHeader,
    SignedResponseEnvelope,
    EncryptedResource,
)
from .signer import Signer, generate_nonce_str
from .verifier import ResponseVerifier, verify_signature
from .trust_store import CertificateTrustStore, TrustStoreManager
from .crypto import aes_gcm_decrypt, decrypt_resource

__all__ = [
    'MerchantCredential',
    'GatewayCertificate',
    'SignableRequest',
    'AuthorizationHeader',
    'SignedResponseEnvelope',
    'EncryptedResource',
    'Signer',
    'generate_nonce_str',
    'ResponseVerifier',
    'verify_signature',
    'CertificateTrustStore',
    'TrustStoreManager',
    'aes_gcm_decrypt',
    'decrypt_resource'
]
