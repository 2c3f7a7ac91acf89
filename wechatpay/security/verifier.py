"""
Verification of gateway response and notification signatures.
"""
import base64
import binascii
import logging

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..exceptions import SignatureInvalidError
from .canonical import build_response_message
from .models import SignedResponseEnvelope
from .trust_store import TrustStoreManager


def verify_signature(public_key: rsa.RSAPublicKey, message: bytes, signature_b64: str) -> None:
    """
    Check an RSA-SHA256 PKCS#1 v1.5 signature.

    Malformed base64, a wrong-length signature and a cryptographic mismatch
    all raise the same SignatureInvalidError.
    """
    try:
        signature = base64.b64decode(signature_b64, validate=True)
        public_key.verify(signature, message, padding.PKCS1v15(), hashes.SHA256())
    except (binascii.Error, ValueError, TypeError, InvalidSignature):
        raise SignatureInvalidError() from None


class ResponseVerifier:
    """Verifies envelopes against certificates from the trust store."""

    def __init__(self, trust_store: TrustStoreManager):
        self.trust_store = trust_store
        self.logger = logging.getLogger(__name__)

    def verify(self, envelope: SignedResponseEnvelope) -> bytes:
        """
        Verify an envelope and return its body unchanged.

        Raises:
            UnknownSerialError: If the claimed serial is not trusted
            SignatureInvalidError: If the signature does not verify
        """
        certificate = self.trust_store.lookup(envelope.serial_no)
        return self.verify_with_key(envelope, certificate.public_key())

    def verify_with_key(self, envelope: SignedResponseEnvelope,
                        public_key: rsa.RSAPublicKey) -> bytes:
        try:
            verify_signature(public_key, build_response_message(envelope), envelope.signature)
        except SignatureInvalidError:
            self.logger.warning(f"Signature verification failed for serial {envelope.serial_no}")
            raise
        return envelope.body
