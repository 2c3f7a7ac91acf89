"""
Request signing with the merchant RSA private key.
"""
import base64
import logging
import secrets
import time
from typing import Union

import requests
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding

from ..exceptions import StreamingBodyError
from .canonical import build_request_message
from .models import AuthorizationHeader, MerchantCredential, SignableRequest


# symbols and look-alikes (0 O o 1 l I i) removed
NONCE_ALPHABET = "abcdefghjkmnpqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789"
NONCE_LENGTH = 32


def generate_nonce_str(length: int = NONCE_LENGTH) -> str:
    """Random string drawn from NONCE_ALPHABET."""
    return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(length))


def _materialize_body(body) -> bytes:
    if body is None:
        return b""
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    if isinstance(body, (bytearray, memoryview)):
        return bytes(body)
    raise StreamingBodyError()


class Signer:
    """Signs outbound requests on behalf of a merchant."""

    def __init__(self, credential: MerchantCredential):
        self.credential = credential
        self.logger = logging.getLogger(__name__)

    def sign_message(self, message: Union[str, bytes]) -> str:
        """RSA-SHA256 PKCS#1 v1.5 signature over message, base64 encoded."""
        if isinstance(message, str):
            message = message.encode("utf-8")
        signature = self.credential.private_key.sign(
            message,
            padding.PKCS1v15(),
            hashes.SHA256()
        )
        return base64.b64encode(signature).decode("ascii")

    def authorization_for(self, method: str, path: str, body: bytes = b"") -> AuthorizationHeader:
        """Build a signed Authorization value for the given request fields."""
        signable = SignableRequest(
            method=method.upper(),
            path=path,
            timestamp=str(int(time.time())),
            nonce_str=generate_nonce_str(),
            body=body
        )
        signature = self.sign_message(build_request_message(signable))
        return AuthorizationHeader(
            mch_id=self.credential.mch_id,
            nonce_str=signable.nonce_str,
            signature=signature,
            timestamp=signable.timestamp,
            serial_no=self.credential.mch_certificate_serial_no
        )

    def sign(self, request: requests.PreparedRequest) -> AuthorizationHeader:
        """
        Sign a prepared request in place.

        Args:
            request: Prepared request whose body is bytes, str or empty

        Returns:
            The Authorization value that was set on the request

        Raises:
            StreamingBodyError: If the body is a stream or iterator
        """
        body = _materialize_body(request.body)
        authorization = self.authorization_for(request.method, request.path_url, body)
        request.headers["Authorization"] = str(authorization)
        self.logger.debug(f"Signed {request.method} {request.path_url}")
        return authorization
