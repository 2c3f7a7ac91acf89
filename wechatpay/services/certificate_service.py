"""
Platform certificate download and self-verification.

The certificate list response cannot be checked against the existing trust
store, since refreshing that store is the point of the call. Instead the list
is decrypted first and the response is verified with the certificate in the
list whose serial matches the Wechatpay-Serial header. Only a batch that
verifies replaces the trust store.
"""
import json
import logging
from typing import Any, Dict, List

import requests

from ..exceptions import MalformedPayloadError, UnknownSerialError
from ..models.datetime_format import parse_datetime
from ..security import (
    CertificateTrustStore,
    EncryptedResource,
    GatewayCertificate,
    SignedResponseEnvelope,
    decrypt_resource,
)


CERTIFICATES_PATH = "/certificates"


class CertificateService:
    """Fetches platform certificates on behalf of a WechatPayClient."""

    def __init__(self, client):
        self.client = client
        self.logger = logging.getLogger(__name__)

    def fetch_certificates(self) -> List[GatewayCertificate]:
        """
        Download, decrypt and verify the certificate list.

        Returns:
            All certificates in the verified response, expired ones included

        Raises:
            GatewayApiError: Non-success status from the gateway
            MissingHeaderError: Response lacks a signature header
            MalformedPayloadError: Body is not a certificate list
            DecryptionError: A certificate could not be decrypted
            UnknownSerialError: No certificate in the list matches Wechatpay-Serial
            SignatureInvalidError: The list does not verify with its own certificate
        """
        request = requests.Request("GET", self.client.build_url(CERTIFICATES_PATH))
        response = self.client.send_signed(request)

        # capture the claimed signer now, verify once the key is known
        envelope = SignedResponseEnvelope.from_headers(response.headers, response.content)

        certificates = self.parse_certificate_list(envelope.body)

        signing_certificate = next(
            (c for c in certificates if c.serial_no == envelope.serial_no), None
        )
        if signing_certificate is None:
            raise UnknownSerialError(envelope.serial_no)

        self.client.verifier.verify_with_key(envelope, signing_certificate.public_key())

        self.logger.info(
            f"Fetched {len(certificates)} platform certificates, signed by {envelope.serial_no}"
        )
        return certificates

    def refresh(self) -> List[GatewayCertificate]:
        """Fetch certificates and atomically replace the client's trust store."""
        certificates = self.fetch_certificates()
        store = CertificateTrustStore.build(certificates)
        self.client.trust_store.replace(store)
        return certificates

    def parse_certificate_list(self, body: bytes) -> List[GatewayCertificate]:
        try:
            payload = json.loads(body)
        except (ValueError, TypeError) as e:
            raise MalformedPayloadError(f"invalid certificate list JSON: {e}")

        if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
            raise MalformedPayloadError("certificate list must contain a data array")

        return [self._decrypt_item(item) for item in payload["data"]]

    def _decrypt_item(self, item: Dict[str, Any]) -> GatewayCertificate:
        if not isinstance(item, dict):
            raise MalformedPayloadError("certificate entry must be an object")
        try:
            serial_no = item["serial_no"]
            effective_time = parse_datetime(item["effective_time"])
            expire_time = parse_datetime(item["expire_time"])
            encrypted = EncryptedResource.from_dict(item["encrypt_certificate"])
        except KeyError as e:
            raise MalformedPayloadError(f"certificate entry missing field: {e.args[0]}")

        pem = decrypt_resource(encrypted, self.client.credential.api_v3_key)
        return GatewayCertificate.from_pem(serial_no, effective_time, expire_time, pem)
