"""
Verification and decryption of payment and refund notifications.
"""
import logging
from typing import Mapping, Tuple

from ..models.notification import Notification, NotificationEvent, parse_notification_event
from ..security import SignedResponseEnvelope, decrypt_resource


class NotificationService:
    """
    Handles notifications posted by the gateway to the merchant's notify_url.

    The gateway signs notification bodies the same way it signs responses,
    so an inbound request is verified as a response envelope.
    """

    def __init__(self, client):
        self.client = client
        self.logger = logging.getLogger(__name__)

    def verify_notification(self, headers: Mapping[str, str], body: bytes) -> bytes:
        """
        Verify an inbound notification and return its body unchanged.

        Raises:
            MissingHeaderError: A Wechatpay-* header is missing
            UnknownSerialError: Signed with an untrusted certificate
            SignatureInvalidError: Signature does not verify
        """
        envelope = SignedResponseEnvelope.from_headers(headers, body)
        return self.client.verifier.verify(envelope)

    def parse_notification(self, body: bytes) -> Notification:
        return Notification.from_json(body)

    def decrypt_notification(self, notification: Notification) -> NotificationEvent:
        """Decrypt the resource and parse it as a trade or refund."""
        plaintext = decrypt_resource(notification.resource, self.client.credential.api_v3_key)
        return parse_notification_event(notification.resource.original_type, plaintext)

    def handle(self, headers: Mapping[str, str], body: bytes) -> Tuple[Notification, NotificationEvent]:
        """Verify, parse and decrypt in one step."""
        verified_body = self.verify_notification(headers, body)
        notification = self.parse_notification(verified_body)
        event = self.decrypt_notification(notification)
        self.logger.info(f"Accepted notification {notification.id} ({notification.event_type})")
        return notification, event
