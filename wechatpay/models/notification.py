"""
Payment and refund notification models.
"""
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Union

from ..exceptions import MalformedPayloadError, UnknownNotificationTypeError
from ..security.models import EncryptedResource
from .common import require
from .datetime_format import parse_datetime
from .refund import RefundQueryResponse
from .trade import TradeQueryResponse


ORIGINAL_TYPE_TRANSACTION = "transaction"
ORIGINAL_TYPE_REFUND = "refund"


@dataclass
class Notification:
    """
    Notification envelope delivered to the merchant's notify_url.

    event_type is e.g. TRANSACTION.SUCCESS, REFUND.SUCCESS, REFUND.ABNORMAL
    or REFUND.CLOSED.
    """
    id: str
    create_time: datetime
    event_type: str
    resource_type: str
    resource: EncryptedResource
    summary: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Notification':
        resource = EncryptedResource.from_dict(require(data, "resource", "notification"))
        if resource.original_type is None:
            raise MalformedPayloadError("notification resource missing field: original_type")
        return cls(
            id=require(data, "id", "notification"),
            create_time=parse_datetime(require(data, "create_time", "notification")),
            event_type=require(data, "event_type", "notification"),
            resource_type=require(data, "resource_type", "notification"),
            resource=resource,
            summary=data.get("summary", "")
        )

    @classmethod
    def from_json(cls, body: Union[str, bytes]) -> 'Notification':
        try:
            data = json.loads(body)
        except (ValueError, TypeError) as e:
            raise MalformedPayloadError(f"invalid notification JSON: {e}")
        return cls.from_dict(data)


@dataclass
class TradeNotificationEvent:
    """Decrypted payment notification."""
    trade: TradeQueryResponse


@dataclass
class RefundNotificationEvent:
    """Decrypted refund notification."""
    refund: RefundQueryResponse


NotificationEvent = Union[TradeNotificationEvent, RefundNotificationEvent]


def parse_notification_event(original_type: str, plaintext: bytes) -> NotificationEvent:
    """Parse decrypted plaintext as the business schema named by original_type."""
    if original_type not in (ORIGINAL_TYPE_TRANSACTION, ORIGINAL_TYPE_REFUND):
        raise UnknownNotificationTypeError(original_type)
    try:
        data = json.loads(plaintext)
    except (ValueError, TypeError) as e:
        raise MalformedPayloadError(f"invalid notification resource JSON: {e}")

    if original_type == ORIGINAL_TYPE_TRANSACTION:
        return TradeNotificationEvent(TradeQueryResponse.from_dict(data))
    return RefundNotificationEvent(RefundQueryResponse.from_dict(data))
