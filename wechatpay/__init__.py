"""
WeChat Pay API v3 client with request signing, response verification and
platform certificate management.
"""
from .exceptions import (
    WechatPayError,
    ProtocolError,
    MissingHeaderError,
    MalformedPayloadError,
    SignatureInvalidError,
    DecryptionError,
    TrustStoreError,
    UnknownSerialError,
    NoAvailableCertificatesError,
    GatewayApiError,
)
from .security import MerchantCredential, GatewayCertificate
from .services.client import WechatPayClient
from .services.trade_service import TradeService
from .services.refund_service import RefundService
from .services.notification_service import NotificationService

__all__ = [
    'WechatPayError',
    'ProtocolError',
    'MissingHeaderError',
    'MalformedPayloadError',
    'SignatureInvalidError',
    'DecryptionError',
    'TrustStoreError',
    'UnknownSerialError',
    'NoAvailableCertificatesError',
    'GatewayApiError',
    'MerchantCredential',
    'GatewayCertificate',
    'WechatPayClient',
    'TradeService',
    'RefundService',
    'NotificationService'
]
