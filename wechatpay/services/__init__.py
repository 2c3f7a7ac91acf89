"""
Services package for the WeChat Pay client.
"""

from .config_service import ConfigService
from .logging_service import LoggingService, PerformanceMonitor
from .client import WechatPayClient
from .certificate_service import CertificateService
from .trade_service import TradeService
from .refund_service import RefundService
from .notification_service import NotificationService

__all__ = [
    'ConfigService',
    'LoggingService',
    'PerformanceMonitor',
    'WechatPayClient',
    'CertificateService',
    'TradeService',
    'RefundService',
    'NotificationService'
]
