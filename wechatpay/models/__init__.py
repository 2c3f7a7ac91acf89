"""
Models package for the WeChat Pay client.
"""

from .config import Config, ConfigValidationError, ConfigValidationResult
from .datetime_format import parse_datetime, format_datetime
from .trade import (
    Amount, PaidAmount, Payer, GoodsDetail, PromotionDetail, StoreInfo, H5Info,
    SceneInfo, SettleInfo, CreateTradeParams, TradeGoodsDetail, TradePromotionDetail,
    TradeQueryResponse, TradeType, TradeState, JsApiTradeSignature,
    generate_out_trade_no
)
from .refund import (
    RefundStatus, RefundFromAccount, RefundApplyingAmount, RefundGoodsDetail,
    RefundParams, RefundActualAmount, RefundPromotionDetail, RefundQueryResponse
)
from .notification import (
    Notification, NotificationEvent, TradeNotificationEvent,
    RefundNotificationEvent, parse_notification_event
)

__all__ = [
    'Config',
    'ConfigValidationError',
    'ConfigValidationResult',
    'parse_datetime',
    'format_datetime',
    'Amount',
    'PaidAmount',
    'Payer',
    'GoodsDetail',
    'PromotionDetail',
    'StoreInfo',
    'H5Info',
    'SceneInfo',
    'SettleInfo',
    'CreateTradeParams',
    'TradeGoodsDetail',
    'TradePromotionDetail',
    'TradeQueryResponse',
    'TradeType',
    'TradeState',
    'JsApiTradeSignature',
    'generate_out_trade_no',
    'RefundStatus',
    'RefundFromAccount',
    'RefundApplyingAmount',
    'RefundGoodsDetail',
    'RefundParams',
    'RefundActualAmount',
    'RefundPromotionDetail',
    'RefundQueryResponse',
    'Notification',
    'NotificationEvent',
    'TradeNotificationEvent',
    'RefundNotificationEvent',
    'parse_notification_event'
]
