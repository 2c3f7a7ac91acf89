"""
Refund request and response models.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import MalformedPayloadError
from .common import compact_dict, model_list, parse_enum, require
from .datetime_format import parse_datetime, parse_optional_datetime


class RefundStatus(Enum):
    SUCCESS = "SUCCESS"
    CLOSED = "CLOSED"
    PROCESSING = "PROCESSING"
    ABNORMAL = "ABNORMAL"

    @classmethod
    def parse(cls, value: str) -> 'RefundStatus':
        return parse_enum(cls, value, "refund status")


@dataclass
class RefundFromAccount:
    """Funding account and amount for a refund. ``account`` is AVAILABLE or UNAVAILABLE."""
    account: str
    amount: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RefundFromAccount':
        return cls(
            account=require(data, "account", "from"),
            amount=require(data, "amount", "from")
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"account": self.account, "amount": self.amount}


@dataclass
class RefundApplyingAmount:
    total: int
    refund: int
    currency: str = "CNY"
    from_accounts: List[RefundFromAccount] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict({
            "total": self.total,
            "refund": self.refund,
            "currency": self.currency,
            "from": self.from_accounts,
        })


@dataclass
class RefundGoodsDetail:
    merchant_goods_id: str
    unit_price: int
    refund_amount: int
    refund_quantity: int
    wechatpay_goods_id: Optional[str] = None
    goods_name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RefundGoodsDetail':
        return cls(
            merchant_goods_id=require(data, "merchant_goods_id", "goods_detail"),
            unit_price=require(data, "unit_price", "goods_detail"),
            refund_amount=require(data, "refund_amount", "goods_detail"),
            refund_quantity=require(data, "refund_quantity", "goods_detail"),
            wechatpay_goods_id=data.get("wechatpay_goods_id"),
            goods_name=data.get("goods_name")
        )

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(self.__dict__)


@dataclass
class RefundParams:
    """
    Refund application. Exactly one of ``transaction_id`` and
    ``out_trade_no`` identifies the original trade.
    """
    out_refund_no: str
    amount: RefundApplyingAmount
    transaction_id: Optional[str] = None
    out_trade_no: Optional[str] = None
    reason: Optional[str] = None
    notify_url: Optional[str] = None
    funds_account: Optional[str] = None
    goods_detail: List[RefundGoodsDetail] = field(default_factory=list)

    def __post_init__(self):
        if (self.transaction_id is None) == (self.out_trade_no is None):
            raise ValueError("exactly one of transaction_id and out_trade_no is required")

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict({
            "transaction_id": self.transaction_id,
            "out_trade_no": self.out_trade_no,
            "out_refund_no": self.out_refund_no,
            "reason": self.reason,
            "notify_url": self.notify_url,
            "funds_account": self.funds_account,
            "amount": self.amount,
            "goods_detail": self.goods_detail,
        })


@dataclass
class RefundActualAmount:
    total: int
    refund: int
    payer_total: int
    payer_refund: int
    settlement_total: Optional[int] = None
    settlement_refund: Optional[int] = None
    discount_refund: Optional[int] = None
    currency: str = "CNY"
    refund_fee: Optional[int] = None
    from_accounts: List[RefundFromAccount] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RefundActualAmount':
        return cls(
            total=require(data, "total", "amount"),
            refund=require(data, "refund", "amount"),
            payer_total=require(data, "payer_total", "amount"),
            payer_refund=require(data, "payer_refund", "amount"),
            settlement_total=data.get("settlement_total"),
            settlement_refund=data.get("settlement_refund"),
            discount_refund=data.get("discount_refund"),
            currency=data.get("currency", "CNY"),
            refund_fee=data.get("refund_fee"),
            from_accounts=model_list(data.get("from"), RefundFromAccount.from_dict)
        )


@dataclass
class RefundPromotionDetail:
    """Coupon or discount returned along with a refund."""
    coupon_id: str
    amount: int
    refund_amount: int
    scope: Optional[str] = None
    promotion_type: Optional[str] = None
    goods_detail: List[RefundGoodsDetail] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RefundPromotionDetail':
        return cls(
            coupon_id=require(data, "coupon_id", "promotion_detail"),
            amount=require(data, "amount", "promotion_detail"),
            refund_amount=require(data, "refund_amount", "promotion_detail"),
            scope=data.get("scope"),
            promotion_type=data.get("type"),
            goods_detail=model_list(data.get("goods_detail"), RefundGoodsDetail.from_dict)
        )


@dataclass
class RefundQueryResponse:
    """Refund query result; also the plaintext of refund notifications."""
    out_refund_no: str
    transaction_id: str
    out_trade_no: str
    status: RefundStatus
    refund_id: Optional[str] = None
    channel: Optional[str] = None
    user_received_account: Optional[str] = None
    success_time: Optional[datetime] = None
    create_time: Optional[datetime] = None
    funds_account: Optional[str] = None
    amount: Optional[RefundActualAmount] = None
    promotion_detail: List[RefundPromotionDetail] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RefundQueryResponse':
        if not isinstance(data, dict):
            raise MalformedPayloadError("refund must be an object")
        # refund notifications carry refund_status instead of status
        status = data.get("status") or data.get("refund_status")
        if status is None:
            raise MalformedPayloadError("refund missing field: status", {"field": "status"})
        create_time = data.get("create_time")
        amount = data.get("amount")
        return cls(
            out_refund_no=require(data, "out_refund_no", "refund"),
            transaction_id=require(data, "transaction_id", "refund"),
            out_trade_no=require(data, "out_trade_no", "refund"),
            status=RefundStatus.parse(status),
            refund_id=data.get("refund_id"),
            channel=data.get("channel"),
            user_received_account=data.get("user_received_account"),
            success_time=parse_optional_datetime(data.get("success_time")),
            create_time=parse_datetime(create_time) if create_time else None,
            funds_account=data.get("funds_account"),
            amount=RefundActualAmount.from_dict(amount) if amount is not None else None,
            promotion_detail=model_list(data.get("promotion_detail"), RefundPromotionDetail.from_dict)
        )
