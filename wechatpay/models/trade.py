"""
Trade (order) request and response models.
"""
import secrets
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..exceptions import MalformedPayloadError
from .common import compact_dict, model_list, optional_model, parse_enum, require
from .datetime_format import format_datetime, parse_optional_datetime


class TradeType(Enum):
    """Trade type reported by trade queries."""
    JSAPI = "JSAPI"
    NATIVE = "NATIVE"
    APP = "APP"
    MICROPAY = "MICROPAY"
    MWEB = "MWEB"
    FACEPAY = "FACEPAY"

    @classmethod
    def parse(cls, value: str) -> 'TradeType':
        return parse_enum(cls, value, "trade type")


class TradeState(Enum):
    """Trade state reported by trade queries and payment notifications."""
    SUCCESS = "SUCCESS"
    REFUND = "REFUND"
    NOTPAY = "NOTPAY"
    CLOSED = "CLOSED"
    REVOKED = "REVOKED"
    USERPAYING = "USERPAYING"
    PAYERROR = "PAYERROR"

    @classmethod
    def parse(cls, value: str) -> 'TradeState':
        return parse_enum(cls, value, "trade state")


@dataclass
class Amount:
    """Order amount in the smallest currency unit (fen)."""
    total: int
    currency: str = "CNY"

    @classmethod
    def new_with_cny(cls, total: int) -> 'Amount':
        return cls(total=total, currency="CNY")

    def to_dict(self) -> Dict[str, Any]:
        return {"total": self.total, "currency": self.currency}


@dataclass
class PaidAmount:
    """Amount actually paid, as reported after payment."""
    total: Optional[int] = None
    currency: Optional[str] = None
    payer_total: Optional[int] = None
    payer_currency: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PaidAmount':
        return cls(
            total=data.get("total"),
            currency=data.get("currency"),
            payer_total=data.get("payer_total"),
            payer_currency=data.get("payer_currency")
        )

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(self.__dict__)


@dataclass
class Payer:
    openid: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Payer':
        return cls(openid=data.get("openid"))

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict({"openid": self.openid})


@dataclass
class GoodsDetail:
    merchant_goods_id: str
    quantity: int
    unit_price: int
    wechatpay_goods_id: Optional[str] = None
    goods_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(self.__dict__)


@dataclass
class PromotionDetail:
    """Discount information supplied when creating a trade."""
    goods_detail: List[GoodsDetail] = field(default_factory=list)
    cost_price: Optional[int] = None
    invoice_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(self.__dict__)


@dataclass
class StoreInfo:
    id: str
    name: Optional[str] = None
    area_code: Optional[str] = None
    address: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(self.__dict__)


@dataclass
class H5Info:
    """H5 scene description; ``type`` is one of iOS, Android, Wap."""
    type: str
    app_name: Optional[str] = None
    app_url: Optional[str] = None
    bundle_id: Optional[str] = None
    package_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(self.__dict__)


@dataclass
class SceneInfo:
    payer_client_ip: str
    device_id: Optional[str] = None
    store_info: Optional[StoreInfo] = None
    h5_info: Optional[H5Info] = None

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(self.__dict__)


@dataclass
class SettleInfo:
    profit_sharing: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(self.__dict__)


@dataclass
class CreateTradeParams:
    """
    Parameters shared by the JSAPI, APP, H5 and Native create-trade calls.

    ``payer`` is required for JSAPI; ``scene_info.h5_info`` is required for H5.
    """
    app_id: str
    mch_id: str
    description: str
    out_trade_no: str
    notify_url: str
    amount: Amount
    payer: Optional[Payer] = None
    time_expire: Optional[datetime] = None
    attach: Optional[str] = None
    goods_tag: Optional[str] = None
    support_fapiao: Optional[bool] = None
    detail: Optional[PromotionDetail] = None
    scene_info: Optional[SceneInfo] = None
    settle_info: Optional[SettleInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict({
            "appid": self.app_id,
            "mchid": self.mch_id,
            "description": self.description,
            "out_trade_no": self.out_trade_no,
            "time_expire": format_datetime(self.time_expire) if self.time_expire else None,
            "attach": self.attach,
            "notify_url": self.notify_url,
            "goods_tag": self.goods_tag,
            "support_fapiao": self.support_fapiao,
            "amount": self.amount,
            "payer": self.payer,
            "detail": self.detail,
            "scene_info": self.scene_info,
            "settle_info": self.settle_info,
        })


@dataclass
class TradeGoodsDetail:
    """Single item covered by a trade promotion."""
    goods_id: str
    quantity: int
    unit_price: int
    discount_amount: int
    goods_remark: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TradeGoodsDetail':
        return cls(
            goods_id=require(data, "goods_id", "goods_detail"),
            quantity=require(data, "quantity", "goods_detail"),
            unit_price=require(data, "unit_price", "goods_detail"),
            discount_amount=require(data, "discount_amount", "goods_detail"),
            goods_remark=data.get("goods_remark")
        )

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict(self.__dict__)


@dataclass
class TradePromotionDetail:
    """Discount applied to a completed trade. Contributions are in fen."""
    coupon_id: str
    amount: int
    name: Optional[str] = None
    scope: Optional[str] = None
    promotion_type: Optional[str] = None
    stock_id: Optional[str] = None
    wechatpay_contribute: Optional[int] = None
    merchant_contribute: Optional[int] = None
    other_contribute: Optional[int] = None
    currency: Optional[str] = None
    goods_detail: List[TradeGoodsDetail] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TradePromotionDetail':
        return cls(
            coupon_id=require(data, "coupon_id", "promotion_detail"),
            amount=require(data, "amount", "promotion_detail"),
            name=data.get("name"),
            scope=data.get("scope"),
            promotion_type=data.get("type"),
            stock_id=data.get("stock_id"),
            wechatpay_contribute=data.get("wechatpay_contribute"),
            merchant_contribute=data.get("merchant_contribute"),
            other_contribute=data.get("other_contribute"),
            currency=data.get("currency"),
            goods_detail=model_list(data.get("goods_detail"), TradeGoodsDetail.from_dict)
        )

    def to_dict(self) -> Dict[str, Any]:
        return compact_dict({
            "coupon_id": self.coupon_id,
            "amount": self.amount,
            "name": self.name,
            "scope": self.scope,
            "type": self.promotion_type,
            "stock_id": self.stock_id,
            "wechatpay_contribute": self.wechatpay_contribute,
            "merchant_contribute": self.merchant_contribute,
            "other_contribute": self.other_contribute,
            "currency": self.currency,
            "goods_detail": self.goods_detail,
        })


@dataclass
class TradeQueryResponse:
    """Trade query result; also the plaintext of payment notifications."""
    app_id: str
    mch_id: str
    out_trade_no: str
    trade_state: TradeState
    trade_state_desc: str
    transaction_id: Optional[str] = None
    trade_type: Optional[TradeType] = None
    bank_type: Optional[str] = None
    attach: Optional[str] = None
    success_time: Optional[datetime] = None
    payer: Optional[Payer] = None
    amount: Optional[PaidAmount] = None
    device_id: Optional[str] = None
    promotion_detail: List[TradePromotionDetail] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TradeQueryResponse':
        if not isinstance(data, dict):
            raise MalformedPayloadError("trade must be an object")
        scene_info = data.get("scene_info") or {}
        trade_type = data.get("trade_type")
        return cls(
            app_id=require(data, "appid", "trade"),
            mch_id=require(data, "mchid", "trade"),
            out_trade_no=require(data, "out_trade_no", "trade"),
            trade_state=TradeState.parse(require(data, "trade_state", "trade")),
            trade_state_desc=data.get("trade_state_desc", ""),
            transaction_id=data.get("transaction_id"),
            trade_type=TradeType.parse(trade_type) if trade_type else None,
            bank_type=data.get("bank_type"),
            attach=data.get("attach"),
            success_time=parse_optional_datetime(data.get("success_time")),
            payer=optional_model(data.get("payer"), Payer.from_dict),
            amount=optional_model(data.get("amount"), PaidAmount.from_dict),
            device_id=scene_info.get("device_id"),
            promotion_detail=model_list(data.get("promotion_detail"), TradePromotionDetail.from_dict)
        )


@dataclass
class JsApiTradeSignature:
    """Parameters the JSAPI front end needs to invoke payment."""
    app_id: str
    timestamp: str
    nonce_str: str
    package: str
    pay_sign: str
    sign_type: str = "RSA"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "appId": self.app_id,
            "timeStamp": self.timestamp,
            "nonceStr": self.nonce_str,
            "package": self.package,
            "signType": self.sign_type,
            "paySign": self.pay_sign,
        }


OUT_TRADE_NO_ALPHABET = "abcdefghjkmnpqrstuvwxyzABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def generate_out_trade_no() -> str:
    """Merchant order number: 4 groups of 6 random characters joined by '-'."""
    groups = [
        "".join(secrets.choice(OUT_TRADE_NO_ALPHABET) for _ in range(6))
        for _ in range(4)
    ]
    return "-".join(groups)
