"""
Trade creation, query and close operations.
"""
import logging
import time
from urllib.parse import quote

from ..exceptions import MalformedPayloadError
from ..models.trade import CreateTradeParams, JsApiTradeSignature, TradeQueryResponse
from ..security.canonical import build_message
from ..security.signer import generate_nonce_str


class TradeService:
    """Trade operations executed through a WechatPayClient."""

    def __init__(self, client):
        self.client = client
        self.logger = logging.getLogger(__name__)

    def jsapi_create_trade(self, params: CreateTradeParams) -> str:
        """Create a JSAPI trade and return its prepay_id."""
        if params.payer is None or not params.payer.openid:
            raise ValueError("payer.openid is required for JSAPI trades")
        return self._create_trade("jsapi", params, "prepay_id")

    def app_create_trade(self, params: CreateTradeParams) -> str:
        """Create an APP trade and return its prepay_id."""
        return self._create_trade("app", params, "prepay_id")

    def h5_create_trade(self, params: CreateTradeParams) -> str:
        """Create an H5 trade and return its h5_url."""
        if params.scene_info is None or params.scene_info.h5_info is None:
            raise ValueError("scene_info.h5_info is required for H5 trades")
        return self._create_trade("h5", params, "h5_url")

    def native_create_trade(self, params: CreateTradeParams) -> str:
        """Create a Native trade and return the code_url for the payment QR code."""
        return self._create_trade("native", params, "code_url")

    def _create_trade(self, kind: str, params: CreateTradeParams, result_field: str) -> str:
        data = self.client.request_json("POST", f"/pay/transactions/{kind}", payload=params.to_dict())
        if not data or result_field not in data:
            raise MalformedPayloadError(f"create trade response missing field: {result_field}")
        self.logger.info(f"Created {kind} trade {params.out_trade_no}")
        return data[result_field]

    def query_trade_by_transaction_id(self, transaction_id: str) -> TradeQueryResponse:
        path = f"/pay/transactions/id/{quote(transaction_id, safe='')}"
        return self._query_trade(path)

    def query_trade_by_out_trade_no(self, out_trade_no: str) -> TradeQueryResponse:
        path = f"/pay/transactions/out-trade-no/{quote(out_trade_no, safe='')}"
        return self._query_trade(path)

    def _query_trade(self, path: str) -> TradeQueryResponse:
        data = self.client.request_json("GET", path, params={"mchid": self.client.credential.mch_id})
        return TradeQueryResponse.from_dict(data)

    def close_trade(self, out_trade_no: str) -> None:
        path = f"/pay/transactions/out-trade-no/{quote(out_trade_no, safe='')}/close"
        self.client.request_json("POST", path, payload={"mchid": self.client.credential.mch_id})
        self.logger.info(f"Closed trade {out_trade_no}")

    def sign_jsapi_trade(self, prepay_id: str, app_id: str) -> JsApiTradeSignature:
        """
        Sign a prepay_id for the JSAPI front end.

        The signed message is ``appId\\ntimeStamp\\nnonceStr\\npackage\\n``.
        """
        timestamp = str(int(time.time()))
        nonce_str = generate_nonce_str()
        package = f"prepay_id={prepay_id}"
        pay_sign = self.client.signer.sign_message(
            build_message(app_id, timestamp, nonce_str, package)
        )
        return JsApiTradeSignature(
            app_id=app_id,
            timestamp=timestamp,
            nonce_str=nonce_str,
            package=package,
            pay_sign=pay_sign
        )
