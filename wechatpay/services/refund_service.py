"""
Refund operations.
"""
import logging
from urllib.parse import quote

from ..models.refund import RefundParams, RefundQueryResponse


class RefundService:
    """Refund operations executed through a WechatPayClient."""

    def __init__(self, client):
        self.client = client
        self.logger = logging.getLogger(__name__)

    def apply_refund(self, params: RefundParams) -> RefundQueryResponse:
        data = self.client.request_json("POST", "/refund/domestic/refunds", payload=params.to_dict())
        self.logger.info(f"Applied refund {params.out_refund_no}")
        return RefundQueryResponse.from_dict(data)

    def query_refund(self, out_refund_no: str) -> RefundQueryResponse:
        data = self.client.request_json(
            "GET", f"/refund/domestic/refunds/{quote(out_refund_no, safe='')}"
        )
        return RefundQueryResponse.from_dict(data)
