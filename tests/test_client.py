"""
Tests for WechatPayClient request signing and response verification.
"""
import json
import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import requests

from wechatpay.exceptions import (
    GatewayApiError,
    MalformedPayloadError,
    MissingHeaderError,
    NoAvailableCertificatesError,
    SignatureInvalidError,
    StreamingBodyError,
    UnknownSerialError,
)
from wechatpay.services.client import WechatPayClient

from tests.helpers import (
    MERCHANT_ID,
    PLATFORM_SERIAL,
    make_credential,
    make_gateway_certificate,
    make_response,
    make_signed_response,
    other_platform_key,
    platform_key,
)


class TestClientConstruction(unittest.TestCase):
    """Test cases for client construction."""

    def test_missing_certificate_source(self):
        with self.assertRaises(ValueError):
            WechatPayClient(make_credential())

    def test_both_certificate_sources(self):
        with self.assertRaises(ValueError):
            WechatPayClient(
                make_credential(),
                platform_certificates=[make_gateway_certificate()],
                fetch_platform_certificates=True
            )

    def test_only_expired_certificates(self):
        now = datetime.now(timezone.utc)
        expired = make_gateway_certificate(
            effective_time=now - timedelta(days=400), expire_time=now - timedelta(days=1)
        )
        with self.assertRaises(NoAvailableCertificatesError):
            WechatPayClient(make_credential(), platform_certificates=[expired])

    def test_defaults(self):
        client = WechatPayClient(make_credential(), platform_certificates=[make_gateway_certificate()])

        self.assertEqual(client.base_url, "https://api.mch.weixin.qq.com/v3")
        self.assertEqual(client.user_agent, "wechatpay Python client")
        self.assertEqual(client.session.headers["Accept"], "application/json")
        self.assertEqual([c.serial_no for c in client.platform_certificates], [PLATFORM_SERIAL])

    def test_repr_hides_secrets(self):
        client = WechatPayClient(make_credential(), platform_certificates=[make_gateway_certificate()])
        text = repr(client)

        self.assertIn(MERCHANT_ID, text)
        self.assertNotIn("0123456789abcdefghijklmnopqrstuv", text)
        self.assertNotIn("PRIVATE KEY", text)


class TestClientExecute(unittest.TestCase):
    """Test cases for execute and request_json."""

    def setUp(self):
        self.client = WechatPayClient(
            make_credential(),
            platform_certificates=[make_gateway_certificate(PLATFORM_SERIAL, platform_key())],
            user_agent="test-agent/1.0"
        )
        self.client.session.send = Mock()

    def _sent_request(self) -> requests.PreparedRequest:
        return self.client.session.send.call_args[0][0]

    def test_execute_signs_and_verifies(self):
        self.client.session.send.return_value = make_signed_response(b"{}")

        request = requests.Request("GET", self.client.build_url("/pay/transactions/id/42"))
        response = self.client.execute(request)

        self.assertEqual(response.content, b"{}")
        sent = self._sent_request()
        self.assertTrue(sent.headers["Authorization"].startswith("WECHATPAY2-SHA256-RSA2048 "))
        self.assertEqual(sent.headers["Accept"], "application/json")
        self.assertEqual(sent.headers["User-Agent"], "test-agent/1.0")
        self.assertEqual(self.client.session.send.call_args[1]["timeout"], 30)

    def test_execute_records_performance(self):
        self.client.session.send.return_value = make_signed_response(b"{}")
        self.client.execute(requests.Request("GET", self.client.build_url("/x")))

        stats = self.client.performance_monitor.get_operation_stats("execute")
        self.assertEqual(stats["total_calls"], 1)
        self.assertEqual(stats["success_rate"], 1.0)

    def test_body_is_returned_byte_for_byte(self):
        body = b'{ "b": 2,\n  "a": "\\u4e2d" }'
        self.client.session.send.return_value = make_signed_response(body)

        response = self.client.execute(requests.Request("GET", self.client.build_url("/x")))
        self.assertEqual(response.content, body)

    def test_tampered_body_fails(self):
        response = make_signed_response(b'{"total":1}')
        response._content = b'{"total":100}'
        self.client.session.send.return_value = response

        with self.assertRaises(SignatureInvalidError):
            self.client.execute(requests.Request("GET", self.client.build_url("/x")))

    def test_unknown_serial_fails(self):
        self.client.session.send.return_value = make_signed_response(
            b"{}", other_platform_key(), "NEW_SERIAL"
        )
        with self.assertRaises(UnknownSerialError):
            self.client.execute(requests.Request("GET", self.client.build_url("/x")))

    def test_missing_headers_fail(self):
        self.client.session.send.return_value = make_response(b"{}", 200, {})
        with self.assertRaises(MissingHeaderError):
            self.client.execute(requests.Request("GET", self.client.build_url("/x")))

    def test_error_status_is_not_verified(self):
        body = json.dumps({
            "code": "PARAM_ERROR",
            "message": "invalid out_trade_no",
            "detail": {"field": "out_trade_no", "location": "body"}
        }).encode()
        self.client.session.send.return_value = make_response(body, 400)

        with self.assertRaises(GatewayApiError) as context:
            self.client.request_json("POST", "/pay/transactions/native", payload={})

        error = context.exception
        self.assertEqual(error.status_code, 400)
        self.assertEqual(error.code, "PARAM_ERROR")
        self.assertEqual(error.gateway_message, "invalid out_trade_no")
        self.assertEqual(error.detail, {
            "field": "out_trade_no", "value": "", "issue": "", "location": "body"
        })

    def test_error_status_with_non_json_body(self):
        self.client.session.send.return_value = make_response(b"<html>bad gateway</html>", 502)

        with self.assertRaises(GatewayApiError) as context:
            self.client.request_json("GET", "/x")
        self.assertEqual(context.exception.status_code, 502)
        self.assertEqual(context.exception.code, "")

    def test_request_json_sends_payload_and_params(self):
        self.client.session.send.return_value = make_signed_response(b'{"ok":true}')

        data = self.client.request_json("POST", "/pay/transactions/native",
                                        payload={"amount": {"total": 1}}, params={"mchid": "1"})

        self.assertEqual(data, {"ok": True})
        sent = self._sent_request()
        self.assertEqual(sent.url, "https://api.mch.weixin.qq.com/v3/pay/transactions/native?mchid=1")
        self.assertEqual(json.loads(sent.body), {"amount": {"total": 1}})

    def test_request_json_empty_body(self):
        self.client.session.send.return_value = make_signed_response(b"", status_code=204)
        self.assertIsNone(self.client.request_json("POST", "/x/close", payload={}))

    def test_request_json_invalid_json(self):
        self.client.session.send.return_value = make_signed_response(b"not json")
        with self.assertRaises(MalformedPayloadError):
            self.client.request_json("GET", "/x")

    def test_streaming_body_is_not_sent(self):
        request = requests.Request("POST", self.client.build_url("/x"), data=iter([b"a", b"b"]))
        with self.assertRaises(StreamingBodyError):
            self.client.execute(request)
        self.client.session.send.assert_not_called()

    def test_prepared_request_is_accepted(self):
        self.client.session.send.return_value = make_signed_response(b"{}")
        prepared = requests.Request("GET", self.client.build_url("/x")).prepare()

        self.client.execute(prepared)
        self.assertIn("Authorization", self._sent_request().headers)


if __name__ == '__main__':
    unittest.main()
