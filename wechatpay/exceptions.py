"""
Exception hierarchy for the WeChat Pay client.

Errors fall into four families:
- protocol-shape errors (missing headers, malformed payloads)
- cryptographic errors (signature or AEAD failures, deliberately opaque)
- trust-state errors (unknown serial, no usable certificates), the caller's cue to refresh
- upstream API errors (non-2xx responses passed through from the gateway)
"""
from typing import Optional, Dict, Any


class WechatPayError(Exception):
    """Base exception for all client errors."""

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a serializable error body."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ProtocolError(WechatPayError):
    """Response, request or payload does not have the expected shape."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None,
                 error_code: str = "protocol:malformed"):
        super().__init__(error_code, message, details)


class MissingHeaderError(ProtocolError):
    """A required signature header is absent."""

    def __init__(self, header: str):
        self.header = header
        super().__init__(
            f"missing `{header}` header",
            {"header": header},
            "protocol:missing_header"
        )


class MalformedPayloadError(ProtocolError):
    """JSON body or embedded field could not be parsed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, "protocol:malformed_payload")


class DateTimeFormatError(ProtocolError):
    """Timestamp text does not match YYYY-MM-DDTHH:MM:SS+HH:MM."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(
            f"invalid datetime: {value!r}",
            {"value": value},
            "protocol:datetime_format"
        )


class StreamingBodyError(ProtocolError):
    """Request body is a stream and cannot be hashed for signing."""

    def __init__(self, message: str = "request body must be fully materialized before signing"):
        super().__init__(message, None, "protocol:streaming_body")


class UnsupportedAlgorithmError(ProtocolError):
    """Encrypted resource uses an algorithm other than AEAD_AES_256_GCM."""

    def __init__(self, algorithm: str):
        self.algorithm = algorithm
        super().__init__(
            f"unsupported algorithm: {algorithm}",
            {"algorithm": algorithm},
            "protocol:unsupported_algorithm"
        )


class InvalidCertificateError(ProtocolError):
    """Certificate bytes are not a usable X.509 certificate with an RSA key."""

    def __init__(self, message: str, serial_no: Optional[str] = None):
        self.serial_no = serial_no
        super().__init__(message, {"serial_no": serial_no}, "protocol:invalid_certificate")


class UnknownNotificationTypeError(ProtocolError):
    """Notification resource names an original_type we cannot parse."""

    def __init__(self, original_type: str):
        self.original_type = original_type
        super().__init__(
            f"unknown notification type: {original_type}",
            {"original_type": original_type},
            "protocol:unknown_notification_type"
        )


class SignatureInvalidError(WechatPayError):
    """Signature did not verify. Which sub-check failed is not reported."""

    def __init__(self, message: str = "signature verification failed"):
        super().__init__("crypto:signature_invalid", message)


class DecryptionError(WechatPayError):
    """AEAD decryption failed. Which sub-check failed is not reported."""

    def __init__(self, message: str = "authentication failed"):
        super().__init__("crypto:decryption_failed", message)


class TrustStoreError(WechatPayError):
    """Trust store cannot supply a usable certificate."""


class UnknownSerialError(TrustStoreError):
    """No trusted certificate has the requested serial number."""

    def __init__(self, serial_no: str):
        self.serial_no = serial_no
        super().__init__(
            "trust:unknown_serial",
            f"no certificate found for serial_no: {serial_no}",
            {"serial_no": serial_no}
        )


class NoAvailableCertificatesError(TrustStoreError):
    """Every candidate certificate is expired, or none were supplied."""

    def __init__(self, message: str = "no available certificates found"):
        super().__init__("trust:no_available_certificates", message)


class GatewayApiError(WechatPayError):
    """
    Non-success HTTP status returned by the gateway.

    Error bodies are not signed, so they are surfaced without verification.
    """

    def __init__(
        self,
        status_code: int,
        code: str = "",
        message: str = "",
        detail: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.code = code
        self.detail = detail or {}
        super().__init__(
            "gateway:api_error",
            f"WeChat Pay error ({status_code} {code}): {message}",
            {"status_code": status_code, "code": code, "detail": self.detail}
        )
        self.gateway_message = message

    @classmethod
    def from_response_body(cls, status_code: int, body: Any) -> 'GatewayApiError':
        """Build from a decoded error body, tolerating missing fields."""
        if not isinstance(body, dict):
            body = {}
        detail = body.get("detail") if isinstance(body.get("detail"), dict) else {}
        return cls(
            status_code=status_code,
            code=str(body.get("code") or ""),
            message=str(body.get("message") or ""),
            detail={
                "field": str(detail.get("field") or ""),
                "value": str(detail.get("value") or ""),
                "issue": str(detail.get("issue") or ""),
                "location": str(detail.get("location") or ""),
            }
        )
