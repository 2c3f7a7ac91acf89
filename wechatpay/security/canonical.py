"""
Canonical messages covered by request and response signatures.

Requests sign ``METHOD\\nPATH\\nTIMESTAMP\\nNONCE\\nBODY\\n``; responses and
notifications sign ``TIMESTAMP\\nNONCE\\nBODY\\n``. Fields are joined verbatim.
"""
from typing import Union

from .models import SignableRequest, SignedResponseEnvelope


def _to_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, bytes):
        return value
    return value.encode("utf-8")


def build_message(*fields: Union[str, bytes]) -> bytes:
    """Join fields, terminating each with a newline."""
    return b"".join(_to_bytes(f) + b"\n" for f in fields)


def build_request_message(request: SignableRequest) -> bytes:
    return build_message(
        request.method,
        request.path,
        request.timestamp,
        request.nonce_str,
        request.body or b""
    )


def build_response_message(envelope: SignedResponseEnvelope) -> bytes:
    return build_message(envelope.timestamp, envelope.nonce, envelope.body or b"")
