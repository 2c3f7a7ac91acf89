"""
WeChat Pay API v3 client: signs outbound requests and verifies responses.
"""
import json
import logging
from typing import Any, Dict, List, Optional, Union

import requests

from ..exceptions import GatewayApiError, MalformedPayloadError
from ..models.config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT
from ..security import (
    CertificateTrustStore,
    GatewayCertificate,
    MerchantCredential,
    ResponseVerifier,
    SignedResponseEnvelope,
    Signer,
    TrustStoreManager,
)
from .certificate_service import CertificateService
from .logging_service import PerformanceMonitor


class WechatPayClient:
    """
    Client for the WeChat Pay API v3.

    Every request is signed with the merchant key; every successful
    response is verified against the trusted platform certificates before
    it is returned. Non-2xx responses are raised as GatewayApiError without
    verification because the gateway does not sign them.
    """

    def __init__(self,
                 credential: MerchantCredential,
                 platform_certificates: Optional[List[GatewayCertificate]] = None,
                 fetch_platform_certificates: bool = False,
                 user_agent: str = DEFAULT_USER_AGENT,
                 base_url: str = DEFAULT_BASE_URL,
                 timeout: int = 30,
                 session: Optional[requests.Session] = None,
                 performance_monitor: Optional[PerformanceMonitor] = None):
        """
        Initialize the client.

        Args:
            credential: Merchant credential used for signing and decryption
            platform_certificates: Trusted gateway certificates to start with
            fetch_platform_certificates: Download certificates during construction instead
            user_agent: User-Agent header sent with every request
            base_url: Gateway API base URL
            timeout: Request timeout in seconds
            session: Optional preconfigured requests session
            performance_monitor: Optional monitor collecting call timings

        Raises:
            ValueError: If neither or both certificate sources are given
            NoAvailableCertificatesError: If no supplied certificate is unexpired
        """
        if platform_certificates is None and not fetch_platform_certificates:
            raise ValueError("missing platform_certificates")
        if platform_certificates is not None and fetch_platform_certificates:
            raise ValueError("specify platform_certificates or fetch_platform_certificates, not both")

        self.credential = credential
        self.user_agent = user_agent
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

        self.signer = Signer(credential)
        self.trust_store = TrustStoreManager()
        self.verifier = ResponseVerifier(self.trust_store)
        self.performance_monitor = performance_monitor or PerformanceMonitor()
        self.session = session or self._create_session()
        self.certificate_service = CertificateService(self)

        if fetch_platform_certificates:
            self.refresh_platform_certificates()
        else:
            self.trust_store.replace(CertificateTrustStore.build(platform_certificates))

    def __repr__(self) -> str:
        return f"WechatPayClient(credential={self.credential!r}, base_url={self.base_url!r})"

    def _create_session(self) -> requests.Session:
        """Create a requests session with default headers."""
        session = requests.Session()
        session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'application/json',
        })
        return session

    def build_url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def prepare(self, request: Union[requests.Request, requests.PreparedRequest]) -> requests.PreparedRequest:
        if isinstance(request, requests.Request):
            request = self.session.prepare_request(request)
        request.headers['Accept'] = 'application/json'
        request.headers['User-Agent'] = self.user_agent
        return request

    def send_signed(self, request: Union[requests.Request, requests.PreparedRequest]) -> requests.Response:
        """
        Sign and send a request without verifying the response.

        Raises:
            GatewayApiError: If the gateway returns a non-success status
        """
        prepared = self.prepare(request)
        self.signer.sign(prepared)

        self.logger.info(f"Sending {prepared.method} {prepared.path_url}")
        response = self.session.send(prepared, timeout=self.timeout)

        if not 200 <= response.status_code < 300:
            raise self._api_error(response)
        return response

    def execute(self, request: Union[requests.Request, requests.PreparedRequest]) -> requests.Response:
        """
        Sign, send and verify a request.

        Returns:
            The verified response; its body is exactly the bytes received

        Raises:
            GatewayApiError: Non-success status from the gateway
            MissingHeaderError: Response lacks a signature header
            UnknownSerialError: Response signed with an untrusted certificate
            SignatureInvalidError: Signature does not verify
        """
        method = request.method
        with self.performance_monitor.measure_operation("execute", {"method": method}):
            response = self.send_signed(request)
            return self.verify_response(response)

    def verify_response(self, response: requests.Response) -> requests.Response:
        """Verify a response signature against the trust store."""
        envelope = SignedResponseEnvelope.from_headers(response.headers, response.content)
        self.verifier.verify(envelope)
        return response

    def _api_error(self, response: requests.Response) -> GatewayApiError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        error = GatewayApiError.from_response_body(response.status_code, body)
        self.logger.warning(f"Gateway error {response.status_code}: {error.code}")
        return error

    def request_json(self, method: str, path: str,
                     payload: Optional[Dict[str, Any]] = None,
                     params: Optional[Dict[str, str]] = None) -> Optional[Dict[str, Any]]:
        """
        Execute a JSON request and decode the verified response body.

        Returns:
            Decoded JSON object, or None for an empty body (e.g. 204)
        """
        request = requests.Request(method, self.build_url(path), json=payload, params=params)
        response = self.execute(request)
        if not response.content:
            return None
        try:
            return json.loads(response.content)
        except ValueError as e:
            raise MalformedPayloadError(f"invalid response JSON: {e}")

    def refresh_platform_certificates(self) -> List[GatewayCertificate]:
        """
        Download, decrypt and self-verify the platform certificate list,
        then replace the trust store. The store is untouched on failure.
        """
        return self.certificate_service.refresh()

    @property
    def platform_certificates(self) -> List[GatewayCertificate]:
        return self.trust_store.snapshot().certificates
