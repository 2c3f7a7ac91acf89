"""
In-memory trust store of gateway certificates.
"""
import logging
import threading
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from ..exceptions import NoAvailableCertificatesError, UnknownSerialError
from .models import GatewayCertificate


class CertificateTrustStore:
    """
    Immutable snapshot of currently valid gateway certificates.

    Certificates are ordered newest effective time first; equal effective
    times keep their input order.
    """

    def __init__(self, certificates: Tuple[GatewayCertificate, ...]):
        if not certificates:
            raise NoAvailableCertificatesError()
        self._certificates = certificates
        self._by_serial: Dict[str, GatewayCertificate] = {}
        for certificate in certificates:
            self._by_serial.setdefault(certificate.serial_no, certificate)

    @classmethod
    def build(cls, certificates: Iterable[GatewayCertificate],
              now: Optional[datetime] = None) -> 'CertificateTrustStore':
        """
        Build a store from candidate certificates.

        Args:
            certificates: Candidate certificates, possibly including expired ones
            now: Reference time, defaults to the current UTC time

        Raises:
            NoAvailableCertificatesError: If no certificate expires after ``now``
        """
        now = now or datetime.now(timezone.utc)
        valid = [c for c in certificates if c.expire_time > now]
        if not valid:
            raise NoAvailableCertificatesError()
        valid.sort(key=lambda c: c.effective_time, reverse=True)
        return cls(tuple(valid))

    def lookup(self, serial_no: str) -> GatewayCertificate:
        certificate = self._by_serial.get(serial_no)
        if certificate is None:
            raise UnknownSerialError(serial_no)
        return certificate

    @property
    def certificates(self) -> List[GatewayCertificate]:
        return list(self._certificates)

    @property
    def newest(self) -> GatewayCertificate:
        return self._certificates[0]

    def serial_numbers(self) -> List[str]:
        return [c.serial_no for c in self._certificates]

    def __len__(self) -> int:
        return len(self._certificates)

    def __contains__(self, serial_no: object) -> bool:
        return serial_no in self._by_serial


class TrustStoreManager:
    """Holds the current trust store and swaps it atomically on refresh."""

    def __init__(self, store: Optional[CertificateTrustStore] = None):
        self._store = store
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def snapshot(self) -> CertificateTrustStore:
        """Current store. Raises if no certificates have been loaded yet."""
        with self._lock:
            store = self._store
        if store is None:
            raise NoAvailableCertificatesError("trust store has not been initialized")
        return store

    def lookup(self, serial_no: str) -> GatewayCertificate:
        return self.snapshot().lookup(serial_no)

    def replace(self, store: CertificateTrustStore) -> None:
        if not isinstance(store, CertificateTrustStore):
            raise TypeError("store must be a CertificateTrustStore")
        with self._lock:
            self._store = store
        self.logger.info(f"Trust store replaced with serials: {store.serial_numbers()}")

    @property
    def is_initialized(self) -> bool:
        with self._lock:
            return self._store is not None
