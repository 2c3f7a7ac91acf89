"""
Tests for the certificate trust store and its manager.
"""
import threading
import unittest
from datetime import datetime, timedelta, timezone

from wechatpay.exceptions import NoAvailableCertificatesError, UnknownSerialError
from wechatpay.security.trust_store import CertificateTrustStore, TrustStoreManager

from tests.helpers import make_gateway_certificate, other_platform_key, platform_key


NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


def certificate(serial_no, effective_days_ago, expires_in_days, key=None):
    return make_gateway_certificate(
        serial_no,
        key or platform_key(),
        effective_time=NOW - timedelta(days=effective_days_ago),
        expire_time=NOW + timedelta(days=expires_in_days)
    )


class TestCertificateTrustStore(unittest.TestCase):
    """Test cases for CertificateTrustStore.build and lookup."""

    def test_only_expired_certificates_fail(self):
        candidates = [certificate("OLD1", 400, -10), certificate("OLD2", 300, -1)]
        with self.assertRaises(NoAvailableCertificatesError):
            CertificateTrustStore.build(candidates, now=NOW)

    def test_empty_input_fails(self):
        with self.assertRaises(NoAvailableCertificatesError):
            CertificateTrustStore.build([], now=NOW)

    def test_expiring_exactly_now_is_dropped(self):
        candidates = [certificate("EDGE", 10, 0), certificate("LIVE", 10, 1)]
        store = CertificateTrustStore.build(candidates, now=NOW)
        self.assertEqual(store.serial_numbers(), ["LIVE"])

    def test_mixed_set_is_filtered_and_ordered(self):
        candidates = [
            certificate("MIDDLE", 20, 100),
            certificate("EXPIRED", 1, -1),
            certificate("NEWEST", 5, 300, other_platform_key()),
            certificate("OLDEST", 60, 30),
        ]
        store = CertificateTrustStore.build(candidates, now=NOW)

        self.assertEqual(store.serial_numbers(), ["NEWEST", "MIDDLE", "OLDEST"])
        self.assertEqual(store.newest.serial_no, "NEWEST")
        self.assertEqual(len(store), 3)
        self.assertNotIn("EXPIRED", store)

    def test_equal_effective_times_keep_input_order(self):
        candidates = [certificate("FIRST", 10, 100), certificate("SECOND", 10, 200)]
        store = CertificateTrustStore.build(candidates, now=NOW)
        self.assertEqual(store.serial_numbers(), ["FIRST", "SECOND"])

    def test_lookup(self):
        target = certificate("B", 5, 100, other_platform_key())
        store = CertificateTrustStore.build([certificate("A", 10, 100), target], now=NOW)

        self.assertIs(store.lookup("B"), target)
        self.assertIn("A", store)

    def test_unknown_serial(self):
        store = CertificateTrustStore.build([certificate("A", 10, 100)], now=NOW)

        with self.assertRaises(UnknownSerialError) as context:
            store.lookup("Z")
        self.assertEqual(context.exception.serial_no, "Z")
        self.assertEqual(context.exception.error_code, "trust:unknown_serial")

    def test_certificates_returns_copy(self):
        store = CertificateTrustStore.build([certificate("A", 10, 100)], now=NOW)
        store.certificates.clear()
        self.assertEqual(len(store), 1)

    def test_build_defaults_to_current_time(self):
        live = make_gateway_certificate("LIVE")
        store = CertificateTrustStore.build([live])
        self.assertEqual(store.serial_numbers(), ["LIVE"])


class TestTrustStoreManager(unittest.TestCase):
    """Test cases for TrustStoreManager."""

    def setUp(self):
        self.first = CertificateTrustStore.build([certificate("A", 10, 100)], now=NOW)
        self.second = CertificateTrustStore.build([certificate("B", 5, 100)], now=NOW)

    def test_uninitialized_manager(self):
        manager = TrustStoreManager()

        self.assertFalse(manager.is_initialized)
        with self.assertRaises(NoAvailableCertificatesError):
            manager.snapshot()
        with self.assertRaises(NoAvailableCertificatesError):
            manager.lookup("A")

    def test_replace_swaps_snapshot(self):
        manager = TrustStoreManager(self.first)
        held = manager.snapshot()

        manager.replace(self.second)

        self.assertIs(manager.snapshot(), self.second)
        self.assertIs(held, self.first)
        self.assertEqual(held.serial_numbers(), ["A"])
        with self.assertRaises(UnknownSerialError):
            manager.lookup("A")
        self.assertEqual(manager.lookup("B").serial_no, "B")

    def test_replace_rejects_non_store(self):
        manager = TrustStoreManager(self.first)
        with self.assertRaises(TypeError):
            manager.replace([certificate("B", 5, 100)])
        self.assertIs(manager.snapshot(), self.first)

    def test_concurrent_readers_see_whole_snapshots(self):
        manager = TrustStoreManager(self.first)
        valid = {("A",), ("B",)}
        seen = []
        errors = []

        def reader():
            for _ in range(500):
                try:
                    seen.append(tuple(manager.snapshot().serial_numbers()))
                except Exception as e:
                    errors.append(e)

        def writer():
            for index in range(200):
                manager.replace(self.second if index % 2 else self.first)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        threads.append(threading.Thread(target=writer))
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertTrue(set(seen) <= valid)


if __name__ == '__main__':
    unittest.main()
