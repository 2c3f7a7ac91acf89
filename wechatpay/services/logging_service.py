"""
Logging and performance monitoring for the WeChat Pay client.

Log files are JSON lines. Every handler installed here carries a
RedactingFilter so Authorization signatures, response signatures and PEM
key material never reach a log sink.
"""
import json
import logging
import logging.handlers
import re
import sys
import threading
import time
import traceback
from collections import Counter, deque
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional

from ..exceptions import WechatPayError


REDACTED = "***"

_REDACTIONS = [
    (re.compile(r'(signature=")[^"]*(")'), rf'\g<1>{REDACTED}\g<2>'),
    (re.compile(r'((?:Wechatpay-Signature|paySign)["\']?\s*[:=]\s*["\']?)[A-Za-z0-9+/=]+', re.I),
     rf'\g<1>{REDACTED}'),
    (re.compile(r'-----BEGIN [A-Z ]*PRIVATE KEY-----.*?-----END [A-Z ]*PRIVATE KEY-----', re.S),
     f'[private key {REDACTED}]'),
]

# logs full request URLs at DEBUG
QUIET_LOGGERS = ("urllib3",)


def redact(text: str) -> str:
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


class RedactingFilter(logging.Filter):
    """Masks signatures and private keys in the rendered log message."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


@dataclass
class PerformanceMetric:
    """Timing of a single gateway operation."""
    operation: str
    duration_ms: float
    timestamp: str
    success: bool
    error_type: Optional[str] = None
    error_code: Optional[str] = None
    extra_data: Optional[Dict[str, Any]] = None


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with WechatPayError codes surfaced."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            'level': record.levelname,
            'logger_name': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line_number': record.lineno,
            'thread_id': record.thread,
            'extra_data': getattr(record, 'extra_data', None),
            'exception_info': None,
        }

        if record.exc_info and record.exc_info[0]:
            exc_type, exc_value, exc_tb = record.exc_info
            entry['exception_info'] = {
                'type': exc_type.__name__,
                'error_code': getattr(exc_value, 'error_code', None),
                'message': redact(str(exc_value)),
                'traceback': [redact(line) for line in traceback.format_exception(exc_type, exc_value, exc_tb)],
            }

        return json.dumps(entry, default=str, ensure_ascii=False)


class PerformanceMonitor:
    """Collects timings for signing, sending and verifying gateway calls."""

    def __init__(self, max_metrics: int = 1000):
        self.metrics: Deque[PerformanceMetric] = deque(maxlen=max_metrics)
        self.lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    @contextmanager
    def measure_operation(self, operation: str, extra_data: Optional[Dict[str, Any]] = None):
        """Time the block; failures record the exception class and error code, not the message."""
        start = time.perf_counter()
        error: Optional[BaseException] = None

        try:
            yield
        except Exception as e:
            error = e
            raise
        finally:
            metric = PerformanceMetric(
                operation=operation,
                duration_ms=(time.perf_counter() - start) * 1000,
                timestamp=datetime.now(timezone.utc).isoformat(),
                success=error is None,
                error_type=type(error).__name__ if error else None,
                error_code=error.error_code if isinstance(error, WechatPayError) else None,
                extra_data=extra_data
            )
            with self.lock:
                self.metrics.append(metric)

            self.logger.debug(
                f"{operation} took {metric.duration_ms:.1f}ms",
                extra={'extra_data': {
                    'operation': operation,
                    'success': metric.success,
                    'error_code': metric.error_code,
                    **(extra_data or {})
                }}
            )

    def get_metrics(self, operation: Optional[str] = None) -> List[PerformanceMetric]:
        with self.lock:
            metrics = list(self.metrics)
        if operation:
            metrics = [m for m in metrics if m.operation == operation]
        return metrics

    def get_operation_stats(self, operation: str) -> Dict[str, Any]:
        metrics = self.get_metrics(operation)
        if not metrics:
            return {}

        durations = [m.duration_ms for m in metrics]
        failures = [m for m in metrics if not m.success]

        return {
            'operation': operation,
            'total_calls': len(metrics),
            'success_count': len(metrics) - len(failures),
            'failure_count': len(failures),
            'success_rate': (len(metrics) - len(failures)) / len(metrics),
            'avg_duration_ms': sum(durations) / len(durations),
            'max_duration_ms': max(durations),
            'errors': dict(Counter(m.error_code or m.error_type for m in failures)),
        }


class LoggingService:
    """Configures root logging from Config and exposes performance stats."""

    def __init__(self, config, performance_monitor: Optional[PerformanceMonitor] = None):
        self.config = config
        self.performance_monitor = performance_monitor or PerformanceMonitor()
        self._setup_logging()
        self.logger = logging.getLogger(__name__)
        self.logger.info(f"Logging to {self.config.log_file_path} at {self.config.log_level}")

    def _setup_logging(self):
        """Replace root handlers with a rotating JSON file handler and a console handler."""
        Path(self.config.log_file_path).parent.mkdir(parents=True, exist_ok=True)
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        root_logger.setLevel(level)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=self.config.log_file_path,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(JSONFormatter())

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        )

        for handler in (file_handler, console_handler):
            handler.setLevel(level)
            handler.addFilter(RedactingFilter())
            root_logger.addHandler(handler)

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

    def log_with_context(self, level: str, message: str, **context):
        """Log under the package logger with structured context."""
        logger = logging.getLogger('wechatpay')
        log_method = getattr(logger, level.lower(), logger.info)
        log_method(message, extra={'extra_data': context})

    def measure_performance(self, operation: str, extra_data: Optional[Dict[str, Any]] = None):
        return self.performance_monitor.measure_operation(operation, extra_data)

    def get_performance_stats(self, operation: Optional[str] = None) -> Dict[str, Any]:
        if operation:
            return self.performance_monitor.get_operation_stats(operation)
        operations = {m.operation for m in self.performance_monitor.get_metrics()}
        return {op: self.performance_monitor.get_operation_stats(op) for op in operations}
