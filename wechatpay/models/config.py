"""
Configuration data models for the WeChat Pay client.
"""
from dataclasses import dataclass, field
from typing import List


DEFAULT_BASE_URL = "https://api.mch.weixin.qq.com/v3"
DEFAULT_USER_AGENT = "wechatpay Python client"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Config:
    """Merchant identity, gateway connection and local runtime settings."""

    # [merchant]
    merchant_id: str = ""
    merchant_serial_no: str = ""
    private_key_path: str = "certs/apiclient_key.pem"
    api_v3_key: str = field(default="", repr=False)

    # [gateway]
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT
    request_timeout_seconds: int = 30

    # [webhook]
    webhook_port: int = 8080

    # [app]
    log_level: str = "INFO"
    log_file_path: str = "logs/wechatpay.log"

    def __post_init__(self):
        self._validate_types()

    def _validate_types(self):
        """Reject values that could never work, independent of the environment."""
        if not isinstance(self.request_timeout_seconds, int) or self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be a positive integer")

        if not isinstance(self.webhook_port, int) or not (1 <= self.webhook_port <= 65535):
            raise ValueError("webhook_port must be an integer between 1 and 65535")

        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(LOG_LEVELS)}")


@dataclass
class ConfigValidationError:
    """A single configuration problem; ``severity`` is "error" or "warning"."""
    field: str
    message: str
    severity: str = "error"

    def __str__(self):
        return f"{self.severity.upper()}: {self.field} - {self.message}"


@dataclass
class ConfigValidationResult:
    """Errors block loading; warnings are logged."""
    errors: List[ConfigValidationError] = field(default_factory=list)
    warnings: List[ConfigValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, field_name: str, message: str) -> None:
        self.errors.append(ConfigValidationError(field_name, message))

    def warning(self, field_name: str, message: str) -> None:
        self.warnings.append(ConfigValidationError(field_name, message, "warning"))

    def summary(self) -> str:
        lines = [str(issue) for issue in self.errors + self.warnings]
        return "\n".join(f"  - {line}" for line in lines) if lines else "Configuration is valid"
