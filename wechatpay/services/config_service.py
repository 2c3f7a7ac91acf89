"""
Configuration service for loading client settings and merchant credentials.

Settings come from an INI file with [merchant], [gateway], [webhook] and
[app] sections. Secrets may instead be supplied through WECHATPAY_*
environment variables, which take precedence over the file.
"""
import configparser
import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional

from cryptography.hazmat.primitives import serialization

from ..models.config import Config, ConfigValidationResult
from ..security.models import API_V3_KEY_LENGTH, MerchantCredential


# "section.key" -> (Config field, converter)
CONFIG_KEYS: Dict[str, tuple] = {
    "merchant.id": ("merchant_id", str),
    "merchant.serial_no": ("merchant_serial_no", str),
    "merchant.private_key_path": ("private_key_path", str),
    "merchant.api_v3_key": ("api_v3_key", str),
    "gateway.base_url": ("base_url", str),
    "gateway.user_agent": ("user_agent", str),
    "gateway.request_timeout_seconds": ("request_timeout_seconds", int),
    "webhook.port": ("webhook_port", int),
    "app.log_level": ("log_level", str.upper),
    "app.log_file_path": ("log_file_path", str),
}

ENV_OVERRIDES = {
    "WECHATPAY_MERCHANT_ID": "merchant.id",
    "WECHATPAY_MERCHANT_SERIAL_NO": "merchant.serial_no",
    "WECHATPAY_PRIVATE_KEY_PATH": "merchant.private_key_path",
    "WECHATPAY_API_V3_KEY": "merchant.api_v3_key",
}

DEFAULT_CONFIG_TEMPLATE = """# WeChat Pay client configuration
# Secrets may be left empty here and supplied via WECHATPAY_API_V3_KEY etc.

[merchant]
id = 1900000001
serial_no = your-merchant-certificate-serial
private_key_path = certs/apiclient_key.pem
api_v3_key = replace-with-32-byte-api-v3-key!

[gateway]
base_url = https://api.mch.weixin.qq.com/v3
user_agent = wechatpay Python client
request_timeout_seconds = 30

[webhook]
port = 8080

[app]
log_level = INFO
log_file_path = logs/wechatpay.log
"""


class ConfigService:
    """Loads, validates and holds the client configuration."""

    def __init__(self, config_path: Optional[str] = None,
                 environ: Optional[Mapping[str, str]] = None):
        self.logger = logging.getLogger(__name__)
        self.environ = os.environ if environ is None else environ
        self._config: Optional[Config] = None
        if config_path:
            self._config = self.load_config(config_path)

    def get_config(self) -> Config:
        if self._config is None:
            raise ValueError("No configuration loaded. Call load_config() first.")
        return self._config

    def load_config(self, config_path: str) -> Config:
        """
        Load, override from the environment and validate an INI file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file cannot be parsed or validation reports errors
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        values = self._read_ini(config_path)
        values.update(self._env_values())
        config = self._build_config(values)

        result = self.validate_config(config)
        if not result.is_valid:
            raise ValueError(f"Configuration validation failed:\n{result.summary()}")
        if result.warnings:
            self.logger.warning(f"Configuration warnings:\n{result.summary()}")

        self._config = config
        self.logger.info(f"Loaded configuration for merchant {config.merchant_id} from {config_path}")
        return config

    def _read_ini(self, config_path: str) -> Dict[str, str]:
        parser = configparser.ConfigParser()
        try:
            parser.read(config_path, encoding="utf-8")
        except configparser.Error as e:
            raise ValueError(f"Failed to parse configuration file: {e}")

        return {
            f"{section}.{key}": value
            for section in parser.sections()
            for key, value in parser.items(section, raw=True)
        }

    def _env_values(self) -> Dict[str, str]:
        values = {}
        for env_name, config_key in ENV_OVERRIDES.items():
            value = self.environ.get(env_name)
            if value:
                values[config_key] = value
                self.logger.debug(f"{config_key} taken from {env_name}")
        return values

    def _build_config(self, values: Dict[str, str]) -> Config:
        kwargs: Dict[str, Any] = {}
        for config_key, raw_value in values.items():
            if config_key not in CONFIG_KEYS:
                continue
            field_name, convert = CONFIG_KEYS[config_key]
            try:
                kwargs[field_name] = convert(raw_value)
            except (ValueError, TypeError):
                # the raw value may be a secret
                raise ValueError(f"Invalid value for {config_key}")
        return Config(**kwargs)

    def validate_config(self, config: Config) -> ConfigValidationResult:
        """Check settings that depend on the environment (files, key sizes)."""
        result = ConfigValidationResult()

        required: Dict[str, Callable[[Config], str]] = {
            "merchant_id": lambda c: c.merchant_id,
            "merchant_serial_no": lambda c: c.merchant_serial_no,
            "private_key_path": lambda c: c.private_key_path,
        }
        for field_name, getter in required.items():
            if not getter(config):
                result.error(field_name, "is required")

        if config.private_key_path and not os.path.exists(config.private_key_path):
            result.error("private_key_path", f"Private key file not found: {config.private_key_path}")

        if len(config.api_v3_key.encode("utf-8")) != API_V3_KEY_LENGTH:
            result.error("api_v3_key", f"API v3 key must be {API_V3_KEY_LENGTH} bytes")

        if not config.base_url.startswith("https://"):
            result.warning("base_url", "Gateway base URL is not HTTPS")

        if config.request_timeout_seconds > 60:
            result.warning("request_timeout_seconds", "Request timeout over 1 minute may block callers")

        log_dir = os.path.dirname(config.log_file_path)
        if log_dir and not os.path.isdir(log_dir):
            result.warning("log_file_path", f"Log directory will be created: {log_dir}")

        return result

    def load_credential(self, config: Optional[Config] = None) -> MerchantCredential:
        """
        Build the merchant credential from configuration.

        Raises:
            FileNotFoundError: If the private key file does not exist
            ValueError: If the key cannot be parsed or fails credential checks
        """
        config = config or self.get_config()
        credential = MerchantCredential(
            mch_id=config.merchant_id,
            mch_certificate_serial_no=config.merchant_serial_no,
            private_key=self.load_private_key(config.private_key_path),
            api_v3_key=config.api_v3_key
        )
        self.logger.info(f"Loaded merchant credential for {config.merchant_id}")
        return credential

    def load_private_key(self, key_path: str):
        """Load the merchant's unencrypted PEM private key (apiclient_key.pem)."""
        if not os.path.exists(key_path):
            raise FileNotFoundError(f"Private key file not found: {key_path}")

        with open(key_path, 'rb') as f:
            pem = f.read()

        try:
            return serialization.load_pem_private_key(pem, password=None)
        except (ValueError, TypeError) as e:
            raise ValueError(f"Failed to load private key {key_path}: {e}")

    def create_default_config_file(self, config_path: str) -> None:
        """Write DEFAULT_CONFIG_TEMPLATE to config_path, creating parent directories."""
        config_dir = os.path.dirname(config_path)
        if config_dir:
            os.makedirs(config_dir, exist_ok=True)

        with open(config_path, 'w', encoding='utf-8') as f:
            f.write(DEFAULT_CONFIG_TEMPLATE)

        self.logger.info(f"Created default configuration file: {config_path}")
