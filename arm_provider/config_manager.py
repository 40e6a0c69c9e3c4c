import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import colorlog
from dotenv import load_dotenv

from .exceptions import MissingConfigurationError
from .logging_config import configure_structlog
from .timeout_config import Timeouts

# Load environment variables
load_dotenv()

"""
Configuration Management for the Azure Resource Manager provider

This module provides centralized configuration management with validation
and environment variable handling.
"""


def _set_azure_http_log_level(log_level: str) -> None:
    """Set log levels for HTTP-related loggers to reduce noise."""
    http_loggers = [
        "azure.core.pipeline.policies.http_logging_policy",
        "azure.core.pipeline",
        "azure.identity",
        "azure.mgmt",
        "azure",
        "urllib3",
        "urllib3.connectionpool",
        "http.client",
    ]
    # HTTP logging should only appear at DEBUG level
    target_level = logging.DEBUG if log_level == "DEBUG" else logging.WARNING
    for name in http_loggers:
        logging.getLogger(name).setLevel(target_level)


logger = logging.getLogger(__name__)


@dataclass
class AzureConfig:
    """Subscription and service principal settings."""

    subscription_id: str = field(
        default_factory=lambda: os.getenv("ARM_SUBSCRIPTION_ID", "")
    )
    tenant_id: Optional[str] = field(default_factory=lambda: os.getenv("ARM_TENANT_ID"))
    client_id: Optional[str] = field(default_factory=lambda: os.getenv("ARM_CLIENT_ID"))
    client_secret: Optional[str] = field(
        default_factory=lambda: os.getenv("ARM_CLIENT_SECRET")
    )

    def validate(self) -> None:
        if not self.subscription_id:
            raise MissingConfigurationError(
                "Azure subscription ID is required",
                missing_keys=["ARM_SUBSCRIPTION_ID"],
            )
        sp_values = [self.tenant_id, self.client_id, self.client_secret]
        if any(sp_values[1:]) and not all(sp_values):
            missing = [
                name
                for name, value in zip(
                    ["ARM_TENANT_ID", "ARM_CLIENT_ID", "ARM_CLIENT_SECRET"], sp_values
                )
                if not value
            ]
            raise MissingConfigurationError(
                "Service principal authentication needs tenant, client ID and secret",
                missing_keys=missing,
            )

    def uses_service_principal(self) -> bool:
        return bool(self.tenant_id and self.client_id and self.client_secret)


@dataclass
class PollingConfig:
    """Configuration for long-running operation polling."""

    interval: float = field(default_factory=lambda: float(Timeouts.POLL_INTERVAL))
    create_timeout: float = field(default_factory=lambda: float(Timeouts.CREATE))
    read_timeout: float = field(default_factory=lambda: float(Timeouts.READ))
    update_timeout: float = field(default_factory=lambda: float(Timeouts.UPDATE))
    delete_timeout: float = field(default_factory=lambda: float(Timeouts.DELETE))

    def __post_init__(self) -> None:
        """Validate polling configuration."""
        if self.interval <= 0:
            raise ValueError("Poll interval must be positive")
        for name in ("create", "read", "update", "delete"):
            if getattr(self, f"{name}_timeout") <= 0:
                raise ValueError(f"{name.capitalize()} timeout must be positive")


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""

    level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    format: str = field(
        default_factory=lambda: os.getenv(
            "LOG_FORMAT", "%(log_color)s%(levelname)s:%(name)s:%(message)s"
        )
    )
    file_output: Optional[str] = field(default_factory=lambda: os.getenv("LOG_FILE"))

    def __post_init__(self) -> None:
        """Validate logging configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.level.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        self.level = self.level.upper()

    def get_log_level(self) -> int:
        """Convert string log level to logging constant."""
        level_attr = getattr(logging, self.level, None)
        if level_attr is None:
            raise ValueError(f"Invalid log level: {self.level}")
        return int(level_attr)


@dataclass
class ProviderConfig:
    """Main configuration class that aggregates all configuration sections."""

    azure: AzureConfig = field(default_factory=AzureConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_environment(
        cls,
        subscription_id: Optional[str] = None,
        poll_interval: Optional[float] = None,
        log_level: Optional[str] = None,
    ) -> "ProviderConfig":
        """
        Create configuration from environment variables.

        Args:
            subscription_id: Overrides ARM_SUBSCRIPTION_ID
            poll_interval: Overrides ARM_PROVIDER_POLL_INTERVAL
            log_level: Overrides LOG_LEVEL

        Returns:
            ProviderConfig: Configured instance
        """
        config = cls()
        if subscription_id:
            config.azure.subscription_id = subscription_id
        if poll_interval is not None:
            config.polling.interval = poll_interval
        if log_level:
            config.logging.level = log_level.upper()
        return config

    def validate_all(self) -> None:
        """Validate all configuration sections."""
        try:
            self.azure.validate()
            self.polling.__post_init__()
            self.logging.__post_init__()
            logger.debug("Configuration validation successful")
        except Exception as e:
            logger.error(f"Configuration validation failed: {e}")
            raise

    def log_configuration_summary(self) -> None:
        """Log a summary of the current configuration (without sensitive data)."""
        logger.info("=" * 60)
        logger.info("AZURE RESOURCE MANAGER PROVIDER CONFIGURATION")
        logger.info("=" * 60)
        logger.info(f"Subscription: {self.azure.subscription_id}")
        logger.info(
            "Authentication: "
            + (
                f"service principal {self.azure.client_id}"
                if self.azure.uses_service_principal()
                else "default credential chain"
            )
        )
        logger.info(f"Poll interval: {self.polling.interval:g}s")
        logger.info(
            f"Timeouts: create={self.polling.create_timeout:g}s "
            f"read={self.polling.read_timeout:g}s "
            f"update={self.polling.update_timeout:g}s "
            f"delete={self.polling.delete_timeout:g}s"
        )
        logger.info(f"Logging Level: {self.logging.level}")
        if self.logging.file_output:
            logger.info(f"Log File: {self.logging.file_output}")
        logger.info("=" * 60)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary for serialization."""
        return {
            "azure": {
                "subscription_id": self.azure.subscription_id,
                "tenant_id": self.azure.tenant_id,
                "client_id": self.azure.client_id,
                # Don't include the client secret in serialization
            },
            "polling": {
                "interval": self.polling.interval,
                "create_timeout": self.polling.create_timeout,
                "read_timeout": self.polling.read_timeout,
                "update_timeout": self.polling.update_timeout,
                "delete_timeout": self.polling.delete_timeout,
            },
            "logging": {
                "level": self.logging.level,
                "file_output": self.logging.file_output,
            },
        }


def setup_logging(config: LoggingConfig) -> None:
    """
    Setup logging configuration based on config.
    """
    _set_azure_http_log_level(config.level.upper())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(config.get_log_level())

    console_handler = colorlog.StreamHandler()
    console_handler.setFormatter(colorlog.ColoredFormatter(config.format))
    root_logger.addHandler(console_handler)

    if config.file_output:
        file_handler = logging.FileHandler(config.file_output)
        file_formatter = logging.Formatter(
            "%(asctime)s - %(levelname)s:%(name)s:%(message)s"
        )
        file_handler.setFormatter(file_formatter)
        root_logger.addHandler(file_handler)

    configure_structlog()

    # Specifically suppress Azure HTTP logging policy verbose output
    azure_http_logger = logging.getLogger(
        "azure.core.pipeline.policies.http_logging_policy"
    )
    azure_http_logger.setLevel(logging.WARNING)

    logger.debug(
        f"Logging configured: level={config.level}, file={config.file_output or 'console'}"
    )


def create_config_from_env(
    subscription_id: Optional[str] = None,
    poll_interval: Optional[float] = None,
    log_level: Optional[str] = None,
) -> ProviderConfig:
    """
    Factory function to create and validate configuration from environment.

    Raises:
        MissingConfigurationError: If required settings are absent
        ValueError: If a setting is invalid
    """
    config = ProviderConfig.from_environment(subscription_id, poll_interval, log_level)
    config.validate_all()
    return config
