"""Configuration management for the MWS client."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from amazon_mws.core.exceptions import ConfigError

DEFAULT_SERVICE_URL = "https://mws.amazonservices.com/"


@dataclass(frozen=True)
class ThrottleConfig:
    """Retry policy for one throttle group."""

    group: str
    sleep_seconds: float
    limit: int | None = None  # Request quota; informational only


# Restore times and quotas published by Amazon for each group of actions
THROTTLE_GROUPS: dict[str, ThrottleConfig] = {
    "order": ThrottleConfig("order", 60, 6),
    "order_list": ThrottleConfig("order_list", 60, 6),
    "item": ThrottleConfig("item", 2, 30),
    "status": ThrottleConfig("status", 300, 2),
    "sellers": ThrottleConfig("sellers", 60, 15),
    "inventory": ThrottleConfig("inventory", 2, 30),
    "product_list": ThrottleConfig("product_list", 5, 20),
    "product_match": ThrottleConfig("product_match", 1, 20),
    "product_id": ThrottleConfig("product_id", 4, 20),
    "product_price": ThrottleConfig("product_price", 2, 20),
    "report_request": ThrottleConfig("report_request", 60, 15),
    "report_request_list": ThrottleConfig("report_request_list", 45, 10),
    "report_token": ThrottleConfig("report_token", 2, 30),
    "report_list": ThrottleConfig("report_list", 60, 10),
    "report": ThrottleConfig("report", 60, 15),
    "report_schedule": ThrottleConfig("report_schedule", 45, 10),
    "feed_submit": ThrottleConfig("feed_submit", 120, 15),
    "feed_list": ThrottleConfig("feed_list", 45, 10),
    "feed_result": ThrottleConfig("feed_result", 60, 15),
    "merchant": ThrottleConfig("merchant", 1, 10),
    "subscriptions": ThrottleConfig("subscriptions", 1, 25),
    "recommendations": ThrottleConfig("recommendations", 2, 8),
    "finance": ThrottleConfig("finance", 2, 30),
}


@dataclass(frozen=True)
class ServiceSection:
    """URL path and API version of one MWS section."""

    name: str
    path: str
    version: str


SERVICE_SECTIONS: dict[str, ServiceSection] = {
    "feeds": ServiceSection("feeds", "", "2009-01-01"),
    "finances": ServiceSection("finances", "Finances/2015-05-01", "2015-05-01"),
    "inbound": ServiceSection("inbound", "FulfillmentInboundShipment/2010-10-01", "2010-10-01"),
    "inventory": ServiceSection("inventory", "FulfillmentInventory/2010-10-01", "2010-10-01"),
    "merchant": ServiceSection("merchant", "MerchantFulfillment/2015-06-01", "2015-06-01"),
    "orders": ServiceSection("orders", "Orders/2013-09-01", "2013-09-01"),
    "outbound": ServiceSection("outbound", "FulfillmentOutboundShipment/2010-10-01", "2010-10-01"),
    "products": ServiceSection("products", "Products/2011-10-01", "2011-10-01"),
    "recommendations": ServiceSection("recommendations", "Recommendations/2013-04-01", "2013-04-01"),
    "reports": ServiceSection("reports", "", "2009-01-01"),
    "sellers": ServiceSection("sellers", "Sellers/2011-07-01", "2011-07-01"),
    "subscriptions": ServiceSection("subscriptions", "Subscriptions/2013-07-01", "2013-07-01"),
}


def get_throttle(group: str) -> ThrottleConfig:
    """Look up a throttle group by name."""
    try:
        return THROTTLE_GROUPS[group]
    except KeyError:
        raise ConfigError(f"Unknown throttle group '{group}'") from None


def get_section(name: str) -> ServiceSection:
    """Look up a service section by name."""
    try:
        return SERVICE_SECTIONS[name]
    except KeyError:
        raise ConfigError(f"Unknown service section '{name}'") from None


class StoreConfig(BaseModel):
    """Credentials and overrides for one store."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    seller_id: str | None = Field(None, alias="merchantId")
    marketplace_id: str | None = Field(None, alias="marketplaceId")
    access_key_id: str | None = Field(None, alias="keyId")
    secret_key: str | None = Field(None, alias="secretKey", repr=False)
    service_url: str | None = Field(None, alias="serviceUrl")
    auth_token: str | None = Field(None, alias="MWSAuthToken", repr=False)

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ClientConfig(BaseModel):
    """Main client configuration, loaded once and passed by reference."""

    model_config = ConfigDict(populate_by_name=True)

    stores: dict[str, StoreConfig] = Field(default_factory=dict)
    service_url: str = Field(DEFAULT_SERVICE_URL, alias="AMAZON_SERVICE_URL")

    # Logging
    log_path: str | None = Field(None, alias="logpath")
    mute_log: bool = Field(False, alias="muteLog")

    # Throttling
    throttle_safe: bool = Field(False, alias="THROTTLE_SAFE")
    max_throttle_attempts: int | None = Field(None, ge=1)

    # Performance
    pagination_max_pages: int | None = Field(None, ge=1)
    request_timeout: float = Field(30.0, gt=0)

    # Mock mode
    mock_dir: str | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> "ClientConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except OSError:
            raise ConfigError(f"Config file does not exist or cannot be read! ({path})", path=str(path)) from None
        except ValueError as e:
            raise ConfigError(f"Config file is not valid JSON: {e}", path=str(path)) from None
        return cls.from_dict(raw, source=str(path))

    @classmethod
    def from_dict(cls, raw: dict[str, Any], source: str | None = None) -> "ClientConfig":
        """Build configuration from an already-parsed mapping."""
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}", path=source) from None

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load configuration from environment variables."""
        config_file = os.environ.get("MWS_CONFIG_FILE")
        if config_file:
            return cls.from_file(config_file)

        store = StoreConfig(
            seller_id=os.environ.get("MWS_SELLER_ID"),
            marketplace_id=os.environ.get("MWS_MARKETPLACE_ID"),
            access_key_id=os.environ.get("MWS_ACCESS_KEY_ID"),
            secret_key=os.environ.get("MWS_SECRET_KEY"),
            auth_token=os.environ.get("MWS_AUTH_TOKEN"),
        )
        return cls(
            stores={os.environ.get("MWS_STORE", "default"): store},
            service_url=os.environ.get("MWS_SERVICE_URL", DEFAULT_SERVICE_URL),
            throttle_safe=os.environ.get("MWS_THROTTLE_SAFE", "false").lower() == "true",
            mute_log=os.environ.get("MWS_MUTE_LOG", "false").lower() == "true",
        )


# Global configuration instance
_config: ClientConfig | None = None


def get_config() -> ClientConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ClientConfig.from_env()
    return _config


def set_config(config: ClientConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None
