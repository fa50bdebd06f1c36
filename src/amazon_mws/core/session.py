"""Store credential management for the MWS client."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from amazon_mws.config import ClientConfig, StoreConfig, get_config
from amazon_mws.core.exceptions import ConfigError, MissingCredentialError

logger = structlog.get_logger()


@dataclass(frozen=True)
class Credentials:
    """Identity of one store, as the request engine sees it."""

    seller_id: str | None
    access_key_id: str | None
    secret_key: str = field(repr=False)
    marketplace_id: str | None = None
    auth_token: str | None = field(default=None, repr=False)


@dataclass
class StoreSession:
    """Resolves the active store and its credentials from a loaded config."""

    config: ClientConfig = field(default_factory=get_config)
    active_store: str | None = None

    def __post_init__(self) -> None:
        if self.active_store is not None or len(self.config.stores) == 1:
            self.select_store(self.active_store)

    def list_stores(self) -> list[str]:
        """List all configured store names."""
        return sorted(self.config.stores)

    def select_store(self, name: str | None = None) -> StoreConfig:
        """
        Select the store used for signing.

        The name may be omitted when exactly one store is configured.

        Raises:
            ConfigError: if the store is not configured
        """
        if name is None:
            if len(self.config.stores) != 1:
                raise ConfigError(
                    "Store name is required when more or fewer than one store is configured",
                )
            name = next(iter(self.config.stores))

        store = self.config.stores.get(name)
        if store is None:
            logger.warning("store_not_found", store=name, available=self.list_stores())
            raise ConfigError(f"Store {name} does not exist!", store=name)

        if not store.seller_id:
            logger.warning("merchant_id_missing", store=name)
        if not store.access_key_id:
            logger.warning("access_key_id_missing", store=name)
        if not store.secret_key:
            logger.warning("secret_key_missing", store=name)

        self.active_store = name
        logger.info("store_selected", store=name)
        return store

    @property
    def store(self) -> StoreConfig:
        """The configuration of the active store."""
        if self.active_store is None:
            raise ConfigError("No store selected")
        return self.config.stores[self.active_store]

    @property
    def service_url(self) -> str:
        """Base URL for requests; a store override wins over the global URL."""
        return self.store.service_url or self.config.service_url

    def get_credentials(self) -> Credentials:
        """
        Return the active store's credentials.

        Raises:
            MissingCredentialError: if the secret key is not configured
        """
        store = self.store
        if not store.secret_key:
            logger.error("secret_key_unresolved", store=self.active_store)
            raise MissingCredentialError(store=self.active_store)
        return Credentials(
            seller_id=store.seller_id,
            access_key_id=store.access_key_id,
            secret_key=store.secret_key,
            marketplace_id=store.marketplace_id,
            auth_token=store.auth_token,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert session state to dictionary; the secret key is never included."""
        store = self.config.stores.get(self.active_store) if self.active_store else None
        return {
            "active_store": self.active_store,
            "service_url": self.service_url if store else self.config.service_url,
            "store": (
                {
                    "seller_id": store.seller_id,
                    "marketplace_id": store.marketplace_id,
                    "access_key_id": store.access_key_id,
                    "has_secret_key": bool(store.secret_key),
                }
                if store
                else None
            ),
        }
