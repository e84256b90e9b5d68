"""Client configuration queries combining cluster-wide and per-member settings."""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterable

from microceph.constants import CLIENT_CONFIG_GLOBAL_HOST
from microceph.database.client_config import (
    ClientConfigItem,
    ClientConfigItemFilter,
    delete_client_config_item,
    delete_client_config_items,
    get_client_config_items,
)
from microceph.database.core import State, StatusError

logger = logging.getLogger(__name__)

_MEMBER_ID = (
    "(SELECT core_cluster_members.id FROM core_cluster_members "
    "WHERE core_cluster_members.name = ?)"
)

_GLOBAL_ALL = (
    "SELECT client_config.id, client_config.key, client_config.value FROM client_config "
    "WHERE client_config.member_id IS NULL ORDER BY client_config.key"
)

_GLOBAL_BY_KEY = (
    "SELECT client_config.id, client_config.key, client_config.value FROM client_config "
    "WHERE ( client_config.key = ? AND client_config.member_id IS NULL )"
)


def _rewrap(err: Exception, message: str) -> StatusError:
    """Build a status error carrying ``message`` and, when known, the status of ``err``."""
    if isinstance(err, StatusError):
        return type(err)(f"{message}: {err}", err.status)
    return StatusError(f"{message}: {err}")


def _create_or_update(conn: sqlite3.Connection, item: ClientConfigItem) -> None:
    """Insert ``item``, replacing any existing value for the same host and key."""
    if item.host == CLIENT_CONFIG_GLOBAL_HOST:
        conn.execute(
            "INSERT OR REPLACE INTO client_config (member_id, key, value) VALUES (NULL, ?, ?)",
            (item.key, item.value),
        )
    else:
        conn.execute(
            "INSERT OR REPLACE INTO client_config (member_id, key, value) "
            f"VALUES ({_MEMBER_ID}, ?, ?)",
            (item.host, item.key, item.value),
        )


def squash_client_configs(
    global_configs: Iterable[ClientConfigItem], host_configs: Iterable[ClientConfigItem]
) -> list[ClientConfigItem]:
    """Overlay host configs on global configs, one item per key."""
    by_key: dict[str, ClientConfigItem] = {}
    for item in global_configs:
        by_key[item.key] = item
    for item in host_configs:
        by_key[item.key] = item
    squashed = list(by_key.values())
    logger.info("Squashed slice: %s", squashed)
    return squashed


def client_config_slice(items: Iterable[ClientConfigItem]) -> list[dict[str, str]]:
    """Turn stored items into API records; items without a host are cluster wide."""
    return [
        {
            "key": item.key,
            "value": item.value,
            "host": item.host or CLIENT_CONFIG_GLOBAL_HOST,
        }
        for item in items
    ]


class ClientConfigQuery:
    """Reads and writes client configuration in the cluster database."""

    def add_new(self, state: State, key: str, value: str, host: str) -> None:
        """Set ``key`` to ``value`` for ``host`` (``*`` for every host)."""
        item = ClientConfigItem(key=key, value=value, host=host)
        try:
            with state.database.transaction() as conn:
                _create_or_update(conn, item)
        except (sqlite3.Error, StatusError) as err:
            raise _rewrap(err, "failed to add client config") from err

    def get_all(self, state: State) -> list[ClientConfigItem]:
        """Return every global config followed by every host config."""
        try:
            global_configs = self.get_global_configs(state, "")
        except (sqlite3.Error, StatusError) as err:
            raise _rewrap(err, "failed to fetch global client configs") from err
        logger.info("Global Configs: %s", global_configs)
        try:
            host_configs = self.get_all_for_filter(state)
        except (sqlite3.Error, StatusError) as err:
            raise _rewrap(err, "failed to fetch host configured client configs") from err
        logger.info("Host Configs: %s", host_configs)
        return global_configs + host_configs

    def get_all_for_key(self, state: State, key: str) -> list[ClientConfigItem]:
        """Return the global and host configs for ``key``."""
        try:
            global_configs = self.get_global_configs(state, key)
        except (sqlite3.Error, StatusError) as err:
            raise _rewrap(err, f"failed to fetch global client configs, key {key}") from err
        try:
            host_configs = self.get_all_for_filter(state, ClientConfigItemFilter(key=key))
        except (sqlite3.Error, StatusError) as err:
            raise _rewrap(
                err, f"failed to fetch host configured client configs, key {key}"
            ) from err
        return global_configs + host_configs

    def get_all_for_host(self, state: State, host: str) -> list[ClientConfigItem]:
        """Return the configs that apply to ``host``: its own over the global ones."""
        try:
            global_configs = self.get_global_configs(state, "")
        except (sqlite3.Error, StatusError) as err:
            raise _rewrap(err, f"failed to fetch global client configs, host {host}") from err
        try:
            host_configs = self.get_all_for_filter(state, ClientConfigItemFilter(host=host))
        except (sqlite3.Error, StatusError) as err:
            raise _rewrap(err, f"failed to fetch host client configs, host {host}") from err
        return squash_client_configs(global_configs, host_configs)

    def get_all_for_key_and_host(
        self, state: State, key: str, host: str
    ) -> list[ClientConfigItem]:
        """Return the config ``key`` set for ``host`` itself."""
        return self.get_all_for_filter(state, ClientConfigItemFilter(host=host, key=key))

    def get_all_for_filter(
        self, state: State, *filters: ClientConfigItemFilter
    ) -> list[ClientConfigItem]:
        """Return host configs matching any of ``filters``, or all of them."""
        with state.database.transaction() as conn:
            return get_client_config_items(conn, *filters)

    def get_global_configs(self, state: State, key: str = "") -> list[ClientConfigItem]:
        """Return the global configs, only the one for ``key`` when it is given."""
        with state.database.transaction() as conn:
            if key:
                rows = conn.execute(_GLOBAL_BY_KEY, (key,)).fetchall()
            else:
                rows = conn.execute(_GLOBAL_ALL).fetchall()
        return [
            ClientConfigItem(id=row[0], host=CLIENT_CONFIG_GLOBAL_HOST, key=row[1], value=row[2])
            for row in rows
        ]

    def remove_all_for_key(self, state: State, key: str) -> None:
        """Remove ``key`` for every host and globally."""
        try:
            with state.database.transaction() as conn:
                delete_client_config_items(conn, key)
        except (sqlite3.Error, StatusError) as err:
            raise _rewrap(err, f"failed to clean existing keys {key}") from err

    def remove_one_for_key_and_host(self, state: State, key: str, host: str) -> None:
        """Remove ``key`` as set for ``host``."""
        try:
            with state.database.transaction() as conn:
                delete_client_config_item(conn, key, host)
        except (sqlite3.Error, StatusError) as err:
            raise _rewrap(err, f"failed to clean existing keys {key}") from err


client_config_query = ClientConfigQuery()