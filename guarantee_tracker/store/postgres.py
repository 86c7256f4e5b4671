"""PostgreSQL guarantee store using psycopg."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator

import psycopg
from psycopg import sql
from psycopg.rows import dict_row

from guarantee_tracker.codec.serialization import record_from_dict
from guarantee_tracker.config import PostgresConfig
from guarantee_tracker.exceptions import ConfigurationError, RecordNotFoundError, RemoteError
from guarantee_tracker.models import (
    GuaranteeRecord,
    GuaranteeStatistics,
    GuaranteeUpdate,
    NewGuarantee,
)
from guarantee_tracker.realtime.feeds import ChangeFeed, PostgresNotifyFeed
from guarantee_tracker.realtime.subscription import ChangeCallback, Subscription
from guarantee_tracker.store.base import GuaranteeStore

logger = logging.getLogger(__name__)

INSERT_COLUMNS = (
    "guarantee_number",
    "guarantee_type",
    "value",
    "currency",
    "issue_date",
    "expiry_date",
    "status",
    "bank_name",
)

# Table, notify function and trigger; placeholders are identifiers
TABLE_DDL = """
CREATE TABLE IF NOT EXISTS {table} (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    guarantee_number TEXT NOT NULL,
    guarantee_type TEXT NOT NULL,
    value NUMERIC(18, 2) NOT NULL CHECK (value >= 0),
    currency TEXT NOT NULL DEFAULT 'SAR',
    issue_date DATE NOT NULL,
    expiry_date DATE NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('active', 'pending', 'expired')),
    bank_name TEXT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
);

CREATE INDEX IF NOT EXISTS {created_index} ON {table} (created_at DESC);

CREATE OR REPLACE FUNCTION {notify_fn}() RETURNS trigger AS $$
BEGIN
    PERFORM pg_notify(
        {channel},
        json_build_object(
            'eventType', TG_OP,
            'new', CASE WHEN TG_OP = 'DELETE' THEN NULL ELSE row_to_json(NEW) END,
            'old', CASE WHEN TG_OP = 'INSERT' THEN NULL ELSE json_build_object('id', OLD.id) END
        )::text
    );
    RETURN NULL;
END;
$$ LANGUAGE plpgsql;

DROP TRIGGER IF EXISTS {trigger} ON {table};
CREATE TRIGGER {trigger}
    AFTER INSERT OR UPDATE OR DELETE ON {table}
    FOR EACH ROW EXECUTE FUNCTION {notify_fn}();
"""


class PostgresGuaranteeStore(GuaranteeStore):
    """Guarantee store on a PostgreSQL table.

    Parameters
    ----------
    config : PostgresConfig
        Connection settings; a missing URL fails construction.
    feed : ChangeFeed | None
        Source of change notifications (LISTEN/NOTIFY on the configured
        channel by default).
    """

    def __init__(self, config: PostgresConfig, feed: ChangeFeed | None = None) -> None:
        if not config.is_configured:
            raise ConfigurationError(
                "Database connection is not configured. Set DATABASE_URL."
            )
        self.config = config
        self.feed = feed or PostgresNotifyFeed(config)
        self.table = sql.Identifier(config.table)
        try:
            self.conn = psycopg.connect(
                config.url,
                autocommit=True,
                row_factory=dict_row,
                connect_timeout=config.connect_timeout,
            )
        except psycopg.Error as e:
            raise RemoteError(f"Failed to connect to the guarantee database: {e}") from e

    @contextmanager
    def _remote(self, action: str) -> Iterator[Any]:
        """Cursor whose driver errors surface as ``RemoteError``."""
        try:
            with self.conn.cursor() as cur:
                yield cur
        except psycopg.Error as e:
            logger.error("Failed to %s: %s", action, e)
            raise RemoteError(f"Failed to {action}: {e}") from e

    def ensure_table(self) -> None:
        """Create the table and its change-notification trigger if missing."""
        ddl = sql.SQL(TABLE_DDL).format(
            table=self.table,
            created_index=sql.Identifier(f"{self.config.table}_created_at_idx"),
            notify_fn=sql.Identifier(f"{self.config.table}_notify"),
            trigger=sql.Identifier(f"{self.config.table}_changes"),
            channel=sql.Literal(self.config.channel),
        )
        with self._remote("create guarantee table") as cur:
            cur.execute(ddl)
        logger.info("Ensured table %s with notify channel %s", self.config.table, self.config.channel)

    def list_all(self) -> list[GuaranteeRecord]:
        query = sql.SQL("SELECT * FROM {} ORDER BY created_at DESC").format(self.table)
        with self._remote("fetch guarantees") as cur:
            cur.execute(query)
            rows = cur.fetchall()
        return [record_from_dict(row) for row in rows]

    def get(self, record_id: str) -> GuaranteeRecord:
        query = sql.SQL("SELECT * FROM {} WHERE id = %s").format(self.table)
        with self._remote("fetch guarantee") as cur:
            cur.execute(query, (record_id,))
            row = cur.fetchone()
        if row is None:
            raise RecordNotFoundError(f"Guarantee {record_id} not found")
        return record_from_dict(row)

    def create(self, guarantee: NewGuarantee) -> GuaranteeRecord:
        query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
            self.table,
            sql.SQL(", ").join(map(sql.Identifier, INSERT_COLUMNS)),
            sql.SQL(", ").join(sql.Placeholder() * len(INSERT_COLUMNS)),
        )
        params = [_param(getattr(guarantee, column)) for column in INSERT_COLUMNS]
        with self._remote("create guarantee") as cur:
            cur.execute(query, params)
            row = cur.fetchone()
        logger.debug("Created guarantee %s", guarantee.guarantee_number)
        return record_from_dict(row)

    def update(self, record_id: str, changes: GuaranteeUpdate) -> GuaranteeRecord:
        fields = changes.changes()
        if not fields:
            return self.get(record_id)

        assignments = [
            sql.SQL("{} = %s").format(sql.Identifier(name)) for name in fields
        ]
        assignments.append(sql.SQL("updated_at = now()"))
        query = sql.SQL("UPDATE {} SET {} WHERE id = %s RETURNING *").format(
            self.table,
            sql.SQL(", ").join(assignments),
        )
        params = [_param(value) for value in fields.values()] + [record_id]
        with self._remote("update guarantee") as cur:
            cur.execute(query, params)
            row = cur.fetchone()
        if row is None:
            raise RecordNotFoundError(f"Guarantee {record_id} not found")
        return record_from_dict(row)

    def delete(self, record_id: str) -> None:
        query = sql.SQL("DELETE FROM {} WHERE id = %s").format(self.table)
        with self._remote("delete guarantee") as cur:
            cur.execute(query, (record_id,))
            if cur.rowcount == 0:
                logger.debug("Delete of unknown guarantee %s ignored", record_id)

    def aggregate_statistics(self) -> GuaranteeStatistics:
        query = sql.SQL(
            "SELECT status, guarantee_type, COUNT(*) AS count, "
            "COALESCE(SUM(value), 0) AS total_value "
            "FROM {} GROUP BY status, guarantee_type"
        ).format(self.table)
        with self._remote("fetch statistics") as cur:
            cur.execute(query)
            rows = cur.fetchall()

        stats = GuaranteeStatistics()
        for row in rows:
            stats.add(row["status"], row["guarantee_type"], row["count"], Decimal(row["total_value"]))
        return stats

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        return self.feed.open(callback)

    def close(self) -> None:
        self.conn.close()
        logger.info("Guarantee store connection closed")


def _param(value: Any) -> Any:
    # Enum members go over the wire by value, not by name
    if isinstance(value, Enum):
        return value.value
    return value
