"""Change feeds: where store notifications come from.

Both feeds carry the same JSON payload, one object per row change::

    {"eventType": "INSERT" | "UPDATE" | "DELETE", "new": {...}, "old": {...}}

``PostgresNotifyFeed`` listens on the channel fed by the table trigger
installed with ``PostgresGuaranteeStore.ensure_table()``.
``KafkaChangeFeed`` reads a change topic populated by a CDC pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import psycopg
from confluent_kafka import Consumer, KafkaError, KafkaException
from psycopg import sql

from guarantee_tracker.codec.serialization import change_from_payload
from guarantee_tracker.config import KafkaConfig, PostgresConfig
from guarantee_tracker.exceptions import ChangeFeedError, ConfigurationError
from guarantee_tracker.models import ChangeEvent
from guarantee_tracker.realtime.subscription import ChangeCallback, Subscription

logger = logging.getLogger(__name__)


class ChangeFeed(Protocol):
    """Opens subscriptions on a change channel."""

    def open(self, callback: ChangeCallback) -> Subscription: ...


def decode_payload(raw: str | bytes) -> ChangeEvent | None:
    """Decode one notification, ``None`` (and a warning) if unusable."""
    try:
        payload: Any = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError("payload is not an object")
        return change_from_payload(payload)
    except (ValueError, TypeError) as e:
        logger.warning("Skipping undecodable change payload: %s", e)
        return None


class PostgresNotifyFeed:
    """LISTEN/NOTIFY feed on a dedicated connection."""

    def __init__(self, config: PostgresConfig) -> None:
        if not config.is_configured:
            raise ConfigurationError(
                "Database connection is not configured. Set DATABASE_URL."
            )
        self.config = config

    def open(self, callback: ChangeCallback) -> PostgresNotifySubscription:
        try:
            conn = psycopg.connect(
                self.config.url,
                autocommit=True,
                connect_timeout=self.config.connect_timeout,
            )
            conn.execute(sql.SQL("LISTEN {}").format(sql.Identifier(self.config.channel)))
        except psycopg.Error as e:
            raise ChangeFeedError(f"Failed to subscribe to {self.config.channel}: {e}") from e

        logger.info(
            "Listening for changes on channel %s",
            self.config.channel,
            extra={"channel": self.config.channel},
        )
        return PostgresNotifySubscription(callback, conn, self.config.channel)


class PostgresNotifySubscription(Subscription):
    """Subscription backed by a listening psycopg connection."""

    def __init__(self, callback: ChangeCallback, conn: Any, channel: str) -> None:
        super().__init__(callback)
        self.conn = conn
        self.channel = channel

    def _fetch(self, timeout: float) -> list[ChangeEvent]:
        events: list[ChangeEvent] = []
        try:
            for notify in self.conn.notifies(timeout=timeout):
                event = decode_payload(notify.payload)
                if event is not None:
                    events.append(event)
        except psycopg.Error as e:
            raise ChangeFeedError(f"Change channel {self.channel} failed: {e}") from e
        return events

    def _close(self) -> None:
        try:
            self.conn.execute(sql.SQL("UNLISTEN {}").format(sql.Identifier(self.channel)))
        except psycopg.Error as e:
            logger.debug("UNLISTEN on closing connection failed: %s", e)
        finally:
            self.conn.close()


class KafkaChangeFeed:
    """Change topic consumed with confluent-kafka."""

    def __init__(self, config: KafkaConfig, max_batch: int = 500) -> None:
        self.config = config
        self.max_batch = max_batch

    def open(self, callback: ChangeCallback) -> KafkaChangeSubscription:
        try:
            consumer = Consumer(self.config.to_dict())
            consumer.subscribe([self.config.topic])
        except KafkaException as e:
            raise ChangeFeedError(f"Failed to subscribe to {self.config.topic}: {e}") from e

        logger.info(
            "Consuming changes from %s (group=%s)", self.config.topic, self.config.group_id
        )
        return KafkaChangeSubscription(callback, consumer, self.config.topic, self.max_batch)


class KafkaChangeSubscription(Subscription):
    """Subscription backed by a Kafka consumer."""

    def __init__(
        self,
        callback: ChangeCallback,
        consumer: Any,
        topic: str,
        max_batch: int = 500,
    ) -> None:
        super().__init__(callback)
        self.consumer = consumer
        self.topic = topic
        self.max_batch = max_batch

    def _fetch(self, timeout: float) -> list[ChangeEvent]:
        try:
            messages = self.consumer.consume(num_messages=self.max_batch, timeout=timeout)
        except KafkaException as e:
            raise ChangeFeedError(f"Change topic {self.topic} failed: {e}") from e

        events: list[ChangeEvent] = []
        for msg in messages:
            err = msg.error()
            if err is not None:
                if err.code() == KafkaError._PARTITION_EOF:
                    continue
                if err.fatal():
                    raise ChangeFeedError(f"Change topic {self.topic} failed: {err}")
                logger.warning("Consumer error on %s: %s", self.topic, err, extra={"topic": self.topic})
                continue
            value = msg.value()
            if value is None:
                # Tombstones follow deletes in compacted topics
                continue
            event = decode_payload(value)
            if event is not None:
                events.append(event)
        return events

    def _close(self) -> None:
        self.consumer.close()
