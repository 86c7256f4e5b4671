"""Guarantee stores: the authoritative collection and its change feed."""

from guarantee_tracker.config import TrackerConfig
from guarantee_tracker.exceptions import ConfigurationError
from guarantee_tracker.store.base import GuaranteeStore
from guarantee_tracker.store.memory import InMemoryGuaranteeStore
from guarantee_tracker.store.postgres import PostgresGuaranteeStore

__all__ = [
    "GuaranteeStore",
    "InMemoryGuaranteeStore",
    "PostgresGuaranteeStore",
    "open_store",
]


def open_store(config: TrackerConfig) -> GuaranteeStore:
    """Build the configured PostgreSQL store and its change feed.

    Raises
    ------
    ConfigurationError
        If no database URL is set or the change feed name is unknown.
    RemoteError
        If the database cannot be reached.
    """
    from guarantee_tracker.realtime.feeds import KafkaChangeFeed, PostgresNotifyFeed

    if not config.postgres.is_configured:
        raise ConfigurationError("Database connection is not configured. Set DATABASE_URL.")

    if config.change_feed == "kafka":
        feed = KafkaChangeFeed(config.kafka)
    elif config.change_feed == "postgres":
        feed = PostgresNotifyFeed(config.postgres)
    else:
        raise ConfigurationError(f"Unknown change feed: {config.change_feed!r}")

    return PostgresGuaranteeStore(config.postgres, feed=feed)
