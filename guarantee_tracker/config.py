"""Configuration management for guarantee-tracker."""

from dataclasses import dataclass, field
from typing import Any

HOME_CURRENCY = "SAR"
TABLE_NAME = "bank_guarantees"
CHANGE_CHANNEL = "bank_guarantees_changes"


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration.

    ``url`` is left empty until the environment provides one; the store
    refuses to start without it.
    """

    url: str | None = None
    table: str = TABLE_NAME
    channel: str = CHANGE_CHANNEL
    connect_timeout: int = 10

    @property
    def is_configured(self) -> bool:
        """Whether a connection string is available."""
        return bool(self.url)


@dataclass
class KafkaConfig:
    """Kafka consumer configuration for the change-topic feed."""

    bootstrap_servers: str = "localhost:9092"
    topic: str = "public.bank_guarantees.changes"
    group_id: str = "guarantee-tracker"
    auto_offset_reset: str = "latest"

    def to_dict(self) -> dict[str, Any]:
        """Convert to confluent-kafka consumer config dict."""
        return {
            "bootstrap.servers": self.bootstrap_servers,
            "group.id": self.group_id,
            "auto.offset.reset": self.auto_offset_reset,
            "enable.auto.commit": True,
        }


@dataclass
class BoardConfig:
    """Behaviour of the guarantee board."""

    home_currency: str = HOME_CURRENCY
    stats_refresh_seconds: float = 30.0
    default_validity_days: int = 365
    poll_timeout_seconds: float = 0.0


@dataclass
class TrackerConfig:
    """Main configuration for guarantee-tracker."""

    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    kafka: KafkaConfig = field(default_factory=KafkaConfig)
    board: BoardConfig = field(default_factory=BoardConfig)
    change_feed: str = "postgres"  # "postgres" (LISTEN/NOTIFY) or "kafka"
    log_level: str = "INFO"
    log_format: str = "standard"

    @classmethod
    def from_env(cls) -> "TrackerConfig":
        """Create config from environment variables."""
        import os

        postgres = PostgresConfig(
            url=os.getenv("DATABASE_URL") or None,
            table=os.getenv("GUARANTEES_TABLE", TABLE_NAME),
            channel=os.getenv("GUARANTEES_CHANNEL", CHANGE_CHANNEL),
            connect_timeout=int(os.getenv("DATABASE_CONNECT_TIMEOUT", "10")),
        )

        kafka = KafkaConfig(
            bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092"),
            topic=os.getenv("KAFKA_CHANGES_TOPIC", "public.bank_guarantees.changes"),
            group_id=os.getenv("KAFKA_GROUP_ID", "guarantee-tracker"),
        )

        board = BoardConfig(
            home_currency=os.getenv("HOME_CURRENCY", HOME_CURRENCY),
            stats_refresh_seconds=float(os.getenv("STATS_REFRESH_SECONDS", "30")),
            default_validity_days=int(os.getenv("DEFAULT_VALIDITY_DAYS", "365")),
        )

        return cls(
            postgres=postgres,
            kafka=kafka,
            board=board,
            change_feed=os.getenv("CHANGE_FEED", "postgres").lower(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        )
