"""Bank guarantee tracking: CSV exchange, store client and realtime list."""

__version__ = "0.1.0"
