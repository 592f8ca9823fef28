"""Green Button interval ingestion and tariff cost comparison."""

__version__ = "0.1.0"
