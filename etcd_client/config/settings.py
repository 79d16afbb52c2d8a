"""
etcd Client Configuration Settings

This module contains all configuration constants for the etcd client.
Every value can be overridden through an ETCD_CLIENT_* environment variable.
"""

import os
from dataclasses import dataclass, field
from typing import List


def _split_peers(raw: str) -> List[str]:
    return [peer.strip() for peer in raw.split(",") if peer.strip()]


@dataclass
class Settings:
    """Client configuration settings."""

    # Cluster settings
    PEERS: List[str] = field(
        default_factory=lambda: _split_peers(
            os.environ.get("ETCD_CLIENT_PEERS", "http://127.0.0.1:4001")
        )
    )
    API_VERSION: str = os.environ.get("ETCD_CLIENT_API_VERSION", "v2")

    # Retry settings
    RETRY_BACKOFF: float = float(os.environ.get("ETCD_CLIENT_RETRY_BACKOFF", "0.2"))  # Seconds between network retries
    MAX_REDIRECTS: int = int(os.environ.get("ETCD_CLIENT_MAX_REDIRECTS", "10"))

    # Transport settings
    TIMEOUT: float = float(os.environ.get("ETCD_CLIENT_TIMEOUT", "5.0"))

    # Logging settings
    DEBUG: bool = os.environ.get("ETCD_CLIENT_DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.environ.get("ETCD_CLIENT_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()
