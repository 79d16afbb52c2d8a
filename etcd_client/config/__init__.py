"""Configuration module for the etcd client."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
