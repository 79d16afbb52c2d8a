"""
Cluster module for the etcd client.

This module provides:
- The cluster view (members and leader hint)
- The dispatch loop (failover, redirects, retry budget)
"""

from .dispatcher import Dispatcher, DispatchState
from .view import ClusterView

__all__ = ['ClusterView', 'Dispatcher', 'DispatchState']
