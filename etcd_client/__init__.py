"""
etcd-client: HTTP client for etcd's v2 keys API

An asyncio client that spreads requests over the members of an etcd
cluster, follows leader redirects and fails over between members.
"""

from .client import EtcdClient
from .cluster import ClusterView, Dispatcher, DispatchState
from .errors import (
    ClusterUnreachableError,
    CompareFailedError,
    EtcdClientError,
    EtcdError,
    InvalidOptionError,
    KeyNotFoundError,
    MalformedResponseError,
    NodeExistsError,
    RedirectError,
    ResponseReadError,
)
from .protocol import Node, Response

__version__ = "1.0.0"

__all__ = [
    "EtcdClient",
    "ClusterView",
    "Dispatcher",
    "DispatchState",
    "Node",
    "Response",
    "EtcdClientError",
    "EtcdError",
    "InvalidOptionError",
    "ClusterUnreachableError",
    "RedirectError",
    "MalformedResponseError",
    "ResponseReadError",
    "KeyNotFoundError",
    "CompareFailedError",
    "NodeExistsError",
]
