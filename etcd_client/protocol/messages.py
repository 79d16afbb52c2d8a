"""
etcd Response Envelope Definitions

This module defines the data structures the v2 keys API answers with.

Success envelope:
    {"action": "get",
     "node": {"key": "/foo", "value": "bar", "modifiedIndex": 5, ...},
     "prevNode": {...}}
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class Method(Enum):
    """HTTP methods used by the keys API."""
    GET = "GET"
    PUT = "PUT"
    POST = "POST"
    DELETE = "DELETE"


@dataclass(frozen=True)
class Node:
    """
    A single key (or directory) in the store.

    Attributes:
        key: Absolute key path, e.g. "/foo"
        value: Value of the key (empty for directories)
        dir: True if the node is a directory
        ttl: Remaining time-to-live in seconds (0 = no expiration)
        expiration: RFC 3339 expiration timestamp, if any
        created_index: Index at which the node was created
        modified_index: Index at which the node was last modified
        nodes: Children of a directory node (recursive listings nest further)
    """
    key: str = ""
    value: str = ""
    dir: bool = False
    ttl: int = 0
    expiration: Optional[str] = None
    created_index: int = 0
    modified_index: int = 0
    nodes: Tuple["Node", ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        """Build a Node from its JSON object."""
        return cls(
            key=data.get("key", ""),
            value=data.get("value", ""),
            dir=bool(data.get("dir", False)),
            ttl=int(data.get("ttl", 0)),
            expiration=data.get("expiration"),
            created_index=int(data.get("createdIndex", 0)),
            modified_index=int(data.get("modifiedIndex", 0)),
            nodes=tuple(cls.from_dict(child) for child in data.get("nodes") or ()),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to the store's JSON field names."""
        data: Dict[str, Any] = {"key": self.key}
        if self.dir:
            data["dir"] = True
        else:
            data["value"] = self.value
        if self.ttl:
            data["ttl"] = self.ttl
        if self.expiration:
            data["expiration"] = self.expiration
        data["createdIndex"] = self.created_index
        data["modifiedIndex"] = self.modified_index
        if self.nodes:
            data["nodes"] = [child.to_dict() for child in self.nodes]
        return data


@dataclass(frozen=True)
class Response:
    """
    A decoded success envelope.

    Attributes:
        action: What the store did ("get", "set", "create", "delete", ...)
        node: The node after the action
        prev_node: The node before the action, when the store reports it
    """
    action: str
    node: Node = field(default_factory=Node)
    prev_node: Optional[Node] = None

    @property
    def key(self) -> str:
        return self.node.key

    @property
    def value(self) -> str:
        return self.node.value

    @property
    def index(self) -> int:
        """Index the action was raised at."""
        return self.node.modified_index

    @property
    def ttl(self) -> int:
        return self.node.ttl

    @property
    def dir(self) -> bool:
        return self.node.dir

    @property
    def children(self) -> Tuple[Node, ...]:
        return self.node.nodes

    @property
    def prev_value(self) -> Optional[str]:
        return self.prev_node.value if self.prev_node is not None else None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"action": self.action, "node": self.node.to_dict()}
        if self.prev_node is not None:
            data["prevNode"] = self.prev_node.to_dict()
        return data
