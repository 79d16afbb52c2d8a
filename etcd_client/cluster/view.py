"""
Cluster View Module

Holds the configured cluster members and the currently preferred one
(the leader hint). The member list is fixed for the lifetime of the view;
only the preferred endpoint moves, either by rotation after a failure or by
adopting the target of a leader redirect.

Rotation is a pure function of the retry count:

    rotate(r) == machines[r % len(machines)]

so retry sequences are reproducible.
"""

import logging
import threading
from typing import Iterable, Tuple
from urllib.parse import urlsplit

from ..config.settings import settings
from ..errors import RedirectError

logger = logging.getLogger(__name__)


def normalize_endpoint(url: str) -> str:
    """Strip whitespace and trailing slashes from a member URL."""
    return url.strip().rstrip("/")


class ClusterView:
    """
    Ordered member endpoints plus the preferred endpoint.

    The preferred endpoint is shared by every call running on the client, so
    updates go through a lock. Last writer wins: it is only a hint and is
    re-derived on the next failure.

    Attributes:
        machines: Member base URLs in configured order (duplicates dropped)
        api_version: API root prefix, e.g. "v2"
    """

    def __init__(self, machines: Iterable[str], api_version: str = None):
        """
        Initialize the view.

        Args:
            machines: Member URLs such as "http://127.0.0.1:4001"
            api_version: API root prefix (default from settings)
        """
        members = []
        for machine in machines:
            endpoint = normalize_endpoint(machine)
            if endpoint and endpoint not in members:
                members.append(endpoint)

        if not members:
            raise ValueError("ClusterView needs at least one member")

        self.machines: Tuple[str, ...] = tuple(members)
        self.api_version = api_version if api_version is not None else settings.API_VERSION

        self._lock = threading.Lock()
        self._preferred = self.machines[0]

    @property
    def preferred(self) -> str:
        """The endpoint requests are currently sent to."""
        with self._lock:
            return self._preferred

    def rotate(self, retry_count: int) -> str:
        """
        Make machines[retry_count % len(machines)] the preferred endpoint.

        Args:
            retry_count: Retries spent so far in the current call

        Returns:
            The new preferred endpoint
        """
        endpoint = self.machines[retry_count % len(self.machines)]
        with self._lock:
            previous, self._preferred = self._preferred, endpoint
        logger.debug(f"update.leader[{previous},{endpoint}]")
        return endpoint

    def adopt_leader_hint(self, location: str) -> str:
        """
        Make the host of a redirect target the preferred endpoint.

        The target does not have to be a configured member: the cluster is
        authoritative about who leads.

        Args:
            location: Absolute URL from a redirect's Location header

        Returns:
            The new preferred endpoint ("scheme://host:port")

        Raises:
            RedirectError: location has no scheme or host
        """
        try:
            parts = urlsplit(location)
        except ValueError as e:
            raise RedirectError(f"Cannot get redirection location from {location!r}") from e
        if not parts.scheme or not parts.netloc:
            raise RedirectError(f"Cannot get redirection location from {location!r}")

        endpoint = f"{parts.scheme}://{parts.netloc}"
        with self._lock:
            previous, self._preferred = self._preferred, endpoint
        logger.debug(f"update.leader[{previous},{endpoint}]")
        return endpoint

    def resolve(self, path: str) -> str:
        """
        Build the absolute URL for a path relative to the API root.

        Args:
            path: e.g. "keys/foo?recursive=true"

        Returns:
            e.g. "http://127.0.0.1:4001/v2/keys/foo?recursive=true"
        """
        return f"{self.preferred}/{self.api_version}/{path.lstrip('/')}"

    def __len__(self) -> int:
        return len(self.machines)

    def __repr__(self) -> str:
        return f"ClusterView(machines={list(self.machines)}, preferred={self.preferred!r})"
