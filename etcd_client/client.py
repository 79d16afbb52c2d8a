"""
etcd Client Module

Public entry point: key operations against an etcd cluster's v2 keys API.

Usage:
    async with EtcdClient(["http://10.0.0.1:4001", "http://10.0.0.2:4001"]) as client:
        await client.put("/foo", "bar", ttl=60)
        response = await client.get("/foo")
        print(response.value)
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Tuple

import httpx

from .cluster.dispatcher import Dispatcher, SleepFunc
from .cluster.view import ClusterView
from .config.settings import Settings, settings as default_settings
from .errors import InvalidOptionError
from .protocol.messages import Response
from .protocol.options import RequestSpec, build_delete, build_get, build_post, build_put

logger = logging.getLogger(__name__)

Options = Optional[Mapping[str, Any]]


class EtcdClient:
    """
    Async client for an etcd cluster.

    Every call runs through a single Dispatcher, so all calls share the
    cluster view: a redirect seen by one call moves the leader hint for the
    next one.

    Attributes:
        settings: Effective configuration
        cluster: Members and current leader hint
    """

    def __init__(
            self,
            machines: Iterable[str] = None,
            settings: Settings = None,
            http_client: httpx.AsyncClient = None,
            sleep: Optional[SleepFunc] = None,
    ):
        """
        Initialize the client.

        Args:
            machines: Member URLs (default settings.PEERS)
            settings: Configuration (default: the global settings)
            http_client: Transport to use; created (and owned) when omitted.
                A supplied client must not follow redirects.
            sleep: Coroutine used for the network-error backoff
        """
        self.settings = settings if settings is not None else default_settings
        self.cluster = ClusterView(
            machines if machines is not None else self.settings.PEERS,
            api_version=self.settings.API_VERSION,
        )

        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else httpx.AsyncClient(
            timeout=httpx.Timeout(self.settings.TIMEOUT),
            follow_redirects=False,
        )
        self._dispatcher = Dispatcher(
            self.cluster,
            self._http,
            retry_backoff=self.settings.RETRY_BACKOFF,
            max_redirects=self.settings.MAX_REDIRECTS,
            sleep=sleep,
        )

    @property
    def machines(self) -> Tuple[str, ...]:
        return self.cluster.machines

    @property
    def leader(self) -> str:
        """Member the client currently sends requests to."""
        return self.cluster.preferred

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "EtcdClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _send(self, request: RequestSpec) -> Response:
        return await self._dispatcher.dispatch(request.method, request.path, request.body)

    # ------------------------------------------------------------------
    # Key operations
    # ------------------------------------------------------------------

    async def get(self, key: str, options: Options = None) -> Response:
        """
        Read a key or directory.

        Args:
            key: Key path, e.g. "/foo"
            options: recursive, consistent, sorted, wait (bool), waitIndex (uint64)
        """
        logger.debug(f"get {key} [{self.leader}]")
        return await self._send(build_get(key, options))

    async def put(self, key: str, value: str = "", ttl: int = 0, options: Options = None) -> Response:
        """
        Set a key.

        Args:
            key: Key path
            value: New value (omitted from the body when empty)
            ttl: Time-to-live in seconds (0 = no expiration)
            options: prevValue (str), prevIndex (uint64), prevExist (bool)
        """
        logger.debug(f"put {key}, {value}, ttl: {ttl}, [{self.leader}]")
        return await self._send(build_put(key, value, ttl, options))

    async def post(self, key: str, value: str = "", ttl: int = 0) -> Response:
        """Create an in-order key under the directory key."""
        logger.debug(f"post {key}, {value}, ttl: {ttl}, [{self.leader}]")
        return await self._send(build_post(key, value, ttl))

    async def delete(self, key: str, options: Options = None) -> Response:
        """
        Delete a key.

        Args:
            key: Key path
            options: recursive (bool)
        """
        logger.debug(f"delete {key} [{self.leader}]")
        return await self._send(build_delete(key, options))

    # ------------------------------------------------------------------
    # Conveniences
    # ------------------------------------------------------------------

    async def set(self, key: str, value: str, ttl: int = 0) -> Response:
        """Set a key unconditionally."""
        return await self.put(key, value, ttl)

    async def create(self, key: str, value: str, ttl: int = 0) -> Response:
        """Set a key only if it does not exist yet (NodeExistsError otherwise)."""
        return await self.put(key, value, ttl, {"prevExist": False})

    async def update(self, key: str, value: str, ttl: int = 0) -> Response:
        """Set a key only if it already exists (KeyNotFoundError otherwise)."""
        return await self.put(key, value, ttl, {"prevExist": True})

    async def compare_and_swap(
            self,
            key: str,
            value: str,
            ttl: int = 0,
            prev_value: Optional[str] = None,
            prev_index: Optional[int] = None,
    ) -> Response:
        """
        Set a key only if its current value and/or index match.

        Raises:
            InvalidOptionError: neither prev_value nor prev_index given
            CompareFailedError: the precondition did not hold
        """
        if prev_value is None and prev_index is None:
            raise InvalidOptionError("compare_and_swap needs prev_value or prev_index")

        options = {}
        if prev_value is not None:
            options["prevValue"] = prev_value
        if prev_index is not None:
            options["prevIndex"] = prev_index
        return await self.put(key, value, ttl, options)

    async def watch(self, key: str, wait_index: Optional[int] = None, recursive: bool = False) -> Response:
        """
        Wait for the next change of a key (or anything below it when recursive).

        Args:
            key: Key path
            wait_index: Return the first change at or after this index
            recursive: Watch the whole subtree
        """
        options = {"wait": True}
        if recursive:
            options["recursive"] = True
        if wait_index is not None:
            options["waitIndex"] = wait_index
        return await self.get(key, options)

    def __repr__(self) -> str:
        return f"EtcdClient(machines={list(self.machines)}, leader={self.leader!r})"
