"""
Dispatch Module

Sends one logical request to the cluster, failing over between members until
a terminal answer arrives or the retry budget runs out.

States of a single call:

    ATTEMPTING     -> send to the target URL
    NETWORK_ERROR  -> no response: spend one retry, rotate, back off, retry
    SERVER_ERROR   -> HTTP 500: spend one retry, retry the same target immediately
    REDIRECTED     -> HTTP 307: adopt the leader hint, retry its Location as is
    SUCCESS        -> any other status: decode the body (terminal)
    EXHAUSTED      -> retries > 2 * len(machines) (terminal)

Network errors and 500s share one budget, so a cluster that alternates
between refusing connections and failing requests still gives up.
"""

import asyncio
import logging
from enum import Enum, auto
from typing import Awaitable, Callable, Optional, Union
from urllib.parse import urljoin, urlsplit

import httpx

from ..config.settings import settings
from ..errors import ClusterUnreachableError, RedirectError, ResponseReadError
from ..protocol.decoder import decode_error, decode_response
from ..protocol.messages import Method, Response
from .view import ClusterView

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; param=value"

SleepFunc = Callable[[float], Awaitable[None]]


class DispatchState(Enum):
    """States of the dispatch loop."""
    ATTEMPTING = auto()
    REDIRECTED = auto()
    SERVER_ERROR = auto()
    NETWORK_ERROR = auto()
    SUCCESS = auto()
    EXHAUSTED = auto()


def is_absolute(path: str) -> bool:
    """True if path already carries a scheme (a resolved redirect target)."""
    return bool(urlsplit(path).scheme)


class Dispatcher:
    """
    Retry / failover loop around a shared httpx.AsyncClient.

    Responsibilities:
    - Resolve logical paths against the preferred member
    - Rotate members on network errors; retry 500s in place; both within 2 * len(machines) retries
    - Follow 307 leader redirects without spending retries
    - Hand terminal answers to the decoder

    Attributes:
        cluster: The ClusterView shared with the owning client
        http: Transport used for every attempt (must not follow redirects)
        retry_backoff: Seconds to wait after a network error
        max_redirects: Redirects allowed within one call
    """

    def __init__(
            self,
            cluster: ClusterView,
            http: httpx.AsyncClient,
            retry_backoff: float = None,
            max_redirects: int = None,
            sleep: Optional[SleepFunc] = None,
    ):
        """
        Initialize the dispatcher.

        Args:
            cluster: Cluster members and leader hint
            http: Transport for all requests
            retry_backoff: Network-error backoff (default from settings)
            max_redirects: Redirect limit per call (default from settings)
            sleep: Coroutine used for the backoff (default asyncio.sleep)
        """
        self.cluster = cluster
        self.http = http
        self.retry_backoff = retry_backoff if retry_backoff is not None else settings.RETRY_BACKOFF
        self.max_redirects = max_redirects if max_redirects is not None else settings.MAX_REDIRECTS
        self._sleep = sleep if sleep is not None else asyncio.sleep

    @property
    def retry_limit(self) -> int:
        """Retries allowed per call before giving up."""
        return 2 * len(self.cluster)

    async def dispatch(self, method: Union[Method, str], path: str, body: str = "") -> Response:
        """
        Send a request, failing over between members, and decode the answer.

        Args:
            method: HTTP method
            path: Path relative to the API root, or an absolute URL
            body: Form-encoded body ("" for none)

        Returns:
            The decoded success envelope

        Raises:
            ClusterUnreachableError: Retry budget exhausted
            RedirectError: 307 without Location, or too many redirects
            EtcdError: The store rejected the request
            MalformedResponseError: The answer could not be decoded
            ResponseReadError: The answer's body could not be read
        """
        method_name = method.value if isinstance(method, Method) else method.upper()
        retry = 0
        redirects = 0
        target = path
        state = DispatchState.ATTEMPTING

        while True:
            url = target if is_absolute(target) else self.cluster.resolve(target)
            request = self._build_request(method_name, url, body)

            logger.debug(f"send.request.to {url} | method {method_name}")
            try:
                response = await self.http.send(request, stream=True)
            except httpx.TransportError as e:
                logger.warning(f"Network error from {url}: {e!r}")
                state = DispatchState.NETWORK_ERROR
                response = None
            else:
                logger.debug(f"recv.response.from {url}")
                if response.status_code == httpx.codes.TEMPORARY_REDIRECT:
                    state = DispatchState.REDIRECTED
                elif response.status_code == httpx.codes.INTERNAL_SERVER_ERROR:
                    state = DispatchState.SERVER_ERROR
                else:
                    state = DispatchState.SUCCESS

            if state is DispatchState.SUCCESS:
                logger.debug(f"send.return.response {url}")
                return await self._decode(response)

            if state is DispatchState.REDIRECTED:
                location = response.headers.get("Location")
                await response.aclose()
                if not location:
                    raise RedirectError("Cannot get redirection location")

                redirects += 1
                if redirects > self.max_redirects:
                    raise RedirectError(f"Too many redirects ({redirects}) for {path}")

                try:
                    target = urljoin(url, location)
                    self.cluster.adopt_leader_hint(target)
                except ValueError as e:
                    raise RedirectError("Cannot get redirection location") from e
                logger.debug(f"send.redirect {target}")
                continue

            # NETWORK_ERROR or SERVER_ERROR: both spend the shared budget
            if response is not None:
                logger.warning(f"Server error (HTTP 500) from {url}")
                await response.aclose()

            retry += 1
            logger.debug(f"{state.name.lower()} retry {retry}/{self.retry_limit}")
            if retry > self.retry_limit:
                state = DispatchState.EXHAUSTED
                logger.error(f"{state.name}: cannot reach servers after {retry} failed attempts: {list(self.cluster.machines)}")
                raise ClusterUnreachableError(attempts=retry)

            # A 500 is retried against the same target; only network errors fail over
            if state is DispatchState.NETWORK_ERROR:
                self.cluster.rotate(retry)
                target = path
                await self._sleep(self.retry_backoff)

    def _build_request(self, method: str, url: str, body: str) -> httpx.Request:
        if not body:
            return self.http.build_request(method, url)
        return self.http.build_request(
            method,
            url,
            content=body,
            headers={"Content-Type": FORM_CONTENT_TYPE},
        )

    async def _decode(self, response: httpx.Response) -> Response:
        """Read a terminal answer and decode it."""
        try:
            body = await response.aread()
        except (httpx.HTTPError, httpx.StreamError) as e:
            raise ResponseReadError(f"Cannot read response from {response.request.url}: {e}") from e
        finally:
            await response.aclose()

        if response.status_code != httpx.codes.OK:
            raise decode_error(response.status_code, body)

        return decode_response(response.status_code, body)
