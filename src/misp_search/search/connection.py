"""Authenticated connection to a MISP instance.

A ``MispConnection`` holds the target, the API key and one pooled
``httpx.AsyncClient``. It is created once and reused across searches; it keeps
no per-search state, so concurrent searches over the same connection are safe.
"""

import logging
import urllib.request

import httpx

from misp_search.errors import MispError, MispRemoteError, UnknownProtocolError, UnknownQueryError
from misp_search.query import AttributeQuery, EventQuery
from misp_search.search.response import (
    AttributeResponse,
    EmptyResponse,
    EventResponse,
    MispResponse,
)

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = ("http", "https")
DEFAULT_SEARCH_SUFFIX = "restSearch/download"
USER_AGENT = "misp-search/0.1.0"

# Transport settings used when certificate verification is disabled
INSECURE_TIMEOUT = httpx.Timeout(30.0, connect=30.0)
INSECURE_LIMITS = httpx.Limits(
    max_connections=100,
    max_keepalive_connections=100,
    keepalive_expiry=90.0,
)


class MispConnection:
    """Connection to the REST API of a MISP instance.

    Usage::

        async with new_connection("https", "misp.example.org", key) as con:
            response, err = await con.search(AttributeQuery(last="1d"))
            if err is None:
                for attribute in response:
                    print(attribute.value)

    Args:
        scheme: ``"http"`` or ``"https"``.
        host: Host name, optionally with port and path prefix.
        api_key: MISP automation key sent in the ``Authorization`` header.
        insecure: Skip TLS certificate verification. Only meant for test
            instances with self-signed certificates.
        client: Preconfigured HTTP client. When given, ``insecure`` is ignored
            and the caller remains responsible for closing it.
        logger: Logger for request tracing and reported failures. Defaults
            to the ``misp_search.search.connection`` logger.
        search_suffix: Path appended after the resource kind for searches.

    Raises:
        UnknownProtocolError: If ``scheme`` is not http or https.
    """

    def __init__(
        self,
        scheme: str,
        host: str,
        api_key: str,
        *,
        insecure: bool = False,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger = logger,
        search_suffix: str = DEFAULT_SEARCH_SUFFIX,
    ) -> None:
        self._logger = logger
        if scheme not in ALLOWED_SCHEMES:
            self._logger.error(f"Unknown protocol {scheme!r}: only http and https protocols are allowed")
            raise UnknownProtocolError(f"Unknown protocol {scheme!r}: only http and https are allowed")

        self.scheme = scheme
        self.host = host.strip("/")
        self.api_key = api_key
        self.insecure = insecure
        self._search_suffix = search_suffix.strip("/")
        self._owns_client = client is None
        self._client = client or _build_client(insecure)

    async def __aenter__(self) -> "MispConnection":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this connection created it."""
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def build_url(self, *segments: str) -> str:
        """Join scheme, host and slash-trimmed path segments into a URL."""
        path = "/".join(segment.strip("/") for segment in segments)
        return f"{self.scheme}://{self.host}/{path}"

    def build_request(self, method: str, url: str, body: bytes | None = None) -> httpx.Request:
        """Build a request carrying the API key and JSON content headers."""
        headers = {
            "Authorization": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
        }
        return self._client.build_request(method, url, content=body, headers=headers)

    async def _send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response:
        self._logger.debug(f"{request.method} {request.url}")
        self._logger.debug(f"Proxy: {_environment_proxy(request.url)}")
        self._logger.debug(f"Headers: {_redacted_headers(request.headers)}")
        return await self._client.send(request, stream=stream)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def search(
        self,
        query: EventQuery | AttributeQuery,
    ) -> tuple[MispResponse, MispError | httpx.HTTPError | None]:
        """Search events or attributes depending on the query type.

        Args:
            query: ``EventQuery`` or ``AttributeQuery`` filters.

        Returns:
            Tuple of (response, error). The response is an ``EmptyResponse``
            when the query type is unknown, the request fails or the server
            answers with anything but 200. When the body does not have the
            expected shape, the records decoded so far are returned together
            with a ``MispDecodeError``.
        """
        if isinstance(query, AttributeQuery):
            kind, decode = "attributes", AttributeResponse.from_json
        elif isinstance(query, EventQuery):
            kind, decode = "events", EventResponse.from_json
        else:
            err = UnknownQueryError(f"no matching query type: {type(query).__name__}")
            self._logger.warning(str(err))
            return (EmptyResponse(), err)

        request = self.build_request("POST", self.build_url(kind, self._search_suffix), query.prepare())
        try:
            response = await self._send(request)
        except httpx.HTTPError as e:
            self._logger.warning(f"MISP {kind} search failed: {e}")
            return (EmptyResponse(), e)

        if response.status_code != 200:
            remote_err = MispRemoteError(response.status_code, response.text)
            self._logger.warning(str(remote_err))
            return (EmptyResponse(), remote_err)

        result, decode_err = decode(response.content)
        if decode_err is not None:
            self._logger.warning(f"Could not decode MISP {kind} response: {decode_err}")
        else:
            self._logger.info(f"MISP {kind} search returned {len(result)} results")
        return (result, decode_err)

    async def text_export(self, *flags: str) -> tuple[list[str], MispError | httpx.HTTPError | None]:
        """Download the plain-text attribute export.

        Args:
            flags: Path segments appended to ``attributes/text/download``,
                typically an attribute type such as ``"domain"``.

        Returns:
            Tuple of (lines, error). Duplicate lines are dropped, keeping the
            first occurrence and the server's order.
        """
        request = self.build_request("GET", self.build_url("attributes", "text", "download", *flags))
        try:
            response = await self._send(request, stream=True)
        except httpx.HTTPError as e:
            self._logger.warning(f"MISP text export failed: {e}")
            return ([], e)

        seen: set[str] = set()
        lines: list[str] = []
        try:
            if response.status_code != 200:
                await response.aread()
                remote_err = MispRemoteError(response.status_code, response.text)
                self._logger.warning(str(remote_err))
                return ([], remote_err)
            async for line in response.aiter_lines():
                if line not in seen:
                    seen.add(line)
                    lines.append(line)
        except httpx.HTTPError as e:
            self._logger.warning(f"MISP text export interrupted: {e}")
            return ([], e)
        finally:
            await response.aclose()
        return (lines, None)


def new_connection(scheme: str, host: str, api_key: str, **kwargs) -> MispConnection:
    """Create a connection with default TLS verification."""
    return MispConnection(scheme, host, api_key, insecure=False, **kwargs)


def new_insecure_connection(scheme: str, host: str, api_key: str, **kwargs) -> MispConnection:
    """Create a connection that does NOT verify TLS certificates."""
    return MispConnection(scheme, host, api_key, insecure=True, **kwargs)


async def search(
    connection: MispConnection,
    query: EventQuery | AttributeQuery,
) -> tuple[MispResponse, MispError | httpx.HTTPError | None]:
    """Module-level shortcut for ``connection.search(query)``."""
    return await connection.search(query)


async def text_export(
    connection: MispConnection,
    *flags: str,
) -> tuple[list[str], MispError | httpx.HTTPError | None]:
    """Module-level shortcut for ``connection.text_export(*flags)``."""
    return await connection.text_export(*flags)


def _build_client(insecure: bool) -> httpx.AsyncClient:
    """Create the pooled client backing a connection.

    Proxy settings are read from the environment in both modes.
    """
    if insecure:
        return httpx.AsyncClient(
            verify=False,
            timeout=INSECURE_TIMEOUT,
            limits=INSECURE_LIMITS,
            trust_env=True,
        )
    return httpx.AsyncClient(trust_env=True)


def _redacted_headers(headers: httpx.Headers) -> dict[str, str]:
    return {
        name: ("<redacted>" if name.lower() == "authorization" else value)
        for name, value in headers.items()
    }


def _environment_proxy(url: httpx.URL) -> str | None:
    """Return the proxy the environment selects for ``url``, if any."""
    if urllib.request.proxy_bypass_environment(url.host):
        return None
    return urllib.request.getproxies().get(url.scheme)
