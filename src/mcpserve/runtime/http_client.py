"""ExternalCallClient: outbound HTTP with bounded exponential-backoff retry.

Retries are invisible to the protocol layer: a caller sees either the parsed
body of a successful response or a single :class:`ExternalCallError`
describing the last failure.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextvars import ContextVar
from typing import Any

import httpx

from mcpserve.runtime.errors import ExternalCallError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 502, 503, 504})
TRANSIENT_SIGNATURES = ("timeout", "connection", "network", "temporarily")

# Set by the HTTP transport for the duration of one inbound request.
inbound_authorization: ContextVar[str | None] = ContextVar("inbound_authorization", default=None)


def is_transient(exc: BaseException) -> bool:
    """Whether *exc* looks like a network or timeout failure worth retrying."""
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError)):
        return True
    haystack = f"{type(exc).__name__} {exc}".lower()
    return any(signature in haystack for signature in TRANSIENT_SIGNATURES)


class ExternalCallClient:
    """Async HTTP caller shared by tools through the server context.

    Usage::

        client = ExternalCallClient(timeout=10.0)
        data = await client.call("GET", "https://api.example.com/items")
        await client.aclose()

    Args:
        timeout: Per-attempt timeout in seconds.
        max_retries: Default number of retries after the first attempt.
        initial_delay_ms: Default backoff base; attempt *n* waits ``base * 2**n``.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
        token_source: Fallback bearer token provider when no inbound header is set.
        sleep: Awaitable delay function used between attempts.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        initial_delay_ms: int = 500,
        transport: httpx.AsyncBaseTransport | None = None,
        token_source: Callable[[], str | None] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.max_retries = max_retries
        self.initial_delay_ms = initial_delay_ms
        self._timeout = timeout
        self._transport = transport
        self._token_source = token_source
        self._sleep = sleep
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ExternalCallClient:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def call(
        self,
        method: str,
        url: str,
        body: Any = None,
        *,
        max_retries: int | None = None,
        initial_delay_ms: int | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Perform *method* on *url* and return the decoded body.

        Returns:
            The parsed JSON body; ``{"text": raw}`` when the body is not JSON;
            ``{"success": True, "status": code}`` when the body is empty.

        Raises:
            ExternalCallError: After a non-retryable failure or once
                ``max_retries + 1`` attempts have all failed.
        """
        retries = max(0, self.max_retries if max_retries is None else max_retries)
        base_delay_ms = self.initial_delay_ms if initial_delay_ms is None else initial_delay_ms
        request_headers = self._build_headers(headers)
        request_kwargs = _body_kwargs(body)

        last_error: ExternalCallError | None = None
        for attempt in range(retries + 1):
            try:
                response = await self._http().request(
                    method, url, headers=request_headers, **request_kwargs
                )
            except Exception as exc:
                detail = f"{type(exc).__name__}: {exc}"
                if not is_transient(exc):
                    raise ExternalCallError(url, detail=detail) from exc
                last_error = ExternalCallError(url, detail=detail)
                logger.warning("Transient failure calling %s (attempt %d): %s", url, attempt + 1, detail)
            else:
                if response.status_code < 400:
                    return _decode(response)
                last_error = ExternalCallError(url, response.status_code, _truncate(response.text))
                if response.status_code not in RETRYABLE_STATUS_CODES:
                    raise last_error
                logger.warning(
                    "Retryable HTTP %d from %s (attempt %d)", response.status_code, url, attempt + 1
                )

            if attempt < retries:
                await self._sleep(base_delay_ms * (2**attempt) / 1000.0)

        logger.error("Giving up on %s after %d attempts", url, retries + 1)
        raise last_error or ExternalCallError(url, detail="no attempt made")

    def authorization(self) -> str | None:
        """The Authorization header the next call would send, if any.

        An inbound bearer header wins over the token source.
        """
        inbound = inbound_authorization.get()
        if inbound and inbound.lower().startswith("bearer "):
            return inbound
        if self._token_source is not None:
            token = self._token_source()
            if token:
                return f"Bearer {token}"
        return None

    def _build_headers(self, extra: dict[str, str] | None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        authorization = self.authorization()
        if authorization is not None:
            headers["Authorization"] = authorization
        if extra:
            headers.update(extra)
        return headers


def _body_kwargs(body: Any) -> dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, (str, bytes)):
        return {"content": body}
    return {"json": body}


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return {"success": True, "status": response.status_code}
    try:
        return response.json()
    except ValueError:
        return {"text": response.text}


def _truncate(text: str, max_len: int = 200) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
