"""Built-in demonstration tools.

These exercise each shared service once: ``echo`` is the trivial round trip,
``countdown`` polls its cancellation handle, ``fetch_json`` goes through the
response cache and the outbound call client, and ``server_status`` reports
the shared tables.
"""

from __future__ import annotations

import asyncio
import hashlib
from collections.abc import Callable
from typing import Any

from mcpserve.protocol.models import ToolAnnotations, ToolDescriptor
from mcpserve.tools.models import ToolContext
from mcpserve.tools.registry import ToolRegistry

ECHO_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "message": {"type": "string", "description": "Text to send back."},
    },
    "required": ["message"],
    "additionalProperties": False,
}

COUNTDOWN_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "steps": {"type": "integer", "minimum": 1, "maximum": 10000, "default": 10},
        "interval_ms": {"type": "integer", "minimum": 0, "maximum": 60000, "default": 100},
    },
    "additionalProperties": False,
}

FETCH_JSON_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "url": {"type": "string", "pattern": "^https?://", "description": "Absolute http(s) URL."},
        "ttl_seconds": {
            "type": "number",
            "minimum": 0,
            "description": "Cache lifetime; 0 bypasses the cache.",
        },
    },
    "required": ["url"],
    "additionalProperties": False,
}


async def echo(arguments: dict[str, Any], context: ToolContext) -> str:
    return arguments["message"]


async def countdown(arguments: dict[str, Any], context: ToolContext) -> dict[str, Any]:
    steps = int(arguments.get("steps", 10))
    interval = int(arguments.get("interval_ms", 100)) / 1000.0
    for step in range(steps):
        if context.cancelled:
            context.logger.info("countdown cancelled at %d/%d", step, steps)
            return {"status": "cancelled", "progress": step, "steps": steps}
        await asyncio.sleep(interval)
    return {"status": "completed", "progress": steps, "steps": steps}


async def fetch_json(arguments: dict[str, Any], context: ToolContext) -> Any:
    if context.http is None:
        raise RuntimeError("No outbound HTTP client configured")
    http = context.http
    url: str = arguments["url"]
    ttl = arguments.get("ttl_seconds")

    if ttl == 0 or context.cache is None:
        return await http.call("GET", url)
    key = fetch_cache_key(url, http.authorization())
    return await context.cache.get_or_fetch(key, lambda: http.call("GET", url), ttl)


def fetch_cache_key(url: str, authorization: str | None) -> str:
    # Responses are per credential; only a digest of the token is kept.
    if authorization is None:
        return f"GET {url}"
    digest = hashlib.sha256(authorization.encode("utf-8")).hexdigest()
    return f"GET {url} auth:{digest}"


def register_builtin_tools(
    registry: ToolRegistry,
    *,
    status: Callable[[], dict[str, Any]] | None = None,
) -> None:
    """Add the demonstration tools to *registry*.

    ``server_status`` is only registered when a *status* callable is given.
    """
    registry.register(
        ToolDescriptor(
            name="echo",
            description="Return the given message unchanged.",
            input_schema=ECHO_SCHEMA,
            annotations=ToolAnnotations(read_only_hint=True, idempotent_hint=True),
        ),
        echo,
    )
    registry.register(
        ToolDescriptor(
            name="countdown",
            description=(
                "Count through a number of steps, pausing between each. "
                "Honors notifications/cancelled and reports how far it got."
            ),
            input_schema=COUNTDOWN_SCHEMA,
            annotations=ToolAnnotations(read_only_hint=True, idempotent_hint=True),
        ),
        countdown,
        cancellable=True,
    )
    registry.register(
        ToolDescriptor(
            name="fetch_json",
            description="GET a URL and return its JSON body, cached for a short time.",
            input_schema=FETCH_JSON_SCHEMA,
            annotations=ToolAnnotations(read_only_hint=True, idempotent_hint=True, open_world_hint=True),
        ),
        fetch_json,
    )
    if status is not None:
        registry.register(
            ToolDescriptor(
                name="server_status",
                description="Report cache size, in-flight operations, and the current log level.",
                annotations=ToolAnnotations(read_only_hint=True),
            ),
            lambda arguments, context: status(),
        )
