"""UI resource resolvers: opaque ``ui://`` URIs to renderable content.

The dispatcher never inspects resource content; it only asks a resolver to
list what it knows and to read one URI.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from mcpserve.protocol.errors import InvalidParamsError
from mcpserve.protocol.models import ResourceContents, ResourceDescriptor

if TYPE_CHECKING:
    from mcpserve.config import UIResourceSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class UIResourceResolver(Protocol):
    """Lists and reads resources referenced by tool descriptors."""

    def list_resources(self) -> list[ResourceDescriptor]: ...

    def read(self, uri: str) -> ResourceContents | None:
        """Return the content for *uri*, or ``None`` when the URI is unknown.

        Raises:
            InvalidParamsError: If *uri* is known but its content cannot be read.
        """
        ...


class StaticUIResourceResolver:
    """Serves resources held in memory."""

    def __init__(self) -> None:
        self._resources: dict[str, tuple[ResourceDescriptor, str]] = {}

    def add(self, descriptor: ResourceDescriptor, text: str) -> None:
        self._resources[descriptor.uri] = (descriptor, text)

    def list_resources(self) -> list[ResourceDescriptor]:
        return [descriptor for descriptor, _ in self._resources.values()]

    def read(self, uri: str) -> ResourceContents | None:
        entry = self._resources.get(uri)
        if entry is None:
            return None
        descriptor, text = entry
        return ResourceContents(uri=uri, mime_type=descriptor.mime_type, text=text)


class FileUIResourceResolver:
    """Serves resources from files on disk, read fresh on every request.

    Reads block, so the dispatcher calls :meth:`read` in an executor.
    """

    def __init__(self, resources: dict[str, UIResourceSettings]) -> None:
        self._resources = dict(resources)

    def list_resources(self) -> list[ResourceDescriptor]:
        return [
            ResourceDescriptor(
                uri=uri,
                name=settings.name,
                mime_type=settings.mime_type,
                description=settings.description,
            )
            for uri, settings in self._resources.items()
        ]

    def read(self, uri: str) -> ResourceContents | None:
        settings = self._resources.get(uri)
        if settings is None:
            return None
        try:
            text = settings.path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Cannot read UI resource %s from %s: %s", uri, settings.path, exc)
            raise InvalidParamsError(f"Resource unavailable: {uri}", data=uri) from exc
        logger.debug("Read UI resource %s from %s", uri, settings.path)
        return ResourceContents(uri=uri, mime_type=settings.mime_type, text=text)
