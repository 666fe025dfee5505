"""Smoke test to verify the project scaffolding works."""

from __future__ import annotations


def test_import() -> None:
    import mcpserve

    assert mcpserve.__version__ == "0.1.0"


def test_cli_entrypoint() -> None:
    from mcpserve.cli import main

    assert callable(main)


def test_layer_imports() -> None:
    from mcpserve.protocol import BatchProcessor, RequestDispatcher
    from mcpserve.runtime import CancellationTracker, ExternalCallClient, ResponseCache
    from mcpserve.server import MCPEngine, ServerContext
    from mcpserve.tools import ToolExecutor, ToolRegistry

    assert RequestDispatcher is not None
    assert BatchProcessor is not None
    assert ResponseCache is not None
    assert CancellationTracker is not None
    assert ExternalCallClient is not None
    assert ToolRegistry is not None
    assert ToolExecutor is not None
    assert MCPEngine is not None
    assert ServerContext is not None


def test_lazy_import_from_mcpserve() -> None:
    import mcpserve

    assert mcpserve.MCPEngine is not None
    assert mcpserve.ToolRegistry is not None
