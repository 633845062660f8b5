"""Pytest configuration and shared fixtures for SELinux Translator MCP Server tests."""

from typing import AsyncGenerator, Callable, Dict
from unittest.mock import AsyncMock, Mock

import pytest
from fastmcp import FastMCP

from src.server import SELinuxTranslatorServer, ServerConfig
from src.translator.models import SELinuxOptions
from src.translator.selinux_translator import ControllerSELinuxTranslator


@pytest.fixture
def test_config() -> ServerConfig:
    """Create a test configuration with safe defaults."""
    return ServerConfig(
        server_name="selinux-translator-test",
        log_level="DEBUG",
        development_mode=True,
    )


@pytest.fixture
def translator() -> ControllerSELinuxTranslator:
    """Create a controller translator."""
    return ControllerSELinuxTranslator()


@pytest.fixture
async def test_server(
    test_config: ServerConfig,
) -> AsyncGenerator[SELinuxTranslatorServer, None]:
    """Create a test server instance."""
    server = SELinuxTranslatorServer(test_config)

    # Mock the MCP server to avoid actual transport operations
    server.mcp = Mock(spec=FastMCP)
    server.mcp.run_async = AsyncMock()

    yield server

    # Clean up
    await server.stop()


@pytest.fixture
def registered_tools(test_server: SELinuxTranslatorServer) -> Dict[str, Callable]:
    """Capture the tool functions the server registers."""
    tools: Dict[str, Callable] = {}

    def mock_tool():
        def decorator(func):
            tools[func.__name__] = func
            return func

        return decorator

    test_server.mcp.tool = mock_tool
    test_server._register_tools()
    return tools


@pytest.fixture
def container_options() -> SELinuxOptions:
    """Fully specified container SELinux options."""
    return SELinuxOptions(
        user="system_u",
        role="system_r",
        type="container_t",
        level="s0:c1,c2",
    )


@pytest.fixture
def container_label() -> str:
    """File label of the fully specified container options."""
    return "system_u:system_r:container_t:s0:c1,c2"
