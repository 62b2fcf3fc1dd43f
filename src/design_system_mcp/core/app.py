"""
Core application module for the design system MCP server.

This module contains the central application setup logic including FastMCP
instance creation, lifespan management, and tool registration.
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from ..config.settings import load_config
from ..services.extraction_service import ExtractionService
from .context import DesignSystemContext

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

SERVER_NAME = "design-system-mcp"


class ContextSingleton:
    """Singleton holding the server context so SSE connections share one catalogue."""

    _instance: Optional["ContextSingleton"] = None
    _context: Optional[DesignSystemContext] = None
    _config_path: Optional[str] = None
    _root_directory: Optional[str] = None
    _overrides: Optional[Mapping[str, Any]] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def configure(
        self,
        config_path: Optional[str] = None,
        root_directory: Optional[str] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Set how the next context is loaded (used by the CLI ``serve`` command)."""
        self._config_path = config_path
        self._root_directory = root_directory
        self._overrides = dict(overrides or {})
        self._context = None

    def get_context(self) -> DesignSystemContext:
        """Get the application context, initializing if necessary."""
        if self._context is None:
            logger.info("Starting application initialization...")
            config = load_config(
                config_path=self._config_path,
                root_directory=self._root_directory,
                overrides=self._overrides,
            )
            self._context = DesignSystemContext(
                config=config, service=ExtractionService(config)
            )
            logger.info(f"Design system context ready for {config.root_directory}")
        return self._context

    def reset(self) -> None:
        self._context = None


@asynccontextmanager
async def design_system_lifespan(server: FastMCP) -> AsyncIterator[DesignSystemContext]:
    """
    Manage the application lifecycle.

    Args:
        server: The FastMCP server instance

    Yields:
        DesignSystemContext: Context shared by every tool call
    """
    try:
        context = ContextSingleton().get_context()
        yield context
    except Exception as e:
        logger.error(f"Error in application lifespan: {e}")
        raise
    finally:
        logger.debug("Application lifespan context manager exiting")


def create_app() -> FastMCP:
    """
    Create and configure the FastMCP application instance.

    Returns:
        FastMCP: Configured FastMCP server instance ready for tool registration
    """
    logger.info("Creating FastMCP application instance...")

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8052"))

    app = FastMCP(
        name=SERVER_NAME,
        instructions="MCP server exposing design system components extracted from Storybook stories and component sources",
        host=host,
        port=port,
        lifespan=design_system_lifespan,
    )

    logger.info(f"FastMCP application created - Host: {host}, Port: {port}")
    return app


def register_tools(app: FastMCP) -> None:
    """
    Register all MCP tools with the application instance.

    Args:
        app: The FastMCP application instance to register tools with
    """
    from ..tools import component_tools

    app.tool()(component_tools.analyze_component)
    app.tool()(component_tools.list_components)
    app.tool()(component_tools.search_components)
    app.tool()(component_tools.get_design_system_info)
    app.tool()(component_tools.refresh_components)
    logger.info("Component tools registered")


async def run_server(transport: Optional[str] = None) -> None:
    """
    Run the MCP server with the appropriate transport protocol.

    Args:
        transport: ``stdio`` or ``sse`` (TRANSPORT env var if None, default stdio)
    """
    logger.info("Starting design system MCP server...")

    app = create_app()
    register_tools(app)

    transport = transport or os.getenv("TRANSPORT", "stdio")
    logger.info(f"Using transport: {transport}")

    try:
        if transport == "sse":
            await app.run_sse_async()
        else:
            await app.run_stdio_async()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received, shutting down...")
    finally:
        ContextSingleton().reset()
        logger.info("Server shutdown completed")
