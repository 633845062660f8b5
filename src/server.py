"""SELinux Translator MCP Server - Main server implementation.

This module provides the MCP server that exposes SELinux label translation
to AI assistants and cluster tooling. It encodes SELinux options into file
labels and reports whether two labels could conflict on shared volumes.

NOTE: The server runs off-host. It never reads SELinux defaults from any
node, so conflicts are only reported when both labels explicitly specify
different values for the same field.
"""

import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, Optional

import structlog
import typer
from dotenv import load_dotenv
from fastmcp import FastMCP
from pydantic import BaseModel, Field, ValidationError, field_validator

from .translator.models import SELinuxOptions, options_from_mapping
from .translator.selinux_translator import ControllerSELinuxTranslator

# Load environment variables
load_dotenv()

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer(),
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def conflict_report(
    translator: ControllerSELinuxTranslator, label_a: str, label_b: str
) -> Dict[str, Any]:
    """Compare two file labels and describe any conflict.

    Args:
        translator: Label translator used for the comparison
        label_a: First file label
        label_b: Second file label

    Returns:
        Dictionary with the conflict flag and the conflicting fields
    """
    conflict = translator.conflicts(label_a, label_b)
    fields = translator.conflicting_fields(label_a, label_b)

    return {
        "status": "success",
        "label_a": label_a,
        "label_b": label_b,
        "conflict": conflict,
        "conflicting_fields": [
            {
                "field": item.field.value,
                "value_a": item.value_a,
                "value_b": item.value_b,
                "message": item.describe(),
            }
            for item in fields
        ],
    }


class ServerConfig(BaseModel):
    """Configuration for the SELinux translator MCP server."""

    server_name: str = Field(
        default_factory=lambda: os.getenv(
            "SELINUX_MCP_SERVER_NAME", "selinux-translator-mcp"
        ),
        description="Name announced by the MCP server",
    )
    log_level: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper(),
        description="Log level for the server and CLI",
        validate_default=True,
    )

    # Development Settings
    development_mode: bool = Field(
        default_factory=lambda: os.getenv("DEVELOPMENT_MODE", "false").lower()
        == "true",
        description="Enable development mode with additional logging",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a standard logging level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. Valid options: {', '.join(LOG_LEVELS)}"
            )
        return level


class SELinuxTranslatorServer:
    """Main SELinux Translator MCP Server implementation.

    The server wraps a ControllerSELinuxTranslator and exposes label
    encoding and conflict checks as MCP tools.
    """

    def __init__(
        self,
        config: ServerConfig,
        translator: Optional[ControllerSELinuxTranslator] = None,
    ):
        """Initialize the SELinux translator MCP server.

        Args:
            config: Server configuration settings
            translator: Label translator, a controller translator if not provided
        """
        self.config = config
        self.logger = structlog.get_logger(self.__class__.__name__)
        self.translator = translator or ControllerSELinuxTranslator()

        # Initialize FastMCP server
        self.mcp: FastMCP = FastMCP(config.server_name)

        # Server state
        self._running = False

        # Register MCP tools
        self._register_tools()

        self.logger.info(
            "SELinux Translator MCP Server initialized",
            server_name=config.server_name,
            selinux_enabled=self.translator.selinux_enabled(),
            development_mode=config.development_mode,
        )

    def _register_tools(self) -> None:
        """Register MCP tools for AI assistant interaction."""

        @self.mcp.tool()
        async def encode_selinux_label(
            user: str = "",
            role: str = "",
            type: str = "",
            level: str = "",
        ) -> Dict[str, Any]:
            """Encode SELinux options into a file label.

            Unspecified fields stay empty; they are never filled from node
            defaults. Options with no field set produce an empty label.

            Args:
                user: SELinux user (e.g., system_u)
                role: SELinux role (e.g., system_r)
                type: SELinux type (e.g., container_t)
                level: SELinux level (e.g., s0:c1,c2)

            Returns:
                Dictionary with the encoded label
            """
            self.logger.info(
                "Encoding SELinux label", user=user, role=role, type=type, level=level
            )

            opts = SELinuxOptions(user=user, role=role, type=type, level=level)
            return {
                "status": "success",
                "label": self.translator.selinux_options_to_file_label(opts),
                "selinux_enabled": self.translator.selinux_enabled(),
            }

        @self.mcp.tool()
        async def check_label_conflict(label_a: str, label_b: str) -> Dict[str, Any]:
            """Check whether two SELinux file labels conflict.

            Fields missing from either label are incomparable and never
            conflict. Only fields specified in both labels with different
            values are reported.

            Args:
                label_a: First file label (e.g., system_u:system_r:container_t:s0:c1,c2)
                label_b: Second file label (e.g., :::s0:c98,c99)

            Returns:
                Dictionary with the conflict flag and conflicting fields
            """
            self.logger.info(
                "Checking SELinux label conflict", label_a=label_a, label_b=label_b
            )
            return conflict_report(self.translator, label_a, label_b)

        @self.mcp.tool()
        async def check_options_conflict(
            options_a: Optional[Dict[str, Any]] = None,
            options_b: Optional[Dict[str, Any]] = None,
        ) -> Dict[str, Any]:
            """Check whether two workloads' SELinux options conflict.

            Takes raw seLinuxOptions mappings (user, role, type, level) as
            found in a pod security context. A missing mapping means the
            workload has no SELinux options.

            Args:
                options_a: SELinux options of the first workload
                options_b: SELinux options of the second workload

            Returns:
                Dictionary with both labels, the conflict flag and conflicting fields
            """
            self.logger.info(
                "Checking SELinux options conflict",
                options_a=options_a,
                options_b=options_b,
            )

            try:
                opts_a = options_from_mapping(options_a)
                opts_b = options_from_mapping(options_b)
            except ValidationError as e:
                self.logger.warning("Invalid SELinux options", error=str(e))
                return {
                    "status": "error",
                    "error": f"Invalid SELinux options: {e}",
                    "error_code": "INVALID_SELINUX_OPTIONS",
                }

            label_a = self.translator.selinux_options_to_file_label(opts_a)
            label_b = self.translator.selinux_options_to_file_label(opts_b)
            return conflict_report(self.translator, label_a, label_b)

    async def start(self) -> None:
        """Start the MCP server."""
        if self._running:
            self.logger.warning("Server is already running")
            return

        self._running = True
        self.logger.info("Starting SELinux Translator MCP Server")

        try:
            await self.mcp.run_async()

        except Exception as e:
            self.logger.error("Failed to start server", error=str(e), exc_info=True)
            self._running = False
            raise

    async def stop(self) -> None:
        """Stop the MCP server."""
        if not self._running:
            return

        self.logger.info("Stopping SELinux Translator MCP Server")
        self._running = False


def _load_config() -> ServerConfig:
    """Load configuration from the environment, exiting on invalid values."""
    try:
        return ServerConfig()
    except ValidationError as e:
        typer.echo(f"❌ Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)


def _configure_log_level(config: ServerConfig) -> None:
    """Set the stdlib root log level; development mode forces DEBUG."""
    level = logging.DEBUG if config.development_mode else config.log_level
    logging.basicConfig(level=level, stream=sys.stderr, format="%(message)s")


def create_app() -> typer.Typer:
    """Create the Typer CLI application."""
    app = typer.Typer(
        name="selinux-translator",
        help="MCP server for SELinux label encoding and conflict checks",
        add_completion=False,
    )

    @app.command()
    def start(
        development: bool = typer.Option(
            False,
            "--dev",
            help="Enable development mode",
        ),
    ) -> None:
        """Start the SELinux translator MCP server."""

        # Load configuration
        config = _load_config()
        if development:
            config.development_mode = True
        _configure_log_level(config)

        # Create and start server
        server = SELinuxTranslatorServer(config)

        try:
            asyncio.run(server.start())
        except KeyboardInterrupt:
            logger.info("Received interrupt signal, shutting down...")
        except Exception as e:
            logger.error("Server failed", error=str(e), exc_info=True)
            sys.exit(1)

    @app.command()
    def encode(
        user: str = typer.Option("", "--user", "-u", help="SELinux user"),
        role: str = typer.Option("", "--role", "-r", help="SELinux role"),
        type_: str = typer.Option("", "--type", "-t", help="SELinux type"),
        level: str = typer.Option("", "--level", "-l", help="SELinux level"),
    ) -> None:
        """Print the file label for the given SELinux options."""
        _configure_log_level(_load_config())

        translator = ControllerSELinuxTranslator()
        opts = SELinuxOptions(user=user, role=role, type=type_, level=level)
        typer.echo(translator.selinux_options_to_file_label(opts))

    @app.command()
    def check(
        label_a: str = typer.Argument(..., help="First file label"),
        label_b: str = typer.Argument(..., help="Second file label"),
    ) -> None:
        """Check two file labels for a conflict. Exits with 1 on conflict."""
        _configure_log_level(_load_config())

        translator = ControllerSELinuxTranslator()
        result = conflict_report(translator, label_a, label_b)
        typer.echo(json.dumps(result, indent=2))

        if result["conflict"]:
            raise typer.Exit(code=1)

    return app


def main() -> None:
    """Main entry point for the SELinux translator MCP server."""
    app = create_app()
    app()


if __name__ == "__main__":
    main()
