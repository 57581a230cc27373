"""MCP SSE Gateway Application.

Creates the Starlette ASGI application with all routes.

Each application owns one StreamRegistry and one SessionGateway, stored on
``app.state``. Every open session is closed when the application shuts down.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware

from .config import GatewayConfig
from .dispatcher import MethodDispatcher
from .gateway import SessionGateway
from .registry import StreamRegistry
from .routes import build_routes
from .tools import ToolRegistry, default_registry
from .types import ServerInfo

logger = logging.getLogger(__name__)


def create_gateway(config: GatewayConfig, tools: ToolRegistry | None = None) -> SessionGateway:
    """Wire a gateway with a fresh registry and dispatcher."""
    registry = StreamRegistry()
    dispatcher = MethodDispatcher(
        registry,
        tools if tools is not None else default_registry(),
        ServerInfo(name=config.server_name, version=config.server_version),
    )
    return SessionGateway(
        registry,
        dispatcher,
        message_path=config.message_path,
        heartbeat_interval=config.heartbeat_interval,
    )


def create_app(
    config: GatewayConfig | None = None,
    *,
    tools: ToolRegistry | None = None,
) -> Starlette:
    """Create the gateway application.

    Args:
        config: Gateway configuration. Read from the environment if omitted.
        tools: Tool registry. The built-in tools are used if omitted.

    Returns:
        Configured Starlette application
    """
    if config is None:
        config = GatewayConfig.from_env()

    gateway = create_gateway(config, tools)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info(
            f"MCP SSE gateway ready: GET {config.sse_path} => endpoint => "
            f"POST {config.message_path}?sessionId=..."
        )
        try:
            yield
        finally:
            await gateway.shutdown()

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        ),
    ]

    app = Starlette(routes=build_routes(config), middleware=middleware, lifespan=lifespan)
    app.state.gateway = gateway
    app.state.config = config
    return app
