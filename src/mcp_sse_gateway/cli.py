"""MCP SSE Gateway CLI.

Commands:
    mcp-sse-gateway serve                 - Run the HTTP/SSE server
    mcp-sse-gateway health                - Check server health
    mcp-sse-gateway tools                 - Print the built-in tool descriptors
    mcp-sse-gateway call METHOD [PARAMS]  - Send one call and print its result
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import sys

import click
import httpx

from .config import GatewayConfig


@click.group(invoke_without_command=True)
@click.pass_context
def main(ctx: click.Context) -> None:
    """MCP SSE Gateway - JSON-RPC calls over HTTP, results over SSE."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# =============================================================================
# Server Commands
# =============================================================================


@main.command()
@click.option("--host", default=None, help="Host to bind to [default: 127.0.0.1]")
@click.option("--port", default=None, type=int, help="Port to bind to [default: 4000]")
@click.option(
    "--heartbeat-interval",
    default=None,
    type=float,
    help="Seconds between heartbeat events [default: 10]",
)
@click.option("--log-level", default=None, help="Logging level [default: INFO]")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def serve(
    host: str | None,
    port: int | None,
    heartbeat_interval: float | None,
    log_level: str | None,
    reload: bool,
) -> None:
    """Run the gateway server."""
    import uvicorn

    config = GatewayConfig.from_env()
    if host is not None:
        config.host = host
    if port is not None:
        config.port = port
    if heartbeat_interval is not None:
        config.heartbeat_interval = heartbeat_interval
    if log_level is not None:
        config.log_level = log_level.upper()

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    # Pass settings via environment for the app factory
    os.environ.update(config.to_env())

    click.echo(f"Starting MCP SSE gateway on http://{config.host}:{config.port}", err=True)
    click.echo(f"  GET  {config.sse_path} => SSE => endpoint", err=True)
    click.echo(f"  POST {config.message_path}?sessionId=... => ack, result over SSE", err=True)
    click.echo("Press Ctrl+C to stop", err=True)

    uvicorn.run(
        "mcp_sse_gateway.app:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=reload,
        log_level=config.log_level.lower(),
    )


@main.command()
@click.option("--url", default="http://localhost:4000", help="Server URL")
def health(url: str) -> None:
    """Check server health."""

    async def check() -> None:
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(f"{url}/health")
                if response.status_code == 200:
                    data = response.json()
                    click.echo(f"Server is healthy: {data}")
                else:
                    click.echo(f"Server returned {response.status_code}", err=True)
                    sys.exit(1)
        except httpx.ConnectError:
            click.echo(f"Cannot connect to server at {url}", err=True)
            sys.exit(1)

    asyncio.run(check())


# =============================================================================
# Tool Commands
# =============================================================================


@main.command()
def tools() -> None:
    """Print the built-in tool descriptors as JSON."""
    from .tools import default_registry

    descriptors = [d.model_dump() for d in default_registry().list()]
    click.echo(json.dumps(descriptors, indent=2))


@main.command("call")
@click.argument("method")
@click.argument("params", required=False)
@click.option("--url", default="http://localhost:4000", help="Server URL")
@click.option("--sse-path", default="/sse-cursor", help="Push stream path")
@click.option("--timeout", default=30.0, help="Seconds to wait for the result")
def call(method: str, params: str | None, url: str, sse_path: str, timeout: float) -> None:
    """Send METHOD with optional JSON PARAMS and print the result.

    Examples:

        mcp-sse-gateway call tools/list

        mcp-sse-gateway call tools/call '{"name": "addNumbersTool", "arguments": {"a": 2, "b": 3}}'
    """
    from .client import GatewayClient
    from .errors import GatewayError, RpcError

    try:
        parsed = json.loads(params) if params else None
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"PARAMS is not valid JSON: {e}") from e

    async def run() -> None:
        async with GatewayClient(url, sse_path=sse_path, timeout=timeout) as client:
            result = await client.request(method, parsed)
            click.echo(json.dumps(result, indent=2))

    try:
        asyncio.run(run())
    except RpcError as e:
        click.echo(f"Error {e.code}: {e.message}", err=True)
        sys.exit(1)
    except (GatewayError, httpx.HTTPError, ConnectionError, TimeoutError) as e:
        click.echo(f"Call failed: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
