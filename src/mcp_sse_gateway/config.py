"""Gateway configuration.

Values come from dataclass defaults, overlaid by ``MCP_SSE_GATEWAY_*``
environment variables. The CLI exports its options into the environment so
the uvicorn app factory sees them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .heartbeat import DEFAULT_HEARTBEAT_INTERVAL

ENV_PREFIX = "MCP_SSE_GATEWAY_"


@dataclass
class GatewayConfig:
    """Gateway configuration."""

    # Server binding
    host: str = "127.0.0.1"
    port: int = 4000

    # Routes
    sse_path: str = "/sse-cursor"
    message_path: str = "/message"

    # Stream keep-alive
    heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL

    # Identity reported by initialize
    server_name: str = "final-capabilities-server"
    server_version: str = "1.0.0"

    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> GatewayConfig:
        """Build a config from defaults plus environment overrides."""
        env = os.environ if environ is None else environ
        config = cls()

        def get(name: str) -> str | None:
            value = env.get(ENV_PREFIX + name)
            return value if value else None

        if (value := get("HOST")) is not None:
            config.host = value
        if (value := get("PORT")) is not None:
            config.port = int(value)
        if (value := get("SSE_PATH")) is not None:
            config.sse_path = value
        if (value := get("MESSAGE_PATH")) is not None:
            config.message_path = value
        if (value := get("HEARTBEAT_INTERVAL")) is not None:
            config.heartbeat_interval = float(value)
        if (value := get("SERVER_NAME")) is not None:
            config.server_name = value
        if (value := get("SERVER_VERSION")) is not None:
            config.server_version = value
        if (value := get("CORS_ORIGINS")) is not None:
            config.cors_origins = [o.strip() for o in value.split(",") if o.strip()]
        if (value := get("LOG_LEVEL")) is not None:
            config.log_level = value.upper()

        if config.heartbeat_interval <= 0:
            raise ValueError("heartbeat_interval must be positive")
        return config

    def to_env(self) -> dict[str, str]:
        """Environment variables that reproduce this config via from_env()."""
        return {
            ENV_PREFIX + "HOST": self.host,
            ENV_PREFIX + "PORT": str(self.port),
            ENV_PREFIX + "SSE_PATH": self.sse_path,
            ENV_PREFIX + "MESSAGE_PATH": self.message_path,
            ENV_PREFIX + "HEARTBEAT_INTERVAL": str(self.heartbeat_interval),
            ENV_PREFIX + "SERVER_NAME": self.server_name,
            ENV_PREFIX + "SERVER_VERSION": self.server_version,
            ENV_PREFIX + "CORS_ORIGINS": ",".join(self.cors_origins),
            ENV_PREFIX + "LOG_LEVEL": self.log_level,
        }
