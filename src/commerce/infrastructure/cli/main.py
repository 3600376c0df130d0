"""Command-line entry point: run the services and inspect configuration."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
import uvicorn

from commerce.infrastructure.api.app import SERVICES, create_app
from commerce.infrastructure.bootstrap import build_container
from commerce.infrastructure.config import ConfigError, Settings
from commerce.infrastructure.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as exc:
        raise click.ClickException(str(exc))


@click.group()
def cli() -> None:
    """Commerce: orders, payments and users services"""


@cli.command("serve")
@click.argument("service", type=click.Choice(sorted(SERVICES)))
@click.option("--host", default=None, help="Bind address (defaults to HOST).")
@click.option("--port", type=int, default=None, help="Port (defaults to PORT).")
def serve(service: str, host: str | None, port: int | None) -> None:
    """Run one service."""
    settings = _load_settings()
    setup_logging(settings.logging)

    app = create_app(service, build_container(settings))
    bind_host = host or settings.server.host
    bind_port = port or settings.server.port
    logger.info(f"Starting {service} service on {bind_host}:{bind_port}")
    uvicorn.run(app, host=bind_host, port=bind_port, log_config=None)


@cli.command("serve-all")
@click.option("--host", default=None, help="Bind address (defaults to HOST).")
@click.option("--port", type=int, default=None, help="First port (defaults to PORT).")
def serve_all(host: str | None, port: int | None) -> None:
    """Run orders, payments and users on PORT, PORT+1 and PORT+2."""
    settings = _load_settings()
    setup_logging(settings.logging)

    bind_host = host or settings.server.host
    base_port = port or settings.server.port
    servers = []
    for offset, service in enumerate(("orders", "payments", "users")):
        app = create_app(service, build_container(settings))
        config = uvicorn.Config(app, host=bind_host, port=base_port + offset, log_config=None)
        servers.append(uvicorn.Server(config))
        logger.info(f"Starting {service} service on {bind_host}:{base_port + offset}")

    async def run_all() -> None:
        await asyncio.gather(*(server.serve() for server in servers))

    asyncio.run(run_all())
    if not all(server.started for server in servers):
        logger.critical("One or more services failed to start")
        sys.exit(1)


@cli.command("check-config")
def check_config() -> None:
    """Validate the environment and print a summary."""
    settings = _load_settings()
    click.echo(f"App:         {settings.app.name} {settings.app.version} ({settings.app.environment})")
    click.echo(f"Server:      {settings.server.host}:{settings.server.port}")
    click.echo(f"Database:    {settings.database.name}")
    click.echo(f"JWT expiry:  {settings.security.jwt_expires_in}")
    click.echo(f"Bcrypt cost: {settings.security.bcrypt_rounds}")
    click.echo(f"Logging:     {settings.logging.level} ({settings.logging.format})")
    click.echo(f"CORS origin: {settings.cors_origin}")
    click.echo(
        f"Rate limit:  {settings.rate_limit.max_requests} requests / "
        f"{settings.rate_limit.window_seconds}s"
    )
    gateway = settings.gateway.kind
    if settings.gateway.url:
        gateway += f" ({settings.gateway.url})"
    click.echo(f"Gateway:     {gateway}")
    click.echo("Configuration OK")
