"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

CLI command for running the proof HTTP service.
"""

import asyncio
import dataclasses
import sys

import click

from reserveproof.config.settings import parse_listen_address
from reserveproof.exceptions import ReserveProofError
from reserveproof.logging_config import get_logger

logger = get_logger(__name__)


@click.command()
@click.option(
    '--listen',
    '-L',
    'listen_address',
    type=str,
    default=None,
    envvar='RESERVEPROOF_LISTEN_ADDRESS',
    help='Listen address host:port (default: server.listen_address from configuration)',
)
@click.pass_context
def serve(ctx, listen_address):
    """
    Start the proof of reserve HTTP service.

    The account snapshot and its root are computed once at startup.

    Examples:

        reserveproof serve
        reserveproof --config /etc/reserveproof/config.yaml serve --listen 127.0.0.1:3000
    """
    from reserveproof.service.server import ReserveProofService

    cli_ctx = ctx.obj
    config = cli_ctx.config

    try:
        if listen_address is not None:
            parse_listen_address(listen_address)
            config = dataclasses.replace(
                config,
                server=dataclasses.replace(config.server, listen_address=listen_address),
            )

        service = ReserveProofService.from_config(config)
    except ReserveProofError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    try:
        logger.info("Starting ReserveProof API...")
        asyncio.run(service.start())
    except KeyboardInterrupt:
        logger.info("Service stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Failed to run ReserveProof API: {e}", exc_info=True)
        sys.exit(1)
