"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

CLI entry point for ReserveProof.

Provides commands to compute the reserve root, produce and verify inclusion
proofs, and run the proof HTTP service.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from reserveproof._version import __version__
from reserveproof.cli.context import CLIContext, pass_context
from reserveproof.config.settings import get_default_config_path, load_config
from reserveproof.exceptions import InvalidConfigurationError
from reserveproof.logging_config import get_logger, setup_logging


@click.group()
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help=f'Path to configuration file (default: {get_default_config_path()})',
)
@click.option(
    '--log-level',
    '-l',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Set logging level (default: from configuration)',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output',
)
@click.version_option(version=__version__, prog_name='reserveproof')
@pass_context
def cli(ctx: CLIContext, config: Optional[Path], log_level: Optional[str], verbose: bool):
    """
    ReserveProof - Merkle proof of reserves.

    Commits account balances to a Merkle root and lets each account holder
    check that their balance is included.
    """
    ctx.verbose = verbose
    ctx.config_path = str(config) if config else None

    # Until the configuration is known only warnings surface
    setup_logging(level=log_level or "WARNING", json_format=False)

    try:
        ctx.config = load_config(ctx.config_path)
    except InvalidConfigurationError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"Error: Failed to load configuration: {e}", err=True)
        sys.exit(1)

    try:
        effective_log_level = log_level.upper() if log_level else ctx.config.logging.level
        log_file = Path(ctx.config.logging.file) if ctx.config.logging.file else None
        setup_logging(
            level=effective_log_level,
            log_file=log_file,
            json_format=ctx.config.logging.format == "json",
        )

        if verbose:
            logger = get_logger("reserveproof.cli")
            logger.info(f"Loaded configuration from: {ctx.config_path or 'defaults'}")
            logger.info(f"Log level: {effective_log_level}")
    except Exception as e:
        click.echo(f"Error: Failed to set up logging: {e}", err=True)
        sys.exit(1)


from reserveproof.cli.merkle import proof, root, verify
from reserveproof.cli.serve import serve

cli.add_command(root)
cli.add_command(proof)
cli.add_command(verify)
cli.add_command(serve)


if __name__ == '__main__':
    cli()
