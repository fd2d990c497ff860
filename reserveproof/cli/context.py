"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

CLI context for ReserveProof.

Provides shared context object and decorators for CLI commands.
"""

from typing import Optional

import click

from reserveproof.config.settings import ReserveProofConfig


class CLIContext:
    """Context object for CLI commands."""

    def __init__(self):
        self.config: Optional[ReserveProofConfig] = None
        self.config_path: Optional[str] = None
        self.verbose = False


pass_context = click.make_pass_decorator(CLIContext, ensure=True)
