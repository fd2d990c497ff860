"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

CLI commands for Merkle commitments.

Provides commands for:
- Computing the root of a leaf set or of the configured accounts
- Generating an inclusion proof for one leaf
- Verifying a proof document against a root
"""

import dataclasses
import json
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click

from reserveproof.config.settings import (
    HASH_MODES,
    HashingConfig,
    ReserveProofConfig,
    load_accounts,
    policy_from_settings,
)
from reserveproof.exceptions import (
    InvalidConfigurationError,
    LeafParseError,
    MalformedProofError,
)
from reserveproof.leaves import account_leaves, extract_balance
from reserveproof.logging_config import get_logger, log_merkle_root_computation
from reserveproof.merkle.hashing import (
    BITCOIN_TRANSACTION_TAG,
    PROOF_OF_RESERVE_LEAF_TAG,
)
from reserveproof.merkle.proof import generate_proof
from reserveproof.merkle.tree import calculate_root
from reserveproof.merkle.verifier import MerkleVerifier

logger = get_logger(__name__)

# Key under which proof documents carry the committed balance
BALANCE_KEY = "userBalance"
ROOT_KEY = "merkleRoot"


def hash_options(f):
    """Attach the hash policy override options to a command."""
    f = click.option(
        '--branch-tag',
        default=None,
        help='Branch tag (tagged mode only; default: from configuration)',
    )(f)
    f = click.option(
        '--leaf-tag',
        default=None,
        help='Leaf tag (default: from configuration, or the mode default)',
    )(f)
    f = click.option(
        '--mode',
        '-m',
        type=click.Choice(HASH_MODES, case_sensitive=False),
        default=None,
        help='Hashing mode (default: from configuration)',
    )(f)
    return f


def leaves_file_option(f):
    return click.option(
        '--leaves-file',
        '-f',
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help='File with one leaf per line (default: configured accounts)',
    )(f)


def resolve_hashing(
    config: ReserveProofConfig,
    mode: Optional[str],
    leaf_tag: Optional[str],
    branch_tag: Optional[str],
) -> HashingConfig:
    """
    Apply command line overrides to the configured hashing section.

    Switching mode without naming a leaf tag selects that mode's default tag.
    """
    hashing = config.hashing
    mode = (mode or hashing.mode).lower()

    if leaf_tag is None:
        if mode == hashing.mode:
            leaf_tag = hashing.leaf_tag
        elif mode == "classic":
            leaf_tag = BITCOIN_TRANSACTION_TAG
        else:
            leaf_tag = PROOF_OF_RESERVE_LEAF_TAG

    return dataclasses.replace(
        hashing,
        mode=mode,
        leaf_tag=leaf_tag,
        branch_tag=branch_tag if branch_tag is not None else hashing.branch_tag,
    )


def read_leaves_file(path: Path) -> List[str]:
    """Read one leaf per line; line terminators are not part of the leaf."""
    with open(path, 'r', encoding='utf-8') as f:
        return f.read().splitlines()


def collect_leaves(
    config: ReserveProofConfig,
    leaves: Sequence[str],
    leaves_file: Optional[Path],
) -> Tuple[List[str], bool]:
    """
    Pick the leaf set a command works on.

    Returns:
        Tuple of (leaves, True if they are the configured account leaves)
    """
    if leaves and leaves_file is not None:
        raise click.UsageError("Pass leaves as arguments or with --leaves-file, not both")
    if leaves:
        return list(leaves), False
    if leaves_file is not None:
        return read_leaves_file(leaves_file), False
    return account_leaves(load_accounts(config)), True


@click.command()
@click.argument('leaves', nargs=-1)
@leaves_file_option
@hash_options
@click.pass_context
def root(ctx, leaves, leaves_file, mode, leaf_tag, branch_tag):
    """
    Compute and print the Merkle root (lowercase hex).

    Without LEAVES or --leaves-file the configured accounts are committed.

    Examples:

        # Root of the configured accounts
        reserveproof root

        # Root of explicit leaves under the classic policy
        reserveproof root --mode classic aaa bbb ccc
    """
    cli_ctx = ctx.obj
    try:
        leaf_list, _ = collect_leaves(cli_ctx.config, leaves, leaves_file)
        hashing = resolve_hashing(cli_ctx.config, mode, leaf_tag, branch_tag)
        policy = policy_from_settings(hashing)

        start_time = time.time()
        digest = calculate_root(
            leaf_list, policy, parallel_threshold=hashing.parallel_threshold
        )
        log_merkle_root_computation(
            logger,
            leaf_count=len(leaf_list),
            merkle_root=digest.hex(),
            policy=policy.name,
            duration_ms=(time.time() - start_time) * 1000,
        )

        click.echo(digest.hex())
    except InvalidConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.command()
@click.argument('leaf')
@click.argument('leaves', nargs=-1)
@leaves_file_option
@hash_options
@click.pass_context
def proof(ctx, leaf, leaves, leaves_file, mode, leaf_tag, branch_tag):
    """
    Print the inclusion proof for LEAF as JSON.

    LEAF is proven against LEAVES, --leaves-file, or the configured accounts.
    For configured accounts the document also carries the committed balance.

    Examples:

        reserveproof proof "(3,3333)" > proof.json
        reserveproof proof bbb aaa bbb ccc --mode classic
    """
    cli_ctx = ctx.obj
    try:
        leaf_list, from_accounts = collect_leaves(cli_ctx.config, leaves, leaves_file)
        hashing = resolve_hashing(cli_ctx.config, mode, leaf_tag, branch_tag)
        policy = policy_from_settings(hashing)

        result = generate_proof(
            leaf,
            leaf_list,
            policy,
            payload_extractor=extract_balance if from_accounts else None,
        )
        if result is None:
            click.echo(f"Error: Leaf {leaf!r} is not committed", err=True)
            sys.exit(1)

        document = {ROOT_KEY: calculate_root(leaf_list, policy).hex()}
        document.update(result.to_dict(payload_key=BALANCE_KEY))
        if not from_accounts:
            del document[BALANCE_KEY]

        click.echo(json.dumps(document, indent=2))
    except InvalidConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except LeafParseError as e:
        click.echo(f"Error: {e}", err=True)
        logger.error(f"Committed leaf could not be decoded: {e}", exc_info=True)
        sys.exit(1)


@click.command()
@click.argument('leaf')
@click.option(
    '--proof',
    '-p',
    'proof_file',
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='Proof document (JSON) as printed by "reserveproof proof"',
)
@click.option(
    '--root',
    '-r',
    'root_hex',
    default=None,
    help='Expected root (hex; default: the merkleRoot field of the proof)',
)
@hash_options
@click.pass_context
def verify(ctx, leaf, proof_file, root_hex, mode, leaf_tag, branch_tag):
    """
    Verify that LEAF is committed under a root.

    Exits 0 and prints "valid" when the proof folds to the root, exits 1 and
    prints "invalid" when it does not, and exits 2 when the proof document
    or root is malformed.

    Examples:

        reserveproof verify "(3,3333)" --proof proof.json --root b1231de3...
    """
    cli_ctx = ctx.obj
    try:
        hashing = resolve_hashing(cli_ctx.config, mode, leaf_tag, branch_tag)
        verifier = MerkleVerifier(policy_from_settings(hashing))

        try:
            with open(proof_file, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, ValueError) as e:
            click.echo(f"Error: Cannot read proof document: {e}", err=True)
            sys.exit(2)

        if root_hex is None:
            root_hex = document.get(ROOT_KEY) if isinstance(document, dict) else None
            if not isinstance(root_hex, str):
                click.echo(
                    f"Error: No --root given and the proof has no {ROOT_KEY} field",
                    err=True,
                )
                sys.exit(2)

        valid = verifier.verify_document(leaf, document, root_hex)
    except MalformedProofError as e:
        click.echo(f"Error: Malformed proof: {e}", err=True)
        sys.exit(2)
    except InvalidConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if valid:
        click.echo("valid")
    else:
        click.echo("invalid")
        sys.exit(1)
