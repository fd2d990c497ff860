"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Reserve snapshot: the committed account set and its Merkle root.

The serving layer builds one snapshot at startup and hands it to request
handlers. The snapshot is read-only after construction, so handlers can use
it concurrently without locking.
"""

import time
from typing import Dict, Iterable, Optional, Tuple

from reserveproof.config.settings import (
    ReserveProofConfig,
    load_accounts,
    policy_from_settings,
)
from reserveproof.exceptions import (
    AccountNotFoundError,
    DuplicateAccountError,
    ProofGenerationError,
)
from reserveproof.leaves import Account, account_leaf, extract_balance
from reserveproof.logging_config import get_logger, log_merkle_root_computation
from reserveproof.merkle.hashing import HashPolicy
from reserveproof.merkle.proof import generate_proof
from reserveproof.merkle.tree import MerkleProof, MerkleTree, build_tree

logger = get_logger(__name__)


class ReserveSnapshot:
    """
    Accounts committed to a single Merkle root.

    Example:
        >>> snapshot = ReserveSnapshot(accounts, proof_of_reserve_policy())
        >>> snapshot.root_hex
        'b1231de3...'
        >>> snapshot.proof_for(3).payload
        3333
    """

    def __init__(
        self,
        accounts: Iterable[Account],
        policy: HashPolicy,
        parallel_threshold: Optional[int] = None,
    ):
        """
        Commit `accounts` (in order) under `policy`.

        Args:
            accounts: Ordered accounts; ids must be unique
            policy: Hash policy for leaves and branches
            parallel_threshold: Level size from which hashing runs in parallel

        Raises:
            DuplicateAccountError: If two accounts share an id
        """
        self.accounts: Tuple[Account, ...] = tuple(accounts)
        self.policy = policy

        self._by_id: Dict[int, Account] = {}
        for account in self.accounts:
            if account.id in self._by_id:
                raise DuplicateAccountError(f"Duplicate account id {account.id}")
            self._by_id[account.id] = account

        self.leaves: Tuple[str, ...] = tuple(account_leaf(a) for a in self.accounts)

        start_time = time.time()
        self.tree: MerkleTree = build_tree(
            self.leaves, policy, parallel_threshold=parallel_threshold
        )
        log_merkle_root_computation(
            logger,
            leaf_count=len(self.leaves),
            merkle_root=self.tree.root_hex,
            policy=policy.name,
            duration_ms=(time.time() - start_time) * 1000,
        )

    @classmethod
    def from_config(cls, config: ReserveProofConfig) -> "ReserveSnapshot":
        """Build a snapshot from the configured accounts and hash policy."""
        return cls(
            load_accounts(config),
            policy_from_settings(config.hashing),
            parallel_threshold=config.hashing.parallel_threshold,
        )

    @property
    def root(self) -> bytes:
        return self.tree.root

    @property
    def root_hex(self) -> str:
        return self.tree.root_hex

    @property
    def leaf_count(self) -> int:
        return len(self.leaves)

    def get_account(self, account_id: int) -> Account:
        """
        Look up a committed account.

        Raises:
            AccountNotFoundError: If no account has this id
        """
        account = self._by_id.get(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def proof_for(self, account_id: int) -> MerkleProof:
        """
        Generate the inclusion proof for an account.

        The payload of the returned proof is the account balance, read back
        from the account's leaf.

        Args:
            account_id: Account identifier

        Returns:
            MerkleProof verifying against self.root

        Raises:
            AccountNotFoundError: If no account has this id
            ProofGenerationError: If the account's leaf is missing from the tree
        """
        account = self.get_account(account_id)
        proof = generate_proof(
            account_leaf(account),
            self.leaves,
            self.policy,
            payload_extractor=extract_balance,
        )
        if proof is None:
            raise ProofGenerationError(f"Could not generate proof for account {account_id}")
        return proof
