"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Merkle proof verification.

This module implements the counterpart of proof generation:
- verify_proof: recompute a root from a leaf and its sibling path
- MerkleVerifier: policy-bound verifier with structured logging and
  support for JSON proof documents
"""

import time
from typing import Any, Iterable, Mapping, Union

from reserveproof.exceptions import MalformedProofError
from reserveproof.logging_config import get_logger, log_merkle_verification
from reserveproof.merkle.hashing import DIGEST_SIZE, Data, HashPolicy
from reserveproof.merkle.proof import proof_from_dict
from reserveproof.merkle.tree import MerkleProof, Position, ProofPathNode

logger = get_logger(__name__)

ProofLike = Union[MerkleProof, Iterable[ProofPathNode]]


def _path_of(proof: ProofLike) -> Iterable[ProofPathNode]:
    if isinstance(proof, MerkleProof):
        return proof.path
    return proof


def _check_digest(value: Any, what: str) -> None:
    if not isinstance(value, (bytes, bytearray)) or len(value) != DIGEST_SIZE:
        raise MalformedProofError(f"{what} must be {DIGEST_SIZE} bytes")


def verify_proof(
    leaf: Data,
    proof: ProofLike,
    policy: HashPolicy,
    expected_root: bytes,
) -> bool:
    """
    Verify a Merkle inclusion proof.

    Recomputes the root by folding the sibling path into the leaf digest,
    then compares it with the expected root.

    Args:
        leaf: Original leaf value (hashed with policy.leaf_hash)
        proof: MerkleProof or an iterable of ProofPathNode
        policy: Hash policy the tree was built with
        expected_root: Root digest to verify against

    Returns:
        True if the proof is valid, False otherwise

    Raises:
        MalformedProofError: If a sibling or the expected root is not a
            32-byte digest, or a position is unknown
    """
    _check_digest(expected_root, "Expected root")

    current_hash = policy.leaf_hash(leaf)

    for level, node in enumerate(_path_of(proof)):
        _check_digest(node.sibling, f"Sibling at level {level}")

        if node.position == Position.RIGHT:
            current_hash = policy.branch_hash(current_hash, node.sibling)
        elif node.position == Position.LEFT:
            current_hash = policy.branch_hash(node.sibling, current_hash)
        else:
            raise MalformedProofError(f"Unknown position at level {level}: {node.position!r}")

    return current_hash == bytes(expected_root)


class MerkleVerifier:
    """
    Verify inclusion proofs against a published root.

    Example:
        >>> from reserveproof.merkle.hashing import proof_of_reserve_policy
        >>> verifier = MerkleVerifier(proof_of_reserve_policy())
        >>> verifier.verify("(3,3333)", proof, root)
        True
    """

    def __init__(self, policy: HashPolicy):
        """
        Initialize verifier with the policy the tree was built with.

        Args:
            policy: Hash policy for leaves and branches
        """
        self.policy = policy

    def verify(self, leaf: Data, proof: ProofLike, expected_root: bytes) -> bool:
        """
        Verify a proof and log the outcome.

        Returns:
            True if the proof is valid, False otherwise

        Raises:
            MalformedProofError: If the proof is structurally invalid
        """
        start_time = time.time()
        path = tuple(_path_of(proof))

        result = verify_proof(leaf, path, self.policy, expected_root)

        log_merkle_verification(
            logger,
            success=result,
            path_length=len(path),
            duration_ms=(time.time() - start_time) * 1000,
            failure_reason=None if result else "root_mismatch",
            policy=self.policy.name,
        )
        return result

    def verify_document(
        self,
        leaf: Data,
        document: Mapping[str, Any],
        expected_root_hex: str,
    ) -> bool:
        """
        Verify a proof given in its JSON shape against a hex root.

        Args:
            leaf: Original leaf value
            document: {"path": [{"hash": <hex>, "position": 0 | 1}, ...], ...}
            expected_root_hex: Root as hex string

        Returns:
            True if the proof is valid, False otherwise

        Raises:
            MalformedProofError: If the document or the root is malformed
        """
        try:
            expected_root = bytes.fromhex(expected_root_hex)
        except (TypeError, ValueError) as e:
            raise MalformedProofError(f"Expected root is not valid hex: {e}") from e

        proof = proof_from_dict(document)
        return self.verify(leaf, proof, expected_root)
