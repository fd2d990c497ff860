"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Merkle tree implementation for proof-of-reserve commitments.

This module implements a binary Merkle tree over an ordered leaf sequence,
parameterized by a HashPolicy. It supports:
- Tree construction from leaf values
- Root calculation (full tree or root-only)
- Sibling path extraction for any leaf
- Parallel level hashing for large trees

Tree Rules:
1. Level 0 holds policy.leaf_hash(leaf) for every leaf, in order
2. Parent = policy.branch_hash(left, right), never swapped
3. Odd level: the last node is paired with itself
4. Empty leaves: a single level holding policy.leaf_hash(b"")
5. Single leaf: root = the leaf digest
"""

import concurrent.futures
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from reserveproof.logging_config import get_logger
from reserveproof.merkle.hashing import BranchHashFn, Data, HashPolicy

logger = get_logger(__name__)

TreeLevel = Tuple[bytes, ...]

# Threshold for parallel processing (use parallel for levels at least this large)
PARALLEL_THRESHOLD = 100

# Worker count for parallel level hashing
PARALLEL_WORKERS = 4


class Position(IntEnum):
    """Side a sibling occupies relative to the node being authenticated."""
    LEFT = 0
    RIGHT = 1


@dataclass(frozen=True)
class ProofPathNode:
    """
    One step of an inclusion proof.

    Attributes:
        sibling: Digest of the sibling node at this level
        position: Whether the sibling sits to the left or right
    """
    sibling: bytes
    position: Position

    def to_dict(self) -> Dict[str, Any]:
        """Render as the wire shape {"hash": <hex>, "position": 0 | 1}."""
        return {"hash": self.sibling.hex(), "position": int(self.position)}


@dataclass(frozen=True)
class MerkleProof:
    """
    Proof that a leaf is included in a Merkle tree.

    Attributes:
        path: Sibling nodes from the leaf level up to, not including, the root
        payload: Optional caller value carried alongside the leaf (not hashed)
    """
    path: Tuple[ProofPathNode, ...] = field(default_factory=tuple)
    payload: Any = None

    def to_dict(self, payload_key: str = "payload") -> Dict[str, Any]:
        """
        Render the proof as a JSON-ready dict.

        Args:
            payload_key: Key under which the payload is emitted

        Returns:
            {payload_key: payload, "path": [{"hash": ..., "position": ...}, ...]}
        """
        return {
            payload_key: self.payload,
            "path": [node.to_dict() for node in self.path],
        }


def _pair_up(level: Sequence[bytes]) -> List[Tuple[bytes, bytes]]:
    """Pair adjacent nodes, duplicating the last one on odd levels."""
    pairs = []
    for i in range(0, len(level), 2):
        left = level[i]
        right = level[i + 1] if i + 1 < len(level) else left
        pairs.append((left, right))
    return pairs


def _next_level(
    level: Sequence[bytes],
    branch_hash: BranchHashFn,
    use_parallel: bool = False,
) -> TreeLevel:
    """
    Build the parent level of `level`.

    Pairs are enumerated in a fixed order before hashing, so the parallel path
    yields exactly the sequential result.
    """
    pairs = _pair_up(level)
    if use_parallel:
        with concurrent.futures.ThreadPoolExecutor(max_workers=PARALLEL_WORKERS) as executor:
            return tuple(executor.map(lambda p: branch_hash(p[0], p[1]), pairs))
    return tuple(branch_hash(left, right) for left, right in pairs)


def _hash_leaves(
    leaves: Sequence[Data],
    policy: HashPolicy,
    use_parallel: bool = False,
) -> TreeLevel:
    """Hash every leaf with the policy's leaf hash (level 0)."""
    if not leaves:
        return (policy.leaf_hash(b""),)
    if use_parallel:
        with concurrent.futures.ThreadPoolExecutor(max_workers=PARALLEL_WORKERS) as executor:
            return tuple(executor.map(policy.leaf_hash, leaves))
    return tuple(policy.leaf_hash(leaf) for leaf in leaves)


class MerkleTree:
    """
    Binary Merkle tree with pluggable leaf and branch hashing.

    The tree is built bottom-up when constructed and never mutated afterwards.
    It is stored as a tuple of levels where levels[0] is the leaf level and
    levels[-1] holds the single root digest.

    Example:
        >>> from reserveproof.merkle.hashing import proof_of_reserve_policy
        >>> tree = MerkleTree(["(1,1111)", "(2,2222)"], proof_of_reserve_policy())
        >>> len(tree.root)
        32
        >>> len(tree.proof_path(0))
        1
    """

    PARALLEL_THRESHOLD = PARALLEL_THRESHOLD

    def __init__(
        self,
        leaves: Sequence[Data],
        policy: HashPolicy,
        use_parallel: bool = True,
        parallel_threshold: Optional[int] = None,
    ):
        """
        Build Merkle tree from leaf data.

        Args:
            leaves: Ordered leaf values (hashed with policy.leaf_hash)
            policy: Hash policy for leaves and branches
            use_parallel: Enable parallel processing for large levels (default: True)
            parallel_threshold: Level size from which hashing runs in parallel
        """
        self.policy = policy
        self.parallel_threshold = parallel_threshold or self.PARALLEL_THRESHOLD
        self.use_parallel = use_parallel
        self.leaf_count = len(leaves)
        self._levels = self._build_tree(leaves)

        logger.debug(
            f"Built Merkle tree with {self.leaf_count} leaves "
            f"and {len(self._levels)} levels using {policy.name}"
        )

    def _parallel_for(self, size: int) -> bool:
        return self.use_parallel and size >= self.parallel_threshold

    def _build_tree(self, leaves: Sequence[Data]) -> Tuple[TreeLevel, ...]:
        """
        Build all levels bottom-up by hashing pairs.

        Returns:
            Tuple of levels, each level a tuple of digests
        """
        current_level = _hash_leaves(leaves, self.policy, self._parallel_for(len(leaves)))
        tree = [current_level]

        # Build tree level by level until we reach the root
        while len(current_level) > 1:
            current_level = _next_level(
                current_level,
                self.policy.branch_hash,
                self._parallel_for(len(current_level)),
            )
            tree.append(current_level)

        return tuple(tree)

    @property
    def levels(self) -> Tuple[TreeLevel, ...]:
        """All levels, leaf level first."""
        return self._levels

    @property
    def leaves(self) -> TreeLevel:
        """Leaf digests (level 0)."""
        return self._levels[0]

    @property
    def depth(self) -> int:
        """Number of levels above the leaf level."""
        return len(self._levels) - 1

    @property
    def root(self) -> bytes:
        """The Merkle root digest."""
        return self._levels[-1][0]

    @property
    def root_hex(self) -> str:
        """The Merkle root as lowercase hex."""
        return self.root.hex()

    def proof_path(self, leaf_index: int) -> Tuple[ProofPathNode, ...]:
        """
        Collect sibling digests from the leaf at `leaf_index` up to the root.

        If a sibling does not exist (last node of an odd level) the node's own
        digest stands in for it; the position still follows the parity of the
        node's index.

        Args:
            leaf_index: Index of the leaf (0-based)

        Returns:
            Tuple of ProofPathNode, leaf level first

        Raises:
            IndexError: If leaf_index is out of range
        """
        # An empty tree still has one level-0 digest but no leaves
        if leaf_index < 0 or leaf_index >= self.leaf_count:
            raise IndexError(f"Leaf index {leaf_index} out of range [0, {self.leaf_count})")

        path = []
        current_index = leaf_index

        for current_level in self._levels[:-1]:  # Exclude root level
            if current_index % 2 == 0:
                sibling_index = current_index + 1
                position = Position.RIGHT
            else:
                sibling_index = current_index - 1
                position = Position.LEFT

            if sibling_index < len(current_level):
                sibling = current_level[sibling_index]
            else:
                # Duplicate current node (same as build logic)
                sibling = current_level[current_index]

            path.append(ProofPathNode(sibling=sibling, position=position))
            current_index //= 2

        return tuple(path)


def build_tree(
    leaves: Sequence[Data],
    policy: HashPolicy,
    use_parallel: bool = True,
    parallel_threshold: Optional[int] = None,
) -> MerkleTree:
    """
    Build the full level-by-level hash structure for `leaves`.

    Args:
        leaves: Ordered leaf values
        policy: Hash policy for leaves and branches
        use_parallel: Enable parallel processing for large levels
        parallel_threshold: Level size from which hashing runs in parallel

    Returns:
        A freshly built, immutable MerkleTree
    """
    return MerkleTree(
        leaves,
        policy,
        use_parallel=use_parallel,
        parallel_threshold=parallel_threshold,
    )


def calculate_root(
    leaves: Sequence[Data],
    policy: HashPolicy,
    use_parallel: bool = True,
    parallel_threshold: Optional[int] = None,
) -> bytes:
    """
    Calculate the Merkle root for `leaves`.

    Only the current and the next level are held in memory; the result equals
    build_tree(leaves, policy).root.

    Args:
        leaves: Ordered leaf values
        policy: Hash policy for leaves and branches
        use_parallel: Enable parallel processing for large levels
        parallel_threshold: Level size from which hashing runs in parallel

    Returns:
        32-byte Merkle root
    """
    threshold = parallel_threshold or PARALLEL_THRESHOLD

    current_level = _hash_leaves(
        leaves, policy, use_parallel and len(leaves) >= threshold
    )
    while len(current_level) > 1:
        current_level = _next_level(
            current_level,
            policy.branch_hash,
            use_parallel and len(current_level) >= threshold,
        )

    return current_level[0]
