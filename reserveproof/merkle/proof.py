"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Inclusion proof generation and proof document decoding.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from reserveproof.exceptions import MalformedProofError
from reserveproof.logging_config import get_logger, log_proof_generation
from reserveproof.merkle.hashing import DIGEST_SIZE, Data, HashPolicy, to_bytes
from reserveproof.merkle.tree import MerkleProof, Position, ProofPathNode, build_tree

logger = get_logger(__name__)

PayloadExtractor = Callable[[Data], Any]


def find_leaf_index(target: Data, leaves: Sequence[Data]) -> Optional[int]:
    """
    Locate the first leaf equal to `target`.

    Text and bytes compare after UTF-8 encoding, matching how leaves are hashed.

    Returns:
        Index of the first match, or None if absent
    """
    wanted = to_bytes(target)
    for index, leaf in enumerate(leaves):
        if to_bytes(leaf) == wanted:
            return index
    return None


def generate_proof(
    target: Data,
    leaves: Sequence[Data],
    policy: HashPolicy,
    payload_extractor: Optional[PayloadExtractor] = None,
) -> Optional[MerkleProof]:
    """
    Generate an inclusion proof for `target`.

    The tree is rebuilt from `leaves` with the same policy the root is
    calculated with, so the proof always verifies against
    calculate_root(leaves, policy).

    Args:
        target: Leaf value to prove
        leaves: Full ordered leaf sequence
        policy: Hash policy for leaves and branches
        payload_extractor: Optional callable deriving the payload from the
            target leaf (e.g., its balance). Its exceptions propagate.

    Returns:
        MerkleProof, or None when `target` is not one of `leaves`
    """
    index = find_leaf_index(target, leaves)
    if index is None:
        log_proof_generation(logger, found=False, leaf_count=len(leaves))
        return None

    tree = build_tree(leaves, policy)
    path = tree.proof_path(index)

    payload = payload_extractor(target) if payload_extractor is not None else None

    log_proof_generation(logger, found=True, path_length=len(path), leaf_index=index)

    return MerkleProof(path=path, payload=payload)


def _decode_digest(value: Any, what: str) -> bytes:
    if not isinstance(value, str):
        raise MalformedProofError(f"{what} must be a hex string, got {type(value).__name__}")
    try:
        digest = bytes.fromhex(value)
    except ValueError as e:
        raise MalformedProofError(f"{what} is not valid hex: {e}") from e
    if len(digest) != DIGEST_SIZE:
        raise MalformedProofError(
            f"{what} must be {DIGEST_SIZE} bytes, got {len(digest)}"
        )
    return digest


def proof_from_dict(document: Mapping[str, Any], payload_key: str = "payload") -> MerkleProof:
    """
    Decode a proof from its JSON shape.

    Accepts {"path": [{"hash": <hex>, "position": 0 | 1}, ...]} with an
    optional payload under `payload_key`.

    Raises:
        MalformedProofError: If the document does not have that shape
    """
    if not isinstance(document, Mapping):
        raise MalformedProofError("Proof document must be a JSON object")

    raw_path = document.get("path")
    if not isinstance(raw_path, list):
        raise MalformedProofError("Proof document must contain a 'path' list")

    path = []
    for i, entry in enumerate(raw_path):
        if not isinstance(entry, Mapping):
            raise MalformedProofError(f"Path entry {i} must be an object")
        sibling = _decode_digest(entry.get("hash"), f"Path entry {i} hash")
        try:
            position = Position(entry.get("position"))
        except ValueError as e:
            raise MalformedProofError(f"Path entry {i} has invalid position: {e}") from e
        path.append(ProofPathNode(sibling=sibling, position=position))

    return MerkleProof(path=tuple(path), payload=document.get(payload_key))


def proof_to_dict(proof: MerkleProof, payload_key: str = "payload") -> Dict[str, Any]:
    """Encode a proof into its JSON shape (see MerkleProof.to_dict)."""
    return proof.to_dict(payload_key=payload_key)
