"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Merkle commitments for proof of reserves.

This package provides domain separated hashing, Merkle tree construction,
root calculation, inclusion proof generation and proof verification. It works
on ordered leaf sequences only and knows nothing about accounts or HTTP.
"""

from reserveproof.merkle.hashing import (
    BITCOIN_TRANSACTION_TAG,
    DIGEST_SIZE,
    PROOF_OF_RESERVE_BRANCH_TAG,
    PROOF_OF_RESERVE_LEAF_TAG,
    HashPolicy,
    classic_policy,
    double_sha256,
    proof_of_reserve_policy,
    tagged_hash,
    tagged_policy,
)
from reserveproof.merkle.tree import (
    MerkleProof,
    MerkleTree,
    Position,
    ProofPathNode,
    build_tree,
    calculate_root,
)
from reserveproof.merkle.proof import (
    find_leaf_index,
    generate_proof,
    proof_from_dict,
    proof_to_dict,
)
from reserveproof.merkle.verifier import MerkleVerifier, verify_proof

__all__ = [
    "BITCOIN_TRANSACTION_TAG",
    "DIGEST_SIZE",
    "PROOF_OF_RESERVE_BRANCH_TAG",
    "PROOF_OF_RESERVE_LEAF_TAG",
    "HashPolicy",
    "classic_policy",
    "double_sha256",
    "proof_of_reserve_policy",
    "tagged_hash",
    "tagged_policy",
    "MerkleProof",
    "MerkleTree",
    "Position",
    "ProofPathNode",
    "build_tree",
    "calculate_root",
    "find_leaf_index",
    "generate_proof",
    "proof_from_dict",
    "proof_to_dict",
    "MerkleVerifier",
    "verify_proof",
]
