"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Hash primitives and hash policies for Merkle commitments.

This module provides:
- tagged_hash: BIP340-style domain separated SHA-256
- double_sha256: plain Bitcoin-style double SHA-256 (no domain tag)
- HashPolicy: the leaf-hash / branch-hash pair a tree is built with
- tagged_policy / classic_policy: the two supported policy sets

Hashing Rules:
1. tagged_hash(tag, data) = sha256(sha256(tag) || sha256(tag) || data)
2. double_sha256(data) = sha256(sha256(data))
3. Text is always encoded as UTF-8 before hashing
4. Branch inputs are always left || right, never swapped
"""

import hashlib
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Union

# SHA-256 output size; every digest in a tree has this length
DIGEST_SIZE = 32

# Domain tags used by the proof-of-reserve deployment
PROOF_OF_RESERVE_LEAF_TAG = "ProofOfReserve_Leaf"
PROOF_OF_RESERVE_BRANCH_TAG = "ProofOfReserve_Branch"

# Leaf tag of the classic (double SHA-256 branch) policy
BITCOIN_TRANSACTION_TAG = "Bitcoin_Transaction"

Data = Union[str, bytes]
LeafHashFn = Callable[[Data], bytes]
BranchHashFn = Callable[[bytes, bytes], bytes]


def to_bytes(data: Data) -> bytes:
    """
    Normalize hash input to bytes.

    Args:
        data: Text (encoded as UTF-8) or raw bytes

    Returns:
        Raw bytes
    """
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def sha256(data: Data) -> bytes:
    """
    Compute SHA-256 of raw bytes or UTF-8 text.

    Example:
        >>> sha256(b"hello").hex()
        '2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824'
    """
    return hashlib.sha256(to_bytes(data)).digest()


@lru_cache(maxsize=64)
def _tag_prefix(tag: Data) -> bytes:
    """Return sha256(tag) || sha256(tag), the 64-byte block opening a tagged hash."""
    tag_hash = sha256(tag)
    return tag_hash + tag_hash


def tagged_hash(tag: Data, data: Data) -> bytes:
    """
    Compute a domain separated hash.

    The hash is sha256(sha256(tag) || sha256(tag) || data). The doubled tag
    hash fills the whole first SHA-256 block, so digests computed under
    different tags live in disjoint namespaces.

    Args:
        tag: Domain tag (e.g., "ProofOfReserve_Leaf")
        data: Input to hash

    Returns:
        32-byte digest
    """
    hasher = hashlib.sha256(_tag_prefix(tag))
    hasher.update(to_bytes(data))
    return hasher.digest()


def double_sha256(data: Data) -> bytes:
    """
    Compute sha256(sha256(data)), the legacy Bitcoin branch hash.

    Args:
        data: Input to hash

    Returns:
        32-byte digest
    """
    return hashlib.sha256(hashlib.sha256(to_bytes(data)).digest()).digest()


@dataclass(frozen=True)
class HashPolicy:
    """
    Pair of hash functions a Merkle tree is built with.

    Attributes:
        name: Human readable policy name (used in logs)
        leaf_hash: Maps a leaf value to its level-0 digest
        branch_hash: Maps (left, right) child digests to their parent digest
    """
    name: str
    leaf_hash: LeafHashFn
    branch_hash: BranchHashFn


def tagged_policy(leaf_tag: str, branch_tag: str) -> HashPolicy:
    """
    Build a policy that domain-separates both leaves and branches.

    Args:
        leaf_tag: Tag applied to every leaf
        branch_tag: Tag applied to every left || right concatenation

    Returns:
        HashPolicy using tagged_hash throughout
    """
    def leaf_hash(leaf: Data) -> bytes:
        return tagged_hash(leaf_tag, leaf)

    def branch_hash(left: bytes, right: bytes) -> bytes:
        return tagged_hash(branch_tag, left + right)

    return HashPolicy(
        name=f"tagged({leaf_tag},{branch_tag})",
        leaf_hash=leaf_hash,
        branch_hash=branch_hash,
    )


def classic_policy(leaf_tag: str = BITCOIN_TRANSACTION_TAG) -> HashPolicy:
    """
    Build a policy with tagged leaves and double SHA-256 branches.

    Leaves keep a domain tag so a leaf value can never be reinterpreted as a
    pre-hashed pair of children.

    Args:
        leaf_tag: Tag applied to every leaf (default: "Bitcoin_Transaction")

    Returns:
        HashPolicy with classic branch hashing
    """
    def leaf_hash(leaf: Data) -> bytes:
        return tagged_hash(leaf_tag, leaf)

    def branch_hash(left: bytes, right: bytes) -> bytes:
        return double_sha256(left + right)

    return HashPolicy(
        name=f"classic({leaf_tag})",
        leaf_hash=leaf_hash,
        branch_hash=branch_hash,
    )


def proof_of_reserve_policy() -> HashPolicy:
    """Return the tagged policy used by the proof-of-reserve service."""
    return tagged_policy(PROOF_OF_RESERVE_LEAF_TAG, PROOF_OF_RESERVE_BRANCH_TAG)
