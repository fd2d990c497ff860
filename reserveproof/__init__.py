"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

ReserveProof - Merkle commitments and inclusion proofs for proof of reserves

ReserveProof publishes a single Merkle root committing to every account
balance and serves compact inclusion proofs that let each account holder
check their balance is part of that commitment.
"""

from reserveproof._version import __version__

__all__ = ["__version__"]
