"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Exception hierarchy for ReserveProof.

All custom exceptions inherit from ReserveProofError base class.
"""


class ReserveProofError(Exception):
    """Base exception for all ReserveProof errors."""
    pass


# Merkle Errors
class MerkleError(ReserveProofError):
    """Base exception for Merkle tree and proof errors."""
    pass


class MalformedProofError(MerkleError):
    """
    Raised when a proof is structurally invalid.

    Covers sibling digests or roots of the wrong length, unknown sibling
    positions and proof documents that cannot be decoded. A well-formed proof
    that simply does not verify never raises this.
    """
    pass


# Leaf Errors
class LeafError(ReserveProofError):
    """Base exception for leaf encoding errors."""
    pass


class LeafParseError(LeafError):
    """Raised when a leaf does not match the "(id,value)" encoding."""
    pass


# Account Errors
class AccountError(ReserveProofError):
    """Base exception for account-related errors."""
    pass


class InvalidAccountIdError(AccountError):
    """Raised when an account identifier is not a decimal integer."""
    pass


class AccountNotFoundError(AccountError):
    """Raised when an account ID is not present in the snapshot."""
    pass


class DuplicateAccountError(AccountError):
    """Raised when two account records share the same ID."""
    pass


# Proof Errors
class ProofGenerationError(ReserveProofError):
    """Raised when no proof can be produced for a known account."""
    pass


# Configuration Errors
class ConfigurationError(ReserveProofError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when configuration is invalid or malformed."""
    pass
