"""
Unit tests for exception hierarchy.
"""

import pytest
from reserveproof.exceptions import (
    AccountError,
    AccountNotFoundError,
    ConfigurationError,
    DuplicateAccountError,
    InvalidAccountIdError,
    InvalidConfigurationError,
    LeafError,
    LeafParseError,
    MalformedProofError,
    MerkleError,
    ProofGenerationError,
    ReserveProofError,
)


class TestExceptionHierarchy:
    """Test that exception hierarchy is correctly defined."""

    def test_base_exception(self):
        """Test that ReserveProofError is the base exception."""
        error = ReserveProofError("test error")
        assert isinstance(error, Exception)
        assert str(error) == "test error"

    def test_merkle_errors_inherit_from_base(self):
        """Test that Merkle errors inherit from ReserveProofError."""
        assert issubclass(MerkleError, ReserveProofError)
        assert issubclass(MalformedProofError, MerkleError)

    def test_leaf_errors_inherit_from_base(self):
        """Test that leaf errors inherit from ReserveProofError."""
        assert issubclass(LeafError, ReserveProofError)
        assert issubclass(LeafParseError, LeafError)

    def test_account_errors_inherit_from_base(self):
        """Test that account errors inherit from ReserveProofError."""
        assert issubclass(AccountError, ReserveProofError)
        assert issubclass(InvalidAccountIdError, AccountError)
        assert issubclass(AccountNotFoundError, AccountError)
        assert issubclass(DuplicateAccountError, AccountError)

    def test_proof_generation_error_inherits_from_base(self):
        """Test that ProofGenerationError inherits from ReserveProofError."""
        assert issubclass(ProofGenerationError, ReserveProofError)

    def test_configuration_errors_inherit_from_base(self):
        """Test that configuration errors inherit from ReserveProofError."""
        assert issubclass(ConfigurationError, ReserveProofError)
        assert issubclass(InvalidConfigurationError, ConfigurationError)

    def test_catch_by_base(self):
        """Test that a specific error can be caught through the base class."""
        with pytest.raises(ReserveProofError, match="bad digest"):
            raise MalformedProofError("bad digest")
