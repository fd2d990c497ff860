"""
Unit tests for Merkle proof verification.

Tests cover:
- Valid proofs for every leaf
- Tampered siblings, flipped positions, swapped entries, truncated and extended paths
- Structural errors (wrong digest lengths, unknown positions)
- The logging MerkleVerifier wrapper and JSON documents
"""

from itertools import combinations

import pytest
from hypothesis import given, strategies as st

from reserveproof.exceptions import MalformedProofError
from reserveproof.logging_config import setup_logging
from reserveproof.merkle.hashing import classic_policy, proof_of_reserve_policy
from reserveproof.merkle.proof import generate_proof
from reserveproof.merkle.tree import (
    MerkleProof,
    Position,
    ProofPathNode,
    build_tree,
    calculate_root,
)
from reserveproof.merkle.verifier import MerkleVerifier, verify_proof


def _flip(position: Position) -> Position:
    return Position.LEFT if position == Position.RIGHT else Position.RIGHT


class TestVerifyProof:
    """Test verify_proof."""

    def test_valid_proof(self, demo_leaves, demo_root_hex):
        """Test the demo proof for "(3,3333)" verifies."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, policy)

        assert verify_proof("(3,3333)", proof, policy, bytes.fromhex(demo_root_hex))

    def test_accepts_bare_path(self, demo_leaves):
        """Test a plain sequence of nodes is accepted in place of a MerkleProof."""
        policy = proof_of_reserve_policy()
        tree = build_tree(demo_leaves, policy)

        assert verify_proof("(5,5555)", list(tree.proof_path(4)), policy, tree.root)

    def test_wrong_leaf(self, demo_leaves):
        """Test a proof does not verify a different leaf."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, policy)
        root = calculate_root(demo_leaves, policy)

        assert not verify_proof("(3,3334)", proof, policy, root)

    def test_wrong_root(self, demo_leaves):
        """Test a proof does not verify against another root."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, policy)

        assert not verify_proof("(3,3333)", proof, policy, b"\x00" * 32)

    def test_wrong_policy(self, demo_leaves):
        """Test a proof built under one policy fails under the other."""
        tagged = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, tagged)
        root = calculate_root(demo_leaves, tagged)

        assert not verify_proof("(3,3333)", proof, classic_policy(), root)

    def test_tampered_sibling(self, demo_leaves):
        """Test flipping one bit of any sibling breaks the proof."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, policy)
        root = calculate_root(demo_leaves, policy)

        for level, node in enumerate(proof.path):
            tampered = bytes([node.sibling[0] ^ 0x01]) + node.sibling[1:]
            path = list(proof.path)
            path[level] = ProofPathNode(sibling=tampered, position=node.position)
            assert not verify_proof("(3,3333)", path, policy, root)

    def test_flipped_position(self, demo_leaves):
        """Test swapping the side of any sibling breaks the proof."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, policy)
        root = calculate_root(demo_leaves, policy)

        for level, node in enumerate(proof.path):
            path = list(proof.path)
            path[level] = ProofPathNode(sibling=node.sibling, position=_flip(node.position))
            assert not verify_proof("(3,3333)", path, policy, root)

    @pytest.mark.parametrize("i, j", list(combinations(range(3), 2)))
    def test_swapped_path_entries(self, demo_leaves, i, j):
        """Test exchanging any two path entries breaks the proof."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, policy)
        root = calculate_root(demo_leaves, policy)
        assert len(proof.path) == 3

        path = list(proof.path)
        path[i], path[j] = path[j], path[i]

        assert not verify_proof("(3,3333)", path, policy, root)

    def test_reordered_siblings_keep_positions(self, demo_leaves):
        """Test reordering only the sibling digests breaks the proof."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, policy)
        root = calculate_root(demo_leaves, policy)

        siblings = [node.sibling for node in reversed(proof.path)]
        path = [
            ProofPathNode(sibling=sibling, position=node.position)
            for sibling, node in zip(siblings, proof.path)
        ]

        assert not verify_proof("(3,3333)", path, policy, root)

    def test_truncated_path(self, demo_leaves):
        """Test dropping the last sibling breaks the proof."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, policy)
        root = calculate_root(demo_leaves, policy)

        assert not verify_proof("(3,3333)", proof.path[:-1], policy, root)

    def test_extended_path(self, demo_leaves):
        """Test appending an extra sibling breaks the proof."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(3,3333)", demo_leaves, policy)
        root = calculate_root(demo_leaves, policy)
        extra = ProofPathNode(sibling=root, position=Position.RIGHT)

        assert not verify_proof("(3,3333)", proof.path + (extra,), policy, root)

    def test_empty_path_checks_leaf_digest(self):
        """Test an empty path verifies only when the root is the leaf digest."""
        policy = proof_of_reserve_policy()
        leaf_root = policy.leaf_hash("(1,1111)")

        assert verify_proof("(1,1111)", MerkleProof(), policy, leaf_root)
        assert not verify_proof("(1,1111)", MerkleProof(), policy, b"\x00" * 32)

    def test_duplicated_tail_proof(self):
        """Test the last leaf of an odd set verifies with its self-sibling."""
        policy = proof_of_reserve_policy()
        leaves = ["(1,1111)", "(2,2222)", "(3,3333)"]
        proof = generate_proof("(3,3333)", leaves, policy)

        assert verify_proof("(3,3333)", proof, policy, calculate_root(leaves, policy))

    @pytest.mark.parametrize("root", [b"", b"\x00" * 31, b"\x00" * 33, "00" * 32])
    def test_malformed_root(self, root):
        """Test an expected root that is not 32 bytes raises."""
        with pytest.raises(MalformedProofError):
            verify_proof("x", MerkleProof(), proof_of_reserve_policy(), root)

    def test_malformed_sibling(self):
        """Test a short sibling digest raises."""
        path = [ProofPathNode(sibling=b"\x00" * 16, position=Position.LEFT)]
        with pytest.raises(MalformedProofError):
            verify_proof("x", path, proof_of_reserve_policy(), b"\x00" * 32)

    def test_unknown_position(self):
        """Test a position outside LEFT/RIGHT raises."""
        path = [ProofPathNode(sibling=b"\x00" * 32, position=2)]
        with pytest.raises(MalformedProofError):
            verify_proof("x", path, proof_of_reserve_policy(), b"\x00" * 32)

    @given(
        leaves=st.lists(st.text(max_size=12), min_size=1, max_size=33),
        data=st.data(),
    )
    def test_generated_proofs_verify(self, leaves, data):
        """Property: a proof for any member leaf verifies against the root."""
        policy = proof_of_reserve_policy()
        target = data.draw(st.sampled_from(leaves))
        proof = generate_proof(target, leaves, policy)

        assert verify_proof(target, proof, policy, calculate_root(leaves, policy))


class TestMerkleVerifier:
    """Test the logging verifier wrapper."""

    def test_verify_logs_success(self, demo_leaves, temp_dir):
        """Test a successful verification is logged."""
        log_file = temp_dir / "verify.log"
        setup_logging(level="INFO", log_file=log_file, json_format=True)

        policy = proof_of_reserve_policy()
        verifier = MerkleVerifier(policy)
        proof = generate_proof("(2,2222)", demo_leaves, policy)

        assert verifier.verify("(2,2222)", proof, calculate_root(demo_leaves, policy))

        # Module loggers keep the renderer they were first used with
        log_content = log_file.read_text()
        assert "merkle_verification" in log_content
        assert "merkle_verification_failed" not in log_content

    def test_verify_logs_failure(self, demo_leaves, temp_dir):
        """Test a failed verification is logged as a warning."""
        log_file = temp_dir / "verify.log"
        setup_logging(level="INFO", log_file=log_file, json_format=True)

        policy = proof_of_reserve_policy()
        verifier = MerkleVerifier(policy)
        proof = generate_proof("(2,2222)", demo_leaves, policy)

        assert not verifier.verify("(2,2222)", proof, b"\x00" * 32)

        log_content = log_file.read_text()
        assert "merkle_verification_failed" in log_content
        assert "root_mismatch" in log_content

    def test_verify_accepts_one_shot_iterable(self, demo_leaves):
        """Test a path given as an iterator is read once and still verifies."""
        policy = proof_of_reserve_policy()
        proof = generate_proof("(4,4444)", demo_leaves, policy)
        root = calculate_root(demo_leaves, policy)

        assert MerkleVerifier(policy).verify("(4,4444)", iter(proof.path), root)

    def test_verify_document(self, demo_leaves, demo_root_hex):
        """Test verifying a proof in its JSON shape."""
        policy = proof_of_reserve_policy()
        document = generate_proof("(8,8888)", demo_leaves, policy).to_dict()

        verifier = MerkleVerifier(policy)
        assert verifier.verify_document("(8,8888)", document, demo_root_hex)
        assert not verifier.verify_document("(7,7777)", document, demo_root_hex)

    @pytest.mark.parametrize("root_hex", ["zz", "00" * 31, None])
    def test_verify_document_bad_root(self, root_hex):
        """Test a malformed hex root raises."""
        verifier = MerkleVerifier(proof_of_reserve_policy())
        with pytest.raises(MalformedProofError):
            verifier.verify_document("x", {"path": []}, root_hex)
