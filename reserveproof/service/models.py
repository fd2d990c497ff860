"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Pydantic models for the proof service responses.

Field aliases keep the published camelCase JSON shape.
"""

from typing import List

from pydantic import BaseModel, Field

from reserveproof.merkle.tree import MerkleProof


class ProofPathNodeModel(BaseModel):
    """One sibling of an inclusion proof."""
    hash: str = Field(..., description="Sibling digest (lowercase hex)")
    position: int = Field(..., ge=0, le=1, description="0 = sibling on the left, 1 = on the right")


class MerkleRootResponse(BaseModel):
    """Response model for the published root."""
    merkle_root: str = Field(..., alias="merkleRoot", description="Merkle root (lowercase hex)")


class MerkleProofResponse(BaseModel):
    """Response model for an account inclusion proof."""
    user_balance: int = Field(..., alias="userBalance", description="Balance committed for the account")
    path: List[ProofPathNodeModel] = Field(default_factory=list, description="Sibling path, leaf level first")

    @classmethod
    def from_proof(cls, proof: MerkleProof) -> "MerkleProofResponse":
        return cls(
            userBalance=proof.payload,
            path=[ProofPathNodeModel(**node.to_dict()) for node in proof.path],
        )


class ErrorResponse(BaseModel):
    """Response model for errors."""
    error: str = Field(..., description="Error message")


class HealthCheckResponse(BaseModel):
    """Response model for health check."""
    status: str = Field(..., description="Health status (healthy/unhealthy)")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    leaf_count: int = Field(..., description="Number of committed accounts")
    merkle_root: str = Field(..., description="Published Merkle root (lowercase hex)")
