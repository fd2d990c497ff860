"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

HTTP service for proof of reserves.
"""

from reserveproof.service.server import ReserveProofService, create_app
from reserveproof.service.snapshot import ReserveSnapshot

__all__ = [
    "ReserveProofService",
    "ReserveSnapshot",
    "create_app",
]
