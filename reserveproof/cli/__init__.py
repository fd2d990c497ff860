"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

Command-line interface for ReserveProof.
"""
