"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
ReserveProof, a product of Garudex Labs

HTTP service publishing the reserve root and per-account inclusion proofs.

Provides:
- GET /merkle-root: the committed root
- GET /merkle-proof/{user_id}: balance and sibling path for one account
- GET /health and GET /stats for operators
"""

import time
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from reserveproof._version import __version__
from reserveproof.config.settings import (
    ReserveProofConfig,
    load_config,
    parse_listen_address,
)
from reserveproof.exceptions import (
    AccountNotFoundError,
    InvalidAccountIdError,
)
from reserveproof.leaves import parse_account_id
from reserveproof.logging_config import (
    clear_correlation_id,
    get_logger,
    log_api_request,
    set_correlation_id,
)
from reserveproof.service.models import (
    ErrorResponse,
    HealthCheckResponse,
    MerkleProofResponse,
    MerkleRootResponse,
)
from reserveproof.service.snapshot import ReserveSnapshot

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"

INVALID_USER_ID_MESSAGE = "User ID must be a number."
USER_NOT_FOUND_MESSAGE = "User not found."
PROOF_FAILED_MESSAGE = "Could not generate proof."


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
    )


class ReserveProofService:
    """
    Standalone HTTP service for proof of reserves.

    The snapshot is built before the service starts and is never mutated,
    so every request sees the same root.
    """

    def __init__(
        self,
        snapshot: ReserveSnapshot,
        listen_address: str = "0.0.0.0:3000",
        service_name: str = "reserveproof-api",
    ):
        """
        Initialize the proof service.

        Args:
            snapshot: Precomputed account commitment to serve
            listen_address: host:port for start()
            service_name: Name reported by /health
        """
        self.snapshot = snapshot
        self.listen_address = listen_address
        self.service_name = service_name

        # Create FastAPI app
        self.app = FastAPI(
            title="ReserveProof API",
            description="Merkle root and inclusion proofs for proof of reserves",
            version=__version__,
        )

        self._register_routes()

        # Statistics
        self._request_count = 0
        self._root_count = 0
        self._proof_count = 0
        self._not_found_count = 0
        self._bad_request_count = 0
        self._error_count = 0

        logger.info(
            f"Initialized ReserveProofService with {snapshot.leaf_count} accounts, "
            f"root {snapshot.root_hex}"
        )

    @classmethod
    def from_config(cls, config: ReserveProofConfig) -> "ReserveProofService":
        """Build the snapshot from configuration and wrap it in a service."""
        return cls(
            ReserveSnapshot.from_config(config),
            listen_address=config.server.listen_address,
            service_name=config.server.service_name,
        )

    def _register_routes(self):
        """Register FastAPI routes."""

        @self.app.middleware("http")
        async def correlation_and_access_log(request: Request, call_next):
            correlation_id = set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
            start_time = time.time()
            self._request_count += 1
            try:
                response = await call_next(request)
                response.headers[CORRELATION_ID_HEADER] = correlation_id
                log_api_request(
                    logger,
                    method=request.method,
                    path=request.url.path,
                    status_code=response.status_code,
                    duration_ms=(time.time() - start_time) * 1000,
                )
                return response
            finally:
                clear_correlation_id()

        @self.app.get("/health", response_model=HealthCheckResponse)
        async def health_check():
            """Liveness probe; the snapshot is in memory so there are no dependencies."""
            return HealthCheckResponse(
                status="healthy",
                service=self.service_name,
                version=__version__,
                leaf_count=self.snapshot.leaf_count,
                merkle_root=self.snapshot.root_hex,
            )

        @self.app.get("/stats")
        async def get_stats():
            """
            Get service statistics.

            Returns request counts since startup.
            """
            return {
                "requests_total": self._request_count,
                "root_requests": self._root_count,
                "proofs_served": self._proof_count,
                "not_found": self._not_found_count,
                "bad_requests": self._bad_request_count,
                "errors_total": self._error_count,
                "leaf_count": self.snapshot.leaf_count,
            }

        @self.app.get("/merkle-root", response_model=MerkleRootResponse)
        async def merkle_root():
            """Return the published Merkle root as lowercase hex."""
            self._root_count += 1
            return MerkleRootResponse(merkleRoot=self.snapshot.root_hex)

        @self.app.get(
            "/merkle-proof/{user_id}",
            response_model=MerkleProofResponse,
            responses={
                400: {"model": ErrorResponse},
                404: {"model": ErrorResponse},
                500: {"model": ErrorResponse},
            },
        )
        async def merkle_proof(user_id: str):
            """
            Return the balance and inclusion proof for one account.

            Returns:
            - 200 OK: userBalance and path
            - 400 Bad Request: user_id is not a decimal integer
            - 404 Not Found: no account with this id
            - 500 Internal Server Error: proof generation failed
            """
            try:
                account_id = parse_account_id(user_id)
            except InvalidAccountIdError as e:
                self._bad_request_count += 1
                logger.info(f"Rejected proof request: {e}")
                return _error(status.HTTP_400_BAD_REQUEST, INVALID_USER_ID_MESSAGE)

            try:
                proof = self.snapshot.proof_for(account_id)
            except AccountNotFoundError:
                self._not_found_count += 1
                return _error(status.HTTP_404_NOT_FOUND, USER_NOT_FOUND_MESSAGE)
            except Exception as e:
                self._error_count += 1
                logger.error(
                    f"Proof generation failed for account {account_id}: {e}",
                    exc_info=True,
                )
                return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, PROOF_FAILED_MESSAGE)

            self._proof_count += 1
            return MerkleProofResponse.from_proof(proof)

    async def start(self):
        """
        Start the proof service.

        Starts the FastAPI app on the configured listen address.
        """
        import uvicorn

        host, port = parse_listen_address(self.listen_address)

        logger.info(
            f"Starting ReserveProof API on {host}:{port} serving root "
            f"{self.snapshot.root_hex}"
        )

        config = uvicorn.Config(
            app=self.app,
            host=host,
            port=port,
            log_level="info",
        )

        server = uvicorn.Server(config)
        await server.serve()


def create_app(config: Optional[ReserveProofConfig] = None) -> FastAPI:
    """
    Application factory.

    Usable as `uvicorn reserveproof.service.server:create_app --factory`;
    without an explicit config it loads the default configuration file.
    """
    if config is None:
        config = load_config()
    return ReserveProofService.from_config(config).app
