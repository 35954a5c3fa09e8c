"""
Polymer SDK - request and poll cross-chain proofs from the Polymer proof service.
"""
from .version import __version__
from .config import ClientConfig, DEFAULT_API_URL
from .client import ProofClient
from .aio import AsyncProofClient
from .models import JobState, JobStatus, ProofJob, ProofKind, ProofRequestParams
from .proof import AsyncProofReceipt, ProofReceipt, with_async_proof, with_proof
from .receipt import build_request_params, event_topic, find_log_index, resolve_chain_id
from .log import enable_debug_logging
from .exceptions import (
    PolymerError, InvalidArgumentError, TransportError, RemoteError,
    EventNotFoundError, ChainIdUnavailableError, ProofFailedError,
    ProofTimeoutError, ProofCancelledError
)

__all__ = [
    "__version__",
    "ClientConfig",
    "DEFAULT_API_URL",
    "ProofClient",
    "AsyncProofClient",
    "JobState",
    "JobStatus",
    "ProofJob",
    "ProofKind",
    "ProofRequestParams",
    "ProofReceipt",
    "AsyncProofReceipt",
    "with_proof",
    "with_async_proof",
    "build_request_params",
    "event_topic",
    "find_log_index",
    "resolve_chain_id",
    "enable_debug_logging",
    "PolymerError",
    "InvalidArgumentError",
    "TransportError",
    "RemoteError",
    "EventNotFoundError",
    "ChainIdUnavailableError",
    "ProofFailedError",
    "ProofTimeoutError",
    "ProofCancelledError",
]
