"""
Data models for the Polymer SDK.
"""
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import InvalidArgumentError


class ProofKind(str, Enum):
    """Which family of JSON-RPC methods a proof job belongs to."""
    LOG = "log"
    RECEIPT = "receipt"

    @property
    def request_method(self) -> str:
        return f"{self.value}_requestProof"

    @property
    def query_method(self) -> str:
        return f"{self.value}_queryProof"


class JobState(str, Enum):
    """Terminal alphabet of a proof job as seen by the client."""
    PENDING = "pending"
    COMPLETE = "complete"
    FAILED = "failed"


def _check_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer, got {type(value).__name__}")
    if value < minimum:
        qualifier = "positive" if minimum > 0 else "non-negative"
        raise InvalidArgumentError(f"{name} must be {qualifier}, got {value}")


@dataclass(frozen=True)
class ProofRequestParams:
    """
    Parameters of a single proof request.

    A request with a target chain, or without a log index, is a receipt-level
    request. Otherwise it is a log-level request.
    """
    source_chain_id: int
    block_number: int
    transaction_index: int
    log_index: Optional[int] = None
    target_chain_id: Optional[int] = None

    def __post_init__(self):
        _check_int("source_chain_id", self.source_chain_id, 1)
        _check_int("block_number", self.block_number, 0)
        _check_int("transaction_index", self.transaction_index, 0)
        if self.log_index is not None:
            _check_int("log_index", self.log_index, 0)
        if self.target_chain_id is not None:
            _check_int("target_chain_id", self.target_chain_id, 1)
            if self.target_chain_id == self.source_chain_id:
                raise InvalidArgumentError("target chain must differ from source chain")

    @property
    def kind(self) -> ProofKind:
        if self.target_chain_id is not None or self.log_index is None:
            return ProofKind.RECEIPT
        return ProofKind.LOG

    def to_rpc_params(self) -> List[int]:
        """Positional JSON-RPC params in wire order."""
        params = [self.source_chain_id]
        if self.target_chain_id is not None:
            params.append(self.target_chain_id)
        params.extend([self.block_number, self.transaction_index])
        if self.log_index is not None:
            params.append(self.log_index)
        return params


@dataclass(frozen=True)
class ProofJob:
    """Handle for a submitted proof job. The job id is opaque."""
    job_id: str
    kind: ProofKind = ProofKind.LOG
    receipt: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        if not self.job_id:
            raise InvalidArgumentError("Job ID is required")

    @classmethod
    def coerce(cls, job: Union["ProofJob", str], kind: Optional[ProofKind] = None) -> "ProofJob":
        """Normalize a ProofJob or bare job id into a ProofJob with a known kind."""
        if isinstance(job, cls):
            if kind is not None and kind is not job.kind:
                return cls(job.job_id, kind, job.receipt)
            return job
        if not job:
            raise InvalidArgumentError("Job ID is required")
        return cls(str(job), kind or ProofKind.LOG)

    def __str__(self) -> str:
        return self.job_id


class JobStatus(BaseModel):
    """Decoded `result` of a status query."""
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    status: Any = None
    proof: Optional[Any] = None
    # Free-form: some service versions send an error object instead of a string
    failure_reason: Any = Field(None, alias="failureReason")

    @property
    def state(self) -> JobState:
        if self.status == "complete":
            return JobState.COMPLETE
        if self.status == "error":
            return JobState.FAILED
        return JobState.PENDING

    @property
    def is_complete(self) -> bool:
        return self.state is JobState.COMPLETE

    @property
    def is_failed(self) -> bool:
        return self.state is JobState.FAILED

    @property
    def reason(self) -> str:
        if self.failure_reason is None or self.failure_reason == "":
            return "Unknown error"
        if isinstance(self.failure_reason, str):
            return self.failure_reason
        return json.dumps(self.failure_reason, default=str)

    @property
    def metadata(self) -> Dict[str, Any]:
        """Fields the service returned beyond status, proof and failureReason."""
        return dict(self.model_extra or {})
