"""
ProofClient - blocking client for the Polymer proof service.
"""
import json
import logging
import threading
import time
from typing import Any, List, Optional, Union

import requests

from . import rpc
from .config import ClientConfig
from .exceptions import TransportError
from .log import enable_debug_logging
from .models import JobStatus, ProofJob, ProofKind, ProofRequestParams
from .polling import poll_until_complete

_CHUNK_SIZE = 8192


class ProofClient:
    """
    Client for the Polymer proof service.

    This client handles:
    1. Submitting proof requests (``log_requestProof`` / ``receipt_requestProof``)
    2. Querying the status of a proof job
    3. Polling a job until the proof is ready

    Every call is a single JSON-RPC 2.0 POST to ``config.api_url``. The client
    holds no per-job state, so one instance can serve many jobs.
    """

    def __init__(
        self,
        config: ClientConfig,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the ProofClient

        Args:
            config: Client configuration
            session: HTTP session to use (a new one is created if omitted)
            logger: Optional logger instance to use for debug logging
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        if config.debug:
            enable_debug_logging()

        self._owns_session = session is None
        self.session = session or requests.Session()

        self.logger.debug("Initialized Polymer proof client: %r", config)

    def __enter__(self) -> "ProofClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session:
            self.session.close()

    def _call(self, method: str, params: List[Any]) -> Any:
        """
        Perform one JSON-RPC round trip within ``config.timeout`` seconds.

        ``requests`` applies its timeout to the connect and to each socket read,
        so the body is streamed and the total deadline is checked per chunk.

        Raises:
            TransportError: On connection failure, timeout, non-2xx status or a non-JSON body
            RemoteError: If the response carries a JSON-RPC error
        """
        payload = rpc.build_request(method, params)
        deadline = time.monotonic() + self.config.timeout
        try:
            response = self.session.post(
                self.config.api_url,
                json=payload,
                headers=rpc.build_headers(self.config.api_key),
                timeout=self.config.timeout,
                stream=True
            )
            with response:
                if not response.ok:
                    raise TransportError(f"HTTP error! status: {response.status_code}", status_code=response.status_code)
                body = self._read_body(response, deadline)
        except requests.RequestException as e:
            raise TransportError(f"Request to proof service failed: {e}") from e

        try:
            data = json.loads(body)
        except ValueError as e:
            raise TransportError(f"Invalid JSON response from proof service: {e}", status_code=response.status_code) from e

        return rpc.unwrap_response(data)

    def _read_body(self, response: requests.Response, deadline: float) -> bytes:
        body = bytearray()
        for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
            body.extend(chunk)
            if time.monotonic() > deadline:
                raise TransportError(
                    f"Request to proof service timed out after {self.config.timeout}s",
                    status_code=response.status_code
                )
        return bytes(body)

    def submit_proof_request(self, params: ProofRequestParams) -> ProofJob:
        """
        Ask the proof service to start generating a proof.

        Args:
            params: Proof request parameters

        Returns:
            Handle of the created job

        Raises:
            TransportError: If the HTTP call fails
            RemoteError: If the service rejects the request
        """
        kind = params.kind
        rpc_params = params.to_rpc_params()
        self.logger.debug("Requesting proof via %s with params: %s", kind.request_method, rpc_params)

        try:
            job_id = rpc.parse_job_id(self._call(kind.request_method, rpc_params))
        except Exception as e:
            self.logger.error("Error requesting proof: %s", e)
            raise

        self.logger.debug("Proof job created with ID: %s", job_id)
        return ProofJob(job_id, kind)

    def query_job_status(self, job: Union[ProofJob, str], kind: Optional[ProofKind] = None) -> JobStatus:
        """
        Query the current status of a proof job.

        Args:
            job: ProofJob or bare job id
            kind: Proof kind for a bare job id (defaults to ProofKind.LOG)

        Returns:
            Decoded job status

        Raises:
            InvalidArgumentError: If the job id is empty
            TransportError: If the HTTP call fails
            RemoteError: If the service returns an error
        """
        ref = ProofJob.coerce(job, kind)
        self.logger.debug("Querying proof status for job: %s", ref.job_id)

        try:
            return rpc.parse_job_status(self._call(ref.kind.query_method, [ref.job_id]))
        except Exception as e:
            self.logger.debug("Error querying proof status: %s", e)
            raise

    def wait(
        self,
        job: Union[ProofJob, str],
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
        kind: Optional[ProofKind] = None
    ) -> JobStatus:
        """
        Poll a job until the proof is complete.

        Args:
            job: ProofJob or bare job id
            max_attempts: Override for config.max_attempts
            interval: Override for config.interval, in seconds
            cancel_event: Event that aborts polling when set
            kind: Proof kind for a bare job id

        Returns:
            The complete job status, with ``proof`` set

        Raises:
            ProofFailedError: If the service reports the job failed
            ProofTimeoutError: If the job is not complete after max_attempts queries
            ProofCancelledError: If cancel_event is set
        """
        ref = ProofJob.coerce(job, kind)
        return poll_until_complete(
            lambda: self.query_job_status(ref),
            max_attempts=self.config.max_attempts if max_attempts is None else max_attempts,
            interval=self.config.interval if interval is None else interval,
            job_id=ref.job_id,
            cancel_event=cancel_event,
            logger_instance=self.logger,
        )

    def get_proof(
        self,
        params: ProofRequestParams,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> JobStatus:
        """Submit a proof request and wait for the result."""
        job = self.submit_proof_request(params)
        return self.wait(job, max_attempts=max_attempts, interval=interval, cancel_event=cancel_event)
