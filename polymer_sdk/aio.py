"""
AsyncProofClient - asyncio client for the Polymer proof service.

Mirrors :class:`polymer_sdk.client.ProofClient` on top of aiohttp. Requests
and the inter-attempt sleep are the only suspension points, so any number of
jobs can be polled concurrently from one client.
"""
import asyncio
import logging
from typing import Any, List, Optional, Union

import aiohttp

from . import rpc
from .config import ClientConfig
from .exceptions import TransportError
from .log import enable_debug_logging
from .models import JobStatus, ProofJob, ProofKind, ProofRequestParams
from .polling import apoll_until_complete


class AsyncProofClient:
    """
    Asyncio client for the Polymer proof service.

    Use as an async context manager, or call :meth:`close` when done::

        async with AsyncProofClient(ClientConfig(api_key=key)) as client:
            job = await client.submit_proof_request(params)
            status = await client.wait(job)
    """

    def __init__(
        self,
        config: ClientConfig,
        session: Optional[aiohttp.ClientSession] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        if config.debug:
            enable_debug_logging()

        self._session = session
        self._owns_session = session is None
        self._timeout = aiohttp.ClientTimeout(total=config.timeout)

        self.logger.debug("Initialized async Polymer proof client: %r", config)

    async def __aenter__(self) -> "AsyncProofClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Lazily create the session on first use."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()

    async def _call(self, method: str, params: List[Any]) -> Any:
        payload = rpc.build_request(method, params)
        session = await self._get_session()
        try:
            async with session.post(
                self.config.api_url,
                json=payload,
                headers=rpc.build_headers(self.config.api_key),
                timeout=self._timeout
            ) as response:
                if not 200 <= response.status < 300:
                    raise TransportError(f"HTTP error! status: {response.status}", status_code=response.status)
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise TransportError(
                        f"Invalid JSON response from proof service: {e}", status_code=response.status
                    ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to proof service failed: {e}") from e
        except asyncio.TimeoutError as e:
            raise TransportError(f"Request to proof service timed out after {self.config.timeout}s") from e

        return rpc.unwrap_response(data)

    async def submit_proof_request(self, params: ProofRequestParams) -> ProofJob:
        """Ask the proof service to start generating a proof. See ProofClient.submit_proof_request."""
        kind = params.kind
        rpc_params = params.to_rpc_params()
        self.logger.debug("Requesting proof via %s with params: %s", kind.request_method, rpc_params)

        try:
            job_id = rpc.parse_job_id(await self._call(kind.request_method, rpc_params))
        except Exception as e:
            self.logger.error("Error requesting proof: %s", e)
            raise

        self.logger.debug("Proof job created with ID: %s", job_id)
        return ProofJob(job_id, kind)

    async def query_job_status(self, job: Union[ProofJob, str], kind: Optional[ProofKind] = None) -> JobStatus:
        """Query the current status of a proof job. See ProofClient.query_job_status."""
        ref = ProofJob.coerce(job, kind)
        self.logger.debug("Querying proof status for job: %s", ref.job_id)

        try:
            return rpc.parse_job_status(await self._call(ref.kind.query_method, [ref.job_id]))
        except Exception as e:
            self.logger.debug("Error querying proof status: %s", e)
            raise

    async def wait(
        self,
        job: Union[ProofJob, str],
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
        kind: Optional[ProofKind] = None
    ) -> JobStatus:
        """Poll a job until the proof is complete. See ProofClient.wait."""
        ref = ProofJob.coerce(job, kind)
        return await apoll_until_complete(
            lambda: self.query_job_status(ref),
            max_attempts=self.config.max_attempts if max_attempts is None else max_attempts,
            interval=self.config.interval if interval is None else interval,
            job_id=ref.job_id,
            cancel_event=cancel_event,
            logger_instance=self.logger,
        )

    async def get_proof(
        self,
        params: ProofRequestParams,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> JobStatus:
        """Submit a proof request and wait for the result."""
        job = await self.submit_proof_request(params)
        return await self.wait(job, max_attempts=max_attempts, interval=interval, cancel_event=cancel_event)
