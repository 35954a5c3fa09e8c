"""
Proof-capable wrappers around transaction receipts.

Instead of patching web3's receipt type, wrap a receipt explicitly::

    receipt = w3.eth.get_transaction_receipt(tx_hash)
    status = with_proof(receipt, client, w3).request_proof(
        event_signature="Transfer(address,address,uint256)"
    )
    proof = status.proof
"""
import asyncio
import threading
from typing import Any, Optional, Union

from web3 import Web3

from .aio import AsyncProofClient
from .client import ProofClient
from .models import JobStatus, ProofJob
from .receipt import aresolve_chain_id, build_request_params, resolve_chain_id


class ProofReceipt:
    """
    A receipt bound to a ProofClient.

    Args:
        receipt: Transaction receipt (web3 AttributeDict, mapping or object)
        client: Client used to talk to the proof service
        w3: Web3 connection used to look up the chain id when the receipt has none
    """

    def __init__(self, receipt: Any, client: ProofClient, w3: Optional[Web3] = None):
        self.receipt = receipt
        self.client = client
        self.w3 = w3

    def chain_id(self) -> int:
        return resolve_chain_id(self.receipt, self.w3)

    def _submit_and_wait(
        self,
        params,
        max_attempts: Optional[int],
        interval: Optional[float],
        return_job: bool,
        cancel_event: Optional[threading.Event]
    ) -> Union[JobStatus, ProofJob]:
        job = self.client.submit_proof_request(params)
        job = ProofJob(job.job_id, job.kind, self.receipt)
        if return_job:
            return job
        return self.client.wait(job, max_attempts=max_attempts, interval=interval, cancel_event=cancel_event)

    def request_proof(
        self,
        event_signature: Optional[str] = None,
        log_index: Optional[int] = None,
        target_chain_id: Optional[int] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        return_job: bool = False,
        cancel_event: Optional[threading.Event] = None
    ) -> Union[JobStatus, ProofJob]:
        """
        Request a log-level proof for an event in this receipt.

        Args:
            event_signature: Event to locate, e.g. ``Transfer(address,address,uint256)``
            log_index: Position of the log in the receipt (takes precedence over event_signature)
            target_chain_id: Destination chain, must differ from the source chain
            max_attempts: Override for the client's max_attempts
            interval: Override for the client's polling interval, in seconds
            return_job: Return the ProofJob right after submission instead of polling
            cancel_event: Event that aborts polling when set

        Returns:
            The complete JobStatus, or the ProofJob if return_job is set
        """
        params = build_request_params(
            self.receipt,
            self.chain_id(),
            event_signature=event_signature,
            log_index=log_index,
            target_chain_id=target_chain_id,
        )
        return self._submit_and_wait(params, max_attempts, interval, return_job, cancel_event)

    def request_receipt_proof(
        self,
        target_chain_id: Optional[int] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        return_job: bool = False,
        cancel_event: Optional[threading.Event] = None
    ) -> Union[JobStatus, ProofJob]:
        """Request a receipt-level proof (no log resolution)."""
        params = build_request_params(
            self.receipt,
            self.chain_id(),
            target_chain_id=target_chain_id,
            require_log=False,
        )
        return self._submit_and_wait(params, max_attempts, interval, return_job, cancel_event)

    def check_status(self, job: Union[ProofJob, str]) -> JobStatus:
        return self.client.query_job_status(job)


class AsyncProofReceipt:
    """A receipt bound to an AsyncProofClient. ``w3`` is an ``AsyncWeb3`` connection."""

    def __init__(self, receipt: Any, client: AsyncProofClient, w3: Any = None):
        self.receipt = receipt
        self.client = client
        self.w3 = w3

    async def chain_id(self) -> int:
        return await aresolve_chain_id(self.receipt, self.w3)

    async def _submit_and_wait(
        self,
        params,
        max_attempts: Optional[int],
        interval: Optional[float],
        return_job: bool,
        cancel_event: Optional[asyncio.Event]
    ) -> Union[JobStatus, ProofJob]:
        job = await self.client.submit_proof_request(params)
        job = ProofJob(job.job_id, job.kind, self.receipt)
        if return_job:
            return job
        return await self.client.wait(job, max_attempts=max_attempts, interval=interval, cancel_event=cancel_event)

    async def request_proof(
        self,
        event_signature: Optional[str] = None,
        log_index: Optional[int] = None,
        target_chain_id: Optional[int] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        return_job: bool = False,
        cancel_event: Optional[asyncio.Event] = None
    ) -> Union[JobStatus, ProofJob]:
        """Request a log-level proof. See ProofReceipt.request_proof."""
        params = build_request_params(
            self.receipt,
            await self.chain_id(),
            event_signature=event_signature,
            log_index=log_index,
            target_chain_id=target_chain_id,
        )
        return await self._submit_and_wait(params, max_attempts, interval, return_job, cancel_event)

    async def request_receipt_proof(
        self,
        target_chain_id: Optional[int] = None,
        max_attempts: Optional[int] = None,
        interval: Optional[float] = None,
        return_job: bool = False,
        cancel_event: Optional[asyncio.Event] = None
    ) -> Union[JobStatus, ProofJob]:
        params = build_request_params(
            self.receipt,
            await self.chain_id(),
            target_chain_id=target_chain_id,
            require_log=False,
        )
        return await self._submit_and_wait(params, max_attempts, interval, return_job, cancel_event)

    async def check_status(self, job: Union[ProofJob, str]) -> JobStatus:
        return await self.client.query_job_status(job)


def with_proof(receipt: Any, client: ProofClient, w3: Optional[Web3] = None) -> ProofReceipt:
    return ProofReceipt(receipt, client, w3)


def with_async_proof(receipt: Any, client: AsyncProofClient, w3: Any = None) -> AsyncProofReceipt:
    return AsyncProofReceipt(receipt, client, w3)
