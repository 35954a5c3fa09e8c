"""
Poll-until-complete loops for proof jobs.

Both loops query at a fixed interval (no backoff) until the job reaches a
terminal state or ``max_attempts`` queries have been made. A ``failed`` status
aborts immediately. A TransportError consumes the attempt and polling goes on;
a RemoteError is surfaced as is.
"""
import asyncio
import logging
import threading
import time
from typing import Awaitable, Callable, Optional

from ._rate_limited_log import rate_limited_log
from .exceptions import (
    InvalidArgumentError, ProofCancelledError, ProofFailedError,
    ProofTimeoutError, TransportError
)
from .models import JobStatus

logger = logging.getLogger(__name__)


def _check_budget(max_attempts: int, interval: float) -> None:
    if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
        raise InvalidArgumentError(f"max_attempts must be a positive integer, got {max_attempts!r}")
    if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
        raise InvalidArgumentError(f"interval must be a positive number, got {interval!r}")


def _check_status(status: JobStatus, job_id: Optional[str], log: logging.Logger) -> bool:
    """Return True when the job is complete, raise when it failed."""
    if status.is_complete:
        log.debug("Proof generation complete for job %s", job_id)
        return True
    if status.is_failed:
        log.error("Proof generation failed for job %s: %s", job_id, status.reason)
        raise ProofFailedError(status.reason, job_id=job_id)
    return False


def _report_transport_error(error: TransportError, job_id: Optional[str], log: logging.Logger) -> None:
    rate_limited_log(
        f"Transient error while polling proof job {job_id}: {error}",
        level="warning",
        logger_instance=log,
    )


def poll_until_complete(
    query: Callable[[], JobStatus],
    max_attempts: int,
    interval: float,
    job_id: Optional[str] = None,
    cancel_event: Optional[threading.Event] = None,
    logger_instance: Optional[logging.Logger] = None
) -> JobStatus:
    """
    Call ``query`` until it reports a complete job.

    Args:
        query: Zero-argument callable returning the current JobStatus
        max_attempts: Maximum number of queries
        interval: Seconds to sleep between queries
        job_id: Job id used in errors and log lines
        cancel_event: Setting this event aborts the next sleep or query
        logger_instance: Logger for diagnostic output (defaults to module logger)

    Returns:
        The complete JobStatus

    Raises:
        ProofFailedError: If the service reports the job failed
        ProofTimeoutError: If no terminal status is seen within max_attempts
        ProofCancelledError: If cancel_event is set
        RemoteError: If the service answers a query with a JSON-RPC error
    """
    _check_budget(max_attempts, interval)
    log = logger_instance or logger
    log.debug(
        "Polling for proof completion (max %d attempts, interval %ss)", max_attempts, interval
    )

    started = time.monotonic()
    last_error: Optional[TransportError] = None
    for attempt in range(1, max_attempts + 1):
        if cancel_event is not None and cancel_event.is_set():
            raise ProofCancelledError(attempt - 1, job_id=job_id)

        log.debug("Polling attempt %d/%d", attempt, max_attempts)
        try:
            status = query()
        except TransportError as e:
            last_error = e
            _report_transport_error(e, job_id, log)
        else:
            last_error = None
            if _check_status(status, job_id, log):
                return status

        if attempt < max_attempts:
            log.debug("Waiting %ss before next attempt...", interval)
            if cancel_event is None:
                time.sleep(interval)
            elif cancel_event.wait(interval):
                raise ProofCancelledError(attempt, job_id=job_id)

    raise ProofTimeoutError(max_attempts, time.monotonic() - started, job_id=job_id) from last_error


async def apoll_until_complete(
    query: Callable[[], Awaitable[JobStatus]],
    max_attempts: int,
    interval: float,
    job_id: Optional[str] = None,
    cancel_event: Optional[asyncio.Event] = None,
    logger_instance: Optional[logging.Logger] = None
) -> JobStatus:
    """
    Await ``query`` until it reports a complete job.

    Same contract as :func:`poll_until_complete`; ``cancel_event`` is an
    ``asyncio.Event``. Cancelling the surrounding task also stops the loop.
    """
    _check_budget(max_attempts, interval)
    log = logger_instance or logger
    log.debug(
        "Polling for proof completion (max %d attempts, interval %ss)", max_attempts, interval
    )

    started = time.monotonic()
    last_error: Optional[TransportError] = None
    for attempt in range(1, max_attempts + 1):
        if cancel_event is not None and cancel_event.is_set():
            raise ProofCancelledError(attempt - 1, job_id=job_id)

        log.debug("Polling attempt %d/%d", attempt, max_attempts)
        try:
            status = await query()
        except TransportError as e:
            last_error = e
            _report_transport_error(e, job_id, log)
        else:
            last_error = None
            if _check_status(status, job_id, log):
                return status

        if attempt < max_attempts:
            log.debug("Waiting %ss before next attempt...", interval)
            if cancel_event is None:
                await asyncio.sleep(interval)
            else:
                try:
                    await asyncio.wait_for(cancel_event.wait(), timeout=interval)
                except asyncio.TimeoutError:
                    pass
                else:
                    raise ProofCancelledError(attempt, job_id=job_id)

    raise ProofTimeoutError(max_attempts, time.monotonic() - started, job_id=job_id) from last_error
