"""
Pytest fixtures for the Polymer SDK tests.
"""
import logging
import time

import pytest

from polymer_sdk import ClientConfig, ProofClient
from polymer_sdk._rate_limited_log import reset_rate_limited_log
from tests.test_helpers import APPROVAL_TOPIC, TEST_API_KEY, TEST_API_URL, TRANSFER_TOPIC


# Make time.sleep instantaneous and record the requested delays
@pytest.fixture(autouse=True)
def sleeps(monkeypatch):
    calls = []
    monkeypatch.setattr(time, "sleep", lambda seconds: calls.append(seconds))
    return calls


@pytest.fixture(autouse=True)
def _reset_rate_limited_log():
    reset_rate_limited_log()
    yield
    reset_rate_limited_log()


@pytest.fixture
def config():
    return ClientConfig(api_key=TEST_API_KEY, api_url=TEST_API_URL, max_attempts=3, interval=0.01)


@pytest.fixture
def client(config):
    with ProofClient(config) as proof_client:
        yield proof_client


@pytest.fixture
def receipt():
    """A web3-style receipt with two logs: Transfer then Approval."""
    return {
        "blockNumber": 123456,
        "transactionIndex": 7,
        "transactionHash": "0x" + "ab" * 32,
        "logs": [
            {"topics": [bytes.fromhex(TRANSFER_TOPIC[2:]), b"\x00" * 32]},
            {"topics": [APPROVAL_TOPIC]},
        ],
    }



@pytest.fixture
def package_logger():
    """The polymer_sdk logger, restored to its original state afterwards."""
    package = logging.getLogger("polymer_sdk")
    saved_level, saved_handlers = package.level, list(package.handlers)
    yield package
    package.setLevel(saved_level)
    package.handlers[:] = saved_handlers
