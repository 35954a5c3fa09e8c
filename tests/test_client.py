"""
Tests for the blocking ProofClient.
"""
import logging
import threading
from unittest.mock import MagicMock, patch

import pytest
import requests

from polymer_sdk import (
    ClientConfig, InvalidArgumentError, JobState, ProofCancelledError, ProofClient,
    ProofFailedError, ProofJob, ProofKind, ProofRequestParams, ProofTimeoutError,
    RemoteError, TransportError
)
from tests.test_helpers import TEST_API_KEY, TEST_API_URL

LOG_PARAMS = ProofRequestParams(source_chain_id=11155420, block_number=25000000, transaction_index=3, log_index=1)
RECEIPT_PARAMS = ProofRequestParams(source_chain_id=11155420, block_number=25000000, transaction_index=3, target_chain_id=84532)


def rpc_result(result):
    return {"json": {"jsonrpc": "2.0", "id": 1, "result": result}}


class TestSubmitProofRequest:
    def test_log_request_envelope_and_headers(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result("12345"))

        job = client.submit_proof_request(LOG_PARAMS)

        assert job == ProofJob("12345", ProofKind.LOG)
        request = requests_mock.last_request
        assert request.json() == {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "log_requestProof",
            "params": [11155420, 25000000, 3, 1],
        }
        assert request.headers["Authorization"] == f"Bearer {TEST_API_KEY}"
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Accept"] == "application/json"

    def test_receipt_request_with_target(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result("job-1"))

        job = client.submit_proof_request(RECEIPT_PARAMS)

        assert job.kind is ProofKind.RECEIPT
        body = requests_mock.last_request.json()
        assert body["method"] == "receipt_requestProof"
        assert body["params"] == [11155420, 84532, 25000000, 3]

    def test_numeric_job_id_becomes_string(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result(987))
        assert client.submit_proof_request(LOG_PARAMS).job_id == "987"

    def test_http_error(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, status_code=503, text="unavailable")
        with pytest.raises(TransportError, match="status: 503") as excinfo:
            client.submit_proof_request(LOG_PARAMS)
        assert excinfo.value.status_code == 503

    def test_unauthorized(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, status_code=401, json={"message": "bad key"})
        with pytest.raises(TransportError) as excinfo:
            client.submit_proof_request(LOG_PARAMS)
        assert excinfo.value.status_code == 401

    def test_remote_error_is_serialized(self, client, requests_mock):
        error = {"code": -32602, "message": "invalid block"}
        requests_mock.post(TEST_API_URL, json={"jsonrpc": "2.0", "id": 1, "error": error})

        with pytest.raises(RemoteError, match='"invalid block"') as excinfo:
            client.submit_proof_request(LOG_PARAMS)
        assert excinfo.value.error == error

    def test_non_json_body(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, text="<html>gateway</html>")
        with pytest.raises(TransportError, match="Invalid JSON"):
            client.submit_proof_request(LOG_PARAMS)

    def test_body_is_not_an_envelope(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, json=["not", "an", "object"])
        with pytest.raises(TransportError, match="Malformed"):
            client.submit_proof_request(LOG_PARAMS)

    def test_missing_job_id(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result(None))
        with pytest.raises(TransportError, match="empty job id"):
            client.submit_proof_request(LOG_PARAMS)

    def test_connection_error(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, exc=requests.ConnectionError("down"))
        with pytest.raises(TransportError, match="down") as excinfo:
            client.submit_proof_request(LOG_PARAMS)
        assert isinstance(excinfo.value.__cause__, requests.ConnectionError)

    def test_timeout_is_passed_to_requests(self, config, requests_mock):
        session = requests.Session()
        calls = []
        original_post = session.post

        def recording_post(*args, **kwargs):
            calls.append(kwargs)
            return original_post(*args, **kwargs)

        session.post = recording_post
        requests_mock.post(TEST_API_URL, **rpc_result("1"))

        ProofClient(config.replace(timeout=12.5), session=session).submit_proof_request(LOG_PARAMS)

        assert calls[0]["timeout"] == 12.5

    def test_total_deadline_covers_body_read(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result("1"))
        clock = MagicMock()
        clock.monotonic.side_effect = [0.0, client.config.timeout + 1]

        with patch("polymer_sdk.client.time", clock):
            with pytest.raises(TransportError, match="timed out after 60.0s"):
                client.submit_proof_request(LOG_PARAMS)

    def test_body_within_deadline(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result("1"))
        clock = MagicMock()
        clock.monotonic.side_effect = [0.0, client.config.timeout - 1]

        with patch("polymer_sdk.client.time", clock):
            assert client.submit_proof_request(LOG_PARAMS).job_id == "1"

    def test_request_timeout(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, exc=requests.Timeout("read timed out"))
        with pytest.raises(TransportError, match="read timed out"):
            client.submit_proof_request(LOG_PARAMS)


class TestQueryJobStatus:
    def test_pending(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result({"status": "pending"}))

        status = client.query_job_status(ProofJob("7", ProofKind.LOG))

        assert status.state is JobState.PENDING
        assert requests_mock.last_request.json()["method"] == "log_queryProof"
        assert requests_mock.last_request.json()["params"] == ["7"]

    def test_receipt_job_uses_receipt_query(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result({"status": "complete", "proof": "0x01"}))

        status = client.query_job_status("7", kind=ProofKind.RECEIPT)

        assert status.is_complete
        assert requests_mock.last_request.json()["method"] == "receipt_queryProof"

    def test_failed_with_reason(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result({"status": "error", "failureReason": "reorged"}))
        status = client.query_job_status("7")
        assert status.state is JobState.FAILED
        assert status.reason == "reorged"

    @pytest.mark.parametrize("job_id", ["", None])
    def test_empty_job_id_fails_before_network(self, client, requests_mock, job_id):
        with pytest.raises(InvalidArgumentError, match="Job ID is required"):
            client.query_job_status(job_id)
        assert not requests_mock.called

    def test_empty_job_handle_fails_before_network(self, client, requests_mock):
        with pytest.raises(InvalidArgumentError, match="Job ID is required"):
            client.query_job_status(ProofJob("", ProofKind.LOG))
        assert not requests_mock.called

    def test_malformed_status(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, **rpc_result("complete"))
        with pytest.raises(TransportError, match="Malformed proof status"):
            client.query_job_status("7")


class TestWait:
    def test_pending_pending_complete(self, client, requests_mock, sleeps):
        route = requests_mock.post(TEST_API_URL, [
            rpc_result({"status": "pending"}),
            rpc_result({"status": "pending"}),
            rpc_result({"status": "complete", "proof": "0xproof3"}),
        ])

        status = client.wait(ProofJob("1"))

        assert status.proof == "0xproof3"
        assert route.call_count == 3
        assert sleeps == [0.01, 0.01]

    def test_timeout_after_max_attempts(self, client, requests_mock, sleeps):
        route = requests_mock.post(TEST_API_URL, **rpc_result({"status": "pending"}))

        with pytest.raises(ProofTimeoutError, match="after 3 attempts") as excinfo:
            client.wait("1")

        assert excinfo.value.attempts == 3
        assert excinfo.value.job_id == "1"
        assert route.call_count == 3
        assert len(sleeps) == 2

    def test_failure_stops_polling(self, client, requests_mock):
        route = requests_mock.post(TEST_API_URL, [
            rpc_result({"status": "pending"}),
            rpc_result({"status": "error", "failureReason": "invalid log index"}),
            rpc_result({"status": "complete", "proof": "0x"}),
        ])

        with pytest.raises(ProofFailedError, match="invalid log index") as excinfo:
            client.wait("1")

        assert excinfo.value.reason == "invalid log index"
        assert route.call_count == 2

    def test_overrides(self, client, requests_mock, sleeps):
        route = requests_mock.post(TEST_API_URL, **rpc_result({"status": "pending"}))

        with pytest.raises(ProofTimeoutError):
            client.wait("1", max_attempts=5, interval=2)

        assert route.call_count == 5
        assert sleeps == [2, 2, 2, 2]

    def test_structured_failure_reason_fails_fast(self, client, requests_mock, sleeps):
        route = requests_mock.post(TEST_API_URL, **rpc_result({"status": "error", "failureReason": {"code": 7}}))

        with pytest.raises(ProofFailedError, match='"code": 7'):
            client.wait("1")

        assert route.call_count == 1
        assert sleeps == []

    def test_transport_errors_consume_attempts(self, client, requests_mock):
        route = requests_mock.post(TEST_API_URL, [
            {"status_code": 502},
            {"exc": requests.ConnectionError("blip")},
            rpc_result({"status": "complete", "proof": "0xabc"}),
        ])

        assert client.wait("1").proof == "0xabc"
        assert route.call_count == 3

    def test_persistent_transport_error_times_out(self, client, requests_mock):
        requests_mock.post(TEST_API_URL, status_code=500)

        with pytest.raises(ProofTimeoutError) as excinfo:
            client.wait("1")

        assert excinfo.value.attempts == 3
        assert isinstance(excinfo.value.__cause__, TransportError)

    def test_remote_error_is_not_retried(self, client, requests_mock):
        route = requests_mock.post(TEST_API_URL, json={"error": {"message": "unknown job"}})

        with pytest.raises(RemoteError):
            client.wait("1")

        assert route.call_count == 1

    def test_cancel_event_set_before_polling(self, client, requests_mock):
        route = requests_mock.post(TEST_API_URL, **rpc_result({"status": "pending"}))
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ProofCancelledError) as excinfo:
            client.wait("1", cancel_event=cancel)

        assert excinfo.value.attempts == 0
        assert route.call_count == 0

    def test_cancel_event_during_sleep(self, client, requests_mock):
        cancel = threading.Event()

        def respond(request, context):
            cancel.set()
            return {"jsonrpc": "2.0", "id": 1, "result": {"status": "pending"}}

        route = requests_mock.post(TEST_API_URL, json=respond)

        with pytest.raises(ProofCancelledError) as excinfo:
            client.wait("1", cancel_event=cancel)

        assert excinfo.value.attempts == 1
        assert route.call_count == 1


def test_get_proof_submits_then_polls(client, requests_mock):
    route = requests_mock.post(TEST_API_URL, [
        rpc_result("55"),
        rpc_result({"status": "complete", "proof": "0xfeed"}),
    ])

    status = client.get_proof(LOG_PARAMS)

    assert status.proof == "0xfeed"
    methods = [r.json()["method"] for r in route.request_history]
    assert methods == ["log_requestProof", "log_queryProof"]
    assert route.request_history[1].json()["params"] == ["55"]


def test_debug_logging_does_not_leak_api_key(requests_mock, caplog, package_logger):
    caplog.set_level(logging.DEBUG, logger="polymer_sdk")
    requests_mock.post(TEST_API_URL, **rpc_result("1"))
    config = ClientConfig(api_key="very-secret-key", api_url=TEST_API_URL, debug=True)

    ProofClient(config).submit_proof_request(LOG_PARAMS)

    assert any("Proof job created with ID: 1" in m for m in caplog.messages)
    assert not any("very-secret-key" in m for m in caplog.messages)


def test_owned_session_is_closed():
    client = ProofClient(ClientConfig(api_key="k"))
    closed = []
    client.session.close = lambda: closed.append(True)
    with client:
        pass
    assert closed == [True]


def test_injected_session_is_left_open(config):
    session = requests.Session()
    closed = []
    session.close = lambda: closed.append(True)
    ProofClient(config, session=session).close()
    assert closed == []
