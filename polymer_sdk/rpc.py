"""
JSON-RPC envelope helpers shared by the sync and async clients.
"""
import json
from typing import Any, Dict, List

from pydantic import ValidationError

from .exceptions import RemoteError, TransportError
from .models import JobStatus

JSONRPC_VERSION = "2.0"


def build_request(method: str, params: List[Any]) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": 1,
        "method": method,
        "params": params,
    }


def build_headers(api_key: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "Accept": "application/json",
    }


def unwrap_response(data: Any) -> Any:
    """
    Extract the `result` of a decoded JSON-RPC response.

    Args:
        data: Decoded response body

    Returns:
        The `result` value

    Raises:
        RemoteError: If the envelope carries an `error`
        TransportError: If the body is not a JSON-RPC envelope
    """
    if not isinstance(data, dict):
        raise TransportError(f"Malformed JSON-RPC response: expected an object, got {type(data).__name__}")

    if data.get("error") is not None:
        error = data["error"]
        raise RemoteError(f"Polymer API error: {json.dumps(error)}", error=error)

    if "result" not in data:
        raise TransportError("Malformed JSON-RPC response: missing 'result'")

    return data["result"]


def parse_job_id(result: Any) -> str:
    if result is None or result == "":
        raise TransportError("Proof service returned an empty job id")
    return str(result)


def parse_job_status(result: Any) -> JobStatus:
    if not isinstance(result, dict):
        raise TransportError(f"Malformed proof status: expected an object, got {type(result).__name__}")
    try:
        return JobStatus.model_validate(result)
    except ValidationError as e:
        raise TransportError(f"Malformed proof status: {e}") from e
