"""
Derive proof request parameters from a transaction receipt.

Receipts may be web3 ``AttributeDict`` objects, plain mappings or any object
exposing the same fields as attributes. Both web3 (``transactionIndex``) and
ethers-style (``index``) field names are recognised.
"""
import logging
from collections.abc import Mapping
from typing import Any, Optional, Sequence

from web3 import Web3

from .exceptions import ChainIdUnavailableError, EventNotFoundError, InvalidArgumentError
from .models import ProofRequestParams

logger = logging.getLogger(__name__)

_MISSING = object()

BLOCK_NUMBER_FIELDS = ("blockNumber", "block_number")
TRANSACTION_INDEX_FIELDS = ("transactionIndex", "transaction_index", "index")
CHAIN_ID_FIELDS = ("chainId", "chain_id")


def get_field(receipt: Any, *names: str, default: Any = _MISSING) -> Any:
    """Return the first of ``names`` present on the receipt, by key or attribute."""
    for name in names:
        if isinstance(receipt, Mapping):
            if name in receipt and receipt[name] is not None:
                return receipt[name]
        else:
            value = getattr(receipt, name, None)
            if value is not None:
                return value
    if default is _MISSING:
        raise InvalidArgumentError(f"Receipt has no {' / '.join(names)} field")
    return default


def _to_int(value: Any, name: str) -> int:
    """Accept ints and hex strings, as JSON-RPC receipts carry both."""
    if isinstance(value, bool):
        raise InvalidArgumentError(f"{name} must be an integer, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError:
            pass
    raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")


def _normalize_topic(topic: Any) -> str:
    if isinstance(topic, (bytes, bytearray)):
        return Web3.to_hex(bytes(topic)).lower()
    text = str(topic).lower()
    return text if text.startswith("0x") else "0x" + text


def event_topic(event_signature: str) -> str:
    """
    Topic hash of an event signature, e.g. ``Transfer(address,address,uint256)``.

    Returns:
        Lowercase 0x-prefixed keccak256 of the signature text
    """
    if not event_signature:
        raise InvalidArgumentError("event_signature must be a non-empty string")
    return Web3.to_hex(Web3.keccak(text=event_signature)).lower()


def find_log_index(logs: Sequence[Any], event_signature: str) -> int:
    """
    Position of the first log whose first topic matches the event signature.

    Raises:
        EventNotFoundError: If no log matches
    """
    topic = event_topic(event_signature)
    for position, log in enumerate(logs or []):
        topics = get_field(log, "topics", default=None)
        if topics and _normalize_topic(topics[0]) == topic:
            return position
    raise EventNotFoundError(event_signature)


def chain_id_from_receipt(receipt: Any) -> Optional[int]:
    value = get_field(receipt, *CHAIN_ID_FIELDS, default=None)
    if value is None:
        return None
    return _to_int(value, "chain_id")


def resolve_chain_id(receipt: Any, w3: Optional[Web3] = None) -> int:
    """
    Source chain id of a receipt.

    Uses the receipt's own chain id if present, else asks the node behind ``w3``.

    Raises:
        ChainIdUnavailableError: If neither source yields a chain id
    """
    chain_id = chain_id_from_receipt(receipt)
    if chain_id is not None:
        return chain_id
    if w3 is None:
        raise ChainIdUnavailableError("Receipt has no chain id and no web3 connection was given")

    try:
        chain_id = w3.eth.chain_id
    except Exception as e:
        raise ChainIdUnavailableError(f"Chain ID not found in provider: {e}") from e
    if not chain_id:
        raise ChainIdUnavailableError("Chain ID not found in provider")
    return int(chain_id)


async def aresolve_chain_id(receipt: Any, w3: Any = None) -> int:
    """Same as :func:`resolve_chain_id` for an ``AsyncWeb3`` connection."""
    chain_id = chain_id_from_receipt(receipt)
    if chain_id is not None:
        return chain_id
    if w3 is None:
        raise ChainIdUnavailableError("Receipt has no chain id and no web3 connection was given")

    try:
        chain_id = await w3.eth.chain_id
    except Exception as e:
        raise ChainIdUnavailableError(f"Chain ID not found in provider: {e}") from e
    if not chain_id:
        raise ChainIdUnavailableError("Chain ID not found in provider")
    return int(chain_id)


def build_request_params(
    receipt: Any,
    source_chain_id: int,
    event_signature: Optional[str] = None,
    log_index: Optional[int] = None,
    target_chain_id: Optional[int] = None,
    require_log: bool = True
) -> ProofRequestParams:
    """
    Build ProofRequestParams for a receipt whose chain id is already known.

    An explicit ``log_index`` wins over ``event_signature``. With
    ``require_log=False`` no log is resolved and a receipt-level request is built.

    Raises:
        InvalidArgumentError: If neither log_index nor event_signature is given
            when a log is required, log_index is negative, or the target chain
            equals the source chain
        EventNotFoundError: If event_signature matches no log
    """
    if target_chain_id is not None and target_chain_id == source_chain_id:
        raise InvalidArgumentError("target chain must differ from source chain")

    resolved_log_index = None
    if require_log:
        if log_index is None and not event_signature:
            raise InvalidArgumentError("event_signature or log_index is required")
        if log_index is not None:
            if isinstance(log_index, bool) or not isinstance(log_index, int) or log_index < 0:
                raise InvalidArgumentError("log_index must be non-negative")
            resolved_log_index = log_index
        else:
            resolved_log_index = find_log_index(get_field(receipt, "logs", default=[]), event_signature)

    params = ProofRequestParams(
        source_chain_id=source_chain_id,
        block_number=_to_int(get_field(receipt, *BLOCK_NUMBER_FIELDS), "block_number"),
        transaction_index=_to_int(get_field(receipt, *TRANSACTION_INDEX_FIELDS), "transaction_index"),
        log_index=resolved_log_index,
        target_chain_id=target_chain_id,
    )
    logger.debug(
        "Transaction receipt details: chain=%s block=%s tx_index=%s log_index=%s",
        params.source_chain_id, params.block_number, params.transaction_index, params.log_index
    )
    return params
