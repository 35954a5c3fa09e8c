"""
Client configuration for the Polymer SDK.
"""
import dataclasses
import logging
import urllib.parse
from dataclasses import dataclass
from typing import Any

from .exceptions import InvalidArgumentError

DEFAULT_API_URL = "https://proof.testnet.polymer.zone"
DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_INTERVAL = 3.0
DEFAULT_TIMEOUT = 60.0
LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable configuration shared by every request issued through a client.

    Durations are in seconds.

    Args:
        api_key: Polymer API key, sent as a bearer token
        api_url: Proof service endpoint
        max_attempts: Maximum number of status queries per poll
        interval: Delay between status queries
        timeout: Total deadline for a single HTTP call
        debug: Turn on debug logging for the SDK

    Raises:
        InvalidArgumentError: If api_key is empty, a number is out of range,
            or api_url is not an http(s) URL with a host

    A plain http api_url to a non-local host is accepted with a warning.
    """
    api_key: str
    api_url: str = DEFAULT_API_URL
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    interval: float = DEFAULT_INTERVAL
    timeout: float = DEFAULT_TIMEOUT
    debug: bool = False

    def __post_init__(self):
        if not self.api_key:
            raise InvalidArgumentError("Polymer API key is required")

        parsed = urllib.parse.urlparse(self.api_url)
        if parsed.scheme not in ('http', 'https') or not parsed.hostname:
            raise InvalidArgumentError(f"api_url must be an http(s) URL with a host, got {self.api_url!r}")
        if parsed.scheme != 'https' and parsed.hostname not in LOCAL_HOSTS:
            logger.warning("api_url %s is not https; the API key is sent in cleartext", self.api_url)

        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise InvalidArgumentError(f"max_attempts must be a positive integer, got {self.max_attempts!r}")
        for name in ("interval", "timeout"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise InvalidArgumentError(f"{name} must be a positive number, got {value!r}")

    def replace(self, **overrides: Any) -> "ClientConfig":
        """Return a new validated config with the given fields changed."""
        return dataclasses.replace(self, **overrides)

    def __repr__(self) -> str:
        return (
            f"ClientConfig(api_url={self.api_url!r}, api_key='***', "
            f"max_attempts={self.max_attempts}, interval={self.interval}, "
            f"timeout={self.timeout}, debug={self.debug})"
        )
