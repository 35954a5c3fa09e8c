"""
Shared helpers for the Polymer SDK tests.
"""
from .fake_aiohttp import FakeResponse, FakeSession

TEST_API_KEY = "test-api-key"
TEST_API_URL = "https://proof.example.com"

TRANSFER_SIGNATURE = "Transfer(address,address,uint256)"
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
APPROVAL_SIGNATURE = "Approval(address,address,uint256)"
APPROVAL_TOPIC = "0x8c5be1e5ebec7d5bd14f71427d1e84f3dd0314c0f7b2291e5b200ac8c7c3b925"

__all__ = [
    "FakeResponse", "FakeSession", "TEST_API_KEY", "TEST_API_URL",
    "TRANSFER_SIGNATURE", "TRANSFER_TOPIC", "APPROVAL_SIGNATURE", "APPROVAL_TOPIC",
]
