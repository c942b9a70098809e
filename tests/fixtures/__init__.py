"""Test fixtures for exchange fixture tests.

This package provides:
- An in-memory ExchangeClient double with token and fill state
"""

from .fake_client import FAKE_SIGNATURE, FakeChain, FakeExchangeClient, MethodCall

__all__ = [
    "FAKE_SIGNATURE",
    "FakeChain",
    "FakeExchangeClient",
    "MethodCall",
]
