"""Pytest configuration and fixtures."""

import os

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"

from coins_oracle.resolver import CoinResolver


@pytest.fixture
def resolver() -> CoinResolver:
    """Empty resolver."""
    return CoinResolver()
