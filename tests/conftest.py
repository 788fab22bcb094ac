"""
Test Configuration Module
"""

import random

import pytest

from claude_adapter.config import Settings
from tests.fixtures import RecordingHooksStub


@pytest.fixture
def rng() -> random.Random:
    """Deterministic random source"""
    return random.Random(20240601)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file"""
    return Settings(_env_file=None)


@pytest.fixture
def hooks() -> RecordingHooksStub:
    return RecordingHooksStub()
